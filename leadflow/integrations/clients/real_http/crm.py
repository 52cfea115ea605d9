"""
Real FieldRoutes CRM HTTP Client.

Used when INTEGRATIONS_MODE is not 'mock'. Every call authenticates with the
authenticationKey / authenticationToken header pair and returns the decoded
JSON body unchanged.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

from leadflow.config import Settings
from leadflow.integrations.clients.real_http import describe_http_error
from leadflow.integrations.contracts.interfaces import CrmClient
from leadflow.integrations.policy.response_wrappers import TransportError

logger = logging.getLogger(__name__)


class FieldRoutesClient(CrmClient):
    def __init__(self, settings: Settings, client: Optional[httpx.AsyncClient] = None) -> None:
        self.base_url = settings.fieldroutes_base_url
        self.auth_key = settings.fieldroutes_auth_key
        self.auth_token = settings.fieldroutes_auth_token
        self.timeout_seconds = settings.http_timeout_seconds
        self._client = client

    def _headers(self) -> Dict[str, str]:
        return {
            "Content-Type": "application/json",
            "authenticationKey": self.auth_key,
            "authenticationToken": self.auth_token,
        }

    async def request(
        self,
        method: str,
        endpoint: str,
        payload: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        url = f"{self.base_url}/api{endpoint}"
        logger.info("FieldRoutes API request: %s %s", method, endpoint)
        try:
            if self._client is not None:
                response = await self._send(self._client, method, url, payload, params)
            else:
                async with httpx.AsyncClient(timeout=self.timeout_seconds) as client:
                    response = await self._send(client, method, url, payload, params)
            response.raise_for_status()
            data = response.json() if response.content else {}
        except httpx.HTTPStatusError as e:
            message, body = describe_http_error(e)
            logger.error(f"HTTP error from FieldRoutes API: {e.response.status_code} {message}")
            raise TransportError(message, status_code=e.response.status_code, payload=body) from e
        except httpx.RequestError as e:
            logger.error(f"Request error connecting to FieldRoutes API: {e}")
            raise TransportError(str(e) or "Failed to reach FieldRoutes API") from e
        except ValueError as e:
            raise TransportError(f"FieldRoutes API returned a non-JSON body: {e}") from e

        logger.debug("FieldRoutes raw response: %s", data)
        return data

    async def _send(self, client, method, url, payload, params) -> httpx.Response:
        kwargs: Dict[str, Any] = {"headers": self._headers()}
        if params:
            kwargs["params"] = params
        if payload is not None and method.upper() in {"POST", "PUT"}:
            kwargs["json"] = payload
        return await client.request(method.upper(), url, **kwargs)

    async def create_customer(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        return await self.request("POST", "/customer/create", payload)

    async def create_payment_profile(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        return await self.request("POST", "/paymentProfile/create", payload)

    async def search_customers(self, params: Dict[str, Any]) -> Dict[str, Any]:
        return await self.request("GET", "/customer/search", params=params)

    async def get_customer(self, customer_id: str) -> Dict[str, Any]:
        return await self.request("GET", "/customer/get", params={"customerID": customer_id})

    async def update_customer(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        return await self.request("POST", "/customer/update", payload)

    async def update_payment_profile(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        return await self.request("POST", "/customer/updatePaymentProfile", payload)
