"""
Real Payrix HTTP Client.

Used when INTEGRATIONS_MODE is not 'mock'. Responses are returned with their
'response' envelope intact; unwrapping happens in the lead flow via
leadflow.integrations.policy.response_wrappers.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

from leadflow.config import Settings
from leadflow.integrations.clients.real_http import describe_http_error
from leadflow.integrations.contracts.interfaces import PaymentProcessorClient
from leadflow.integrations.policy.response_wrappers import TransportError

logger = logging.getLogger(__name__)


class PayrixClient(PaymentProcessorClient):
    def __init__(self, settings: Settings, client: Optional[httpx.AsyncClient] = None) -> None:
        self.base_url = settings.payrix_base_url
        self.api_key = settings.payrix_api_key
        self.merchant_id = settings.payrix_merchant_id
        self.timeout_seconds = settings.http_timeout_seconds
        self._client = client

    def _headers(self) -> Dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Accept": "application/json",
            "APIKEY": self.api_key,
        }

    async def _call(self, method: str, path: str, payload: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        url = f"{self.base_url}{path}"
        logger.info("Payrix API request: %s %s", method, path)
        kwargs: Dict[str, Any] = {"headers": self._headers()}
        if payload is not None:
            kwargs["json"] = payload
        try:
            if self._client is not None:
                response = await self._client.request(method, url, **kwargs)
            else:
                async with httpx.AsyncClient(timeout=self.timeout_seconds) as client:
                    response = await client.request(method, url, **kwargs)
            response.raise_for_status()
            return response.json() if response.content else {}
        except httpx.HTTPStatusError as e:
            message, body = describe_http_error(e)
            logger.error(f"HTTP error from Payrix API: {e.response.status_code} {message}")
            raise TransportError(message, status_code=e.response.status_code, payload=body) from e
        except httpx.RequestError as e:
            logger.error(f"Request error connecting to Payrix API: {e}")
            raise TransportError(str(e) or "Failed to reach Payrix API") from e
        except ValueError as e:
            raise TransportError(f"Payrix API returned a non-JSON body: {e}") from e

    async def create_customer(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        body = dict(payload)
        if not body.get("merchant"):
            body["merchant"] = self.merchant_id
        return await self._call("POST", "/customers", body)

    async def create_token(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        return await self._call("POST", "/tokens", payload)

    async def get_customer(self, customer_id: str) -> Dict[str, Any]:
        return await self._call("GET", f"/customers/{customer_id}")

    async def get_token(self, token_id: str) -> Dict[str, Any]:
        return await self._call("GET", f"/tokens/{token_id}")
