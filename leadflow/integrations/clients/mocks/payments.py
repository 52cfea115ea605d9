"""
Payrix: MOCK client.

Returns enveloped responses ({"response": {"data": [...], "errors": [...]}})
without any network calls. Error lists passed to the constructor are
returned instead of data so callers can exercise the validation path.
"""

import logging
import uuid
from typing import Any, Dict, List, Optional, Tuple

from leadflow.integrations.contracts.interfaces import PaymentProcessorClient

logger = logging.getLogger(__name__)


def _envelope(data: List[Dict[str, Any]], errors: Optional[List[Dict[str, Any]]] = None) -> Dict[str, Any]:
    return {"response": {"data": data, "errors": errors or []}}


class MockPayrixClient(PaymentProcessorClient):
    def __init__(
        self,
        customer_errors: Optional[List[Dict[str, Any]]] = None,
        token_errors: Optional[List[Dict[str, Any]]] = None,
        merchant_id: str = "mock-merchant",
    ):
        self._customer_errors = customer_errors or []
        self._token_errors = token_errors or []
        self._merchant_id = merchant_id

        self.customers: Dict[str, Dict[str, Any]] = {}
        self.tokens: Dict[str, Dict[str, Any]] = {}
        self.calls: List[Tuple[str, Dict[str, Any]]] = []

        logger.info("[PAYRIX MOCK] Client initialised")

    def _new_ref(self, prefix: str) -> str:
        return f"{prefix}_{uuid.uuid4().hex[:24]}"

    async def create_customer(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        self.calls.append(("create_customer", dict(payload)))
        if self._customer_errors:
            return _envelope([], self._customer_errors)

        customer_id = self._new_ref("t1_cus")
        record = dict(payload, id=customer_id)
        record.setdefault("merchant", self._merchant_id)
        self.customers[customer_id] = record
        logger.info("[PAYRIX MOCK] Created customer %s", customer_id)
        return _envelope([record])

    async def create_token(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        self.calls.append(("create_token", dict(payload)))
        if self._token_errors:
            return _envelope([], self._token_errors)

        token_id = self._new_ref("t1_tok")
        token_value = uuid.uuid4().hex
        number = str((payload.get("payment") or {}).get("number", ""))
        record = {
            "id": token_id,
            "token": token_value,
            "customer": payload.get("customer"),
            "expiration": payload.get("expiration"),
            "payment": {"method": (payload.get("payment") or {}).get("method"), "number": number[-4:]},
        }
        self.tokens[token_id] = record
        logger.info("[PAYRIX MOCK] Created token %s for customer %s", token_id, payload.get("customer"))
        return _envelope([record])

    async def get_customer(self, customer_id: str) -> Dict[str, Any]:
        record = self.customers.get(customer_id)
        return _envelope([record] if record else [])

    async def get_token(self, token_id: str) -> Dict[str, Any]:
        record = self.tokens.get(token_id)
        return _envelope([record] if record else [])
