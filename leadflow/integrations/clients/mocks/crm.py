"""
FieldRoutes CRM: MOCK client.

This is a mock implementation for development and testing. It keeps
customers and payment profiles in memory and returns response bodies shaped
like the real FieldRoutes API. Every call is recorded in ``calls`` so tests
can assert on ordering.
"""

import logging
import uuid
from typing import Any, Dict, List, Optional, Tuple

from leadflow.integrations.contracts.interfaces import CrmClient

logger = logging.getLogger(__name__)


class MockFieldRoutesClient(CrmClient):
    """
    Mock FieldRoutes client.

    Parameters
    ----------
    customer_response : dict, optional
        Fixed body returned by create_customer instead of the default
        ``{"success": True, "result": "<id>"}``.
    profile_success : bool
        Value of the ``success`` flag returned by create_payment_profile.
    profile_error : str
        Error message returned alongside a failed payment profile.
    """

    def __init__(
        self,
        customer_response: Optional[Dict[str, Any]] = None,
        profile_success: bool = True,
        profile_error: str = "Payment profile rejected",
    ):
        self._customer_response = customer_response
        self._profile_success = profile_success
        self._profile_error = profile_error

        # In-memory stores (reset on restart)
        self.customers: Dict[str, Dict[str, Any]] = {}
        self.payment_profiles: Dict[str, Dict[str, Any]] = {}
        self.calls: List[Tuple[str, Dict[str, Any]]] = []

        logger.info("[FIELDROUTES MOCK] Client initialised")

    def _new_id(self) -> str:
        return str(uuid.uuid4().int % 10_000_000)

    async def create_customer(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        self.calls.append(("create_customer", dict(payload)))
        if self._customer_response is not None:
            return self._customer_response

        customer_id = self._new_id()
        self.customers[customer_id] = dict(payload, customerID=customer_id)
        logger.info("[FIELDROUTES MOCK] Created customer %s", customer_id)
        return {"success": True, "result": customer_id}

    async def create_payment_profile(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        self.calls.append(("create_payment_profile", dict(payload)))
        if not self._profile_success:
            return {"success": False, "error": self._profile_error}

        profile_id = self._new_id()
        self.payment_profiles[profile_id] = dict(payload)
        logger.info("[FIELDROUTES MOCK] Created payment profile %s for customer %s",
                    profile_id, payload.get("customerID"))
        return {"success": True, "result": profile_id}

    async def search_customers(self, params: Dict[str, Any]) -> Dict[str, Any]:
        self.calls.append(("search_customers", dict(params)))
        matches = [
            customer_id
            for customer_id, record in self.customers.items()
            if all(str(record.get(k, "")) == str(v) for k, v in params.items())
        ]
        return {"success": True, "customerIDs": matches, "count": len(matches)}

    async def get_customer(self, customer_id: str) -> Dict[str, Any]:
        self.calls.append(("get_customer", {"customerID": customer_id}))
        record = self.customers.get(customer_id)
        if record is None:
            return {"success": False, "errorMessage": f"Customer {customer_id} not found"}
        return {"success": True, "customer": record}

    async def update_customer(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        self.calls.append(("update_customer", dict(payload)))
        customer_id = str(payload.get("customerID", ""))
        if customer_id not in self.customers:
            return {"success": False, "errorMessage": f"Customer {customer_id} not found"}
        self.customers[customer_id].update(payload)
        return {"success": True, "result": customer_id}

    async def update_payment_profile(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        self.calls.append(("update_payment_profile", dict(payload)))
        profile_id = str(payload.get("paymentProfileID", ""))
        if profile_id not in self.payment_profiles:
            return {"success": False, "errorMessage": f"Payment profile {profile_id} not found"}
        self.payment_profiles[profile_id].update(payload)
        return {"success": True, "result": profile_id}
