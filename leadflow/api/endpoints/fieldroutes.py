"""
FieldRoutes passthrough endpoints.

Each handler forwards the caller's body or query verbatim to the CRM with the
configured authentication headers and wraps the reply as
{"success": true, "data": ...}. Failures return {"success": false, "error": ...}
with the upstream status code, or 500 when no response came back.
"""

import logging
from typing import Any, Awaitable, Dict

from fastapi import APIRouter, Body, Depends, Request
from fastapi.responses import JSONResponse

from leadflow.api.dependencies import get_crm_client
from leadflow.integrations.contracts.interfaces import CrmClient
from leadflow.integrations.policy.response_wrappers import TransportError

logger = logging.getLogger(__name__)

router = APIRouter()


async def _forward(call: Awaitable[Dict[str, Any]]):
    try:
        data = await call
    except TransportError as e:
        logger.error("FieldRoutes API error: %s", e.message)
        return JSONResponse(status_code=e.status_code or 500, content={"success": False, "error": e.message})
    return {"success": True, "data": data}


@router.post("/customer/create")
async def create_customer(body: Dict[str, Any] = Body(...), crm: CrmClient = Depends(get_crm_client)):
    return await _forward(crm.create_customer(body))


@router.get("/customer/search")
async def search_customers(request: Request, crm: CrmClient = Depends(get_crm_client)):
    return await _forward(crm.search_customers(dict(request.query_params)))


@router.get("/customer/get/{customer_id}")
async def get_customer(customer_id: str, crm: CrmClient = Depends(get_crm_client)):
    return await _forward(crm.get_customer(customer_id))


@router.post("/customer/update")
async def update_customer(body: Dict[str, Any] = Body(...), crm: CrmClient = Depends(get_crm_client)):
    return await _forward(crm.update_customer(body))


@router.post("/customer/createPaymentProfile")
async def create_payment_profile(body: Dict[str, Any] = Body(...), crm: CrmClient = Depends(get_crm_client)):
    return await _forward(crm.create_payment_profile(body))


@router.post("/customer/updatePaymentProfile")
async def update_payment_profile(body: Dict[str, Any] = Body(...), crm: CrmClient = Depends(get_crm_client)):
    return await _forward(crm.update_payment_profile(body))
