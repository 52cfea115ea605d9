"""
Payrix passthrough endpoints.

Bodies are forwarded verbatim (the merchant id is filled in when the caller
leaves it out). Upstream failures keep the upstream status code, or 500 when
the call never got a response.
"""

import logging
from typing import Any, Awaitable, Dict

from fastapi import APIRouter, Body, Depends
from fastapi.responses import JSONResponse

from leadflow.api.dependencies import get_payment_client
from leadflow.integrations.contracts.interfaces import PaymentProcessorClient
from leadflow.integrations.policy.response_wrappers import TransportError

logger = logging.getLogger(__name__)

router = APIRouter()


async def _forward(call: Awaitable[Dict[str, Any]], action: str):
    try:
        data = await call
    except TransportError as e:
        logger.error("Payrix %s error: %s", action, e.message)
        return JSONResponse(
            status_code=e.status_code or 500,
            content={"success": False, "error": e.payload or e.message},
        )
    return {"success": True, "data": data}


@router.post("/customers")
async def create_customer(
    body: Dict[str, Any] = Body(...),
    payments: PaymentProcessorClient = Depends(get_payment_client),
):
    return await _forward(payments.create_customer(body), "customer creation")


@router.post("/tokens")
async def create_token(
    body: Dict[str, Any] = Body(...),
    payments: PaymentProcessorClient = Depends(get_payment_client),
):
    return await _forward(payments.create_token(body), "token creation")


@router.get("/customers/{customer_id}")
async def get_customer(customer_id: str, payments: PaymentProcessorClient = Depends(get_payment_client)):
    return await _forward(payments.get_customer(customer_id), "get customer")


@router.get("/tokens/{token_id}")
async def get_token(token_id: str, payments: PaymentProcessorClient = Depends(get_payment_client)):
    return await _forward(payments.get_token(token_id), "get token")
