import hmac
import logging

from fastapi import Header, HTTPException, Request, status

from leadflow.config import Settings
from leadflow.integrations.clients.mocks import MockFieldRoutesClient, MockPayrixClient
from leadflow.integrations.clients.real_http.crm import FieldRoutesClient
from leadflow.integrations.clients.real_http.payments import PayrixClient
from leadflow.integrations.contracts.interfaces import CrmClient, PaymentProcessorClient
from leadflow.leads.orchestrator import LeadSubmissionOrchestrator

logger = logging.getLogger(__name__)

_ALLOWLIST_PATHS = {
    "/",
    "/health",
    "/docs",
    "/docs/oauth2-redirect",
    "/openapi.json",
    "/redoc",
}


def select_crm_client(settings: Settings) -> CrmClient:
    if settings.use_mock_integrations:
        return MockFieldRoutesClient()
    return FieldRoutesClient(settings)


def select_payment_client(settings: Settings) -> PaymentProcessorClient:
    if settings.use_mock_integrations:
        return MockPayrixClient(merchant_id=settings.payrix_merchant_id or "mock-merchant")
    return PayrixClient(settings)


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_crm_client(request: Request) -> CrmClient:
    return request.app.state.crm_client


def get_payment_client(request: Request) -> PaymentProcessorClient:
    return request.app.state.payment_client


def get_orchestrator(request: Request) -> LeadSubmissionOrchestrator:
    state = request.app.state
    return LeadSubmissionOrchestrator(state.crm_client, state.payment_client, state.settings)


async def api_key_protection(
    request: Request = None,  # keep Request type so FastAPI injects it; default None for direct calls/tests
    x_api_key: str = Header(default=None, alias="X-API-KEY"),
):
    path = request.url.path if request is not None else "<no-request>"

    if request is not None and request.url.path in _ALLOWLIST_PATHS:
        return

    settings: Settings = request.app.state.settings if request is not None else None
    valid_keys = settings.api_keys if settings is not None else []
    if not valid_keys:
        # No keys configured: the guard is off.
        return

    candidate = (x_api_key or "").strip()
    ok = bool(candidate) and any(hmac.compare_digest(candidate, k) for k in valid_keys)
    logger.debug("API key check: path=%s ok=%s configured_keys=%d", path, ok, len(valid_keys))

    if not ok:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or missing API Key",
        )
