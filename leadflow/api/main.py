"""
FastAPI application - Main entry point
"""

from dotenv import load_dotenv

load_dotenv()

import logging
from typing import Optional

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from leadflow.api.dependencies import api_key_protection, select_crm_client, select_payment_client
from leadflow.api.endpoints.fieldroutes import router as fieldroutes_router
from leadflow.api.endpoints.leads import router as leads_router
from leadflow.api.endpoints.payrix import router as payrix_router
from leadflow.config import Settings, load_settings
from leadflow.integrations.contracts.interfaces import CrmClient, PaymentProcessorClient

logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    crm_client: Optional[CrmClient] = None,
    payment_client: Optional[PaymentProcessorClient] = None,
) -> FastAPI:
    settings = settings or load_settings()
    logging.basicConfig(level=settings.log_level.upper())

    app = FastAPI(
        title="Lead Manager Backend",
        description="Lead submission backend for the FieldRoutes CRM and Payrix payment APIs",
        version="1.0.0",
        dependencies=[Depends(api_key_protection)],
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ============================================================================
    # DEPENDENCY INJECTION
    # ============================================================================

    app.state.settings = settings
    app.state.crm_client = crm_client or select_crm_client(settings)
    app.state.payment_client = payment_client or select_payment_client(settings)
    logger.info(
        "Integrations: crm=%s payments=%s",
        type(app.state.crm_client).__name__,
        type(app.state.payment_client).__name__,
    )

    app.include_router(leads_router, prefix="/api/leads", tags=["Leads"])
    app.include_router(leads_router, tags=["Leads"])
    app.include_router(fieldroutes_router, prefix="/api/fieldroutes", tags=["FieldRoutes"])
    app.include_router(payrix_router, prefix="/api/payrix", tags=["Payrix"])

    @app.get("/health", tags=["Health"])
    async def health_check():
        return {"status": "OK", "message": "Backend server is running"}

    return app


app = create_app()

