"""Pytest fixtures for the lead submission flow."""

import pytest

from leadflow.config import Settings
from leadflow.integrations.clients.mocks import MockFieldRoutesClient, MockPayrixClient
from leadflow.leads.orchestrator import LeadSubmissionOrchestrator


@pytest.fixture
def settings():
    return Settings(
        integrations_mode="mock",
        payrix_merchant_id="t1_mer_test",
        fieldroutes_auth_key="key",
        fieldroutes_auth_token="token",
        payrix_api_key="payrix-key",
    )


@pytest.fixture
def crm():
    """In-memory FieldRoutes stub."""
    return MockFieldRoutesClient()


@pytest.fixture
def payments():
    """In-memory Payrix stub."""
    return MockPayrixClient()


@pytest.fixture
def orchestrator(crm, payments, settings):
    return LeadSubmissionOrchestrator(crm, payments, settings)
