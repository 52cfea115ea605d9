import json

import httpx
import pytest

from leadflow.config import Settings
from leadflow.integrations.clients.real_http.crm import FieldRoutesClient
from leadflow.integrations.clients.real_http.payments import PayrixClient
from leadflow.integrations.contracts.interfaces import RawSubmission
from leadflow.integrations.policy.response_wrappers import TransportError
from leadflow.leads.orchestrator import LeadSubmissionOrchestrator


@pytest.fixture
def http_settings():
    return Settings(
        fieldroutes_base_url="https://crm.test/",
        fieldroutes_auth_key="auth-key",
        fieldroutes_auth_token="auth-token",
        payrix_base_url="https://pay.test",
        payrix_api_key="payrix-key",
        payrix_merchant_id="t1_mer_1",
    )


def _client(handler):
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_fieldroutes_create_customer_sends_auth_headers(http_settings):
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["headers"] = request.headers
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"success": True, "result": 4242})

    async with _client(handler) as http:
        crm = FieldRoutesClient(http_settings, client=http)
        data = await crm.create_customer({"fname": "Jane"})

    assert data == {"success": True, "result": 4242}
    assert seen["url"] == "https://crm.test/api/customer/create"
    assert seen["headers"]["authenticationKey"] == "auth-key"
    assert seen["headers"]["authenticationToken"] == "auth-token"
    assert seen["body"] == {"fname": "Jane"}


@pytest.mark.asyncio
async def test_fieldroutes_get_customer_uses_query(http_settings):
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.method == "GET"
        assert request.url.path == "/api/customer/get"
        assert request.url.params["customerID"] == "77"
        assert request.content == b""
        return httpx.Response(200, json={"success": True, "customer": {"customerID": "77"}})

    async with _client(handler) as http:
        data = await FieldRoutesClient(http_settings, client=http).get_customer("77")
    assert data["customer"]["customerID"] == "77"


@pytest.mark.asyncio
async def test_fieldroutes_http_error_becomes_transport_error(http_settings):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(401, json={"message": "Invalid authentication token"})

    async with _client(handler) as http:
        with pytest.raises(TransportError) as exc:
            await FieldRoutesClient(http_settings, client=http).create_customer({})

    assert exc.value.status_code == 401
    assert exc.value.message == "Invalid authentication token"


@pytest.mark.asyncio
async def test_network_failure_becomes_transport_error(http_settings):
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("Connection refused", request=request)

    async with _client(handler) as http:
        with pytest.raises(TransportError, match="Connection refused") as exc:
            await PayrixClient(http_settings, client=http).create_token({})
    assert exc.value.status_code is None


@pytest.mark.asyncio
async def test_payrix_fills_merchant_and_api_key(http_settings):
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["headers"] = request.headers
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"response": {"data": [{"id": "t1_cus_1"}], "errors": []}})

    async with _client(handler) as http:
        data = await PayrixClient(http_settings, client=http).create_customer({"first": "Jane"})

    assert data["response"]["data"][0]["id"] == "t1_cus_1"
    assert seen["headers"]["APIKEY"] == "payrix-key"
    assert seen["body"] == {"first": "Jane", "merchant": "t1_mer_1"}


@pytest.mark.asyncio
async def test_payrix_http_error_reports_envelope_errors(http_settings):
    body = {"response": {"errors": [{"field": "merchant", "msg": "Not found"}]}}

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404, json=body)

    async with _client(handler) as http:
        with pytest.raises(TransportError) as exc:
            await PayrixClient(http_settings, client=http).get_token("t1_tok_x")

    assert exc.value.status_code == 404
    assert exc.value.payload == body
    assert exc.value.message == "merchant: Not found"


@pytest.mark.asyncio
async def test_full_chain_over_http(http_settings):
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append((request.url.host, request.url.path))
        path = request.url.path
        if path == "/api/customer/create":
            return httpx.Response(200, json={"success": True, "result": 555})
        if path == "/customers":
            return httpx.Response(200, json={"response": {"data": [{"id": "t1_cus_9"}], "errors": []}})
        if path == "/tokens":
            body = json.loads(request.content)
            assert body["customer"] == "t1_cus_9"
            return httpx.Response(200, json={"response": {"data": [{"id": "t1_tok_9", "token": "tokval"}]}})
        if path == "/api/paymentProfile/create":
            body = json.loads(request.content)
            assert body["customerID"] == "555"
            assert body["merchantID"] == "tokval"
            return httpx.Response(200, json={"success": True})
        return httpx.Response(404)

    async with _client(handler) as http:
        orchestrator = LeadSubmissionOrchestrator(
            FieldRoutesClient(http_settings, client=http),
            PayrixClient(http_settings, client=http),
            http_settings,
        )
        result = await orchestrator.submit(
            RawSubmission(form_data={"fname": "Jane", "lname": "Doe", "cardNumber": "4111111111111111"})
        )

    assert calls == [
        ("crm.test", "/api/customer/create"),
        ("pay.test", "/customers"),
        ("pay.test", "/tokens"),
        ("crm.test", "/api/paymentProfile/create"),
    ]
    assert result.to_dict() == {
        "customerId": "555",
        "payrixCustomerId": "t1_cus_9",
        "tokenId": "tokval",
        "message": "Lead submitted successfully with payment information",
    }
