"""Tests for the four-step lead submission chain."""

import pytest

from leadflow.integrations.clients.mocks import MockFieldRoutesClient, MockPayrixClient
from leadflow.integrations.contracts.interfaces import RawSubmission
from leadflow.integrations.policy.response_wrappers import (
    MissingIdentifierError,
    PaymentFieldsError,
    TransportError,
    UpstreamValidationError,
)
from leadflow.leads.orchestrator import (
    MESSAGE_NO_PAYMENT,
    MESSAGE_WITH_PAYMENT,
    PLACEHOLDER_CARD_NUMBER,
    PLACEHOLDER_EXPIRY,
    LeadSubmissionOrchestrator,
    build_token_request,
)
from leadflow.leads.field_mapper import build_contact, map_fields
from leadflow.leads.payment_detection import detect_payment

CONTACT_FORM = {
    "fname": "Jane",
    "lname": "Doe",
    "email": "j@x.com",
    "phone": "(555) 123-4567",
    "address": "1 Main St",
    "city": "Springfield",
    "state": "IL",
    "zip": "62701",
}


class FailingCrm(MockFieldRoutesClient):
    async def create_customer(self, payload):
        self.calls.append(("create_customer", dict(payload)))
        raise TransportError("Invalid authentication key", status_code=401)


def _call_names(client):
    return [name for name, _ in client.calls]


@pytest.mark.asyncio
async def test_no_payment_info_only_creates_crm_customer(orchestrator, crm, payments):
    form = {"fname": "Jane", "lname": "Doe", "email": "j@x.com"}
    result = await orchestrator.submit(RawSubmission(form_data=form))

    assert result.crm_customer_id in crm.customers
    assert "no payment info" in result.message
    assert result.message == MESSAGE_NO_PAYMENT
    assert payments.calls == []
    assert _call_names(crm) == ["create_customer"]
    assert result.to_dict() == {"customerId": result.crm_customer_id, "message": MESSAGE_NO_PAYMENT}


@pytest.mark.asyncio
async def test_notes_ending_in_digits_do_not_trigger_payment(orchestrator, crm, payments):
    result = await orchestrator.submit(RawSubmission(form_data={"fname": "Jane", "notes": "123\n"}))

    assert result.message == MESSAGE_NO_PAYMENT
    assert payments.calls == []
    assert _call_names(crm) == ["create_customer"]


@pytest.mark.asyncio
async def test_crm_customer_payload(orchestrator, crm):
    await orchestrator.submit(RawSubmission(form_data=CONTACT_FORM))
    _, payload = crm.calls[0]
    assert payload == {
        "fname": "Jane",
        "lname": "Doe",
        "email": "j@x.com",
        "phone": "(555) 123-4567",
        "address": "1 Main St",
        "city": "Springfield",
        "state": "IL",
        "zip": "62701",
    }


@pytest.mark.asyncio
async def test_full_chain_runs_all_four_steps_in_order(orchestrator, crm, payments):
    form = dict(CONTACT_FORM, cardNumber="4111 1111 1111 1111", cvv="123", expiry="12/29")
    result = await orchestrator.submit(RawSubmission(form_data=form))

    assert _call_names(crm) == ["create_customer", "create_payment_profile"]
    assert _call_names(payments) == ["create_customer", "create_token"]
    assert result.message == MESSAGE_WITH_PAYMENT

    token_record = next(iter(payments.tokens.values()))
    assert result.payment_token == token_record["token"]
    assert result.payment_token != token_record["id"]
    assert result.payment_customer_id in payments.customers

    data = result.to_dict()
    assert set(data) == {"customerId", "payrixCustomerId", "tokenId", "message"}


@pytest.mark.asyncio
async def test_payment_customer_payload(orchestrator, payments, settings):
    form = dict(CONTACT_FORM, phone="abc", cardNumber="4111111111111111")
    await orchestrator.submit(RawSubmission(form_data=form))

    _, payload = payments.calls[0]
    assert payload["merchant"] == settings.payrix_merchant_id
    assert payload["first"] == "Jane"
    assert payload["last"] == "Doe"
    assert payload["phone"] == "5555555555"
    assert payload["address1"] == "1 Main St"
    assert payload["country"] == "USA"
    assert payload["inactive"] == 0 and payload["frozen"] == 0


@pytest.mark.asyncio
async def test_token_request_uses_detected_card(orchestrator, payments):
    form = dict(CONTACT_FORM, cardNumber="4111 1111 1111 1111", cvv="123", expiry="12/29", cardType="3")
    await orchestrator.submit(RawSubmission(form_data=form))

    _, payload = payments.calls[1]
    assert payload["customer"] == next(iter(payments.customers))
    assert payload["payment"] == {"method": 3, "number": "4111111111111111", "routing": "0"}
    assert payload["expiration"] == "1229"
    assert payload["cvv"] == "123"
    assert payload["name"] == "Jane Doe"
    assert payload["origin"] == 2 and payload["entryMode"] == 2
    assert "omnitoken" not in payload


@pytest.mark.asyncio
async def test_payment_profile_carries_token_as_merchant_id(orchestrator, crm, payments, settings):
    form = dict(CONTACT_FORM, cardNumber="4111111111111111", expiry="0129")
    result = await orchestrator.submit(RawSubmission(form_data=form))

    name, payload = crm.calls[1]
    assert name == "create_payment_profile"
    assert payload["customerID"] == result.crm_customer_id
    assert payload["merchantID"] == result.payment_token
    assert payload["gateway"] == settings.payment_gateway == "payrix"
    assert payload["paymentMethod"] == 1
    assert payload["billingFname"] == "Jane"
    assert payload["billingZip"] == "62701"
    assert payload["billingCountryID"] == "US"


@pytest.mark.asyncio
async def test_missing_crm_customer_id_stops_before_payment_calls(payments, settings):
    crm = MockFieldRoutesClient(customer_response={"success": True, "message": "created"})
    orchestrator = LeadSubmissionOrchestrator(crm, payments, settings)
    form = dict(CONTACT_FORM, cardNumber="4111111111111111")

    with pytest.raises(MissingIdentifierError) as exc:
        await orchestrator.submit(RawSubmission(form_data=form))

    assert exc.value.step == "crm_customer"
    assert payments.calls == []


@pytest.mark.asyncio
async def test_crm_transport_failure_is_surfaced_with_step(payments, settings):
    crm = FailingCrm()
    orchestrator = LeadSubmissionOrchestrator(crm, payments, settings)

    with pytest.raises(TransportError) as exc:
        await orchestrator.submit(RawSubmission(form_data=CONTACT_FORM))

    assert exc.value.message == "Invalid authentication key"
    assert exc.value.step == "crm_customer"
    assert exc.value.status_code == 401


@pytest.mark.asyncio
async def test_payment_customer_errors_abort_chain(crm, settings):
    payments = MockPayrixClient(customer_errors=[{"field": "email", "msg": "Invalid email"}])
    orchestrator = LeadSubmissionOrchestrator(crm, payments, settings)
    form = dict(CONTACT_FORM, cardNumber="4111111111111111")

    with pytest.raises(UpstreamValidationError, match="email: Invalid email") as exc:
        await orchestrator.submit(RawSubmission(form_data=form))

    assert exc.value.step == "payment_customer"
    assert _call_names(payments) == ["create_customer"]
    assert _call_names(crm) == ["create_customer"]


@pytest.mark.asyncio
async def test_token_errors_abort_before_payment_profile(crm, settings):
    payments = MockPayrixClient(
        token_errors=[
            {"field": "payment.number", "msg": "Invalid card number"},
            {"field": "expiration", "msg": "Card expired"},
        ]
    )
    orchestrator = LeadSubmissionOrchestrator(crm, payments, settings)
    form = dict(CONTACT_FORM, cardNumber="4111111111111111", expiry="01/20")

    with pytest.raises(UpstreamValidationError) as exc:
        await orchestrator.submit(RawSubmission(form_data=form))

    assert exc.value.message == "payment.number: Invalid card number, expiration: Card expired"
    assert "create_payment_profile" not in _call_names(crm)
    # the CRM customer stays behind; nothing is rolled back
    assert len(crm.customers) == 1


@pytest.mark.asyncio
async def test_failed_payment_profile(payments, settings):
    crm = MockFieldRoutesClient(profile_success=False, profile_error="Unknown merchant")
    orchestrator = LeadSubmissionOrchestrator(crm, payments, settings)
    form = dict(CONTACT_FORM, cardNumber="4111111111111111")

    with pytest.raises(UpstreamValidationError, match="Unknown merchant") as exc:
        await orchestrator.submit(RawSubmission(form_data=form))
    assert exc.value.step == "payment_profile"


@pytest.mark.asyncio
async def test_placeholders_used_when_card_fields_missing(orchestrator, payments):
    form = dict(CONTACT_FORM, cardNumber="not-a-card")
    await orchestrator.submit(RawSubmission(form_data=form))

    _, payload = payments.calls[1]
    assert payload["payment"]["number"] == PLACEHOLDER_CARD_NUMBER
    assert payload["expiration"] == PLACEHOLDER_EXPIRY
    assert "cvv" not in payload


@pytest.mark.asyncio
async def test_strict_mode_rejects_missing_card_fields(crm, payments, settings):
    strict = settings.model_copy(update={"strict_payment_fields": True})
    orchestrator = LeadSubmissionOrchestrator(crm, payments, strict)
    form = dict(CONTACT_FORM, cardNumber="not-a-card")

    with pytest.raises(PaymentFieldsError, match="card number, expiry"):
        await orchestrator.submit(RawSubmission(form_data=form))
    assert payments.calls == []


@pytest.mark.asyncio
async def test_strict_mode_accepts_submitted_token(crm, payments, settings):
    strict = settings.model_copy(update={"strict_payment_fields": True})
    orchestrator = LeadSubmissionOrchestrator(crm, payments, strict)
    form = dict(CONTACT_FORM, paymentToken="omni-abc")

    result = await orchestrator.submit(RawSubmission(form_data=form))

    _, payload = payments.calls[1]
    assert payload["omnitoken"] == "omni-abc"
    assert result.payment_token is not None


@pytest.mark.asyncio
async def test_explicit_field_mappings_drive_contact(orchestrator, crm):
    form = {"q1": "Jane", "q2": "Doe", "q3": "j@x.com", "q4": "Springfield"}
    mappings = {"q1": "firstName", "q2": "lastName", "q3": "email", "q4": "city"}
    await orchestrator.submit(RawSubmission(form_data=form, field_mappings=mappings))

    _, payload = crm.calls[0]
    assert payload["fname"] == "Jane"
    assert payload["lname"] == "Doe"
    assert payload["email"] == "j@x.com"
    assert payload["city"] == "Springfield"
    assert payload["zip"] == ""


def test_build_token_request_passes_token_alongside_card():
    mapped = map_fields({"fname": "Jane", "lname": "Doe", "paymentToken": "omni-1", "cvv": "999"})
    payload = build_token_request("t1_cus_9", build_contact(mapped), detect_payment(mapped))

    assert payload["customer"] == "t1_cus_9"
    assert payload["omnitoken"] == "omni-1"
    assert payload["cvv"] == "999"
    assert payload["payment"]["method"] == 2
