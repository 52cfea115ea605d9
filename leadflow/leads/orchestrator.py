"""
Lead submission orchestrator.

Drives one form submission through the CRM and the payment processor:

1. map form fields to canonical contact fields
2. create the CRM customer
3. create the payment-processor customer   (only when payment data is present)
4. tokenize the card against that customer
5. attach the token to the CRM customer as a payment profile

Each step needs the identifier produced by the previous one. Any failure
aborts the chain; records already created upstream are left in place.
"""

import logging
from typing import Any, Dict, List, Optional

from leadflow.config import Settings
from leadflow.integrations.contracts.interfaces import (
    CanonicalContact,
    CrmClient,
    LeadSubmissionResult,
    PaymentDetection,
    PaymentProcessorClient,
    RawSubmission,
)
from leadflow.integrations.policy.response_wrappers import (
    IntegrationError,
    PaymentFieldsError,
    ensure_crm_success,
    first_record_field,
    require_customer_id,
    unwrap_payrix_envelope,
)
from leadflow.leads.field_mapper import build_contact, map_fields
from leadflow.leads.payment_detection import detect_payment, normalize_phone, redact_fields

logger = logging.getLogger(__name__)

STEP_CRM_CUSTOMER = "crm_customer"
STEP_PAYMENT_CUSTOMER = "payment_customer"
STEP_PAYMENT_TOKEN = "payment_token"
STEP_PAYMENT_PROFILE = "payment_profile"

PLACEHOLDER_CARD_NUMBER = "378734493671000"
PLACEHOLDER_EXPIRY = "0123"
TOKEN_DESCRIPTION = "Lead Manager Token"

MESSAGE_NO_PAYMENT = "Customer created successfully (no payment info provided)"
MESSAGE_WITH_PAYMENT = "Lead submitted successfully with payment information"


class LeadSubmissionOrchestrator:
    def __init__(self, crm: CrmClient, payments: PaymentProcessorClient, settings: Settings) -> None:
        self.crm = crm
        self.payments = payments
        self.settings = settings

    async def submit(self, submission: RawSubmission) -> LeadSubmissionResult:
        logger.debug("Processing lead submission: %s", redact_fields(submission.form_data))

        mapped = map_fields(submission.form_data, submission.field_mappings)
        contact = build_contact(mapped)
        detection = detect_payment(mapped)
        created: Dict[str, str] = {}

        try:
            crm_customer_id = await self._create_crm_customer(contact)
            created[STEP_CRM_CUSTOMER] = crm_customer_id

            if not detection.has_payment_info:
                logger.info("CRM customer %s created; no payment info submitted", crm_customer_id)
                return LeadSubmissionResult(crm_customer_id=crm_customer_id, message=MESSAGE_NO_PAYMENT)

            self._check_payment_fields(detection)

            payment_customer_id = await self._create_payment_customer(contact)
            created[STEP_PAYMENT_CUSTOMER] = payment_customer_id

            token = await self._create_payment_token(payment_customer_id, contact, detection)
            created[STEP_PAYMENT_TOKEN] = token

            await self._attach_payment_profile(crm_customer_id, token, contact)
        except IntegrationError as e:
            # Earlier steps are not rolled back; log what now exists upstream.
            logger.error("Lead submission failed at step %s: %s (created so far: %s)", e.step, e.message, created)
            raise

        logger.info("Lead submitted: CRM customer %s, payment customer %s", crm_customer_id, payment_customer_id)
        return LeadSubmissionResult(
            crm_customer_id=crm_customer_id,
            payment_customer_id=payment_customer_id,
            payment_token=token,
            message=MESSAGE_WITH_PAYMENT,
        )

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    async def _create_crm_customer(self, contact: CanonicalContact) -> str:
        logger.info("Step 1: Creating customer in FieldRoutes")
        payload = {
            "fname": contact.first_name,
            "lname": contact.last_name,
            "email": contact.email,
            "phone": contact.phone,
            "address": contact.address,
            "city": contact.city,
            "state": contact.state,
            "zip": contact.zip,
        }
        raw = await self._call(STEP_CRM_CUSTOMER, self.crm.create_customer(payload))
        return require_customer_id(raw, step=STEP_CRM_CUSTOMER)

    async def _create_payment_customer(self, contact: CanonicalContact) -> str:
        logger.info("Step 2: Creating customer in Payrix")
        payload = {
            "merchant": self.settings.payrix_merchant_id,
            "first": contact.first_name,
            "last": contact.last_name,
            "email": contact.email,
            "phone": normalize_phone(contact.phone),
            "address1": contact.address,
            "city": contact.city,
            "state": contact.state,
            "zip": contact.zip,
            "country": "USA",
            "inactive": 0,
            "frozen": 0,
        }
        raw = await self._call(STEP_PAYMENT_CUSTOMER, self.payments.create_customer(payload))
        envelope = unwrap_payrix_envelope(raw, step=STEP_PAYMENT_CUSTOMER)
        return first_record_field(envelope, "id", step=STEP_PAYMENT_CUSTOMER, description="customer ID")

    async def _create_payment_token(
        self,
        payment_customer_id: str,
        contact: CanonicalContact,
        detection: PaymentDetection,
    ) -> str:
        logger.info("Step 3: Creating payment token in Payrix")
        payload = build_token_request(payment_customer_id, contact, detection)
        raw = await self._call(STEP_PAYMENT_TOKEN, self.payments.create_token(payload))
        envelope = unwrap_payrix_envelope(raw, step=STEP_PAYMENT_TOKEN)
        # the token value, not the token record id
        return first_record_field(envelope, "token", step=STEP_PAYMENT_TOKEN, description="token value")

    async def _attach_payment_profile(self, crm_customer_id: str, token: str, contact: CanonicalContact) -> None:
        logger.info("Step 4: Adding payment profile to FieldRoutes")
        payload = {
            "customerID": crm_customer_id,
            "merchantID": token,
            "paymentMethod": 1,
            "gateway": self.settings.payment_gateway,
            "billingFname": contact.first_name,
            "billingLname": contact.last_name,
            "billingAddress": contact.address,
            "billingCity": contact.city,
            "billingState": contact.state,
            "billingZip": contact.zip,
            "billingCountryID": "US",
        }
        raw = await self._call(STEP_PAYMENT_PROFILE, self.crm.create_payment_profile(payload))
        ensure_crm_success(
            raw,
            step=STEP_PAYMENT_PROFILE,
            default_message="Failed to create payment profile in FieldRoutes",
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _check_payment_fields(self, detection: PaymentDetection) -> None:
        if not self.settings.strict_payment_fields or detection.payment_token:
            return
        missing: List[str] = []
        if not detection.fragment.card_number:
            missing.append("card number")
        if not detection.fragment.expiry:
            missing.append("expiry")
        if missing:
            raise PaymentFieldsError(
                f"Payment information incomplete: missing {', '.join(missing)}",
                step=STEP_PAYMENT_CUSTOMER,
            )

    @staticmethod
    async def _call(step: str, pending) -> Any:
        try:
            return await pending
        except IntegrationError as e:
            if e.step is None:
                e.step = step
            raise


def build_token_request(
    payment_customer_id: str,
    contact: CanonicalContact,
    detection: PaymentDetection,
) -> Dict[str, Any]:
    fragment = detection.fragment
    if fragment.card_number is None or fragment.expiry is None:
        logger.warning("Card number or expiry not detected; submitting placeholder values")

    payload: Dict[str, Any] = {
        "customer": payment_customer_id,
        "payment": {
            "method": fragment.card_type,
            "number": fragment.card_number or PLACEHOLDER_CARD_NUMBER,
            "routing": "0",
        },
        "expiration": fragment.expiry or PLACEHOLDER_EXPIRY,
        "name": contact.full_name,
        "description": TOKEN_DESCRIPTION,
        "custom": TOKEN_DESCRIPTION,
        "origin": 2,
        "entryMode": 2,
        "inactive": 0,
        "frozen": 0,
    }
    if fragment.cvv:
        payload["cvv"] = fragment.cvv
    token: Optional[str] = detection.payment_token
    if token:
        payload["omnitoken"] = token
    return payload
