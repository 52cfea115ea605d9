"""
Payment fragment detection.

Decides whether a submission carries card data and extracts the card number,
CVV, expiry (MMYY) and card type from arbitrarily named form fields. All
functions are pure: running them twice on the same input gives the same
answer.
"""

import re
from typing import Any, Dict, Optional, Tuple

from leadflow.integrations.contracts.interfaces import (
    DEFAULT_CARD_TYPE,
    MappedFields,
    PaymentDetection,
    PaymentFragment,
)

CARD_NUMBER_PATTERN = re.compile(r"\d{4}[\s-]?\d{4}[\s-]?\d{4}[\s-]?\d{4}")
CVV_PATTERN = re.compile(r"\d{3,4}")
EXPIRY_PATTERN = re.compile(r"(0[1-9]|1[0-2])/?\d{2}")
_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")
_NON_DIGITS = re.compile(r"\D")
_WHITESPACE = re.compile(r"\s")

PAYMENT_KEY_KEYWORDS = ("credit", "card", "cvv", "expiry")
PAYMENT_API_NAMES = frozenset({"cardNumber", "creditCard", "cvv", "expiry", "expiryDate", "paymentToken"})
PAYMENT_TOKEN_FIELD = "paymentToken"

PLACEHOLDER_PHONE = "5555555555"
PHONE_MIN_DIGITS = 5
PHONE_MAX_DIGITS = 15


def _pairs(fields) -> Tuple[Tuple[str, Any], ...]:
    if isinstance(fields, MappedFields):
        return fields.items()
    if isinstance(fields, dict):
        return tuple(fields.items())
    return tuple(fields)


def looks_like_payment_value(value: Any) -> bool:
    if not isinstance(value, str) or not value:
        return False
    return bool(
        CARD_NUMBER_PATTERN.fullmatch(value)
        or CVV_PATTERN.fullmatch(value)
        or EXPIRY_PATTERN.fullmatch(value)
    )


def is_payment_key(key: str) -> bool:
    lowered = key.lower()
    return key in PAYMENT_API_NAMES or any(word in lowered for word in PAYMENT_KEY_KEYWORDS)


def has_payment_info(fields) -> bool:
    return any(is_payment_key(key) or looks_like_payment_value(value) for key, value in _pairs(fields))


def parse_card_type(value: Any) -> int:
    """Integer prefix of the value; 0, garbage or nothing falls back to Visa."""
    match = _LEADING_INT.match(str(value)) if value is not None else None
    if not match:
        return DEFAULT_CARD_TYPE
    return int(match.group(1)) or DEFAULT_CARD_TYPE


def parse_expiry(value: str) -> Optional[str]:
    if not EXPIRY_PATTERN.fullmatch(value):
        return None
    expiry = value.replace("/", "", 1)
    return expiry if len(expiry) == 4 else None


def extract_payment_fragment(fields) -> PaymentFragment:
    card_number: Optional[str] = None
    cvv: Optional[str] = None
    expiry: Optional[str] = None
    card_type = DEFAULT_CARD_TYPE

    for key, value in _pairs(fields):
        if not isinstance(value, str):
            continue
        lowered = key.lower()
        compact = _WHITESPACE.sub("", value)

        if ("card" in lowered or "credit" in lowered) and CARD_NUMBER_PATTERN.fullmatch(compact):
            card_number = compact
        elif "cvv" in lowered and CVV_PATTERN.fullmatch(value):
            cvv = value
        elif "exp" in lowered and EXPIRY_PATTERN.fullmatch(value):
            # covers expiry, expire, expiryDate, exp_date ...
            parsed = parse_expiry(value)
            if parsed is not None:
                expiry = parsed
        elif "cardtype" in lowered or "card_type" in lowered or "card-type" in lowered:
            card_type = parse_card_type(value)

    return PaymentFragment(card_number=card_number, cvv=cvv, expiry=expiry, card_type=card_type)


def detect_payment(mapped: MappedFields) -> PaymentDetection:
    token = mapped.lookup(PAYMENT_TOKEN_FIELD) or None
    return PaymentDetection(
        has_payment_info=has_payment_info(mapped),
        fragment=extract_payment_fragment(mapped),
        payment_token=token,
    )


def normalize_phone(value: Optional[str]) -> str:
    """Digits only, 5 to 15 characters; short or empty input gets the placeholder number."""
    digits = _NON_DIGITS.sub("", value or "")
    if len(digits) < PHONE_MIN_DIGITS:
        digits = PLACEHOLDER_PHONE
    return digits[:PHONE_MAX_DIGITS]


def redact_fields(fields: Dict[str, Any]) -> Dict[str, Any]:
    """Copy of the fields safe for logging: payment keys and card-shaped values are masked."""
    redacted: Dict[str, Any] = {}
    for key, value in fields.items():
        if is_payment_key(key) or looks_like_payment_value(value):
            text = str(value)
            redacted[key] = f"***{text[-4:]}" if len(text) > 8 else "***"
        else:
            redacted[key] = value
    return redacted
