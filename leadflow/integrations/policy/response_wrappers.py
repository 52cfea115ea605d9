from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional, Sequence

from pydantic import BaseModel, Field


class IntegrationError(Exception):
    def __init__(self, message: str, *, step: Optional[str] = None, payload: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.step = step
        self.payload = payload or {}


class TransportError(IntegrationError):
    """Network or HTTP-level failure while calling an upstream system."""

    def __init__(
        self,
        message: str,
        *,
        status_code: Optional[int] = None,
        step: Optional[str] = None,
        payload: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, step=step, payload=payload)
        self.status_code = status_code


class MissingIdentifierError(IntegrationError):
    """An upstream success response carried no identifier in any known shape."""


class UpstreamValidationError(IntegrationError):
    """An upstream system reported an errors array or a false success flag."""


class PaymentFieldsError(IntegrationError):
    """Required card data was not found in the submission."""


# ---------------------------------------------------------------------------
# CRM customer id extraction
# ---------------------------------------------------------------------------

IdExtractor = Callable[[Dict[str, Any]], Optional[str]]


def _top_level(key: str) -> IdExtractor:
    def extract(data: Dict[str, Any]) -> Optional[str]:
        return _as_identifier(data.get(key))
    extract.__name__ = f"top_level_{key}"
    return extract


def _nested_result(key: str) -> IdExtractor:
    def extract(data: Dict[str, Any]) -> Optional[str]:
        result = data.get("result")
        if isinstance(result, dict):
            return _as_identifier(result.get(key))
        return None
    extract.__name__ = f"result_{key}"
    return extract


def _scalar_result(data: Dict[str, Any]) -> Optional[str]:
    # FieldRoutes returns the new customer id directly in 'result'
    return _as_identifier(data.get("result"))


CUSTOMER_ID_EXTRACTORS: Sequence[IdExtractor] = (
    _top_level("customerID"),
    _top_level("customer_id"),
    _top_level("id"),
    _top_level("customerId"),
    _nested_result("customerID"),
    _nested_result("customer_id"),
    _scalar_result,
)


def extract_customer_id(
    data: Any,
    extractors: Sequence[IdExtractor] = CUSTOMER_ID_EXTRACTORS,
) -> Optional[str]:
    """Try each extractor in order and return the first identifier found."""
    if not isinstance(data, dict):
        return None
    for extractor in extractors:
        value = extractor(data)
        if value is not None:
            return value
    return None


def require_customer_id(data: Any, *, step: str = "crm_customer") -> str:
    customer_id = extract_customer_id(data)
    if customer_id is None:
        raise MissingIdentifierError(
            "Failed to get customer ID from FieldRoutes response",
            step=step,
            payload=data if isinstance(data, dict) else {"raw": data},
        )
    return customer_id


def _as_identifier(value: Any) -> Optional[str]:
    if value is None or isinstance(value, (dict, list, bool)):
        return None
    text = str(value).strip()
    return text or None


# ---------------------------------------------------------------------------
# Payment processor envelope
# ---------------------------------------------------------------------------

class PayrixErrorModel(BaseModel):
    field: str = ""
    msg: str = ""


class PayrixEnvelopeModel(BaseModel):
    data: List[Dict[str, Any]] = Field(default_factory=list)
    errors: List[PayrixErrorModel] = Field(default_factory=list)


def unwrap_payrix_envelope(raw: Any, *, step: str) -> PayrixEnvelopeModel:
    """
    Return the validated ``response`` envelope of a Payrix reply.

    Raises UpstreamValidationError when the envelope reports errors.
    """
    body = raw.get("response") if isinstance(raw, dict) else None
    if not isinstance(body, dict):
        raise MissingIdentifierError(
            "Payrix response did not contain a 'response' envelope",
            step=step,
            payload=raw if isinstance(raw, dict) else {"raw": raw},
        )

    errors = [_normalize_payrix_error(err) for err in body.get("errors") or []]
    data = [item for item in body.get("data") or [] if isinstance(item, dict)]
    envelope = PayrixEnvelopeModel(data=data, errors=errors)

    if envelope.errors:
        raise UpstreamValidationError(format_payrix_errors(envelope.errors), step=step, payload=raw)
    return envelope


def first_record_field(envelope: PayrixEnvelopeModel, key: str, *, step: str, description: str) -> str:
    record = envelope.data[0] if envelope.data else {}
    value = _as_identifier(record.get(key))
    if value is None:
        raise MissingIdentifierError(
            f"Failed to get {description} from Payrix response - no {key} returned",
            step=step,
            payload=envelope.model_dump(),
        )
    return value


def format_payrix_errors(errors: Sequence[PayrixErrorModel]) -> str:
    return ", ".join(f"{err.field}: {err.msg}" for err in errors)


def payrix_error_message(raw: Any) -> Optional[str]:
    """Joined ``response.errors[]`` of a Payrix body, or None when there are none."""
    body = raw.get("response") if isinstance(raw, dict) else None
    if not isinstance(body, dict) or not isinstance(body.get("errors"), list) or not body["errors"]:
        return None
    errors = [PayrixErrorModel(**_normalize_payrix_error(err)) for err in body["errors"]]
    return format_payrix_errors(errors)


def _normalize_payrix_error(err: Any) -> Dict[str, str]:
    if not isinstance(err, dict):
        return {"field": "", "msg": str(err)}
    message = err.get("msg")
    if message is None:
        message = err.get("message", "")
    return {"field": str(err.get("field") or ""), "msg": str(message)}


# ---------------------------------------------------------------------------
# CRM payment profile
# ---------------------------------------------------------------------------

def ensure_crm_success(raw: Any, *, step: str, default_message: str) -> Dict[str, Any]:
    if not isinstance(raw, dict) or not raw.get("success"):
        message = raw.get("error") if isinstance(raw, dict) else None
        raise UpstreamValidationError(
            str(message or default_message),
            step=step,
            payload=raw if isinstance(raw, dict) else {"raw": raw},
        )
    return raw
