"""
Real HTTP integration clients.

These clients communicate with the external systems over HTTP:
- FieldRoutes CRM (crm.py)
- Payrix payment processor (payments.py)

Important:
- Must implement the same interfaces as the mock clients
- Must raise leadflow.integrations.policy.response_wrappers.TransportError on
  network or HTTP status failures
"""

from typing import Any, Dict, Tuple

import httpx

from leadflow.integrations.policy.response_wrappers import payrix_error_message


def describe_http_error(exc: httpx.HTTPStatusError) -> Tuple[str, Dict[str, Any]]:
    """Return (message, body) for an upstream error response."""
    response = exc.response
    try:
        body = response.json()
    except ValueError:
        body = {"raw": response.text}
    if not isinstance(body, dict):
        body = {"raw": body}

    message = body.get("message") or body.get("error") or payrix_error_message(body)
    if not isinstance(message, str) or not message:
        message = f"HTTP {response.status_code} from {response.request.url}"
    return message, body
