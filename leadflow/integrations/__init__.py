"""
Integrations layer.
This package contains all code used to communicate with external systems:
- FieldRoutes CRM (customers, payment profiles)
- Payrix payment processor (billing customers, card tokens)

Key rule:
- Lead flows MUST NOT call external APIs directly.
- Flows call integration clients (under leadflow/integrations/clients).
- Mock clients are used for offline development; real HTTP clients otherwise.

Switching implementations:
- The selection of mock vs real clients happens in ONE place (leadflow/api/dependencies.py).
"""

from .contracts.interfaces import (
    CanonicalContact,
    CrmClient,
    LeadSubmissionResult,
    MappedFields,
    PaymentDetection,
    PaymentFragment,
    PaymentProcessorClient,
    RawSubmission,
)
from .policy.response_wrappers import (
    IntegrationError,
    MissingIdentifierError,
    PaymentFieldsError,
    TransportError,
    UpstreamValidationError,
)

__all__ = [
    # contracts
    "CanonicalContact", "CrmClient", "LeadSubmissionResult", "MappedFields",
    "PaymentDetection", "PaymentFragment", "PaymentProcessorClient", "RawSubmission",
    # errors
    "IntegrationError", "MissingIdentifierError", "PaymentFieldsError",
    "TransportError", "UpstreamValidationError",
]
