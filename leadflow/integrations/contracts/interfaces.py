from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple


# Card type sent to the payment processor when none was submitted (Visa).
DEFAULT_CARD_TYPE = 2


# ---------------------------------------------------------------------------
# Submission models
# ---------------------------------------------------------------------------

@dataclass
class RawSubmission:
    form_data: Dict[str, str]
    field_mappings: Dict[str, str] = field(default_factory=dict)


@dataclass
class MappedFields:
    """Canonical API fields plus every submitted field under its own id."""
    canonical: Dict[str, str] = field(default_factory=dict)
    original: Dict[str, str] = field(default_factory=dict)
    explicit: bool = False                       # built from caller-supplied field mappings

    def contact_value(self, *keys: str) -> str:
        """Value for a contact attribute; explicit mappings never fall back to raw ids."""
        if self.explicit:
            for key in keys:
                value = self.canonical.get(key)
                if value:
                    return str(value)
            return ""
        return self.lookup(*keys)

    def lookup(self, *keys: str) -> str:
        for key in keys:
            value = self.canonical.get(key)
            if value:
                return str(value)
        for key in keys:
            value = self.original.get(key)
            if value:
                return str(value)
        return ""

    def items(self) -> Tuple[Tuple[str, str], ...]:
        """Original fields merged with canonical ones; canonical values win on key clashes."""
        merged = dict(self.original)
        merged.update(self.canonical)
        return tuple(merged.items())


@dataclass(frozen=True)
class CanonicalContact:
    first_name: str = ""
    last_name: str = ""
    email: str = ""
    phone: str = ""
    address: str = ""
    city: str = ""
    state: str = ""
    zip: str = ""

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


@dataclass(frozen=True)
class PaymentFragment:
    card_number: Optional[str] = None
    cvv: Optional[str] = None
    expiry: Optional[str] = None                 # MMYY
    card_type: int = DEFAULT_CARD_TYPE


@dataclass(frozen=True)
class PaymentDetection:
    has_payment_info: bool
    fragment: PaymentFragment = field(default_factory=PaymentFragment)
    payment_token: Optional[str] = None          # opaque token submitted by the form


@dataclass
class LeadSubmissionResult:
    crm_customer_id: str
    message: str
    payment_customer_id: Optional[str] = None
    payment_token: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"customerId": self.crm_customer_id}
        if self.payment_customer_id is not None:
            data["payrixCustomerId"] = self.payment_customer_id
        if self.payment_token is not None:
            data["tokenId"] = self.payment_token
        data["message"] = self.message
        return data


# ---------------------------------------------------------------------------
# Abstract client interfaces
# ---------------------------------------------------------------------------

class CrmClient(ABC):
    """Every field-service CRM client (real or mock) must implement this interface."""

    @abstractmethod
    async def create_customer(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """Create a customer record and return the raw response body."""

    @abstractmethod
    async def create_payment_profile(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """Attach a tokenized payment method to an existing customer."""

    @abstractmethod
    async def search_customers(self, params: Dict[str, Any]) -> Dict[str, Any]:
        """Search customers by arbitrary query parameters."""

    @abstractmethod
    async def get_customer(self, customer_id: str) -> Dict[str, Any]:
        """Fetch one customer by CRM id."""

    @abstractmethod
    async def update_customer(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """Update customer details."""

    @abstractmethod
    async def update_payment_profile(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """Update an existing payment profile."""


class PaymentProcessorClient(ABC):
    """Every payment processor client (real or mock) must implement this interface."""

    @abstractmethod
    async def create_customer(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """Create a billing customer; returns the raw enveloped response."""

    @abstractmethod
    async def create_token(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """Tokenize card data against a billing customer."""

    @abstractmethod
    async def get_customer(self, customer_id: str) -> Dict[str, Any]:
        """Fetch a billing customer by id."""

    @abstractmethod
    async def get_token(self, token_id: str) -> Dict[str, Any]:
        """Fetch a stored token by id."""
