"""Payment provider port (abstract interface).

Every provider implements the same three operations: create a payment,
confirm it, and refund it. Providers that push webhooks also parse and
authenticate them. Outcomes are reported in the payment status
vocabulary, so the domain never sees provider-specific statuses.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field


class GatewayError(Exception):
    """A provider call failed or returned an unusable response."""


class SignatureMismatch(GatewayError):
    """A webhook payload could not be authenticated."""


@dataclass(frozen=True)
class PaymentRequest:
    order_id: str
    user_id: str
    amount: float
    currency: str
    payment_id: str | None = None
    success_url: str | None = None
    cancel_url: str | None = None


@dataclass(frozen=True)
class ProviderPayment:
    """What the provider hands back when a payment is created."""

    reference: str
    client_secret: str | None = None
    approval_url: str | None = None


@dataclass(frozen=True)
class ProviderOutcome:
    """Provider state translated to a payment status."""

    status: str
    transaction_id: str | None = None
    capture_id: str | None = None
    failure_reason: str | None = None


@dataclass(frozen=True)
class RefundRequest:
    reference: str
    amount: float
    currency: str
    capture_id: str | None = None


@dataclass(frozen=True)
class RefundResult:
    refund_id: str
    status: str | None = None


@dataclass(frozen=True)
class WebhookEvent:
    type: str
    data: dict = field(default_factory=dict)


class PaymentProvider(ABC):
    """Abstract payment provider interface."""

    method: str = ""
    label: str = ""

    @abstractmethod
    def create(self, request: PaymentRequest) -> ProviderPayment:
        """Create a payment at the provider."""
        ...

    @abstractmethod
    def confirm(self, reference: str) -> ProviderOutcome:
        """Fetch (or capture) the provider payment and report its outcome."""
        ...

    @abstractmethod
    def refund(self, request: RefundRequest) -> RefundResult:
        """Refund a completed payment."""
        ...

    def parse_webhook(self, payload: str, signature: str) -> WebhookEvent:
        """Authenticate and decode a webhook payload."""
        raise GatewayError(f"{self.label} webhooks are not supported")
