"""
Request, response and value types shared by every gateway adapter.

Requests are immutable and created by the caller per call. Responses share
``success``/``error``/``raw``; failed operations are returned as a response
whose ``success`` is False and whose ``error`` describes what went wrong,
so callers can branch on ``.success`` without try/except.
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Any, Optional, Union

from paygate.models.enums import Currency, ErrorKind, PaymentChannel, PaymentStatus

Amount = Union[int, float, Decimal]


@dataclass(frozen=True)
class Money:
    """An amount in the caller's base (major) unit, e.g. 50.00 NGN."""

    amount: Amount
    currency: Currency


@dataclass(frozen=True)
class Customer:
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None
    metadata: Optional[dict[str, Any]] = None

    @property
    def full_name(self) -> Optional[str]:
        name = " ".join(part for part in (self.first_name, self.last_name) if part)
        return name or None


@dataclass
class GatewayError:
    """Structured failure returned (never raised) by payment operations."""

    kind: ErrorKind
    message: str
    details: Optional[Any] = None

    @property
    def code(self) -> str:
        return self.kind.value

    def to_dict(self) -> dict[str, Any]:
        return {"code": self.code, "message": self.message, "details": self.details}


@dataclass
class GatewayRegistration:
    """How a named gateway should be built and ranked by the manager."""

    name: str
    config: dict[str, Any] = field(default_factory=dict)
    enabled: bool = True
    priority: int = 0  # higher is tried first during fallback


# ─── Requests ──────────────────────────────────────────────────────────


@dataclass(frozen=True)
class InitiatePaymentRequest:
    amount: Money
    customer: Customer
    reference: Optional[str] = None  # generated by the adapter when absent
    callback_url: Optional[str] = None
    channels: Optional[tuple[PaymentChannel, ...]] = None
    metadata: Optional[dict[str, Any]] = None
    description: Optional[str] = None


@dataclass(frozen=True)
class VerifyPaymentRequest:
    reference: str


@dataclass(frozen=True)
class GetPaymentRequest:
    reference: str


@dataclass(frozen=True)
class RefundPaymentRequest:
    """Full refund when ``amount`` is None, partial otherwise."""

    reference: str
    amount: Optional[Money] = None
    reason: Optional[str] = None
    metadata: Optional[dict[str, Any]] = None


@dataclass(frozen=True)
class CancelPaymentRequest:
    reference: str
    reason: Optional[str] = None


# ─── Responses ─────────────────────────────────────────────────────────


@dataclass
class PaymentCustomer:
    """Customer details as reported back by a processor."""

    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None


@dataclass
class CardAuthorization:
    """Card details a processor may return; every field is optional."""

    authorization_code: Optional[str] = None
    card_type: Optional[str] = None
    last4: Optional[str] = None
    exp_month: Optional[str] = None
    exp_year: Optional[str] = None
    bin: Optional[str] = None
    bank: Optional[str] = None  # issuer
    country: Optional[str] = None
    channel: Optional[str] = None
    reusable: Optional[bool] = None


@dataclass(kw_only=True)
class PaymentResponse:
    success: bool
    error: Optional[GatewayError] = None
    raw: Optional[Any] = None

    @classmethod
    def failure(cls, error: GatewayError, raw: Optional[Any] = None):
        return cls(success=False, error=error, raw=raw)


@dataclass(kw_only=True)
class InitiatePaymentResponse(PaymentResponse):
    reference: Optional[str] = None
    # None for client-secret flows (e.g. Stripe); use access_code instead.
    authorization_url: Optional[str] = None
    access_code: Optional[str] = None
    amount: Optional[Money] = None
    status: Optional[PaymentStatus] = None
    metadata: Optional[dict[str, Any]] = None


@dataclass(kw_only=True)
class VerifyPaymentResponse(PaymentResponse):
    reference: Optional[str] = None
    status: Optional[PaymentStatus] = None
    amount: Optional[Money] = None
    channel: Optional[PaymentChannel] = None
    gateway_transaction_id: Optional[str] = None
    paid_at: Optional[datetime] = None
    customer: Optional[PaymentCustomer] = None
    metadata: Optional[dict[str, Any]] = None


@dataclass(kw_only=True)
class GetPaymentResponse(VerifyPaymentResponse):
    created_at: Optional[datetime] = None
    authorization: Optional[CardAuthorization] = None


@dataclass(kw_only=True)
class RefundPaymentResponse(PaymentResponse):
    reference: Optional[str] = None
    refund_reference: Optional[str] = None
    amount: Optional[Money] = None
    status: Optional[PaymentStatus] = None
    refunded_at: Optional[datetime] = None
    metadata: Optional[dict[str, Any]] = None


@dataclass(kw_only=True)
class CancelPaymentResponse(PaymentResponse):
    reference: Optional[str] = None
    status: Optional[PaymentStatus] = None
    metadata: Optional[dict[str, Any]] = None
