"""
Payment exceptions.

A single exception type carries an ``ErrorKind``; callers branch on
``exc.kind`` rather than on the exception class. Only adapter construction
and manager lookups let these escape. The five payment operations catch
them and return the equivalent ``GatewayError`` instead.
"""

from typing import Any, Optional

from paygate.models.enums import ErrorKind
from paygate.models.payment import GatewayError


class PaymentException(Exception):
    """Base exception for all payment layer failures."""

    def __init__(
        self,
        message: str,
        kind: ErrorKind = ErrorKind.PAYMENT_ERROR,
        details: Optional[Any] = None,
    ):
        super().__init__(message)
        self.message = message
        self.kind = kind
        self.details = details

    @property
    def code(self) -> str:
        return self.kind.value

    def to_error(self) -> GatewayError:
        return GatewayError(kind=self.kind, message=self.message, details=self.details)

    def __repr__(self) -> str:
        return f"PaymentException(kind={self.kind.value}, message={self.message!r})"


def configuration_error(message: str, **details: Any) -> PaymentException:
    """Missing credential, unknown gateway name, gateway not ready."""
    return PaymentException(message, ErrorKind.PAYMENT_CONFIGURATION_ERROR, details or None)


def unsupported_currency(currency: str, supported: Optional[list[str]] = None) -> PaymentException:
    if supported:
        message = f"Currency '{currency}' is not supported. Supported currencies: {', '.join(supported)}"
    else:
        message = f"Currency '{currency}' is not supported"
    return PaymentException(
        message,
        ErrorKind.UNSUPPORTED_CURRENCY,
        {"currency": currency, "supported_currencies": supported},
    )


def unsupported_channel(channel: str, supported: Optional[list[str]] = None) -> PaymentException:
    if supported:
        message = f"Payment channel '{channel}' is not supported. Supported channels: {', '.join(supported)}"
    else:
        message = f"Payment channel '{channel}' is not supported"
    return PaymentException(
        message,
        ErrorKind.UNSUPPORTED_PAYMENT_CHANNEL,
        {"channel": channel, "supported_channels": supported},
    )


def validation_error(message: str, field: Optional[str] = None, **details: Any) -> PaymentException:
    return PaymentException(message, ErrorKind.PAYMENT_VALIDATION_ERROR, {"field": field, **details})


def invalid_response(
    message: str = "Payment API returned an invalid response structure",
    response_data: Optional[Any] = None,
    status_code: Optional[int] = None,
) -> PaymentException:
    return PaymentException(
        message,
        ErrorKind.PAYMENT_INVALID_RESPONSE_ERROR,
        {"status_code": status_code, "response": response_data},
    )


def payment_not_found(reference: str, message: Optional[str] = None) -> PaymentException:
    return PaymentException(
        message or f"Payment with reference '{reference}' not found",
        ErrorKind.PAYMENT_NOT_FOUND,
        {"reference": reference},
    )


def duplicate_payment(reference: str, **details: Any) -> PaymentException:
    return PaymentException(
        f"Payment with reference '{reference}' has already been processed",
        ErrorKind.DUPLICATE_PAYMENT,
        {"reference": reference, **details},
    )


def invalid_refund_amount(refund_amount: Any, payment_amount: Any, **details: Any) -> PaymentException:
    return PaymentException(
        f"Refund amount {refund_amount} exceeds payment amount {payment_amount}",
        ErrorKind.INVALID_REFUND_AMOUNT,
        {"refund_amount": refund_amount, "payment_amount": payment_amount, **details},
    )


def not_refundable(reference: str, reason: Optional[str] = None) -> PaymentException:
    message = f"Payment '{reference}' cannot be refunded"
    if reason:
        message = f"{message}: {reason}"
    return PaymentException(
        message,
        ErrorKind.PAYMENT_NOT_REFUNDABLE,
        {"reference": reference, "reason": reason},
    )
