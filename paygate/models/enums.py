"""Enumerations for the unified payment domain model."""

from enum import Enum


class Currency(str, Enum):
    """Currencies understood by at least one processor."""

    NGN = "NGN"
    USD = "USD"
    GHS = "GHS"
    ZAR = "ZAR"
    KES = "KES"
    EUR = "EUR"
    GBP = "GBP"
    XOF = "XOF"


class PaymentStatus(str, Enum):
    """Unified lifecycle states for a single payment."""

    PENDING = "pending"
    SUCCESS = "success"
    FAILED = "failed"
    ABANDONED = "abandoned"
    REVERSED = "reversed"


class PaymentChannel(str, Enum):
    """Unified payment channels."""

    CARD = "card"
    BANK = "bank"
    BANK_TRANSFER = "bank_transfer"
    USSD = "ussd"
    QR = "qr"
    MOBILE_MONEY = "mobile_money"
    EFT = "eft"
    APPLE_PAY = "apple_pay"
    PAYATTITUDE = "payattitude"


class AmountUnit(str, Enum):
    """Unit a processor expects amounts in on the wire."""

    MINOR = "minor"  # kobo, cents, pesewas
    MAJOR = "major"  # naira, dollars


class ErrorKind(str, Enum):
    """Closed set of failure kinds surfaced by gateways and the manager."""

    PAYMENT_ERROR = "PAYMENT_ERROR"
    PAYMENT_CONFIGURATION_ERROR = "PAYMENT_CONFIGURATION_ERROR"
    PAYMENT_VALIDATION_ERROR = "PAYMENT_VALIDATION_ERROR"
    UNSUPPORTED_CURRENCY = "UNSUPPORTED_CURRENCY"
    UNSUPPORTED_PAYMENT_CHANNEL = "UNSUPPORTED_PAYMENT_CHANNEL"
    PAYMENT_INVALID_RESPONSE_ERROR = "PAYMENT_INVALID_RESPONSE_ERROR"
    PAYMENT_NOT_FOUND = "PAYMENT_NOT_FOUND"
    DUPLICATE_PAYMENT = "DUPLICATE_PAYMENT"
    INVALID_REFUND_AMOUNT = "INVALID_REFUND_AMOUNT"
    PAYMENT_NOT_REFUNDABLE = "PAYMENT_NOT_REFUNDABLE"
    PAYMENT_GATEWAY_ERROR = "PAYMENT_GATEWAY_ERROR"
    PAYMENT_GATEWAY_TIMEOUT = "PAYMENT_GATEWAY_TIMEOUT"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"
