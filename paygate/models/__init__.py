from paygate.models.enums import AmountUnit, Currency, ErrorKind, PaymentChannel, PaymentStatus
from paygate.models.payment import (
    CancelPaymentRequest,
    CancelPaymentResponse,
    CardAuthorization,
    Customer,
    GatewayError,
    GatewayRegistration,
    GetPaymentRequest,
    GetPaymentResponse,
    InitiatePaymentRequest,
    InitiatePaymentResponse,
    Money,
    PaymentCustomer,
    PaymentResponse,
    RefundPaymentRequest,
    RefundPaymentResponse,
    VerifyPaymentRequest,
    VerifyPaymentResponse,
)

__all__ = [
    "AmountUnit",
    "Currency",
    "ErrorKind",
    "PaymentChannel",
    "PaymentStatus",
    "Money",
    "Customer",
    "GatewayError",
    "GatewayRegistration",
    "InitiatePaymentRequest",
    "VerifyPaymentRequest",
    "GetPaymentRequest",
    "RefundPaymentRequest",
    "CancelPaymentRequest",
    "PaymentResponse",
    "InitiatePaymentResponse",
    "VerifyPaymentResponse",
    "GetPaymentResponse",
    "RefundPaymentResponse",
    "CancelPaymentResponse",
    "PaymentCustomer",
    "CardAuthorization",
]
