"""Unified payment gateway layer for Paystack, Flutterwave and Stripe."""

from paygate.exceptions import PaymentException
from paygate.factory import build_manager
from paygate.models import (
    Currency,
    Customer,
    GatewayError,
    GatewayRegistration,
    InitiatePaymentRequest,
    Money,
    PaymentChannel,
    PaymentStatus,
    RefundPaymentRequest,
)
from paygate.providers import FlutterwaveGateway, PaymentGateway, PaystackGateway, StripeGateway
from paygate.routing import GatewayManager, LookupResult, get_across_gateways, verify_across_gateways

__version__ = "0.1.0"

__all__ = [
    "Currency",
    "Customer",
    "GatewayError",
    "GatewayRegistration",
    "InitiatePaymentRequest",
    "Money",
    "PaymentChannel",
    "PaymentStatus",
    "RefundPaymentRequest",
    "PaymentException",
    "PaymentGateway",
    "PaystackGateway",
    "FlutterwaveGateway",
    "StripeGateway",
    "GatewayManager",
    "LookupResult",
    "verify_across_gateways",
    "get_across_gateways",
    "build_manager",
]
