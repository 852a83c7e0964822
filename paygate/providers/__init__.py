from paygate.providers.base import PaymentGateway
from paygate.providers.flutterwave import FlutterwaveGateway
from paygate.providers.paystack import PaystackGateway
from paygate.providers.stripe import StripeGateway

__all__ = ["PaymentGateway", "PaystackGateway", "FlutterwaveGateway", "StripeGateway"]
