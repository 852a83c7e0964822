"""
Build a ``GatewayManager`` from settings.

Maps processor names to the adapter classes that implement them. Each
factory receives the registration's config dict; processors without a
configured secret key never get a registration and are skipped.
"""

from typing import Any, Optional

from paygate.config import DEFAULT_TIMEOUT_SECONDS, Settings, settings as default_settings
from paygate.providers.base import PaymentGateway
from paygate.providers.flutterwave import FlutterwaveGateway
from paygate.providers.paystack import PaystackGateway
from paygate.providers.stripe import StripeGateway
from paygate.routing.manager import GatewayFactory, GatewayManager


def paystack_factory(config: dict[str, Any]) -> PaymentGateway:
    return PaystackGateway(
        secret_key=config.get("secret_key"),
        public_key=config.get("public_key"),
        base_url=config.get("base_url"),
        timeout=config.get("timeout", DEFAULT_TIMEOUT_SECONDS),
        debug=config.get("debug", False),
    )


def flutterwave_factory(config: dict[str, Any]) -> PaymentGateway:
    return FlutterwaveGateway(
        secret_key=config.get("secret_key"),
        public_key=config.get("public_key"),
        base_url=config.get("base_url"),
        timeout=config.get("timeout", DEFAULT_TIMEOUT_SECONDS),
        debug=config.get("debug", False),
    )


def stripe_factory(config: dict[str, Any]) -> PaymentGateway:
    return StripeGateway(
        secret_key=config.get("secret_key"),
        public_key=config.get("public_key"),
        base_url=config.get("base_url"),
        timeout=config.get("timeout", DEFAULT_TIMEOUT_SECONDS),
        debug=config.get("debug", False),
        api_version=config.get("api_version"),
    )


# Registry of processor name -> factory
GATEWAY_FACTORIES: dict[str, GatewayFactory] = {
    "paystack": paystack_factory,
    "flutterwave": flutterwave_factory,
    "stripe": stripe_factory,
}


def build_manager(settings: Optional[Settings] = None) -> GatewayManager:
    """
    Create a manager with every configured processor registered.

    Args:
        settings: Defaults to the module-level settings read from the
            environment.

    Returns:
        A manager whose default gateway and fallback flag come from
        settings. The default is only applied if that gateway was built.
    """
    settings = settings or default_settings
    manager = GatewayManager(
        registrations=settings.gateway_registrations(),
        enable_fallback=settings.enable_fallback,
    )
    for name, factory in GATEWAY_FACTORIES.items():
        manager.register_factory(name, factory)

    if settings.default_gateway and manager.has_gateway(settings.default_gateway):
        manager.set_default_gateway(settings.default_gateway)
    return manager
