"""Gateway configuration via ``PAYGATE_``-prefixed environment variables."""

from typing import Any, Optional

from pydantic_settings import BaseSettings

from paygate.models.payment import GatewayRegistration

DEFAULT_TIMEOUT_SECONDS = 30.0

PAYSTACK_BASE_URL = "https://api.paystack.co"
FLUTTERWAVE_BASE_URL = "https://api.flutterwave.com/v3"
STRIPE_BASE_URL = "https://api.stripe.com/v1"


class Settings(BaseSettings):
    log_level: str = "INFO"
    default_gateway: Optional[str] = None
    enable_fallback: bool = False
    request_timeout: float = DEFAULT_TIMEOUT_SECONDS
    debug: bool = False

    paystack_secret_key: Optional[str] = None
    paystack_public_key: Optional[str] = None
    paystack_base_url: str = PAYSTACK_BASE_URL
    paystack_enabled: bool = True
    paystack_priority: int = 0

    flutterwave_secret_key: Optional[str] = None
    flutterwave_public_key: Optional[str] = None
    flutterwave_base_url: str = FLUTTERWAVE_BASE_URL
    flutterwave_enabled: bool = True
    flutterwave_priority: int = 0

    stripe_secret_key: Optional[str] = None
    stripe_public_key: Optional[str] = None
    stripe_base_url: str = STRIPE_BASE_URL
    stripe_api_version: Optional[str] = None
    stripe_enabled: bool = True
    stripe_priority: int = 0

    model_config = {
        "env_prefix": "PAYGATE_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    def _gateway_config(self, prefix: str) -> dict[str, Any]:
        return {
            "secret_key": getattr(self, f"{prefix}_secret_key"),
            "public_key": getattr(self, f"{prefix}_public_key"),
            "base_url": getattr(self, f"{prefix}_base_url"),
            "timeout": self.request_timeout,
            "debug": self.debug,
        }

    def gateway_registrations(self) -> list[GatewayRegistration]:
        """
        One registration per processor that has a secret key configured.

        Processors without a key are left out so the manager never tries
        to construct an adapter that is bound to fail.
        """
        registrations = []
        for name in ("paystack", "flutterwave", "stripe"):
            config = self._gateway_config(name)
            if not config["secret_key"]:
                continue
            if name == "stripe" and self.stripe_api_version:
                config["api_version"] = self.stripe_api_version
            registrations.append(
                GatewayRegistration(
                    name=name,
                    config=config,
                    enabled=getattr(self, f"{name}_enabled"),
                    priority=getattr(self, f"{name}_priority"),
                )
            )
        return registrations


settings = Settings()
