"""
paygate: one payment interface over Paystack, Flutterwave and Stripe.

Check which gateways the environment configures:
    python -m paygate
"""

import logging
from typing import Optional

from paygate.config import settings
from paygate.factory import build_manager

logger = logging.getLogger("paygate")


def configure_logging(level: Optional[str] = None) -> None:
    logging.basicConfig(
        level=getattr(logging, (level or settings.log_level).upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def main() -> int:
    configure_logging()
    manager = build_manager(settings)

    available = manager.get_available_gateways()
    if not available:
        logger.warning("No payment gateways configured (set PAYGATE_PAYSTACK_SECRET_KEY and friends)")
        return 1

    ready = set(manager.get_ready_gateways())
    for name in available:
        logger.info(
            "Gateway %-12s priority=%-4d ready=%s",
            name,
            manager.priority_of(name),
            "yes" if name in ready else "no",
        )
    logger.info(
        "Default gateway: %s | fallback: %s",
        manager.default_gateway_name or available[0],
        "enabled" if manager.fallback_enabled else "disabled",
    )
    return 0
