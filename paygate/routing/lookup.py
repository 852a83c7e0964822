"""
Find a payment when the caller does not know which gateway handled it.

Gateways are tried one at a time in registration order and the scan stops
at the first successful response. Verification can trigger settlement
bookkeeping on some processors, so calls are never fanned out.

A gateway answering "not found" just moves the scan on. A hard error
(timeout, 5xx, transport failure, unknown error) is recorded and skipped,
or ends the scan when ``stop_on_error`` is set.
"""

import logging
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Optional, TypeVar

from paygate.exceptions import PaymentException
from paygate.models.enums import ErrorKind
from paygate.models.payment import (
    GatewayError,
    GetPaymentRequest,
    GetPaymentResponse,
    PaymentResponse,
    VerifyPaymentRequest,
    VerifyPaymentResponse,
)
from paygate.providers.base import PaymentGateway
from paygate.routing.manager import GatewayManager

logger = logging.getLogger("paygate.lookup")

R = TypeVar("R", bound=PaymentResponse)


@dataclass
class LookupResult:
    """Which gateway answered (None if none did), its response, and the names tried."""

    gateway_name: Optional[str]
    response: PaymentResponse
    tried: list[str] = field(default_factory=list)

    @property
    def found(self) -> bool:
        return self.gateway_name is not None and self.response.success


def is_hard_error(error: Optional[GatewayError]) -> bool:
    """True for failures that say nothing about whether the payment exists."""
    if error is None:
        return False
    if error.kind in (ErrorKind.PAYMENT_GATEWAY_TIMEOUT, ErrorKind.UNKNOWN_ERROR):
        return True
    if error.kind is ErrorKind.PAYMENT_GATEWAY_ERROR:
        status_code = error.details.get("status_code") if isinstance(error.details, dict) else None
        return status_code is None or status_code >= 500
    return False


async def _scan(
    manager: GatewayManager,
    reference: str,
    call: Callable[[PaymentGateway], Awaitable[R]],
    response_type: type[R],
    stop_on_error: bool,
) -> LookupResult:
    tried: list[str] = []
    last_hard_error: Optional[GatewayError] = None

    for name in manager.get_ready_gateways():
        try:
            gateway = manager.get_gateway(name)
        except PaymentException:
            # removed or no longer ready since the snapshot
            continue
        tried.append(name)
        response = await call(gateway)

        if response.success:
            logger.info("Payment %s found on gateway '%s'", reference, name)
            return LookupResult(gateway_name=name, response=response, tried=tried)

        if is_hard_error(response.error):
            last_hard_error = response.error
            logger.warning(
                "Gateway '%s' failed looking up %s: %s", name, reference, response.error.message
            )
            if stop_on_error:
                return LookupResult(gateway_name=name, response=response, tried=tried)
            continue

        logger.debug("Payment %s not found on gateway '%s'", reference, name)

    error = GatewayError(
        kind=ErrorKind.PAYMENT_NOT_FOUND,
        message=f"Payment with reference '{reference}' not found on any gateway",
        details={
            "reference": reference,
            "tried_gateways": tried,
            "last_error": last_hard_error.to_dict() if last_hard_error else None,
        },
    )
    return LookupResult(gateway_name=None, response=response_type.failure(error), tried=tried)


async def verify_across_gateways(
    manager: GatewayManager, reference: str, stop_on_error: bool = False
) -> LookupResult:
    request = VerifyPaymentRequest(reference=reference)
    return await _scan(
        manager, reference, lambda gateway: gateway.verify_payment(request), VerifyPaymentResponse, stop_on_error
    )


async def get_across_gateways(
    manager: GatewayManager, reference: str, stop_on_error: bool = False
) -> LookupResult:
    request = GetPaymentRequest(reference=reference)
    return await _scan(
        manager, reference, lambda gateway: gateway.get_payment(request), GetPaymentResponse, stop_on_error
    )
