"""
Error classification shared by every adapter.

Turns whatever an operation raised into a ``GatewayError`` so callers never
special-case processors:

  - httpx timeout                       → PAYMENT_GATEWAY_TIMEOUT
  - HTTP error status / transport error → PAYMENT_GATEWAY_ERROR
                                           (details: status_code, response)
  - PaymentException                    → its own kind, message verbatim
  - anything else                       → UNKNOWN_ERROR
"""

import logging
from typing import Any, Callable, Optional

import httpx

from paygate.exceptions import PaymentException
from paygate.models.enums import ErrorKind
from paygate.models.payment import GatewayError

logger = logging.getLogger("paygate.classify")

MessageExtractor = Callable[[Any], Optional[str]]


def default_message(body: Any) -> Optional[str]:
    """Paystack and Flutterwave both put a top-level ``message`` in error bodies."""
    if isinstance(body, dict):
        message = body.get("message")
        if isinstance(message, str) and message:
            return message
    return None


def response_body(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text or None


def classify_error(
    exc: BaseException,
    fallback_message: str,
    extract_message: MessageExtractor = default_message,
    details_from_body: Optional[Callable[[Any], dict[str, Any]]] = None,
) -> GatewayError:
    """
    Classify an exception raised during a payment operation.

    Args:
        exc: The exception that interrupted the operation.
        fallback_message: Used when neither the processor nor the exception
            supplies a message (e.g. "Failed to verify payment").
        extract_message: Pulls a human-readable message out of a processor
            error body.
        details_from_body: Adds processor-specific fields (e.g. Stripe's
            decline code) to the error details.
    """
    if isinstance(exc, httpx.TimeoutException):
        logger.warning("Gateway timeout: %s", exc)
        return GatewayError(
            kind=ErrorKind.PAYMENT_GATEWAY_TIMEOUT,
            message="Payment gateway request timed out",
            details={"status_code": None, "response": None},
        )

    if isinstance(exc, httpx.HTTPStatusError):
        body = response_body(exc.response)
        details: dict[str, Any] = {"status_code": exc.response.status_code, "response": body}
        if details_from_body is not None:
            details.update(details_from_body(body))
        message = extract_message(body) or fallback_message
        logger.warning("Gateway returned HTTP %d: %s", exc.response.status_code, message)
        return GatewayError(kind=ErrorKind.PAYMENT_GATEWAY_ERROR, message=message, details=details)

    if isinstance(exc, httpx.HTTPError):
        logger.warning("Gateway transport error: %s", exc)
        return GatewayError(
            kind=ErrorKind.PAYMENT_GATEWAY_ERROR,
            message=str(exc) or fallback_message,
            details={"status_code": None, "response": None},
        )

    if isinstance(exc, PaymentException):
        return exc.to_error()

    logger.error("Unexpected gateway error: %s", exc, exc_info=exc)
    return GatewayError(
        kind=ErrorKind.UNKNOWN_ERROR,
        message=str(exc) or fallback_message,
        details={"type": type(exc).__name__},
    )
