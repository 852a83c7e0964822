"""
Audit trail for gateway operations.

Every completed payment operation gets one ``AUDIT`` log line with:
  - Gateway (which processor handled it)
  - Reference (the caller-visible transaction reference)
  - Action (what happened)
  - Details (status, error code, amounts)

The layer does not persist anything; shipping these lines somewhere
durable is the host application's logging configuration's job.
"""

import json
import logging
from typing import Any, Optional

logger = logging.getLogger("paygate.audit")


def _dump(details: Optional[dict[str, Any]]) -> str:
    if not details:
        return ""
    return json.dumps(details, default=str)[:200]


def log_event(
    action: str,
    gateway: Optional[str] = None,
    reference: Optional[str] = None,
    details: Optional[dict[str, Any]] = None,
) -> None:
    """
    Emit an audit entry.

    Args:
        action: What happened (e.g. "initiate_completed", "refund_failed").
        gateway: Name of the gateway that handled the call.
        reference: The payment reference the event relates to.
        details: Arbitrary context (serialized to JSON, truncated).
    """
    logger.info(
        "AUDIT | gateway=%s reference=%s action=%s | %s",
        gateway or "-",
        reference or "-",
        action,
        _dump(details),
    )


def _outcome_details(response: Any) -> dict[str, Any]:
    """Summarize a payment response for the audit line."""
    details: dict[str, Any] = {"success": response.success}
    status = getattr(response, "status", None)
    if status is not None:
        details["status"] = status.value
    if response.error is not None:
        details["error"] = response.error.code
        details["message"] = response.error.message
    return details


def log_outcome(operation: str, gateway: str, reference: Optional[str], response: Any) -> None:
    """Audit a finished payment operation as ``<operation>_completed`` or ``<operation>_failed``."""
    action = f"{operation}_completed" if response.success else f"{operation}_failed"
    log_event(action, gateway=gateway, reference=reference, details=_outcome_details(response))
