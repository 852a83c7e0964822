"""Tests for the audit trail."""

import logging

from paygate.audit.logger import log_event, log_outcome
from paygate.models.enums import ErrorKind, PaymentStatus
from paygate.models.payment import GatewayError, VerifyPaymentResponse


class TestAuditLog:
    def test_success_outcome(self, caplog):
        response = VerifyPaymentResponse(success=True, status=PaymentStatus.SUCCESS)
        with caplog.at_level(logging.INFO, logger="paygate.audit"):
            log_outcome("verify", "Paystack", "REF-1", response)

        line = caplog.records[-1].getMessage()
        assert "gateway=Paystack reference=REF-1 action=verify_completed" in line
        assert '"status": "success"' in line

    def test_failed_outcome_includes_error_code(self, caplog):
        response = VerifyPaymentResponse.failure(GatewayError(ErrorKind.PAYMENT_GATEWAY_TIMEOUT, "timed out"))
        with caplog.at_level(logging.INFO, logger="paygate.audit"):
            log_outcome("verify", "Stripe", "REF-2", response)

        line = caplog.records[-1].getMessage()
        assert "action=verify_failed" in line
        assert "PAYMENT_GATEWAY_TIMEOUT" in line

    def test_details_are_truncated(self, caplog):
        with caplog.at_level(logging.INFO, logger="paygate.audit"):
            log_event("note", details={"blob": "x" * 1000})

        message = caplog.records[-1].getMessage()
        assert "gateway=- reference=-" in message
        assert len(message.split(" | ", 2)[2]) == 200
