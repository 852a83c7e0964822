"""
Abstract payment gateway interface.

Every processor adapter (Paystack, Flutterwave, Stripe) implements this
interface identically, even where the underlying processor support
differs. Callers, including the manager, depend only on this contract and
never branch on processor name.
"""

from abc import ABC, abstractmethod

from paygate.models.payment import (
    CancelPaymentRequest,
    CancelPaymentResponse,
    GetPaymentRequest,
    GetPaymentResponse,
    InitiatePaymentRequest,
    InitiatePaymentResponse,
    RefundPaymentRequest,
    RefundPaymentResponse,
    VerifyPaymentRequest,
    VerifyPaymentResponse,
)


class PaymentGateway(ABC):
    """
    Unified contract for a single payment processor.

    The five payment operations never raise for operational failures;
    they return a response with ``success=False`` and a structured
    ``error``. Only construction (missing credentials) raises.
    """

    @abstractmethod
    async def initiate_payment(self, request: InitiatePaymentRequest) -> InitiatePaymentResponse:
        """
        Start a payment and return whatever redirect or client token the
        processor provides. ``authorization_url`` may be None for
        client-secret flows.
        """
        ...

    @abstractmethod
    async def verify_payment(self, request: VerifyPaymentRequest) -> VerifyPaymentResponse:
        """Look up a payment by reference and map its status, channel and customer."""
        ...

    @abstractmethod
    async def get_payment(self, request: GetPaymentRequest) -> GetPaymentResponse:
        """Verify, plus card/authorization details when the processor returns them."""
        ...

    @abstractmethod
    async def refund_payment(self, request: RefundPaymentRequest) -> RefundPaymentResponse:
        """Full refund when no amount is given, partial otherwise."""
        ...

    @abstractmethod
    async def cancel_payment(self, request: CancelPaymentRequest) -> CancelPaymentResponse:
        """
        Cancel a pending payment.

        Processors without a cancel endpoint report the current status
        unchanged; success does not mean funds never moved.
        """
        ...

    @abstractmethod
    def get_gateway_name(self) -> str:
        ...

    @abstractmethod
    def is_ready(self) -> bool:
        """True iff the required credential is present. Never touches the network."""
        ...

    async def aclose(self) -> None:
        """Release network resources held by the adapter."""

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()
