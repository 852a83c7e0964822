"""Shared test fixtures."""

import json
from decimal import Decimal
from typing import Any, Callable, Optional

import httpx
import pytest

from paygate.models.enums import Currency, ErrorKind, PaymentStatus
from paygate.models.payment import (
    CancelPaymentResponse,
    Customer,
    GatewayError,
    GetPaymentResponse,
    InitiatePaymentRequest,
    InitiatePaymentResponse,
    Money,
    RefundPaymentResponse,
    VerifyPaymentResponse,
)
from paygate.providers.base import PaymentGateway


class Recorder:
    """Routes requests to canned responses and keeps every request it saw."""

    def __init__(self, routes: dict[tuple[str, str], Any]):
        # (method, path) -> httpx.Response | callable(request) -> httpx.Response
        self.routes = routes
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get((request.method, request.url.path))
        if route is None:
            return httpx.Response(404, json={"status": False, "message": "No route"})
        if callable(route):
            return route(request)
        return route

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]

    def last_json(self) -> dict[str, Any]:
        return json.loads(self.last.content)


def raise_timeout(request: httpx.Request) -> httpx.Response:
    raise httpx.ReadTimeout("timed out", request=request)


class StubGateway(PaymentGateway):
    """In-memory gateway for manager and lookup tests."""

    def __init__(
        self,
        name: str,
        ready: bool = True,
        known: Optional[set[str]] = None,
        lookup_error: Optional[GatewayError] = None,
    ):
        self.name = name
        self.ready = ready
        self.known = known or set()
        self.lookup_error = lookup_error
        self.calls: list[tuple[str, str]] = []
        self.closed = False

    def get_gateway_name(self) -> str:
        return self.name

    def is_ready(self) -> bool:
        return self.ready

    async def aclose(self) -> None:
        self.closed = True

    def _lookup(self, operation: str, reference: str, response_type):
        self.calls.append((operation, reference))
        if reference in self.known:
            return response_type(success=True, reference=reference, status=PaymentStatus.SUCCESS)
        if self.lookup_error is not None:
            return response_type.failure(self.lookup_error)
        return response_type.failure(
            GatewayError(ErrorKind.PAYMENT_NOT_FOUND, f"{reference} not found", {"reference": reference})
        )

    async def initiate_payment(self, request):
        self.calls.append(("initiate", request.reference))
        return InitiatePaymentResponse(success=True, reference=request.reference, status=PaymentStatus.PENDING)

    async def verify_payment(self, request):
        return self._lookup("verify", request.reference, VerifyPaymentResponse)

    async def get_payment(self, request):
        return self._lookup("get", request.reference, GetPaymentResponse)

    async def refund_payment(self, request):
        self.calls.append(("refund", request.reference))
        return RefundPaymentResponse(success=True, reference=request.reference, status=PaymentStatus.SUCCESS)

    async def cancel_payment(self, request):
        self.calls.append(("cancel", request.reference))
        return CancelPaymentResponse(success=True, reference=request.reference, status=PaymentStatus.PENDING)


@pytest.fixture
def make_initiate_request() -> Callable[..., InitiatePaymentRequest]:
    def _make(amount="50.00", currency=Currency.NGN, email="ada@example.com", **kwargs):
        return InitiatePaymentRequest(
            amount=Money(amount=Decimal(amount) if isinstance(amount, str) else amount, currency=currency),
            customer=Customer(email=email, first_name="Ada", last_name="Obi", phone="+2348000000000"),
            **kwargs,
        )

    return _make
