"""Tests for the Paystack adapter against a mocked REST surface."""

from decimal import Decimal

import httpx
import pytest

from conftest import Recorder, raise_timeout
from paygate.exceptions import PaymentException
from paygate.models.enums import Currency, ErrorKind, PaymentChannel, PaymentStatus
from paygate.models.payment import (
    CancelPaymentRequest,
    GetPaymentRequest,
    Money,
    RefundPaymentRequest,
    VerifyPaymentRequest,
)
from paygate.providers.paystack import PaystackGateway

TRANSACTION = {
    "id": 4099260516,
    "reference": "PAY_REF_1",
    "status": "success",
    "amount": 5000,
    "currency": "NGN",
    "channel": "card",
    "paid_at": "2024-03-01T10:15:00.000Z",
    "created_at": "2024-03-01T10:14:00.000Z",
    "metadata": "",
    "customer": {"email": "ada@example.com", "first_name": "Ada", "last_name": "Obi"},
    "authorization": {
        "authorization_code": "AUTH_abc",
        "bin": "408408",
        "last4": "4081",
        "exp_month": "12",
        "exp_year": "2030",
        "card_type": "visa ",
        "bank": "TEST BANK",
        "country_code": "NG",
        "channel": "card",
        "reusable": True,
    },
}


def gateway_for(routes) -> tuple[PaystackGateway, Recorder]:
    recorder = Recorder(routes)
    return PaystackGateway(secret_key="sk_test_xxx", transport=recorder.transport), recorder


class TestConstruction:
    def test_missing_secret_key_raises(self):
        with pytest.raises(PaymentException) as exc_info:
            PaystackGateway(secret_key="")
        assert exc_info.value.kind == ErrorKind.PAYMENT_CONFIGURATION_ERROR
        assert exc_info.value.message == "Secret key is required for Paystack"

    def test_ready_with_key(self):
        gateway = PaystackGateway(secret_key="sk_test_xxx")
        assert gateway.is_ready()
        assert gateway.get_gateway_name() == "Paystack"


class TestInitiatePayment:
    @pytest.mark.asyncio
    async def test_sends_kobo_and_returns_pending(self, make_initiate_request):
        gateway, recorder = gateway_for({
            ("POST", "/transaction/initialize"): httpx.Response(200, json={
                "status": True,
                "message": "Authorization URL created",
                "data": {
                    "authorization_url": "https://checkout.paystack.com/abc",
                    "access_code": "abc",
                    "reference": "ORDER-1",
                },
            }),
        })
        request = make_initiate_request(
            reference="ORDER-1",
            callback_url="https://shop.test/return",
            channels=(PaymentChannel.CARD, PaymentChannel.BANK_TRANSFER),
            metadata={"order_id": 17},
        )

        result = await gateway.initiate_payment(request)

        assert result.success
        assert result.status == PaymentStatus.PENDING
        assert result.authorization_url == "https://checkout.paystack.com/abc"
        assert result.access_code == "abc"
        assert result.amount is request.amount

        body = recorder.last_json()
        assert body["amount"] == 5000
        assert body["email"] == "ada@example.com"
        assert body["currency"] == "NGN"
        assert body["reference"] == "ORDER-1"
        assert body["callback_url"] == "https://shop.test/return"
        assert body["channels"] == ["card", "bank_transfer"]
        assert body["metadata"]["order_id"] == 17
        assert body["metadata"]["customer_first_name"] == "Ada"
        assert recorder.last.headers["Authorization"] == "Bearer sk_test_xxx"

    @pytest.mark.asyncio
    async def test_generates_reference_when_absent(self, make_initiate_request):
        gateway, recorder = gateway_for({
            ("POST", "/transaction/initialize"): lambda request: httpx.Response(200, json={
                "status": True,
                "data": {"authorization_url": "https://checkout.paystack.com/x", "access_code": "x"},
            }),
        })

        result = await gateway.initiate_payment(make_initiate_request())

        assert result.success
        assert result.reference.startswith("PAY_")
        assert recorder.last_json()["reference"] == result.reference

    @pytest.mark.asyncio
    async def test_below_minimum_is_returned_not_raised(self, make_initiate_request):
        gateway, recorder = gateway_for({})

        result = await gateway.initiate_payment(make_initiate_request(amount="49.99"))

        assert not result.success
        assert result.error.code == "PAYMENT_VALIDATION_ERROR"
        assert result.error.message == "Amount is below minimum of 50.00 NGN"
        assert recorder.requests == []

    @pytest.mark.asyncio
    async def test_unsupported_currency(self, make_initiate_request):
        gateway, recorder = gateway_for({})
        result = await gateway.initiate_payment(make_initiate_request(amount="100", currency="JPY"))
        assert result.error.kind == ErrorKind.UNSUPPORTED_CURRENCY
        assert recorder.requests == []

    @pytest.mark.asyncio
    async def test_kes_is_sent_in_cents(self, make_initiate_request):
        gateway, recorder = gateway_for({
            ("POST", "/transaction/initialize"): httpx.Response(200, json={
                "status": True,
                "message": "Authorization URL created",
                "data": {"authorization_url": "https://checkout.paystack.com/kes", "access_code": "kes", "reference": "KES-1"},
            }),
        })
        result = await gateway.initiate_payment(
            make_initiate_request(amount="500", currency=Currency.KES, reference="KES-1")
        )

        assert result.success
        body = recorder.last_json()
        assert body["amount"] == 50000
        assert body["currency"] == "KES"

    @pytest.mark.asyncio
    async def test_kes_below_minimum(self, make_initiate_request):
        gateway, recorder = gateway_for({})
        result = await gateway.initiate_payment(make_initiate_request(amount="2.99", currency=Currency.KES))
        assert result.error.message == "Amount is below minimum of 3.00 KES"
        assert recorder.requests == []

    @pytest.mark.asyncio
    async def test_invalid_email(self, make_initiate_request):
        gateway, _ = gateway_for({})
        result = await gateway.initiate_payment(make_initiate_request(email="not-an-email"))
        assert result.error.kind == ErrorKind.PAYMENT_VALIDATION_ERROR
        assert result.error.details["field"] == "email"

    @pytest.mark.asyncio
    async def test_unsuccessful_payload_is_invalid_response(self, make_initiate_request):
        gateway, _ = gateway_for({
            ("POST", "/transaction/initialize"): httpx.Response(200, json={"status": False, "message": "Duplicate"}),
        })
        result = await gateway.initiate_payment(make_initiate_request())
        assert result.error.kind == ErrorKind.PAYMENT_INVALID_RESPONSE_ERROR
        assert result.error.message == "Duplicate"

    @pytest.mark.asyncio
    async def test_timeout_is_returned(self, make_initiate_request):
        gateway, _ = gateway_for({("POST", "/transaction/initialize"): raise_timeout})
        result = await gateway.initiate_payment(make_initiate_request())
        assert result.success is False
        assert result.error.code == "PAYMENT_GATEWAY_TIMEOUT"


class TestVerifyAndGet:
    @pytest.mark.asyncio
    async def test_verify_maps_transaction(self):
        gateway, recorder = gateway_for({
            ("GET", "/transaction/verify/PAY_REF_1"): httpx.Response(200, json={"status": True, "data": TRANSACTION}),
        })

        result = await gateway.verify_payment(VerifyPaymentRequest(reference="PAY_REF_1"))

        assert result.success
        assert result.status == PaymentStatus.SUCCESS
        assert result.amount == Money(amount=Decimal("50"), currency=Currency.NGN)
        assert result.channel == PaymentChannel.CARD
        assert result.gateway_transaction_id == "4099260516"
        assert result.paid_at.year == 2024
        assert result.customer.email == "ada@example.com"
        assert result.metadata == {}

    @pytest.mark.asyncio
    async def test_get_includes_authorization(self):
        gateway, _ = gateway_for({
            ("GET", "/transaction/PAY_REF_1"): httpx.Response(200, json={"status": True, "data": TRANSACTION}),
        })

        result = await gateway.get_payment(GetPaymentRequest(reference="PAY_REF_1"))

        assert result.success
        assert result.created_at is not None
        assert result.authorization.last4 == "4081"
        assert result.authorization.bin == "408408"
        assert result.authorization.bank == "TEST BANK"
        assert result.authorization.reusable is True

    @pytest.mark.asyncio
    async def test_not_found_is_gateway_error(self):
        gateway, _ = gateway_for({
            ("GET", "/transaction/verify/missing"): httpx.Response(
                400, json={"status": False, "message": "Transaction reference not found"}
            ),
        })

        result = await gateway.verify_payment(VerifyPaymentRequest(reference="missing"))

        assert not result.success
        assert result.error.kind == ErrorKind.PAYMENT_GATEWAY_ERROR
        assert result.error.details["status_code"] == 400
        assert result.error.message == "Transaction reference not found"

    @pytest.mark.asyncio
    async def test_unknown_status_is_pending(self):
        data = {**TRANSACTION, "status": "send_birthday"}
        gateway, _ = gateway_for({
            ("GET", "/transaction/verify/PAY_REF_1"): httpx.Response(200, json={"status": True, "data": data}),
        })
        result = await gateway.verify_payment(VerifyPaymentRequest(reference="PAY_REF_1"))
        assert result.status == PaymentStatus.PENDING


class TestRefund:
    @pytest.mark.asyncio
    async def test_partial_refund(self):
        gateway, recorder = gateway_for({
            ("POST", "/refund"): httpx.Response(200, json={
                "status": True,
                "data": {"id": 3018284, "amount": 2000, "currency": "NGN", "status": "pending"},
            }),
        })

        result = await gateway.refund_payment(RefundPaymentRequest(
            reference="PAY_REF_1",
            amount=Money(amount=Decimal("50"), currency=Currency.NGN),
            reason="Customer request",
        ))

        assert result.success
        assert result.refund_reference == "3018284"
        assert result.amount.amount == Decimal("20")
        assert result.status == PaymentStatus.PENDING
        assert recorder.last_json() == {"transaction": "PAY_REF_1", "amount": 5000, "merchant_note": "Customer request"}

    @pytest.mark.asyncio
    async def test_full_refund_omits_amount(self):
        gateway, recorder = gateway_for({
            ("POST", "/refund"): httpx.Response(200, json={
                "status": True,
                "data": {"id": 1, "amount": 5000, "currency": "NGN", "status": "processed"},
            }),
        })

        result = await gateway.refund_payment(RefundPaymentRequest(reference="PAY_REF_1"))

        assert result.status == PaymentStatus.SUCCESS
        assert recorder.last_json() == {"transaction": "PAY_REF_1"}


class TestCancel:
    @pytest.mark.asyncio
    async def test_cancel_reports_current_status(self):
        data = {**TRANSACTION, "status": "abandoned"}
        gateway, recorder = gateway_for({
            ("GET", "/transaction/verify/PAY_REF_1"): httpx.Response(200, json={"status": True, "data": data}),
        })

        result = await gateway.cancel_payment(CancelPaymentRequest(reference="PAY_REF_1", reason="changed mind"))

        assert result.success
        assert result.status == PaymentStatus.ABANDONED
        assert result.metadata == {"reason": "changed mind"}
        assert [r.method for r in recorder.requests] == ["GET"]
