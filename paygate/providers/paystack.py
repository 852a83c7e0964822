"""
Paystack adapter (Naira-first processor).

REST surface:
  POST /transaction/initialize        (amount in kobo/cents)
  GET  /transaction/verify/{reference}
  GET  /transaction/{reference}
  POST /refund                        (transaction, amount?, merchant_note?)

Paystack has no cancel endpoint; ``cancel_payment`` verifies and reports
the current status unchanged.
"""

import logging
from typing import Any, Optional
from urllib.parse import quote

import httpx

from paygate.audit.logger import log_outcome
from paygate.config import DEFAULT_TIMEOUT_SECONDS, PAYSTACK_BASE_URL
from paygate.exceptions import configuration_error, invalid_response
from paygate.models.enums import PaymentChannel, PaymentStatus
from paygate.models.payment import (
    CancelPaymentRequest,
    CancelPaymentResponse,
    CardAuthorization,
    GetPaymentRequest,
    GetPaymentResponse,
    InitiatePaymentRequest,
    InitiatePaymentResponse,
    PaymentCustomer,
    RefundPaymentRequest,
    RefundPaymentResponse,
    VerifyPaymentRequest,
    VerifyPaymentResponse,
)
from paygate.providers.base import PaymentGateway
from paygate.providers.classify import classify_error
from paygate.providers.currencies import PAYSTACK_CURRENCIES, PAYSTACK_UNIT
from paygate.providers.http import build_client
from paygate.providers.normalize import (
    from_wire_amount,
    generate_reference,
    map_channel,
    map_channels,
    map_status,
    parse_metadata,
    parse_timestamp,
    require_customer_email,
    resolve_currency,
    sanitize_metadata,
    to_wire_amount,
)

logger = logging.getLogger("paygate.providers.paystack")

STATUS_MAP: dict[str, PaymentStatus] = {
    "success": PaymentStatus.SUCCESS,
    "failed": PaymentStatus.FAILED,
    "abandoned": PaymentStatus.ABANDONED,
    "reversed": PaymentStatus.REVERSED,
    "pending": PaymentStatus.PENDING,
    "ongoing": PaymentStatus.PENDING,
    "processing": PaymentStatus.PENDING,
    "queued": PaymentStatus.PENDING,
    # refund lifecycle
    "processed": PaymentStatus.SUCCESS,
}

CHANNEL_TO_PAYSTACK: dict[PaymentChannel, str] = {
    PaymentChannel.CARD: "card",
    PaymentChannel.BANK: "bank",
    PaymentChannel.BANK_TRANSFER: "bank_transfer",
    PaymentChannel.USSD: "ussd",
    PaymentChannel.QR: "qr",
    PaymentChannel.MOBILE_MONEY: "mobile_money",
    PaymentChannel.EFT: "eft",
    PaymentChannel.APPLE_PAY: "apple_pay",
    PaymentChannel.PAYATTITUDE: "payattitude",
}

CHANNEL_FROM_PAYSTACK: dict[str, PaymentChannel] = {v: k for k, v in CHANNEL_TO_PAYSTACK.items()}


class PaystackGateway(PaymentGateway):
    """Paystack REST adapter."""

    name = "Paystack"

    def __init__(
        self,
        secret_key: Optional[str],
        public_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        debug: bool = False,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        if not secret_key:
            raise configuration_error("Secret key is required for Paystack", gateway=self.name)

        self._secret_key = secret_key
        self.public_key = public_key
        self.base_url = base_url or PAYSTACK_BASE_URL
        self._client = build_client(
            self.base_url,
            headers={
                "Authorization": f"Bearer {secret_key}",
                "Content-Type": "application/json",
            },
            timeout=timeout,
            transport=transport,
            debug=debug,
            log=logger,
        )

    def get_gateway_name(self) -> str:
        return self.name

    def is_ready(self) -> bool:
        return bool(self._secret_key)

    async def aclose(self) -> None:
        await self._client.aclose()

    # ─── Operations ────────────────────────────────────────────────────

    async def initiate_payment(self, request: InitiatePaymentRequest) -> InitiatePaymentResponse:
        reference = request.reference or generate_reference("PAY")
        try:
            email = require_customer_email(request.customer.email)
            currency = resolve_currency(request.amount.currency, PAYSTACK_CURRENCIES)
            amount = to_wire_amount(request.amount, PAYSTACK_CURRENCIES, PAYSTACK_UNIT)

            payload: dict[str, Any] = {
                "amount": amount,
                "email": email,
                "currency": currency,
                "reference": reference,
                "metadata": sanitize_metadata({
                    **(request.metadata or {}),
                    "customer_first_name": request.customer.first_name,
                    "customer_last_name": request.customer.last_name,
                    "customer_phone": request.customer.phone,
                }),
            }
            if request.callback_url:
                payload["callback_url"] = request.callback_url
            channels = map_channels(request.channels, CHANNEL_TO_PAYSTACK)
            if channels:
                payload["channels"] = channels

            body = await self._post("/transaction/initialize", payload, "Failed to initialize payment")
            data = body["data"]
            result = InitiatePaymentResponse(
                success=True,
                reference=data.get("reference") or reference,
                authorization_url=data.get("authorization_url"),
                access_code=data.get("access_code"),
                amount=request.amount,
                status=PaymentStatus.PENDING,
                metadata=request.metadata,
                raw=body,
            )
        except Exception as exc:
            result = InitiatePaymentResponse.failure(classify_error(exc, "Failed to initiate payment"))

        log_outcome("initiate", self.name, reference, result)
        return result

    async def verify_payment(self, request: VerifyPaymentRequest) -> VerifyPaymentResponse:
        try:
            body = await self._get(
                f"/transaction/verify/{quote(request.reference, safe='')}",
                "Failed to verify payment",
            )
            data = body["data"]
            result = VerifyPaymentResponse(success=True, raw=body, **self._transaction_fields(data))
        except Exception as exc:
            result = VerifyPaymentResponse.failure(classify_error(exc, "Failed to verify payment"))

        log_outcome("verify", self.name, request.reference, result)
        return result

    async def get_payment(self, request: GetPaymentRequest) -> GetPaymentResponse:
        try:
            body = await self._get(
                f"/transaction/{quote(request.reference, safe='')}",
                "Failed to get payment",
            )
            data = body["data"]
            result = GetPaymentResponse(
                success=True,
                created_at=parse_timestamp(data.get("created_at") or data.get("createdAt")),
                authorization=self._authorization(data.get("authorization")),
                raw=body,
                **self._transaction_fields(data),
            )
        except Exception as exc:
            result = GetPaymentResponse.failure(classify_error(exc, "Failed to get payment"))

        log_outcome("get", self.name, request.reference, result)
        return result

    async def refund_payment(self, request: RefundPaymentRequest) -> RefundPaymentResponse:
        try:
            payload: dict[str, Any] = {"transaction": request.reference}
            if request.amount is not None:
                payload["amount"] = to_wire_amount(request.amount, PAYSTACK_CURRENCIES, PAYSTACK_UNIT)
            if request.reason:
                payload["merchant_note"] = request.reason

            body = await self._post("/refund", payload, "Failed to refund payment")
            data = body["data"]
            currency = data.get("currency") or (request.amount.currency if request.amount else "NGN")
            result = RefundPaymentResponse(
                success=True,
                reference=request.reference,
                refund_reference=str(data.get("id")) if data.get("id") is not None else None,
                amount=from_wire_amount(data.get("amount", 0), currency, PAYSTACK_CURRENCIES, PAYSTACK_UNIT),
                status=map_status(data.get("status"), STATUS_MAP),
                refunded_at=parse_timestamp(data.get("refunded_at")),
                metadata=request.metadata,
                raw=body,
            )
        except Exception as exc:
            result = RefundPaymentResponse.failure(classify_error(exc, "Failed to refund payment"))

        log_outcome("refund", self.name, request.reference, result)
        return result

    async def cancel_payment(self, request: CancelPaymentRequest) -> CancelPaymentResponse:
        # No cancel endpoint: report the verified status unchanged.
        verified = await self.verify_payment(VerifyPaymentRequest(reference=request.reference))
        if not verified.success:
            result = CancelPaymentResponse.failure(verified.error, raw=verified.raw)
        else:
            result = CancelPaymentResponse(
                success=True,
                reference=request.reference,
                status=verified.status,
                metadata={"reason": request.reason},
                raw=verified.raw,
            )

        log_outcome("cancel", self.name, request.reference, result)
        return result

    # ─── Helpers ───────────────────────────────────────────────────────

    async def _get(self, path: str, failure_message: str) -> dict[str, Any]:
        response = await self._client.get(path)
        return self._unwrap(response, failure_message)

    async def _post(self, path: str, payload: dict[str, Any], failure_message: str) -> dict[str, Any]:
        response = await self._client.post(path, json=payload)
        return self._unwrap(response, failure_message)

    @staticmethod
    def _unwrap(response: httpx.Response, failure_message: str) -> dict[str, Any]:
        response.raise_for_status()
        body = response.json()
        if not isinstance(body, dict) or not body.get("status") or not body.get("data"):
            message = body.get("message") if isinstance(body, dict) else None
            raise invalid_response(message or failure_message, body, response.status_code)
        return body

    def _transaction_fields(self, data: dict[str, Any]) -> dict[str, Any]:
        customer = data.get("customer") or {}
        return {
            "reference": data.get("reference"),
            "status": map_status(data.get("status"), STATUS_MAP),
            "amount": from_wire_amount(
                data.get("amount", 0), data.get("currency", "NGN"), PAYSTACK_CURRENCIES, PAYSTACK_UNIT
            ),
            "channel": map_channel(data.get("channel"), CHANNEL_FROM_PAYSTACK),
            "gateway_transaction_id": str(data["id"]) if data.get("id") is not None else None,
            "paid_at": parse_timestamp(data.get("paid_at") or data.get("paidAt")),
            "customer": PaymentCustomer(
                email=customer.get("email", ""),
                first_name=customer.get("first_name") or None,
                last_name=customer.get("last_name") or None,
            ),
            "metadata": parse_metadata(data.get("metadata")),
        }

    @staticmethod
    def _authorization(auth: Optional[dict[str, Any]]) -> Optional[CardAuthorization]:
        if not auth:
            return None
        return CardAuthorization(
            authorization_code=auth.get("authorization_code"),
            card_type=auth.get("card_type"),
            last4=auth.get("last4"),
            exp_month=auth.get("exp_month"),
            exp_year=auth.get("exp_year"),
            bin=auth.get("bin"),
            bank=auth.get("bank"),
            country=auth.get("country_code"),
            channel=auth.get("channel"),
            reusable=auth.get("reusable"),
        )
