"""
Flutterwave adapter.

Flutterwave takes amounts in major units and keys refunds by its own
transaction ID, so refunds resolve the caller's ``tx_ref`` first.
There is no cancel endpoint; ``cancel_payment`` reports the verified
status unchanged.
"""

import logging
from typing import Any, Optional

import httpx

from paygate.audit.logger import log_outcome
from paygate.config import DEFAULT_TIMEOUT_SECONDS, FLUTTERWAVE_BASE_URL
from paygate.exceptions import configuration_error, invalid_response, payment_not_found
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
from paygate.providers.currencies import FLUTTERWAVE_CURRENCIES, FLUTTERWAVE_UNIT
from paygate.providers.http import build_client
from paygate.providers.normalize import (
    from_wire_amount,
    generate_reference,
    json_amount,
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

logger = logging.getLogger("paygate.providers.flutterwave")

STATUS_MAP: dict[str, PaymentStatus] = {
    "successful": PaymentStatus.SUCCESS,
    "success": PaymentStatus.SUCCESS,
    "completed": PaymentStatus.SUCCESS,
    "failed": PaymentStatus.FAILED,
    "cancelled": PaymentStatus.ABANDONED,
    "pending": PaymentStatus.PENDING,
    "reversed": PaymentStatus.REVERSED,
}

CHANNEL_TO_FLUTTERWAVE: dict[PaymentChannel, str] = {
    PaymentChannel.CARD: "card",
    PaymentChannel.BANK: "account",
    PaymentChannel.BANK_TRANSFER: "banktransfer",
    PaymentChannel.USSD: "ussd",
    PaymentChannel.QR: "qr",
    PaymentChannel.MOBILE_MONEY: "mobilemoney",
    PaymentChannel.EFT: "eft",
    PaymentChannel.APPLE_PAY: "applepay",
    PaymentChannel.PAYATTITUDE: "payattitude",
}

CHANNEL_FROM_FLUTTERWAVE: dict[str, PaymentChannel] = {v: k for k, v in CHANNEL_TO_FLUTTERWAVE.items()}
# payment_type values that differ from the payment_options vocabulary
CHANNEL_FROM_FLUTTERWAVE.update({
    "bank_transfer": PaymentChannel.BANK_TRANSFER,
    "mobilemoneyghana": PaymentChannel.MOBILE_MONEY,
    "mobilemoneyuganda": PaymentChannel.MOBILE_MONEY,
    "mpesa": PaymentChannel.MOBILE_MONEY,
})


class FlutterwaveGateway(PaymentGateway):
    """Flutterwave v3 REST adapter."""

    name = "Flutterwave"

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
            raise configuration_error("Secret key is required for Flutterwave", gateway=self.name)

        self._secret_key = secret_key
        self.public_key = public_key
        self.base_url = base_url or FLUTTERWAVE_BASE_URL
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
        reference = request.reference or generate_reference("FLW")
        try:
            email = require_customer_email(request.customer.email)
            currency = resolve_currency(request.amount.currency, FLUTTERWAVE_CURRENCIES)
            amount = to_wire_amount(request.amount, FLUTTERWAVE_CURRENCIES, FLUTTERWAVE_UNIT)

            customer: dict[str, Any] = {"email": email}
            if request.customer.phone:
                customer["phonenumber"] = request.customer.phone
            if request.customer.full_name:
                customer["name"] = request.customer.full_name

            payload: dict[str, Any] = {
                "tx_ref": reference,
                "amount": json_amount(amount),
                "currency": currency,
                "customer": customer,
                "meta": sanitize_metadata(request.metadata),
            }
            if request.callback_url:
                payload["redirect_url"] = request.callback_url
            options = map_channels(request.channels, CHANNEL_TO_FLUTTERWAVE)
            if options:
                payload["payment_options"] = ",".join(options)
            if request.description:
                payload["customizations"] = {"description": request.description}

            body = await self._post("/payments", payload, "Failed to initialize payment")
            link = (body.get("data") or {}).get("link")
            if not link:
                raise invalid_response("Flutterwave did not return a payment link", body)

            result = InitiatePaymentResponse(
                success=True,
                reference=reference,
                authorization_url=link,
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
            body = await self._verify_by_reference(request.reference, "Failed to verify payment")
            result = VerifyPaymentResponse(
                success=True, raw=body, **self._transaction_fields(body["data"], request.reference)
            )
        except Exception as exc:
            result = VerifyPaymentResponse.failure(classify_error(exc, "Failed to verify payment"))

        log_outcome("verify", self.name, request.reference, result)
        return result

    async def get_payment(self, request: GetPaymentRequest) -> GetPaymentResponse:
        try:
            body = await self._verify_by_reference(request.reference, "Failed to get payment")
            data = body["data"]
            result = GetPaymentResponse(
                success=True,
                created_at=parse_timestamp(data.get("created_at")),
                authorization=self._card(data.get("card"), data.get("payment_type")),
                raw=body,
                **self._transaction_fields(data, request.reference),
            )
        except Exception as exc:
            result = GetPaymentResponse.failure(classify_error(exc, "Failed to get payment"))

        log_outcome("get", self.name, request.reference, result)
        return result

    async def refund_payment(self, request: RefundPaymentRequest) -> RefundPaymentResponse:
        try:
            payment = await self.get_payment(GetPaymentRequest(reference=request.reference))
            if not payment.success or not payment.gateway_transaction_id:
                raise payment_not_found(
                    request.reference,
                    f"Payment with reference '{request.reference}' cannot be resolved for refund",
                )

            payload: dict[str, Any] = {"id": payment.gateway_transaction_id}
            if request.amount is not None:
                wire = to_wire_amount(request.amount, FLUTTERWAVE_CURRENCIES, FLUTTERWAVE_UNIT)
                payload["amount"] = json_amount(wire)

            body = await self._post("/refunds", payload, "Failed to refund payment")
            data = body.get("data") or {}
            currency = data.get("currency") or (
                request.amount.currency if request.amount else payment.amount.currency
            )
            refunded = data.get("amount_refunded", data.get("amount"))
            result = RefundPaymentResponse(
                success=True,
                reference=request.reference,
                refund_reference=str(data["id"]) if data.get("id") is not None else None,
                amount=(
                    from_wire_amount(refunded, currency, FLUTTERWAVE_CURRENCIES, FLUTTERWAVE_UNIT)
                    if refunded is not None
                    else request.amount or payment.amount
                ),
                status=map_status(data.get("status"), STATUS_MAP),
                refunded_at=parse_timestamp(data.get("created_at")),
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

    async def _verify_by_reference(self, reference: str, failure_message: str) -> dict[str, Any]:
        response = await self._client.get(
            "/transactions/verify_by_reference", params={"tx_ref": reference}
        )
        body = self._unwrap(response, failure_message)
        if not isinstance(body.get("data"), dict):
            raise payment_not_found(reference)
        return body

    async def _post(self, path: str, payload: dict[str, Any], failure_message: str) -> dict[str, Any]:
        response = await self._client.post(path, json=payload)
        return self._unwrap(response, failure_message)

    @staticmethod
    def _unwrap(response: httpx.Response, failure_message: str) -> dict[str, Any]:
        response.raise_for_status()
        body = response.json()
        if not isinstance(body, dict) or body.get("status") != "success":
            message = body.get("message") if isinstance(body, dict) else None
            raise invalid_response(message or failure_message, body, response.status_code)
        return body

    @staticmethod
    def _transaction_fields(data: dict[str, Any], reference: str) -> dict[str, Any]:
        customer = data.get("customer") or {}
        first_name, _, last_name = (customer.get("name") or "").strip().partition(" ")
        return {
            "reference": data.get("tx_ref") or reference,
            "status": map_status(data.get("status"), STATUS_MAP),
            "amount": from_wire_amount(
                data.get("amount", 0), data.get("currency", "NGN"), FLUTTERWAVE_CURRENCIES, FLUTTERWAVE_UNIT
            ),
            "channel": map_channel(data.get("payment_type"), CHANNEL_FROM_FLUTTERWAVE),
            "gateway_transaction_id": str(data["id"]) if data.get("id") is not None else None,
            "paid_at": parse_timestamp(data.get("created_at")),
            "customer": PaymentCustomer(
                email=customer.get("email", ""),
                first_name=first_name or None,
                last_name=last_name.strip() or None,
            ),
            "metadata": parse_metadata(data.get("meta")),
        }

    @staticmethod
    def _card(card: Optional[dict[str, Any]], payment_type: Optional[str]) -> Optional[CardAuthorization]:
        if not card:
            return None
        exp_month = exp_year = None
        expiry = card.get("expiry")
        if expiry and "/" in expiry:
            exp_month, exp_year = (part.strip() for part in expiry.split("/", 1))
        return CardAuthorization(
            authorization_code=card.get("token"),
            card_type=card.get("type"),
            last4=card.get("last_4digits"),
            exp_month=exp_month,
            exp_year=exp_year,
            bin=card.get("first_6digits"),
            bank=card.get("issuer"),
            country=card.get("country"),
            channel=payment_type,
        )
