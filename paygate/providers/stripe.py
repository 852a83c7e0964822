"""
Stripe adapter (PaymentIntents).

Stripe speaks form-encoded REST and returns a client secret rather than a
hosted page, so ``initiate_payment`` yields ``authorization_url=None`` and
``access_code=<client_secret>``. Intents are found again by searching on
the ``reference`` metadata key written at initiation.
"""

import logging
from typing import Any, Mapping, Optional

import httpx

from paygate.audit.logger import log_outcome
from paygate.config import DEFAULT_TIMEOUT_SECONDS, STRIPE_BASE_URL
from paygate.exceptions import configuration_error, invalid_response, payment_not_found
from paygate.models.enums import PaymentChannel, PaymentStatus
from paygate.models.payment import (
    CancelPaymentRequest,
    CancelPaymentResponse,
    CardAuthorization,
    GatewayError,
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
from paygate.providers.currencies import STRIPE_CURRENCIES, STRIPE_UNIT
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

logger = logging.getLogger("paygate.providers.stripe")

STATUS_MAP: dict[str, PaymentStatus] = {
    "succeeded": PaymentStatus.SUCCESS,
    "canceled": PaymentStatus.ABANDONED,
    "requires_payment_method": PaymentStatus.PENDING,
    "requires_confirmation": PaymentStatus.PENDING,
    "requires_action": PaymentStatus.PENDING,
    "requires_capture": PaymentStatus.PENDING,
    "processing": PaymentStatus.PENDING,
    "pending": PaymentStatus.PENDING,
    "failed": PaymentStatus.FAILED,
}

CHANNEL_TO_STRIPE: dict[PaymentChannel, str] = {
    PaymentChannel.CARD: "card",
    PaymentChannel.APPLE_PAY: "card",
    PaymentChannel.BANK: "us_bank_account",
    PaymentChannel.BANK_TRANSFER: "us_bank_account",
    PaymentChannel.EFT: "us_bank_account",
}

CHANNEL_FROM_STRIPE: dict[str, PaymentChannel] = {
    "card": PaymentChannel.CARD,
    "card_present": PaymentChannel.CARD,
    "us_bank_account": PaymentChannel.BANK,
    "sepa_debit": PaymentChannel.BANK,
    "bacs_debit": PaymentChannel.BANK,
    "customer_balance": PaymentChannel.BANK_TRANSFER,
}

REFUND_REASONS = frozenset({"duplicate", "fraudulent", "requested_by_customer"})
CANCELLATION_REASONS = REFUND_REASONS | {"abandoned"}


def flatten_form(params: Mapping[str, Any], prefix: str = "") -> dict[str, Any]:
    """
    Flatten nested params into Stripe's bracket notation.

    ``{"metadata": {"a": 1}, "payment_method_types": ["card"]}`` becomes
    ``{"metadata[a]": "1", "payment_method_types[]": ["card"]}``. None
    values are dropped.
    """
    flat: dict[str, Any] = {}
    for key, value in params.items():
        name = f"{prefix}[{key}]" if prefix else str(key)
        if value is None:
            continue
        if isinstance(value, Mapping):
            flat.update(flatten_form(value, name))
        elif isinstance(value, (list, tuple)):
            flat[f"{name}[]"] = [str(item) for item in value]
        elif isinstance(value, bool):
            flat[name] = "true" if value else "false"
        else:
            flat[name] = str(value)
    return flat


def stripe_error_message(body: Any) -> Optional[str]:
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict) and error.get("message"):
            return error["message"]
    return None


def stripe_error_details(body: Any) -> dict[str, Any]:
    error = body.get("error") if isinstance(body, dict) else None
    if not isinstance(error, dict):
        return {}
    return {
        "stripe_code": error.get("code"),
        "type": error.get("type"),
        "decline_code": error.get("decline_code"),
    }


class StripeGateway(PaymentGateway):
    """Stripe PaymentIntents adapter."""

    name = "Stripe"

    def __init__(
        self,
        secret_key: Optional[str],
        public_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        debug: bool = False,
        api_version: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        if not secret_key:
            raise configuration_error("Secret key is required for Stripe", gateway=self.name)

        self._secret_key = secret_key
        self.public_key = public_key
        self.base_url = base_url or STRIPE_BASE_URL
        headers = {"Authorization": f"Bearer {secret_key}"}
        if api_version:
            headers["Stripe-Version"] = api_version
        self._client = build_client(
            self.base_url,
            headers=headers,
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
        reference = request.reference or generate_reference("STRIPE")
        try:
            email = require_customer_email(request.customer.email)
            currency = resolve_currency(request.amount.currency, STRIPE_CURRENCIES)
            amount = to_wire_amount(request.amount, STRIPE_CURRENCIES, STRIPE_UNIT)

            payload: dict[str, Any] = {
                "amount": amount,
                "currency": currency.lower(),
                "payment_method_types": map_channels(request.channels, CHANNEL_TO_STRIPE) or ["card"],
                "receipt_email": email,
                "description": request.description,
                "metadata": sanitize_metadata(
                    {
                        **(request.metadata or {}),
                        "reference": reference,
                        "customer_first_name": request.customer.first_name,
                        "customer_last_name": request.customer.last_name,
                        "customer_phone": request.customer.phone,
                        # Stripe only accepts return_url alongside confirm=true
                        "callback_url": request.callback_url,
                    },
                    stringify=True,
                ),
            }

            intent = await self._post("/payment_intents", payload, "Failed to initiate payment")
            result = InitiatePaymentResponse(
                success=True,
                reference=reference,
                authorization_url=None,
                access_code=intent.get("client_secret"),
                amount=request.amount,
                status=map_status(intent.get("status"), STATUS_MAP),
                metadata={**(request.metadata or {}), "payment_intent_id": intent.get("id")},
                raw=intent,
            )
        except Exception as exc:
            result = InitiatePaymentResponse.failure(self._classify(exc, "Failed to initiate payment"))

        log_outcome("initiate", self.name, reference, result)
        return result

    async def verify_payment(self, request: VerifyPaymentRequest) -> VerifyPaymentResponse:
        try:
            intent = await self._find_intent(request.reference)
            result = VerifyPaymentResponse(
                success=True, raw=intent, **self._intent_fields(intent, request.reference)
            )
        except Exception as exc:
            result = VerifyPaymentResponse.failure(self._classify(exc, "Failed to verify payment"))

        log_outcome("verify", self.name, request.reference, result)
        return result

    async def get_payment(self, request: GetPaymentRequest) -> GetPaymentResponse:
        try:
            intent = await self._find_intent(request.reference)
            result = GetPaymentResponse(
                success=True,
                created_at=parse_timestamp(intent.get("created")),
                authorization=self._card(self._latest_charge(intent)),
                raw=intent,
                **self._intent_fields(intent, request.reference),
            )
        except Exception as exc:
            result = GetPaymentResponse.failure(self._classify(exc, "Failed to get payment"))

        log_outcome("get", self.name, request.reference, result)
        return result

    async def refund_payment(self, request: RefundPaymentRequest) -> RefundPaymentResponse:
        try:
            payment = await self.get_payment(GetPaymentRequest(reference=request.reference))
            if not payment.success or not payment.gateway_transaction_id:
                raise payment_not_found(request.reference, "Payment not found for refund")

            payload: dict[str, Any] = {"payment_intent": payment.gateway_transaction_id}
            if request.amount is not None:
                payload["amount"] = to_wire_amount(request.amount, STRIPE_CURRENCIES, STRIPE_UNIT)
            if request.reason:
                payload["reason"] = request.reason if request.reason in REFUND_REASONS else "requested_by_customer"
            if request.metadata:
                payload["metadata"] = sanitize_metadata(request.metadata, stringify=True)

            refund = await self._post("/refunds", payload, "Failed to refund payment")
            result = RefundPaymentResponse(
                success=True,
                reference=request.reference,
                refund_reference=refund.get("id"),
                amount=from_wire_amount(
                    refund.get("amount", 0),
                    str(refund.get("currency", "")).upper(),
                    STRIPE_CURRENCIES,
                    STRIPE_UNIT,
                ),
                status=map_status(refund.get("status") or "succeeded", STATUS_MAP),
                refunded_at=parse_timestamp(refund.get("created")),
                metadata=request.metadata,
                raw=refund,
            )
        except Exception as exc:
            result = RefundPaymentResponse.failure(self._classify(exc, "Failed to refund payment"))

        log_outcome("refund", self.name, request.reference, result)
        return result

    async def cancel_payment(self, request: CancelPaymentRequest) -> CancelPaymentResponse:
        try:
            payment = await self.get_payment(GetPaymentRequest(reference=request.reference))
            if not payment.success or not payment.gateway_transaction_id:
                raise payment_not_found(request.reference, "Payment not found for cancellation")

            payload: dict[str, Any] = {}
            if request.reason in CANCELLATION_REASONS:
                payload["cancellation_reason"] = request.reason

            intent = await self._post(
                f"/payment_intents/{payment.gateway_transaction_id}/cancel",
                payload,
                "Failed to cancel payment",
            )
            result = CancelPaymentResponse(
                success=True,
                reference=request.reference,
                status=map_status(intent.get("status"), STATUS_MAP),
                metadata={"reason": request.reason},
                raw=intent,
            )
        except Exception as exc:
            result = CancelPaymentResponse.failure(self._classify(exc, "Failed to cancel payment"))

        log_outcome("cancel", self.name, request.reference, result)
        return result

    # ─── Helpers ───────────────────────────────────────────────────────

    async def _post(self, path: str, payload: dict[str, Any], failure_message: str) -> dict[str, Any]:
        response = await self._client.post(path, data=flatten_form(payload))
        return self._unwrap(response, failure_message)

    async def _find_intent(self, reference: str) -> dict[str, Any]:
        escaped = reference.replace("\\", "\\\\").replace("'", "\\'")
        response = await self._client.get(
            "/payment_intents/search",
            params={
                "query": f"metadata['reference']:'{escaped}'",
                "limit": 1,
                "expand[]": "data.latest_charge",
            },
        )
        body = self._unwrap(response, "Failed to search payments")
        matches = body.get("data")
        if not isinstance(matches, list):
            raise invalid_response(response_data=body, status_code=response.status_code)
        if not matches:
            raise payment_not_found(reference)
        return matches[0]

    @staticmethod
    def _unwrap(response: httpx.Response, failure_message: str) -> dict[str, Any]:
        response.raise_for_status()
        body = response.json()
        if not isinstance(body, dict) or (not body.get("id") and "data" not in body):
            raise invalid_response(failure_message, body, response.status_code)
        return body

    @staticmethod
    def _latest_charge(intent: dict[str, Any]) -> Optional[dict[str, Any]]:
        charge = intent.get("latest_charge")
        # unexpanded charges are just an ID string
        return charge if isinstance(charge, dict) else None

    def _intent_fields(self, intent: dict[str, Any], reference: str) -> dict[str, Any]:
        charge = self._latest_charge(intent) or {}
        method = charge.get("payment_method_details") or {}
        method_type = method.get("type") or (intent.get("payment_method_types") or ["card"])[0]
        status = map_status(intent.get("status"), STATUS_MAP)

        paid_at = None
        if status is PaymentStatus.SUCCESS:
            paid_at = parse_timestamp(charge.get("created") or intent.get("created"))

        billing = charge.get("billing_details") or {}
        first_name, _, last_name = (billing.get("name") or "").strip().partition(" ")
        metadata = parse_metadata(intent.get("metadata"))
        return {
            "reference": metadata.get("reference") or reference,
            "status": status,
            "amount": from_wire_amount(
                intent.get("amount", 0),
                str(intent.get("currency", "")).upper(),
                STRIPE_CURRENCIES,
                STRIPE_UNIT,
            ),
            "channel": map_channel(method_type, CHANNEL_FROM_STRIPE),
            "gateway_transaction_id": intent.get("id"),
            "paid_at": paid_at,
            "customer": PaymentCustomer(
                email=intent.get("receipt_email") or billing.get("email") or "",
                first_name=metadata.get("customer_first_name") or first_name or None,
                last_name=metadata.get("customer_last_name") or last_name.strip() or None,
            ),
            "metadata": metadata,
        }

    @staticmethod
    def _card(charge: Optional[dict[str, Any]]) -> Optional[CardAuthorization]:
        if not charge:
            return None
        method = charge.get("payment_method_details") or {}
        card = method.get("card")
        if not card:
            return None
        return CardAuthorization(
            authorization_code=charge.get("payment_method"),
            card_type=card.get("brand"),
            last4=card.get("last4"),
            exp_month=str(card["exp_month"]) if card.get("exp_month") is not None else None,
            exp_year=str(card["exp_year"]) if card.get("exp_year") is not None else None,
            bin=card.get("iin"),
            bank=card.get("issuer"),
            country=card.get("country"),
            channel=method.get("type"),
        )

    @staticmethod
    def _classify(exc: Exception, fallback_message: str) -> GatewayError:
        return classify_error(exc, fallback_message, stripe_error_message, stripe_error_details)
