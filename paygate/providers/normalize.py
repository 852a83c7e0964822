"""
Normalization helpers shared by every adapter.

Processors disagree on subunit granularity, minimum charges, status words
and channel names. Each adapter feeds its own tables (see ``currencies``)
into these functions instead of inheriting behaviour from a base class.

Amount conversion:
  1. Look up the currency in the processor's table.
  2. Unsupported → UNSUPPORTED_CURRENCY (with the supported list).
  3. wire = round(base) for zero-decimal currencies, else round(base × 100);
     processors that take major units get the base amount at the
     currency's precision instead.
  4. wire below the table minimum → PAYMENT_VALIDATION_ERROR.
The reverse conversion (wire → base) is the exact inverse.
"""

import json
import re
import time
import uuid
from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Iterable, Mapping, Optional, Union

from paygate.exceptions import unsupported_currency, validation_error
from paygate.models.enums import AmountUnit, Currency, PaymentChannel, PaymentStatus
from paygate.models.payment import Amount, Money
from paygate.providers.currencies import SUBUNIT_DIVISOR, CurrencyRule

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

_ALWAYS_FAILED = {"failed", "declined"}


def _to_decimal(amount: Amount) -> Decimal:
    if isinstance(amount, Decimal):
        return amount
    if isinstance(amount, float):
        # str() keeps the shortest repr, avoiding binary float artefacts
        return Decimal(str(amount))
    return Decimal(amount)


def currency_code(currency: Union[Currency, str]) -> str:
    if isinstance(currency, Currency):
        return currency.value
    return str(currency).strip().upper()


def as_currency(code: str) -> Union[Currency, str]:
    """Best-effort conversion of a processor currency string to ``Currency``."""
    code = currency_code(code)
    try:
        return Currency(code)
    except ValueError:
        return code


def resolve_currency(currency: Union[Currency, str], table: Mapping[str, CurrencyRule]) -> str:
    """Return the upper-case code if the processor supports it."""
    code = currency_code(currency)
    if code not in table:
        raise unsupported_currency(code, list(table))
    return code


def minimum_display(rule: CurrencyRule, unit: AmountUnit) -> str:
    """Human-readable minimum in base units, e.g. ``50.00``."""
    if unit is AmountUnit.MAJOR or rule["zero_decimal"]:
        return str(rule["minimum"])
    return f"{Decimal(rule['minimum']) / SUBUNIT_DIVISOR:.2f}"


def to_wire_amount(
    money: Money,
    table: Mapping[str, CurrencyRule],
    unit: AmountUnit = AmountUnit.MINOR,
) -> Union[int, Decimal]:
    """
    Convert a base-unit Money value into the processor's wire amount.

    Returns an ``int`` for minor-unit processors and a ``Decimal`` at the
    currency's precision for major-unit processors. ``money`` is never
    modified.

    Raises:
        PaymentException: UNSUPPORTED_CURRENCY or PAYMENT_VALIDATION_ERROR.
    """
    code = resolve_currency(money.currency, table)
    rule = table[code]
    base = _to_decimal(money.amount)

    if unit is AmountUnit.MAJOR:
        places = Decimal(1) if rule["zero_decimal"] else Decimal("0.01")
        wire: Union[int, Decimal] = base.quantize(places, rounding=ROUND_HALF_UP)
    else:
        scaled = base if rule["zero_decimal"] else base * SUBUNIT_DIVISOR
        wire = int(scaled.quantize(Decimal(1), rounding=ROUND_HALF_UP))

    if wire < rule["minimum"]:
        raise validation_error(
            f"Amount is below minimum of {minimum_display(rule, unit)} {code}",
            field="amount",
            amount=json_amount(wire),
            minimum=rule["minimum"],
        )
    return wire


def from_wire_amount(
    amount: Amount,
    currency: Union[Currency, str],
    table: Mapping[str, CurrencyRule],
    unit: AmountUnit = AmountUnit.MINOR,
) -> Money:
    """Inverse of ``to_wire_amount``. Unknown currencies pass through as-is."""
    code = currency_code(currency)
    value = _to_decimal(amount)
    rule = table.get(code)
    if rule is not None and unit is AmountUnit.MINOR and not rule["zero_decimal"]:
        value = value / SUBUNIT_DIVISOR
    return Money(amount=value, currency=as_currency(code))


def json_amount(value: Union[int, Decimal]) -> Union[int, float]:
    """Render a wire amount as a JSON-safe number."""
    if isinstance(value, Decimal):
        if value == value.to_integral_value():
            return int(value)
        return float(value)
    return value


def map_status(raw: Optional[str], table: Mapping[str, PaymentStatus]) -> PaymentStatus:
    """
    Map a processor status word to ``PaymentStatus``.

    Unknown words are not evidence of failure and map to PENDING; explicit
    "failed"/"declined" always map to FAILED.
    """
    if not raw:
        return PaymentStatus.PENDING
    key = str(raw).strip().lower()
    if key in table:
        return table[key]
    if key in _ALWAYS_FAILED:
        return PaymentStatus.FAILED
    return PaymentStatus.PENDING


def map_channel(
    raw: Optional[str],
    table: Mapping[str, PaymentChannel],
    default: Optional[PaymentChannel] = PaymentChannel.CARD,
) -> Optional[PaymentChannel]:
    if not raw:
        return None
    return table.get(str(raw).strip().lower(), default)


def map_channels(
    channels: Optional[Iterable[PaymentChannel]],
    table: Mapping[PaymentChannel, str],
) -> list[str]:
    """Unified channels → processor vocabulary, unmapped dropped, de-duplicated."""
    mapped: list[str] = []
    for channel in channels or ():
        name = table.get(channel)
        if name and name not in mapped:
            mapped.append(name)
    return mapped


def sanitize_metadata(metadata: Optional[Mapping[str, Any]], stringify: bool = False) -> dict[str, Any]:
    """Drop None values; optionally coerce every value to ``str``."""
    if not metadata:
        return {}
    return {
        key: (str(value) if stringify else value)
        for key, value in metadata.items()
        if value is not None
    }


def parse_metadata(value: Any) -> dict[str, Any]:
    """
    Coerce processor metadata into a dict.

    Some processors echo metadata back as a JSON string (or as an empty
    string). Objects pass through, JSON object strings are decoded and
    anything else is wrapped as ``{"data": value}``.
    """
    if value is None or value == "":
        return {}
    if isinstance(value, dict):
        return value
    if isinstance(value, str) and value.strip():
        try:
            parsed = json.loads(value)
        except ValueError:
            return {"data": value}
        if isinstance(parsed, dict):
            return parsed
    return {"data": value}


def parse_timestamp(value: Any) -> Optional[datetime]:
    """ISO-8601 strings and epoch seconds → aware datetimes."""
    if value is None or value == "":
        return None
    if isinstance(value, (int, float)):
        return datetime.fromtimestamp(value, tz=timezone.utc)
    text = str(value).replace("Z", "+00:00")
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def generate_reference(prefix: str = "TXN") -> str:
    """``PREFIX_<epoch ms>_<8 random chars>``, unique per attempt."""
    timestamp = int(time.time() * 1000)
    return f"{prefix}_{timestamp}_{uuid.uuid4().hex[:8].upper()}"


def is_valid_email(email: Optional[str]) -> bool:
    return bool(email) and EMAIL_RE.match(email) is not None


def require_customer_email(email: Optional[str]) -> str:
    if not email:
        raise validation_error("Customer email is required", field="email")
    if not is_valid_email(email):
        raise validation_error(f"Invalid customer email: {email}", field="email")
    return email
