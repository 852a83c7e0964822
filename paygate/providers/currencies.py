"""
Per-processor currency rules.

Each processor publishes its own list of supported currencies, subunit
conventions and minimum charge. Minimums are expressed in the processor's
wire unit: kobo/cents for Paystack and Stripe, major units for Flutterwave.
"""

from typing import Optional, TypedDict

from paygate.models.enums import AmountUnit

SUBUNIT_DIVISOR = 100


class CurrencyRule(TypedDict):
    """How one processor treats one currency."""

    subunit: Optional[str]
    description: str
    minimum: int  # in wire units
    zero_decimal: bool


# ─── Paystack ──────────────────────────────────────────────────────────
# Amounts in subunits. XOF has no subunit but is still sent multiplied by 100.
PAYSTACK_UNIT = AmountUnit.MINOR
PAYSTACK_CURRENCIES: dict[str, CurrencyRule] = {
    "NGN": {"subunit": "Kobo", "description": "Nigerian Naira", "minimum": 5000, "zero_decimal": False},  # ₦50.00
    "USD": {"subunit": "Cent", "description": "US Dollar", "minimum": 200, "zero_decimal": False},  # $2.00
    "GHS": {"subunit": "Pesewa", "description": "Ghanaian Cedi", "minimum": 10, "zero_decimal": False},  # ₵0.10
    "ZAR": {"subunit": "Cent", "description": "South African Rand", "minimum": 100, "zero_decimal": False},  # R1.00
    "KES": {"subunit": "Cent", "description": "Kenyan Shilling", "minimum": 300, "zero_decimal": False},  # Ksh3.00
    "EUR": {"subunit": "Cent", "description": "Euro", "minimum": 200, "zero_decimal": False},  # €2.00
    "GBP": {"subunit": "Penny", "description": "British Pound Sterling", "minimum": 200, "zero_decimal": False},  # £2.00
    "XOF": {"subunit": None, "description": "West African CFA Franc", "minimum": 100, "zero_decimal": False},  # XOF 1.00
}

# ─── Flutterwave ───────────────────────────────────────────────────────
# Amounts in base currency units, not subunits.
FLUTTERWAVE_UNIT = AmountUnit.MAJOR
FLUTTERWAVE_CURRENCIES: dict[str, CurrencyRule] = {
    "NGN": {"subunit": "Kobo", "description": "Nigerian Naira", "minimum": 10, "zero_decimal": False},
    "USD": {"subunit": "Cent", "description": "US Dollar", "minimum": 1, "zero_decimal": False},
    "GHS": {"subunit": "Pesewa", "description": "Ghanaian Cedi", "minimum": 1, "zero_decimal": False},
    "ZAR": {"subunit": "Cent", "description": "South African Rand", "minimum": 10, "zero_decimal": False},
    "KES": {"subunit": "Cent", "description": "Kenyan Shilling", "minimum": 10, "zero_decimal": False},
    "EUR": {"subunit": "Cent", "description": "Euro", "minimum": 1, "zero_decimal": False},
    "GBP": {"subunit": "Penny", "description": "British Pound Sterling", "minimum": 1, "zero_decimal": False},
    "XOF": {"subunit": None, "description": "West African CFA Franc", "minimum": 100, "zero_decimal": True},
}

# ─── Stripe ────────────────────────────────────────────────────────────
# Smallest currency unit, except zero-decimal currencies which are sent as-is.
STRIPE_UNIT = AmountUnit.MINOR
STRIPE_CURRENCIES: dict[str, CurrencyRule] = {
    "NGN": {"subunit": "Kobo", "description": "Nigerian Naira", "minimum": 5000, "zero_decimal": False},
    "USD": {"subunit": "Cent", "description": "US Dollar", "minimum": 50, "zero_decimal": False},
    "GHS": {"subunit": "Pesewa", "description": "Ghanaian Cedi", "minimum": 100, "zero_decimal": False},
    "ZAR": {"subunit": "Cent", "description": "South African Rand", "minimum": 50, "zero_decimal": False},
    "KES": {"subunit": "Cent", "description": "Kenyan Shilling", "minimum": 50, "zero_decimal": False},
    "EUR": {"subunit": "Cent", "description": "Euro", "minimum": 50, "zero_decimal": False},
    "GBP": {"subunit": "Penny", "description": "British Pound Sterling", "minimum": 30, "zero_decimal": False},
    "XOF": {"subunit": None, "description": "West African CFA Franc", "minimum": 100, "zero_decimal": True},
}
