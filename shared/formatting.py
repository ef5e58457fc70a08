"""
Formatting and validation helpers.

Pure functions only: currency and date display, purchase references, Nigerian
phone numbers, referral codes and transaction category labels.
"""

import re
import secrets
import string
import time
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional, Union

Number = Union[int, float, Decimal]

CURRENCY_SYMBOLS = {
    "NGN": "₦",
    "USD": "$",
    "GBP": "£",
    "EUR": "€",
}

PHONE_PATTERN = re.compile(r"^(0|\+234)[789][01]\d{8}$")
REFERRAL_CODE_PATTERN = re.compile(r"^[A-Z0-9]{6}$", re.IGNORECASE)

TRANSACTION_CATEGORY_LABELS = {
    "funding": "Wallet Funding",
    "data_purchase": "Data Purchase",
    "airtime_purchase": "Airtime Purchase",
    "electricity_purchase": "Electricity Purchase",
    "cable_purchase": "Cable Subscription",
    "refund": "Refund",
    "withdrawal": "Withdrawal",
    "referral_reward": "Referral Reward",
}

_REFERENCE_ALPHABET = string.ascii_uppercase + string.digits


def format_currency(amount: Number, currency: str = "NGN") -> str:
    """Format an amount with grouping, 0-2 decimals and the currency symbol.

    Example: 1500 -> "₦1,500", 99.5 -> "₦99.5", -20 -> "-₦20"
    """
    value = Decimal(str(amount)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    sign = "-" if value < 0 else ""
    text = f"{abs(value):,.2f}".rstrip("0").rstrip(".")
    symbol = CURRENCY_SYMBOLS.get(currency.upper())
    if symbol is None:
        return f"{sign}{currency.upper()} {text}"
    return f"{sign}{symbol}{text}"


def format_date(value: Union[str, datetime]) -> str:
    """Format an ISO timestamp as e.g. "Jan 5, 2024, 02:30 PM".

    Timezone-aware values are shown in local time.
    """
    if isinstance(value, str):
        value = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if value.tzinfo is not None:
        value = value.astimezone()
    return f"{value:%b} {value.day}, {value.year}, {value:%I:%M %p}"


def generate_reference(now_ms: Optional[int] = None) -> str:
    """Unique purchase reference: REF-<epoch ms>-<9 uppercase alphanumerics>."""
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    suffix = "".join(secrets.choice(_REFERENCE_ALPHABET) for _ in range(9))
    return f"REF-{now_ms}-{suffix}"


def validate_phone_number(phone: str) -> bool:
    """Nigerian mobile number: 0 or +234, then 7/8/9, then 0/1, then 8 digits."""
    return bool(PHONE_PATTERN.match(phone))


def clean_phone_number(phone: str) -> str:
    """Tidy typed phone input before it is checked against the pattern.

    Numbers written with a leading + keep it and lose everything else that
    is not a digit; any other input is normalized with format_phone_number.
    Example: "0801 234 5678" -> "08012345678", "2348012345678" -> "08012345678"
    """
    phone = phone.strip()
    if not phone:
        return phone
    if phone.startswith("+"):
        return "+" + re.sub(r"\D", "", phone)
    return format_phone_number(phone)


def format_phone_number(phone: str) -> str:
    """Normalize a phone number to the local 0XXXXXXXXXX form.

    Non-digits are dropped; a leading 234 country code becomes a single 0;
    numbers already starting with 0 are kept; anything else gets a 0 prefix.
    """
    cleaned = re.sub(r"\D", "", phone)
    if cleaned.startswith("234"):
        return "0" + cleaned[3:]
    if cleaned.startswith("0"):
        return cleaned
    return "0" + cleaned


def normalize_referral_code(code: Optional[str]) -> Optional[str]:
    """Trim and uppercase a referral code. Blank input means no code."""
    if code is None:
        return None
    code = code.strip().upper()
    return code or None


def is_valid_referral_code(code: str) -> bool:
    return bool(REFERRAL_CODE_PATTERN.match(code))


def get_transaction_category_label(category: str) -> str:
    """Human label for a transaction category.

    Unknown categories are title-cased: "gift_card" -> "Gift Card"
    """
    label = TRANSACTION_CATEGORY_LABELS.get(category)
    if label:
        return label
    return re.sub(r"\b\w", lambda m: m.group(0).upper(), category.replace("_", " "))


def json_number(amount: Decimal) -> Union[int, float]:
    """JSON has no decimal type: whole amounts go out as integers."""
    return int(amount) if amount == amount.to_integral_value() else float(amount)
