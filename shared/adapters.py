"""
Response-shape adapters.

Some backend payloads pass a provider response through untouched, so the
interesting value sits either at ``data`` or one level deeper at
``data.data``. These helpers are the only place that probes both shapes;
everything downstream receives one canonical value.
"""

from decimal import Decimal
from typing import Any, Mapping, Optional


PAYMENT_REFERENCE_PARAMS = ("reference", "trxref")


def unwrap_payload(data: Any) -> Any:
    """Return ``data["data"]`` when present and non-empty, else ``data``."""
    if isinstance(data, Mapping):
        inner = data.get("data")
        if inner:
            return inner
    return data


def _probe(data: Any, key: str) -> Any:
    if not isinstance(data, Mapping):
        return None
    inner = data.get("data")
    if isinstance(inner, Mapping) and inner.get(key):
        return inner[key]
    return data.get(key) or None


def extract_recharge_token(data: Any) -> Optional[str]:
    """Electricity token from ``data.data.token`` or ``data.token``."""
    token = _probe(data, "token")
    return str(token) if token else None


def extract_minor_amount(data: Any) -> Optional[Decimal]:
    """Gateway amount in major units; the gateway reports minor units (kobo)."""
    amount = _probe(data, "amount")
    if amount is None:
        return None
    try:
        return Decimal(str(amount)) / 100
    except ArithmeticError:
        return None


def payment_reference_from_query(query: Mapping[str, str]) -> Optional[str]:
    """The gateway sends the reference back as ``reference`` or ``trxref``."""
    for name in PAYMENT_REFERENCE_PARAMS:
        value = query.get(name)
        if value:
            return value
    return None
