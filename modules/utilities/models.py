"""
Utilities module data models.

Data plans come from the backend; the cable catalogue and electricity
provider table are static client-side data.
"""

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, field_validator

from shared.adapters import unwrap_payload
from shared.formatting import clean_phone_number, format_phone_number, validate_phone_number
from shared.forms import check_min_amount, check_min_length

NETWORKS = ("MTN", "AIRTEL", "GLO", "9MOBILE")
DEFAULT_NETWORK = "MTN"

NO_REFUND_WARNING = (
    "Wrong details are not refundable. Please confirm the information above before proceeding."
)


class PlanType(str, Enum):
    PREPAID = "prepaid"
    POSTPAID = "postpaid"

    @property
    def label(self) -> str:
        return self.value.capitalize()


def _decimal(value: Optional[str]) -> Optional[Decimal]:
    if value in (None, ""):
        return None
    try:
        return Decimal(str(value))
    except InvalidOperation:
        return None


class DataPlan(BaseModel):
    """
    A data bundle as listed by the provider.

    Prices arrive as strings. ``status == 0`` marks a plan as purchasable.
    """

    model_config = ConfigDict(extra="ignore")

    id: int
    name: str
    price: str = ""
    wallet_price: str = ""
    api_price: str = ""
    atm_price: str = ""
    status: int = 0
    type: int = 0
    network: str = ""
    master_name: str = ""
    master_status: int = 0
    master_message: Optional[str] = None
    mb_value: Optional[str] = None
    airtime_value: Optional[str] = None
    message: Optional[str] = None

    @field_validator("price", "wallet_price", "api_price", "atm_price", mode="before")
    @classmethod
    def _price_text(cls, v: Any) -> str:
        return "" if v is None else str(v)

    @property
    def available(self) -> bool:
        return self.status == 0

    @property
    def amount(self) -> Decimal:
        """What the wallet is charged: wallet price, else list price."""
        return _decimal(self.wallet_price) or _decimal(self.price) or Decimal(0)

    @property
    def strike_price(self) -> Optional[Decimal]:
        """ATM price when it is higher than the charged amount."""
        atm = _decimal(self.atm_price)
        if atm is not None and atm > self.amount:
            return atm
        return None


class MeterInfo(BaseModel):
    """Customer details returned by meter verification."""

    model_config = ConfigDict(extra="allow")

    meter_number: Optional[str] = None
    customer_name: Optional[str] = None
    address: Optional[str] = None

    @property
    def display_name(self) -> str:
        return self.customer_name or "Customer"

    @property
    def display_address(self) -> str:
        return self.address or self.meter_number or ""


@dataclass(frozen=True)
class CablePlan:
    id: int
    name: str
    provider: str
    price: int


CABLE_PLANS = (
    CablePlan(1, "DStv Compact", "DStv", 7900),
    CablePlan(2, "DStv Premium", "DStv", 24500),
    CablePlan(3, "GOtv Max", "GOtv", 4900),
    CablePlan(4, "GOtv Jolli", "GOtv", 3200),
    CablePlan(5, "StarTimes Nova", "StarTimes", 1500),
    CablePlan(6, "StarTimes Basic", "StarTimes", 2500),
)


def find_cable_plan(plan_id: int) -> Optional[CablePlan]:
    return next((plan for plan in CABLE_PLANS if plan.id == plan_id), None)


@dataclass(frozen=True)
class ConfirmDetail:
    label: str
    value: Union[str, Decimal]


@dataclass(frozen=True)
class PurchaseConfirmation:
    """What the confirmation gate shows before money leaves the wallet."""

    title: str
    details: list[ConfirmDetail]
    amount: Decimal
    confirm_label: str = "Confirm & Pay"
    warning: str = NO_REFUND_WARNING


# ----------------------------------------------------------------------------
# Forms
# ----------------------------------------------------------------------------


def _check_phone(v: str) -> str:
    v = clean_phone_number(v)
    if not validate_phone_number(v):
        raise ValueError("Invalid phone number format")
    return format_phone_number(v)


class MeterForm(BaseModel):
    provider: str
    plan_type: PlanType
    meter_number: str

    @field_validator("meter_number")
    @classmethod
    def _meter(cls, v: str) -> str:
        return check_min_length(v.strip(), 10, "Meter number must be at least 10 digits")


class ElectricityPurchaseForm(BaseModel):
    phone_number: str
    amount: Decimal

    @field_validator("phone_number")
    @classmethod
    def _phone(cls, v: str) -> str:
        return check_min_length(v.strip(), 10, "Phone number is required")

    @field_validator("amount")
    @classmethod
    def _amount(cls, v: Decimal) -> Decimal:
        return check_min_amount(v, 100, "Minimum amount is ₦100")


class DataPurchaseForm(BaseModel):
    phone_number: str

    @field_validator("phone_number")
    @classmethod
    def _phone(cls, v: str) -> str:
        return _check_phone(v)


class AirtimeForm(BaseModel):
    phone_number: str
    amount: Decimal
    network: str

    @field_validator("phone_number")
    @classmethod
    def _phone(cls, v: str) -> str:
        return _check_phone(v)

    @field_validator("amount")
    @classmethod
    def _amount(cls, v: Decimal) -> Decimal:
        return check_min_amount(v, 50, "Minimum amount is ₦50")

    @field_validator("network")
    @classmethod
    def _network(cls, v: str) -> str:
        v = v.strip().upper()
        if v not in NETWORKS:
            raise ValueError("Please select a network")
        return v


class CableForm(BaseModel):
    smartcard_number: str
    plan_id: int

    @field_validator("smartcard_number")
    @classmethod
    def _smartcard(cls, v: str) -> str:
        return check_min_length(v.strip(), 10, "Smartcard number must be at least 10 digits")

    @field_validator("plan_id")
    @classmethod
    def _plan(cls, v: int) -> int:
        if v < 1:
            raise ValueError("Please select a plan")
        return v


def parse_data_plans(payload: Any) -> dict[str, list[DataPlan]]:
    """
    Group the plan listing by network key.

    The listing may be wrapped in a provider envelope; networks whose entries
    are not lists are skipped.
    """
    groups: dict[str, list[DataPlan]] = {}
    listing = unwrap_payload(payload)
    if not isinstance(listing, dict):
        return groups
    for network, plans in listing.items():
        if isinstance(plans, list):
            groups[str(network).upper()] = [DataPlan.model_validate(p) for p in plans]
    return groups
