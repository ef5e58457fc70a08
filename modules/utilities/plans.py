"""
Electricity distribution companies and their provider plan IDs.

Every disco has one plan ID for prepaid meters and one for postpaid meters.
"""

from typing import NamedTuple, Optional, Union

from .models import PlanType


class ElectricityProvider(NamedTuple):
    name: str
    prepaid: int
    postpaid: int


ELECTRICITY_PROVIDERS = (
    ElectricityProvider("IKEDC", 1, 2),
    ElectricityProvider("EKEDC", 3, 4),
    ElectricityProvider("KEDCO", 5, 6),
    ElectricityProvider("PHED", 7, 8),
    ElectricityProvider("JED", 9, 10),
    ElectricityProvider("IBEDC", 11, 12),
    ElectricityProvider("KAEDCO", 13, 14),
    ElectricityProvider("AEDC", 15, 16),
    ElectricityProvider("EEDC", 17, 18),
    ElectricityProvider("BEDC", 19, 20),
    ElectricityProvider("ABA", 22, 23),
    ElectricityProvider("YEDC", 24, 25),
)

DEFAULT_PROVIDER = "AEDC"
# AEDC prepaid
DEFAULT_PLAN_ID = 15


def find_provider(name: str) -> Optional[ElectricityProvider]:
    return next((p for p in ELECTRICITY_PROVIDERS if p.name == name), None)


def get_plan_id(provider: str, plan_type: Union[PlanType, str]) -> int:
    """Plan ID for ``provider``; unknown providers fall back to AEDC prepaid."""
    found = find_provider(provider)
    if found is None:
        return DEFAULT_PLAN_ID
    return found.prepaid if PlanType(plan_type) is PlanType.PREPAID else found.postpaid
