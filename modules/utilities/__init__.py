"""
Utilities module.

Airtime, data, electricity and cable TV purchases paid from the wallet.

Public API:
- IUtilitiesService / UtilitiesService: backend bill-payment endpoints
- ElectricityFlow, DataPurchaseFlow, AirtimePurchaseFlow, CablePurchaseFlow
- TransactionLookup: find a transaction by reference
- ELECTRICITY_PROVIDERS / get_plan_id: disco plan ID table
- CABLE_PLANS: cable TV catalogue
"""

from .interfaces import IUtilitiesService
from .models import (
    CABLE_PLANS,
    DEFAULT_NETWORK,
    NETWORKS,
    NO_REFUND_WARNING,
    CablePlan,
    ConfirmDetail,
    DataPlan,
    MeterInfo,
    PlanType,
    PurchaseConfirmation,
    find_cable_plan,
    parse_data_plans,
)
from .plans import (
    DEFAULT_PLAN_ID,
    DEFAULT_PROVIDER,
    ELECTRICITY_PROVIDERS,
    ElectricityProvider,
    find_provider,
    get_plan_id,
)
from .service import UtilitiesService
from .flows import (
    QUICK_AIRTIME_AMOUNTS,
    AirtimePurchaseFlow,
    CablePurchaseFlow,
    DataPurchaseFlow,
    DataStep,
    ElectricityFlow,
    ElectricityStep,
    LookupStep,
    PurchaseStep,
    TransactionLookup,
)

__all__ = [
    # Interface
    "IUtilitiesService",
    "UtilitiesService",
    # Models
    "CABLE_PLANS",
    "DEFAULT_NETWORK",
    "NETWORKS",
    "NO_REFUND_WARNING",
    "CablePlan",
    "ConfirmDetail",
    "DataPlan",
    "MeterInfo",
    "PlanType",
    "PurchaseConfirmation",
    "find_cable_plan",
    "parse_data_plans",
    # Providers
    "DEFAULT_PLAN_ID",
    "DEFAULT_PROVIDER",
    "ELECTRICITY_PROVIDERS",
    "ElectricityProvider",
    "find_provider",
    "get_plan_id",
    # Flows
    "QUICK_AIRTIME_AMOUNTS",
    "AirtimePurchaseFlow",
    "CablePurchaseFlow",
    "DataPurchaseFlow",
    "DataStep",
    "ElectricityFlow",
    "ElectricityStep",
    "LookupStep",
    "PurchaseStep",
    "TransactionLookup",
]
