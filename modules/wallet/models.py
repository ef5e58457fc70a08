"""
Wallet module data models.

The client never computes balances: every figure here is a read-through copy
of what the backend reported.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from shared.forms import check_email, check_min_amount
from shared.formatting import get_transaction_category_label

MIN_FUNDING_AMOUNT = 100


class TransactionType(str, Enum):
    CREDIT = "credit"
    DEBIT = "debit"


class TransactionCategory(str, Enum):
    """Known categories. Transactions keep unknown ones as plain strings."""

    FUNDING = "funding"
    DATA_PURCHASE = "data_purchase"
    AIRTIME_PURCHASE = "airtime_purchase"
    ELECTRICITY_PURCHASE = "electricity_purchase"
    CABLE_PURCHASE = "cable_purchase"
    REFUND = "refund"
    WITHDRAWAL = "withdrawal"
    REFERRAL_REWARD = "referral_reward"


class WalletBalance(BaseModel):
    balance: Decimal = Field(..., description="Current balance in major units")
    currency: str = Field(default="NGN", description="ISO currency code")


class Transaction(BaseModel):
    """
    Immutable wallet ledger entry.

    ``token`` is only set on electricity purchases and is displayed as-is.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    id: str = Field(..., alias="_id")
    user_id: Optional[str] = Field(None, alias="userId")
    wallet_id: Optional[str] = Field(None, alias="walletId")
    type: TransactionType
    category: str
    amount: Decimal
    balance_before: Decimal = Field(..., alias="balanceBefore")
    balance_after: Decimal = Field(..., alias="balanceAfter")
    status: str
    reference: str
    description: str = ""
    token: Optional[str] = None
    metadata: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime = Field(..., alias="createdAt")
    updated_at: Optional[datetime] = Field(None, alias="updatedAt")

    @field_validator("metadata", mode="before")
    @classmethod
    def _metadata(cls, v: Any) -> Any:
        return v or {}

    @property
    def label(self) -> str:
        return get_transaction_category_label(self.category)

    @property
    def is_credit(self) -> bool:
        return self.type is TransactionType.CREDIT

    @property
    def meter_number(self) -> Optional[str]:
        return self.metadata.get("meter_number")


class PaymentInit(BaseModel):
    """Result of initialising a gateway payment."""

    model_config = ConfigDict(populate_by_name=True)

    authorization_url: str = Field(..., alias="authorizationUrl")
    access_code: str = Field(..., alias="accessCode")
    reference: str


class FundWalletForm(BaseModel):
    email: str
    amount: Decimal

    @field_validator("email")
    @classmethod
    def _email(cls, v: str) -> str:
        return check_email(v.strip())

    @field_validator("amount")
    @classmethod
    def _amount(cls, v: Decimal) -> Decimal:
        return check_min_amount(v, MIN_FUNDING_AMOUNT, "Minimum amount is ₦100")
