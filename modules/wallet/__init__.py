"""
Wallet module.

Balance, transaction history, gateway funding and payment verification.

Public API:
- IWalletService / WalletService: backend wallet and payment endpoints
- WalletFundingFlow, PaymentVerificationFlow
- WalletOverview, DashboardView
"""

from .interfaces import IWalletService
from .models import (
    MIN_FUNDING_AMOUNT,
    FundWalletForm,
    PaymentInit,
    Transaction,
    TransactionCategory,
    TransactionType,
    WalletBalance,
)
from .service import WalletService
from .flows import (
    ALL_CATEGORIES,
    DashboardView,
    FundingStep,
    PaymentVerificationFlow,
    VerificationStep,
    WalletFundingFlow,
    WalletOverview,
)

__all__ = [
    # Interface
    "IWalletService",
    "WalletService",
    # Models
    "MIN_FUNDING_AMOUNT",
    "FundWalletForm",
    "PaymentInit",
    "Transaction",
    "TransactionCategory",
    "TransactionType",
    "WalletBalance",
    # Flows
    "ALL_CATEGORIES",
    "DashboardView",
    "FundingStep",
    "PaymentVerificationFlow",
    "VerificationStep",
    "WalletFundingFlow",
    "WalletOverview",
]
