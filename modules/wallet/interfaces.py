"""
Wallet module interface.

Flows depend on IWalletService; the utilities and referral pages only need
the balance.
"""

from decimal import Decimal
from typing import Any, Optional, Protocol, runtime_checkable

from shared.models import ApiResponse

from .models import PaymentInit, Transaction, WalletBalance


@runtime_checkable
class IWalletService(Protocol):
    """Backend wallet and payment endpoints."""

    async def get_balance(self) -> ApiResponse[WalletBalance]:
        ...

    async def get_transactions(
        self,
        limit: Optional[int] = None,
        skip: Optional[int] = None,
    ) -> ApiResponse[list[Transaction]]:
        """
        Get the user's transaction history, newest first.

        Args:
            limit: Maximum number of records
            skip: Records to skip (pagination)
        """
        ...

    async def initialize_payment(self, email: str, amount: Decimal) -> ApiResponse[PaymentInit]:
        """
        Start a gateway payment to fund the wallet.

        Returns:
            Envelope whose data carries the hosted payment page URL
        """
        ...

    async def verify_payment(self, reference: str) -> ApiResponse[Any]:
        """Ask the backend to confirm a gateway payment and credit the wallet."""
        ...
