"""
Wallet service implementation.

Balance, transaction history and gateway payment endpoints.
"""

from decimal import Decimal
from typing import Any, Optional

from shared.formatting import json_number
from shared.http import ApiClient
from shared.models import ApiResponse

from .interfaces import IWalletService
from .models import PaymentInit, Transaction, WalletBalance


class WalletService(IWalletService):
    def __init__(self, api: ApiClient):
        self._api = api

    async def get_balance(self) -> ApiResponse[WalletBalance]:
        return await self._api.get("/wallet/balance", model=WalletBalance)

    async def get_transactions(
        self,
        limit: Optional[int] = None,
        skip: Optional[int] = None,
    ) -> ApiResponse[list[Transaction]]:
        return await self._api.get(
            "/wallet/transactions",
            model=list[Transaction],
            params={"limit": limit, "skip": skip},
        )

    async def initialize_payment(self, email: str, amount: Decimal) -> ApiResponse[PaymentInit]:
        return await self._api.post(
            "/payments/initialize",
            model=PaymentInit,
            json={"email": email, "amount": json_number(amount)},
        )

    async def verify_payment(self, reference: str) -> ApiResponse[Any]:
        """Raw gateway verification payload; read it through shared.adapters."""
        return await self._api.get("/payments/verify", params={"reference": reference})
