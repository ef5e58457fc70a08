"""
Utilities module interface.

Purchases are fire-and-report: the backend debits the wallet and talks to
the provider, the client only relays the result envelope.
"""

from decimal import Decimal
from typing import Any, Protocol, runtime_checkable

from shared.models import ApiResponse


@runtime_checkable
class IUtilitiesService(Protocol):
    """Backend bill-payment endpoints under ``/utilities``."""

    async def get_data_plans(self) -> ApiResponse[Any]:
        """Data plans grouped by network, possibly inside a provider envelope."""
        ...

    async def purchase_data(
        self,
        phone_number: str,
        plan_id: int,
        reference: str,
        network: str,
    ) -> ApiResponse[Any]:
        ...

    async def purchase_airtime(
        self,
        phone_number: str,
        amount: Decimal,
        network: str,
        reference: str,
    ) -> ApiResponse[Any]:
        ...

    async def verify_meter(self, plan_id: int, meter_number: str) -> ApiResponse[Any]:
        """
        Look up the customer behind a meter.

        Returns:
            Envelope whose ``data.data`` holds the customer details
        """
        ...

    async def purchase_electricity(
        self,
        phone_number: str,
        plan_id: int,
        amount: Decimal,
        meter_number: str,
    ) -> ApiResponse[Any]:
        """Buy electricity units. Prepaid purchases carry a recharge token."""
        ...

    async def purchase_cable(self, smartcard_number: str, plan_id: int) -> ApiResponse[Any]:
        ...

    async def get_transaction_by_reference(self, reference: str) -> ApiResponse[Any]:
        ...
