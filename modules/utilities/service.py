"""
Utilities service implementation.

Provider payloads are returned untouched; flows read them through
shared.adapters.
"""

from decimal import Decimal
from typing import Any
from urllib.parse import quote

from shared.formatting import json_number
from shared.http import ApiClient
from shared.models import ApiResponse

from .interfaces import IUtilitiesService


class UtilitiesService(IUtilitiesService):
    def __init__(self, api: ApiClient):
        self._api = api

    async def get_data_plans(self) -> ApiResponse[Any]:
        return await self._api.get("/utilities/data")

    async def purchase_data(
        self,
        phone_number: str,
        plan_id: int,
        reference: str,
        network: str,
    ) -> ApiResponse[Any]:
        return await self._api.post(
            "/utilities/data_purchase",
            json={
                "phone_number": phone_number,
                "plan_id": plan_id,
                "reference": reference,
                "network": network,
            },
        )

    async def purchase_airtime(
        self,
        phone_number: str,
        amount: Decimal,
        network: str,
        reference: str,
    ) -> ApiResponse[Any]:
        return await self._api.post(
            "/utilities/airtime_purchase",
            json={
                "phone_number": phone_number,
                "amount": json_number(amount),
                "network": network,
                "reference": reference,
            },
        )

    async def verify_meter(self, plan_id: int, meter_number: str) -> ApiResponse[Any]:
        return await self._api.post(
            "/utilities/verify_meter",
            json={"plan_id": plan_id, "meter_number": meter_number},
        )

    async def purchase_electricity(
        self,
        phone_number: str,
        plan_id: int,
        amount: Decimal,
        meter_number: str,
    ) -> ApiResponse[Any]:
        return await self._api.post(
            "/utilities/electric_purchase",
            json={
                "phone_number": phone_number,
                "plan_id": plan_id,
                "amount": json_number(amount),
                "meter_number": meter_number,
            },
        )

    async def purchase_cable(self, smartcard_number: str, plan_id: int) -> ApiResponse[Any]:
        return await self._api.post(
            "/utilities/cable_purchase",
            json={"smartcard_number": smartcard_number, "plan_id": plan_id},
        )

    async def get_transaction_by_reference(self, reference: str) -> ApiResponse[Any]:
        return await self._api.get(f"/utilities/transactions/reference/{quote(reference, safe='')}")
