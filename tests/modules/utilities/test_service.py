"""Tests for UtilitiesService endpoint mapping."""

from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest

from modules.utilities.interfaces import IUtilitiesService
from modules.utilities.service import UtilitiesService


class TestUtilitiesService:
    @pytest.fixture
    def api(self, envelope):
        api = MagicMock()
        api.get = AsyncMock(return_value=envelope({}))
        api.post = AsyncMock(return_value=envelope({}))
        return api

    @pytest.fixture
    def service(self, api):
        return UtilitiesService(api)

    def test_implements_interface(self, service):
        assert isinstance(service, IUtilitiesService)

    @pytest.mark.asyncio
    async def test_get_data_plans(self, service, api):
        await service.get_data_plans()
        api.get.assert_awaited_once_with("/utilities/data")

    @pytest.mark.asyncio
    async def test_purchase_data(self, service, api):
        await service.purchase_data("08012345678", 101, "REF-1-ABCDEFGHI", "MTN")
        api.post.assert_awaited_once_with(
            "/utilities/data_purchase",
            json={
                "phone_number": "08012345678",
                "plan_id": 101,
                "reference": "REF-1-ABCDEFGHI",
                "network": "MTN",
            },
        )

    @pytest.mark.asyncio
    async def test_purchase_airtime(self, service, api):
        await service.purchase_airtime("08012345678", Decimal("200"), "GLO", "REF-1-X")
        assert api.post.await_args.kwargs["json"]["amount"] == 200

    @pytest.mark.asyncio
    async def test_verify_meter(self, service, api):
        await service.verify_meter(15, "04123456789")
        api.post.assert_awaited_once_with(
            "/utilities/verify_meter",
            json={"plan_id": 15, "meter_number": "04123456789"},
        )

    @pytest.mark.asyncio
    async def test_purchase_electricity(self, service, api):
        await service.purchase_electricity("08012345678", 15, Decimal("1500"), "04123456789")
        api.post.assert_awaited_once_with(
            "/utilities/electric_purchase",
            json={
                "phone_number": "08012345678",
                "plan_id": 15,
                "amount": 1500,
                "meter_number": "04123456789",
            },
        )

    @pytest.mark.asyncio
    async def test_purchase_cable(self, service, api):
        await service.purchase_cable("1234567890", 3)
        api.post.assert_awaited_once_with(
            "/utilities/cable_purchase",
            json={"smartcard_number": "1234567890", "plan_id": 3},
        )

    @pytest.mark.asyncio
    async def test_transaction_by_reference_is_quoted(self, service, api):
        await service.get_transaction_by_reference("REF/1 2")
        api.get.assert_awaited_once_with("/utilities/transactions/reference/REF%2F1%202")
