"""Utilities test fixtures."""

from unittest.mock import AsyncMock, MagicMock

import pytest


@pytest.fixture
def plan_listing():
    """Data plan listing wrapped the way the provider returns it."""
    return {
        "data": {
            "mtn": [
                {
                    "id": 101,
                    "name": "MTN 1GB 30 Days",
                    "price": "300",
                    "wallet_price": "280",
                    "atm_price": "350",
                    "status": 0,
                    "network": "MTN",
                    "mb_value": "1024",
                },
                {"id": 102, "name": "MTN 2GB 30 Days", "price": 600, "status": 1, "network": "MTN"},
            ],
            "glo": [{"id": 201, "name": "GLO 1GB", "price": "250", "status": 0, "network": "GLO"}],
            "note": "not a list",
        }
    }


@pytest.fixture
def service(envelope, plan_listing):
    """Utilities service double where every call succeeds."""
    service = MagicMock()
    service.get_data_plans = AsyncMock(return_value=envelope(plan_listing))
    service.purchase_data = AsyncMock(return_value=envelope({"status": "successful"}))
    service.purchase_airtime = AsyncMock(return_value=envelope({"status": "successful"}))
    service.verify_meter = AsyncMock(
        return_value=envelope(
            {"data": {"customer_name": "ADA OKAFOR", "address": "12 Garki", "meter_number": "04123456789"}}
        )
    )
    service.purchase_electricity = AsyncMock(return_value=envelope({"data": {"token": "1234-5678-9012-3456"}}))
    service.purchase_cable = AsyncMock(return_value=envelope({"status": "successful"}))
    return service
