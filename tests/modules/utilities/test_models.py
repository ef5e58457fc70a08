"""Tests for utilities module models."""

from decimal import Decimal

import pytest

from modules.utilities.models import (
    AirtimeForm,
    CableForm,
    DataPlan,
    DataPurchaseForm,
    ElectricityPurchaseForm,
    MeterForm,
    MeterInfo,
    find_cable_plan,
    parse_data_plans,
)
from shared.exceptions import ValidationError
from shared.forms import validate_form


class TestDataPlan:
    def test_amount_prefers_wallet_price(self):
        plan = DataPlan.model_validate({"id": 1, "name": "x", "price": "300", "wallet_price": "280"})
        assert plan.amount == Decimal("280")

    def test_amount_falls_back_to_price(self):
        plan = DataPlan.model_validate({"id": 1, "name": "x", "price": 300, "wallet_price": None})
        assert plan.price == "300"
        assert plan.amount == Decimal("300")

    def test_strike_price_only_when_higher(self):
        higher = DataPlan.model_validate({"id": 1, "name": "x", "price": "300", "atm_price": "350"})
        lower = DataPlan.model_validate({"id": 1, "name": "x", "price": "300", "atm_price": "250"})
        assert higher.strike_price == Decimal("350")
        assert lower.strike_price is None

    def test_availability(self):
        assert DataPlan(id=1, name="x", status=0).available
        assert not DataPlan(id=1, name="x", status=1).available


class TestParseDataPlans:
    def test_groups_by_upper_network(self, plan_listing):
        """Nested listings are unwrapped and non-list entries skipped."""
        plans = parse_data_plans(plan_listing)
        assert sorted(plans) == ["GLO", "MTN"]
        assert [p.id for p in plans["MTN"]] == [101, 102]

    def test_flat_listing(self):
        plans = parse_data_plans({"airtel": [{"id": 5, "name": "AIRTEL 1GB"}]})
        assert plans["AIRTEL"][0].id == 5

    def test_not_a_mapping(self):
        assert parse_data_plans(None) == {}


class TestMeterInfo:
    def test_display_fallbacks(self):
        info = MeterInfo(meter_number="04123456789")
        assert info.display_name == "Customer"
        assert info.display_address == "04123456789"

    def test_keeps_extra_fields(self):
        info = MeterInfo.model_validate({"customer_name": "ADA", "tariff": "A1"})
        assert info.model_extra == {"tariff": "A1"}


class TestForms:
    def test_meter_min_length(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_form(MeterForm, {"provider": "AEDC", "plan_type": "prepaid", "meter_number": "12345"})
        assert exc_info.value.fields["meter_number"] == "Meter number must be at least 10 digits"

    def test_electricity_minimum(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_form(ElectricityPurchaseForm, {"phone_number": "08012345678", "amount": 99})
        assert exc_info.value.fields["amount"] == "Minimum amount is ₦100"

    def test_data_phone_normalised(self):
        form = validate_form(DataPurchaseForm, {"phone_number": "+2348012345678"})
        assert form.phone_number == "08012345678"

    def test_data_phone_with_country_code(self):
        form = validate_form(DataPurchaseForm, {"phone_number": "2348012345678"})
        assert form.phone_number == "08012345678"

    def test_data_phone_invalid(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_form(DataPurchaseForm, {"phone_number": "12345"})
        assert exc_info.value.fields["phone_number"] == "Invalid phone number format"

    def test_airtime(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_form(AirtimeForm, {"phone_number": "08012345678", "amount": 49, "network": "ETISALAT"})
        assert exc_info.value.fields["amount"] == "Minimum amount is ₦50"
        assert exc_info.value.fields["network"] == "Please select a network"

    def test_airtime_network_uppercased(self):
        form = validate_form(AirtimeForm, {"phone_number": "08012345678", "amount": 50, "network": "glo"})
        assert form.network == "GLO"

    def test_cable(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_form(CableForm, {"smartcard_number": "123", "plan_id": 0})
        assert exc_info.value.fields["smartcard_number"] == "Smartcard number must be at least 10 digits"
        assert exc_info.value.fields["plan_id"] == "Please select a plan"


class TestCablePlans:
    def test_find(self):
        assert find_cable_plan(3).name == "GOtv Max"
        assert find_cable_plan(99) is None
