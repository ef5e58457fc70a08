"""Tests for shared/adapters.py."""

from decimal import Decimal

from shared.adapters import (
    extract_minor_amount,
    extract_recharge_token,
    payment_reference_from_query,
    unwrap_payload,
)


class TestUnwrapPayload:
    def test_nested(self):
        assert unwrap_payload({"data": {"name": "x"}}) == {"name": "x"}

    def test_flat(self):
        assert unwrap_payload({"name": "x"}) == {"name": "x"}

    def test_empty_nested_falls_back(self):
        """An empty inner value should not hide the outer payload."""
        assert unwrap_payload({"data": {}, "name": "x"}) == {"data": {}, "name": "x"}

    def test_non_mapping(self):
        assert unwrap_payload([1, 2]) == [1, 2]
        assert unwrap_payload(None) is None


class TestExtractRechargeToken:
    def test_nested_token(self):
        assert extract_recharge_token({"data": {"token": "1234-5678"}}) == "1234-5678"

    def test_flat_token(self):
        assert extract_recharge_token({"token": "1234-5678"}) == "1234-5678"

    def test_nested_wins(self):
        data = {"token": "outer", "data": {"token": "inner"}}
        assert extract_recharge_token(data) == "inner"

    def test_missing(self):
        assert extract_recharge_token({"data": {}}) is None
        assert extract_recharge_token(None) is None

    def test_numeric_token_is_string(self):
        assert extract_recharge_token({"token": 12345678}) == "12345678"


class TestExtractMinorAmount:
    def test_kobo_to_naira(self):
        """Gateway amounts are in kobo."""
        assert extract_minor_amount({"data": {"amount": 50000}}) == Decimal("500")

    def test_flat_amount(self):
        assert extract_minor_amount({"amount": 150}) == Decimal("1.5")

    def test_missing(self):
        assert extract_minor_amount({"status": "success"}) is None

    def test_unparseable(self):
        assert extract_minor_amount({"amount": "lots"}) is None


class TestPaymentReference:
    def test_reference(self):
        assert payment_reference_from_query({"reference": "abc123"}) == "abc123"

    def test_trxref(self):
        assert payment_reference_from_query({"trxref": "abc123"}) == "abc123"

    def test_reference_preferred(self):
        assert payment_reference_from_query({"trxref": "b", "reference": "a"}) == "a"

    def test_missing(self):
        assert payment_reference_from_query({}) is None
        assert payment_reference_from_query({"reference": ""}) is None
