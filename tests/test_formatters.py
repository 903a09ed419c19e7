"""
Tests for display formatting.
"""

from datetime import date, datetime
from decimal import Decimal

import pytest

from homeledger.formatters import format_currency, format_date, parse_currency


class TestFormatCurrency:

    @pytest.mark.parametrize("amount, expected", [
        (1000000, "Rp 1.000.000"),
        (Decimal("12500.5"), "Rp 12.500,5"),
        ("2500.25", "Rp 2.500,25"),
        (0.125, "Rp 0,13"),
        (999, "Rp 999"),
        (Decimal("1000.00"), "Rp 1.000"),
        (-1500, "Rp -1.500"),
    ])
    def test_rupiah_style(self, amount, expected):
        assert format_currency(amount, prefix="Rp") == expected

    @pytest.mark.parametrize("amount", ["abc", None, float("nan")])
    def test_garbage_formats_as_zero(self, amount):
        assert format_currency(amount, prefix="Rp") == "Rp 0"

    def test_prefix_from_settings(self, monkeypatch):
        """Test that the prefix follows the CURRENCY_PREFIX setting."""
        monkeypatch.setenv("CURRENCY_PREFIX", "IDR")
        assert format_currency(5000) == "IDR 5.000"


class TestParseCurrency:

    @pytest.mark.parametrize("text, expected", [
        ("Rp 1.000.000", Decimal("1000000")),
        ("Rp 12.500,5", Decimal("12500.5")),
        ("Rp1.500", Decimal("1500")),
        ("750", Decimal("750")),
        ("Rp -1.500", Decimal("-1500")),
    ])
    def test_parses_formatted_amounts(self, text, expected):
        assert parse_currency(text) == expected

    @pytest.mark.parametrize("text", ["", "Rp", "abc", None])
    def test_unparseable_is_zero(self, text):
        assert parse_currency(text) == Decimal("0")

    def test_numbers_pass_through(self):
        assert parse_currency(42) == Decimal("42")

    def test_inverse_of_format(self):
        amount = Decimal("1234567.89")
        assert parse_currency(format_currency(amount, prefix="Rp")) == amount


class TestFormatDate:

    def test_short(self):
        assert format_date(date(2024, 1, 31)) == "31/01/2024"

    def test_long(self):
        assert format_date(date(2024, 1, 31), "long") == "31 January 2024"

    def test_custom_pattern(self):
        assert format_date(datetime(2024, 1, 31, 8, 5), "%Y-%m %H:%M") == "2024-01 08:05"

    def test_iso_string(self):
        assert format_date("2024-01-31") == "31/01/2024"

    def test_empty(self):
        assert format_date(None) == ""
        assert format_date("") == ""
