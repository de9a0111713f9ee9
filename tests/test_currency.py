"""Tests for rupee formatting."""

import pytest

from franchise_hub_api.app.core.currency import format_currency, format_currency_compact


@pytest.mark.parametrize(
    "amount, expected",
    [
        (0, "₹0"),
        (999, "₹999"),
        (120000, "₹1,20,000"),
        (1234567, "₹12,34,567"),
        (10000000, "₹1,00,00,000"),
        (1499.6, "₹1,500"),
    ],
)
def test_indian_grouping(amount, expected):
    assert format_currency(amount) == expected


def test_decimals_and_negative_amounts():
    assert format_currency(5500.5, show_decimals=True) == "₹5,500.50"
    assert format_currency(-120000) == "-₹1,20,000"


def test_compact_only_when_requested():
    assert format_currency_compact(250000) == "₹2,50,000"
    assert format_currency_compact(250000, compact=True) == "₹2.5L"
    assert format_currency_compact(25000000, compact=True) == "₹2.5Cr"
    assert format_currency_compact(50000, compact=True) == "₹50,000"
