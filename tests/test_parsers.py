"""Tests for period and amount parsing."""

import pytest
from datetime import date
from decimal import Decimal

from wealthtrack.domain.entities import Period
from wealthtrack.utils.amount_parser import parse_amount
from wealthtrack.utils.period_parser import parse_period

TODAY = date(2024, 3, 31)


@pytest.mark.parametrize(
    "text,expected",
    [
        ("2024-06", Period(2024, 6)),
        ("2024/6", Period(2024, 6)),
        ("June 2024", Period(2024, 6)),
        ("jun 2024", Period(2024, 6)),
        ("February 2023", Period(2023, 2)),
        ("this month", Period(2024, 3)),
        ("last month", Period(2024, 2)),
        ("next month", Period(2024, 4)),
    ],
)
def test_parse_period(text, expected):
    assert parse_period(text, today=TODAY) == expected


def test_parse_period_last_month_in_january():
    assert parse_period("last month", today=date(2024, 1, 15)) == Period(2023, 12)


def test_parse_period_defaults_to_today():
    today = date.today()
    assert parse_period("this month") == Period(today.year, today.month)


@pytest.mark.parametrize("text", ["2024-13", "not a month", ""])
def test_parse_period_invalid(text):
    with pytest.raises(ValueError):
        parse_period(text, today=TODAY)


@pytest.mark.parametrize(
    "text,expected",
    [
        ("123.45", Decimal("123.45")),
        ("$1,234.56", Decimal("1234.56")),
        ("RM 500", Decimal("500")),
        ("0.00000001", Decimal("0.00000001")),
    ],
)
def test_parse_amount(text, expected):
    assert parse_amount(text) == expected


@pytest.mark.parametrize("text", ["", "  ", "abc", "-5", "nan"])
def test_parse_amount_invalid(text):
    with pytest.raises(ValueError):
        parse_amount(text)
