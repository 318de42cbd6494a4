"""Tests for field validation."""

import pytest
from decimal import Decimal

from wealthtrack.domain.entities import Period, RecurringMode
from wealthtrack.domain.errors import ValidationError
from wealthtrack.domain.validation import (
    decimal_places,
    normalize_symbol,
    validate_choice,
    validate_color,
    validate_decimal,
    validate_notes,
    validate_period,
    validate_rule_window,
    validate_total_matches,
)


def test_decimal_places():
    assert decimal_places(Decimal("1.2300")) == 2
    assert decimal_places(Decimal("100")) == 0
    assert decimal_places(Decimal("0.00000001")) == 8


def test_validate_decimal_accepts_strings():
    assert validate_decimal("12.5", "amount", minimum=Decimal("0.01"), maximum=Decimal("100")) == Decimal("12.5")


@pytest.mark.parametrize("value", ["abc", None, True, "NaN", "Infinity"])
def test_validate_decimal_rejects_non_numbers(value):
    with pytest.raises(ValidationError) as exc_info:
        validate_decimal(value, "amount", minimum=Decimal("0"), maximum=Decimal("10"))
    assert exc_info.value.field == "amount"


def test_validate_decimal_bounds_and_places():
    with pytest.raises(ValidationError, match="at least"):
        validate_decimal("0", "units", minimum=Decimal("0.00000001"), maximum=Decimal("10"))
    with pytest.raises(ValidationError, match="cannot exceed"):
        validate_decimal("11", "units", minimum=Decimal("0"), maximum=Decimal("10"))
    with pytest.raises(ValidationError, match="at most 2 decimal places"):
        validate_decimal("1.001", "price", minimum=Decimal("0"), maximum=Decimal("10"), places=2)


def test_validate_period_leap_day():
    assert validate_period(2024, 2, 29) == Period(2024, 2)
    with pytest.raises(ValidationError) as exc_info:
        validate_period(2023, 2, 29)
    assert exc_info.value.field == "day"


def test_validate_period_year_range():
    with pytest.raises(ValidationError):
        validate_period(2101, 1)


def test_total_tolerance():
    validate_total_matches(Decimal("3"), Decimal("0.33"), Decimal("1.00"))
    with pytest.raises(ValidationError):
        validate_total_matches(Decimal("3"), Decimal("0.33"), Decimal("1.01"))


def test_normalize_symbol():
    assert normalize_symbol(" aapl ") == "AAPL"
    with pytest.raises(ValidationError):
        normalize_symbol("  ")


def test_validate_color():
    assert validate_color(None) is None
    assert validate_color("#0EA5E9") == "#0EA5E9"
    with pytest.raises(ValidationError):
        validate_color("#0ea5e")


def test_validate_notes_strips_and_limits():
    assert validate_notes(None) == ""
    assert validate_notes("  hi  ") == "hi"
    assert len(validate_notes("x" * 500)) == 500
    with pytest.raises(ValidationError):
        validate_notes("x" * 501)


def test_rule_window_open_ended():
    assert validate_rule_window(2024, 6) == (Period(2024, 6), None)


def test_rule_window_same_month():
    assert validate_rule_window(2024, 6, 2024, 6) == (Period(2024, 6), Period(2024, 6))


def test_rule_window_end_month_without_year():
    with pytest.raises(ValidationError, match="together"):
        validate_rule_window(2024, 6, end_month=7)


def test_validate_choice():
    assert validate_choice("auto_confirm", RecurringMode, "mode") is RecurringMode.AUTO_CONFIRM
    assert validate_choice(RecurringMode.PENDING, RecurringMode, "mode") is RecurringMode.PENDING
    with pytest.raises(ValidationError, match="pending, auto_confirm"):
        validate_choice("never", RecurringMode, "mode")
