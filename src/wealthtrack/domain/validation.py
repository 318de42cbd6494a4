"""Field validation shared by the domain services.

All checks run before a unit of work is opened and raise ValidationError
naming the offending field.
"""

import calendar
import re
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Optional, TypeVar

from wealthtrack.domain.entities import Period
from wealthtrack.domain.errors import ValidationError

MIN_YEAR = 2000
MAX_YEAR = 2100
MAX_NOTES_LENGTH = 500
MAX_NAME_LENGTH = 100
MAX_SYMBOL_LENGTH = 20
MAX_DAY_OF_MONTH = 28
TOTAL_TOLERANCE = Decimal("0.01")

MIN_UNITS = Decimal("0.00000001")
MAX_UNITS = Decimal("999999999")
MIN_PRICE = Decimal("0.01")
MAX_PRICE = Decimal("999999999")
MIN_TOTAL = Decimal("0.01")
MAX_TOTAL = Decimal("9999999999")
MIN_AMOUNT = Decimal("0.01")
MAX_AMOUNT = Decimal("999999999")

_HEX_COLOR = re.compile(r"^#[0-9a-fA-F]{6}$")

E = TypeVar("E", bound=Enum)


def to_decimal(value: Any, field: str) -> Decimal:
    """Convert a number or numeric string to Decimal."""
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, bool) or value is None:
        raise ValidationError(f"{field} must be a number", field=field)
    else:
        try:
            result = Decimal(str(value).strip())
        except InvalidOperation:
            raise ValidationError(f"{field} must be a number", field=field)
    if not result.is_finite():
        raise ValidationError(f"{field} must be a finite number", field=field)
    return result


def decimal_places(value: Decimal) -> int:
    """Return the number of significant decimal places in value."""
    exponent = value.normalize().as_tuple().exponent
    return max(0, -exponent)


def validate_decimal(
    value: Any,
    field: str,
    *,
    minimum: Decimal,
    maximum: Decimal,
    places: Optional[int] = None,
) -> Decimal:
    """Validate a bounded decimal quantity.

    Args:
        value: Raw value (Decimal, int, float or string)
        field: Field name reported on failure
        minimum: Smallest allowed value (inclusive)
        maximum: Largest allowed value (inclusive)
        places: Maximum number of decimal places, if limited

    Returns:
        The value as a Decimal
    """
    amount = to_decimal(value, field)
    if amount < minimum:
        raise ValidationError(f"{field} must be at least {minimum}", field=field)
    if amount > maximum:
        raise ValidationError(f"{field} cannot exceed {maximum:,}", field=field)
    if places is not None and decimal_places(amount) > places:
        raise ValidationError(f"{field} can have at most {places} decimal places", field=field)
    return amount


def validate_non_negative(value: Any, field: str, maximum: Decimal = MAX_AMOUNT) -> Decimal:
    """Validate a display-only amount such as a goal or starting balance."""
    return validate_decimal(value, field, minimum=Decimal("0"), maximum=maximum)


def validate_period(year: int, month: int, day: Optional[int] = None) -> Period:
    """Validate a (year, month, optional day) triple.

    Raises:
        ValidationError: If any part is out of range or the day does not
            exist in the given month
    """
    if not isinstance(year, int) or not MIN_YEAR <= year <= MAX_YEAR:
        raise ValidationError(f"Year must be between {MIN_YEAR} and {MAX_YEAR}", field="year")
    if not isinstance(month, int) or not 1 <= month <= 12:
        raise ValidationError("Month must be between 1 and 12", field="month")
    if day is not None:
        max_day = calendar.monthrange(year, month)[1]
        if not isinstance(day, int) or not 1 <= day <= max_day:
            raise ValidationError(
                f"Day {day} is invalid for {month}/{year} (max: {max_day})", field="day"
            )
    return Period(year, month)


def validate_total_matches(units: Decimal, price_per_unit: Decimal, total_amount: Decimal) -> None:
    """Require total_amount to equal units x price within one cent."""
    if abs(units * price_per_unit - total_amount) > TOTAL_TOLERANCE:
        raise ValidationError(
            "Total amount must equal units × price per unit", field="total_amount"
        )


def validate_notes(notes: Optional[str]) -> str:
    """Return stripped notes, rejecting overly long text."""
    text = (notes or "").strip()
    if len(text) > MAX_NOTES_LENGTH:
        raise ValidationError(
            f"Notes cannot exceed {MAX_NOTES_LENGTH} characters", field="notes"
        )
    return text


def validate_name(name: Optional[str], field: str = "name") -> str:
    """Return a stripped, non-empty name of bounded length."""
    text = (name or "").strip()
    if not text:
        raise ValidationError(f"{field.capitalize()} is required", field=field)
    if len(text) > MAX_NAME_LENGTH:
        raise ValidationError(
            f"{field.capitalize()} cannot exceed {MAX_NAME_LENGTH} characters", field=field
        )
    return text


def normalize_symbol(symbol: Optional[str]) -> str:
    """Strip and upper-case a ticker symbol."""
    text = (symbol or "").strip().upper()
    if not text:
        raise ValidationError("Symbol is required", field="symbol")
    if len(text) > MAX_SYMBOL_LENGTH:
        raise ValidationError(
            f"Symbol cannot exceed {MAX_SYMBOL_LENGTH} characters", field="symbol"
        )
    return text


def validate_color(color: Optional[str]) -> Optional[str]:
    """Validate an optional #rrggbb colour."""
    if color is None:
        return None
    if not _HEX_COLOR.match(color):
        raise ValidationError(
            f"{color} is not a valid hex color (e.g., #0ea5e9)", field="color"
        )
    return color


def validate_day_of_month(day: int) -> int:
    """Validate a recurring rule day; capped at 28 so every month has it."""
    if not isinstance(day, int) or not 1 <= day <= MAX_DAY_OF_MONTH:
        raise ValidationError(
            f"Day of month must be between 1 and {MAX_DAY_OF_MONTH}", field="day_of_month"
        )
    return day


def validate_rule_window(
    start_year: int,
    start_month: int,
    end_year: Optional[int] = None,
    end_month: Optional[int] = None,
) -> tuple[Period, Optional[Period]]:
    """Validate a recurring rule's start and optional end periods.

    Both end fields must be given together, and the end may not precede
    the start.
    """
    try:
        start = validate_period(start_year, start_month)
    except ValidationError as exc:
        raise ValidationError(f"Start: {exc}", field=f"start_{exc.field}")

    if (end_year is None) != (end_month is None):
        raise ValidationError(
            "Both end year and end month must be provided together", field="end_year"
        )
    if end_year is None:
        return start, None

    try:
        end = validate_period(end_year, end_month)
    except ValidationError as exc:
        raise ValidationError(f"End: {exc}", field=f"end_{exc.field}")
    if end.index < start.index:
        raise ValidationError("End date must be after start date", field="end_year")
    return start, end


def validate_choice(value: Any, enum_cls: type[E], field: str) -> E:
    """Coerce a raw value into a member of enum_cls."""
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(member.value for member in enum_cls)
        raise ValidationError(f"{field} must be one of: {allowed}", field=field)
