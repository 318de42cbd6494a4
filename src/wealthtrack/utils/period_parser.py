"""Period parsing utilities."""

from datetime import date, datetime
from typing import Optional

from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta

from wealthtrack.domain.entities import Period


def parse_period(period_str: str, today: Optional[date] = None) -> Period:
    """Parse a string into a calendar month.

    Supports:
    - "2024-06", "2024/06"
    - Month names: "June 2024", "Jun 2024"
    - Relative months: "this month", "last month", "next month"

    Args:
        period_str: Period string
        today: Reference date for relative months (defaults to today)

    Returns:
        Period for the month

    Raises:
        ValueError: If the string cannot be parsed
    """
    text = period_str.strip().lower()
    today = today or date.today()

    relative_months = {
        "this month": today,
        "last month": today - relativedelta(months=1),
        "next month": today + relativedelta(months=1),
    }
    if text in relative_months:
        target = relative_months[text]
        return Period(target.year, target.month)

    # "2024-06" would otherwise be read as June of the current year on day 2024
    parts = text.replace("/", "-").split("-")
    if len(parts) == 2 and all(part.isdigit() for part in parts):
        year, month = int(parts[0]), int(parts[1])
        if not 1 <= month <= 12:
            raise ValueError(f"Could not parse period '{period_str}': month must be 1-12")
        return Period(year, month)

    try:
        # Day 1 default keeps "February 2024" from failing on the 30th
        parsed = date_parser.parse(text, default=datetime(today.year, today.month, 1))
    except (ValueError, TypeError, OverflowError) as e:
        raise ValueError(f"Could not parse period '{period_str}': {e}")
    return Period(parsed.year, parsed.month)
