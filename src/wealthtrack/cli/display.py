"""CLI display helpers."""

from typing import Optional


def format_txn_date(year: int, month: int, day: Optional[int]) -> str:
    """Render a transaction date; month-only dates are padded to align."""
    if day is None:
        return f"{year:04d}-{month:02d}   "
    return f"{year:04d}-{month:02d}-{day:02d}"
