"""Utility functions for wealthtrack."""

from wealthtrack.utils.period_parser import parse_period
from wealthtrack.utils.amount_parser import parse_amount
from wealthtrack.utils.resolvers import resolve_account, resolve_asset

__all__ = ["parse_period", "parse_amount", "resolve_account", "resolve_asset"]
