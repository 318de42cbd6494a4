"""CLI helpers for resolving references and parsing inputs, or exiting."""

from __future__ import annotations

from decimal import Decimal

import click

from wealthtrack.cli.error_handling import handle_domain_error
from wealthtrack.domain.entities import Period
from wealthtrack.domain.investment import InvestmentService
from wealthtrack.domain.savings import SavingsService
from wealthtrack.utils.amount_parser import parse_amount
from wealthtrack.utils.period_parser import parse_period
from wealthtrack.utils.resolvers import resolve_account, resolve_asset


def resolve_asset_or_exit(
    ctx: click.Context, investment_service: InvestmentService, asset: str | int
) -> int:
    """Resolve asset symbol or ID, or exit with a CLI error."""
    try:
        return resolve_asset(investment_service, ctx.obj["owner"], asset)
    except ValueError as exc:
        handle_domain_error(ctx, exc)


def resolve_account_or_exit(
    ctx: click.Context, savings_service: SavingsService, account: str | int
) -> int:
    """Resolve savings account name or ID, or exit with a CLI error."""
    try:
        return resolve_account(savings_service, ctx.obj["owner"], account)
    except ValueError as exc:
        handle_domain_error(ctx, exc)


def parse_period_or_exit(ctx: click.Context, value: str, label: str = "period") -> Period:
    try:
        return parse_period(value)
    except ValueError as exc:
        click.echo(f"Error: Invalid {label}: {exc}", err=True)
        ctx.exit(1)


def parse_amount_or_exit(ctx: click.Context, value: str, label: str = "amount") -> Decimal:
    try:
        return parse_amount(value)
    except ValueError as exc:
        click.echo(f"Error: Invalid {label}: {exc}", err=True)
        ctx.exit(1)
