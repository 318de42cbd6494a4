"""Investment transaction commands."""

from decimal import Decimal

import click
from wealthtrack.cli.display import format_txn_date
from wealthtrack.cli.error_handling import handle_domain_error
from wealthtrack.cli.resolution import (
    parse_amount_or_exit,
    parse_period_or_exit,
    resolve_asset_or_exit,
)
from wealthtrack.domain.entities import InvestmentTransactionType
from wealthtrack.domain.investment import InvestmentService


@click.group()
def invest_group():
    """Record and review investment transactions."""
    pass


@invest_group.command("add")
@click.option("--asset", required=True, help="Asset symbol or ID")
@click.option(
    "--type",
    "transaction_type",
    required=True,
    type=click.Choice([t.value for t in InvestmentTransactionType], case_sensitive=False),
    help="Transaction type",
)
@click.option("--units", required=True, help="Number of units (up to 8 decimal places)")
@click.option("--price", required=True, help="Price per unit")
@click.option("--total", help="Total amount (defaults to units x price)")
@click.option("--period", required=True, help="Month of the transaction (e.g., 2024-06, 'June 2024', 'this month')")
@click.option("--day", type=int, help="Day of month")
@click.option("--notes", help="Notes")
@click.pass_context
def add_investment(
    ctx,
    asset: str,
    transaction_type: str,
    units: str,
    price: str,
    total: str | None,
    period: str,
    day: int | None,
    notes: str | None,
):
    """Add a buy, sell or dividend.

    Examples:
        wealthtrack invest add --asset VOO --type buy --units 10 --price 200 --period 2024-01
        wealthtrack invest add --asset VOO --type sell --units 5 --price 210 --period "last month" --day 15
    """
    service = InvestmentService(ctx.obj["db"])
    asset_id = resolve_asset_or_exit(ctx, service, asset)

    txn_units = parse_amount_or_exit(ctx, units, "units")
    txn_price = parse_amount_or_exit(ctx, price, "price")
    if total is not None:
        txn_total = parse_amount_or_exit(ctx, total, "total")
    else:
        txn_total = (txn_units * txn_price).quantize(Decimal("0.01"))
    txn_period = parse_period_or_exit(ctx, period)

    try:
        txn = service.create_transaction(
            ctx.obj["owner"],
            asset_id,
            transaction_type.lower(),
            units=txn_units,
            price_per_unit=txn_price,
            total_amount=txn_total,
            year=txn_period.year,
            month=txn_period.month,
            day=day,
            notes=notes,
        )
        held = service.get_asset_aggregate(ctx.obj["owner"], asset_id)
        click.echo(
            f"Added {txn.transaction_type.value} of {txn.units} {txn.asset_symbol} "
            f"(ID: {txn.id}); now holding {held.total_units} units"
        )
    except ValueError as e:
        handle_domain_error(ctx, e)


@invest_group.command("list")
@click.option("--year", type=int, help="Filter by year")
@click.option("--month", type=int, help="Filter by month (1-12)")
@click.option("--asset", help="Asset symbol or ID")
@click.pass_context
def list_investments(ctx, year: int | None, month: int | None, asset: str | None):
    """List investment transactions, newest first."""
    service = InvestmentService(ctx.obj["db"])
    asset_id = resolve_asset_or_exit(ctx, service, asset) if asset else None

    try:
        transactions = service.list_transactions(ctx.obj["owner"], year=year, month=month, asset_id=asset_id)
    except ValueError as e:
        handle_domain_error(ctx, e)

    if not transactions:
        click.echo("No transactions found.")
        return

    click.echo(f"\nFound {len(transactions)} transaction(s):")
    click.echo("-" * 100)
    for txn in transactions:
        line = (
            f"ID: {txn.id:4d} | {format_txn_date(txn.year, txn.month, txn.day)} | "
            f"{txn.asset_symbol:10s} | {txn.transaction_type.value:8s} | "
            f"{txn.units:>16,.8f} @ {txn.price_per_unit:>10,.2f} = {txn.total_amount:>14,.2f} {txn.currency.value}"
        )
        if txn.notes:
            line += f" | {txn.notes}"
        click.echo(line)


@invest_group.command("note")
@click.argument("transaction_id", type=int)
@click.argument("notes", required=False)
@click.option("--clear", is_flag=True, help="Clear notes")
@click.pass_context
def note_investment(ctx, transaction_id: int, notes: str | None, clear: bool):
    """Set or clear the notes of an investment transaction."""
    if not clear and notes is None:
        click.echo("Error: Provide NOTES or --clear", err=True)
        ctx.exit(1)

    service = InvestmentService(ctx.obj["db"])
    try:
        service.update_transaction_notes(ctx.obj["owner"], transaction_id, "" if clear else notes)
        click.echo(f"Updated notes for transaction {transaction_id}")
    except ValueError as e:
        handle_domain_error(ctx, e)


@invest_group.command("delete")
@click.argument("transaction_id", type=int)
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete_investment(ctx, transaction_id: int, yes: bool):
    """Delete an investment transaction and recompute its asset."""
    service = InvestmentService(ctx.obj["db"])
    owner = ctx.obj["owner"]

    try:
        txn = service.get_transaction(owner, transaction_id)
    except ValueError as e:
        handle_domain_error(ctx, e)

    if not yes and not click.confirm(
        f"Are you sure you want to delete {txn.transaction_type.value} of {txn.units} {txn.asset_symbol} (ID: {txn.id})?"
    ):
        click.echo("Deletion cancelled.")
        return

    try:
        service.delete_transaction(owner, transaction_id)
        click.echo(f"Deleted transaction {transaction_id}")
    except ValueError as e:
        handle_domain_error(ctx, e)


def register_commands(cli):
    """Register investment commands with main CLI."""
    cli.add_command(invest_group, name="invest")
