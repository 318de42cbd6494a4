"""Asset management commands."""

import click
from wealthtrack.cli.display import format_txn_date
from wealthtrack.cli.error_handling import handle_domain_error
from wealthtrack.cli.resolution import resolve_asset_or_exit
from wealthtrack.domain.entities import AssetType, Currency, Exchange
from wealthtrack.domain.investment import InvestmentService


@click.group()
def asset_group():
    """Manage investment assets."""
    pass


@asset_group.command("create")
@click.argument("symbol", metavar="SYMBOL")
@click.argument("name", metavar="NAME")
@click.option(
    "--type",
    "asset_type",
    required=True,
    type=click.Choice([t.value for t in AssetType], case_sensitive=False),
    help="Asset type",
)
@click.option(
    "--exchange",
    type=click.Choice([e.value for e in Exchange], case_sensitive=False),
    default=Exchange.US.value,
    help="Exchange (default: US)",
)
@click.option(
    "--currency",
    type=click.Choice([c.value for c in Currency], case_sensitive=False),
    default=Currency.USD.value,
    help="Currency (default: USD)",
)
@click.option("--color", help="Display colour as #rrggbb")
@click.pass_context
def create_asset(ctx, symbol: str, name: str, asset_type: str, exchange: str, currency: str, color: str | None):
    """Create a new asset.

    Examples:
        wealthtrack asset create VOO "Vanguard S&P 500" --type etf
        wealthtrack asset create MAYBANK "Malayan Banking" --type stock --exchange KLSE --currency MYR
    """
    service = InvestmentService(ctx.obj["db"])

    try:
        asset = service.create_asset(
            ctx.obj["owner"],
            name=name,
            symbol=symbol,
            asset_type=asset_type.lower(),
            exchange=exchange.upper(),
            currency=currency.upper(),
            color=color,
        )
        click.echo(f"Created asset {asset.symbol} '{asset.name}' (ID: {asset.id})")
    except ValueError as e:
        handle_domain_error(ctx, e)


@asset_group.command("list")
@click.pass_context
def list_assets(ctx):
    """List all assets with their holdings."""
    service = InvestmentService(ctx.obj["db"])

    assets = service.list_assets(ctx.obj["owner"])
    if not assets:
        click.echo("No assets found.")
        return

    click.echo("\nAssets:")
    click.echo("-" * 90)
    for a in assets:
        click.echo(
            f"ID: {a.id:3d} | {a.symbol:10s} | {a.name:24.24s} | {a.asset_type.value:6s} | "
            f"Units: {a.total_units:>16,.8f} | Invested: {a.total_invested:>14,.2f} {a.currency.value}"
        )


@asset_group.command("show")
@click.argument("asset", metavar="ASSET")
@click.pass_context
def show_asset(ctx, asset: str):
    """Show an asset and the running totals after each of its transactions.

    ASSET can be a symbol or ID.
    """
    service = InvestmentService(ctx.obj["db"])
    owner = ctx.obj["owner"]
    asset_id = resolve_asset_or_exit(ctx, service, asset)

    try:
        a = service.get_asset(owner, asset_id)
        history = service.get_asset_history(owner, asset_id)
    except ValueError as e:
        handle_domain_error(ctx, e)

    click.echo(f"\n{a.symbol} - {a.name} (ID: {a.id})")
    click.echo(f"  Type: {a.asset_type.value} | Exchange: {a.exchange.value} | Currency: {a.currency.value}")
    click.echo(f"  Units held: {a.total_units:,.8f}")
    click.echo(f"  Invested: {a.total_invested:,.2f}")
    click.echo(f"  Average cost: {a.average_cost:,.4f}")

    if not history:
        click.echo("\nNo transactions.")
        return

    click.echo("\nHistory:")
    click.echo("-" * 90)
    for txn, totals in history:
        click.echo(
            f"{format_txn_date(txn.year, txn.month, txn.day)} | {txn.transaction_type.value:8s} | "
            f"{txn.units:>16,.8f} @ {txn.price_per_unit:>10,.2f} | "
            f"Units: {totals.total_units:>16,.8f} | Invested: {totals.total_invested:>14,.2f}"
        )


@asset_group.command("rename")
@click.argument("asset", metavar="ASSET")
@click.argument("new_name", metavar="NEW_NAME")
@click.option("--color", help="New display colour as #rrggbb")
@click.pass_context
def rename_asset(ctx, asset: str, new_name: str, color: str | None) -> None:
    """Rename an asset.

    ASSET can be a symbol or ID.

    Examples:
        wealthtrack asset rename VOO "Vanguard 500 ETF"
        wealthtrack asset rename 1 "Gold" --color "#facc15"
    """
    service = InvestmentService(ctx.obj["db"])
    asset_id = resolve_asset_or_exit(ctx, service, asset)

    try:
        updated = service.update_asset(ctx.obj["owner"], asset_id, name=new_name, color=color)
        click.echo(f"Renamed asset {updated.symbol} to '{updated.name}'")
    except ValueError as e:
        handle_domain_error(ctx, e)


@asset_group.command("delete")
@click.argument("asset", metavar="ASSET")
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete_asset(ctx, asset: str, yes: bool) -> None:
    """Delete an asset.

    ASSET can be a symbol or ID. The asset is hidden and accepts no new
    transactions; its transaction history is kept.
    """
    service = InvestmentService(ctx.obj["db"])
    owner = ctx.obj["owner"]
    asset_id = resolve_asset_or_exit(ctx, service, asset)

    try:
        a = service.get_asset(owner, asset_id)
    except ValueError as e:
        handle_domain_error(ctx, e)

    if not yes and not click.confirm(f"Are you sure you want to delete asset {a.symbol} (ID: {a.id})?"):
        click.echo("Deletion cancelled.")
        return

    try:
        service.delete_asset(owner, asset_id)
        click.echo(f"Deleted asset {a.symbol}")
    except ValueError as e:
        handle_domain_error(ctx, e)


@asset_group.command("recompute")
@click.pass_context
def recompute_assets(ctx) -> None:
    """Rebuild every asset's totals from its transactions."""
    service = InvestmentService(ctx.obj["db"])
    try:
        count = service.recompute_all(ctx.obj["owner"])
        click.echo(f"Recomputed {count} asset(s)")
    except ValueError as e:
        handle_domain_error(ctx, e)


def register_commands(cli):
    """Register asset commands with main CLI."""
    cli.add_command(asset_group, name="asset")
