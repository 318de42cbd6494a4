"""Recurring deposit rule commands."""

import click
from wealthtrack.cli.error_handling import handle_domain_error
from wealthtrack.cli.resolution import (
    parse_amount_or_exit,
    parse_period_or_exit,
    resolve_account_or_exit,
)
from wealthtrack.domain.entities import RecurringMode
from wealthtrack.domain.recurring import DEFAULT_DAY_OF_MONTH, RecurringService
from wealthtrack.domain.savings import SavingsService


def _describe(rule) -> str:
    window = f"from {rule.start}"
    if rule.end is not None:
        window += f" to {rule.end}"
    state = "active" if rule.is_active else "paused"
    return (
        f"ID: {rule.id:3d} | Account: {rule.account_id:3d} | {rule.amount:>12,.2f} on day {rule.day_of_month:2d} | "
        f"{window} | {rule.mode.value} | {state}"
    )


@click.group()
def rule_group():
    """Manage monthly recurring deposits."""
    pass


@rule_group.command("create")
@click.option("--account", required=True, help="Account name or ID")
@click.option("--amount", required=True, help="Deposit amount")
@click.option("--start", required=True, help="First month (e.g., 2024-06)")
@click.option("--end", help="Last month (optional)")
@click.option("--day", type=int, default=DEFAULT_DAY_OF_MONTH, help=f"Day of month, 1-28 (default: {DEFAULT_DAY_OF_MONTH})")
@click.option("--auto-confirm", is_flag=True, help="Generate deposits as completed instead of pending")
@click.pass_context
def create_rule(ctx, account: str, amount: str, start: str, end: str | None, day: int, auto_confirm: bool):
    """Create a monthly recurring deposit.

    Examples:
        wealthtrack rule create --account "Emergency Fund" --amount 500 --start 2024-06
        wealthtrack rule create --account 1 --amount 200 --start 2024-01 --end 2024-12 --auto-confirm
    """
    service = RecurringService(ctx.obj["db"])
    account_id = resolve_account_or_exit(ctx, service.savings, account)
    rule_amount = parse_amount_or_exit(ctx, amount)
    start_period = parse_period_or_exit(ctx, start, "start")
    end_period = parse_period_or_exit(ctx, end, "end") if end else None

    try:
        rule = service.create_rule(
            ctx.obj["owner"],
            account_id,
            rule_amount,
            start_period.year,
            start_period.month,
            end_year=end_period.year if end_period else None,
            end_month=end_period.month if end_period else None,
            day_of_month=day,
            mode=RecurringMode.AUTO_CONFIRM if auto_confirm else RecurringMode.PENDING,
        )
        click.echo(f"Created recurring rule (ID: {rule.id})")
    except ValueError as e:
        handle_domain_error(ctx, e)


@rule_group.command("list")
@click.option("--account", help="Account name or ID")
@click.pass_context
def list_rules(ctx, account: str | None):
    """List recurring rules."""
    service = RecurringService(ctx.obj["db"])
    account_id = resolve_account_or_exit(ctx, service.savings, account) if account else None

    rules = service.list_rules(ctx.obj["owner"], account_id=account_id)
    if not rules:
        click.echo("No recurring rules found.")
        return

    click.echo("\nRecurring rules:")
    click.echo("-" * 100)
    for rule in rules:
        click.echo(_describe(rule))


@rule_group.command("update")
@click.argument("rule_id", type=int)
@click.option("--amount", help="New deposit amount")
@click.option("--start", help="New first month")
@click.option("--end", help="New last month")
@click.option("--no-end", is_flag=True, help="Remove the last month")
@click.option("--day", type=int, help="New day of month, 1-28")
@click.option("--mode", type=click.Choice([m.value for m in RecurringMode], case_sensitive=False), help="New mode")
@click.option("--active/--paused", default=None, help="Resume or pause the rule")
@click.pass_context
def update_rule(
    ctx,
    rule_id: int,
    amount: str | None,
    start: str | None,
    end: str | None,
    no_end: bool,
    day: int | None,
    mode: str | None,
    active: bool | None,
):
    """Update a recurring rule. Already generated deposits are unchanged."""
    if end and no_end:
        click.echo("Error: --end and --no-end cannot be combined", err=True)
        ctx.exit(1)

    service = RecurringService(ctx.obj["db"])
    start_period = parse_period_or_exit(ctx, start, "start") if start else None
    end_period = parse_period_or_exit(ctx, end, "end") if end else None

    try:
        rule = service.update_rule(
            ctx.obj["owner"],
            rule_id,
            amount=parse_amount_or_exit(ctx, amount) if amount else None,
            day_of_month=day,
            start_year=start_period.year if start_period else None,
            start_month=start_period.month if start_period else None,
            end_year=end_period.year if end_period else None,
            end_month=end_period.month if end_period else None,
            clear_end=no_end,
            mode=mode.lower() if mode else None,
            is_active=active,
        )
        click.echo(f"Updated recurring rule:\n{_describe(rule)}")
    except ValueError as e:
        handle_domain_error(ctx, e)


@rule_group.command("delete")
@click.argument("rule_id", type=int)
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete_rule(ctx, rule_id: int, yes: bool):
    """Delete a recurring rule. Generated deposits are kept."""
    service = RecurringService(ctx.obj["db"])
    owner = ctx.obj["owner"]

    try:
        service.get_rule(owner, rule_id)
    except ValueError as e:
        handle_domain_error(ctx, e)

    if not yes and not click.confirm(f"Are you sure you want to delete recurring rule {rule_id}?"):
        click.echo("Deletion cancelled.")
        return

    try:
        service.delete_rule(owner, rule_id)
        click.echo(f"Deleted recurring rule {rule_id}")
    except ValueError as e:
        handle_domain_error(ctx, e)


@rule_group.command("generate")
@click.option("--as-of", "as_of", help="Generate up to this month (default: this month)")
@click.pass_context
def generate_deposits(ctx, as_of: str | None):
    """Create any missing deposits for active recurring rules.

    Safe to run repeatedly; months that already have a deposit are skipped.
    """
    db = ctx.obj["db"]
    service = RecurringService(db, SavingsService(db))
    now = parse_period_or_exit(ctx, as_of, "--as-of") if as_of else None

    try:
        result = service.generate_missing(ctx.obj["owner"], now=now)
        click.echo(
            f"Created {result.created} deposit(s), skipped {result.skipped} existing, "
            f"across {result.rules_processed} rule(s)"
        )
    except ValueError as e:
        handle_domain_error(ctx, e)


def register_commands(cli):
    """Register recurring rule commands with main CLI."""
    cli.add_command(rule_group, name="rule")
