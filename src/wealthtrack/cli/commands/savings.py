"""Savings account and savings transaction commands."""

import click
from wealthtrack.cli.display import format_txn_date
from wealthtrack.cli.error_handling import handle_domain_error
from wealthtrack.cli.resolution import (
    parse_amount_or_exit,
    parse_period_or_exit,
    resolve_account_or_exit,
)
from wealthtrack.domain.entities import (
    ReturnFrequency,
    SavingsTransactionType,
    TransactionStatus,
)
from wealthtrack.domain.savings import DEFAULT_PAGE_SIZE, SavingsService

FREQUENCY_CHOICE = click.Choice([f.value for f in ReturnFrequency], case_sensitive=False)


@click.group()
def savings_group():
    """Manage savings accounts and their transactions."""
    pass


@savings_group.command("create")
@click.argument("name", metavar="ACCOUNT_NAME")
@click.option("--starting-balance", default="0", help="Balance before any recorded transaction")
@click.option("--goal", default="0", help="Savings goal")
@click.option("--rate", default="0", help="Annual return rate in percent (display only)")
@click.option("--frequency", type=FREQUENCY_CHOICE, default=ReturnFrequency.DAILY_WORKING.value, help="Return frequency")
@click.option("--monthly-contribution", default="0", help="Planned monthly contribution")
@click.option("--reminder", is_flag=True, help="Enable deposit reminders")
@click.option("--color", help="Display colour as #rrggbb")
@click.pass_context
def create_account(
    ctx,
    name: str,
    starting_balance: str,
    goal: str,
    rate: str,
    frequency: str,
    monthly_contribution: str,
    reminder: bool,
    color: str | None,
):
    """Create a savings account.

    Examples:
        wealthtrack savings create "Emergency Fund" --goal 10000
        wealthtrack savings create "ASB" --starting-balance 1000 --rate 4.5 --frequency yearly
    """
    service = SavingsService(ctx.obj["db"])

    try:
        account = service.create_account(
            ctx.obj["owner"],
            name=name,
            starting_balance=parse_amount_or_exit(ctx, starting_balance, "starting balance"),
            goal=parse_amount_or_exit(ctx, goal, "goal"),
            rate_percent=parse_amount_or_exit(ctx, rate, "rate"),
            return_frequency=frequency.lower(),
            monthly_contribution=parse_amount_or_exit(ctx, monthly_contribution, "monthly contribution"),
            auto_deposit_reminder=reminder,
            color=color,
        )
        click.echo(f"Created savings account '{account.name}' (ID: {account.id})")
    except ValueError as e:
        handle_domain_error(ctx, e)


@savings_group.command("list")
@click.pass_context
def list_accounts(ctx):
    """List savings accounts with their balances."""
    service = SavingsService(ctx.obj["db"])

    accounts = service.list_accounts(ctx.obj["owner"])
    if not accounts:
        click.echo("No savings accounts found.")
        return

    click.echo("\nSavings accounts:")
    click.echo("-" * 80)
    for acc in accounts:
        line = f"ID: {acc.id:3d} | {acc.name:24.24s} | Balance: {acc.current_balance:>14,.2f}"
        if acc.goal_progress is not None:
            line += f" | Goal: {acc.goal:,.2f} ({acc.goal_progress:.0%})"
        click.echo(line)


@savings_group.command("show")
@click.argument("account", metavar="ACCOUNT")
@click.pass_context
def show_account(ctx, account: str):
    """Show a savings account and its totals.

    ACCOUNT can be an account name or ID.
    """
    service = SavingsService(ctx.obj["db"])
    account_id = resolve_account_or_exit(ctx, service, account)

    try:
        acc = service.get_account(ctx.obj["owner"], account_id)
    except ValueError as e:
        handle_domain_error(ctx, e)

    click.echo(f"\n{acc.name} (ID: {acc.id})")
    click.echo(f"  Starting balance: {acc.starting_balance:,.2f}")
    click.echo(f"  Contributed: {acc.total_contributed:,.2f}")
    click.echo(f"  Dividends: {acc.total_dividends:,.2f}")
    click.echo(f"  Withdrawn: {acc.total_withdrawn:,.2f}")
    click.echo(f"  Current balance: {acc.current_balance:,.2f}")
    click.echo(f"  Rate: {acc.rate_percent}% ({acc.return_frequency.value})")
    if acc.goal_progress is not None:
        click.echo(f"  Goal: {acc.goal:,.2f} ({acc.goal_progress:.0%} reached)")


@savings_group.command("update")
@click.argument("account", metavar="ACCOUNT")
@click.option("--name", help="New account name")
@click.option("--starting-balance", help="New starting balance (recomputes the balance)")
@click.option("--goal", help="New savings goal")
@click.option("--rate", help="New annual return rate in percent")
@click.option("--frequency", type=FREQUENCY_CHOICE, help="New return frequency")
@click.option("--monthly-contribution", help="New planned monthly contribution")
@click.option("--reminder/--no-reminder", default=None, help="Enable or disable deposit reminders")
@click.option("--color", help="New display colour as #rrggbb")
@click.pass_context
def update_account(
    ctx,
    account: str,
    name: str | None,
    starting_balance: str | None,
    goal: str | None,
    rate: str | None,
    frequency: str | None,
    monthly_contribution: str | None,
    reminder: bool | None,
    color: str | None,
):
    """Update a savings account.

    ACCOUNT can be an account name or ID.
    """
    service = SavingsService(ctx.obj["db"])
    account_id = resolve_account_or_exit(ctx, service, account)

    def optional_amount(value, label):
        return parse_amount_or_exit(ctx, value, label) if value is not None else None

    try:
        acc = service.update_account(
            ctx.obj["owner"],
            account_id,
            name=name,
            color=color,
            goal=optional_amount(goal, "goal"),
            starting_balance=optional_amount(starting_balance, "starting balance"),
            rate_percent=optional_amount(rate, "rate"),
            return_frequency=frequency.lower() if frequency else None,
            monthly_contribution=optional_amount(monthly_contribution, "monthly contribution"),
            auto_deposit_reminder=reminder,
        )
        click.echo(f"Updated savings account '{acc.name}' (balance: {acc.current_balance:,.2f})")
    except ValueError as e:
        handle_domain_error(ctx, e)


@savings_group.command("delete")
@click.argument("account", metavar="ACCOUNT")
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete_account(ctx, account: str, yes: bool):
    """Delete a savings account with all its transactions and recurring rules.

    ACCOUNT can be an account name or ID.
    """
    db = ctx.obj["db"]
    service = SavingsService(db)
    owner = ctx.obj["owner"]
    account_id = resolve_account_or_exit(ctx, service, account)

    try:
        acc = service.get_account(owner, account_id)
    except ValueError as e:
        handle_domain_error(ctx, e)

    count = db.get_savings_account_transaction_count(account_id)
    prompt = f"Are you sure you want to delete savings account '{acc.name}' (ID: {acc.id})"
    if count:
        prompt += f" and its {count} transaction{'s' if count != 1 else ''}"
    if not yes and not click.confirm(prompt + "?"):
        click.echo("Deletion cancelled.")
        return

    try:
        service.delete_account(owner, account_id)
        click.echo(f"Deleted savings account '{acc.name}'")
    except ValueError as e:
        handle_domain_error(ctx, e)


@savings_group.command("add")
@click.option("--account", required=True, help="Account name or ID")
@click.option(
    "--type",
    "transaction_type",
    type=click.Choice([t.value for t in SavingsTransactionType], case_sensitive=False),
    default=SavingsTransactionType.CAPITAL_ADD.value,
    help="Transaction type (default: capital_add)",
)
@click.option("--amount", required=True, help="Amount (e.g., 200 or 1,250.50)")
@click.option("--period", required=True, help="Month of the transaction (e.g., 2024-06, 'June 2024', 'this month')")
@click.option("--day", type=int, help="Day of month")
@click.option("--pending", is_flag=True, help="Record as pending; it does not count until confirmed")
@click.option("--notes", help="Notes")
@click.pass_context
def add_savings_transaction(
    ctx,
    account: str,
    transaction_type: str,
    amount: str,
    period: str,
    day: int | None,
    pending: bool,
    notes: str | None,
):
    """Add a deposit, dividend or withdrawal.

    Examples:
        wealthtrack savings add --account "Emergency Fund" --amount 200 --period 2024-06
        wealthtrack savings add --account 1 --type withdrawal --amount 100 --period "this month" --pending
    """
    service = SavingsService(ctx.obj["db"])
    account_id = resolve_account_or_exit(ctx, service, account)
    txn_amount = parse_amount_or_exit(ctx, amount)
    txn_period = parse_period_or_exit(ctx, period)

    try:
        txn = service.create_transaction(
            ctx.obj["owner"],
            account_id,
            transaction_type.lower(),
            txn_amount,
            txn_period.year,
            txn_period.month,
            day=day,
            status=TransactionStatus.PENDING if pending else TransactionStatus.COMPLETED,
            notes=notes,
        )
        acc = service.get_account(ctx.obj["owner"], account_id)
        click.echo(
            f"Added {txn.transaction_type.value} of {txn.amount:,.2f} ({txn.status.value}, ID: {txn.id}); "
            f"balance is {acc.current_balance:,.2f}"
        )
    except ValueError as e:
        handle_domain_error(ctx, e)


@savings_group.command("transactions")
@click.option("--year", type=int, help="Filter by year")
@click.option("--month", type=int, help="Filter by month (1-12)")
@click.option("--account", help="Account name or ID")
@click.option("--page", type=int, default=1, help="Page number (default: 1)")
@click.option("--limit", type=int, default=DEFAULT_PAGE_SIZE, help=f"Rows per page (default: {DEFAULT_PAGE_SIZE})")
@click.pass_context
def list_savings_transactions(
    ctx, year: int | None, month: int | None, account: str | None, page: int, limit: int
):
    """List savings transactions, newest first."""
    service = SavingsService(ctx.obj["db"])
    account_id = resolve_account_or_exit(ctx, service, account) if account else None

    try:
        result = service.list_transactions(
            ctx.obj["owner"], year=year, month=month, account_id=account_id, page=page, limit=limit
        )
    except ValueError as e:
        handle_domain_error(ctx, e)

    if not result.items:
        click.echo("No transactions found.")
        return

    click.echo(f"\nPage {result.page} of {result.total_pages} ({result.total} transaction(s)):")
    click.echo("-" * 100)
    for txn in result.items:
        line = (
            f"ID: {txn.id:4d} | {format_txn_date(txn.year, txn.month, txn.day)} | "
            f"{(txn.account_name or ''):20.20s} | {txn.transaction_type.value:11s} | "
            f"{txn.amount:>12,.2f} | {txn.status.value:9s} | {txn.source.value}"
        )
        if txn.notes:
            line += f" | {txn.notes}"
        click.echo(line)
    if result.has_more:
        click.echo(f"\nMore transactions available; use --page {result.page + 1}")


@savings_group.command("confirm")
@click.argument("transaction_id", type=int)
@click.pass_context
def confirm_transaction(ctx, transaction_id: int):
    """Mark a pending transaction as completed."""
    service = SavingsService(ctx.obj["db"])
    try:
        txn = service.update_transaction_status(ctx.obj["owner"], transaction_id, TransactionStatus.COMPLETED)
        acc = service.get_account(ctx.obj["owner"], txn.account_id)
        click.echo(f"Confirmed transaction {txn.id}; balance is {acc.current_balance:,.2f}")
    except ValueError as e:
        handle_domain_error(ctx, e)


@savings_group.command("note")
@click.argument("transaction_id", type=int)
@click.argument("notes", required=False)
@click.option("--clear", is_flag=True, help="Clear notes")
@click.pass_context
def note_transaction(ctx, transaction_id: int, notes: str | None, clear: bool):
    """Set or clear the notes of a savings transaction."""
    if not clear and notes is None:
        click.echo("Error: Provide NOTES or --clear", err=True)
        ctx.exit(1)

    service = SavingsService(ctx.obj["db"])
    try:
        service.update_transaction_notes(ctx.obj["owner"], transaction_id, "" if clear else notes)
        click.echo(f"Updated notes for transaction {transaction_id}")
    except ValueError as e:
        handle_domain_error(ctx, e)


@savings_group.command("remove")
@click.argument("transaction_id", type=int)
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def remove_transaction(ctx, transaction_id: int, yes: bool):
    """Delete a savings transaction and recompute the account balance.

    Completed recurring deposits cannot be deleted.
    """
    service = SavingsService(ctx.obj["db"])
    owner = ctx.obj["owner"]

    try:
        txn = service.get_transaction(owner, transaction_id)
    except ValueError as e:
        handle_domain_error(ctx, e)

    if not yes and not click.confirm(
        f"Are you sure you want to delete {txn.transaction_type.value} of {txn.amount:,.2f} (ID: {txn.id})?"
    ):
        click.echo("Deletion cancelled.")
        return

    try:
        service.delete_transaction(owner, transaction_id)
        click.echo(f"Deleted transaction {transaction_id}")
    except ValueError as e:
        handle_domain_error(ctx, e)


def register_commands(cli):
    """Register savings commands with main CLI."""
    cli.add_command(savings_group, name="savings")
