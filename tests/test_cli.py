"""Tests for the command line interface."""

import pytest
from decimal import Decimal

from conftest import OWNER
from wealthtrack.cli.main import cli


@pytest.fixture
def invoke(cli_runner, temp_db):
    """Invoke the CLI against the temporary database as OWNER."""

    def run(*args, input=None):
        return cli_runner.invoke(
            cli, ["--db-path", temp_db.database_path, "--owner", OWNER, *args], input=input
        )

    return run


def test_help_does_not_need_database(cli_runner):
    result = cli_runner.invoke(cli, ["--help"])

    assert result.exit_code == 0
    assert "asset" in result.output
    assert "savings" in result.output


def test_asset_create_and_list(invoke):
    result = invoke("asset", "create", "voo", "Vanguard S&P 500", "--type", "etf")
    assert result.exit_code == 0
    assert "Created asset VOO 'Vanguard S&P 500'" in result.output

    result = invoke("asset", "list")
    assert result.exit_code == 0
    assert "VOO" in result.output


def test_asset_list_empty(invoke):
    result = invoke("asset", "list")

    assert result.exit_code == 0
    assert "No assets found" in result.output


def test_asset_create_duplicate(invoke):
    invoke("asset", "create", "VOO", "Vanguard", "--type", "etf")

    result = invoke("asset", "create", "VOO", "Vanguard", "--type", "etf")

    assert result.exit_code == 1
    assert "already have an asset with symbol VOO" in result.output


def test_invest_add_and_sell_by_symbol(invoke, sample_asset):
    result = invoke("invest", "add", "--asset", "VOO", "--type", "buy", "--units", "20", "--price", "200", "--period", "2024-01")
    assert result.exit_code == 0
    assert "now holding 20" in result.output

    result = invoke("invest", "add", "--asset", "VOO", "--type", "sell", "--units", "5", "--price", "300", "--period", "2024-02")
    assert result.exit_code == 0
    assert "now holding 15" in result.output

    result = invoke("asset", "show", "VOO")
    assert result.exit_code == 0
    assert "Invested: 3,000.00" in result.output
    assert "History:" in result.output


def test_invest_oversell_fails(invoke, sample_asset):
    invoke("invest", "add", "--asset", str(sample_asset.id), "--type", "buy", "--units", "1", "--price", "10", "--period", "2024-01")

    result = invoke("invest", "add", "--asset", "VOO", "--type", "sell", "--units", "2", "--price", "10", "--period", "2024-02")

    assert result.exit_code == 1
    assert "Cannot sell 2 units" in result.output
    assert "[field: units]" in result.output


def test_invest_add_unknown_asset(invoke):
    result = invoke("invest", "add", "--asset", "NOPE", "--type", "buy", "--units", "1", "--price", "10", "--period", "2024-01")

    assert result.exit_code == 1
    assert "Asset 'NOPE' not found" in result.output


def test_invest_add_invalid_period(invoke, sample_asset):
    result = invoke("invest", "add", "--asset", "VOO", "--type", "buy", "--units", "1", "--price", "10", "--period", "someday")

    assert result.exit_code == 1
    assert "Invalid period" in result.output


def test_invest_list_and_delete(invoke, investment_service, sample_asset):
    from conftest import record

    txn = record(investment_service, sample_asset.id, "buy", 3, 10)

    result = invoke("invest", "list", "--year", "2024")
    assert result.exit_code == 0
    assert f"ID: {txn.id:4d}" in result.output

    result = invoke("invest", "delete", str(txn.id), input="y\n")
    assert result.exit_code == 0
    assert f"Deleted transaction {txn.id}" in result.output

    result = invoke("invest", "list")
    assert "No transactions found" in result.output


def test_savings_workflow(invoke):
    result = invoke("savings", "create", "Emergency Fund", "--starting-balance", "1000", "--goal", "5000")
    assert result.exit_code == 0
    assert "Created savings account 'Emergency Fund'" in result.output

    result = invoke("savings", "add", "--account", "Emergency Fund", "--amount", "200", "--period", "2024-01")
    assert result.exit_code == 0
    assert "balance is 1,200.00" in result.output

    result = invoke("savings", "add", "--account", "Emergency Fund", "--type", "dividend", "--amount", "50", "--period", "2024-02")
    assert "balance is 1,250.00" in result.output

    result = invoke("savings", "add", "--account", "Emergency Fund", "--type", "withdrawal", "--amount", "100", "--period", "2024-03", "--pending")
    assert result.exit_code == 0
    assert "pending" in result.output
    assert "balance is 1,250.00" in result.output

    result = invoke("savings", "show", "Emergency Fund")
    assert "Current balance: 1,250.00" in result.output
    assert "25% reached" in result.output


def test_savings_confirm(invoke, savings_service, sample_account):
    txn = savings_service.create_transaction(
        OWNER, sample_account.id, "withdrawal", Decimal("100"), 2024, 1, status="pending"
    )

    result = invoke("savings", "confirm", str(txn.id))

    assert result.exit_code == 0
    assert "balance is 900.00" in result.output

    result = invoke("savings", "confirm", str(txn.id))
    assert result.exit_code == 0


def test_savings_transactions_pagination(invoke, savings_service, sample_account):
    for month in range(1, 4):
        savings_service.create_transaction(OWNER, sample_account.id, "capital_add", Decimal("10"), 2024, month)

    result = invoke("savings", "transactions", "--limit", "2")

    assert result.exit_code == 0
    assert "Page 1 of 2 (3 transaction(s))" in result.output
    assert "--page 2" in result.output
    assert "Emergency Fund" in result.output


def test_savings_delete_cancelled(invoke, sample_account):
    result = invoke("savings", "delete", "Emergency Fund", input="n\n")

    assert result.exit_code == 0
    assert "Deletion cancelled" in result.output


def test_rule_generate(invoke, sample_account):
    result = invoke("rule", "create", "--account", "Emergency Fund", "--amount", "500", "--start", "2024-06", "--auto-confirm")
    assert result.exit_code == 0
    assert "Created recurring rule" in result.output

    result = invoke("rule", "generate", "--as-of", "2024-09")
    assert result.exit_code == 0
    assert "Created 4 deposit(s), skipped 0 existing, across 1 rule(s)" in result.output

    result = invoke("rule", "generate", "--as-of", "2024-09")
    assert "Created 0 deposit(s), skipped 4 existing" in result.output

    result = invoke("savings", "show", "Emergency Fund")
    assert "Current balance: 3,000.00" in result.output


def test_rule_create_invalid_day(invoke, sample_account):
    result = invoke("rule", "create", "--account", "Emergency Fund", "--amount", "10", "--start", "2024-06", "--day", "31")

    assert result.exit_code == 1
    assert "Day of month must be between 1 and 28" in result.output


def test_remove_locked_recurring_deposit(invoke, recurring_service, savings_service, sample_account):
    from wealthtrack.domain.entities import Period

    recurring_service.create_rule(OWNER, sample_account.id, Decimal("10"), 2024, 1, mode="auto_confirm")
    recurring_service.generate_missing(OWNER, now=Period(2024, 1))
    txn = savings_service.list_transactions(OWNER).items[0]

    result = invoke("savings", "remove", str(txn.id), "--yes")

    assert result.exit_code == 1
    assert "locked" in result.output


def test_owner_isolation(cli_runner, temp_db, sample_asset):
    result = cli_runner.invoke(cli, ["--db-path", temp_db.database_path, "--owner", "someone-else", "asset", "list"])

    assert result.exit_code == 0
    assert "No assets found" in result.output


def test_error_context_names_field_or_entity():
    from wealthtrack.cli.error_handling import error_context
    from wealthtrack.domain.errors import NotFoundError, ValidationError

    assert error_context(ValidationError("bad", field="amount")) == "field: amount"
    assert error_context(NotFoundError("gone", entity="asset", entity_id=7)) == "asset 7"
    assert error_context(ValueError("plain")) == ""
