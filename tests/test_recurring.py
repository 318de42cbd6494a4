"""Tests for recurring rules and deposit generation."""

from datetime import datetime
from decimal import Decimal

import pytest

from conftest import OTHER_OWNER, OWNER
from wealthtrack.domain.entities import (
    Period,
    RecurringFrequency,
    RecurringMode,
    RecurringRule,
    TransactionSource,
    TransactionStatus,
)
from wealthtrack.domain.errors import (
    DuplicatePeriodError,
    NotFoundError,
    StorageUnavailableError,
    ValidationError,
)
from wealthtrack.domain.recurring import iter_due_periods, month_index


def make_rule(start, end=None):
    return RecurringRule(
        id=1,
        owner_id=OWNER,
        account_id=1,
        amount=Decimal("100"),
        frequency=RecurringFrequency.MONTHLY,
        day_of_month=5,
        start_year=start.year,
        start_month=start.month,
        end_year=end.year if end else None,
        end_month=end.month if end else None,
        mode=RecurringMode.PENDING,
        is_active=True,
        last_generated_at=None,
        created_at=datetime(2024, 1, 1),
    )


def test_month_index_orders_periods():
    assert month_index(2024, 12) + 1 == month_index(2025, 1)
    assert month_index(2024, 6) == Period(2024, 6).index


def test_iter_due_periods_crosses_year_boundary():
    periods = list(iter_due_periods(make_rule(Period(2024, 11)), Period(2025, 2)))

    assert periods == [Period(2024, 11), Period(2024, 12), Period(2025, 1), Period(2025, 2)]


def test_iter_due_periods_respects_end():
    periods = list(iter_due_periods(make_rule(Period(2024, 1), end=Period(2024, 3)), Period(2024, 12)))

    assert periods == [Period(2024, 1), Period(2024, 2), Period(2024, 3)]


def test_iter_due_periods_future_start_yields_nothing():
    assert list(iter_due_periods(make_rule(Period(2025, 1)), Period(2024, 12))) == []


def test_generate_scenario_is_idempotent(recurring_service, savings_service, sample_account):
    """A rule from 2024-06 generates 4 deposits by 2024-09 and none on a re-run."""
    recurring_service.create_rule(
        OWNER, sample_account.id, Decimal("500"), 2024, 6, mode=RecurringMode.AUTO_CONFIRM
    )

    result = recurring_service.generate_missing(OWNER, now=Period(2024, 9))

    assert result.created == 4
    assert result.skipped == 0
    assert result.rules_processed == 1
    page = savings_service.list_transactions(OWNER, account_id=sample_account.id)
    assert [t.month for t in page.items] == [9, 8, 7, 6]
    assert all(t.status is TransactionStatus.COMPLETED for t in page.items)
    assert all(t.source is TransactionSource.RECURRING for t in page.items)
    assert page.items[0].day == 5
    assert page.items[0].notes == "Recurring deposit (day 5)"
    assert savings_service.get_account(OWNER, sample_account.id).current_balance == Decimal("3000")

    again = recurring_service.generate_missing(OWNER, now=Period(2024, 9))

    assert again.created == 0
    assert again.skipped == 4
    assert savings_service.list_transactions(OWNER).total == 4
    assert savings_service.get_account(OWNER, sample_account.id).current_balance == Decimal("3000")


def test_generate_pending_mode_leaves_balance(recurring_service, savings_service, sample_account):
    recurring_service.create_rule(OWNER, sample_account.id, Decimal("500"), 2024, 6, day_of_month=28)

    result = recurring_service.generate_missing(OWNER, now=Period(2024, 7))

    assert result.created == 2
    page = savings_service.list_transactions(OWNER)
    assert all(t.status is TransactionStatus.PENDING for t in page.items)
    assert all(t.day == 28 for t in page.items)
    assert savings_service.get_account(OWNER, sample_account.id).current_balance == Decimal("1000")


def test_generate_continues_from_later_month(recurring_service, savings_service, sample_account):
    recurring_service.create_rule(OWNER, sample_account.id, Decimal("10"), 2024, 1)
    recurring_service.generate_missing(OWNER, now=Period(2024, 2))

    result = recurring_service.generate_missing(OWNER, now=Period(2024, 4))

    assert result.created == 2
    assert result.skipped == 2


def test_generate_respects_end(recurring_service, savings_service, sample_account):
    recurring_service.create_rule(
        OWNER, sample_account.id, Decimal("10"), 2024, 1, end_year=2024, end_month=2
    )

    result = recurring_service.generate_missing(OWNER, now=Period(2024, 12))

    assert result.created == 2


def test_generate_ignores_inactive_rules(recurring_service, sample_account):
    recurring_service.create_rule(OWNER, sample_account.id, Decimal("10"), 2024, 1, is_active=False)

    result = recurring_service.generate_missing(OWNER, now=Period(2024, 3))

    assert result.created == 0
    assert result.rules_processed == 0


def test_generate_only_for_owner(recurring_service, sample_account):
    recurring_service.create_rule(OWNER, sample_account.id, Decimal("10"), 2024, 1)

    result = recurring_service.generate_missing(OTHER_OWNER, now=Period(2024, 3))

    assert result.created == 0


def test_generate_skips_rule_with_missing_account(recurring_service, sample_account, temp_db):
    rule = recurring_service.create_rule(OWNER, sample_account.id, Decimal("10"), 2024, 1)
    # Orphan the rule the way a partially failed cleanup would
    with temp_db.unit_of_work():
        session = temp_db._get_session()
        from wealthtrack.database.models import SavingsAccount

        session.query(SavingsAccount).filter(SavingsAccount.id == sample_account.id).delete()

    result = recurring_service.generate_missing(OWNER, now=Period(2024, 3))

    assert result.created == 0
    assert result.rules_processed == 0
    assert temp_db.get_recurring_rule(rule.id).last_generated_at is None


def test_generate_marks_rule(recurring_service, sample_account, temp_db):
    rule = recurring_service.create_rule(OWNER, sample_account.id, Decimal("10"), 2024, 1)

    recurring_service.generate_missing(OWNER, now=Period(2024, 1))

    assert temp_db.get_recurring_rule(rule.id).last_generated_at is not None


def test_generate_keeps_deposits_when_marking_fails(recurring_service, savings_service, sample_account, temp_db, monkeypatch):
    recurring_service.create_rule(OWNER, sample_account.id, Decimal("10"), 2024, 1)

    def fail(rule_id, generated_at):
        raise StorageUnavailableError("Storage unavailable: locked. Please retry.")

    monkeypatch.setattr(temp_db, "mark_rule_generated", fail)
    result = recurring_service.generate_missing(OWNER, now=Period(2024, 2))

    assert result.created == 2
    assert savings_service.list_transactions(OWNER).total == 2


def test_manual_duplicate_recurring_deposit(recurring_service, savings_service, sample_account):
    rule = recurring_service.create_rule(OWNER, sample_account.id, Decimal("10"), 2024, 6)
    recurring_service.generate_missing(OWNER, now=Period(2024, 6))

    with pytest.raises(DuplicatePeriodError, match="already exists for 2024-06"):
        savings_service.create_transaction(
            OWNER,
            sample_account.id,
            "capital_add",
            Decimal("10"),
            2024,
            6,
            source="recurring",
            rule_id=rule.id,
        )

    # Manual deposits in the same month are unaffected
    savings_service.create_transaction(OWNER, sample_account.id, "capital_add", Decimal("10"), 2024, 6)
    assert savings_service.list_transactions(OWNER).total == 2


def test_delete_rule_keeps_deposits(recurring_service, savings_service, sample_account):
    rule = recurring_service.create_rule(
        OWNER, sample_account.id, Decimal("10"), 2024, 1, mode="auto_confirm"
    )
    recurring_service.generate_missing(OWNER, now=Period(2024, 2))

    recurring_service.delete_rule(OWNER, rule.id)

    page = savings_service.list_transactions(OWNER)
    assert page.total == 2
    assert all(t.rule_id is None for t in page.items)
    with pytest.raises(NotFoundError):
        recurring_service.get_rule(OWNER, rule.id)


@pytest.mark.parametrize(
    "field,kwargs",
    [
        ("day_of_month", {"day_of_month": 29}),
        ("end_year", {"end_year": 2024}),
        ("end_year", {"end_year": 2024, "end_month": 5}),
        ("start_month", {"start_month": 0}),
        ("amount", {"amount": Decimal("0")}),
        ("mode", {"mode": "weekly"}),
    ],
)
def test_create_rule_validation(recurring_service, sample_account, field, kwargs):
    args = {"amount": Decimal("10"), "start_year": 2024, "start_month": 6}
    args.update(kwargs)
    with pytest.raises(ValidationError) as exc_info:
        recurring_service.create_rule(OWNER, sample_account.id, **args)
    assert exc_info.value.field == field


def test_create_rule_for_other_owners_account(recurring_service, sample_account):
    with pytest.raises(NotFoundError):
        recurring_service.create_rule(OTHER_OWNER, sample_account.id, Decimal("10"), 2024, 1)


def test_update_rule(recurring_service, sample_account):
    rule = recurring_service.create_rule(
        OWNER, sample_account.id, Decimal("10"), 2024, 1, end_year=2024, end_month=6
    )

    updated = recurring_service.update_rule(OWNER, rule.id, amount=Decimal("25"), is_active=False)
    assert updated.amount == Decimal("25")
    assert updated.is_active is False
    assert updated.end == Period(2024, 6)

    cleared = recurring_service.update_rule(OWNER, rule.id, clear_end=True, mode="auto_confirm")
    assert cleared.end is None
    assert cleared.mode is RecurringMode.AUTO_CONFIRM


def test_list_rules_by_account(recurring_service, savings_service, sample_account):
    other = savings_service.create_account(OWNER, name="Other")
    recurring_service.create_rule(OWNER, sample_account.id, Decimal("10"), 2024, 1)
    recurring_service.create_rule(OWNER, other.id, Decimal("20"), 2024, 1)

    assert len(recurring_service.list_rules(OWNER)) == 2
    assert [r.account_id for r in recurring_service.list_rules(OWNER, account_id=other.id)] == [other.id]
