"""Recurring deposit rules and the generator that materialises them.

Generation is idempotent: the store admits at most one recurring deposit
per rule and month, so re-running over periods that already have a
deposit only counts them as skipped.
"""

import logging
from datetime import date, datetime, UTC
from typing import Iterator, Optional

from wealthtrack.database.base import Database
from wealthtrack.domain.entities import (
    GenerationResult,
    Period,
    RecurringMode,
    RecurringRule,
    SavingsTransactionType,
    TransactionSource,
)
from wealthtrack.domain.errors import (
    DuplicatePeriodError,
    NotFoundError,
    OwnershipError,
    StorageUnavailableError,
    recurring_rule_not_found,
)
from wealthtrack.domain.savings import SavingsService
from wealthtrack.domain.validation import (
    MAX_AMOUNT,
    MIN_AMOUNT,
    validate_choice,
    validate_day_of_month,
    validate_decimal,
    validate_rule_window,
)

logger = logging.getLogger(__name__)

DEFAULT_DAY_OF_MONTH = 5


def month_index(year: int, month: int) -> int:
    """Map a (year, month) pair onto a single increasing integer."""
    return year * 12 + month


def current_period(today: Optional[date] = None) -> Period:
    """Return the calendar month containing today."""
    today = today or date.today()
    return Period(today.year, today.month)


def iter_due_periods(rule: RecurringRule, now: Period) -> Iterator[Period]:
    """Yield every month from the rule's start up to now and its end, inclusive."""
    last = month_index(now.year, now.month)
    if rule.end is not None:
        last = min(last, month_index(rule.end.year, rule.end.month))

    index = month_index(rule.start_year, rule.start_month)
    while index <= last:
        yield Period.from_index(index)
        index += 1


def deposit_notes(day_of_month: int) -> str:
    return f"Recurring deposit (day {day_of_month})"


class RecurringService:
    """Service for recurring rules and deposit generation."""

    def __init__(self, db: Database, savings: Optional[SavingsService] = None):
        """Initialize recurring service.

        Args:
            db: Database instance
            savings: SavingsService used to append generated deposits
        """
        self.db = db
        self.savings = savings or SavingsService(db)

    def _require_rule(self, owner_id: str, rule_id: int) -> RecurringRule:
        rule = self.db.get_recurring_rule(rule_id)
        if rule is None:
            raise NotFoundError(
                recurring_rule_not_found(rule_id), entity="recurring_rule", entity_id=rule_id
            )
        if rule.owner_id != owner_id:
            raise OwnershipError(
                recurring_rule_not_found(rule_id), entity="recurring_rule", entity_id=rule_id
            )
        return rule

    def create_rule(
        self,
        owner_id: str,
        account_id: int,
        amount,
        start_year: int,
        start_month: int,
        end_year: Optional[int] = None,
        end_month: Optional[int] = None,
        day_of_month: int = DEFAULT_DAY_OF_MONTH,
        mode: RecurringMode | str = RecurringMode.PENDING,
        is_active: bool = True,
    ) -> RecurringRule:
        """Create a monthly deposit rule for one of the owner's accounts.

        Raises:
            ValidationError: If the amount, day or start/end window is invalid
            NotFoundError: If the account is missing or not the owner's
        """
        amount = validate_decimal(amount, "amount", minimum=MIN_AMOUNT, maximum=MAX_AMOUNT, places=2)
        day_of_month = validate_day_of_month(day_of_month)
        validate_rule_window(start_year, start_month, end_year, end_month)
        mode = validate_choice(mode, RecurringMode, "mode")
        self.savings.get_account(owner_id, account_id)

        with self.db.unit_of_work():
            rule_id = self.db.create_recurring_rule(
                owner_id=owner_id,
                account_id=account_id,
                amount=amount,
                day_of_month=day_of_month,
                start_year=start_year,
                start_month=start_month,
                end_year=end_year,
                end_month=end_month,
                mode=mode.value,
                is_active=bool(is_active),
            )

        logger.info(
            "Recurring rule created | owner=%s | account=%s | rule=%s | amount=%s | mode=%s",
            owner_id,
            account_id,
            rule_id,
            amount,
            mode.value,
        )
        return self.db.get_recurring_rule(rule_id)

    def get_rule(self, owner_id: str, rule_id: int) -> RecurringRule:
        """Get one of the owner's recurring rules."""
        return self._require_rule(owner_id, rule_id)

    def list_rules(self, owner_id: str, account_id: Optional[int] = None) -> list[RecurringRule]:
        """List the owner's rules, newest first, optionally for one account."""
        return self.db.list_recurring_rules(owner_id, account_id=account_id)

    def update_rule(
        self,
        owner_id: str,
        rule_id: int,
        amount=None,
        day_of_month: Optional[int] = None,
        start_year: Optional[int] = None,
        start_month: Optional[int] = None,
        end_year: Optional[int] = None,
        end_month: Optional[int] = None,
        clear_end: bool = False,
        mode: Optional[RecurringMode | str] = None,
        is_active: Optional[bool] = None,
    ) -> RecurringRule:
        """Update a rule; fields left as None keep their current value.

        Deposits already generated are not touched.

        Args:
            clear_end: Remove the end period so the rule runs indefinitely
        """
        rule = self._require_rule(owner_id, rule_id)

        if amount is not None:
            amount = validate_decimal(amount, "amount", minimum=MIN_AMOUNT, maximum=MAX_AMOUNT, places=2)
        else:
            amount = rule.amount
        day_of_month = validate_day_of_month(day_of_month) if day_of_month is not None else rule.day_of_month
        start_year = start_year if start_year is not None else rule.start_year
        start_month = start_month if start_month is not None else rule.start_month
        if clear_end:
            end_year, end_month = None, None
        elif end_year is None and end_month is None:
            end_year, end_month = rule.end_year, rule.end_month
        validate_rule_window(start_year, start_month, end_year, end_month)
        mode = validate_choice(mode, RecurringMode, "mode") if mode is not None else rule.mode
        is_active = bool(is_active) if is_active is not None else rule.is_active

        with self.db.unit_of_work():
            self.db.update_recurring_rule(
                rule_id,
                amount=amount,
                day_of_month=day_of_month,
                start_year=start_year,
                start_month=start_month,
                end_year=end_year,
                end_month=end_month,
                mode=mode.value,
                is_active=is_active,
            )
        return self.db.get_recurring_rule(rule_id)

    def delete_rule(self, owner_id: str, rule_id: int) -> None:
        """Delete a rule. Deposits it generated are kept and lose their rule link."""
        rule = self._require_rule(owner_id, rule_id)
        logger.warning(
            "Recurring rule deleted | owner=%s | account=%s | rule=%s", owner_id, rule.account_id, rule_id
        )
        with self.db.unit_of_work():
            self.db.delete_recurring_rule(rule_id)

    def generate_missing(self, owner_id: str, now: Optional[Period] = None) -> GenerationResult:
        """Create every missing deposit for the owner's active monthly rules.

        Each due period gets its own unit of work, so a failure in one
        period leaves deposits of earlier periods in place and a re-run
        picks up where this one stopped.

        Args:
            owner_id: Owner whose rules are evaluated
            now: Last month to generate for; defaults to the current month

        Returns:
            GenerationResult with created and skipped deposit counts and the
            number of rules whose account still exists
        """
        now = now or current_period()
        rules = self.db.list_recurring_rules(owner_id, active_only=True)

        created = 0
        skipped = 0
        processed = 0
        for rule in rules:
            account = self.db.get_savings_account(rule.account_id)
            if account is None or account.owner_id != owner_id:
                logger.warning(
                    "Recurring rule skipped, account missing | owner=%s | rule=%s | account=%s",
                    owner_id,
                    rule.id,
                    rule.account_id,
                )
                continue
            processed += 1

            day = min(rule.day_of_month or DEFAULT_DAY_OF_MONTH, 28)
            for period in iter_due_periods(rule, now):
                try:
                    self.savings.create_transaction(
                        owner_id,
                        rule.account_id,
                        SavingsTransactionType.CAPITAL_ADD,
                        rule.amount,
                        period.year,
                        period.month,
                        day=day,
                        status=rule.mode.generated_status,
                        source=TransactionSource.RECURRING,
                        rule_id=rule.id,
                        notes=deposit_notes(day),
                    )
                    created += 1
                except DuplicatePeriodError:
                    skipped += 1

            try:
                with self.db.unit_of_work():
                    self.db.mark_rule_generated(rule.id, datetime.now(UTC))
            except StorageUnavailableError:
                # Generated deposits are already committed; the timestamp is informational
                logger.warning("Could not record generation time | rule=%s", rule.id)

        logger.info(
            "Recurring generation finished | owner=%s | until=%s | created=%s | skipped=%s | rules=%s",
            owner_id,
            now,
            created,
            skipped,
            processed,
        )
        return GenerationResult(created=created, skipped=skipped, rules_processed=processed)
