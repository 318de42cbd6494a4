"""Savings domain service.

Account balances are derived from the completed transactions of an
account. Every change to the log, to a transaction's status or to the
starting balance refolds the balance in the same unit of work.
"""

import logging
from decimal import Decimal
from typing import Optional

from wealthtrack.database.base import Database
from wealthtrack.domain.entities import (
    Page,
    ReturnFrequency,
    SavingsAccount,
    SavingsTotals,
    SavingsTransaction,
    SavingsTransactionType,
    TransactionSource,
    TransactionStatus,
)
from wealthtrack.domain.errors import (
    InvalidStateTransitionError,
    NotFoundError,
    OwnershipError,
    ValidationError,
    completed_to_pending,
    recurring_delete_blocked,
    recurring_rule_not_found,
    savings_account_not_found,
    savings_transaction_not_found,
)
from wealthtrack.domain.ledger import fold_savings_transactions
from wealthtrack.domain.validation import (
    MAX_AMOUNT,
    MIN_AMOUNT,
    validate_choice,
    validate_color,
    validate_decimal,
    validate_name,
    validate_non_negative,
    validate_notes,
    validate_period,
)

logger = logging.getLogger(__name__)

DEFAULT_COLOR = "#0ea5e9"
DEFAULT_PAGE_SIZE = 50
MAX_PAGE_SIZE = 200
MAX_RATE_PERCENT = Decimal("100")


class SavingsService:
    """Service for managing savings accounts and their transactions."""

    def __init__(self, db: Database):
        """Initialize savings service.

        Args:
            db: Database instance
        """
        self.db = db

    # Accounts
    def _require_account(self, owner_id: str, account_id: int, lock: bool = False) -> SavingsAccount:
        """Return the owner's account or raise NotFoundError."""
        account = (
            self.db.lock_savings_account(account_id) if lock else self.db.get_savings_account(account_id)
        )
        if account is None:
            raise NotFoundError(
                savings_account_not_found(account_id), entity="savings_account", entity_id=account_id
            )
        if account.owner_id != owner_id:
            raise OwnershipError(
                savings_account_not_found(account_id), entity="savings_account", entity_id=account_id
            )
        return account

    def create_account(
        self,
        owner_id: str,
        name: str,
        starting_balance=Decimal("0"),
        goal=Decimal("0"),
        rate_percent=Decimal("0"),
        return_frequency: ReturnFrequency | str = ReturnFrequency.DAILY_WORKING,
        monthly_contribution=Decimal("0"),
        auto_deposit_reminder: bool = False,
        color: Optional[str] = None,
    ) -> SavingsAccount:
        """Create a savings account whose balance starts at starting_balance.

        Returns:
            The created SavingsAccount

        Raises:
            ValidationError: If any field is invalid
        """
        name = validate_name(name)
        starting_balance = validate_non_negative(starting_balance, "starting_balance")
        goal = validate_non_negative(goal, "goal")
        rate_percent = validate_non_negative(rate_percent, "rate_percent", maximum=MAX_RATE_PERCENT)
        return_frequency = validate_choice(return_frequency, ReturnFrequency, "return_frequency")
        monthly_contribution = validate_non_negative(monthly_contribution, "monthly_contribution")
        color = validate_color(color) or DEFAULT_COLOR

        with self.db.unit_of_work():
            account_id = self.db.create_savings_account(
                owner_id=owner_id,
                name=name,
                color=color,
                goal=goal,
                starting_balance=starting_balance,
                rate_percent=rate_percent,
                return_frequency=return_frequency.value,
                monthly_contribution=monthly_contribution,
                auto_deposit_reminder=bool(auto_deposit_reminder),
            )
            self.recompute_account(account_id)

        logger.info("Savings account created | owner=%s | account=%s", owner_id, account_id)
        return self.db.get_savings_account(account_id)

    def get_account(self, owner_id: str, account_id: int) -> SavingsAccount:
        """Get one of the owner's savings accounts, with its stored aggregates."""
        return self._require_account(owner_id, account_id)

    def list_accounts(self, owner_id: str) -> list[SavingsAccount]:
        """List the owner's savings accounts, newest first."""
        return self.db.list_savings_accounts(owner_id)

    def update_account(
        self,
        owner_id: str,
        account_id: int,
        name: Optional[str] = None,
        color: Optional[str] = None,
        goal=None,
        starting_balance=None,
        rate_percent=None,
        return_frequency: Optional[ReturnFrequency | str] = None,
        monthly_contribution=None,
        auto_deposit_reminder: Optional[bool] = None,
    ) -> SavingsAccount:
        """Update account settings; fields left as None are unchanged.

        A new starting balance refolds the current balance in the same unit.
        """
        self._require_account(owner_id, account_id)
        if name is not None:
            name = validate_name(name)
        color = validate_color(color)
        if goal is not None:
            goal = validate_non_negative(goal, "goal")
        if starting_balance is not None:
            starting_balance = validate_non_negative(starting_balance, "starting_balance")
        if rate_percent is not None:
            rate_percent = validate_non_negative(rate_percent, "rate_percent", maximum=MAX_RATE_PERCENT)
        if return_frequency is not None:
            return_frequency = validate_choice(return_frequency, ReturnFrequency, "return_frequency").value
        if monthly_contribution is not None:
            monthly_contribution = validate_non_negative(monthly_contribution, "monthly_contribution")

        with self.db.unit_of_work():
            self._require_account(owner_id, account_id, lock=True)
            self.db.update_savings_account(
                account_id,
                name=name,
                color=color,
                goal=goal,
                starting_balance=starting_balance,
                rate_percent=rate_percent,
                return_frequency=return_frequency,
                monthly_contribution=monthly_contribution,
                auto_deposit_reminder=auto_deposit_reminder,
            )
            if starting_balance is not None:
                self.recompute_account(account_id)

        return self.db.get_savings_account(account_id)

    def delete_account(self, owner_id: str, account_id: int) -> int:
        """Delete an account together with its transactions and recurring rules.

        Returns:
            Number of transactions removed with the account
        """
        self._require_account(owner_id, account_id)
        count = self.db.get_savings_account_transaction_count(account_id)
        logger.warning(
            "Savings account deleted | owner=%s | account=%s | transactions=%s",
            owner_id,
            account_id,
            count,
        )
        with self.db.unit_of_work():
            self.db.delete_savings_account(account_id)
        return count

    # Aggregates
    def recompute_account(self, account_id: int) -> SavingsTotals:
        """Refold an account's completed transactions and store the result.

        Must run inside an open unit of work.
        """
        account = self.db.get_savings_account(account_id)
        transactions = self.db.list_savings_transactions_for_replay(account_id)
        totals = fold_savings_transactions(account.starting_balance, transactions)
        self.db.update_savings_totals(account_id, totals)
        return totals

    def recompute_all(self, owner_id: str) -> int:
        """Rebuild the balance of every account of the owner. Returns the account count."""
        accounts = self.db.list_savings_accounts(owner_id)
        for account in accounts:
            with self.db.unit_of_work():
                self.db.lock_savings_account(account.id)
                self.recompute_account(account.id)
        logger.info("Savings totals rebuilt | owner=%s | accounts=%s", owner_id, len(accounts))
        return len(accounts)

    def get_account_aggregate(self, owner_id: str, account_id: int) -> SavingsTotals:
        """Return the stored totals of an account. Never recomputes."""
        account = self._require_account(owner_id, account_id)
        return SavingsTotals(
            total_contributed=account.total_contributed,
            total_dividends=account.total_dividends,
            total_withdrawn=account.total_withdrawn,
            current_balance=account.current_balance,
        )

    # Transactions
    def _require_transaction(
        self, owner_id: str, transaction_id: int, lock: bool = False
    ) -> SavingsTransaction:
        if lock:
            txn = self.db.lock_savings_transaction(transaction_id)
        else:
            txn = self.db.get_savings_transaction(transaction_id)
        if txn is None:
            raise NotFoundError(
                savings_transaction_not_found(transaction_id),
                entity="savings_transaction",
                entity_id=transaction_id,
            )
        if txn.owner_id != owner_id:
            raise OwnershipError(
                savings_transaction_not_found(transaction_id),
                entity="savings_transaction",
                entity_id=transaction_id,
            )
        return txn

    def _check_rule(self, owner_id: str, account_id: int, rule_id: int) -> None:
        rule = self.db.get_recurring_rule(rule_id)
        if rule is None or rule.owner_id != owner_id:
            raise NotFoundError(
                recurring_rule_not_found(rule_id), entity="recurring_rule", entity_id=rule_id
            )
        if rule.account_id != account_id:
            raise ValidationError(
                f"Recurring rule {rule_id} belongs to another account", field="rule_id"
            )

    def create_transaction(
        self,
        owner_id: str,
        account_id: int,
        transaction_type: SavingsTransactionType | str,
        amount,
        year: int,
        month: int,
        day: Optional[int] = None,
        status: TransactionStatus | str = TransactionStatus.COMPLETED,
        source: TransactionSource | str = TransactionSource.MANUAL,
        rule_id: Optional[int] = None,
        notes: Optional[str] = "",
    ) -> SavingsTransaction:
        """Append a savings transaction and refold the account balance.

        Args:
            owner_id: Owner of the account
            account_id: Account the transaction belongs to
            transaction_type: capital_add, dividend or withdrawal
            amount: Positive amount with at most 2 decimal places
            year: Transaction year
            month: Transaction month
            day: Optional day of month
            status: pending or completed; only completed rows count
            source: manual or recurring
            rule_id: Generating recurring rule, if any
            notes: Optional notes

        Returns:
            The created SavingsTransaction

        Raises:
            ValidationError: If any field is invalid
            NotFoundError: If the account or rule is missing or not the owner's
            DuplicatePeriodError: If the rule already has a deposit for the month
        """
        transaction_type = validate_choice(transaction_type, SavingsTransactionType, "transaction_type")
        amount = validate_decimal(amount, "amount", minimum=MIN_AMOUNT, maximum=MAX_AMOUNT, places=2)
        validate_period(year, month, day)
        status = validate_choice(status, TransactionStatus, "status")
        source = validate_choice(source, TransactionSource, "source")
        notes = validate_notes(notes)

        self._require_account(owner_id, account_id)
        if rule_id is not None:
            self._check_rule(owner_id, account_id, rule_id)

        with self.db.unit_of_work():
            self._require_account(owner_id, account_id, lock=True)
            transaction_id = self.db.create_savings_transaction(
                owner_id=owner_id,
                account_id=account_id,
                transaction_type=transaction_type.value,
                amount=amount,
                year=year,
                month=month,
                day=day,
                status=status.value,
                source=source.value,
                rule_id=rule_id,
                notes=notes,
            )
            totals = self.recompute_account(account_id)

        logger.info(
            "Savings transaction created | owner=%s | account=%s | txn=%s | type=%s | status=%s | balance=%s",
            owner_id,
            account_id,
            transaction_id,
            transaction_type.value,
            status.value,
            totals.current_balance,
        )
        return self.db.get_savings_transaction(transaction_id)

    @staticmethod
    def _status_changes(txn: SavingsTransaction, new_status: TransactionStatus) -> bool:
        """Return whether moving to new_status is a real change; reject completed to pending."""
        if txn.status is new_status:
            return False
        if txn.status is TransactionStatus.COMPLETED:
            raise InvalidStateTransitionError(
                completed_to_pending(),
                field="status",
                entity="savings_transaction",
                entity_id=txn.id,
            )
        return True

    @staticmethod
    def _check_deletable(txn: SavingsTransaction) -> None:
        if txn.is_locked:
            raise InvalidStateTransitionError(
                recurring_delete_blocked(txn.id),
                entity="savings_transaction",
                entity_id=txn.id,
            )

    def get_transaction(self, owner_id: str, transaction_id: int) -> SavingsTransaction:
        """Get one of the owner's savings transactions."""
        return self._require_transaction(owner_id, transaction_id)

    def update_transaction_status(
        self, owner_id: str, transaction_id: int, new_status: TransactionStatus | str
    ) -> SavingsTransaction:
        """Move a transaction from pending to completed and refold the balance.

        Setting the current status again is a no-op.

        Raises:
            NotFoundError: If the transaction is missing or not the owner's
            InvalidStateTransitionError: If asked to move completed back to pending
        """
        new_status = validate_choice(new_status, TransactionStatus, "status")
        txn = self._require_transaction(owner_id, transaction_id)
        if not self._status_changes(txn, new_status):
            return txn

        with self.db.unit_of_work():
            self.db.lock_savings_account(txn.account_id)
            # Re-check under the account lock; another writer may have confirmed meanwhile
            txn = self._require_transaction(owner_id, transaction_id, lock=True)
            if not self._status_changes(txn, new_status):
                return txn
            self.db.update_savings_transaction_status(transaction_id, new_status.value)
            totals = self.recompute_account(txn.account_id)

        logger.info(
            "Savings transaction confirmed | owner=%s | account=%s | txn=%s | balance=%s",
            owner_id,
            txn.account_id,
            transaction_id,
            totals.current_balance,
        )
        return self.db.get_savings_transaction(transaction_id)

    def update_transaction_notes(
        self, owner_id: str, transaction_id: int, notes: Optional[str]
    ) -> SavingsTransaction:
        """Replace a transaction's notes."""
        self._require_transaction(owner_id, transaction_id)
        notes = validate_notes(notes)
        with self.db.unit_of_work():
            self.db.update_savings_transaction_notes(transaction_id, notes)
        return self.db.get_savings_transaction(transaction_id)

    def delete_transaction(self, owner_id: str, transaction_id: int) -> None:
        """Remove a transaction and refold the account balance.

        Raises:
            NotFoundError: If the transaction is missing or not the owner's
            InvalidStateTransitionError: If it is a completed recurring deposit
        """
        txn = self._require_transaction(owner_id, transaction_id)
        self._check_deletable(txn)

        with self.db.unit_of_work():
            self.db.lock_savings_account(txn.account_id)
            txn = self._require_transaction(owner_id, transaction_id, lock=True)
            self._check_deletable(txn)
            logger.warning(
                "Savings transaction deleted | owner=%s | account=%s | txn=%s | type=%s",
                owner_id,
                txn.account_id,
                transaction_id,
                txn.transaction_type.value,
            )
            self.db.delete_savings_transaction(transaction_id)
            self.recompute_account(txn.account_id)

    def list_transactions(
        self,
        owner_id: str,
        year: Optional[int] = None,
        month: Optional[int] = None,
        account_id: Optional[int] = None,
        page: int = 1,
        limit: int = DEFAULT_PAGE_SIZE,
    ) -> Page:
        """List the owner's transactions newest first, one page at a time.

        Returns:
            Page of SavingsTransaction, each carrying its account name
        """
        if year is not None:
            validate_period(year, month if month is not None else 1)
        if not isinstance(page, int) or page < 1:
            raise ValidationError("Page must be at least 1", field="page")
        if not isinstance(limit, int) or not 1 <= limit <= MAX_PAGE_SIZE:
            raise ValidationError(f"Limit must be between 1 and {MAX_PAGE_SIZE}", field="limit")

        total = self.db.count_savings_transactions(owner_id, year=year, month=month, account_id=account_id)
        items = self.db.list_savings_transactions(
            owner_id,
            year=year,
            month=month,
            account_id=account_id,
            offset=(page - 1) * limit,
            limit=limit,
        )
        return Page(items=tuple(items), page=page, limit=limit, total=total)
