"""Abstract database interface."""

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from datetime import datetime
from decimal import Decimal
from typing import Optional

# Import entities directly; services in the domain package import this module
from wealthtrack.domain.entities import (
    Asset,
    AssetTotals,
    InvestmentTransaction,
    RecurringRule,
    SavingsAccount,
    SavingsTotals,
    SavingsTransaction,
)


class Database(ABC):
    """Abstract database interface for wealthtrack.

    A Database instance holds one storage session and serves one caller at
    a time; concurrent callers each use their own instance.
    """

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    @abstractmethod
    def unit_of_work(self) -> AbstractContextManager[None]:
        """Group writes into one atomic unit.

        Writes made inside the block become visible together when it exits
        normally. Any exception discards every write made in the block and
        is re-raised. Nested blocks join the outermost one.
        """
        pass

    # Asset operations
    @abstractmethod
    def create_asset(
        self,
        owner_id: str,
        name: str,
        symbol: str,
        asset_type: str,
        exchange: str,
        currency: str,
        color: Optional[str] = None,
    ) -> int:
        """Create an asset with zero totals. Returns asset ID.

        Raises:
            ConflictError: If the owner already holds a live asset with the symbol
        """
        pass

    @abstractmethod
    def get_asset(self, asset_id: int) -> Optional[Asset]:
        """Get asset by ID, including soft-deleted assets."""
        pass

    @abstractmethod
    def lock_asset(self, asset_id: int) -> Optional[Asset]:
        """Get asset by ID and hold a write lock on it until the unit of work ends."""
        pass

    @abstractmethod
    def get_asset_by_symbol(self, owner_id: str, symbol: str) -> Optional[Asset]:
        """Get the owner's live asset with the given symbol."""
        pass

    @abstractmethod
    def list_assets(self, owner_id: str) -> list[Asset]:
        """List the owner's live assets, newest first."""
        pass

    @abstractmethod
    def update_asset(self, asset_id: int, name: Optional[str] = None, color: Optional[str] = None) -> None:
        """Update asset display fields."""
        pass

    @abstractmethod
    def soft_delete_asset(self, asset_id: int, deleted_at: datetime) -> None:
        """Mark an asset deleted, keeping its transactions."""
        pass

    @abstractmethod
    def update_asset_totals(self, asset_id: int, totals: AssetTotals) -> None:
        """Write an asset's derived totals."""
        pass

    # Investment transaction operations
    @abstractmethod
    def create_investment_transaction(
        self,
        owner_id: str,
        asset_id: int,
        transaction_type: str,
        units: Decimal,
        price_per_unit: Decimal,
        total_amount: Decimal,
        currency: str,
        year: int,
        month: int,
        day: Optional[int],
        notes: str,
        asset_symbol: str,
        asset_name: str,
    ) -> int:
        """Append an investment transaction. Returns transaction ID."""
        pass

    @abstractmethod
    def get_investment_transaction(self, transaction_id: int) -> Optional[InvestmentTransaction]:
        """Get investment transaction by ID."""
        pass

    @abstractmethod
    def update_investment_transaction_notes(self, transaction_id: int, notes: str) -> None:
        """Update investment transaction notes."""
        pass

    @abstractmethod
    def delete_investment_transaction(self, transaction_id: int) -> None:
        """Remove an investment transaction."""
        pass

    @abstractmethod
    def list_investment_transactions_for_replay(self, asset_id: int) -> list[InvestmentTransaction]:
        """List an asset's transactions in replay order.

        Ordered by (year, month, day or 1, created_at, id) ascending.
        """
        pass

    @abstractmethod
    def list_investment_transactions(
        self,
        owner_id: str,
        year: Optional[int] = None,
        month: Optional[int] = None,
        asset_id: Optional[int] = None,
    ) -> list[InvestmentTransaction]:
        """List the owner's investment transactions, newest first."""
        pass

    # Savings account operations
    @abstractmethod
    def create_savings_account(
        self,
        owner_id: str,
        name: str,
        color: str,
        goal: Decimal,
        starting_balance: Decimal,
        rate_percent: Decimal,
        return_frequency: str,
        monthly_contribution: Decimal,
        auto_deposit_reminder: bool,
    ) -> int:
        """Create a savings account. Returns account ID."""
        pass

    @abstractmethod
    def get_savings_account(self, account_id: int) -> Optional[SavingsAccount]:
        """Get savings account by ID."""
        pass

    @abstractmethod
    def lock_savings_account(self, account_id: int) -> Optional[SavingsAccount]:
        """Get savings account by ID and hold a write lock on it until the unit of work ends."""
        pass

    @abstractmethod
    def list_savings_accounts(self, owner_id: str) -> list[SavingsAccount]:
        """List the owner's savings accounts, newest first."""
        pass

    @abstractmethod
    def update_savings_account(
        self,
        account_id: int,
        name: Optional[str] = None,
        color: Optional[str] = None,
        goal: Optional[Decimal] = None,
        starting_balance: Optional[Decimal] = None,
        rate_percent: Optional[Decimal] = None,
        return_frequency: Optional[str] = None,
        monthly_contribution: Optional[Decimal] = None,
        auto_deposit_reminder: Optional[bool] = None,
    ) -> None:
        """Update savings account fields that are not None."""
        pass

    @abstractmethod
    def delete_savings_account(self, account_id: int) -> None:
        """Delete a savings account with its transactions and rules."""
        pass

    @abstractmethod
    def update_savings_totals(self, account_id: int, totals: SavingsTotals) -> None:
        """Write a savings account's derived totals."""
        pass

    @abstractmethod
    def get_savings_account_transaction_count(self, account_id: int) -> int:
        """Get count of transactions belonging to a savings account."""
        pass

    # Savings transaction operations
    @abstractmethod
    def create_savings_transaction(
        self,
        owner_id: str,
        account_id: int,
        transaction_type: str,
        amount: Decimal,
        year: int,
        month: int,
        day: Optional[int],
        status: str,
        source: str,
        rule_id: Optional[int],
        notes: str,
    ) -> int:
        """Append a savings transaction. Returns transaction ID.

        Raises:
            DuplicatePeriodError: If a recurring deposit already exists for
                the account, rule and month
        """
        pass

    @abstractmethod
    def get_savings_transaction(self, transaction_id: int) -> Optional[SavingsTransaction]:
        """Get savings transaction by ID."""
        pass

    @abstractmethod
    def lock_savings_transaction(self, transaction_id: int) -> Optional[SavingsTransaction]:
        """Get savings transaction by ID, re-read under a write lock held until the unit of work ends."""
        pass

    @abstractmethod
    def update_savings_transaction_status(self, transaction_id: int, status: str) -> None:
        """Update savings transaction status."""
        pass

    @abstractmethod
    def update_savings_transaction_notes(self, transaction_id: int, notes: str) -> None:
        """Update savings transaction notes."""
        pass

    @abstractmethod
    def delete_savings_transaction(self, transaction_id: int) -> None:
        """Remove a savings transaction."""
        pass

    @abstractmethod
    def list_savings_transactions_for_replay(self, account_id: int) -> list[SavingsTransaction]:
        """List an account's transactions in replay order."""
        pass

    @abstractmethod
    def list_savings_transactions(
        self,
        owner_id: str,
        year: Optional[int] = None,
        month: Optional[int] = None,
        account_id: Optional[int] = None,
        offset: int = 0,
        limit: Optional[int] = None,
    ) -> list[SavingsTransaction]:
        """List the owner's savings transactions, newest first, with account names."""
        pass

    @abstractmethod
    def count_savings_transactions(
        self,
        owner_id: str,
        year: Optional[int] = None,
        month: Optional[int] = None,
        account_id: Optional[int] = None,
    ) -> int:
        """Count the owner's savings transactions matching the filters."""
        pass

    # Recurring rule operations
    @abstractmethod
    def create_recurring_rule(
        self,
        owner_id: str,
        account_id: int,
        amount: Decimal,
        day_of_month: int,
        start_year: int,
        start_month: int,
        end_year: Optional[int],
        end_month: Optional[int],
        mode: str,
        is_active: bool,
    ) -> int:
        """Create a monthly recurring rule. Returns rule ID."""
        pass

    @abstractmethod
    def get_recurring_rule(self, rule_id: int) -> Optional[RecurringRule]:
        """Get recurring rule by ID."""
        pass

    @abstractmethod
    def list_recurring_rules(
        self, owner_id: str, account_id: Optional[int] = None, active_only: bool = False
    ) -> list[RecurringRule]:
        """List the owner's recurring rules, newest first."""
        pass

    @abstractmethod
    def update_recurring_rule(
        self,
        rule_id: int,
        amount: Decimal,
        day_of_month: int,
        start_year: int,
        start_month: int,
        end_year: Optional[int],
        end_month: Optional[int],
        mode: str,
        is_active: bool,
    ) -> None:
        """Replace a recurring rule's schedule fields."""
        pass

    @abstractmethod
    def delete_recurring_rule(self, rule_id: int) -> None:
        """Delete a recurring rule, detaching the deposits it generated."""
        pass

    @abstractmethod
    def mark_rule_generated(self, rule_id: int, generated_at: datetime) -> None:
        """Record when a rule last ran through generation."""
        pass
