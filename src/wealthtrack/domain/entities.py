"""Domain model entities for wealthtrack.

These are pure data classes representing business concepts, independent of
database schema. Enumerated fields are closed sets so every branch over a
transaction type, status, source or mode can be handled exhaustively.
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional


class AssetType(str, Enum):
    """Kind of investment holding."""

    STOCK = "stock"
    ETF = "etf"
    CRYPTO = "crypto"
    GOLD = "gold"


class Exchange(str, Enum):
    """Market an asset is quoted on."""

    US = "US"
    KLSE = "KLSE"
    CRYPTO = "CRYPTO"
    COMMODITY = "COMMODITY"


class Currency(str, Enum):
    """Supported currencies (display only, no conversion)."""

    USD = "USD"
    MYR = "MYR"


class InvestmentTransactionType(str, Enum):
    """Investment log event type."""

    BUY = "buy"
    SELL = "sell"
    DIVIDEND = "dividend"


class SavingsTransactionType(str, Enum):
    """Savings log event type."""

    CAPITAL_ADD = "capital_add"
    DIVIDEND = "dividend"
    WITHDRAWAL = "withdrawal"


class TransactionStatus(str, Enum):
    """Savings transaction status. Only pending -> completed is allowed."""

    PENDING = "pending"
    COMPLETED = "completed"


class TransactionSource(str, Enum):
    """Origin of a savings transaction."""

    MANUAL = "manual"
    RECURRING = "recurring"


class RecurringMode(str, Enum):
    """Status assigned to deposits generated by a recurring rule."""

    PENDING = "pending"
    AUTO_CONFIRM = "auto_confirm"

    @property
    def generated_status(self) -> TransactionStatus:
        if self is RecurringMode.AUTO_CONFIRM:
            return TransactionStatus.COMPLETED
        return TransactionStatus.PENDING


class RecurringFrequency(str, Enum):
    """Recurrence frequency. Only monthly rules exist."""

    MONTHLY = "monthly"


class ReturnFrequency(str, Enum):
    """How often a savings account pays returns (display only)."""

    DAILY_WORKING = "daily_working"
    DAILY_CALENDAR = "daily_calendar"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


@dataclass(frozen=True, order=True)
class Period:
    """A calendar month, ordered chronologically."""

    year: int
    month: int

    @property
    def index(self) -> int:
        """Months since year 0, so periods compare as plain integers."""
        return self.year * 12 + self.month

    @classmethod
    def from_index(cls, index: int) -> "Period":
        year, month = divmod(index - 1, 12)
        return cls(year=year, month=month + 1)

    def next(self) -> "Period":
        return Period.from_index(self.index + 1)

    def __str__(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"


@dataclass(frozen=True)
class Asset:
    """Investment holding domain entity."""

    id: int
    owner_id: str
    name: str
    symbol: str
    asset_type: AssetType
    exchange: Exchange
    currency: Currency
    color: Optional[str]
    total_units: Decimal
    total_invested: Decimal
    created_at: datetime
    deleted_at: Optional[datetime] = None

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    @property
    def average_cost(self) -> Decimal:
        """Average cost per unit held, or zero when nothing is held."""
        if self.total_units <= 0:
            return Decimal("0")
        return self.total_invested / self.total_units


@dataclass(frozen=True)
class InvestmentTransaction:
    """Investment transaction domain entity."""

    id: int
    owner_id: str
    asset_id: int
    transaction_type: InvestmentTransactionType
    units: Decimal
    price_per_unit: Decimal
    total_amount: Decimal
    currency: Currency
    year: int
    month: int
    day: Optional[int]
    notes: str
    asset_symbol: str
    asset_name: str
    created_at: datetime

    @property
    def period(self) -> Period:
        return Period(self.year, self.month)


@dataclass(frozen=True)
class SavingsAccount:
    """Savings account domain entity."""

    id: int
    owner_id: str
    name: str
    color: str
    goal: Decimal
    starting_balance: Decimal
    rate_percent: Decimal
    return_frequency: ReturnFrequency
    monthly_contribution: Decimal
    auto_deposit_reminder: bool
    total_contributed: Decimal
    total_dividends: Decimal
    total_withdrawn: Decimal
    current_balance: Decimal
    created_at: datetime

    @property
    def goal_progress(self) -> Optional[Decimal]:
        """Fraction of the goal reached, or None when no goal is set."""
        if self.goal <= 0:
            return None
        return self.current_balance / self.goal


@dataclass(frozen=True)
class SavingsTransaction:
    """Savings transaction domain entity."""

    id: int
    owner_id: str
    account_id: int
    transaction_type: SavingsTransactionType
    amount: Decimal
    year: int
    month: int
    day: Optional[int]
    status: TransactionStatus
    source: TransactionSource
    rule_id: Optional[int]
    notes: str
    created_at: datetime
    account_name: Optional[str] = None

    @property
    def period(self) -> Period:
        return Period(self.year, self.month)

    @property
    def is_locked(self) -> bool:
        """Completed recurring deposits cannot be deleted."""
        return (
            self.status is TransactionStatus.COMPLETED
            and self.source is TransactionSource.RECURRING
        )


@dataclass(frozen=True)
class RecurringRule:
    """Monthly recurring deposit rule domain entity."""

    id: int
    owner_id: str
    account_id: int
    amount: Decimal
    frequency: RecurringFrequency
    day_of_month: int
    start_year: int
    start_month: int
    end_year: Optional[int]
    end_month: Optional[int]
    mode: RecurringMode
    is_active: bool
    last_generated_at: Optional[datetime]
    created_at: datetime

    @property
    def start(self) -> Period:
        return Period(self.start_year, self.start_month)

    @property
    def end(self) -> Optional[Period]:
        if self.end_year is None or self.end_month is None:
            return None
        return Period(self.end_year, self.end_month)


@dataclass(frozen=True)
class AssetTotals:
    """Derived aggregate of an asset's transaction log."""

    total_units: Decimal
    total_invested: Decimal


@dataclass(frozen=True)
class SavingsTotals:
    """Derived aggregate of a savings account's completed transactions."""

    total_contributed: Decimal
    total_dividends: Decimal
    total_withdrawn: Decimal
    current_balance: Decimal


@dataclass(frozen=True)
class GenerationResult:
    """Outcome of a recurring generation pass."""

    created: int
    skipped: int
    rules_processed: int


@dataclass(frozen=True)
class Page:
    """One page of a paginated listing."""

    items: tuple
    page: int
    limit: int
    total: int

    @property
    def total_pages(self) -> int:
        return (self.total + self.limit - 1) // self.limit

    @property
    def has_more(self) -> bool:
        return self.page * self.limit < self.total
