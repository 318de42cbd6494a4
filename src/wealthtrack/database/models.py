"""SQLAlchemy models for wealthtrack database."""

from datetime import datetime, UTC
from decimal import Decimal

from sqlalchemy import (
    Column,
    Integer,
    String,
    ForeignKey,
    DateTime,
    Numeric,
    Boolean,
    Index,
    TypeDecorator,
    create_engine,
    text,
)
from sqlalchemy.orm import declarative_base, relationship, sessionmaker, Session

Base = declarative_base()


class ExactDecimal(TypeDecorator):
    """Numeric column that round-trips Decimal values exactly on every backend.

    SQLite has no decimal storage and would bind values as floats, so there
    the value is stored as its decimal string. Other backends use NUMERIC.
    """

    impl = Numeric
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == "sqlite":
            return dialect.type_descriptor(String(40))
        return dialect.type_descriptor(self.impl)

    def process_bind_param(self, value, dialect):
        if value is None or dialect.name != "sqlite":
            return value
        return str(Decimal(value))

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return Decimal(str(value))


# Amounts keep cents; units and cost basis keep the precision of the fold.
MONEY = ExactDecimal(14, 2)
UNITS = ExactDecimal(20, 8)
COST_BASIS = ExactDecimal(24, 8)
PERCENT = ExactDecimal(5, 2)


def _utcnow() -> datetime:
    return datetime.now(UTC)


class Asset(Base):
    """Investment holding model."""

    __tablename__ = "assets"

    id = Column(Integer, primary_key=True)
    owner_id = Column(String, nullable=False, index=True)
    name = Column(String(100), nullable=False)
    symbol = Column(String(20), nullable=False)
    asset_type = Column(String, nullable=False)
    exchange = Column(String, nullable=False, default="US")
    currency = Column(String, nullable=False, default="USD")
    color = Column(String, nullable=True)

    # Derived from the transaction log; written only by recompute
    total_units = Column(UNITS, nullable=False, default=0)
    total_invested = Column(COST_BASIS, nullable=False, default=0)

    created_at = Column(DateTime, default=_utcnow, nullable=False)
    deleted_at = Column(DateTime, nullable=True)

    # One live asset per symbol and owner; deleted assets keep their symbol
    __table_args__ = (
        Index(
            "uq_owner_live_symbol",
            "owner_id",
            "symbol",
            unique=True,
            sqlite_where=text("deleted_at IS NULL"),
            postgresql_where=text("deleted_at IS NULL"),
        ),
    )

    # Relationships
    transactions = relationship("InvestmentTransaction", back_populates="asset")


class InvestmentTransaction(Base):
    """Investment transaction model."""

    __tablename__ = "investment_transactions"

    id = Column(Integer, primary_key=True)
    owner_id = Column(String, nullable=False, index=True)
    asset_id = Column(Integer, ForeignKey("assets.id"), nullable=False, index=True)
    transaction_type = Column(String, nullable=False)
    units = Column(UNITS, nullable=False)
    price_per_unit = Column(MONEY, nullable=False)
    total_amount = Column(MONEY, nullable=False)
    currency = Column(String, nullable=False, default="USD")
    year = Column(Integer, nullable=False)
    month = Column(Integer, nullable=False)
    day = Column(Integer, nullable=True)
    notes = Column(String(500), nullable=False, default="")
    asset_symbol = Column(String, nullable=False)
    asset_name = Column(String, nullable=False)
    created_at = Column(DateTime, default=_utcnow, nullable=False)

    __table_args__ = (
        Index("ix_investment_owner_period", "owner_id", "year", "month"),
        Index("ix_investment_asset_period", "asset_id", "year", "month", "day"),
    )

    # Relationships
    asset = relationship("Asset", back_populates="transactions")


class SavingsAccount(Base):
    """Savings account model."""

    __tablename__ = "savings_accounts"

    id = Column(Integer, primary_key=True)
    owner_id = Column(String, nullable=False, index=True)
    name = Column(String(100), nullable=False)
    color = Column(String, nullable=False, default="#0ea5e9")
    goal = Column(MONEY, nullable=False, default=0)
    starting_balance = Column(MONEY, nullable=False, default=0)
    rate_percent = Column(PERCENT, nullable=False, default=0)
    return_frequency = Column(String, nullable=False, default="daily_working")
    monthly_contribution = Column(MONEY, nullable=False, default=0)
    auto_deposit_reminder = Column(Boolean, nullable=False, default=False)

    # Derived from completed transactions; written only by recompute
    total_contributed = Column(MONEY, nullable=False, default=0)
    total_dividends = Column(MONEY, nullable=False, default=0)
    total_withdrawn = Column(MONEY, nullable=False, default=0)
    current_balance = Column(MONEY, nullable=False, default=0)

    created_at = Column(DateTime, default=_utcnow, nullable=False)

    # Relationships
    transactions = relationship(
        "SavingsTransaction", back_populates="account", cascade="all, delete-orphan"
    )
    rules = relationship("RecurringRule", back_populates="account", cascade="all, delete-orphan")


class RecurringRule(Base):
    """Monthly recurring deposit rule model."""

    __tablename__ = "recurring_rules"

    id = Column(Integer, primary_key=True)
    owner_id = Column(String, nullable=False, index=True)
    account_id = Column(Integer, ForeignKey("savings_accounts.id"), nullable=False, index=True)
    amount = Column(MONEY, nullable=False)
    frequency = Column(String, nullable=False, default="monthly")
    day_of_month = Column(Integer, nullable=False, default=5)
    start_year = Column(Integer, nullable=False)
    start_month = Column(Integer, nullable=False)
    end_year = Column(Integer, nullable=True)
    end_month = Column(Integer, nullable=True)
    mode = Column(String, nullable=False, default="pending")
    is_active = Column(Boolean, nullable=False, default=True)
    last_generated_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=_utcnow, nullable=False)

    # Relationships
    account = relationship("SavingsAccount", back_populates="rules")


class SavingsTransaction(Base):
    """Savings transaction model."""

    __tablename__ = "savings_transactions"

    id = Column(Integer, primary_key=True)
    owner_id = Column(String, nullable=False, index=True)
    account_id = Column(Integer, ForeignKey("savings_accounts.id"), nullable=False, index=True)
    transaction_type = Column(String, nullable=False)
    amount = Column(MONEY, nullable=False)
    year = Column(Integer, nullable=False)
    month = Column(Integer, nullable=False)
    day = Column(Integer, nullable=True)
    status = Column(String, nullable=False, default="completed")
    source = Column(String, nullable=False, default="manual")
    rule_id = Column(Integer, ForeignKey("recurring_rules.id", ondelete="SET NULL"), nullable=True)
    notes = Column(String(500), nullable=False, default="")
    created_at = Column(DateTime, default=_utcnow, nullable=False)

    # At most one generated deposit per rule and month
    __table_args__ = (
        Index(
            "uq_recurring_monthly_deposit",
            "account_id",
            "rule_id",
            "year",
            "month",
            unique=True,
            sqlite_where=text(
                "source = 'recurring' AND transaction_type = 'capital_add' AND rule_id IS NOT NULL"
            ),
            postgresql_where=text(
                "source = 'recurring' AND transaction_type = 'capital_add' AND rule_id IS NOT NULL"
            ),
        ),
        Index("ix_savings_owner_period", "owner_id", "year", "month"),
    )

    # Relationships
    account = relationship("SavingsAccount", back_populates="transactions")


def create_session_factory(database_url: str) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory."""
    connect_args = {}
    if database_url.startswith("sqlite"):
        # Concurrent writers wait on the database lock instead of failing at once
        connect_args["timeout"] = 30
    engine = create_engine(database_url, echo=False, connect_args=connect_args)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine)
