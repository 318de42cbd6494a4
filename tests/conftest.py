"""Shared pytest fixtures for wealthtrack tests."""

import tempfile
import os
from decimal import Decimal
import pytest

from wealthtrack.database.factories import create_sqlite_database
from wealthtrack.domain.investment import InvestmentService
from wealthtrack.domain.recurring import RecurringService
from wealthtrack.domain.savings import SavingsService

OWNER = "user-1"
OTHER_OWNER = "user-2"


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    # Create a temporary file for the database
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    # Create database
    db = create_sqlite_database(database_path=db_path)
    # Store the path for tests that need it
    db.database_path = db_path
    db.connect()
    db.initialize_schema()

    yield db

    # Cleanup
    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def investment_service(temp_db):
    """Create an InvestmentService with a temporary database."""
    return InvestmentService(temp_db)


@pytest.fixture
def savings_service(temp_db):
    """Create a SavingsService with a temporary database."""
    return SavingsService(temp_db)


@pytest.fixture
def recurring_service(temp_db, savings_service):
    """Create a RecurringService with a temporary database."""
    return RecurringService(temp_db, savings_service)


@pytest.fixture
def sample_asset(investment_service):
    """Create a sample ETF asset for testing."""
    return investment_service.create_asset(
        OWNER, name="Vanguard S&P 500", symbol="voo", asset_type="etf"
    )


@pytest.fixture
def sample_account(savings_service):
    """Create a sample savings account with a starting balance of 1000."""
    return savings_service.create_account(
        OWNER, name="Emergency Fund", starting_balance=Decimal("1000"), goal=Decimal("5000")
    )


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()


def record(service, asset_id, transaction_type, units, price, year=2024, month=1, day=None, owner=OWNER):
    """Record an investment transaction with total = units x price."""
    units = Decimal(str(units))
    price = Decimal(str(price))
    return service.create_transaction(
        owner,
        asset_id,
        transaction_type,
        units=units,
        price_per_unit=price,
        total_amount=(units * price).quantize(Decimal("0.01")),
        year=year,
        month=month,
        day=day,
    )
