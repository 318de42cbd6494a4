"""Tests for domain entities."""

import pytest
from datetime import datetime, UTC
from decimal import Decimal

from wealthtrack.domain.entities import (
    Asset,
    AssetType,
    Currency,
    Exchange,
    Page,
    Period,
    RecurringMode,
    SavingsTransaction,
    SavingsTransactionType,
    TransactionSource,
    TransactionStatus,
)


def make_asset(**overrides):
    fields = dict(
        id=1,
        owner_id="u",
        name="Gold",
        symbol="XAU",
        asset_type=AssetType.GOLD,
        exchange=Exchange.COMMODITY,
        currency=Currency.USD,
        color=None,
        total_units=Decimal("4"),
        total_invested=Decimal("1000"),
        created_at=datetime.now(UTC),
    )
    fields.update(overrides)
    return Asset(**fields)


def make_savings_transaction(status, source):
    return SavingsTransaction(
        id=1,
        owner_id="u",
        account_id=1,
        transaction_type=SavingsTransactionType.CAPITAL_ADD,
        amount=Decimal("10"),
        year=2024,
        month=1,
        day=None,
        status=status,
        source=source,
        rule_id=None,
        notes="",
        created_at=datetime.now(UTC),
    )


class TestPeriod:
    """Tests for Period value object."""

    def test_ordering(self):
        assert Period(2023, 12) < Period(2024, 1) < Period(2024, 2)

    def test_next_rolls_over_year(self):
        assert Period(2024, 12).next() == Period(2025, 1)

    def test_index_round_trip(self):
        assert Period.from_index(Period(2024, 12).index) == Period(2024, 12)
        assert Period.from_index(Period(2024, 1).index) == Period(2024, 1)

    def test_str(self):
        assert str(Period(2024, 6)) == "2024-06"


class TestAsset:
    """Tests for Asset entity."""

    def test_average_cost(self):
        assert make_asset().average_cost == Decimal("250")

    def test_average_cost_without_units(self):
        assert make_asset(total_units=Decimal("0"), total_invested=Decimal("0")).average_cost == Decimal("0")

    def test_is_deleted(self):
        assert not make_asset().is_deleted
        assert make_asset(deleted_at=datetime.now(UTC)).is_deleted

    def test_asset_immutability(self):
        """Test that Asset entities are immutable."""
        asset = make_asset()
        with pytest.raises(Exception):  # dataclass frozen raises FrozenInstanceError
            asset.total_units = Decimal("1")


class TestSavingsTransaction:
    """Tests for SavingsTransaction entity."""

    @pytest.mark.parametrize(
        "status,source,locked",
        [
            (TransactionStatus.COMPLETED, TransactionSource.RECURRING, True),
            (TransactionStatus.PENDING, TransactionSource.RECURRING, False),
            (TransactionStatus.COMPLETED, TransactionSource.MANUAL, False),
        ],
    )
    def test_is_locked(self, status, source, locked):
        assert make_savings_transaction(status, source).is_locked is locked


def test_recurring_mode_generated_status():
    assert RecurringMode.AUTO_CONFIRM.generated_status is TransactionStatus.COMPLETED
    assert RecurringMode.PENDING.generated_status is TransactionStatus.PENDING


def test_page_counts():
    page = Page(items=(), page=2, limit=50, total=101)

    assert page.total_pages == 3
    assert page.has_more
    assert not Page(items=(), page=3, limit=50, total=101).has_more
    assert Page(items=(), page=1, limit=50, total=0).total_pages == 0
