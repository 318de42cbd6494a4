"""Investment domain service.

Every mutation of an asset's transaction log runs inside one unit of work
together with the refold of that asset's totals, so the stored totals never
disagree with the committed log.
"""

import logging
from datetime import datetime, UTC
from decimal import Decimal
from typing import Optional

from wealthtrack.database.base import Database
from wealthtrack.domain.entities import (
    Asset,
    AssetTotals,
    AssetType,
    Currency,
    Exchange,
    InvestmentTransaction,
    InvestmentTransactionType,
)
from wealthtrack.domain.errors import (
    ConflictError,
    InsufficientUnitsError,
    NotFoundError,
    OwnershipError,
    asset_not_found,
    duplicate_asset_symbol,
    insufficient_units,
    investment_transaction_not_found,
)
from wealthtrack.domain.ledger import (
    fold_asset_transactions,
    incremental_asset_totals,
    units_available_to_sell,
)
from wealthtrack.domain.validation import (
    MAX_PRICE,
    MAX_TOTAL,
    MAX_UNITS,
    MIN_PRICE,
    MIN_TOTAL,
    MIN_UNITS,
    normalize_symbol,
    validate_choice,
    validate_color,
    validate_decimal,
    validate_name,
    validate_notes,
    validate_period,
    validate_total_matches,
)

logger = logging.getLogger(__name__)


class InvestmentService:
    """Service for managing assets and their transaction logs."""

    def __init__(self, db: Database):
        """Initialize investment service.

        Args:
            db: Database instance
        """
        self.db = db

    # Assets
    def _require_asset(self, owner_id: str, asset_id: int, lock: bool = False) -> Asset:
        """Return the owner's live asset or raise NotFoundError."""
        asset = self.db.lock_asset(asset_id) if lock else self.db.get_asset(asset_id)
        if asset is None or asset.is_deleted:
            raise NotFoundError(asset_not_found(asset_id), entity="asset", entity_id=asset_id)
        if asset.owner_id != owner_id:
            raise OwnershipError(asset_not_found(asset_id), entity="asset", entity_id=asset_id)
        return asset

    def create_asset(
        self,
        owner_id: str,
        name: str,
        symbol: str,
        asset_type: AssetType | str,
        exchange: Exchange | str = Exchange.US,
        currency: Currency | str = Currency.USD,
        color: Optional[str] = None,
    ) -> Asset:
        """Create an asset with zero holdings.

        Args:
            owner_id: Owner of the asset
            name: Display name
            symbol: Ticker symbol (stored upper-cased)
            asset_type: stock, etf, crypto or gold
            exchange: Market the asset is quoted on
            currency: Display currency
            color: Optional #rrggbb colour

        Returns:
            The created Asset

        Raises:
            ValidationError: If any field is invalid
            ConflictError: If the owner already holds a live asset with this symbol
        """
        name = validate_name(name)
        symbol = normalize_symbol(symbol)
        asset_type = validate_choice(asset_type, AssetType, "asset_type")
        exchange = validate_choice(exchange, Exchange, "exchange")
        currency = validate_choice(currency, Currency, "currency")
        color = validate_color(color)

        if self.db.get_asset_by_symbol(owner_id, symbol) is not None:
            raise ConflictError(duplicate_asset_symbol(symbol), field="symbol")

        with self.db.unit_of_work():
            asset_id = self.db.create_asset(
                owner_id=owner_id,
                name=name,
                symbol=symbol,
                asset_type=asset_type.value,
                exchange=exchange.value,
                currency=currency.value,
                color=color,
            )

        logger.info("Asset created | owner=%s | asset=%s | symbol=%s", owner_id, asset_id, symbol)
        return self.db.get_asset(asset_id)

    def get_asset(self, owner_id: str, asset_id: int) -> Asset:
        """Get one of the owner's live assets.

        Raises:
            NotFoundError: If the asset is missing, deleted or not the owner's
        """
        return self._require_asset(owner_id, asset_id)

    def find_asset_by_symbol(self, owner_id: str, symbol: str) -> Optional[Asset]:
        """Get the owner's live asset with this symbol, or None."""
        return self.db.get_asset_by_symbol(owner_id, normalize_symbol(symbol))

    def list_assets(self, owner_id: str) -> list[Asset]:
        """List the owner's live assets, newest first."""
        return self.db.list_assets(owner_id)

    def update_asset(
        self, owner_id: str, asset_id: int, name: Optional[str] = None, color: Optional[str] = None
    ) -> Asset:
        """Rename or recolour an asset. Symbol and holdings are not editable."""
        self._require_asset(owner_id, asset_id)
        if name is not None:
            name = validate_name(name)
        color = validate_color(color)

        with self.db.unit_of_work():
            self.db.update_asset(asset_id, name=name, color=color)
        return self.db.get_asset(asset_id)

    def delete_asset(self, owner_id: str, asset_id: int) -> None:
        """Soft-delete an asset. Its transactions are kept but it accepts no new ones."""
        asset = self._require_asset(owner_id, asset_id)
        logger.warning(
            "Asset soft-deleted | owner=%s | asset=%s | symbol=%s", owner_id, asset_id, asset.symbol
        )
        with self.db.unit_of_work():
            self.db.soft_delete_asset(asset_id, datetime.now(UTC))

    # Aggregates
    def recompute_asset(self, asset_id: int) -> AssetTotals:
        """Refold an asset's full log and store the result.

        Must run inside an open unit of work; the log read and the totals
        write then commit or roll back together with the caller's change.
        """
        transactions = self.db.list_investment_transactions_for_replay(asset_id)
        totals = fold_asset_transactions(transactions)
        self.db.update_asset_totals(asset_id, totals)
        return totals

    def recompute_all(self, owner_id: str) -> int:
        """Rebuild the totals of every live asset of the owner. Returns the asset count."""
        assets = self.db.list_assets(owner_id)
        for asset in assets:
            with self.db.unit_of_work():
                self.db.lock_asset(asset.id)
                self.recompute_asset(asset.id)
        logger.info("Asset totals rebuilt | owner=%s | assets=%s", owner_id, len(assets))
        return len(assets)

    def get_asset_aggregate(self, owner_id: str, asset_id: int) -> AssetTotals:
        """Return the stored totals of an asset. Never recomputes."""
        asset = self._require_asset(owner_id, asset_id)
        return AssetTotals(total_units=asset.total_units, total_invested=asset.total_invested)

    def get_asset_history(
        self, owner_id: str, asset_id: int
    ) -> list[tuple[InvestmentTransaction, AssetTotals]]:
        """Return each transaction in replay order with the totals right after it."""
        self._require_asset(owner_id, asset_id)
        transactions = self.db.list_investment_transactions_for_replay(asset_id)
        return list(zip(transactions, incremental_asset_totals(transactions)))

    # Transactions
    def _require_transaction(self, owner_id: str, transaction_id: int) -> InvestmentTransaction:
        txn = self.db.get_investment_transaction(transaction_id)
        if txn is None:
            raise NotFoundError(
                investment_transaction_not_found(transaction_id),
                entity="investment_transaction",
                entity_id=transaction_id,
            )
        if txn.owner_id != owner_id:
            raise OwnershipError(
                investment_transaction_not_found(transaction_id),
                entity="investment_transaction",
                entity_id=transaction_id,
            )
        return txn

    def _check_sell(
        self, asset: Asset, units: Decimal, year: int, month: int, day: Optional[int]
    ) -> None:
        """Reject a sell that exceeds the units held at its dated position."""
        transactions = self.db.list_investment_transactions_for_replay(asset.id)
        available = units_available_to_sell(transactions, year, month, day)
        if units > available:
            raise InsufficientUnitsError(
                insufficient_units(units, available),
                field="units",
                entity="asset",
                entity_id=asset.id,
            )

    def create_transaction(
        self,
        owner_id: str,
        asset_id: int,
        transaction_type: InvestmentTransactionType | str,
        units,
        price_per_unit,
        total_amount,
        year: int,
        month: int,
        day: Optional[int] = None,
        notes: Optional[str] = "",
    ) -> InvestmentTransaction:
        """Append a buy, sell or dividend and refold the asset's totals.

        Args:
            owner_id: Owner of the asset
            asset_id: Asset the transaction belongs to
            transaction_type: buy, sell or dividend
            units: Units bought or sold (up to 8 decimal places)
            price_per_unit: Price per unit (up to 2 decimal places)
            total_amount: Total value; must equal units x price within one cent
            year: Transaction year
            month: Transaction month
            day: Optional day of month
            notes: Optional notes

        Returns:
            The created InvestmentTransaction

        Raises:
            ValidationError: If any field is invalid
            NotFoundError: If the asset is missing, deleted or not the owner's
            InsufficientUnitsError: If a sell exceeds the units held at its date,
                or would leave a later sell short
        """
        transaction_type = validate_choice(
            transaction_type, InvestmentTransactionType, "transaction_type"
        )
        units = validate_decimal(units, "units", minimum=MIN_UNITS, maximum=MAX_UNITS, places=8)
        price_per_unit = validate_decimal(
            price_per_unit, "price_per_unit", minimum=MIN_PRICE, maximum=MAX_PRICE, places=2
        )
        total_amount = validate_decimal(
            total_amount, "total_amount", minimum=MIN_TOTAL, maximum=MAX_TOTAL
        )
        validate_total_matches(units, price_per_unit, total_amount)
        validate_period(year, month, day)
        notes = validate_notes(notes)

        asset = self._require_asset(owner_id, asset_id)
        if transaction_type is InvestmentTransactionType.SELL:
            self._check_sell(asset, units, year, month, day)

        with self.db.unit_of_work():
            # Re-check under the asset lock; another writer may have sold meanwhile
            asset = self._require_asset(owner_id, asset_id, lock=True)
            if transaction_type is InvestmentTransactionType.SELL:
                self._check_sell(asset, units, year, month, day)

            transaction_id = self.db.create_investment_transaction(
                owner_id=owner_id,
                asset_id=asset_id,
                transaction_type=transaction_type.value,
                units=units,
                price_per_unit=price_per_unit,
                total_amount=total_amount,
                currency=asset.currency.value,
                year=year,
                month=month,
                day=day,
                notes=notes,
                asset_symbol=asset.symbol,
                asset_name=asset.name,
            )
            totals = self.recompute_asset(asset_id)

        logger.info(
            "Investment transaction created | owner=%s | asset=%s | txn=%s | type=%s | units=%s | total_units=%s",
            owner_id,
            asset_id,
            transaction_id,
            transaction_type.value,
            units,
            totals.total_units,
        )
        return self.db.get_investment_transaction(transaction_id)

    def get_transaction(self, owner_id: str, transaction_id: int) -> InvestmentTransaction:
        """Get one of the owner's investment transactions."""
        return self._require_transaction(owner_id, transaction_id)

    def update_transaction_notes(
        self, owner_id: str, transaction_id: int, notes: Optional[str]
    ) -> InvestmentTransaction:
        """Replace a transaction's notes, the only field that may change."""
        self._require_transaction(owner_id, transaction_id)
        notes = validate_notes(notes)
        with self.db.unit_of_work():
            self.db.update_investment_transaction_notes(transaction_id, notes)
        return self.db.get_investment_transaction(transaction_id)

    def delete_transaction(self, owner_id: str, transaction_id: int) -> None:
        """Remove a transaction and refold its asset's totals.

        Deleting a buy that later sells depended on is allowed; the refold
        clamps the totals at zero.
        """
        txn = self._require_transaction(owner_id, transaction_id)
        logger.warning(
            "Investment transaction deleted | owner=%s | asset=%s | txn=%s | type=%s",
            owner_id,
            txn.asset_id,
            transaction_id,
            txn.transaction_type.value,
        )
        with self.db.unit_of_work():
            self.db.lock_asset(txn.asset_id)
            self.db.delete_investment_transaction(transaction_id)
            self.recompute_asset(txn.asset_id)

    def list_transactions(
        self,
        owner_id: str,
        year: Optional[int] = None,
        month: Optional[int] = None,
        asset_id: Optional[int] = None,
    ) -> list[InvestmentTransaction]:
        """List the owner's transactions, newest first, optionally by period or asset."""
        if year is not None:
            validate_period(year, month if month is not None else 1)
        return self.db.list_investment_transactions(
            owner_id, year=year, month=month, asset_id=asset_id
        )
