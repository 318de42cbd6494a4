"""Aggregate folds over transaction logs.

Aggregates are always derived by replaying an entity's full log in
chronological order. Asset cost basis uses the average-cost method: a sell
removes the same fraction of the invested amount as it removes of the units
held immediately before it. Because each sell depends on the running totals
left by every earlier transaction, the fold is strictly sequential.
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Optional, Sequence

from wealthtrack.domain.entities import (
    AssetTotals,
    InvestmentTransaction,
    InvestmentTransactionType,
    SavingsTotals,
    SavingsTransaction,
    SavingsTransactionType,
    TransactionStatus,
)

ZERO = Decimal("0")
CENT = Decimal("0.01")
EMPTY_ASSET_TOTALS = AssetTotals(total_units=ZERO, total_invested=ZERO)


def replay_key(txn: InvestmentTransaction | SavingsTransaction) -> tuple:
    """Return the total ordering key used to replay a log.

    Transactions without a day sort as the first of their month; ties are
    broken by creation time and then by id (insertion order).
    """
    return (txn.year, txn.month, txn.day or 1, txn.created_at, txn.id)


def apply_asset_transaction(totals: AssetTotals, txn: InvestmentTransaction) -> AssetTotals:
    """Apply a single transaction to running (unclamped) asset totals."""
    units = totals.total_units
    invested = totals.total_invested

    if txn.transaction_type is InvestmentTransactionType.BUY:
        units += txn.units
        invested += txn.total_amount
    elif txn.transaction_type is InvestmentTransactionType.SELL:
        units_before = units
        units -= txn.units
        # A sell replayed against no holdings (e.g. after its buy was
        # deleted) removes the whole remaining cost basis.
        if units_before > 0:
            sell_ratio = min(txn.units / units_before, Decimal("1"))
        else:
            sell_ratio = Decimal("1")
        invested -= invested * sell_ratio
    elif txn.transaction_type is InvestmentTransactionType.DIVIDEND:
        pass
    else:
        raise ValueError(f"Unknown investment transaction type: {txn.transaction_type!r}")

    return AssetTotals(total_units=units, total_invested=invested)


def clamp_asset_totals(totals: AssetTotals) -> AssetTotals:
    """Clamp aggregates to zero to absorb rounding drift."""
    return AssetTotals(
        total_units=max(ZERO, totals.total_units),
        total_invested=max(ZERO, totals.total_invested),
    )


def fold_asset_transactions(transactions: Iterable[InvestmentTransaction]) -> AssetTotals:
    """Derive an asset's total units and cost basis from its full log.

    Args:
        transactions: The asset's transactions in any order; they are
            sorted by replay_key before folding.

    Returns:
        AssetTotals with both fields clamped to be non-negative
    """
    totals = EMPTY_ASSET_TOTALS
    for txn in sorted(transactions, key=replay_key):
        totals = apply_asset_transaction(totals, txn)
    return clamp_asset_totals(totals)


def units_available_to_sell(
    transactions: Iterable[InvestmentTransaction], year: int, month: int, day: Optional[int] = None
) -> Decimal:
    """Return the most units a new sell dated (year, month, day) may remove.

    A new row replays after every existing row of the same date. The sell
    must be covered by the units held right before it and must not leave
    any later sell of the log short, so the answer is the lowest running
    unit count from that position to the end of the log.
    """
    position = (year, month, day or 1)
    totals = EMPTY_ASSET_TOTALS
    available = None
    for txn in sorted(transactions, key=replay_key):
        if available is None and replay_key(txn)[:3] > position:
            available = totals.total_units
        totals = apply_asset_transaction(totals, txn)
        if available is not None:
            available = min(available, totals.total_units)

    if available is None:
        available = totals.total_units
    return max(available, ZERO)


def fold_savings_transactions(
    starting_balance: Decimal, transactions: Iterable[SavingsTransaction]
) -> SavingsTotals:
    """Derive a savings account's balance from its completed transactions.

    Sums are accumulated in full precision; only the balance is rounded,
    once, to cents.
    """
    contributed = ZERO
    dividends = ZERO
    withdrawn = ZERO

    for txn in transactions:
        if txn.status is not TransactionStatus.COMPLETED:
            continue
        if txn.transaction_type is SavingsTransactionType.CAPITAL_ADD:
            contributed += txn.amount
        elif txn.transaction_type is SavingsTransactionType.DIVIDEND:
            dividends += txn.amount
        elif txn.transaction_type is SavingsTransactionType.WITHDRAWAL:
            withdrawn += txn.amount
        else:
            raise ValueError(f"Unknown savings transaction type: {txn.transaction_type!r}")

    balance = Decimal(starting_balance) + contributed + dividends - withdrawn
    return SavingsTotals(
        total_contributed=contributed,
        total_dividends=dividends,
        total_withdrawn=withdrawn,
        current_balance=balance.quantize(CENT, rounding=ROUND_HALF_UP),
    )


def incremental_asset_totals(transactions: Sequence[InvestmentTransaction]) -> list[AssetTotals]:
    """Return the clamped totals after each transaction, in replay order.

    The last element always equals fold_asset_transactions over the same log.
    """
    totals = EMPTY_ASSET_TOTALS
    history = []
    for txn in sorted(transactions, key=replay_key):
        totals = apply_asset_transaction(totals, txn)
        history.append(clamp_asset_totals(totals))
    return history
