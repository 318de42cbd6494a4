"""Mapper functions to convert between domain models and SQLAlchemy models.

This layer isolates the conversion logic, including turning stored strings
back into the domain enums and stored numerics into Decimals.
"""

from decimal import Decimal
from typing import Optional

from wealthtrack.domain import entities as domain
from wealthtrack.database.models import (
    Asset as ORMAsset,
    InvestmentTransaction as ORMInvestmentTransaction,
    SavingsAccount as ORMSavingsAccount,
    SavingsTransaction as ORMSavingsTransaction,
    RecurringRule as ORMRecurringRule,
)


def _dec(value) -> Decimal:
    if value is None:
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def asset_to_domain(orm_asset: ORMAsset) -> domain.Asset:
    """Convert SQLAlchemy Asset model to domain Asset entity."""
    return domain.Asset(
        id=orm_asset.id,
        owner_id=orm_asset.owner_id,
        name=orm_asset.name,
        symbol=orm_asset.symbol,
        asset_type=domain.AssetType(orm_asset.asset_type),
        exchange=domain.Exchange(orm_asset.exchange),
        currency=domain.Currency(orm_asset.currency),
        color=orm_asset.color,
        total_units=_dec(orm_asset.total_units),
        total_invested=_dec(orm_asset.total_invested),
        created_at=orm_asset.created_at,
        deleted_at=orm_asset.deleted_at,
    )


def investment_transaction_to_domain(
    orm_transaction: ORMInvestmentTransaction,
) -> domain.InvestmentTransaction:
    """Convert SQLAlchemy InvestmentTransaction model to domain entity."""
    return domain.InvestmentTransaction(
        id=orm_transaction.id,
        owner_id=orm_transaction.owner_id,
        asset_id=orm_transaction.asset_id,
        transaction_type=domain.InvestmentTransactionType(orm_transaction.transaction_type),
        units=_dec(orm_transaction.units),
        price_per_unit=_dec(orm_transaction.price_per_unit),
        total_amount=_dec(orm_transaction.total_amount),
        currency=domain.Currency(orm_transaction.currency),
        year=orm_transaction.year,
        month=orm_transaction.month,
        day=orm_transaction.day,
        notes=orm_transaction.notes or "",
        asset_symbol=orm_transaction.asset_symbol,
        asset_name=orm_transaction.asset_name,
        created_at=orm_transaction.created_at,
    )


def savings_account_to_domain(orm_account: ORMSavingsAccount) -> domain.SavingsAccount:
    """Convert SQLAlchemy SavingsAccount model to domain entity."""
    return domain.SavingsAccount(
        id=orm_account.id,
        owner_id=orm_account.owner_id,
        name=orm_account.name,
        color=orm_account.color,
        goal=_dec(orm_account.goal),
        starting_balance=_dec(orm_account.starting_balance),
        rate_percent=_dec(orm_account.rate_percent),
        return_frequency=domain.ReturnFrequency(orm_account.return_frequency),
        monthly_contribution=_dec(orm_account.monthly_contribution),
        auto_deposit_reminder=bool(orm_account.auto_deposit_reminder),
        total_contributed=_dec(orm_account.total_contributed),
        total_dividends=_dec(orm_account.total_dividends),
        total_withdrawn=_dec(orm_account.total_withdrawn),
        current_balance=_dec(orm_account.current_balance),
        created_at=orm_account.created_at,
    )


def savings_transaction_to_domain(
    orm_transaction: ORMSavingsTransaction, account_name: Optional[str] = None
) -> domain.SavingsTransaction:
    """Convert SQLAlchemy SavingsTransaction model to domain entity."""
    return domain.SavingsTransaction(
        id=orm_transaction.id,
        owner_id=orm_transaction.owner_id,
        account_id=orm_transaction.account_id,
        transaction_type=domain.SavingsTransactionType(orm_transaction.transaction_type),
        amount=_dec(orm_transaction.amount),
        year=orm_transaction.year,
        month=orm_transaction.month,
        day=orm_transaction.day,
        status=domain.TransactionStatus(orm_transaction.status),
        source=domain.TransactionSource(orm_transaction.source),
        rule_id=orm_transaction.rule_id,
        notes=orm_transaction.notes or "",
        created_at=orm_transaction.created_at,
        account_name=account_name,
    )


def recurring_rule_to_domain(orm_rule: ORMRecurringRule) -> domain.RecurringRule:
    """Convert SQLAlchemy RecurringRule model to domain entity."""
    return domain.RecurringRule(
        id=orm_rule.id,
        owner_id=orm_rule.owner_id,
        account_id=orm_rule.account_id,
        amount=_dec(orm_rule.amount),
        frequency=domain.RecurringFrequency(orm_rule.frequency),
        day_of_month=orm_rule.day_of_month,
        start_year=orm_rule.start_year,
        start_month=orm_rule.start_month,
        end_year=orm_rule.end_year,
        end_month=orm_rule.end_month,
        mode=domain.RecurringMode(orm_rule.mode),
        is_active=bool(orm_rule.is_active),
        last_generated_at=orm_rule.last_generated_at,
        created_at=orm_rule.created_at,
    )
