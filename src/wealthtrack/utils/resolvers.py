"""Utilities for resolving asset symbols and account names to IDs."""

from wealthtrack.domain.errors import NotFoundError
from wealthtrack.domain.investment import InvestmentService
from wealthtrack.domain.savings import SavingsService


def resolve_asset(investment_service: InvestmentService, owner_id: str, asset: str | int) -> int:
    """Resolve an asset symbol or ID to an asset ID.

    Args:
        investment_service: InvestmentService instance
        owner_id: Owner of the asset
        asset: Asset symbol (str) or ID (int or string representation of int)

    Returns:
        Asset ID

    Raises:
        NotFoundError: If no live asset of the owner matches
    """
    try:
        asset_id = int(asset)
    except (ValueError, TypeError):
        pass
    else:
        return investment_service.get_asset(owner_id, asset_id).id

    found = investment_service.find_asset_by_symbol(owner_id, str(asset))
    if found is None:
        raise NotFoundError(f"Asset '{asset}' not found", entity="asset")
    return found.id


def resolve_account(savings_service: SavingsService, owner_id: str, account: str | int) -> int:
    """Resolve a savings account name or ID to an account ID.

    Args:
        savings_service: SavingsService instance
        owner_id: Owner of the account
        account: Account name (str) or ID (int or string representation of int)

    Returns:
        Account ID

    Raises:
        NotFoundError: If no account of the owner matches
    """
    try:
        account_id = int(account)
    except (ValueError, TypeError):
        pass
    else:
        return savings_service.get_account(owner_id, account_id).id

    for acc in savings_service.list_accounts(owner_id):
        if acc.name == account:
            return acc.id

    raise NotFoundError(f"Savings account '{account}' not found", entity="savings_account")
