"""Shared domain error messages and error types."""

from typing import Optional


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling. Each error carries the
    offending field or entity so callers can build actionable messages.
    """

    def __init__(
        self,
        message: str,
        *,
        field: Optional[str] = None,
        entity: Optional[str] = None,
        entity_id: Optional[int] = None,
    ):
        super().__init__(message)
        self.message = message
        self.field = field
        self.entity = entity
        self.entity_id = entity_id


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class NotFoundError(DomainError):
    """Requested domain entity does not exist, is deleted, or is not owned by the caller."""


class OwnershipError(NotFoundError):
    """Entity exists but belongs to another owner.

    Reported with the same message as a missing entity.
    """


class ConflictError(DomainError):
    """Domain conflict, such as uniqueness violations."""


class DuplicatePeriodError(ConflictError):
    """A recurring deposit already exists for the rule and period."""


class InvalidStateTransitionError(DomainError):
    """Operation is not allowed in the entity's current state."""


class InsufficientUnitsError(DomainError):
    """A sell exceeds the units currently held."""


class DependencyError(DomainError):
    """Operation blocked due to dependent domain data."""


class StorageUnavailableError(DomainError):
    """The underlying store failed; the operation may be retried."""

    retryable = True


def asset_not_found(asset_id: int) -> str:
    """Return message for missing asset."""
    return f"Asset {asset_id} not found"


def savings_account_not_found(account_id: int) -> str:
    """Return message for missing savings account."""
    return f"Savings account {account_id} not found"


def investment_transaction_not_found(transaction_id: int) -> str:
    """Return message for missing investment transaction."""
    return f"Investment transaction {transaction_id} not found"


def savings_transaction_not_found(transaction_id: int) -> str:
    """Return message for missing savings transaction."""
    return f"Savings transaction {transaction_id} not found"


def recurring_rule_not_found(rule_id: int) -> str:
    """Return message for missing recurring rule."""
    return f"Recurring rule {rule_id} not found"


def duplicate_asset_symbol(symbol: str) -> str:
    """Return message for a symbol already held by the owner."""
    return f"You already have an asset with symbol {symbol}"


def duplicate_recurring_period(rule_id: int, year: int, month: int) -> str:
    """Return message for a recurring deposit that already exists."""
    return f"Recurring deposit for rule {rule_id} already exists for {year}-{month:02d}"


def insufficient_units(requested, held) -> str:
    """Return message when a sell exceeds holdings."""
    return f"Cannot sell {requested} units. You only have {held} units."


def completed_to_pending() -> str:
    """Return message for a forbidden status rollback."""
    return "Cannot change completed transaction back to pending"


def recurring_delete_blocked(transaction_id: int) -> str:
    """Return message when a generated deposit is locked."""
    return (
        f"Cannot delete savings transaction {transaction_id}: "
        "completed recurring transactions are locked."
    )


def storage_unavailable(detail: str) -> str:
    """Return message for a failed storage operation."""
    return f"Storage unavailable: {detail}. Please retry."
