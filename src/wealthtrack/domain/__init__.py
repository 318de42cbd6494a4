"""Domain layer for wealthtrack application."""

__all__ = [
    "InvestmentService",
    "SavingsService",
    "RecurringService",
]


# Services are imported lazily; database.base imports domain.entities
def __getattr__(name):
    if name == "InvestmentService":
        from wealthtrack.domain.investment import InvestmentService
        return InvestmentService
    if name == "SavingsService":
        from wealthtrack.domain.savings import SavingsService
        return SavingsService
    if name == "RecurringService":
        from wealthtrack.domain.recurring import RecurringService
        return RecurringService
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")
