"""CLI error handling helpers."""

import click

from wealthtrack.domain.errors import DomainError


def error_context(error: DomainError | ValueError) -> str:
    """Return the field or entity a domain error points at, or an empty string."""
    field = getattr(error, "field", None)
    if field:
        return f"field: {field}"
    entity = getattr(error, "entity", None)
    if entity:
        entity_id = getattr(error, "entity_id", None)
        return f"{entity} {entity_id}" if entity_id is not None else entity
    return ""


def handle_domain_error(ctx: click.Context, error: DomainError | ValueError) -> None:
    """Render a domain error with its field or entity and exit with failure."""
    context = error_context(error)
    message = f"Error: {error}"
    if context:
        message = f"{message} [{context}]"
    click.echo(message, err=True)
    ctx.exit(1)
