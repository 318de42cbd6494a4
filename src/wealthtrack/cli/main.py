"""Main CLI entry point."""

import logging

import click
from wealthtrack.database.factories import create_database

# Import and register all commands at module level
from wealthtrack.cli.commands import (
    asset,
    invest,
    savings,
    rule,
)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: str) -> None:
    """Configure root logging for a CLI run."""
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)
    # Statement echo is only wanted when explicitly debugging SQL
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to SQLite database file (overrides WEALTHTRACK_DB_PATH environment variable)",
    envvar="WEALTHTRACK_DB_PATH",
)
@click.option(
    "--database-url",
    help="SQLAlchemy database URL; takes precedence over --db-path",
    envvar="WEALTHTRACK_DATABASE_URL",
)
@click.option(
    "--owner",
    default="default",
    show_default=True,
    help="Owner whose data the command acts on",
    envvar="WEALTHTRACK_OWNER",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default="WARNING",
    show_default=True,
    help="Logging level",
    envvar="WEALTHTRACK_LOG_LEVEL",
)
@click.pass_context
def cli(ctx, db_path: str | None, database_url: str | None, owner: str, log_level: str):
    """Wealthtrack - Investment and savings tracking.

    Record buys, sells and dividends per asset, and deposits, dividends and
    withdrawals per savings account. Holdings and balances are always derived
    from the recorded transactions.
    """
    ctx.ensure_object(dict)
    configure_logging(log_level)

    # Initialize database connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        db = create_database(database_url=database_url, database_path=db_path)
        db.connect()
        db.initialize_schema()
        ctx.obj["db"] = db
        ctx.obj["owner"] = owner
        ctx.call_on_close(db.disconnect)


# Register all commands
asset.register_commands(cli)
invest.register_commands(cli)
savings.register_commands(cli)
rule.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
