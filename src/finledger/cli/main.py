"""Main CLI entry point."""

import logging

import click
from finledger.database.factories import create_sqlite_database
from finledger.domain.currency import DEFAULT_BASE_CURRENCY, supported_codes
from finledger.domain.exchange_rates import create_exchange_rate_client

# Import and register all commands at module level
from finledger.cli.commands import (
    company,
    client,
    project,
    record,
    summary,
    export,
    rate,
)


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides FINLEDGER_DB_PATH environment variable)",
    envvar="FINLEDGER_DB_PATH",
)
@click.option(
    "--base-currency",
    type=click.Choice(supported_codes(), case_sensitive=False),
    default=DEFAULT_BASE_CURRENCY,
    show_default=True,
    envvar="FINLEDGER_BASE_CURRENCY",
    help="Currency that foreign amounts are converted into",
)
@click.option(
    "--offline",
    is_flag=True,
    envvar="FINLEDGER_OFFLINE",
    help="Never contact the exchange-rate service",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx, db_path: str | None, base_currency: str, offline: bool, verbose: bool):
    """Finledger - company and personal income/expense tracking.

    Record income and expenses per company or in a personal ledger, with
    VAT, multiple currencies and exchange rates to a base currency.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    ctx.ensure_object(dict)
    ctx.obj["base_currency"] = base_currency.upper()
    ctx.obj["rate_client"] = None if offline else create_exchange_rate_client()

    # Initialize database connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        db = create_sqlite_database(database_path=db_path)
        db.connect()
        db.initialize_schema()
        ctx.obj["db"] = db
        ctx.call_on_close(db.disconnect)


# Register all commands
company.register_commands(cli)
client.register_commands(cli)
project.register_commands(cli)
record.register_commands(cli)
summary.register_commands(cli)
export.register_commands(cli)
rate.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
