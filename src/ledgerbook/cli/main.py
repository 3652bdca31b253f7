"""Main CLI entry point."""

import logging

import click
from ledgerbook.cli.error_handling import exit_with_error
from ledgerbook.database.factories import create_database
from ledgerbook.domain.errors import DomainError
from ledgerbook.domain.external import ExternalAccountService
from ledgerbook.domain.fx import StaticRatesConverter
from ledgerbook.domain.ledger import LedgerEngine
from ledgerbook.domain.reports import ReportService
from ledgerbook.domain.snapshot import SnapshotService
from ledgerbook.logging_config import setup_logging

# Import and register all commands at module level
from ledgerbook.cli.commands import (
    account,
    add,
    balance,
    export,
    external,
    init_ledger,
    report,
    revalue,
    snapshot,
    transaction,
)


def _parse_rates(rates: tuple[str, ...]) -> dict[str, str]:
    parsed = {}
    for item in rates:
        code, sep, value = item.partition("=")
        if not sep or not code.strip() or not value.strip():
            raise click.BadParameter(f"Expected CODE=VALUE, got '{item}'", param_hint="--rate")
        parsed[code.strip().upper()] = value.strip()
    return parsed


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to SQLite database file (overrides LEDGERBOOK_DB_PATH environment variable)",
    envvar="LEDGERBOOK_DB_PATH",
)
@click.option(
    "--db-url",
    help="SQLAlchemy database URL (overrides --db-path)",
    envvar="LEDGERBOOK_DB_URL",
)
@click.option(
    "--owner",
    default="default",
    show_default=True,
    help="Ledger owner id",
    envvar="LEDGERBOOK_OWNER",
)
@click.option(
    "--base-currency",
    default="MXN",
    show_default=True,
    help="Currency every transaction is booked in",
    envvar="LEDGERBOOK_BASE_CURRENCY",
)
@click.option(
    "--rate",
    "rates",
    multiple=True,
    help="Display rate as CODE=VALUE units per 1 base unit (repeatable)",
)
@click.option("--verbose", "-v", is_flag=True, help="Log debug output to stderr")
@click.pass_context
def cli(
    ctx,
    db_path: str | None,
    db_url: str | None,
    owner: str,
    base_currency: str,
    rates: tuple[str, ...],
    verbose: bool,
):
    """Ledgerbook - Double-entry personal finance ledger.

    Record balanced transactions against a chart of accounts and derive
    balances, statements, net worth and month-end snapshots from them.
    """
    ctx.ensure_object(dict)
    setup_logging(logging.DEBUG if verbose else logging.WARNING)

    # Initialize database connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        db = create_database(database_url=db_url, database_path=db_path)
        db.connect()
        db.initialize_schema()
        ctx.call_on_close(db.disconnect)

        try:
            converter = StaticRatesConverter(base_currency, _parse_rates(rates))
            engine = LedgerEngine(db, owner, base_currency=base_currency, converter=converter)
        except DomainError as e:
            exit_with_error(ctx, str(e))
        reports = ReportService(engine, converter=converter)

        ctx.obj["db"] = db
        ctx.obj["engine"] = engine
        ctx.obj["reports"] = reports
        ctx.obj["external"] = ExternalAccountService(db, owner)
        ctx.obj["snapshots"] = SnapshotService(db, owner, reports)


# Register all commands
init_ledger.register_commands(cli)
account.register_commands(cli)
add.register_commands(cli)
transaction.register_commands(cli)
balance.register_commands(cli)
report.register_commands(cli)
external.register_commands(cli)
snapshot.register_commands(cli)
revalue.register_commands(cli)
export.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
