"""Export ledger data as JSON records."""

import json

import click
from ledgerbook.database.records import (
    TRANSACTION_SCHEMA_VERSION,
    account_to_record,
    external_account_to_record,
    snapshot_to_record,
    transaction_to_record,
)


@click.command("export")
@click.option("--output", "-o", type=click.Path(dir_okay=False), help="Write to file instead of stdout")
@click.pass_context
def export(ctx, output: str | None):
    """Export accounts, transactions, external accounts and snapshots as JSON.

    Amounts are written as integer minor units with their currency code.
    """
    engine = ctx.obj["engine"]
    external = ctx.obj["external"]
    snapshots = ctx.obj["snapshots"]

    # Oldest first so the file replays in creation order
    transactions = sorted(engine.get_transactions(), key=lambda t: t.sequence)
    payload = {
        "owner_id": engine.owner_id,
        "base_currency": engine.base_currency,
        "schema_version": TRANSACTION_SCHEMA_VERSION,
        "accounts": [account_to_record(a) for a in engine.list_accounts()],
        "transactions": [transaction_to_record(t) for t in transactions],
        "external_accounts": [external_account_to_record(a) for a in external.list_accounts()],
        "snapshots": [snapshot_to_record(s) for s in snapshots.list_snapshots()],
    }
    text = json.dumps(payload, indent=2, ensure_ascii=False)

    if output is None:
        click.echo(text)
        return

    with open(output, "w", encoding="utf-8") as handle:
        handle.write(text)
        handle.write("\n")
    click.echo(
        f"Exported {len(payload['accounts'])} account(s) and "
        f"{len(payload['transactions'])} transaction(s) to {output}"
    )


def register_commands(cli):
    """Register export command with main CLI."""
    cli.add_command(export)
