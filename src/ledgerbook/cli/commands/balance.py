"""Account balance command."""

import click
from ledgerbook.cli.account_resolution import resolve_account_or_exit
from ledgerbook.cli.date_filters import parse_date_or_exit


@click.command("balance")
@click.argument("account", required=False, metavar="[ACCOUNT]")
@click.option("--as-of", help="Balance as of this date (defaults to all history)")
@click.option("--all", "show_all", is_flag=True, help="Include accounts with zero balance")
@click.pass_context
def balance(ctx, account: str | None, as_of: str | None, show_all: bool):
    """Show account balances on each account's normal side.

    Examples:
        ledgerbook balance credit-card --as-of 2025-10-31
        ledgerbook balance --as-of "end of last month"
    """
    engine = ctx.obj["engine"]
    as_of_date = parse_date_or_exit(ctx, as_of, "as-of date") if as_of else None

    if account is not None:
        account_id = resolve_account_or_exit(ctx, engine, account)
        acc = engine.require_account(account_id)
        amount = engine.get_account_balance(account_id, as_of_date)
        click.echo(f"{acc.name}: {amount.format(show_code=True)}")
        return

    balances = [
        b for b in engine.get_all_account_balances(as_of_date) if show_all or not b.balance.is_zero()
    ]
    if not balances:
        click.echo("No balances found.")
        return

    heading = f"Balances as of {as_of_date}" if as_of_date else "Balances"
    click.echo(f"\n{heading}:")
    click.echo("-" * 72)
    for entry in balances:
        click.echo(
            f"{entry.code:<10} {entry.name:<28} {entry.nature.value:<9} "
            f"{entry.balance.format():>20}"
        )


def register_commands(cli):
    """Register balance command with main CLI."""
    cli.add_command(balance)
