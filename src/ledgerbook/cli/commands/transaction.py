"""Transaction management commands."""

import click
from ledgerbook.cli.account_resolution import resolve_account_or_exit
from ledgerbook.cli.date_filters import collect_period_flags, period_options, resolve_cli_date_range
from ledgerbook.cli.error_handling import exit_with_error, handle_domain_error
from ledgerbook.domain.entities import TransactionFilters
from ledgerbook.domain.errors import DomainError


@click.group()
def transaction_group():
    """Manage transactions."""
    pass


def _transaction_amount(txn):
    total = None
    for posting in txn.postings:
        if posting.booked_debit is not None:
            total = posting.booked_debit if total is None else total.add(posting.booked_debit)
    return total


@transaction_group.command("list")
@click.option("--start-date", help="Start date (YYYY-MM-DD or relative like 'last month', 'this year')")
@click.option("--end-date", help="End date (YYYY-MM-DD or relative like 'today', 'end of month')")
@period_options
@click.option("--account", help="Only transactions touching this account (id, code or name)")
@click.option("--description", help="Case-insensitive description substring")
@click.option("--reference", help="Case-insensitive reference substring")
@click.option("--tag", "tags", multiple=True, help="Match any of these tags (repeatable)")
@click.option("--verbose", "-v", is_flag=True, help="Show postings, memo, reference and tags")
@click.pass_context
def list_transactions(
    ctx,
    start_date: str | None,
    end_date: str | None,
    account: str | None,
    description: str | None,
    reference: str | None,
    tags: tuple[str, ...],
    verbose: bool,
    **period_kwargs,
):
    """View transactions, newest first, with optional filters."""
    engine = ctx.obj["engine"]

    start, end = resolve_cli_date_range(
        ctx,
        start_date=start_date,
        end_date=end_date,
        period_flags=collect_period_flags(period_kwargs),
    )

    account_ids = None
    if account:
        account_ids = (resolve_account_or_exit(ctx, engine, account),)

    transactions = engine.get_transactions(
        TransactionFilters(
            date_from=start,
            date_to=end,
            account_ids=account_ids,
            description=description,
            reference=reference,
            tags=tags or None,
        )
    )

    if not transactions:
        click.echo("No transactions found.")
        return

    accounts = {acc.id: acc.name for acc in engine.list_accounts()}

    click.echo(f"\nFound {len(transactions)} transaction(s):")
    if verbose:
        click.echo("=" * 100)
        for txn in transactions:
            _echo_transaction(txn, accounts)
            click.echo("-" * 100)
    else:
        click.echo("-" * 100)
        click.echo(f"{'ID':<34} {'Date':<12} {'Amount':>16}  {'Description':<36}")
        click.echo("-" * 100)
        for txn in transactions:
            amount = _transaction_amount(txn)
            click.echo(
                f"{txn.id:<34} {str(txn.date):<12} {amount.format():>16}  {txn.description[:36]:<36}"
            )


def _echo_transaction(txn, accounts: dict[str, str]) -> None:
    click.echo(f"\nTransaction ID: {txn.id}")
    click.echo(f"  Date: {txn.date}")
    click.echo(f"  Description: {txn.description}")
    if txn.memo:
        click.echo(f"  Memo: {txn.memo}")
    if txn.reference:
        click.echo(f"  Reference: {txn.reference}")
    if txn.tags:
        click.echo(f"  Tags: {', '.join(txn.tags)}")
    click.echo("  Postings:")
    for posting in txn.postings:
        side = posting.side.value.capitalize()
        name = accounts.get(posting.account_id, posting.account_id)
        line = f"    {side:<6} {name:<28} {posting.booked.format(show_code=True):>20}"
        if posting.original.currency != posting.booked.currency:
            line += f"  ({posting.original.format(show_code=True)} @ {posting.exchange_rate})"
        click.echo(line)


@transaction_group.command("show")
@click.argument("transaction_id")
@click.pass_context
def show_transaction(ctx, transaction_id: str) -> None:
    """Show one transaction with its postings."""
    engine = ctx.obj["engine"]

    try:
        txn = engine.require_transaction(transaction_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    accounts = {acc.id: acc.name for acc in engine.list_accounts()}
    _echo_transaction(txn, accounts)


@transaction_group.command("delete")
@click.argument("transaction_id")
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete_transaction(ctx, transaction_id: str, yes: bool) -> None:
    """Delete a transaction.

    Examples:
        ledgerbook transaction delete 3f2a9c...
    """
    engine = ctx.obj["engine"]

    txn = engine.get_transaction(transaction_id)
    if txn is None:
        exit_with_error(ctx, f"Transaction {transaction_id} not found")

    if not yes and not click.confirm(
        f"Are you sure you want to delete transaction {transaction_id}?"
    ):
        click.echo("Deletion cancelled.")
        return

    try:
        engine.delete_transaction(transaction_id)
        click.echo(f"Deleted transaction {transaction_id}")
    except DomainError as e:
        handle_domain_error(ctx, e)


def register_commands(cli: click.Group) -> None:
    """Register transaction commands with main CLI."""
    cli.add_command(transaction_group, name="transaction")
