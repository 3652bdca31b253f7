"""Add transaction command."""

import click

from ledgerbook.cli.account_resolution import resolve_account_or_exit
from ledgerbook.cli.date_filters import parse_date_or_exit
from ledgerbook.cli.error_handling import exit_with_error, handle_domain_error
from ledgerbook.domain.builder import TransactionBuilder
from ledgerbook.domain.errors import DomainError, ValidationError
from ledgerbook.domain.fx import convert_money
from ledgerbook.domain.money import Money, to_decimal
from ledgerbook.utils.amount_parser import parse_amount


@click.command("add")
@click.option("--debit", "debit_account", required=True, help="Account to debit (id, code or name)")
@click.option("--credit", "credit_account", required=True, help="Account to credit (id, code or name)")
@click.option(
    "--date",
    required=True,
    help="Transaction date (YYYY-MM-DD or relative like 'today', 'yesterday')",
)
@click.option("--amount", required=True, help="Positive transaction amount (e.g., 250.00)")
@click.option("--currency", help="Currency of the amount (defaults to the ledger currency)")
@click.option(
    "--exchange-rate",
    help="Ledger currency units per 1 unit of --currency (defaults to the --rate table)",
)
@click.option("--description", required=True, help="Transaction description")
@click.option("--memo", help="Free-text memo")
@click.option("--reference", help="Reference number")
@click.option("--tag", "tags", multiple=True, help="Tag (repeatable)")
@click.pass_context
def add_transaction(
    ctx,
    debit_account: str,
    credit_account: str,
    date: str,
    amount: str,
    currency: str | None,
    exchange_rate: str | None,
    description: str,
    memo: str | None,
    reference: str | None,
    tags: tuple[str, ...],
):
    """Record a two-leg transaction.

    Examples:
        ledgerbook add --debit food --credit credit-card --date 2025-10-15 --amount 250 --description "Groceries"
        ledgerbook add --debit checking --credit salary --date today --amount 1000 --currency USD --exchange-rate 17.5 --description "Salary"
    """
    engine = ctx.obj["engine"]

    debit_id = resolve_account_or_exit(ctx, engine, debit_account)
    credit_id = resolve_account_or_exit(ctx, engine, credit_account)
    txn_date = parse_date_or_exit(ctx, date)

    try:
        txn_amount = parse_amount(amount)
    except ValueError as e:
        exit_with_error(ctx, f"Invalid amount format: {e}")

    rate = None
    if exchange_rate is not None:
        try:
            rate = to_decimal(exchange_rate, "exchange rate")
        except ValidationError as e:
            exit_with_error(ctx, str(e))
        if rate <= 0:
            exit_with_error(ctx, f"Invalid exchange rate '{exchange_rate}': must be positive")

    try:
        original = Money.from_major_units(txn_amount, currency or engine.base_currency)
        booked = None
        if original.currency != engine.base_currency and rate is None:
            booked = convert_money(engine.converter, original, engine.base_currency)

        builder = TransactionBuilder(description, engine.base_currency, txn_date)
        builder.debit(debit_id, original, booked=booked, exchange_rate=rate)
        builder.credit(credit_id, original, booked=booked, exchange_rate=rate)
        if memo:
            builder.memo(memo)
        if reference:
            builder.reference(reference)
        builder.tags(*tags)

        transaction = engine.add_transaction(builder.build())
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    click.echo(f"Created transaction {transaction.id}")
    click.echo(f"  Date: {transaction.date}")
    click.echo(f"  Debit: {engine.require_account(debit_id).name}")
    click.echo(f"  Credit: {engine.require_account(credit_id).name}")
    click.echo(f"  Amount: {original.format(show_code=True)}")
    if original.currency != engine.base_currency:
        click.echo(f"  Booked: {transaction.postings[0].booked.format(show_code=True)}")
    click.echo(f"  Description: {description}")


def register_commands(cli):
    """Register add command with main CLI."""
    cli.add_command(add_transaction)
