"""Month-end FX revaluation command."""

from datetime import date

import click
from ledgerbook.cli.error_handling import exit_with_error, handle_domain_error
from ledgerbook.domain.errors import DomainError
from ledgerbook.domain.fx import FxTable
from ledgerbook.domain.money import Money
from ledgerbook.domain.revaluation import FxRevaluationService
from ledgerbook.utils.amount_parser import parse_amount
from ledgerbook.utils.date_parser import month_end, parse_month


@click.command("revalue")
@click.argument("month", metavar="YYYY-MM")
@click.option(
    "--fx",
    "fx_rates",
    multiple=True,
    help="Month-end rate as CODE=VALUE ledger units per 1 CODE (repeatable)",
)
@click.option("--post", is_flag=True, help="Record the revaluation transactions")
@click.option("--threshold", help="Only post when total movement reaches this amount")
@click.pass_context
def revalue(ctx, month: str, fx_rates: tuple[str, ...], post: bool, threshold: str | None):
    """Revalue foreign-currency positions at a month-end rate.

    Without --post the positions and proposed entries are only shown.

    Examples:
        ledgerbook revalue 2025-10 --fx USD=17.80
        ledgerbook revalue 2025-10 --fx USD=17.80 --fx EUR=20.10 --post
    """
    engine = ctx.obj["engine"]

    try:
        first_day = parse_month(month)
    except ValueError as e:
        exit_with_error(ctx, str(e))
    as_of = month_end(first_day)

    fx = FxTable()
    try:
        for item in fx_rates:
            code, sep, value = item.partition("=")
            if not sep:
                raise ValueError(f"Expected CODE=VALUE, got '{item}'")
            fx.ensure(code.strip(), engine.base_currency, as_of, parse_amount(value))
        threshold_money = (
            Money.from_major_units(parse_amount(threshold), engine.base_currency)
            if threshold
            else None
        )

        service = FxRevaluationService(engine, fx)
        result = service.perform_month_end_revaluation(
            first_day.year, first_day.month, post=post, threshold=threshold_money
        )
    except (DomainError, ValueError) as e:
        handle_domain_error(ctx, e)
        return

    if not result.positions:
        click.echo(f"No foreign-currency positions as of {result.as_of}.")
        return

    click.echo(f"\nFX positions as of {result.as_of}:")
    click.echo("-" * 96)
    for position in result.positions:
        click.echo(
            f"{position.account_id[:20]:<20} {position.original_amount.format(show_code=True):>20} "
            f"@ {position.current_rate:<10} {position.current_value.format():>16} "
            f"{position.unrealized.format():>16}"
        )
    click.echo("-" * 96)
    click.echo(f"Total unrealized: {service.total_unrealized(list(result.positions)).format(show_code=True)}")

    if post:
        click.echo(f"Posted {len(result.posted_transaction_ids)} revaluation transaction(s).")
    elif result.drafts:
        click.echo(f"{len(result.drafts)} revaluation entry(ies) proposed; use --post to record them.")


def register_commands(cli):
    """Register revalue command with main CLI."""
    cli.add_command(revalue)
