"""External account commands."""

import click
from decimal import Decimal, InvalidOperation
from ledgerbook.cli.date_filters import parse_date_or_exit
from ledgerbook.cli.error_handling import exit_with_error, handle_domain_error
from ledgerbook.domain.entities import ExternalAccountType
from ledgerbook.domain.errors import DomainError
from ledgerbook.domain.money import Money
from ledgerbook.utils.amount_parser import parse_amount

TYPE_CHOICES = [t.value for t in ExternalAccountType]


@click.group()
def external_group():
    """Manage hand-maintained external accounts (banks, brokers, loans)."""
    pass


def _resolve_external_or_exit(ctx, service, account: str):
    """Find an external account by id or case-insensitive name."""
    found = service.get_account(account)
    if found is not None:
        return found
    matches = [a for a in service.list_accounts() if a.name.lower() == account.lower()]
    if not matches:
        exit_with_error(ctx, f"External account '{account}' not found")
    return matches[0]


def _money_or_exit(ctx, value: str, currency: str, label: str) -> Money:
    try:
        return Money.from_major_units(parse_amount(value), currency)
    except (ValueError, DomainError) as e:
        exit_with_error(ctx, f"Invalid {label}: {e}")


@external_group.command("add")
@click.argument("name", metavar="ACCOUNT_NAME")
@click.option(
    "--type",
    "account_type",
    required=True,
    type=click.Choice(TYPE_CHOICES, case_sensitive=False),
    help="Account type",
)
@click.option("--balance", required=True, help="Current balance (e.g., 15000.00)")
@click.option("--currency", default="MXN", show_default=True, help="Balance currency")
@click.option("--exclude", is_flag=True, help="Exclude from net worth totals")
@click.option("--yield", "estimated_yield", help="Estimated annual yield, e.g. 0.105")
@click.option("--due-date", help="Next payment due date")
@click.option("--recurring-due-day", type=int, help="Day of month a payment is due (1-31)")
@click.option("--min-payment", help="Minimum monthly payment")
@click.option("--no-interest-payment", help="Payment needed to avoid interest")
@click.pass_context
def add_external(
    ctx,
    name: str,
    account_type: str,
    balance: str,
    currency: str,
    exclude: bool,
    estimated_yield: str | None,
    due_date: str | None,
    recurring_due_day: int | None,
    min_payment: str | None,
    no_interest_payment: str | None,
):
    """Add an external account.

    Examples:
        ledgerbook external add "Broker" --type investment --balance 50000 --yield 0.105
        ledgerbook external add "Visa" --type credit-card --balance 3200 --recurring-due-day 5
    """
    service = ctx.obj["external"]

    yield_value = None
    if estimated_yield is not None:
        try:
            yield_value = Decimal(estimated_yield)
        except InvalidOperation:
            exit_with_error(ctx, f"Invalid yield '{estimated_yield}'")

    try:
        acc = service.add_account(
            name,
            ExternalAccountType(account_type.lower()),
            _money_or_exit(ctx, balance, currency, "balance"),
            exclude_from_total=exclude,
            estimated_yield=yield_value,
            due_date=parse_date_or_exit(ctx, due_date, "due date") if due_date else None,
            recurring_due_date=recurring_due_day,
            min_monthly_payment=(
                _money_or_exit(ctx, min_payment, currency, "minimum payment")
                if min_payment
                else None
            ),
            payment_to_avoid_interest=(
                _money_or_exit(ctx, no_interest_payment, currency, "payment to avoid interest")
                if no_interest_payment
                else None
            ),
        )
        click.echo(f"Created external account '{acc.name}' (ID: {acc.id})")
    except DomainError as e:
        handle_domain_error(ctx, e)


@external_group.command("list")
@click.pass_context
def list_external(ctx):
    """List external accounts."""
    service = ctx.obj["external"]

    accounts = service.list_accounts()
    if not accounts:
        click.echo("No external accounts found.")
        return

    click.echo("\nExternal accounts:")
    click.echo("-" * 96)
    for acc in accounts:
        flags = " (excluded)" if acc.exclude_from_total else ""
        click.echo(
            f"{acc.name[:24]:<24} | {acc.type.value:<11} | {acc.balance.format(show_code=True):>20} "
            f"| ID: {acc.id}{flags}"
        )


@external_group.command("update-balance")
@click.argument("account", metavar="ACCOUNT")
@click.argument("balance", metavar="BALANCE")
@click.pass_context
def update_balance(ctx, account: str, balance: str):
    """Replace the balance of an external account.

    ACCOUNT can be an external account id or name.
    """
    service = ctx.obj["external"]
    acc = _resolve_external_or_exit(ctx, service, account)

    try:
        updated = service.update_balance(
            acc.id, _money_or_exit(ctx, balance, acc.currency, "balance")
        )
        click.echo(f"Updated '{updated.name}' balance to {updated.balance.format(show_code=True)}")
    except DomainError as e:
        handle_domain_error(ctx, e)


@external_group.command("toggle-exclude")
@click.argument("account", metavar="ACCOUNT")
@click.pass_context
def toggle_exclude(ctx, account: str):
    """Toggle whether an external account counts toward net worth."""
    service = ctx.obj["external"]
    acc = _resolve_external_or_exit(ctx, service, account)

    updated = service.toggle_exclude_from_total(acc.id)
    state = "excluded from" if updated.exclude_from_total else "included in"
    click.echo(f"'{updated.name}' is now {state} net worth totals")


@external_group.command("delete")
@click.argument("account", metavar="ACCOUNT")
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete_external(ctx, account: str, yes: bool):
    """Delete an external account. A ledger mirror, if any, is kept."""
    service = ctx.obj["external"]
    acc = _resolve_external_or_exit(ctx, service, account)

    if not yes and not click.confirm(f"Are you sure you want to delete external account '{acc.name}'?"):
        click.echo("Deletion cancelled.")
        return

    try:
        service.delete_account(acc.id)
        click.echo(f"Deleted external account '{acc.name}'")
    except DomainError as e:
        handle_domain_error(ctx, e)


@external_group.command("sync")
@click.argument("account", required=False, metavar="[ACCOUNT]")
@click.pass_context
def sync_external(ctx, account: str | None):
    """Mirror external accounts into the ledger chart of accounts.

    Without ACCOUNT every external account is synced.
    """
    service = ctx.obj["external"]
    engine = ctx.obj["engine"]

    if account is not None:
        accounts = [_resolve_external_or_exit(ctx, service, account)]
    else:
        accounts = service.list_accounts()

    if not accounts:
        click.echo("No external accounts to sync.")
        return

    try:
        for acc in accounts:
            ledger_account = engine.sync_external_account(acc)
            click.echo(f"Synced '{acc.name}' -> {ledger_account.code} ({ledger_account.nature.value})")
    except DomainError as e:
        handle_domain_error(ctx, e)


def register_commands(cli):
    """Register external account commands with main CLI."""
    cli.add_command(external_group, name="external")
