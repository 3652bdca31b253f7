"""Financial report commands."""

from datetime import date

import click
from ledgerbook.cli.date_filters import (
    collect_period_flags,
    parse_date_or_exit,
    period_options,
    resolve_cli_date_range,
)
from ledgerbook.cli.error_handling import handle_domain_error
from ledgerbook.domain.errors import DomainError
from ledgerbook.utils.date_parser import month_bounds

LINE_WIDTH = 64


@click.group()
def report_group():
    """Financial statements and summaries."""
    pass


def _as_of_or_today(ctx, as_of: str | None) -> date:
    return parse_date_or_exit(ctx, as_of, "as-of date") if as_of else date.today()


def _period(ctx, start_date, end_date, period_kwargs) -> tuple[date, date]:
    start, end = resolve_cli_date_range(
        ctx,
        start_date=start_date,
        end_date=end_date,
        period_flags=collect_period_flags(period_kwargs),
        default_range=month_bounds(date.today()),
    )
    if start is None:
        start = month_bounds(end)[0]
    if end is None:
        end = date.today()
    return start, end


def _row(label: str, amount, indent: int = 0) -> None:
    width = LINE_WIDTH - 20 - indent
    click.echo(f"{' ' * indent}{label:<{width}} {amount.format():>20}")


def _rule(char: str = "-") -> None:
    click.echo(char * (LINE_WIDTH + 1))


def date_range_options(command):
    command = period_options(command)
    command = click.option("--end-date", help="End date (defaults to today)")(command)
    command = click.option("--start-date", help="Start date (defaults to start of month)")(command)
    return command


@report_group.command("trial-balance")
@click.option("--as-of", help="Report date (defaults to today)")
@click.pass_context
def trial_balance(ctx, as_of: str | None):
    """Debit and credit columns for every account with a balance."""
    engine = ctx.obj["engine"]
    tb = engine.get_trial_balance(_as_of_or_today(ctx, as_of))

    click.echo(f"\nTrial Balance as of {tb.as_of} ({tb.currency})")
    _rule("=")
    click.echo(f"{'Code':<8} {'Account':<28} {'Debit':>14} {'Credit':>14}")
    _rule()
    for line in tb.lines:
        debit = line.debit.format() if not line.debit.is_zero() else ""
        credit = line.credit.format() if not line.credit.is_zero() else ""
        click.echo(f"{line.code:<8} {line.name[:28]:<28} {debit:>14} {credit:>14}")
    _rule()
    click.echo(
        f"{'TOTAL':<37} {tb.total_debits.format():>14} {tb.total_credits.format():>14}"
    )
    click.echo("Balanced" if tb.is_balanced else "NOT BALANCED")


@report_group.command("balance-sheet")
@click.option("--as-of", help="Report date (defaults to today)")
@click.option("--currency", help="Display currency (uses --rate conversions)")
@click.pass_context
def balance_sheet(ctx, as_of: str | None, currency: str | None):
    """Assets, liabilities and equity, including current earnings."""
    engine = ctx.obj["engine"]
    try:
        sheet = engine.get_balance_sheet(_as_of_or_today(ctx, as_of), currency)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    click.echo(f"\nBalance Sheet as of {sheet.as_of} ({sheet.currency})")
    _rule("=")
    for title, lines, total in (
        ("Assets", sheet.assets, sheet.total_assets),
        ("Liabilities", sheet.liabilities, sheet.total_liabilities),
        ("Equity", sheet.equity, sheet.total_equity),
    ):
        click.echo(title)
        for line in lines:
            _row(line.name, line.amount, indent=4)
        _row(f"Total {title}", total)
        click.echo()
    _rule()
    _row("Liabilities + Equity", sheet.total_liabilities.add(sheet.total_equity))
    if not sheet.is_balanced:
        click.echo("Warning: balance sheet does not balance", err=True)


@report_group.command("income-statement")
@date_range_options
@click.option("--currency", help="Display currency (uses --rate conversions)")
@click.pass_context
def income_statement(ctx, start_date, end_date, currency, **period_kwargs):
    """Income and expenses over a period (defaults to the current month)."""
    reports = ctx.obj["reports"]
    start, end = _period(ctx, start_date, end_date, period_kwargs)
    try:
        pl = reports.get_pl(start, end, currency)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    click.echo(f"\nIncome Statement {pl.from_date} to {pl.to_date} ({pl.currency})")
    _rule("=")
    click.echo("Income")
    for line in pl.income:
        _row(line.name, line.amount, indent=4)
    _row("Total Income", pl.total_income)
    click.echo("\nExpenses")
    for line in pl.expenses:
        _row(line.name, line.amount, indent=4)
    _row("Total Expenses", pl.total_expenses)
    _rule()
    _row("Net Income", pl.net_income)


@report_group.command("cashflow")
@date_range_options
@click.option("--currency", help="Display currency (uses --rate conversions)")
@click.option("--details", is_flag=True, help="List individual cash movements")
@click.pass_context
def cashflow(ctx, start_date, end_date, currency, details, **period_kwargs):
    """Inflows and outflows of cash-like accounts over a period."""
    reports = ctx.obj["reports"]
    start, end = _period(ctx, start_date, end_date, period_kwargs)
    try:
        statement = reports.get_cashflow_statement(start, end, currency)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    click.echo(f"\nCash Flow {statement.from_date} to {statement.to_date} ({statement.currency})")
    _rule("=")
    for source, totals in sorted(statement.by_source.items()):
        click.echo(source.capitalize())
        _row("Inflow", totals.inflow, indent=4)
        _row("Outflow", totals.outflow, indent=4)
    _rule()
    _row("Total Inflows", statement.total_inflows)
    _row("Total Outflows", statement.total_outflows)
    _row("Net Cash Flow", statement.net_cashflow)

    if details and statement.details:
        click.echo("\nDetails:")
        for detail in statement.details:
            sign = "+" if detail.direction == "inflow" else "-"
            click.echo(
                f"  {detail.date}  {detail.account_name[:18]:<18} {detail.description[:24]:<24} "
                f"{sign}{detail.amount.format():>16}"
            )


@report_group.command("net-worth")
@click.option("--as-of", help="Report date (defaults to today)")
@click.option("--currency", help="Display currency (uses --rate conversions)")
@click.option("--positions", is_flag=True, help="List the accounts that make up net worth")
@click.pass_context
def net_worth(ctx, as_of: str | None, currency: str | None, positions: bool):
    """Assets minus liabilities across ledger and external accounts."""
    reports = ctx.obj["reports"]
    as_of_date = _as_of_or_today(ctx, as_of)
    try:
        nw = reports.get_net_worth_at(as_of_date, currency)
        items = reports.get_net_worth_positions(as_of_date, currency) if positions else []
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    click.echo(f"\nNet Worth as of {nw.as_of} ({nw.currency})")
    _rule("=")
    _row("Ledger assets", nw.ledger_assets)
    _row("External assets", nw.external_assets)
    _row("Total Assets", nw.total_assets)
    click.echo()
    _row("Ledger liabilities", nw.ledger_liabilities)
    _row("External liabilities", nw.external_liabilities)
    _row("Total Liabilities", nw.total_liabilities)
    _rule()
    _row("Net Worth", nw.net_worth)

    if items:
        click.echo("\nPositions:")
        for item in items:
            click.echo(
                f"  {item.account_name[:28]:<28} {item.account_type:<12} {item.nature.value:<9} "
                f"{item.balance_base.format():>16}"
            )


@report_group.command("month-end")
@click.option("--as-of", help="Report date (defaults to today)")
@click.option("--currency", help="Display currency (uses --rate conversions)")
@click.pass_context
def month_end(ctx, as_of: str | None, currency: str | None):
    """Cash on hand versus short-term liabilities, with suggested actions."""
    reports = ctx.obj["reports"]
    try:
        summary = reports.get_month_end_summary(_as_of_or_today(ctx, as_of), currency)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    click.echo(f"\nMonth-End Summary as of {summary.as_of} ({summary.currency})")
    _rule("=")
    click.echo("Cash")
    for item in summary.cash:
        _row(item.name, item.balance, indent=4)
    _row("Total Cash", summary.total_cash)
    click.echo("\nLiabilities")
    for item in summary.liabilities:
        label = f"{item.name} [{item.action}]" if item.action else item.name
        _row(label, item.balance, indent=4)
    _row("Total Liabilities", summary.total_liabilities)
    _rule()
    _row("Net Cash", summary.net_cash)


@report_group.command("expenses")
@date_range_options
@click.option("--currency", help="Display currency (uses --rate conversions)")
@click.pass_context
def expenses(ctx, start_date, end_date, currency, **period_kwargs):
    """Expenses by account and by essential/important/non-essential."""
    reports = ctx.obj["reports"]
    start, end = _period(ctx, start_date, end_date, period_kwargs)
    try:
        breakdown = reports.get_expense_breakdown(start, end, currency)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    click.echo(f"\nExpenses {breakdown.from_date} to {breakdown.to_date} ({breakdown.currency})")
    _rule("=")
    for line in breakdown.by_account:
        _row(f"{line.name} ({line.category.replace('_', '-')})", line.amount)
    _rule()
    _row("Essential", breakdown.essential)
    _row("Important", breakdown.important)
    _row("Non-essential", breakdown.non_essential)
    _row("Total", breakdown.total)
    _row("Average per day", breakdown.average_daily)


@report_group.command("savings")
@date_range_options
@click.option("--currency", help="Display currency (uses --rate conversions)")
@click.pass_context
def savings(ctx, start_date, end_date, currency, **period_kwargs):
    """Savings rate and how much trimming discretionary spending would add."""
    reports = ctx.obj["reports"]
    start, end = _period(ctx, start_date, end_date, period_kwargs)
    try:
        potential = reports.get_savings_potential(start, end, currency)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    click.echo(f"\nSavings {start} to {end}")
    _rule("=")
    _row("Income", potential.total_income)
    _row("Expenses", potential.total_expenses)
    _row("Net savings", potential.net_savings)
    click.echo(f"{'Savings rate':<44} {potential.savings_rate * 100:>19.1f}%")
    click.echo(f"{'Target rate':<44} {potential.target_savings_rate * 100:>19.1f}%")
    _row("Gap to target", potential.gap_to_target)
    _row("Potential monthly savings", potential.potential_savings)
    _row("Projected monthly savings", potential.projected_monthly_savings)
    _row("Projected yearly savings", potential.projected_yearly_savings)


def register_commands(cli):
    """Register report commands with main CLI."""
    cli.add_command(report_group, name="report")
