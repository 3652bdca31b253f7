"""CLI helpers for date parsing and date range resolution."""

from datetime import date

import click

from ledgerbook.cli.error_handling import exit_with_error
from ledgerbook.utils.date_parser import get_date_range, parse_date

PERIOD_HELP = {
    "this-month": "Filter to current month",
    "this-year": "Filter to current year",
    "this-week": "Filter to current week",
    "last-month": "Filter to previous month",
    "last-year": "Filter to previous year",
    "last-week": "Filter to previous week",
}
PERIOD_OPTIONS = tuple(PERIOD_HELP)


def period_options(command):
    """Attach the --this-month ... --last-week flags to a command."""
    for period in reversed(PERIOD_OPTIONS):
        command = click.option(f"--{period}", is_flag=True, help=PERIOD_HELP[period])(command)
    return command


def collect_period_flags(kwargs: dict) -> dict[str, bool]:
    """Pop period flag values from click kwargs, keyed by period name."""
    return {period: kwargs.pop(period.replace("-", "_"), False) for period in PERIOD_OPTIONS}


def parse_date_or_exit(ctx: click.Context, value: str, label: str = "date") -> date:
    try:
        return parse_date(value)
    except ValueError as e:
        exit_with_error(ctx, f"Invalid {label}: {e}")


def resolve_cli_date_range(
    ctx,
    *,
    start_date: str | None,
    end_date: str | None,
    period_flags: dict[str, bool],
    default_range: tuple[date, date] | None = None,
) -> tuple[date | None, date | None]:
    """Resolve CLI date range from period flags or explicit dates."""
    period_count = sum(1 for is_set in period_flags.values() if is_set)

    if period_count > 1:
        exit_with_error(
            ctx,
            "Only one period option (--this-month, --this-year, --this-week, --last-month, --last-year, --last-week) can be specified at a time.",
        )

    if period_count > 0 and (start_date or end_date):
        exit_with_error(
            ctx,
            "Period options (--this-month, --this-year, etc.) cannot be combined with --start-date or --end-date.",
        )

    start = None
    end = None

    if period_count == 1:
        for period, is_set in period_flags.items():
            if is_set:
                start, end = get_date_range(period)
                break
    else:
        if start_date:
            start = parse_date_or_exit(ctx, start_date, "start date")
        if end_date:
            end = parse_date_or_exit(ctx, end_date, "end date")

        if start is None and end is None and default_range is not None:
            start, end = default_range

    return start, end
