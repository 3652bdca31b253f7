"""Tests for CLI date filter helpers."""

from datetime import date

import click
import pytest

from ledgerbook.cli.date_filters import (
    collect_period_flags,
    parse_date_or_exit,
    resolve_cli_date_range,
)
from ledgerbook.utils.date_parser import get_date_range


def _ctx() -> click.Context:
    return click.Context(click.Command("test"))


def test_collect_period_flags_pops_click_kwargs():
    kwargs = {"this_month": True, "last_week": False, "account": "cash"}

    flags = collect_period_flags(kwargs)

    assert flags["this-month"] is True
    assert flags["last-week"] is False
    assert flags["this-year"] is False
    assert kwargs == {"account": "cash"}


def test_parse_date_or_exit(capsys):
    assert parse_date_or_exit(_ctx(), "2025-10-31") == date(2025, 10, 31)

    with pytest.raises(click.exceptions.Exit) as excinfo:
        parse_date_or_exit(_ctx(), "garbage", "as-of date")

    assert excinfo.value.exit_code == 1
    assert "Invalid as-of date" in capsys.readouterr().err


def test_rejects_multiple_periods(capsys):
    with pytest.raises(click.exceptions.Exit) as excinfo:
        resolve_cli_date_range(
            _ctx(),
            start_date=None,
            end_date=None,
            period_flags={"this-month": True, "last-month": True},
        )

    assert excinfo.value.exit_code == 1
    assert "Only one period option" in capsys.readouterr().err


def test_rejects_period_with_explicit_dates(capsys):
    with pytest.raises(click.exceptions.Exit):
        resolve_cli_date_range(
            _ctx(),
            start_date="2025-10-01",
            end_date=None,
            period_flags={"last-month": True},
        )

    assert "cannot be combined" in capsys.readouterr().err


def test_period_range():
    start, end = resolve_cli_date_range(
        _ctx(),
        start_date=None,
        end_date=None,
        period_flags={"last-month": True},
    )
    assert (start, end) == get_date_range("last-month")


def test_explicit_dates_override_default():
    start, end = resolve_cli_date_range(
        _ctx(),
        start_date="2025-10-02",
        end_date="2025-10-05",
        period_flags={},
        default_range=(date(2020, 1, 1), date(2020, 1, 31)),
    )
    assert (start, end) == (date(2025, 10, 2), date(2025, 10, 5))


def test_default_range_applies():
    default_range = (date(2020, 1, 1), date(2020, 1, 31))
    start, end = resolve_cli_date_range(
        _ctx(), start_date=None, end_date=None, period_flags={}, default_range=default_range
    )
    assert (start, end) == default_range


def test_no_default_range():
    assert resolve_cli_date_range(_ctx(), start_date=None, end_date=None, period_flags={}) == (
        None,
        None,
    )


def test_invalid_end_date(capsys):
    with pytest.raises(click.exceptions.Exit):
        resolve_cli_date_range(_ctx(), start_date=None, end_date="not-a-date", period_flags={})
    assert "Invalid end date" in capsys.readouterr().err
