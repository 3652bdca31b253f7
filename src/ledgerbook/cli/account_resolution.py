"""CLI helpers for account resolution."""

from __future__ import annotations

import click
from ledgerbook.cli.error_handling import exit_with_error
from ledgerbook.domain.errors import DomainError
from ledgerbook.domain.ledger import LedgerEngine
from ledgerbook.utils.account_resolver import resolve_account


def resolve_account_or_exit(ctx: click.Context, engine: LedgerEngine, account: str) -> str:
    """Resolve an account id, code or name, or exit with a CLI error."""
    try:
        return resolve_account(engine, account)
    except DomainError as exc:
        exit_with_error(ctx, str(exc))
