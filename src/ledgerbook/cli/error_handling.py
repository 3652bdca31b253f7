"""CLI error reporting helpers."""

import logging

import click

from ledgerbook.domain.errors import DomainError

logger = logging.getLogger(__name__)


def exit_with_error(ctx: click.Context, message: str) -> None:
    """Print ``Error: <message>`` to stderr and exit with status 1."""
    click.echo(f"Error: {message}", err=True)
    ctx.exit(1)


def handle_domain_error(ctx: click.Context, error: DomainError | ValueError) -> None:
    """Render a domain error and exit with failure."""
    logger.debug("Command failed with %s", type(error).__name__, exc_info=error)
    exit_with_error(ctx, str(error))
