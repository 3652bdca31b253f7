"""Net worth snapshot commands."""

import click
from ledgerbook.cli.error_handling import exit_with_error, handle_domain_error
from ledgerbook.domain.errors import DomainError


@click.group()
def snapshot_group():
    """Freeze and compare month-end net worth."""
    pass


@snapshot_group.command("create")
@click.argument("month", required=False, metavar="[YYYY-MM]")
@click.pass_context
def create_snapshot(ctx, month: str | None):
    """Create or replace the snapshot for a month (defaults to the current month).

    Examples:
        ledgerbook snapshot create
        ledgerbook snapshot create 2025-10
    """
    service = ctx.obj["snapshots"]

    try:
        snapshot = service.create_snapshot(month)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    click.echo(f"Saved snapshot for {snapshot.month}: net worth {snapshot.net_worth.format(show_code=True)}")


@snapshot_group.command("list")
@click.pass_context
def list_snapshots(ctx):
    """List stored snapshots, oldest first."""
    service = ctx.obj["snapshots"]

    snapshots = service.list_snapshots()
    if not snapshots:
        click.echo("No snapshots found.")
        return

    click.echo("\nSnapshots:")
    click.echo("-" * 48)
    for snapshot in snapshots:
        click.echo(f"{snapshot.month:<10} {snapshot.net_worth.format(show_code=True):>24}")


@snapshot_group.command("show")
@click.argument("month", metavar="YYYY-MM")
@click.pass_context
def show_snapshot(ctx, month: str):
    """Show one snapshot with its account positions."""
    service = ctx.obj["snapshots"]

    snapshot = service.get_snapshot(month)
    if snapshot is None:
        exit_with_error(ctx, f"No snapshot for {month}")

    click.echo(f"\nSnapshot {snapshot.month} (taken {snapshot.created_at:%Y-%m-%d %H:%M})")
    click.echo("=" * 72)
    for position in snapshot.account_snapshots:
        click.echo(
            f"{position.account_name[:28]:<28} {position.account_type:<12} "
            f"{position.nature.value:<9} {position.balance_base.format():>18}"
        )
    click.echo("-" * 72)
    for nature, total in snapshot.totals_by_nature.items():
        if not total.is_zero():
            click.echo(f"{nature.value.capitalize():<51} {total.format():>18}")
    click.echo(f"{'Net Worth':<51} {snapshot.net_worth.format():>18}")


@snapshot_group.command("delete")
@click.argument("month", metavar="YYYY-MM")
@click.pass_context
def delete_snapshot(ctx, month: str):
    """Delete the snapshot for a month."""
    service = ctx.obj["snapshots"]

    try:
        service.delete_snapshot(month)
        click.echo(f"Deleted snapshot for {month}")
    except DomainError as e:
        handle_domain_error(ctx, e)


@snapshot_group.command("compare")
@click.pass_context
def compare(ctx):
    """Compare live net worth with last month's snapshot."""
    service = ctx.obj["snapshots"]

    try:
        change = service.get_mom_change()
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    click.echo(f"Current net worth: {change.current.format(show_code=True)}")
    if not change.has_previous_data:
        click.echo("No snapshot for last month to compare against.")
        return
    click.echo(f"Last month: {change.previous.format(show_code=True)}")
    click.echo(f"Change: {change.delta_abs.format(show_code=True)} ({change.delta_pct:.2f}%)")


def register_commands(cli):
    """Register snapshot commands with main CLI."""
    cli.add_command(snapshot_group, name="snapshot")
