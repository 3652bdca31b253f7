"""Initialize the default chart of accounts."""

import click


@click.command("init")
@click.pass_context
def init_ledger(ctx):
    """Create the default chart of accounts.

    Accounts that already exist are left untouched, so running this twice
    is safe.
    """
    engine = ctx.obj["engine"]

    created = engine.initialize_default_accounts()
    if not created:
        click.echo("Default accounts already present.")
        return

    click.echo(f"Created {len(created)} account(s):")
    for acc in created:
        click.echo(f"  {acc.code:<6} {acc.name:<28} ({acc.nature.value})")


def register_commands(cli):
    """Register init command with main CLI."""
    cli.add_command(init_ledger)
