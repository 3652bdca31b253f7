"""Account management commands."""

import click
from ledgerbook.cli.account_resolution import resolve_account_or_exit
from ledgerbook.cli.error_handling import handle_domain_error
from ledgerbook.domain.entities import AccountNature
from ledgerbook.domain.errors import DomainError

NATURE_CHOICES = [n.value for n in AccountNature]


@click.group()
def account_group():
    """Manage ledger accounts."""
    pass


@account_group.command("create")
@click.argument("code", metavar="CODE")
@click.argument("name", metavar="ACCOUNT_NAME")
@click.option(
    "--nature",
    required=True,
    type=click.Choice(NATURE_CHOICES, case_sensitive=False),
    help="Account nature",
)
@click.option("--id", "account_id", help="Stable account id (generated if not provided)")
@click.option("--parent", help="Parent account id, code or name")
@click.option("--description", help="Account description")
@click.pass_context
def create_account(
    ctx,
    code: str,
    name: str,
    nature: str,
    account_id: str | None,
    parent: str | None,
    description: str | None,
):
    """Create a new account.

    Examples:
        ledgerbook account create 1004 "Brokerage Cash" --nature asset
        ledgerbook account create 5008 "Education" --nature expense --id education
    """
    engine = ctx.obj["engine"]

    parent_id = None
    if parent is not None:
        parent_id = resolve_account_or_exit(ctx, engine, parent)

    try:
        acc = engine.create_account(
            code,
            name,
            AccountNature(nature.lower()),
            account_id=account_id,
            parent_id=parent_id,
            description=description,
        )
        click.echo(f"Created account '{acc.name}' (ID: {acc.id})")
    except DomainError as e:
        handle_domain_error(ctx, e)


@account_group.command("list")
@click.option(
    "--nature",
    type=click.Choice(NATURE_CHOICES, case_sensitive=False),
    help="Only show accounts of this nature",
)
@click.option("--all", "show_all", is_flag=True, help="Include inactive accounts")
@click.pass_context
def list_accounts(ctx, nature: str | None, show_all: bool):
    """List accounts ordered by code."""
    engine = ctx.obj["engine"]

    accounts = engine.list_accounts(include_inactive=show_all)
    if nature is not None:
        accounts = [a for a in accounts if a.nature == AccountNature(nature.lower())]
    if not accounts:
        click.echo("No accounts found.")
        return

    click.echo("\nAccounts:")
    click.echo("-" * 80)
    for acc in accounts:
        status = "" if acc.is_active else " (inactive)"
        click.echo(
            f"{acc.code:<10} | {acc.name:<28} | {acc.nature.value:<9} | ID: {acc.id}{status}"
        )


@account_group.command("rename")
@click.argument("account", metavar="ACCOUNT")
@click.argument("new_name", metavar="NEW_NAME")
@click.option("--code", help="New account code (optional)")
@click.pass_context
def rename_account(ctx, account: str, new_name: str, code: str | None) -> None:
    """Rename an account.

    ACCOUNT can be an account id, code or name.

    Examples:
        ledgerbook account rename checking "Main Checking"
        ledgerbook account rename 1003 "Emergency Fund" --code 1010
    """
    engine = ctx.obj["engine"]
    account_id = resolve_account_or_exit(ctx, engine, account)

    try:
        engine.update_account(account_id, name=new_name, code=code)
        click.echo(f"Renamed account to '{new_name}'")
        if code is not None:
            click.echo(f"Code updated to '{code}'")
    except DomainError as e:
        handle_domain_error(ctx, e)


@account_group.command("deactivate")
@click.argument("account", metavar="ACCOUNT")
@click.pass_context
def deactivate_account(ctx, account: str) -> None:
    """Deactivate an account so it no longer accepts new postings."""
    engine = ctx.obj["engine"]
    account_id = resolve_account_or_exit(ctx, engine, account)

    acc = engine.deactivate_account(account_id)
    click.echo(f"Deactivated account '{acc.name}'")


@account_group.command("activate")
@click.argument("account", metavar="ACCOUNT")
@click.pass_context
def activate_account(ctx, account: str) -> None:
    """Reactivate a previously deactivated account."""
    engine = ctx.obj["engine"]
    account_id = resolve_account_or_exit(ctx, engine, account)

    acc = engine.activate_account(account_id)
    click.echo(f"Activated account '{acc.name}'")


@account_group.command("delete")
@click.argument("account", metavar="ACCOUNT")
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete_account(ctx, account: str, yes: bool) -> None:
    """Delete an account.

    ACCOUNT can be an account id, code or name.

    The account can only be deleted if no posting references it.
    Deactivate it instead to keep its history.

    Examples:
        ledgerbook account delete education
    """
    engine = ctx.obj["engine"]
    account_id = resolve_account_or_exit(ctx, engine, account)
    acc = engine.require_account(account_id)

    posting_count = engine.count_postings(account_id)
    if posting_count > 0:
        click.echo(
            f"Error: Cannot delete account '{acc.name}': it has "
            f"{posting_count} posting{'s' if posting_count != 1 else ''}.",
            err=True,
        )
        click.echo("Deactivate it instead to keep its history.", err=True)
        ctx.exit(1)

    if not yes and not click.confirm(
        f"Are you sure you want to delete account '{acc.name}' (ID: {account_id})?"
    ):
        click.echo("Deletion cancelled.")
        return

    try:
        engine.delete_account(account_id)
        click.echo(f"Deleted account '{acc.name}'")
    except DomainError as e:
        handle_domain_error(ctx, e)


def register_commands(cli):
    """Register account commands with main CLI."""
    cli.add_command(account_group, name="account")
