"""User-level commands."""

import click

from spendsync.cli.error_handling import handle_storage_error, require_user
from spendsync.domain.errors import StorageError


@click.group()
def user_group():
    """Manage the acting user's data."""
    pass


@user_group.command("wipe")
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def wipe(ctx, yes: bool) -> None:
    """Delete every account and transaction of the user.

    Either everything is deleted or nothing is.
    """
    user_id = require_user(ctx)
    if not yes and not click.confirm(f"Delete all data for user '{user_id}'?"):
        click.echo("Wipe cancelled.")
        return

    try:
        counts = ctx.obj["ledger"].wipe_user(user_id)
    except StorageError as e:
        handle_storage_error(ctx, e)
    click.echo(
        f"Deleted {counts['transactions']} transactions and {counts['accounts']} accounts"
    )


def register_commands(cli):
    """Register user commands with main CLI."""
    cli.add_command(user_group, name="user")
