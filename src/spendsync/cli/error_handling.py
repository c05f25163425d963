"""CLI error handling helpers."""

import click

from spendsync.domain.errors import DomainError, StorageError


def handle_domain_error(ctx: click.Context, error: DomainError | ValueError) -> None:
    """Render a domain error and exit with failure."""
    click.echo(f"Error: {error}", err=True)
    ctx.exit(1)


def handle_storage_error(ctx: click.Context, error: StorageError) -> None:
    """Render a storage error, hiding internals unless debug mode is on."""
    message = "Error: a storage operation failed, please try again."
    if ctx.obj and ctx.obj.get("debug"):
        cause = error.__cause__
        message = f"Error: {error}" + (f" ({cause})" if cause is not None else "")
    click.echo(message, err=True)
    ctx.exit(1)


def require_user(ctx: click.Context) -> str:
    """Return the acting user id or exit if none was given."""
    user_id = ctx.obj.get("user_id")
    if not user_id:
        click.echo("Error: no user given. Use --user or set SPENDSYNC_USER.", err=True)
        ctx.exit(1)
    return user_id
