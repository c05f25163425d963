"""Account commands."""

import click

from spendsync.cli.error_handling import handle_domain_error, handle_storage_error, require_user
from spendsync.domain.errors import DomainError, StorageError


def format_money(amount, currency: str = "") -> str:
    if amount is None:
        return "-"
    text = f"{amount:,.2f}"
    return f"{text} {currency}".strip()


@click.group()
def account_group():
    """Manage linked accounts."""
    pass


@account_group.command("list")
@click.pass_context
def list_accounts(ctx):
    """List the user's accounts, newest first."""
    user_id = require_user(ctx)
    try:
        accounts = ctx.obj["ledger"].list_accounts(user_id)
    except StorageError as e:
        handle_storage_error(ctx, e)

    if not accounts:
        click.echo("No accounts found.")
        return

    click.echo("\nAccounts:")
    click.echo("-" * 80)
    for acc in accounts:
        mask = f"****{acc.mask}" if acc.mask else ""
        click.echo(
            f"{acc.account_id:20s} | {acc.display_name:24s} | {acc.institution_name:16s} "
            f"| {mask:8s} | {format_money(acc.current_balance, acc.currency)}"
        )


@account_group.command("rename")
@click.argument("account_id", metavar="ACCOUNT_ID")
@click.argument("new_name", metavar="NEW_NAME")
@click.pass_context
def rename_account(ctx, account_id: str, new_name: str) -> None:
    """Rename an account.

    Examples:
        spendsync account rename acc_123 "Joint Checking"
    """
    user_id = require_user(ctx)
    try:
        changes = ctx.obj["ledger"].rename_account(user_id, account_id, new_name)
    except DomainError as e:
        handle_domain_error(ctx, e)
    except StorageError as e:
        handle_storage_error(ctx, e)

    if changes:
        click.echo(f"Renamed account to '{new_name.strip()}'")
    else:
        click.echo(f"No account '{account_id}' to rename.")


@account_group.command("refresh-balance")
@click.argument("account_id", metavar="ACCOUNT_ID")
@click.argument("balance", metavar="BALANCE")
@click.option("--currency", default="USD", show_default=True, help="ISO currency code")
@click.pass_context
def refresh_balance(ctx, account_id: str, balance: str, currency: str) -> None:
    """Record a freshly fetched balance for an account."""
    user_id = require_user(ctx)
    try:
        changes = ctx.obj["ledger"].refresh_account_balance(
            user_id, account_id, balance, currency.upper()
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
    except StorageError as e:
        handle_storage_error(ctx, e)

    if changes:
        click.echo(f"Updated balance of '{account_id}'")
    else:
        click.echo(f"No account '{account_id}' to update.")


@account_group.command("activity")
@click.argument("account_id", metavar="ACCOUNT_ID")
@click.option("--limit", type=int, default=5, show_default=True)
@click.pass_context
def account_activity(ctx, account_id: str, limit: int) -> None:
    """Show recent transactions of one account."""
    from spendsync.cli.commands.transaction import echo_transactions

    user_id = require_user(ctx)
    try:
        views = ctx.obj["ledger"].list_account_transactions(user_id, account_id, limit)
    except DomainError as e:
        handle_domain_error(ctx, e)
    except StorageError as e:
        handle_storage_error(ctx, e)
    echo_transactions(views)


def register_commands(cli):
    """Register account commands with main CLI."""
    cli.add_command(account_group, name="account")
