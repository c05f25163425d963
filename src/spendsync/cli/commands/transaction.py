"""Transaction commands."""

import click

from spendsync.cli.error_handling import handle_domain_error, handle_storage_error, require_user
from spendsync.domain.entities import INFLOW
from spendsync.domain.errors import DomainError, StorageError


def echo_transactions(views) -> None:
    """Print transaction views, one per line."""
    if not views:
        click.echo("No transactions found.")
        return
    for view in views:
        txn = view.transaction
        sign = "+" if view.direction == INFLOW else " "
        pending = " (pending)" if txn.pending else ""
        click.echo(
            f"{txn.date.isoformat()} | {txn.transaction_id:20s} | {txn.display_name[:28]:28s} "
            f"| {view.category:14s} | {sign}{abs(txn.amount):>10,.2f} {txn.currency}{pending}"
        )


@click.group()
def transaction_group():
    """List and edit transactions."""
    pass


@transaction_group.command("list")
@click.option("--limit", type=int, default=None, help="Maximum number of transactions")
@click.option("--offset", type=int, default=0, show_default=True)
@click.pass_context
def list_transactions(ctx, limit: int | None, offset: int) -> None:
    """List transactions, newest first."""
    user_id = require_user(ctx)
    try:
        views = ctx.obj["ledger"].list_transactions(user_id, limit=limit, offset=offset)
    except DomainError as e:
        handle_domain_error(ctx, e)
    except StorageError as e:
        handle_storage_error(ctx, e)
    echo_transactions(views)


@transaction_group.command("edit")
@click.argument("transaction_id", metavar="TRANSACTION_ID")
@click.option("--name", help="New display name")
@click.option("--merchant", "merchant_name", help="New merchant name")
@click.option("--category", help="New category")
@click.option("--subcategory", help="New subcategory")
@click.pass_context
def edit_transaction(ctx, transaction_id: str, name, merchant_name, category, subcategory) -> None:
    """Edit the user-editable fields of a transaction.

    Amount, date and identity fields can not be changed.

    Examples:
        spendsync transaction edit tx_1 --name "Lunch" --category dining
    """
    user_id = require_user(ctx)
    patch = {
        key: value
        for key, value in {
            "name": name,
            "merchant_name": merchant_name,
            "category": category,
            "subcategory": subcategory,
        }.items()
        if value is not None
    }
    if not patch:
        click.echo("Nothing to update.")
        return

    try:
        changes = ctx.obj["ledger"].update_transaction_fields(user_id, transaction_id, patch)
    except DomainError as e:
        handle_domain_error(ctx, e)
    except StorageError as e:
        handle_storage_error(ctx, e)

    if changes:
        click.echo(f"Updated transaction {transaction_id}")
    else:
        click.echo(f"No transaction '{transaction_id}' to update.")


def register_commands(cli):
    """Register transaction commands with main CLI."""
    cli.add_command(transaction_group, name="transaction")
