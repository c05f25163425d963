"""Balance history commands."""

from datetime import date

import click

from spendsync.cli.commands.account import format_money
from spendsync.cli.error_handling import handle_domain_error, handle_storage_error
from spendsync.domain.errors import DomainError, StorageError
from spendsync.utils.date_parser import month_key


def format_percent(percent) -> str:
    if percent is None:
        return "--"
    return f"{'+' if percent >= 0 else ''}{percent:.2f}%"


@click.group()
def balance_group():
    """Track account balance snapshots."""
    pass


@balance_group.command("record")
@click.argument("account_id", metavar="ACCOUNT_ID")
@click.argument("snapshot_date", metavar="DATE")
@click.argument("amount", metavar="AMOUNT")
@click.pass_context
def record(ctx, account_id: str, snapshot_date: str, amount: str) -> None:
    """Record a balance; a second record for the same date replaces the first."""
    try:
        ctx.obj["balances"].record_snapshot(account_id, snapshot_date, amount)
    except DomainError as e:
        handle_domain_error(ctx, e)
    except StorageError as e:
        handle_storage_error(ctx, e)
    click.echo(f"Recorded balance for {account_id}")


@balance_group.command("delete")
@click.argument("account_id", metavar="ACCOUNT_ID")
@click.argument("snapshot_date", metavar="DATE")
@click.pass_context
def delete(ctx, account_id: str, snapshot_date: str) -> None:
    """Delete the balance recorded on a date."""
    try:
        changes = ctx.obj["balances"].delete_snapshot(account_id, snapshot_date)
    except DomainError as e:
        handle_domain_error(ctx, e)
    except StorageError as e:
        handle_storage_error(ctx, e)
    click.echo("Deleted balance record" if changes else "No balance recorded on that date.")


@balance_group.command("history")
@click.argument("account_id", metavar="ACCOUNT_ID")
@click.option("--month", help="Month as YYYY-MM (defaults to the current month)")
@click.pass_context
def history(ctx, account_id: str, month: str | None) -> None:
    """Show a month of balances with percent changes."""
    service = ctx.obj["balances"]
    month = month or month_key(date.today())
    try:
        entries = service.month_history(account_id, month)
        month_change = service.month_over_month(account_id, month)
        all_time = service.all_time_change(account_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    except StorageError as e:
        handle_storage_error(ctx, e)

    if not entries:
        click.echo(f"No balance records for {month}")
        return
    for entry in entries:
        click.echo(
            f"{entry.date.isoformat()}  {format_money(entry.amount):>14s}  {format_percent(entry.percent)}"
        )
    click.echo(f"Month over month: {format_percent(month_change)}")
    click.echo(f"All time:         {format_percent(all_time)}")


def register_commands(cli):
    """Register balance commands with main CLI."""
    cli.add_command(balance_group, name="balance")
