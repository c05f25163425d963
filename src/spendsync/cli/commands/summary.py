"""Summary commands: category breakdown, monthly rollup, date ranges, stats."""

import click

from spendsync.cli.commands.account import format_money
from spendsync.cli.commands.transaction import echo_transactions
from spendsync.cli.error_handling import handle_domain_error, handle_storage_error, require_user
from spendsync.domain.errors import DomainError, StorageError
from spendsync.utils.date_parser import parse_date


def echo_categories(categories) -> None:
    if not categories:
        click.echo("No spending found.")
        return
    grand_total = sum(c.total for c in categories)
    for c in categories:
        share = c.total / grand_total * 100 if grand_total else 0
        line = (
            f"{c.category:16s} {c.count:5d}  {format_money(c.total):>12s}  "
            f"avg {format_money(c.average):>10s}  {share:5.1f}%"
        )
        if c.max_amount is not None:
            line += f"  max {format_money(c.max_amount)}  min {format_money(c.min_amount)}"
        click.echo(line)


@click.group()
def summary_group():
    """Spending summaries."""
    pass


@summary_group.command("categories")
@click.option("--start-date", help="Start date (inclusive)")
@click.option("--end-date", help="End date (inclusive)")
@click.pass_context
def categories(ctx, start_date: str | None, end_date: str | None) -> None:
    """Spending per category, largest first."""
    user_id = require_user(ctx)
    try:
        start = parse_date(start_date) if start_date else None
        end = parse_date(end_date) if end_date else None
        rows = ctx.obj["aggregates"].category_breakdown(user_id, start, end)
    except (DomainError, ValueError) as e:
        handle_domain_error(ctx, e)
    except StorageError as e:
        handle_storage_error(ctx, e)
    echo_categories(rows)


@summary_group.command("monthly")
@click.option("--months", type=int, default=12, show_default=True)
@click.pass_context
def monthly(ctx, months: int) -> None:
    """Month-by-month spending and income, newest first."""
    user_id = require_user(ctx)
    try:
        summaries = ctx.obj["aggregates"].monthly_summary(user_id, months)
    except DomainError as e:
        handle_domain_error(ctx, e)
    except StorageError as e:
        handle_storage_error(ctx, e)

    if not summaries:
        click.echo("No transactions in this period.")
        return
    for month in summaries:
        click.echo(
            f"{month.month}  spent {format_money(month.total_spent):>12s}  "
            f"income {format_money(month.total_income):>12s}  ({month.transaction_count} transactions)"
        )
        for c in month.categories:
            click.echo(f"    {c.category:16s} {format_money(c.amount):>12s}  ({c.count})")


@summary_group.command("range")
@click.argument("start_date", metavar="START_DATE")
@click.option("--days", type=int, default=30, show_default=True)
@click.option("--categories/--no-categories", "include_categories", default=False)
@click.option("--limit", type=int, default=None)
@click.pass_context
def date_range(ctx, start_date: str, days: int, include_categories: bool, limit: int | None) -> None:
    """Transactions from START_DATE through START_DATE + DAYS."""
    user_id = require_user(ctx)
    try:
        summary = ctx.obj["aggregates"].range_summary(
            user_id, start_date, days, include_categories=include_categories, limit=limit
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
    except StorageError as e:
        handle_storage_error(ctx, e)

    click.echo(f"{summary.start_date.isoformat()} .. {summary.end_date.isoformat()}")
    echo_transactions(summary.transactions)
    if summary.categories is not None:
        click.echo("")
        echo_categories(summary.categories)


@click.command("stats")
@click.pass_context
def stats(ctx) -> None:
    """Show account and transaction totals."""
    user_id = require_user(ctx)
    try:
        row = ctx.obj["aggregates"].user_stats(user_id)
    except StorageError as e:
        handle_storage_error(ctx, e)

    last = row.last_transaction_date.isoformat() if row.last_transaction_date else "-"
    click.echo(f"Accounts:         {row.account_count}")
    click.echo(f"Transactions:     {row.transaction_count}")
    click.echo(f"Total spent:      {format_money(row.total_spent)}")
    click.echo(f"Total income:     {format_money(row.total_income)}")
    click.echo(f"Last transaction: {last}")


def register_commands(cli):
    """Register summary commands with main CLI."""
    cli.add_command(summary_group, name="summary")
    cli.add_command(stats, name="stats")
