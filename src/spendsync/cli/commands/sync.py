"""Mirror ledger transactions into a local expense log."""

from pathlib import Path

import click

from spendsync.cli.commands.summary import echo_categories
from spendsync.cli.error_handling import handle_domain_error, handle_storage_error, require_user
from spendsync.domain.errors import DomainError, StorageError
from spendsync.domain.reconcile import JsonExpenseLog, ReconciliationService
from spendsync.domain.sync import DEFAULT_SYNC_DAYS, SyncService

DEFAULT_LOG_PATH = Path.home() / ".spendsync" / "expenses.json"


@click.command("sync")
@click.option(
    "--log",
    "log_path",
    type=click.Path(dir_okay=False),
    default=str(DEFAULT_LOG_PATH),
    show_default=True,
    envvar="SPENDSYNC_EXPENSE_LOG",
    help="Local expense log to merge into",
)
@click.option("--start-date", help="Window start (defaults to DAYS ago)")
@click.option("--days", type=int, default=DEFAULT_SYNC_DAYS, show_default=True)
@click.pass_context
def sync(ctx, log_path: str, start_date: str | None, days: int) -> None:
    """Merge a window of transactions into the local expense log.

    Transactions already in the log for their date are not added again.
    """
    user_id = require_user(ctx)
    try:
        service = SyncService(
            ctx.obj["aggregates"],
            ctx.obj["ledger"],
            ReconciliationService(JsonExpenseLog(log_path)),
        )
        result = service.sync_range(user_id, start_date, days)
    except DomainError as e:
        handle_domain_error(ctx, e)
    except StorageError as e:
        handle_storage_error(ctx, e)

    merge = result.merge
    click.echo(
        f"Added {merge.succeeded_count}, already present {len(merge.skipped)}, "
        f"failed {merge.failed_count}"
    )
    if result.categories:
        echo_categories(result.categories)


def register_commands(cli):
    """Register sync command with main CLI."""
    cli.add_command(sync, name="sync")
