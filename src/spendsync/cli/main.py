"""Main CLI entry point."""

import logging

import click

from spendsync.config import get_settings
from spendsync.database.factories import create_sqlite_database
from spendsync.domain.balance import BalanceHistoryService
from spendsync.domain.cache import CachedAggregateService
from spendsync.domain.ledger import LedgerService
from spendsync.domain.summary import AggregateService

# Import and register all commands at module level
from spendsync.cli.commands import (
    account,
    balance,
    import_cmd,
    summary,
    sync,
    transaction,
    user,
)


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides SPENDSYNC_DB_PATH environment variable)",
    envvar="SPENDSYNC_DB_PATH",
)
@click.option("--user", "user_id", help="Acting user id", envvar="SPENDSYNC_USER")
@click.option("--debug", is_flag=True, help="Show storage error details")
@click.pass_context
def cli(ctx, db_path: str | None, user_id: str | None, debug: bool):
    """spendsync - ledger ingestion and spending summaries.

    Ingests aggregator account and transaction payloads into a per-user
    ledger and reports category, monthly and date-range summaries.
    """
    ctx.ensure_object(dict)
    settings = get_settings()
    logging.basicConfig(level=getattr(logging, settings.log_level, logging.WARNING))

    ctx.obj["user_id"] = user_id
    ctx.obj["debug"] = debug or settings.debug

    # Initialize database connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        db = create_sqlite_database(database_path=db_path)
        db.connect()
        db.initialize_schema()
        ctx.call_on_close(db.disconnect)

        ctx.obj["db"] = db
        ctx.obj["ledger"] = LedgerService(db)
        ctx.obj["aggregates"] = CachedAggregateService(
            AggregateService(db),
            range_ttl=settings.range_cache_ttl,
            monthly_ttl=settings.monthly_cache_ttl,
        )
        ctx.obj["balances"] = BalanceHistoryService(db)


# Register all commands
account.register_commands(cli)
balance.register_commands(cli)
import_cmd.register_commands(cli)
summary.register_commands(cli)
sync.register_commands(cli)
transaction.register_commands(cli)
user.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
