"""Import aggregator payloads into the ledger."""

import json

import click

from spendsync.cli.error_handling import handle_domain_error, handle_storage_error, require_user
from spendsync.domain.errors import DomainError, StorageError


def _load_records(path: str, key: str) -> list:
    """Read a JSON file holding either a list or an object with ``key``."""
    with open(path, encoding="utf-8") as handle:
        data = json.load(handle)
    if isinstance(data, dict):
        data = data.get(key, [])
    if not isinstance(data, list):
        raise ValueError(f"Expected a list of {key} in {path}")
    return data


@click.group()
def import_group():
    """Import aggregator data from JSON files."""
    pass


@import_group.command("accounts")
@click.argument("file_path", type=click.Path(exists=True, dir_okay=False))
@click.option("--credential", required=True, help="Access credential for these accounts")
@click.option("--institution", help="Institution name for payloads that omit it")
@click.pass_context
def import_accounts(ctx, file_path: str, credential: str, institution: str | None) -> None:
    """Upsert accounts from an aggregator accounts payload."""
    user_id = require_user(ctx)
    try:
        records = _load_records(file_path, "accounts")
    except ValueError as e:
        handle_domain_error(ctx, e)

    stored = 0
    for record in records:
        if institution and isinstance(record, dict):
            record = {"institution_name": institution, **record}
        try:
            stored += ctx.obj["ledger"].upsert_account(user_id, record, credential)
        except DomainError as e:
            handle_domain_error(ctx, e)
        except StorageError as e:
            handle_storage_error(ctx, e)
    click.echo(f"Stored {stored} account{'s' if stored != 1 else ''}")


@import_group.command("transactions")
@click.argument("file_path", type=click.Path(exists=True, dir_okay=False))
@click.pass_context
def import_transactions(ctx, file_path: str) -> None:
    """Upsert transactions; bad records are reported and skipped."""
    user_id = require_user(ctx)
    try:
        records = _load_records(file_path, "transactions")
    except ValueError as e:
        handle_domain_error(ctx, e)

    result = ctx.obj["ledger"].upsert_transactions_batch(user_id, records)
    click.echo(f"Stored {result.succeeded_count} transactions")
    if result.failed:
        click.echo(f"Skipped {result.failed_count}:", err=True)
        for item, error in result.failed:
            tx_id = item.get("transaction_id") if isinstance(item, dict) else None
            click.echo(f"  {tx_id or '?'}: {error}", err=True)


def register_commands(cli):
    """Register import commands with main CLI."""
    cli.add_command(import_group, name="import")
