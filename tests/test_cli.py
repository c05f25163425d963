"""Tests for CLI commands."""

import json

import pytest

from spendsync.cli.main import cli
from spendsync.domain.errors import StorageError
from spendsync.domain.summary import AggregateService
from conftest import USER


@pytest.fixture
def run(cli_runner, temp_db):
    """Invoke the CLI against the temporary database as USER."""

    def _run(*args, user=USER, **kwargs):
        base = ["--db-path", temp_db.database_path]
        if user:
            base += ["--user", user]
        return cli_runner.invoke(cli, [*base, *args], **kwargs)

    return _run


@pytest.fixture
def imported(run, tmp_path, make_account, make_txn):
    """Accounts and transactions imported through the CLI."""
    accounts_file = tmp_path / "accounts.json"
    accounts_file.write_text(json.dumps({"accounts": [make_account()]}))
    transactions_file = tmp_path / "transactions.json"
    transactions_file.write_text(
        json.dumps(
            [
                make_txn("tx_1", 12.5, "2024-01-10"),
                make_txn("tx_2", -100, "2024-01-11", category="PAYROLL"),
            ]
        )
    )
    assert run("import", "accounts", str(accounts_file), "--credential", "cred").exit_code == 0
    assert run("import", "transactions", str(transactions_file)).exit_code == 0


def test_help_does_not_need_a_user(cli_runner):
    result = cli_runner.invoke(cli, ["--help"])
    assert result.exit_code == 0
    assert "summary" in result.output


def test_missing_user(run):
    result = run("account", "list", user=None)
    assert result.exit_code == 1
    assert "no user given" in result.output


def test_import_reports_skipped_records(run, tmp_path, make_account, make_txn):
    accounts_file = tmp_path / "accounts.json"
    accounts_file.write_text(json.dumps([make_account()]))
    run("import", "accounts", str(accounts_file), "--credential", "cred")

    transactions_file = tmp_path / "transactions.json"
    transactions_file.write_text(
        json.dumps([make_txn("tx_1", 5, "2024-01-10"), {"transaction_id": "tx_bad"}])
    )
    result = run("import", "transactions", str(transactions_file))

    assert result.exit_code == 0
    assert "Stored 1 transactions" in result.output
    assert "tx_bad" in result.output


def test_import_invalid_account(run, tmp_path):
    accounts_file = tmp_path / "accounts.json"
    accounts_file.write_text(json.dumps([{"account_id": "acc_1"}]))

    result = run("import", "accounts", str(accounts_file), "--credential", "cred")

    assert result.exit_code == 1
    assert "Error:" in result.output


def test_account_list_and_rename(run, imported):
    result = run("account", "list")
    assert "acc_checking" in result.output
    assert "****0000" in result.output

    result = run("account", "rename", "acc_checking", "Bills")
    assert result.exit_code == 0
    assert "Bills" in run("account", "list").output


def test_transaction_list_and_edit(run, imported):
    result = run("transaction", "list")
    assert result.exit_code == 0
    assert "tx_2" in result.output
    assert "income" in result.output

    result = run("transaction", "edit", "tx_1", "--name", "Lunch")
    assert "Updated transaction tx_1" in result.output
    assert "Lunch" in run("transaction", "list").output


def test_transaction_list_empty(run):
    result = run("transaction", "list")
    assert "No transactions found." in result.output


def test_summary_commands(run, imported):
    result = run("summary", "categories")
    assert result.exit_code == 0
    assert "dining" in result.output

    result = run("summary", "range", "2024-01-10", "--days", "0")
    assert "tx_1" in result.output
    assert "tx_2" not in result.output

    result = run("stats")
    assert "Transactions:     2" in result.output


def test_summary_range_bad_date(run):
    result = run("summary", "range", "gibberish")
    assert result.exit_code == 1
    assert "Error:" in result.output


def test_balance_commands(run):
    run("balance", "record", "acc_checking", "2024-01-31", "100")
    run("balance", "record", "acc_checking", "2024-02-10", "150")

    result = run("balance", "history", "acc_checking", "--month", "2024-02")

    assert result.exit_code == 0
    assert "+50.00%" in result.output


def test_sync_writes_local_log(run, imported, tmp_path):
    log_path = tmp_path / "expenses.json"

    result = run("sync", "--log", str(log_path), "--start-date", "2024-01-01", "--days", "30")

    assert result.exit_code == 0
    assert "Added 2" in result.output
    assert set(json.loads(log_path.read_text())) == {"2024-01-10", "2024-01-11"}

    again = run("sync", "--log", str(log_path), "--start-date", "2024-01-01", "--days", "30")
    assert "Added 0, already present 2" in again.output


def test_user_wipe(run, imported):
    result = run("user", "wipe", "--yes")
    assert "Deleted 2 transactions and 1 accounts" in result.output
    assert "No accounts found." in run("account", "list").output


def test_user_wipe_can_be_cancelled(run, imported):
    result = run("user", "wipe", input="n\n")
    assert "Wipe cancelled." in result.output


def test_storage_error_on_read_hides_detail(run, monkeypatch):
    def broken(self, user_id):
        raise StorageError("Storage failure during get_user_stats") from OSError("disk I/O error")

    monkeypatch.setattr(AggregateService, "user_stats", broken)

    result = run("stats")

    assert result.exit_code == 1
    assert "a storage operation failed" in result.output
    assert "disk I/O error" not in result.output


def test_storage_error_detail_in_debug_mode(run, monkeypatch):
    def broken(self, user_id):
        raise StorageError("Storage failure during get_user_stats") from OSError("disk I/O error")

    monkeypatch.setattr(AggregateService, "user_stats", broken)

    result = run("--debug", "stats")

    assert result.exit_code == 1
    assert "disk I/O error" in result.output
