"""Shared pytest fixtures for spendsync tests."""

import tempfile
import os
from datetime import date
import pytest

from spendsync.database.factories import create_sqlite_database
from spendsync.domain.balance import BalanceHistoryService
from spendsync.domain.ledger import LedgerService
from spendsync.domain.summary import AggregateService

USER = "user_alice"
OTHER_USER = "user_bob"
TODAY = date(2024, 3, 15)


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    # Create a temporary file for the database
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    # Create database
    db = create_sqlite_database(database_path=db_path)
    # Store the path for tests that need it
    db.database_path = db_path
    db.connect()
    db.initialize_schema()

    yield db

    # Cleanup
    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def ledger(temp_db):
    """Create a LedgerService with a temporary database."""
    return LedgerService(temp_db)


@pytest.fixture
def aggregates(temp_db):
    """Create an AggregateService whose clock reads TODAY."""
    return AggregateService(temp_db, today=lambda: TODAY)


@pytest.fixture
def balances(temp_db):
    """Create a BalanceHistoryService with a temporary database."""
    return BalanceHistoryService(temp_db)


@pytest.fixture
def make_account():
    """Factory for aggregator account payloads."""

    def _make(account_id="acc_checking", **overrides):
        payload = {
            "account_id": account_id,
            "name": "Plaid Checking",
            "type": "depository",
            "subtype": "checking",
            "institution_name": "First Platypus Bank",
            "mask": "0000",
            "balances": {"current": 110.0, "iso_currency_code": "USD"},
        }
        payload.update(overrides)
        return payload

    return _make


@pytest.fixture
def make_txn():
    """Factory for aggregator transaction payloads."""

    def _make(transaction_id, amount, tx_date, category="FOOD_AND_DRINK", **overrides):
        payload = {
            "transaction_id": transaction_id,
            "account_id": "acc_checking",
            "amount": amount,
            "iso_currency_code": "USD",
            "name": f"Purchase {transaction_id}",
            "merchant_name": "Corner Shop",
            "date": tx_date,
            "personal_finance_category": {"primary": category, "detailed": f"{category}_OTHER"}
            if category
            else None,
            "pending": False,
            "location": {"city": "Austin", "region": "TX", "country": "US"},
        }
        payload.update(overrides)
        return payload

    return _make


@pytest.fixture
def linked_account(ledger, make_account):
    """Link the default checking account for USER."""
    ledger.upsert_account(USER, make_account(), access_credential="access-sandbox-123")
    return ledger.get_account(USER, "acc_checking")


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()
