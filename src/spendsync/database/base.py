"""Abstract database interface."""

from abc import ABC, abstractmethod
from typing import Optional, Any
from datetime import date
from decimal import Decimal

# Import entities directly to avoid circular import through domain/__init__.py
from spendsync.domain.entities import (
    Account,
    Transaction,
    BalanceSnapshot,
    UserStats,
)
from spendsync.domain.payloads import AccountPayload, TransactionPayload


class Database(ABC):
    """Abstract database interface for spendsync.

    Every method scoped by ``user_id`` only ever sees that user's rows.
    Storage failures surface as StorageError.
    """

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    # User operations
    @abstractmethod
    def ensure_user(self, user_id: str) -> int:
        """Insert the user if absent. Returns rows inserted (0 or 1)."""
        pass

    @abstractmethod
    def user_exists(self, user_id: str) -> bool:
        """Check whether a user row exists."""
        pass

    @abstractmethod
    def delete_user_data(self, user_id: str) -> dict[str, int]:
        """Delete transactions, accounts and the user row atomically.

        Returns the number of rows deleted per table.
        """
        pass

    # Account operations
    @abstractmethod
    def upsert_account(
        self, user_id: str, payload: AccountPayload, access_credential: str
    ) -> int:
        """Insert or replace an account by account_id. Returns rows affected."""
        pass

    @abstractmethod
    def get_account(self, user_id: str, account_id: str) -> Optional[Account]:
        """Get an account owned by the user."""
        pass

    @abstractmethod
    def list_accounts(self, user_id: str) -> list[Account]:
        """List the user's accounts, newest first."""
        pass

    @abstractmethod
    def update_account_name(self, user_id: str, account_id: str, name: str) -> int:
        """Update display name. Returns rows affected."""
        pass

    @abstractmethod
    def update_account_balance(
        self, user_id: str, account_id: str, balance: Optional[Decimal], currency: str
    ) -> int:
        """Update current balance and currency. Returns rows affected."""
        pass

    # Transaction operations
    @abstractmethod
    def upsert_transaction(self, user_id: str, payload: TransactionPayload) -> int:
        """Insert or fully replace a transaction. Returns rows affected."""
        pass

    @abstractmethod
    def get_transaction(self, user_id: str, transaction_id: str) -> Optional[Transaction]:
        """Get a transaction owned by the user."""
        pass

    @abstractmethod
    def update_transaction_fields(
        self, user_id: str, transaction_id: str, fields: dict[str, Any]
    ) -> int:
        """Update already-filtered columns of a transaction. Returns rows affected."""
        pass

    @abstractmethod
    def list_transactions(
        self,
        user_id: str,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        account_id: Optional[str] = None,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> list[Transaction]:
        """List transactions newest first by date, then creation time."""
        pass

    # Aggregate queries
    @abstractmethod
    def get_category_totals(
        self,
        user_id: str,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> list[dict[str, Any]]:
        """Group outflows by raw category.

        Returns dicts with category, count, total, max_amount and min_amount.
        Transactions without a category are left out.
        """
        pass

    @abstractmethod
    def get_monthly_category_totals(self, user_id: str, since: date) -> list[dict[str, Any]]:
        """Group transactions on or after ``since`` by (month, raw category).

        Returns dicts with month ("YYYY-MM"), category, transaction_count,
        total_spent, total_income and expense_count.
        """
        pass

    @abstractmethod
    def get_user_stats(self, user_id: str) -> UserStats:
        """Get the single-row summary of the user's transactions."""
        pass

    # Balance snapshot operations
    @abstractmethod
    def upsert_balance_snapshot(self, account_id: str, snapshot_date: date, amount: Decimal) -> int:
        """Insert or overwrite the snapshot for (account_id, date)."""
        pass

    @abstractmethod
    def list_balance_snapshots(self, account_id: str) -> list[BalanceSnapshot]:
        """List an account's snapshots, oldest first."""
        pass

    @abstractmethod
    def delete_balance_snapshot(self, account_id: str, snapshot_date: date) -> int:
        """Delete one snapshot. Returns rows affected."""
        pass
