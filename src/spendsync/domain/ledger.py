"""Ledger domain service: ingestion and maintenance of accounts and transactions."""

import logging
import threading
from collections import defaultdict
from typing import Any, Iterable, Mapping, Optional

from spendsync.database.base import Database
from spendsync.domain.entities import (
    Account as AccountEntity,
    BatchResult,
    Transaction as TransactionEntity,
    TransactionView,
    direction_of,
)
from spendsync.domain.category import normalize_category
from spendsync.domain.errors import DomainError, StorageError, ValidationError, missing_fields
from spendsync.domain.payloads import account_from_payload, transaction_from_payload
from spendsync.utils.amount_parser import parse_optional_amount

logger = logging.getLogger(__name__)

# User edits may only touch these keys; payload key -> column.
EDITABLE_TRANSACTION_FIELDS = {
    "name": "display_name",
    "merchant_name": "merchant_name",
    "category": "category",
    "subcategory": "subcategory",
}

DEFAULT_ACCOUNT_TRANSACTION_LIMIT = 5


def to_view(transaction: TransactionEntity) -> TransactionView:
    """Attach the display category and direction to a transaction."""
    return TransactionView(
        transaction=transaction,
        category=normalize_category(transaction.category),
        direction=direction_of(transaction.amount),
    )


class UserLocks:
    """Registry handing out one lock per user id."""

    def __init__(self):
        self._guard = threading.Lock()
        self._locks: dict[str, threading.Lock] = defaultdict(threading.Lock)

    def for_user(self, user_id: str) -> threading.Lock:
        with self._guard:
            return self._locks[user_id]


class LedgerService:
    """Service for ingesting and editing a user's ledger.

    Writes for one user are serialized; writes for different users proceed
    independently. Reads never take a lock.
    """

    def __init__(self, db: Database, locks: Optional[UserLocks] = None):
        """Initialize ledger service.

        Args:
            db: Database instance
            locks: Lock registry, shared between services writing the same ledger
        """
        self.db = db
        self.locks = locks if locks is not None else UserLocks()

    def upsert_account(
        self, user_id: str, account: Mapping[str, Any], access_credential: str
    ) -> int:
        """Insert or replace an account by account_id.

        Args:
            user_id: Owning user
            account: Raw account payload from the aggregator
            access_credential: Credential used to refresh this account; supplied
                by the caller, never read from the payload

        Returns:
            Rows affected (1 for insert or replace)

        Raises:
            ValidationError: If account_id, type or institution_name is missing
            StorageError: If the write fails
        """
        payload = account_from_payload(account)
        if not access_credential:
            raise ValidationError(missing_fields("Account", ["access_credential"]))
        with self.locks.for_user(user_id):
            return self.db.upsert_account(user_id, payload, access_credential)

    def rename_account(self, user_id: str, account_id: str, new_name: str) -> int:
        """Change an account's display name.

        Returns 0 when the account does not exist or belongs to someone else.
        """
        if not new_name or not new_name.strip():
            raise ValidationError("Account name cannot be empty")
        with self.locks.for_user(user_id):
            return self.db.update_account_name(user_id, account_id, new_name.strip())

    def refresh_account_balance(
        self, user_id: str, account_id: str, balance: Any, currency: Optional[str] = None
    ) -> int:
        """Record a freshly fetched balance. Returns rows affected (0 if not owned)."""
        try:
            amount = parse_optional_amount(balance)
        except ValueError as e:
            raise ValidationError(str(e)) from e
        with self.locks.for_user(user_id):
            return self.db.update_account_balance(user_id, account_id, amount, currency or "USD")

    def upsert_transaction(self, user_id: str, transaction: Mapping[str, Any]) -> int:
        """Insert or fully replace a transaction by transaction_id.

        A resent transaction overwrites the stored row, which is how a
        pending transaction settles.

        Raises:
            ValidationError: If required fields are missing or malformed
            NotFoundError: If the referenced account is not the user's
            StorageError: If the write fails
        """
        payload = transaction_from_payload(transaction)
        with self.locks.for_user(user_id):
            return self.db.upsert_transaction(user_id, payload)

    def upsert_transactions_batch(
        self, user_id: str, transactions: Iterable[Mapping[str, Any]]
    ) -> BatchResult:
        """Upsert each transaction independently.

        A failing item is logged and recorded in ``failed``; it never stops
        the remaining items.
        """
        result = BatchResult()
        for item in transactions:
            try:
                self.upsert_transaction(user_id, item)
            except (DomainError, StorageError) as e:
                tx_id = item.get("transaction_id") if isinstance(item, Mapping) else None
                logger.warning("Skipping transaction %s for user %s: %s", tx_id, user_id, e)
                result.failed.append((item, e))
            else:
                result.succeeded.append(item)
        if result.failed:
            logger.warning(
                "Batch for user %s: %d stored, %d skipped",
                user_id,
                result.succeeded_count,
                result.failed_count,
            )
        return result

    def update_transaction_fields(
        self, user_id: str, transaction_id: str, patch: Mapping[str, Any]
    ) -> int:
        """Apply a user edit restricted to name, merchant_name, category, subcategory.

        Other keys are dropped. An empty filtered patch issues no write.

        Returns:
            Rows affected (0 when nothing to change or not owned)
        """
        fields = {
            EDITABLE_TRANSACTION_FIELDS[key]: value
            for key, value in patch.items()
            if key in EDITABLE_TRANSACTION_FIELDS
        }
        if not fields:
            return 0
        if "display_name" in fields and not fields["display_name"]:
            raise ValidationError("Transaction name cannot be empty")
        with self.locks.for_user(user_id):
            return self.db.update_transaction_fields(user_id, transaction_id, fields)

    def wipe_user(self, user_id: str) -> dict[str, int]:
        """Delete all of a user's transactions, accounts and the user row.

        All or nothing: on failure nothing is deleted and the error propagates.
        """
        with self.locks.for_user(user_id):
            return self.db.delete_user_data(user_id)

    def get_account(self, user_id: str, account_id: str) -> Optional[AccountEntity]:
        return self.db.get_account(user_id, account_id)

    def list_accounts(self, user_id: str) -> list[AccountEntity]:
        """List the user's accounts, newest first."""
        return self.db.list_accounts(user_id)

    def get_transaction(self, user_id: str, transaction_id: str) -> Optional[TransactionEntity]:
        return self.db.get_transaction(user_id, transaction_id)

    def list_transactions(
        self, user_id: str, limit: Optional[int] = None, offset: int = 0
    ) -> list[TransactionView]:
        """List the user's transactions newest first, optionally paginated."""
        _check_page(limit, offset)
        return [to_view(t) for t in self.db.list_transactions(user_id, limit=limit, offset=offset)]

    def list_account_transactions(
        self, user_id: str, account_id: str, limit: int = DEFAULT_ACCOUNT_TRANSACTION_LIMIT
    ) -> list[TransactionView]:
        """Recent activity for one account."""
        _check_page(limit, 0)
        return [
            to_view(t)
            for t in self.db.list_transactions(user_id, account_id=account_id, limit=limit)
        ]


def _check_page(limit: Optional[int], offset: int) -> None:
    if limit is not None and limit < 1:
        raise ValidationError(f"limit must be positive, got {limit}")
    if offset < 0:
        raise ValidationError(f"offset cannot be negative, got {offset}")
