"""Reconciliation of fetched transactions into a date-keyed local expense log.

The merge is a set union keyed by external id, partitioned by date:
replaying the same batch never adds rows.
"""

import json
import logging
import os
import tempfile
from abc import ABC, abstractmethod
from collections import defaultdict
from decimal import Decimal
from pathlib import Path
from typing import Any, Iterable, Optional

from spendsync.domain.entities import BatchResult, LocalExpense, TransactionView
from spendsync.domain.errors import StorageError, ValidationError, storage_failure

logger = logging.getLogger(__name__)


class ExpenseLog(ABC):
    """Date-keyed, append-only log of local expenses."""

    @abstractmethod
    def dates(self) -> list[str]:
        """Dates ("YYYY-MM-DD") that have at least one entry."""
        pass

    @abstractmethod
    def expenses_on(self, day: str) -> list[LocalExpense]:
        """Entries recorded for a date, in insertion order."""
        pass

    @abstractmethod
    def append(self, day: str, expense: LocalExpense) -> None:
        """Append one entry under a date."""
        pass

    def save(self) -> None:
        """Persist pending appends. No-op for volatile logs."""


class InMemoryExpenseLog(ExpenseLog):
    def __init__(self, entries: Optional[dict[str, list[LocalExpense]]] = None):
        self._entries: dict[str, list[LocalExpense]] = defaultdict(list)
        for day, expenses in (entries or {}).items():
            self._entries[day].extend(expenses)

    def dates(self) -> list[str]:
        return sorted(day for day, expenses in self._entries.items() if expenses)

    def expenses_on(self, day: str) -> list[LocalExpense]:
        return list(self._entries.get(day, []))

    def append(self, day: str, expense: LocalExpense) -> None:
        self._entries[day].append(expense)


def expense_to_dict(expense: LocalExpense) -> dict[str, Any]:
    return {
        "externalId": expense.external_id,
        "date": expense.date,
        "amount": str(expense.amount),
        "category": expense.category,
        "description": expense.description,
        "institution": expense.institution,
        "accountName": expense.account_name,
    }


def expense_from_dict(data: dict[str, Any]) -> LocalExpense:
    """Decode one stored entry.

    Raises:
        ValueError: If the entry is not an object or has no date or amount
    """
    if not isinstance(data, dict) or not data.get("date") or data.get("amount") is None:
        raise ValueError(f"Malformed expense log entry: {data!r}")
    return LocalExpense(
        external_id=data.get("externalId"),
        date=data["date"],
        amount=Decimal(str(data["amount"])),
        category=data.get("category") or "other",
        description=data.get("description") or "",
        institution=data.get("institution"),
        account_name=data.get("accountName"),
    )


class JsonExpenseLog(InMemoryExpenseLog):
    """Expense log persisted as a single JSON document keyed by date."""

    def __init__(self, path: str | os.PathLike):
        self.path = Path(path)
        entries: dict[str, list[LocalExpense]] = {}
        if self.path.exists():
            try:
                raw = json.loads(self.path.read_text(encoding="utf-8"))
                if not isinstance(raw, dict):
                    raise ValueError("expense log must be an object keyed by date")
                entries = {
                    day: [expense_from_dict(item) for item in items] for day, items in raw.items()
                }
            except (OSError, ValueError, ArithmeticError, TypeError) as e:
                raise StorageError(f"Could not read expense log {self.path}") from e
        super().__init__(entries)

    def save(self) -> None:
        """Write the whole log atomically."""
        document = {
            day: [expense_to_dict(e) for e in self.expenses_on(day)] for day in self.dates()
        }
        self.path.parent.mkdir(parents=True, exist_ok=True)
        try:
            fd, tmp_path = tempfile.mkstemp(dir=self.path.parent, suffix=".tmp")
        except OSError as e:
            raise StorageError(storage_failure(f"saving {self.path}")) from e
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(document, handle, indent=2)
            os.replace(tmp_path, self.path)
        except (OSError, TypeError, ValueError) as e:
            Path(tmp_path).unlink(missing_ok=True)
            raise StorageError(storage_failure(f"saving {self.path}")) from e


def expense_from_view(
    view: TransactionView,
    account_name: Optional[str] = None,
    institution: Optional[str] = None,
) -> LocalExpense:
    """Convert a ledger transaction into a local expense entry.

    The local log stores magnitudes; direction is not kept.
    """
    txn = view.transaction
    return LocalExpense(
        external_id=txn.transaction_id,
        date=txn.date.isoformat(),
        amount=abs(txn.amount),
        category=view.category,
        description=txn.display_name,
        institution=institution,
        account_name=account_name,
    )


class ReconciliationService:
    """Merges fetched batches into an ExpenseLog without duplicates."""

    def __init__(self, log: ExpenseLog):
        self.log = log

    def reconcile(self, incoming: Iterable[LocalExpense]) -> BatchResult:
        """Merge a batch into the log.

        Entries whose external id is already recorded for their date are
        skipped. Entries that cannot be stored are logged and reported in
        ``failed``; the rest of the batch still goes through.
        """
        result = BatchResult()
        by_date: dict[str, list[LocalExpense]] = defaultdict(list)
        for expense in incoming:
            if not expense.external_id or not expense.date:
                error = ValidationError("Fetched expense needs an external id and a date")
                logger.warning("Skipping expense %r: %s", expense, error)
                result.failed.append((expense, error))
                continue
            by_date[expense.date].append(expense)

        for day, group in by_date.items():
            seen = {e.external_id for e in self.log.expenses_on(day) if e.external_id}
            for expense in group:
                if expense.external_id in seen:
                    result.skipped.append(expense)
                    continue
                try:
                    self.log.append(day, expense)
                except (StorageError, ValidationError) as e:
                    logger.warning("Skipping expense %s on %s: %s", expense.external_id, day, e)
                    result.failed.append((expense, e))
                    continue
                seen.add(expense.external_id)
                result.succeeded.append(expense)

        if result.succeeded:
            self.log.save()
        return result
