"""Domain model entities for spendsync.

These are pure data classes representing ledger concepts, independent of
database schema. Services and the CLI only ever see these types; ORM rows
stay inside the database package.
"""

from dataclasses import dataclass, field
from datetime import datetime, date
from decimal import Decimal
from typing import Any, Optional

OUTFLOW = "outflow"
INFLOW = "inflow"
NO_DIRECTION = "none"


def direction_of(amount: Decimal) -> str:
    """Return the direction implied by an amount's sign.

    Positive amounts are outflows (expenses), negative amounts are inflows
    (income).
    """
    if amount > 0:
        return OUTFLOW
    if amount < 0:
        return INFLOW
    return NO_DIRECTION


@dataclass(frozen=True)
class Account:
    """Linked financial account. The access credential never leaves storage."""

    account_id: str
    user_id: str
    display_name: str
    original_name: str
    type: str
    subtype: Optional[str]
    institution_name: str
    mask: Optional[str]
    current_balance: Optional[Decimal]
    currency: str
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class Transaction:
    """Transaction domain entity. Amount is signed, positive = outflow."""

    transaction_id: str
    account_id: str
    user_id: str
    amount: Decimal
    currency: str
    display_name: str
    original_name: str
    merchant_name: Optional[str]
    date: date
    category: Optional[str]
    subcategory: Optional[str]
    category_icon_url: Optional[str]
    pending: bool
    location_city: Optional[str]
    location_region: Optional[str]
    location_country: Optional[str]
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class TransactionView:
    """Transaction as presented: normalized category and direction attached."""

    transaction: Transaction
    category: str
    direction: str


@dataclass(frozen=True)
class BalanceSnapshot:
    """Point-in-time account balance, unique per (account_id, date)."""

    account_id: str
    date: date
    amount: Decimal
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class BalanceChange:
    """A snapshot annotated with its change from the preceding snapshot."""

    date: date
    amount: Decimal
    percent: Optional[Decimal]
    trend: Optional[str]


@dataclass(frozen=True)
class CategoryTotal:
    """Outflow totals for one display category."""

    category: str
    count: int
    total: Decimal
    average: Decimal
    max_amount: Optional[Decimal] = None
    min_amount: Optional[Decimal] = None


@dataclass(frozen=True)
class MonthCategory:
    """Outflow amount and count for a category within one month."""

    category: str
    amount: Decimal
    count: int


@dataclass(frozen=True)
class MonthlySummary:
    """Rollup of a single "YYYY-MM" month."""

    month: str
    total_spent: Decimal
    total_income: Decimal
    transaction_count: int
    categories: tuple[MonthCategory, ...] = ()


@dataclass(frozen=True)
class RangeSummary:
    """Transactions within an inclusive date window."""

    start_date: date
    end_date: date
    transactions: tuple[TransactionView, ...]
    categories: Optional[tuple[CategoryTotal, ...]] = None


@dataclass(frozen=True)
class UserStats:
    """Single-row summary of a user's ledger."""

    account_count: int
    transaction_count: int
    total_spent: Decimal
    total_income: Decimal
    last_transaction_date: Optional[date]


@dataclass(frozen=True)
class LocalExpense:
    """Entry of a client-held expense log, keyed by external id and date."""

    external_id: Optional[str]
    date: str
    amount: Decimal
    category: str
    description: str
    institution: Optional[str] = None
    account_name: Optional[str] = None


@dataclass
class BatchResult:
    """Outcome of a best-effort batch operation.

    ``failed`` pairs each rejected item with the error it raised; ``skipped``
    holds items that were intentionally not applied (e.g. duplicates).
    """

    succeeded: list[Any] = field(default_factory=list)
    failed: list[tuple[Any, Exception]] = field(default_factory=list)
    skipped: list[Any] = field(default_factory=list)

    @property
    def succeeded_count(self) -> int:
        return len(self.succeeded)

    @property
    def failed_count(self) -> int:
        return len(self.failed)


@dataclass(frozen=True)
class SyncResult:
    """Result of a fetch-then-reconcile pass."""

    merge: BatchResult
    categories: tuple[CategoryTotal, ...]
