"""Short-lived memoization of aggregate query results.

Entries expire on a wall-clock TTL; writes to the ledger do not invalidate
them, so callers see results up to one TTL old.
"""

import threading
import time
from datetime import date
from typing import Any, Callable, Hashable, Optional, TypeVar, Union

from spendsync.domain.entities import CategoryTotal, MonthlySummary, RangeSummary, UserStats
from spendsync.domain.errors import ValidationError
from spendsync.domain.summary import DEFAULT_MONTHS, AggregateService
from spendsync.utils.date_parser import parse_date

T = TypeVar("T")

RANGE_TTL_SECONDS = 5 * 60
MONTHLY_TTL_SECONDS = 10 * 60


def make_key(query: str, user_id: str, **params: Any) -> tuple[Hashable, ...]:
    """Canonical signature of a query: name, user and sorted parameters."""
    return (query, user_id, tuple(sorted(params.items())))


class QueryCache:
    """Thread-safe TTL cache. Expiry is checked lazily on read."""

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self.clock = clock
        self._lock = threading.Lock()
        self._entries: dict[Hashable, tuple[float, Any]] = {}

    def get(self, key: Hashable) -> Optional[Any]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            expires_at, value = entry
            if self.clock() >= expires_at:
                del self._entries[key]
                return None
            return value

    def set(self, key: Hashable, value: Any, ttl: float) -> None:
        with self._lock:
            self._entries[key] = (self.clock() + ttl, value)

    def get_or_compute(self, key: Hashable, ttl: float, compute: Callable[[], T]) -> T:
        """Return the cached value, computing and storing it when absent.

        Concurrent misses may compute twice; results are side-effect free.
        """
        value = self.get(key)
        if value is None:
            value = compute()
            self.set(key, value, ttl)
        return value

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


class CachedAggregateService:
    """AggregateService front that memoizes results per query signature."""

    def __init__(
        self,
        aggregates: AggregateService,
        cache: Optional[QueryCache] = None,
        range_ttl: float = RANGE_TTL_SECONDS,
        monthly_ttl: float = MONTHLY_TTL_SECONDS,
    ):
        self.aggregates = aggregates
        self.cache = cache if cache is not None else QueryCache()
        self.range_ttl = range_ttl
        self.monthly_ttl = monthly_ttl

    def range_summary(
        self,
        user_id: str,
        start_date: Union[str, date],
        days: int,
        include_categories: bool = False,
        limit: Optional[int] = None,
    ) -> RangeSummary:
        try:
            start = parse_date(start_date)
        except ValueError as e:
            raise ValidationError(str(e)) from e
        key = make_key(
            "range",
            user_id,
            start=start.isoformat(),
            days=days,
            include_categories=include_categories,
            limit=limit,
        )
        return self.cache.get_or_compute(
            key,
            self.range_ttl,
            lambda: self.aggregates.range_summary(
                user_id, start, days, include_categories=include_categories, limit=limit
            ),
        )

    def monthly_summary(self, user_id: str, months: int = DEFAULT_MONTHS) -> list[MonthlySummary]:
        key = make_key("monthly", user_id, months=months)
        return self.cache.get_or_compute(
            key, self.monthly_ttl, lambda: self.aggregates.monthly_summary(user_id, months)
        )

    def category_breakdown(
        self,
        user_id: str,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> list[CategoryTotal]:
        key = make_key(
            "categories",
            user_id,
            start=start_date.isoformat() if start_date else None,
            end=end_date.isoformat() if end_date else None,
        )
        return self.cache.get_or_compute(
            key,
            self.range_ttl,
            lambda: self.aggregates.category_breakdown(user_id, start_date, end_date),
        )

    def user_stats(self, user_id: str) -> UserStats:
        return self.cache.get_or_compute(
            make_key("stats", user_id),
            self.range_ttl,
            lambda: self.aggregates.user_stats(user_id),
        )
