"""Read-only aggregate queries over a user's ledger."""

from collections import defaultdict
from datetime import date, timedelta
from decimal import Decimal
from typing import Any, Callable, Optional, Union

from spendsync.database.base import Database
from spendsync.domain.category import normalize_category
from spendsync.domain.entities import (
    CategoryTotal,
    MonthCategory,
    MonthlySummary,
    RangeSummary,
    UserStats,
)
from spendsync.domain.errors import ValidationError
from spendsync.domain.ledger import to_view
from spendsync.utils.amount_parser import CENT
from spendsync.utils.date_parser import months_before, parse_date

DEFAULT_MONTHS = 12


def _money(value: Any) -> Decimal:
    """Coerce a storage aggregate (possibly None or float) to cents."""
    return Decimal(str(value if value is not None else 0)).quantize(CENT)


class AggregateService:
    """Computes summaries on demand; never writes to the ledger.

    Sign convention throughout: amount > 0 is spent (outflow), amount < 0 is
    income (inflow) reported as an absolute value.
    """

    def __init__(self, db: Database, today: Callable[[], date] = date.today):
        """Initialize aggregate service.

        Args:
            db: Database instance
            today: Clock returning the current date
        """
        self.db = db
        self.today = today

    def category_breakdown(
        self,
        user_id: str,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> list[CategoryTotal]:
        """Outflow totals per display category, largest total first.

        Raw categories that normalize to the same display label are merged.
        Max/min are only reported for date-bounded queries. Transactions
        without a category are left out.
        """
        rows = self.db.get_category_totals(user_id, start_date=start_date, end_date=end_date)
        with_extremes = start_date is not None or end_date is not None

        merged: dict[str, dict[str, Any]] = {}
        for row in rows:
            label = normalize_category(row["category"])
            total = _money(row["total"])
            high = _money(row["max_amount"])
            low = _money(row["min_amount"])
            entry = merged.get(label)
            if entry is None:
                merged[label] = {"count": row["count"], "total": total, "max": high, "min": low}
            else:
                entry["count"] += row["count"]
                entry["total"] += total
                entry["max"] = max(entry["max"], high)
                entry["min"] = min(entry["min"], low)

        results = [
            CategoryTotal(
                category=label,
                count=data["count"],
                total=data["total"],
                average=(data["total"] / data["count"]).quantize(CENT),
                max_amount=data["max"] if with_extremes else None,
                min_amount=data["min"] if with_extremes else None,
            )
            for label, data in merged.items()
        ]
        results.sort(key=lambda c: (-c.total, c.category))
        return results

    def monthly_summary(self, user_id: str, months: int = DEFAULT_MONTHS) -> list[MonthlySummary]:
        """Month-by-month rollup for the last ``months`` calendar months.

        Returns:
            One MonthlySummary per month with activity, newest month first
        """
        if months < 1:
            raise ValidationError(f"months must be positive, got {months}")
        since = months_before(self.today(), months)
        rows = self.db.get_monthly_category_totals(user_id, since)

        totals: dict[str, dict[str, Any]] = defaultdict(
            lambda: {"spent": Decimal("0.00"), "income": Decimal("0.00"), "count": 0}
        )
        categories: dict[str, dict[str, list]] = defaultdict(dict)
        for row in rows:
            month = row["month"]
            spent = _money(row["total_spent"])
            totals[month]["spent"] += spent
            totals[month]["income"] += _money(row["total_income"])
            totals[month]["count"] += row["transaction_count"]

            if row["category"] is not None and spent > 0:
                label = normalize_category(row["category"])
                bucket = categories[month].setdefault(label, [Decimal("0.00"), 0])
                bucket[0] += spent
                bucket[1] += row["expense_count"]

        summaries = []
        for month in sorted(totals, reverse=True):
            month_categories = sorted(
                (
                    MonthCategory(category=label, amount=amount, count=count)
                    for label, (amount, count) in categories[month].items()
                ),
                key=lambda c: (-c.amount, c.category),
            )
            summaries.append(
                MonthlySummary(
                    month=month,
                    total_spent=totals[month]["spent"],
                    total_income=totals[month]["income"],
                    transaction_count=totals[month]["count"],
                    categories=tuple(month_categories),
                )
            )
        return summaries

    def range_summary(
        self,
        user_id: str,
        start_date: Union[str, date],
        days: int,
        include_categories: bool = False,
        limit: Optional[int] = None,
    ) -> RangeSummary:
        """Transactions dated start_date through start_date + days, inclusive."""
        if days < 0:
            raise ValidationError(f"days cannot be negative, got {days}")
        if limit is not None and limit < 1:
            raise ValidationError(f"limit must be positive, got {limit}")
        try:
            start = parse_date(start_date)
        except ValueError as e:
            raise ValidationError(str(e)) from e
        end = start + timedelta(days=days)

        transactions = self.db.list_transactions(
            user_id, start_date=start, end_date=end, limit=limit
        )
        categories = None
        if include_categories:
            categories = tuple(self.category_breakdown(user_id, start_date=start, end_date=end))
        return RangeSummary(
            start_date=start,
            end_date=end,
            transactions=tuple(to_view(t) for t in transactions),
            categories=categories,
        )

    def user_stats(self, user_id: str) -> UserStats:
        """Account count, transaction count, totals and latest date."""
        return self.db.get_user_stats(user_id)
