"""Balance history: per-account snapshot series and percent deltas."""

from bisect import bisect_left
from datetime import date
from decimal import Decimal
from typing import Any, Optional, Union

from spendsync.database.base import Database
from spendsync.domain.entities import BalanceChange, BalanceSnapshot
from spendsync.domain.errors import ValidationError
from spendsync.utils.amount_parser import CENT, parse_amount
from spendsync.utils.date_parser import month_key, months_before, parse_date, parse_month

TREND_UP = "up"
TREND_DOWN = "down"
TREND_FLAT = "flat"

# Changes within +/- this many percent read as flat.
FLAT_BAND = Decimal("0.01")


def percent_change(previous: Optional[Decimal], current: Decimal) -> Optional[Decimal]:
    """Percent change from ``previous`` to ``current``.

    None when there is no usable baseline (absent or exactly zero).
    """
    if previous is None or previous == 0:
        return None
    return ((current - previous) / abs(previous) * 100).quantize(CENT)


def _as_day(value: Union[str, date]) -> date:
    try:
        return parse_date(value)
    except ValueError as e:
        raise ValidationError(str(e)) from e


def _as_month(value: Union[str, date]) -> date:
    try:
        return parse_month(value)
    except ValueError as e:
        raise ValidationError(str(e)) from e


def trend_of(percent: Optional[Decimal]) -> Optional[str]:
    if percent is None:
        return None
    if percent > FLAT_BAND:
        return TREND_UP
    if percent < -FLAT_BAND:
        return TREND_DOWN
    return TREND_FLAT


class BalanceHistoryService:
    """Service for recording balance snapshots and computing deltas."""

    def __init__(self, db: Database):
        """Initialize balance history service.

        Args:
            db: Database instance
        """
        self.db = db

    def record_snapshot(self, account_id: str, snapshot_date: Union[str, date], amount: Any) -> int:
        """Record the balance for a date, overwriting any earlier value for that date."""
        if not account_id:
            raise ValidationError("account_id is required")
        try:
            day = parse_date(snapshot_date)
            value = parse_amount(amount)
        except ValueError as e:
            raise ValidationError(str(e)) from e
        return self.db.upsert_balance_snapshot(account_id, day, value)

    def delete_snapshot(self, account_id: str, snapshot_date: Union[str, date]) -> int:
        day = _as_day(snapshot_date)
        return self.db.delete_balance_snapshot(account_id, day)

    def list_snapshots(self, account_id: str) -> list[BalanceSnapshot]:
        """All snapshots for an account, oldest first."""
        return self.db.list_balance_snapshots(account_id)

    def period_change(self, account_id: str, snapshot_date: Union[str, date]) -> Optional[Decimal]:
        """Percent change of the snapshot on a date vs. the one before it.

        None if there is no snapshot on that date or no usable earlier one.
        """
        day = _as_day(snapshot_date)
        snapshots = self.list_snapshots(account_id)
        dates = [s.date for s in snapshots]
        index = bisect_left(dates, day)
        if index == len(dates) or dates[index] != day or index == 0:
            return None
        return percent_change(snapshots[index - 1].amount, snapshots[index].amount)

    def month_over_month(self, account_id: str, month: Union[str, date]) -> Optional[Decimal]:
        """Latest value in ``month`` vs. the previous month's last value.

        None when either month has no snapshots, or the baseline is zero.
        """
        first_day = _as_month(month)
        current_key = month_key(first_day)
        previous_key = month_key(months_before(first_day, 1))

        current = previous = None
        for snapshot in self.list_snapshots(account_id):
            key = month_key(snapshot.date)
            if key == current_key:
                current = snapshot
            elif key == previous_key:
                previous = snapshot
        if current is None or previous is None:
            return None
        return percent_change(previous.amount, current.amount)

    def all_time_change(self, account_id: str) -> Optional[Decimal]:
        """Percent change from the first ever snapshot to the latest."""
        snapshots = self.list_snapshots(account_id)
        if not snapshots:
            return None
        return percent_change(snapshots[0].amount, snapshots[-1].amount)

    def month_history(self, account_id: str, month: Union[str, date]) -> list[BalanceChange]:
        """A month's snapshots, newest first, each with its period change."""
        wanted = month_key(_as_month(month))
        snapshots = self.list_snapshots(account_id)

        history = []
        for index, snapshot in enumerate(snapshots):
            if month_key(snapshot.date) != wanted:
                continue
            previous = snapshots[index - 1].amount if index > 0 else None
            percent = percent_change(previous, snapshot.amount)
            history.append(
                BalanceChange(
                    date=snapshot.date,
                    amount=snapshot.amount,
                    percent=percent,
                    trend=trend_of(percent),
                )
            )
        history.reverse()
        return history
