"""Tests for balance history."""

from datetime import date
from decimal import Decimal

import pytest

from spendsync.domain.balance import percent_change, trend_of
from spendsync.domain.errors import ValidationError

ACCOUNT = "acc_checking"


def test_percent_change():
    assert percent_change(Decimal("100"), Decimal("110")) == Decimal("10.00")
    assert percent_change(Decimal("-200"), Decimal("-100")) == Decimal("50.00")
    assert percent_change(Decimal("0"), Decimal("50")) is None
    assert percent_change(None, Decimal("50")) is None


@pytest.mark.parametrize(
    "percent,trend",
    [
        (Decimal("5.00"), "up"),
        (Decimal("-0.50"), "down"),
        (Decimal("0.01"), "flat"),
        (Decimal("0.00"), "flat"),
        (None, None),
    ],
)
def test_trend_of(percent, trend):
    assert trend_of(percent) == trend


class TestSnapshots:
    def test_record_overwrites_same_date(self, balances):
        balances.record_snapshot(ACCOUNT, "2024-01-10", 100)
        balances.record_snapshot(ACCOUNT, "2024-01-10", "125.50")

        snapshots = balances.list_snapshots(ACCOUNT)
        assert len(snapshots) == 1
        assert snapshots[0].amount == Decimal("125.50")

    def test_listed_oldest_first(self, balances):
        balances.record_snapshot(ACCOUNT, "2024-01-20", 1)
        balances.record_snapshot(ACCOUNT, "2024-01-05", 2)
        assert [s.date for s in balances.list_snapshots(ACCOUNT)] == [
            date(2024, 1, 5),
            date(2024, 1, 20),
        ]

    def test_delete_snapshot(self, balances):
        balances.record_snapshot(ACCOUNT, "2024-01-10", 100)
        assert balances.delete_snapshot(ACCOUNT, "2024-01-10") == 1
        assert balances.delete_snapshot(ACCOUNT, "2024-01-10") == 0
        assert balances.list_snapshots(ACCOUNT) == []

    def test_invalid_input(self, balances):
        with pytest.raises(ValidationError):
            balances.record_snapshot(ACCOUNT, "gibberish", 100)
        with pytest.raises(ValidationError):
            balances.record_snapshot(ACCOUNT, "2024-01-10", "lots")
        with pytest.raises(ValidationError):
            balances.record_snapshot(ACCOUNT, "2024-01-10", "1e30")
        with pytest.raises(ValidationError):
            balances.record_snapshot("", "2024-01-10", 100)


class TestPeriodChange:
    def test_against_previous_snapshot(self, balances):
        balances.record_snapshot(ACCOUNT, "2024-01-01", 200)
        balances.record_snapshot(ACCOUNT, "2024-01-15", 250)

        assert balances.period_change(ACCOUNT, "2024-01-15") == Decimal("25.00")

    def test_no_prior_snapshot(self, balances):
        balances.record_snapshot(ACCOUNT, "2024-01-01", 200)
        assert balances.period_change(ACCOUNT, "2024-01-01") is None

    def test_no_snapshot_on_date(self, balances):
        balances.record_snapshot(ACCOUNT, "2024-01-01", 200)
        assert balances.period_change(ACCOUNT, "2024-01-02") is None

    def test_zero_baseline(self, balances):
        balances.record_snapshot(ACCOUNT, "2024-01-01", 0)
        balances.record_snapshot(ACCOUNT, "2024-01-02", 50)
        assert balances.period_change(ACCOUNT, "2024-01-02") is None


class TestMonthOverMonth:
    def test_uses_last_snapshot_of_each_month(self, balances):
        balances.record_snapshot(ACCOUNT, "2024-01-03", 500)
        balances.record_snapshot(ACCOUNT, "2024-01-28", 1000)
        balances.record_snapshot(ACCOUNT, "2024-02-02", 700)
        balances.record_snapshot(ACCOUNT, "2024-02-20", 900)

        assert balances.month_over_month(ACCOUNT, "2024-02") == Decimal("-10.00")

    def test_across_year_boundary(self, balances):
        balances.record_snapshot(ACCOUNT, "2023-12-31", 100)
        balances.record_snapshot(ACCOUNT, "2024-01-31", 150)
        assert balances.month_over_month(ACCOUNT, date(2024, 1, 1)) == Decimal("50.00")

    def test_missing_previous_month(self, balances):
        balances.record_snapshot(ACCOUNT, "2023-11-30", 100)
        balances.record_snapshot(ACCOUNT, "2024-01-31", 150)
        assert balances.month_over_month(ACCOUNT, "2024-01") is None

    def test_zero_baseline(self, balances):
        balances.record_snapshot(ACCOUNT, "2023-12-31", 0)
        balances.record_snapshot(ACCOUNT, "2024-01-31", 150)
        assert balances.month_over_month(ACCOUNT, "2024-01") is None

    def test_bad_month(self, balances):
        with pytest.raises(ValidationError):
            balances.month_over_month(ACCOUNT, "January")


class TestAllTimeChange:
    def test_first_to_last(self, balances):
        balances.record_snapshot(ACCOUNT, "2024-01-01", 400)
        balances.record_snapshot(ACCOUNT, "2024-02-01", 100)
        balances.record_snapshot(ACCOUNT, "2024-03-01", 500)
        assert balances.all_time_change(ACCOUNT) == Decimal("25.00")

    def test_single_snapshot(self, balances):
        balances.record_snapshot(ACCOUNT, "2024-01-01", 400)
        assert balances.all_time_change(ACCOUNT) == Decimal("0.00")

    def test_no_snapshots(self, balances):
        assert balances.all_time_change(ACCOUNT) is None


def test_month_history_newest_first_with_trends(balances):
    balances.record_snapshot(ACCOUNT, "2024-01-31", 100)
    balances.record_snapshot(ACCOUNT, "2024-02-05", 120)
    balances.record_snapshot(ACCOUNT, "2024-02-10", 120)
    balances.record_snapshot(ACCOUNT, "2024-02-20", 90)
    balances.record_snapshot(ACCOUNT, "2024-03-01", 500)

    history = balances.month_history(ACCOUNT, "2024-02")

    assert [(h.date.day, h.percent, h.trend) for h in history] == [
        (20, Decimal("-25.00"), "down"),
        (10, Decimal("0.00"), "flat"),
        (5, Decimal("20.00"), "up"),
    ]


def test_snapshots_are_scoped_to_account(balances):
    balances.record_snapshot("acc_a", "2024-01-01", 1)
    balances.record_snapshot("acc_b", "2024-01-01", 2)
    assert [s.amount for s in balances.list_snapshots("acc_a")] == [Decimal("1.00")]
