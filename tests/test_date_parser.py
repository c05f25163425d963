"""Tests for date parsing helpers."""

from datetime import date, datetime

import pytest

from spendsync.utils.date_parser import month_key, months_before, parse_date, parse_month

TODAY = date(2024, 3, 15)


def test_parse_absolute_date():
    """Test parsing absolute dates."""
    assert parse_date("2024-01-15") == date(2024, 1, 15)


def test_parse_passes_dates_through():
    assert parse_date(date(2024, 1, 15)) == date(2024, 1, 15)
    assert parse_date(datetime(2024, 1, 15, 23, 59)) == date(2024, 1, 15)


@pytest.mark.parametrize(
    "text,expected",
    [
        ("today", date(2024, 3, 15)),
        ("Yesterday", date(2024, 3, 14)),
        ("30 days ago", date(2024, 2, 14)),
        ("Jan 5 2024", date(2024, 1, 5)),
    ],
)
def test_parse_relative_and_loose_formats(text, expected):
    """Test relative words resolve against the supplied today."""
    assert parse_date(text, today=TODAY) == expected


@pytest.mark.parametrize("value", ["", "   ", "gibberish", None, 20240115])
def test_parse_invalid(value):
    with pytest.raises(ValueError):
        parse_date(value)


def test_month_key():
    assert month_key(date(2024, 3, 9)) == "2024-03"


def test_parse_month():
    assert parse_month("2024-02") == date(2024, 2, 1)
    assert parse_month(date(2024, 2, 29)) == date(2024, 2, 1)
    with pytest.raises(ValueError):
        parse_month("February")


def test_months_before_clamps_to_month_end():
    """Test calendar subtraction across short months and year ends."""
    assert months_before(date(2024, 3, 31), 1) == date(2024, 2, 29)
    assert months_before(date(2024, 1, 15), 1) == date(2023, 12, 15)
    assert months_before(TODAY, 12) == date(2023, 3, 15)
