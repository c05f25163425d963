"""Tests for mapping aggregator payloads."""

from datetime import date
from decimal import Decimal

import pytest

from spendsync.domain.errors import ValidationError
from spendsync.domain.payloads import (
    BalancesPayload,
    CategoryPayload,
    LocationPayload,
    account_from_payload,
    transaction_from_payload,
)


def test_account_payload_reads_nested_balances(make_account):
    payload = account_from_payload(
        make_account(balances={"current": 1234.5, "iso_currency_code": "CAD"})
    )

    assert payload.account_id == "acc_checking"
    assert payload.balances.current == Decimal("1234.50")
    assert payload.currency == "CAD"


def test_account_payload_without_balances(make_account):
    raw = make_account()
    del raw["balances"]
    payload = account_from_payload(raw)

    assert payload.balances == BalancesPayload()
    assert payload.currency == "USD"


@pytest.mark.parametrize("field", ["account_id", "type", "institution_name"])
def test_account_payload_requires_fields(make_account, field):
    raw = make_account()
    raw[field] = None
    with pytest.raises(ValidationError, match=field):
        account_from_payload(raw)


def test_account_payload_rejects_non_numeric_balance(make_account):
    with pytest.raises(ValidationError):
        account_from_payload(make_account(balances={"current": "lots"}))


def test_transaction_payload_maps_nested_objects(make_txn):
    payload = transaction_from_payload(make_txn("tx_1", 12.1, "2024-01-10"))

    assert payload.amount == Decimal("12.10")
    assert payload.date == date(2024, 1, 10)
    assert payload.personal_finance_category == CategoryPayload("FOOD_AND_DRINK", "FOOD_AND_DRINK_OTHER")
    assert payload.location == LocationPayload("Austin", "TX", "US")


def test_transaction_payload_tolerates_missing_nested_objects(make_txn):
    raw = make_txn("tx_1", 5, "2024-01-10", category=None)
    raw["location"] = None
    del raw["iso_currency_code"]
    payload = transaction_from_payload(raw)

    assert payload.personal_finance_category == CategoryPayload()
    assert payload.location == LocationPayload()
    assert payload.currency == "USD"


def test_transaction_payload_preserves_sign(make_txn):
    assert transaction_from_payload(make_txn("tx_in", -2500, "2024-01-01")).amount == Decimal("-2500.00")


@pytest.mark.parametrize("field", ["transaction_id", "account_id", "amount", "date", "name"])
def test_transaction_payload_requires_fields(make_txn, field):
    raw = make_txn("tx_1", 5, "2024-01-10")
    del raw[field]
    with pytest.raises(ValidationError):
        transaction_from_payload(raw)


def test_transaction_payload_rejects_bad_date(make_txn):
    with pytest.raises(ValidationError):
        transaction_from_payload(make_txn("tx_1", 5, "gibberish"))


def test_non_mapping_payload_is_a_validation_error():
    with pytest.raises(ValidationError):
        transaction_from_payload(["tx_1", 5])
