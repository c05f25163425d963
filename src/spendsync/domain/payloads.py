"""External aggregator payload shapes and their mapping to ledger rows.

The source nests balances, categories and locations in sub-objects that may
be missing entirely. Each sub-object gets an explicit type whose fields are
all optional; an absent sub-object maps to an all-None instance.
"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Any, Mapping, Optional

from spendsync.domain.errors import ValidationError, missing_fields
from spendsync.utils.amount_parser import parse_amount, parse_optional_amount
from spendsync.utils.date_parser import parse_date

DEFAULT_CURRENCY = "USD"


@dataclass(frozen=True)
class BalancesPayload:
    current: Optional[Decimal] = None
    iso_currency_code: Optional[str] = None


@dataclass(frozen=True)
class CategoryPayload:
    primary: Optional[str] = None
    detailed: Optional[str] = None


@dataclass(frozen=True)
class LocationPayload:
    city: Optional[str] = None
    region: Optional[str] = None
    country: Optional[str] = None


@dataclass(frozen=True)
class AccountPayload:
    """Account as delivered by the aggregator."""

    account_id: str
    name: str
    type: str
    institution_name: str
    subtype: Optional[str] = None
    mask: Optional[str] = None
    balances: BalancesPayload = field(default_factory=BalancesPayload)

    @property
    def currency(self) -> str:
        return self.balances.iso_currency_code or DEFAULT_CURRENCY


@dataclass(frozen=True)
class TransactionPayload:
    """Transaction as delivered by the aggregator."""

    transaction_id: str
    account_id: str
    amount: Decimal
    date: date
    name: str
    iso_currency_code: Optional[str] = None
    merchant_name: Optional[str] = None
    personal_finance_category: CategoryPayload = field(default_factory=CategoryPayload)
    personal_finance_category_icon_url: Optional[str] = None
    pending: bool = False
    location: LocationPayload = field(default_factory=LocationPayload)

    @property
    def currency(self) -> str:
        return self.iso_currency_code or DEFAULT_CURRENCY


def _nested(data: Mapping[str, Any], key: str) -> Mapping[str, Any]:
    value = data.get(key)
    return value if isinstance(value, Mapping) else {}


def _require(entity: str, data: Mapping[str, Any], keys: tuple[str, ...]) -> None:
    if not isinstance(data, Mapping):
        raise ValidationError(f"{entity} payload must be an object, got {type(data).__name__}")
    absent = [key for key in keys if data.get(key) in (None, "")]
    if absent:
        raise ValidationError(missing_fields(entity, absent))


def account_from_payload(data: Mapping[str, Any]) -> AccountPayload:
    """Map a raw account payload to an AccountPayload.

    Raises:
        ValidationError: If account_id, type or institution_name is absent,
            or the balance is not a number
    """
    _require("Account", data, ("account_id", "type", "institution_name"))
    balances = _nested(data, "balances")
    try:
        current = parse_optional_amount(balances.get("current"))
    except ValueError as e:
        raise ValidationError(f"Account '{data['account_id']}' has an invalid balance: {e}") from e

    return AccountPayload(
        account_id=str(data["account_id"]),
        name=data.get("name") or data.get("official_name") or str(data["account_id"]),
        type=str(data["type"]),
        institution_name=str(data["institution_name"]),
        subtype=data.get("subtype"),
        mask=data.get("mask"),
        balances=BalancesPayload(
            current=current,
            iso_currency_code=balances.get("iso_currency_code") or data.get("iso_currency_code"),
        ),
    )


def transaction_from_payload(data: Mapping[str, Any]) -> TransactionPayload:
    """Map a raw transaction payload to a TransactionPayload.

    Raises:
        ValidationError: If an identity field, amount, date or name is absent
            or unparseable
    """
    _require("Transaction", data, ("transaction_id", "account_id", "amount", "date", "name"))
    try:
        amount = parse_amount(data["amount"])
        tx_date = parse_date(data["date"])
    except ValueError as e:
        raise ValidationError(f"Transaction '{data['transaction_id']}': {e}") from e

    category = _nested(data, "personal_finance_category")
    location = _nested(data, "location")
    return TransactionPayload(
        transaction_id=str(data["transaction_id"]),
        account_id=str(data["account_id"]),
        amount=amount,
        date=tx_date,
        name=str(data["name"]),
        iso_currency_code=data.get("iso_currency_code"),
        merchant_name=data.get("merchant_name"),
        personal_finance_category=CategoryPayload(
            primary=category.get("primary"),
            detailed=category.get("detailed"),
        ),
        personal_finance_category_icon_url=data.get("personal_finance_category_icon_url"),
        pending=bool(data.get("pending", False)),
        location=LocationPayload(
            city=location.get("city"),
            region=location.get("region"),
            country=location.get("country"),
        ),
    )
