"""Mapper functions to convert between domain models and SQLAlchemy models.

This layer isolates the conversion logic, so the access credential column
can never leak into a domain entity by accident.
"""

from spendsync.domain import entities as domain
from spendsync.domain.payloads import AccountPayload, TransactionPayload
from spendsync.database.models import (
    Account as ORMAccount,
    Transaction as ORMTransaction,
    BalanceSnapshot as ORMBalanceSnapshot,
)


def account_to_domain(orm_account: ORMAccount) -> domain.Account:
    """Convert SQLAlchemy Account model to domain Account entity."""
    return domain.Account(
        account_id=orm_account.account_id,
        user_id=orm_account.user_id,
        display_name=orm_account.display_name,
        original_name=orm_account.original_name,
        type=orm_account.type,
        subtype=orm_account.subtype,
        institution_name=orm_account.institution_name,
        mask=orm_account.mask,
        current_balance=orm_account.current_balance,
        currency=orm_account.currency,
        created_at=orm_account.created_at,
        updated_at=orm_account.updated_at,
    )


def transaction_to_domain(orm_transaction: ORMTransaction) -> domain.Transaction:
    """Convert SQLAlchemy Transaction model to domain Transaction entity."""
    return domain.Transaction(
        transaction_id=orm_transaction.transaction_id,
        account_id=orm_transaction.account_id,
        user_id=orm_transaction.user_id,
        amount=orm_transaction.amount,
        currency=orm_transaction.currency,
        display_name=orm_transaction.display_name,
        original_name=orm_transaction.original_name,
        merchant_name=orm_transaction.merchant_name,
        date=orm_transaction.date,
        category=orm_transaction.category,
        subcategory=orm_transaction.subcategory,
        category_icon_url=orm_transaction.category_icon_url,
        pending=bool(orm_transaction.pending),
        location_city=orm_transaction.location_city,
        location_region=orm_transaction.location_region,
        location_country=orm_transaction.location_country,
        created_at=orm_transaction.created_at,
        updated_at=orm_transaction.updated_at,
    )


def balance_snapshot_to_domain(orm_snapshot: ORMBalanceSnapshot) -> domain.BalanceSnapshot:
    """Convert SQLAlchemy BalanceSnapshot model to domain BalanceSnapshot entity."""
    return domain.BalanceSnapshot(
        account_id=orm_snapshot.account_id,
        date=orm_snapshot.date,
        amount=orm_snapshot.amount,
        created_at=orm_snapshot.created_at,
        updated_at=orm_snapshot.updated_at,
    )


def apply_account_payload(
    orm_account: ORMAccount, user_id: str, payload: AccountPayload, access_credential: str
) -> None:
    """Copy the source-owned fields of an account payload onto a row.

    display_name and original_name are only set on first insert; a user
    rename survives re-linking.
    """
    orm_account.user_id = user_id
    if orm_account.original_name is None:
        orm_account.original_name = payload.name
    if orm_account.display_name is None:
        orm_account.display_name = payload.name
    orm_account.type = payload.type
    orm_account.subtype = payload.subtype
    orm_account.institution_name = payload.institution_name
    orm_account.mask = payload.mask
    orm_account.current_balance = payload.balances.current
    orm_account.currency = payload.currency
    orm_account.access_credential = access_credential


def apply_transaction_payload(
    orm_transaction: ORMTransaction, user_id: str, payload: TransactionPayload
) -> None:
    """Overwrite every source-owned field of a transaction row (full replace)."""
    category = payload.personal_finance_category
    location = payload.location
    orm_transaction.account_id = payload.account_id
    orm_transaction.user_id = user_id
    orm_transaction.amount = payload.amount
    orm_transaction.currency = payload.currency
    orm_transaction.display_name = payload.name
    orm_transaction.original_name = payload.name
    orm_transaction.merchant_name = payload.merchant_name
    orm_transaction.date = payload.date
    orm_transaction.category = category.primary
    orm_transaction.subcategory = category.detailed
    orm_transaction.category_icon_url = payload.personal_finance_category_icon_url
    orm_transaction.pending = payload.pending
    orm_transaction.location_city = location.city
    orm_transaction.location_region = location.region
    orm_transaction.location_country = location.country
