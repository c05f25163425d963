"""Generic SQLAlchemy database implementation."""

import logging
from contextlib import contextmanager
from datetime import date, datetime, UTC
from decimal import Decimal
from typing import Any, Iterator, Optional

from sqlalchemy import case, delete, func, select, update
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from spendsync.database.base import Database
from spendsync.database.models import (
    Base,
    User,
    Account,
    Transaction,
    BalanceSnapshot,
    create_engine_for,
    create_session_factory,
)
from spendsync.database.mappers import (
    account_to_domain,
    transaction_to_domain,
    balance_snapshot_to_domain,
    apply_account_payload,
    apply_transaction_payload,
)
from spendsync.domain.entities import (
    Account as DomainAccount,
    Transaction as DomainTransaction,
    BalanceSnapshot as DomainBalanceSnapshot,
    UserStats,
)
from spendsync.domain.errors import (
    NotFoundError,
    StorageError,
    ValidationError,
    account_not_found,
    storage_failure,
)
from spendsync.domain.payloads import AccountPayload, TransactionPayload

logger = logging.getLogger(__name__)


class SQLAlchemyDatabase(Database):
    """SQLAlchemy-based implementation of Database interface."""

    def __init__(self, database_url: str):
        """Initialize SQLAlchemy database.

        Nothing touches the database until connect() is called.

        Args:
            database_url: SQLAlchemy database URL (e.g., 'sqlite:///path/to.db')
        """
        self.database_url = database_url
        self.engine: Optional[Engine] = None
        self.session_factory: Optional[sessionmaker[Session]] = None

    def connect(self) -> None:
        """Create the engine and session factory."""
        if self.engine is None:
            self.engine = create_engine_for(self.database_url)
            self.session_factory = create_session_factory(self.engine)

    def disconnect(self) -> None:
        """Dispose of the engine and its pooled connections."""
        if self.engine is not None:
            self.engine.dispose()
            self.engine = None
            self.session_factory = None

    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        self.connect()
        try:
            Base.metadata.create_all(self.engine)
        except SQLAlchemyError as e:
            raise StorageError(storage_failure("schema initialization")) from e

    @contextmanager
    def _session_scope(self, operation: str) -> Iterator[Session]:
        """Yield a session that commits on success and rolls back on any error.

        SQLAlchemy errors are re-raised as StorageError.
        """
        if self.session_factory is None:
            self.connect()
        session = self.session_factory()
        try:
            yield session
            session.commit()
        except SQLAlchemyError as e:
            session.rollback()
            raise StorageError(storage_failure(operation)) from e
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    # User operations
    def _ensure_user(self, session: Session, user_id: str) -> int:
        if session.get(User, user_id) is not None:
            return 0
        session.add(User(user_id=user_id))
        session.flush()
        return 1

    def ensure_user(self, user_id: str) -> int:
        """Insert the user if absent. Returns rows inserted (0 or 1)."""
        with self._session_scope("ensure_user") as session:
            return self._ensure_user(session, user_id)

    def user_exists(self, user_id: str) -> bool:
        """Check whether a user row exists."""
        with self._session_scope("user_exists") as session:
            return session.get(User, user_id) is not None

    def _delete_user_transactions(self, session: Session, user_id: str) -> int:
        return session.execute(delete(Transaction).where(Transaction.user_id == user_id)).rowcount

    def _delete_user_accounts(self, session: Session, user_id: str) -> int:
        return session.execute(delete(Account).where(Account.user_id == user_id)).rowcount

    def _delete_user_row(self, session: Session, user_id: str) -> int:
        return session.execute(delete(User).where(User.user_id == user_id)).rowcount

    def delete_user_data(self, user_id: str) -> dict[str, int]:
        """Delete transactions, then accounts, then the user, in one transaction."""
        try:
            with self._session_scope("delete_user_data") as session:
                counts = {"transactions": self._delete_user_transactions(session, user_id)}
                counts["accounts"] = self._delete_user_accounts(session, user_id)
                counts["users"] = self._delete_user_row(session, user_id)
        except Exception:
            logger.exception("Wipe of user %s failed, rolled back", user_id)
            raise
        logger.info(
            "Wiped user %s: %d transactions, %d accounts",
            user_id,
            counts["transactions"],
            counts["accounts"],
        )
        return counts

    # Account operations
    def upsert_account(
        self, user_id: str, payload: AccountPayload, access_credential: str
    ) -> int:
        """Insert or replace an account by account_id. Returns rows affected."""
        with self._session_scope("upsert_account") as session:
            self._ensure_user(session, user_id)
            account = session.get(Account, payload.account_id)
            if account is None:
                account = Account(account_id=payload.account_id)
                session.add(account)
            elif account.user_id != user_id:
                raise ValidationError(
                    f"Account '{payload.account_id}' is linked to another user"
                )
            else:
                account.updated_at = datetime.now(UTC)
            apply_account_payload(account, user_id, payload, access_credential)
            return 1

    def get_account(self, user_id: str, account_id: str) -> Optional[DomainAccount]:
        """Get an account owned by the user."""
        with self._session_scope("get_account") as session:
            account = session.scalars(
                select(Account).where(Account.account_id == account_id, Account.user_id == user_id)
            ).first()
            if account is None:
                return None
            return account_to_domain(account)

    def list_accounts(self, user_id: str) -> list[DomainAccount]:
        """List the user's accounts, newest first."""
        with self._session_scope("list_accounts") as session:
            accounts = session.scalars(
                select(Account)
                .where(Account.user_id == user_id)
                .order_by(Account.created_at.desc(), Account.account_id)
            ).all()
            return [account_to_domain(acc) for acc in accounts]

    def update_account_name(self, user_id: str, account_id: str, name: str) -> int:
        """Update display name. Returns rows affected."""
        with self._session_scope("update_account_name") as session:
            return session.execute(
                update(Account)
                .where(Account.account_id == account_id, Account.user_id == user_id)
                .values(display_name=name, updated_at=datetime.now(UTC))
            ).rowcount

    def update_account_balance(
        self, user_id: str, account_id: str, balance: Optional[Decimal], currency: str
    ) -> int:
        """Update current balance and currency. Returns rows affected."""
        with self._session_scope("update_account_balance") as session:
            return session.execute(
                update(Account)
                .where(Account.account_id == account_id, Account.user_id == user_id)
                .values(current_balance=balance, currency=currency, updated_at=datetime.now(UTC))
            ).rowcount

    # Transaction operations
    def upsert_transaction(self, user_id: str, payload: TransactionPayload) -> int:
        """Insert or fully replace a transaction. Returns rows affected."""
        with self._session_scope("upsert_transaction") as session:
            owner = session.scalar(
                select(Account.user_id).where(Account.account_id == payload.account_id)
            )
            if owner != user_id:
                raise NotFoundError(account_not_found(payload.account_id))
            self._ensure_user(session, user_id)

            transaction = session.get(Transaction, payload.transaction_id)
            if transaction is None:
                transaction = Transaction(transaction_id=payload.transaction_id)
                session.add(transaction)
            elif transaction.user_id != user_id:
                raise ValidationError(
                    f"Transaction '{payload.transaction_id}' belongs to another user"
                )
            else:
                transaction.updated_at = datetime.now(UTC)
            apply_transaction_payload(transaction, user_id, payload)
            return 1

    def get_transaction(self, user_id: str, transaction_id: str) -> Optional[DomainTransaction]:
        """Get a transaction owned by the user."""
        with self._session_scope("get_transaction") as session:
            txn = session.scalars(
                select(Transaction).where(
                    Transaction.transaction_id == transaction_id,
                    Transaction.user_id == user_id,
                )
            ).first()
            if txn is None:
                return None
            return transaction_to_domain(txn)

    def update_transaction_fields(
        self, user_id: str, transaction_id: str, fields: dict[str, Any]
    ) -> int:
        """Update already-filtered columns of a transaction. Returns rows affected."""
        with self._session_scope("update_transaction_fields") as session:
            return session.execute(
                update(Transaction)
                .where(
                    Transaction.transaction_id == transaction_id,
                    Transaction.user_id == user_id,
                )
                .values(**fields, updated_at=datetime.now(UTC))
            ).rowcount

    def list_transactions(
        self,
        user_id: str,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        account_id: Optional[str] = None,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> list[DomainTransaction]:
        """List transactions newest first by date, then creation time."""
        query = select(Transaction).where(Transaction.user_id == user_id)
        if start_date is not None:
            query = query.where(Transaction.date >= start_date)
        if end_date is not None:
            query = query.where(Transaction.date <= end_date)
        if account_id is not None:
            query = query.where(Transaction.account_id == account_id)
        query = query.order_by(
            Transaction.date.desc(),
            Transaction.created_at.desc(),
            Transaction.transaction_id.desc(),
        )
        if limit is not None:
            query = query.limit(limit).offset(offset)
        elif offset:
            query = query.offset(offset)

        with self._session_scope("list_transactions") as session:
            return [transaction_to_domain(txn) for txn in session.scalars(query).all()]

    # Aggregate queries
    def get_category_totals(
        self,
        user_id: str,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> list[dict[str, Any]]:
        """Group outflows by raw category."""
        query = (
            select(
                Transaction.category,
                func.count().label("count"),
                func.sum(Transaction.amount).label("total"),
                func.max(Transaction.amount).label("max_amount"),
                func.min(Transaction.amount).label("min_amount"),
            )
            .where(
                Transaction.user_id == user_id,
                Transaction.amount > 0,
                Transaction.category.is_not(None),
            )
            .group_by(Transaction.category)
        )
        if start_date is not None:
            query = query.where(Transaction.date >= start_date)
        if end_date is not None:
            query = query.where(Transaction.date <= end_date)

        with self._session_scope("get_category_totals") as session:
            return [dict(row._mapping) for row in session.execute(query)]

    def get_monthly_category_totals(self, user_id: str, since: date) -> list[dict[str, Any]]:
        """Group transactions on or after ``since`` by (month, raw category)."""
        month = func.strftime("%Y-%m", Transaction.date).label("month")
        spent = case((Transaction.amount > 0, Transaction.amount), else_=0)
        income = case((Transaction.amount < 0, -Transaction.amount), else_=0)
        query = (
            select(
                month,
                Transaction.category,
                func.count().label("transaction_count"),
                func.sum(spent).label("total_spent"),
                func.sum(income).label("total_income"),
                func.count(case((Transaction.amount > 0, 1))).label("expense_count"),
            )
            .where(Transaction.user_id == user_id, Transaction.date >= since)
            .group_by(month, Transaction.category)
        )
        with self._session_scope("get_monthly_category_totals") as session:
            return [dict(row._mapping) for row in session.execute(query)]

    def get_user_stats(self, user_id: str) -> UserStats:
        """Get the single-row summary of the user's transactions."""
        spent = case((Transaction.amount > 0, Transaction.amount), else_=0)
        income = case((Transaction.amount < 0, -Transaction.amount), else_=0)
        query = select(
            func.count(func.distinct(Transaction.account_id)),
            func.count(),
            func.sum(spent),
            func.sum(income),
            func.max(Transaction.date),
        ).where(Transaction.user_id == user_id)

        with self._session_scope("get_user_stats") as session:
            account_count, txn_count, total_spent, total_income, last_date = session.execute(
                query
            ).one()
        return UserStats(
            account_count=account_count or 0,
            transaction_count=txn_count or 0,
            total_spent=Decimal(str(total_spent or 0)).quantize(Decimal("0.01")),
            total_income=Decimal(str(total_income or 0)).quantize(Decimal("0.01")),
            last_transaction_date=last_date,
        )

    # Balance snapshot operations
    def upsert_balance_snapshot(self, account_id: str, snapshot_date: date, amount: Decimal) -> int:
        """Insert or overwrite the snapshot for (account_id, date)."""
        with self._session_scope("upsert_balance_snapshot") as session:
            snapshot = session.get(BalanceSnapshot, (account_id, snapshot_date))
            if snapshot is None:
                session.add(BalanceSnapshot(account_id=account_id, date=snapshot_date, amount=amount))
            else:
                snapshot.amount = amount
                snapshot.updated_at = datetime.now(UTC)
            return 1

    def list_balance_snapshots(self, account_id: str) -> list[DomainBalanceSnapshot]:
        """List an account's snapshots, oldest first."""
        with self._session_scope("list_balance_snapshots") as session:
            snapshots = session.scalars(
                select(BalanceSnapshot)
                .where(BalanceSnapshot.account_id == account_id)
                .order_by(BalanceSnapshot.date)
            ).all()
            return [balance_snapshot_to_domain(s) for s in snapshots]

    def delete_balance_snapshot(self, account_id: str, snapshot_date: date) -> int:
        """Delete one snapshot. Returns rows affected."""
        with self._session_scope("delete_balance_snapshot") as session:
            return session.execute(
                delete(BalanceSnapshot).where(
                    BalanceSnapshot.account_id == account_id,
                    BalanceSnapshot.date == snapshot_date,
                )
            ).rowcount
