"""SQLAlchemy models for the spendsync ledger."""

from datetime import datetime, UTC
from sqlalchemy import (
    Column,
    String,
    ForeignKey,
    DateTime,
    Date,
    Numeric,
    Boolean,
    Index,
    create_engine,
    event,
)
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, relationship, sessionmaker, Session

Base = declarative_base()


def _now() -> datetime:
    return datetime.now(UTC)


class User(Base):
    """End user, identified by the identity provider's opaque id."""

    __tablename__ = "users"

    user_id = Column(String, primary_key=True)
    created_at = Column(DateTime, default=_now, nullable=False)
    updated_at = Column(DateTime, default=_now, nullable=False)

    accounts = relationship("Account", back_populates="user")


class Account(Base):
    """Linked account model."""

    __tablename__ = "accounts"

    account_id = Column(String, primary_key=True)
    user_id = Column(String, ForeignKey("users.user_id"), nullable=False, index=True)
    display_name = Column(String, nullable=False)
    original_name = Column(String, nullable=False)
    type = Column(String, nullable=False)
    subtype = Column(String, nullable=True)
    institution_name = Column(String, nullable=False)
    mask = Column(String, nullable=True)
    current_balance = Column(Numeric(14, 2), nullable=True)
    currency = Column(String, default="USD", nullable=False)
    access_credential = Column(String, nullable=False)
    created_at = Column(DateTime, default=_now, nullable=False)
    updated_at = Column(DateTime, default=_now, nullable=False)

    # Relationships
    user = relationship("User", back_populates="accounts")
    transactions = relationship("Transaction", back_populates="account")


class Transaction(Base):
    """Transaction model. Positive amounts are outflows."""

    __tablename__ = "transactions"

    transaction_id = Column(String, primary_key=True)
    account_id = Column(String, ForeignKey("accounts.account_id"), nullable=False)
    user_id = Column(String, ForeignKey("users.user_id"), nullable=False)
    amount = Column(Numeric(14, 2), nullable=False)
    currency = Column(String, default="USD", nullable=False)
    display_name = Column(String, nullable=False)
    original_name = Column(String, nullable=False)
    merchant_name = Column(String, nullable=True)
    date = Column(Date, nullable=False)
    category = Column(String, nullable=True)
    subcategory = Column(String, nullable=True)
    category_icon_url = Column(String, nullable=True)
    pending = Column(Boolean, default=False, nullable=False)
    location_city = Column(String, nullable=True)
    location_region = Column(String, nullable=True)
    location_country = Column(String, nullable=True)
    created_at = Column(DateTime, default=_now, nullable=False)
    updated_at = Column(DateTime, default=_now, nullable=False)

    __table_args__ = (
        Index("ix_transactions_user_date", "user_id", "date"),
        Index("ix_transactions_user_account", "user_id", "account_id"),
        Index("ix_transactions_user_category", "user_id", "category"),
    )

    # Relationships
    account = relationship("Account", back_populates="transactions")


class BalanceSnapshot(Base):
    """Recorded balance of an account on a calendar date."""

    __tablename__ = "balance_snapshots"

    account_id = Column(String, primary_key=True)
    date = Column(Date, primary_key=True)
    amount = Column(Numeric(14, 2), nullable=False)
    created_at = Column(DateTime, default=_now, nullable=False)
    updated_at = Column(DateTime, default=_now, nullable=False)


def _enable_sqlite_foreign_keys(dbapi_conn, _record) -> None:
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA foreign_keys=ON;")
    cursor.close()


def create_engine_for(database_url: str) -> Engine:
    """Create an engine, enforcing foreign keys on SQLite."""
    connect_args: dict[str, object] = {}
    if database_url.startswith("sqlite"):
        connect_args["check_same_thread"] = False
    engine = create_engine(database_url, echo=False, connect_args=connect_args)
    if database_url.startswith("sqlite"):
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
    return engine


def create_session_factory(engine: Engine) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory bound to an engine."""
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
