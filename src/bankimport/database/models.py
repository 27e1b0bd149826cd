"""SQLAlchemy models for bankimport database."""

import uuid
from datetime import datetime, UTC
from decimal import Decimal
from sqlalchemy import (
    Column,
    Integer,
    String,
    Text,
    ForeignKey,
    DateTime,
    Date,
    Numeric,
    Index,
    UniqueConstraint,
    create_engine,
)
from sqlalchemy.orm import declarative_base, relationship, sessionmaker, Session

Base = declarative_base()


def _new_id() -> str:
    return str(uuid.uuid4())


def _now() -> datetime:
    return datetime.now(UTC)


class Account(Base):
    """Bank account model (owned by the account CRUD subsystem)."""

    __tablename__ = "accounts"

    id = Column(String, primary_key=True, default=_new_id)
    tenant_id = Column(String, nullable=False, index=True)
    name = Column(String, nullable=False)
    account_type = Column(String, nullable=False, default="current")
    balance = Column(Numeric(14, 2), nullable=False, default=Decimal("0"))
    currency = Column(String, nullable=False, default="GBP")
    created_at = Column(DateTime, default=_now, nullable=False)
    updated_at = Column(DateTime, default=_now, onupdate=_now, nullable=False)

    # Relationships
    transactions = relationship("Transaction", back_populates="account", cascade="all, delete-orphan")


class Category(Base):
    """Tenant category model.

    ``name_key`` is the casefolded name; the unique constraint on it is what
    makes concurrent "create if missing" calls safe.
    """

    __tablename__ = "categories"

    id = Column(String, primary_key=True, default=_new_id)
    tenant_id = Column(String, nullable=False)
    name = Column(String, nullable=False)
    name_key = Column(String, nullable=False)
    type = Column(String, nullable=False, default="expense")
    color = Column(String, nullable=False)
    parent_id = Column(String, ForeignKey("categories.id"), nullable=True)
    created_at = Column(DateTime, default=_now, nullable=False)

    __table_args__ = (
        UniqueConstraint("tenant_id", "name_key", name="uq_category_tenant_name"),
        Index("idx_categories_tenant_type", "tenant_id", "type"),
    )

    # Relationships
    transactions = relationship("Transaction", back_populates="category")


class Transaction(Base):
    """Transaction model."""

    __tablename__ = "transactions"

    id = Column(String, primary_key=True, default=_new_id)
    tenant_id = Column(String, nullable=False)
    account_id = Column(String, ForeignKey("accounts.id"), nullable=False)
    category_id = Column(String, ForeignKey("categories.id"), nullable=False)
    amount = Column(Numeric(14, 2), nullable=False)
    description = Column(String, nullable=False)
    date = Column(Date, nullable=False)
    type = Column(String, nullable=False)
    notes = Column(String, nullable=True)
    provider_transaction_id = Column(String, nullable=True, index=True)
    created_at = Column(DateTime, default=_now, nullable=False)

    __table_args__ = (
        Index("idx_transactions_tenant_date", "tenant_id", "date"),
        Index("idx_transactions_account", "account_id"),
    )

    # Relationships
    account = relationship("Account", back_populates="transactions")
    category = relationship("Category", back_populates="transactions")


class ImportLog(Base):
    """One statement upload or queued import job."""

    __tablename__ = "import_logs"

    id = Column(String, primary_key=True, default=_new_id)
    tenant_id = Column(String, nullable=False, index=True)
    user_id = Column(String, nullable=False)
    account_id = Column(String, nullable=True)
    file_name = Column(String, nullable=False)
    file_size = Column(Integer, nullable=False)
    file_type = Column(String, nullable=False)
    status = Column(String, nullable=False, index=True)
    transactions_imported = Column(Integer, nullable=False, default=0)
    transactions_failed = Column(Integer, nullable=False, default=0)
    transactions_total = Column(Integer, nullable=False, default=0)
    error_message = Column(Text, nullable=True)
    # JSON encoded list of strings
    error_details = Column(Text, nullable=True)
    processing_time_ms = Column(Integer, nullable=True)
    created_at = Column(DateTime, default=_now, nullable=False)
    completed_at = Column(DateTime, nullable=True)

    __table_args__ = (Index("idx_import_logs_tenant_date", "tenant_id", "created_at"),)


class QueuedJob(Base):
    """Message waiting in the database-backed job queue."""

    __tablename__ = "queued_jobs"

    id = Column(Integer, primary_key=True)
    payload = Column(Text, nullable=False)
    status = Column(String, nullable=False, default="pending", index=True)
    attempts = Column(Integer, nullable=False, default=0)
    last_error = Column(Text, nullable=True)
    created_at = Column(DateTime, default=_now, nullable=False)
    updated_at = Column(DateTime, default=_now, onupdate=_now, nullable=False)


def create_session_factory(database_url: str) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory."""
    connect_args = {"check_same_thread": False} if database_url.startswith("sqlite") else {}
    engine = create_engine(database_url, echo=False, connect_args=connect_args)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine, expire_on_commit=False)
