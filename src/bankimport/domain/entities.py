"""Domain model entities for bankimport.

These are pure data classes representing business concepts, independent of
database schema. Parsers, the persistence engine and the HTTP/CLI layers all
exchange these rather than ORM rows.
"""

from dataclasses import dataclass, field
from datetime import datetime, date
from decimal import Decimal
from enum import Enum
from typing import Optional


class TransactionType(str, Enum):
    """Direction of a transaction relative to the account."""

    INCOME = "income"
    EXPENSE = "expense"


class ImportStatus(str, Enum):
    """Lifecycle states of an import log."""

    PROCESSING = "processing"
    SUCCESS = "success"
    PARTIAL = "partial"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self is not ImportStatus.PROCESSING


@dataclass(frozen=True)
class ParsedTransaction:
    """Canonical transaction produced by every statement parser.

    ``amount`` is always the absolute magnitude; the direction lives in
    ``type``.
    """

    date: date
    description: str
    amount: Decimal
    type: TransactionType
    category: Optional[str] = None
    notes: Optional[str] = None
    provider_transaction_id: Optional[str] = None

    def __post_init__(self):
        if self.amount < 0:
            raise ValueError(f"Parsed amount must be non-negative, got {self.amount}")

    @property
    def signed_amount(self) -> Decimal:
        """Balance impact of this transaction."""
        return self.amount if self.type is TransactionType.INCOME else -self.amount


@dataclass(frozen=True)
class Account:
    """Bank account domain entity."""

    id: str
    tenant_id: str
    name: str
    account_type: str
    balance: Decimal
    currency: str
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class Category:
    """Tenant category domain entity."""

    id: str
    tenant_id: str
    name: str
    type: TransactionType
    color: str
    parent_id: Optional[str]
    created_at: datetime


@dataclass(frozen=True)
class Transaction:
    """Persisted transaction domain entity."""

    id: str
    tenant_id: str
    account_id: str
    category_id: str
    amount: Decimal
    description: str
    date: date
    type: TransactionType
    notes: Optional[str]
    provider_transaction_id: Optional[str]
    created_at: datetime


@dataclass(frozen=True)
class ImportLog:
    """Record of one statement upload or queued import job."""

    id: str
    tenant_id: str
    user_id: str
    account_id: Optional[str]
    file_name: str
    file_type: str
    file_size: int
    status: ImportStatus
    transactions_total: int
    transactions_imported: int
    transactions_failed: int
    error_message: Optional[str]
    error_details: Optional[list[str]]
    created_at: datetime
    completed_at: Optional[datetime]
    processing_time_ms: Optional[int]


@dataclass(frozen=True)
class QueuedJob:
    """A message claimed from the job queue."""

    id: int
    payload: dict = field(default_factory=dict)
    attempts: int = 0
