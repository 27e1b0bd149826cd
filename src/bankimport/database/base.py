"""Abstract database interface."""

from abc import ABC, abstractmethod
from typing import Optional
from decimal import Decimal

# Import entities directly to avoid circular import through domain/__init__.py
from bankimport.domain.entities import (
    Account,
    Category,
    Transaction,
    TransactionType,
    ImportLog,
    ImportStatus,
    ParsedTransaction,
    QueuedJob,
)


class Database(ABC):
    """Abstract relational store used by the import pipeline.

    Every read is scoped to a tenant. Methods that change money or create
    categories are atomic at the store level.
    """

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    # Account operations
    @abstractmethod
    def create_account(
        self,
        tenant_id: str,
        name: str,
        account_type: str = "current",
        currency: str = "GBP",
        balance: Decimal = Decimal("0"),
    ) -> str:
        """Create a new account. Returns account ID."""
        pass

    @abstractmethod
    def get_account(self, tenant_id: str, account_id: str) -> Optional[Account]:
        """Get an account by ID if it belongs to the tenant."""
        pass

    @abstractmethod
    def list_accounts(self, tenant_id: str) -> list[Account]:
        """List the tenant's accounts."""
        pass

    # Category operations
    @abstractmethod
    def create_category(
        self,
        tenant_id: str,
        name: str,
        category_type: TransactionType,
        color: str,
        parent_id: Optional[str] = None,
    ) -> Category:
        """Create a category, or return the existing one with the same name.

        Names compare case-insensitively within a tenant. Two concurrent calls
        for the same name end up with one row.
        """
        pass

    @abstractmethod
    def get_category(self, tenant_id: str, category_id: str) -> Optional[Category]:
        """Get category by ID."""
        pass

    @abstractmethod
    def get_category_by_name(self, tenant_id: str, name: str) -> Optional[Category]:
        """Get category by case-insensitive name."""
        pass

    @abstractmethod
    def list_categories(self, tenant_id: str) -> list[Category]:
        """List the tenant's categories."""
        pass

    # Transaction operations
    @abstractmethod
    def find_transaction_by_provider_id(
        self, tenant_id: str, account_id: str, provider_transaction_id: str
    ) -> Optional[Transaction]:
        """Find a transaction previously imported with this external ID."""
        pass

    @abstractmethod
    def record_imported_transaction(
        self,
        tenant_id: str,
        account_id: str,
        category_id: str,
        parsed: ParsedTransaction,
    ) -> tuple[Transaction, Decimal]:
        """Insert a transaction and shift the account balance in one unit.

        The balance change is an in-store increment by the signed amount, so
        concurrent imports into one account cannot lose updates.

        Returns:
            The stored transaction and the account balance after the change
        """
        pass

    @abstractmethod
    def list_transactions(
        self, tenant_id: str, account_id: Optional[str] = None
    ) -> list[Transaction]:
        """List transactions, newest first."""
        pass

    # Import log operations
    @abstractmethod
    def create_import_log(
        self,
        tenant_id: str,
        user_id: str,
        account_id: Optional[str],
        file_name: str,
        file_type: str,
        file_size: int,
    ) -> ImportLog:
        """Create an import log in the processing state."""
        pass

    @abstractmethod
    def get_import_log(self, log_id: str, tenant_id: Optional[str] = None) -> Optional[ImportLog]:
        """Get an import log, optionally requiring it to belong to a tenant."""
        pass

    @abstractmethod
    def list_import_logs(self, tenant_id: str, limit: int = 100, offset: int = 0) -> list[ImportLog]:
        """List a tenant's import logs, newest first."""
        pass

    @abstractmethod
    def finalize_import_log(
        self,
        log_id: str,
        status: ImportStatus,
        transactions_total: int = 0,
        transactions_imported: int = 0,
        transactions_failed: int = 0,
        error_message: Optional[str] = None,
        error_details: Optional[list[str]] = None,
        processing_time_ms: Optional[int] = None,
    ) -> bool:
        """Write the terminal state of a processing log.

        Returns:
            False if the log does not exist or is already terminal
        """
        pass

    # Job queue operations
    @abstractmethod
    def enqueue_job(self, payload: dict) -> int:
        """Store a pending job. Returns job ID."""
        pass

    @abstractmethod
    def claim_job(self) -> Optional[QueuedJob]:
        """Mark the oldest pending job as processing and return it."""
        pass

    @abstractmethod
    def complete_job(self, job_id: int) -> None:
        """Mark a job done."""
        pass

    @abstractmethod
    def release_job(self, job_id: int, error: str, dead: bool = False) -> None:
        """Put a job back to pending (or dead) after a failed delivery."""
        pass

    @abstractmethod
    def get_job_status(self, job_id: int) -> Optional[str]:
        """Return the queue status of a job."""
        pass
