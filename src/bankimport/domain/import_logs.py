"""Import log queries."""

from bankimport.database.base import Database
from bankimport.domain.entities import ImportLog
from bankimport.domain.errors import NotFoundError, ValidationError, import_log_not_found

MAX_PAGE_SIZE = 500


class ImportLogService:
    """Read access to a tenant's import history."""

    def __init__(self, db: Database):
        """Initialize import log service.

        Args:
            db: Database instance
        """
        self.db = db

    def list_logs(self, tenant_id: str, limit: int = 100, offset: int = 0) -> list[ImportLog]:
        """List import logs, newest first.

        Args:
            tenant_id: Tenant ID
            limit: Page size, capped at 500
            offset: Number of logs to skip

        Raises:
            ValidationError: If limit or offset is negative
        """
        if limit < 0 or offset < 0:
            raise ValidationError("limit and offset must not be negative")
        return self.db.list_import_logs(tenant_id, limit=min(limit, MAX_PAGE_SIZE), offset=offset)

    def get_log(self, tenant_id: str, log_id: str) -> ImportLog:
        """Get one import log.

        Raises:
            NotFoundError: If the tenant has no such log
        """
        log = self.db.get_import_log(log_id, tenant_id)
        if log is None:
            raise NotFoundError(import_log_not_found(log_id))
        return log


def import_log_to_dict(log: ImportLog) -> dict:
    """JSON-friendly representation of an import log."""
    return {
        "id": log.id,
        "accountId": log.account_id,
        "userId": log.user_id,
        "fileName": log.file_name,
        "fileType": log.file_type,
        "fileSize": log.file_size,
        "status": log.status.value,
        "transactionsTotal": log.transactions_total,
        "transactionsImported": log.transactions_imported,
        "transactionsFailed": log.transactions_failed,
        "errorMessage": log.error_message,
        "errorDetails": log.error_details,
        "processingTimeMs": log.processing_time_ms,
        "createdAt": log.created_at.isoformat() if log.created_at else None,
        "completedAt": log.completed_at.isoformat() if log.completed_at else None,
    }
