"""Statement import orchestration: validate, parse, persist or enqueue."""

import logging
import time
from dataclasses import dataclass, field
from decimal import Decimal
from pathlib import PurePosixPath
from typing import Optional, Union

from bankimport.config import Settings, load_settings
from bankimport.database.base import Database
from bankimport.domain.account import AccountService
from bankimport.domain.category import CategoryService
from bankimport.domain.entities import Account, ImportStatus, Transaction
from bankimport.domain.errors import (
    EmptyResultError,
    ValidationError,
    file_too_large,
    no_transactions_found,
)
from bankimport.domain.import_persistence import ImportPersistenceService, elapsed_ms
from bankimport.jobs.base import JobQueue
from bankimport.parsers import ParseOptions, StatementFormat, detect_format, parse_statement
from bankimport.storage.base import ObjectStorage
from bankimport.utils.date_parser import DateLocale, locale_for_currency

logger = logging.getLogger(__name__)

PDF_IMPORT_MESSAGE_TYPE = "pdf-import"
SUMMARY_TRANSACTION_LIMIT = 10


@dataclass(frozen=True)
class UploadRequest:
    """One uploaded statement file and who it belongs to."""

    tenant_id: str
    user_id: str
    account_id: Optional[str]
    file_name: Optional[str]
    content: bytes
    default_category_id: Optional[str] = None
    pdf_template_id: Optional[str] = None
    # Parse PDFs in-process even when a queue is configured (CLI --sync)
    force_sync: bool = False


@dataclass
class ImportSummary:
    """Result of a synchronous import."""

    log_id: str
    imported: int
    skipped: int
    total: int
    account_id: str
    account_name: str
    new_balance: Decimal
    transactions: list[Transaction] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    processing_time_ms: int = 0
    status: ImportStatus = ImportStatus.SUCCESS

    def to_dict(self) -> dict:
        """JSON-friendly representation used by the HTTP and CLI layers."""
        return {
            "logId": self.log_id,
            "imported": self.imported,
            "skipped": self.skipped,
            "total": self.total,
            "accountId": self.account_id,
            "accountName": self.account_name,
            "newBalance": str(self.new_balance),
            "transactions": [transaction_to_dict(t) for t in self.transactions],
            "errors": list(self.errors),
            "processingTimeMs": self.processing_time_ms,
            "status": self.status.value,
        }


@dataclass(frozen=True)
class QueuedImport:
    """Result of handing a PDF to the background queue."""

    log_id: str
    status: str = ImportStatus.PROCESSING.value
    queued: bool = True

    def to_dict(self) -> dict:
        return {"logId": self.log_id, "status": self.status, "queued": self.queued}


def transaction_to_dict(transaction: Transaction) -> dict:
    return {
        "id": transaction.id,
        "date": transaction.date.isoformat(),
        "description": transaction.description,
        "amount": str(transaction.amount),
        "type": transaction.type.value,
        "categoryId": transaction.category_id,
        "notes": transaction.notes,
        "providerTransactionId": transaction.provider_transaction_id,
    }


def safe_file_name(file_name: str) -> str:
    """Strip any directory part a client put in the file name."""
    return PurePosixPath(file_name.replace("\\", "/")).name


def date_locale_for(account: Account, settings: Settings) -> DateLocale:
    """Configured locale, else the one implied by the account currency."""
    return settings.date_locale or locale_for_currency(account.currency)


class StatementImportService:
    """Service that runs one statement upload end to end."""

    def __init__(
        self,
        db: Database,
        storage: Optional[ObjectStorage] = None,
        queue: Optional[JobQueue] = None,
        settings: Optional[Settings] = None,
    ):
        """Initialize statement import service.

        Args:
            db: Database instance
            storage: Object storage for PDFs and archived originals
            queue: Job queue for background PDF imports
            settings: Runtime settings (defaults when None)
        """
        self.db = db
        self.storage = storage
        self.queue = queue
        self.settings = settings or load_settings(env={})
        self.accounts = AccountService(db)
        self.categories = CategoryService(db)
        self.persistence = ImportPersistenceService(db)

    def import_statement(self, request: UploadRequest) -> Union[ImportSummary, QueuedImport]:
        """Import an uploaded statement.

        PDFs go to the background queue when both object storage and a queue
        are configured; everything else is parsed and persisted inline.

        Args:
            request: Upload to import

        Returns:
            ImportSummary for inline imports, QueuedImport for queued PDFs

        Raises:
            ValidationError: If the upload is incomplete or too large
            UnsupportedFormatError: If the file extension is not supported
            NotFoundError: If the account or default category does not exist
            ParseError: If the file is not valid for its format
            EmptyResultError: If the file contains no transactions
            InfrastructureError: If storage, queue or database is unreachable
        """
        started_at = time.perf_counter()
        file_name, statement_format = self._validate(request)

        log = self.db.create_import_log(
            tenant_id=request.tenant_id,
            user_id=request.user_id,
            account_id=request.account_id,
            file_name=file_name,
            file_type=statement_format.value,
            file_size=len(request.content),
        )
        logger.info(
            "Import %s started: %s (%s, %d bytes)",
            log.id,
            file_name,
            statement_format.value,
            len(request.content),
        )

        try:
            account = self.accounts.require_account(request.tenant_id, request.account_id)
            default_category = self.categories.resolve_default_category(
                request.tenant_id, request.default_category_id
            )

            if self._should_enqueue(statement_format, request):
                return self._enqueue_pdf(request, log.id, file_name, account, default_category.id)

            options = ParseOptions(
                date_locale=date_locale_for(account, self.settings),
                pdf_template_id=request.pdf_template_id,
            )
            parsed = parse_statement(request.content, statement_format, options)
            if not parsed:
                raise EmptyResultError(no_transactions_found(file_name))

            result = self.persistence.persist_transactions_from_import(
                tenant_id=request.tenant_id,
                account=account,
                default_category_id=default_category.id,
                parsed_transactions=parsed,
                log_id=log.id,
                started_at=started_at,
                check_duplicates=True,
            )
        except Exception as e:
            self._mark_failed(log.id, e, started_at)
            raise

        self._archive_original(request, log.id, file_name, statement_format, result.imported_count)

        return ImportSummary(
            log_id=log.id,
            imported=result.imported_count,
            skipped=result.skipped_count,
            total=result.total,
            account_id=account.id,
            account_name=result.account_name,
            new_balance=result.new_balance,
            transactions=result.created_transactions[:SUMMARY_TRANSACTION_LIMIT],
            errors=result.errors,
            processing_time_ms=result.processing_time_ms,
            status=result.final_status,
        )

    def _validate(self, request: UploadRequest) -> tuple[str, StatementFormat]:
        if not request.file_name or not safe_file_name(request.file_name):
            raise ValidationError("No file uploaded")
        if not request.content:
            raise ValidationError("Uploaded file is empty")
        if not request.account_id:
            raise ValidationError("Account ID is required")
        if len(request.content) > self.settings.max_upload_bytes:
            raise ValidationError(file_too_large(len(request.content), self.settings.max_upload_bytes))

        file_name = safe_file_name(request.file_name)
        return file_name, detect_format(file_name)

    def _should_enqueue(self, statement_format: StatementFormat, request: UploadRequest) -> bool:
        return (
            statement_format == StatementFormat.PDF
            and self.storage is not None
            and self.queue is not None
            and not request.force_sync
        )

    def _enqueue_pdf(
        self,
        request: UploadRequest,
        log_id: str,
        file_name: str,
        account: Account,
        default_category_id: str,
    ) -> QueuedImport:
        timestamp_ms = int(time.time() * 1000)
        file_key = f"imports/{request.tenant_id}/{account.id}/{log_id}-{timestamp_ms}-{file_name}"
        self.storage.put(
            file_key,
            request.content,
            metadata={
                "tenantId": request.tenant_id,
                "accountId": account.id,
                "logId": log_id,
                "fileName": file_name,
            },
        )
        message = {
            "type": PDF_IMPORT_MESSAGE_TYPE,
            "tenantId": request.tenant_id,
            "accountId": account.id,
            "logId": log_id,
            "fileKey": file_key,
            "defaultCategoryId": default_category_id,
            "userId": request.user_id,
            "fileName": file_name,
        }
        if request.pdf_template_id:
            message["templateId"] = request.pdf_template_id
        self.queue.send(message)
        logger.info("Import %s queued as %s", log_id, file_key)
        return QueuedImport(log_id=log_id)

    def _archive_original(
        self,
        request: UploadRequest,
        log_id: str,
        file_name: str,
        statement_format: StatementFormat,
        imported_count: int,
    ) -> None:
        """Keep a copy of the uploaded file; failures never fail the import."""
        if self.storage is None or not self.settings.archive_originals:
            return

        timestamp_ms = int(time.time() * 1000)
        key = f"{request.tenant_id}/{request.account_id}/{timestamp_ms}-{file_name}"
        try:
            self.storage.put(
                key,
                request.content,
                metadata={
                    "tenantId": request.tenant_id,
                    "accountId": request.account_id,
                    "userId": request.user_id,
                    "logId": log_id,
                    "fileName": file_name,
                    "fileType": statement_format.value,
                    "importedCount": str(imported_count),
                },
            )
        except Exception as e:
            logger.warning("Could not archive original for import %s: %s", log_id, e)

    def _mark_failed(self, log_id: str, error: Exception, started_at: float) -> None:
        message = str(error) or error.__class__.__name__
        logger.error("Import %s failed: %s", log_id, message)
        try:
            self.db.finalize_import_log(
                log_id,
                ImportStatus.FAILED,
                error_message=message,
                processing_time_ms=elapsed_ms(started_at),
            )
        except Exception:
            # The original error is re-raised by the caller
            logger.exception("Could not mark import %s as failed", log_id)
