"""Background consumer for queued PDF imports."""

import logging
import time
from enum import Enum
from typing import Any, Optional

from bankimport.config import Settings, load_settings
from bankimport.database.base import Database
from bankimport.domain.entities import ImportStatus
from bankimport.domain.errors import InfrastructureError
from bankimport.domain.import_persistence import ImportPersistenceService, elapsed_ms
from bankimport.domain.statement_import import PDF_IMPORT_MESSAGE_TYPE, date_locale_for
from bankimport.parsers import ParseOptions, StatementFormat, parse_statement
from bankimport.storage.base import ObjectStorage

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("tenantId", "accountId", "logId", "fileKey", "defaultCategoryId")


class ConsumeOutcome(str, Enum):
    """What the queue should do with a handled message."""

    ACKNOWLEDGED = "acknowledged"
    DROPPED = "dropped"


class PdfImportConsumer:
    """Turns a queued ``pdf-import`` message into persisted transactions.

    Every outcome that the log can record is acknowledged: the import log is
    where callers learn what happened. Only infrastructure failures raised
    before persisting starts escape, so the worker can deliver the message
    again. ``fail`` lets the worker close the log when it gives up on a job.
    """

    def __init__(self, db: Database, storage: ObjectStorage, settings: Optional[Settings] = None):
        self.db = db
        self.storage = storage
        self.settings = settings or load_settings(env={})
        self.persistence = ImportPersistenceService(db)

    def handle(self, message: Any) -> ConsumeOutcome:
        """Process one queue message.

        Infrastructure errors raised before any transaction is written escape
        so the job can be delivered again. Once persisting has started the
        log is failed and the message acknowledged, since a second delivery
        would import the rows again.

        Raises:
            InfrastructureError: If the store or object storage is unreachable
                before persisting starts
        """
        if not self._is_valid(message):
            return ConsumeOutcome.DROPPED

        tenant_id = message["tenantId"]
        log_id = message["logId"]
        started_at = time.perf_counter()

        log = self.db.get_import_log(log_id, tenant_id)
        if log is None:
            logger.warning("Dropping pdf-import message for unknown import log %s", log_id)
            return ConsumeOutcome.DROPPED
        if log.status.is_terminal:
            logger.info("Import log %s is already %s, nothing to do", log_id, log.status.value)
            return ConsumeOutcome.ACKNOWLEDGED

        account = self.db.get_account(tenant_id, message["accountId"])
        if account is None:
            self._fail(log_id, "Account not found", started_at)
            return ConsumeOutcome.ACKNOWLEDGED

        try:
            content = self.storage.get(message["fileKey"])
            if content is None:
                self._fail(log_id, "File missing from storage", started_at)
                return ConsumeOutcome.ACKNOWLEDGED

            options = ParseOptions(
                date_locale=date_locale_for(account, self.settings),
                pdf_template_id=message.get("templateId"),
            )
            parsed = parse_statement(content, StatementFormat.PDF, options)
        except InfrastructureError:
            raise
        except Exception as e:
            logger.exception("Queued import %s failed before persisting", log_id)
            self._fail(log_id, str(e) or e.__class__.__name__, started_at)
            return ConsumeOutcome.ACKNOWLEDGED

        if not parsed:
            self._fail(log_id, "No transactions found in PDF", started_at)
            return ConsumeOutcome.ACKNOWLEDGED

        try:
            self.persistence.persist_transactions_from_import(
                tenant_id=tenant_id,
                account=account,
                default_category_id=message["defaultCategoryId"],
                parsed_transactions=parsed,
                log_id=log_id,
                started_at=started_at,
                check_duplicates=True,
            )
        except Exception as e:
            logger.exception("Queued import %s failed while persisting", log_id)
            reason = str(e) or e.__class__.__name__
            self._fail_quietly(log_id, f"Import interrupted: {reason}", started_at)

        return ConsumeOutcome.ACKNOWLEDGED

    def fail(self, message: Any, reason: str) -> None:
        """Mark the message's import log failed when its job is given up on."""
        if not self._is_valid(message):
            return
        log = self.db.get_import_log(message["logId"], message["tenantId"])
        if log is None or log.status.is_terminal:
            return
        self.db.finalize_import_log(
            log.id,
            ImportStatus.FAILED,
            error_message=f"Import abandoned after repeated failures: {reason or 'unknown error'}",
        )

    @staticmethod
    def _is_valid(message: Any) -> bool:
        if not isinstance(message, dict) or message.get("type") != PDF_IMPORT_MESSAGE_TYPE:
            logger.warning("Dropping message of unexpected type: %r", message)
            return False

        missing = [name for name in REQUIRED_FIELDS if not message.get(name)]
        if missing:
            logger.warning("Dropping pdf-import message missing %s", ", ".join(missing))
            return False
        return True

    def _fail(self, log_id: str, message: str, started_at: float) -> None:
        logger.error("Queued import %s failed: %s", log_id, message)
        self.db.finalize_import_log(
            log_id,
            ImportStatus.FAILED,
            error_message=message,
            processing_time_ms=elapsed_ms(started_at),
        )

    def _fail_quietly(self, log_id: str, message: str, started_at: float) -> None:
        try:
            self._fail(log_id, message, started_at)
        except Exception:
            logger.exception("Could not mark queued import %s as failed", log_id)
