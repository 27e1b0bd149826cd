"""Persist parsed statement transactions and finalize the import log."""

import logging
import time
from dataclasses import dataclass, field, replace
from decimal import Decimal
from typing import Optional

from bankimport.database.base import Database
from bankimport.domain.category import random_color
from bankimport.domain.entities import (
    Account,
    Category,
    ImportStatus,
    ParsedTransaction,
    Transaction,
)
from bankimport.domain.errors import record_failed

logger = logging.getLogger(__name__)


@dataclass
class ImportPersistenceResult:
    """Outcome of persisting one parsed statement."""

    final_status: ImportStatus
    imported_count: int
    skipped_count: int
    total: int
    created_transactions: list[Transaction] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    processing_time_ms: int = 0
    account_name: str = ""
    new_balance: Decimal = Decimal("0")


def derive_status(imported: int, skipped: int) -> ImportStatus:
    """Map run counts to the terminal import status."""
    if imported == 0 and skipped > 0:
        return ImportStatus.FAILED
    if imported > 0 and skipped > 0:
        return ImportStatus.PARTIAL
    return ImportStatus.SUCCESS


def elapsed_ms(started_at: float) -> int:
    """Milliseconds since a ``time.perf_counter()`` reading."""
    return int((time.perf_counter() - started_at) * 1000)


class ImportPersistenceService:
    """Service that writes parsed transactions one record at a time.

    Each record is its own store-level unit (insert plus balance increment),
    so a failure on one record never rolls back the ones before it.
    """

    def __init__(self, db: Database):
        """Initialize persistence service.

        Args:
            db: Database instance
        """
        self.db = db

    def persist_transactions_from_import(
        self,
        tenant_id: str,
        account: Account,
        default_category_id: str,
        parsed_transactions: list[ParsedTransaction],
        log_id: Optional[str],
        started_at: float,
        check_duplicates: bool = False,
    ) -> ImportPersistenceResult:
        """Persist transactions in source order.

        Args:
            tenant_id: Tenant the import belongs to
            account: Account snapshot to post into
            default_category_id: Category for records without a hint
            parsed_transactions: Canonical transactions from a parser
            log_id: Import log to finalize, or None to skip finalizing
            started_at: ``time.perf_counter()`` value when the import began
            check_duplicates: Skip records whose provider transaction ID is
                already stored for this account

        Returns:
            ImportPersistenceResult with counts, errors and the new balance
        """
        imported = 0
        skipped = 0
        duplicates = 0
        errors: list[str] = []
        created: list[Transaction] = []

        categories = self._category_cache(tenant_id)

        for parsed in parsed_transactions:
            try:
                if check_duplicates and parsed.provider_transaction_id:
                    existing = self.db.find_transaction_by_provider_id(
                        tenant_id, account.id, parsed.provider_transaction_id
                    )
                    if existing is not None:
                        logger.debug(
                            "Skipping duplicate transaction %s", parsed.provider_transaction_id
                        )
                        skipped += 1
                        duplicates += 1
                        continue

                category_id = self._resolve_category_id(
                    tenant_id, parsed, categories, default_category_id
                )
                transaction, new_balance = self.db.record_imported_transaction(
                    tenant_id, account.id, category_id, parsed
                )
            except Exception as e:
                message = record_failed(parsed.description, e)
                logger.warning(message)
                errors.append(message)
                skipped += 1
                continue

            account = replace(account, balance=new_balance)
            created.append(transaction)
            imported += 1

        final_status = derive_status(imported, skipped)
        processing_time_ms = elapsed_ms(started_at)

        if log_id is not None:
            self.db.finalize_import_log(
                log_id,
                final_status,
                transactions_total=len(parsed_transactions),
                transactions_imported=imported,
                transactions_failed=skipped,
                error_message=self._error_message(final_status, skipped, duplicates, errors),
                error_details=errors or None,
                processing_time_ms=processing_time_ms,
            )

        logger.info(
            "Imported %d of %d transaction(s) into account %s (%s)",
            imported,
            len(parsed_transactions),
            account.id,
            final_status.value,
        )

        return ImportPersistenceResult(
            final_status=final_status,
            imported_count=imported,
            skipped_count=skipped,
            total=len(parsed_transactions),
            created_transactions=created,
            errors=errors,
            processing_time_ms=processing_time_ms,
            account_name=account.name,
            new_balance=account.balance,
        )

    def _category_cache(self, tenant_id: str) -> dict[str, Category]:
        """Fetch the tenant's categories once, keyed by casefolded name."""
        return {cat.name.strip().casefold(): cat for cat in self.db.list_categories(tenant_id)}

    def _resolve_category_id(
        self,
        tenant_id: str,
        parsed: ParsedTransaction,
        categories: dict[str, Category],
        default_category_id: str,
    ) -> str:
        if not parsed.category or not parsed.category.strip():
            return default_category_id

        key = parsed.category.strip().casefold()
        category = categories.get(key)
        if category is None:
            category = self.db.create_category(
                tenant_id=tenant_id,
                name=parsed.category.strip(),
                category_type=parsed.type,
                color=random_color(),
            )
            categories[key] = category
        return category.id

    @staticmethod
    def _error_message(
        final_status: ImportStatus, skipped: int, duplicates: int, errors: list[str]
    ) -> Optional[str]:
        if errors:
            return f"{len(errors)} transaction(s) failed"
        if final_status == ImportStatus.FAILED:
            # Only duplicates were skipped
            return f"All {duplicates} transaction(s) were skipped as duplicates"
        return None
