"""Mapper functions to convert between domain models and SQLAlchemy models.

This layer isolates the conversion logic, so the import pipeline never sees
ORM rows or the storage encoding of enums and JSON columns.
"""

import json
from datetime import datetime, UTC
from decimal import Decimal
from typing import Optional

from bankimport.domain import entities as domain
from bankimport.database.models import (
    Account as ORMAccount,
    Category as ORMCategory,
    Transaction as ORMTransaction,
    ImportLog as ORMImportLog,
    QueuedJob as ORMQueuedJob,
)


def _aware(value: Optional[datetime]) -> Optional[datetime]:
    """SQLite drops tzinfo; stored timestamps are always UTC."""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=UTC)


def account_to_domain(orm_account: ORMAccount) -> domain.Account:
    """Convert SQLAlchemy Account model to domain Account entity."""
    return domain.Account(
        id=orm_account.id,
        tenant_id=orm_account.tenant_id,
        name=orm_account.name,
        account_type=orm_account.account_type,
        balance=Decimal(orm_account.balance or 0),
        currency=orm_account.currency,
        created_at=_aware(orm_account.created_at),
        updated_at=_aware(orm_account.updated_at),
    )


def category_to_domain(orm_category: ORMCategory) -> domain.Category:
    """Convert SQLAlchemy Category model to domain Category entity."""
    return domain.Category(
        id=orm_category.id,
        tenant_id=orm_category.tenant_id,
        name=orm_category.name,
        type=domain.TransactionType(orm_category.type),
        color=orm_category.color,
        parent_id=orm_category.parent_id,
        created_at=_aware(orm_category.created_at),
    )


def transaction_to_domain(orm_transaction: ORMTransaction) -> domain.Transaction:
    """Convert SQLAlchemy Transaction model to domain Transaction entity."""
    return domain.Transaction(
        id=orm_transaction.id,
        tenant_id=orm_transaction.tenant_id,
        account_id=orm_transaction.account_id,
        category_id=orm_transaction.category_id,
        amount=Decimal(orm_transaction.amount),
        description=orm_transaction.description,
        date=orm_transaction.date,
        type=domain.TransactionType(orm_transaction.type),
        notes=orm_transaction.notes,
        provider_transaction_id=orm_transaction.provider_transaction_id,
        created_at=_aware(orm_transaction.created_at),
    )


def import_log_to_domain(orm_log: ORMImportLog) -> domain.ImportLog:
    """Convert SQLAlchemy ImportLog model to domain ImportLog entity."""
    return domain.ImportLog(
        id=orm_log.id,
        tenant_id=orm_log.tenant_id,
        user_id=orm_log.user_id,
        account_id=orm_log.account_id,
        file_name=orm_log.file_name,
        file_type=orm_log.file_type,
        file_size=orm_log.file_size,
        status=domain.ImportStatus(orm_log.status),
        transactions_total=orm_log.transactions_total or 0,
        transactions_imported=orm_log.transactions_imported or 0,
        transactions_failed=orm_log.transactions_failed or 0,
        error_message=orm_log.error_message,
        error_details=json.loads(orm_log.error_details) if orm_log.error_details else None,
        created_at=_aware(orm_log.created_at),
        completed_at=_aware(orm_log.completed_at),
        processing_time_ms=orm_log.processing_time_ms,
    )


def queued_job_to_domain(orm_job: ORMQueuedJob) -> domain.QueuedJob:
    """Convert SQLAlchemy QueuedJob model to domain QueuedJob entity."""
    return domain.QueuedJob(
        id=orm_job.id,
        payload=json.loads(orm_job.payload),
        attempts=orm_job.attempts,
    )
