"""Domain layer for bankimport.

Services are imported from their modules directly; this package only
re-exports the entities so that the database layer can import them without
a cycle.
"""

from bankimport.domain.entities import (
    Account,
    Category,
    ImportLog,
    ImportStatus,
    ParsedTransaction,
    QueuedJob,
    Transaction,
    TransactionType,
)

__all__ = [
    "Account",
    "Category",
    "ImportLog",
    "ImportStatus",
    "ParsedTransaction",
    "QueuedJob",
    "Transaction",
    "TransactionType",
]
