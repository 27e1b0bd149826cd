"""Job queue factory functions."""

from typing import Optional

from bankimport.config import Settings
from bankimport.database.base import Database
from bankimport.jobs.base import JobQueue
from bankimport.jobs.database_queue import DatabaseJobQueue


def create_queue(settings: Settings, db: Database) -> Optional[JobQueue]:
    """Create the configured job queue, or None when queueing is disabled."""
    if not settings.queue_enabled:
        return None
    return DatabaseJobQueue(db)
