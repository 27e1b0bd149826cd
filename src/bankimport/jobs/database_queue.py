"""Job queue stored in the application database."""

import json

from sqlalchemy.exc import SQLAlchemyError

from bankimport.database.base import Database
from bankimport.domain.entities import QueuedJob
from bankimport.domain.errors import InfrastructureError, QueueUnavailableError
from bankimport.jobs.base import JobQueue


class DatabaseJobQueue(JobQueue):
    """JobQueue backed by the ``queued_jobs`` table."""

    def __init__(self, db: Database):
        self.db = db

    def send(self, message: dict) -> int:
        try:
            # Fail early on payloads the worker could not decode
            json.dumps(message)
            return self.db.enqueue_job(message)
        except (TypeError, ValueError) as e:
            raise ValueError(f"Queue message is not JSON serialisable: {e}") from e
        except (InfrastructureError, SQLAlchemyError) as e:
            raise QueueUnavailableError(f"Could not enqueue message: {e}") from e

    def claim(self) -> QueuedJob | None:
        try:
            return self.db.claim_job()
        except (InfrastructureError, SQLAlchemyError) as e:
            raise QueueUnavailableError(f"Could not claim job: {e}") from e

    def ack(self, job_id: int) -> None:
        self.db.complete_job(job_id)

    def release(self, job_id: int, error: str) -> None:
        self.db.release_job(job_id, error)

    def dead_letter(self, job_id: int, error: str) -> None:
        self.db.release_job(job_id, error, dead=True)

    def status(self, job_id: int) -> str | None:
        """Queue status of a job: pending, processing, done or dead."""
        return self.db.get_job_status(job_id)
