"""Worker loop that delivers queued jobs to a consumer."""

import logging
from typing import Optional

from bankimport.domain.entities import QueuedJob
from bankimport.domain.errors import InfrastructureError
from bankimport.jobs.base import JobQueue

logger = logging.getLogger(__name__)


class QueueWorker:
    """Claims jobs one at a time and hands their payload to a consumer.

    The consumer is any object with ``handle(message)``. A normal return
    acknowledges the job. An InfrastructureError releases it for another
    delivery until ``max_attempts`` deliveries have been made, after which it
    is dead-lettered. Any other exception dead-letters immediately, since
    retrying cannot fix it. Consumers that also define
    ``fail(message, reason)`` are told about every dead-lettered job.
    """

    def __init__(self, queue: JobQueue, consumer, max_attempts: int = 3):
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.queue = queue
        self.consumer = consumer
        self.max_attempts = max_attempts

    def run_once(self) -> bool:
        """Process a single job.

        Returns:
            False if the queue was empty, True otherwise
        """
        job = self.queue.claim()
        if job is None:
            return False

        try:
            outcome = self.consumer.handle(job.payload)
        except InfrastructureError as e:
            if job.attempts >= self.max_attempts:
                logger.error(
                    "Job %d failed after %d attempt(s), dead-lettering: %s", job.id, job.attempts, e
                )
                self._dead_letter(job, str(e))
            else:
                logger.warning("Job %d failed on attempt %d, will retry: %s", job.id, job.attempts, e)
                self.queue.release(job.id, str(e))
            return True
        except Exception as e:
            logger.exception("Job %d raised an unexpected error, dead-lettering", job.id)
            self._dead_letter(job, str(e) or e.__class__.__name__)
            return True

        logger.info("Job %d %s", job.id, getattr(outcome, "value", outcome))
        self.queue.ack(job.id)
        return True

    def _dead_letter(self, job: QueuedJob, reason: str) -> None:
        self.queue.dead_letter(job.id, reason)
        fail = getattr(self.consumer, "fail", None)
        if fail is None:
            return
        try:
            fail(job.payload, reason)
        except Exception:
            # The store may still be down; the job stays parked either way
            logger.exception("Could not record the failure of job %d", job.id)

    def run(self, max_jobs: Optional[int] = None) -> int:
        """Process jobs until the queue is empty or max_jobs is reached.

        Returns:
            Number of jobs processed
        """
        processed = 0
        while max_jobs is None or processed < max_jobs:
            if not self.run_once():
                break
            processed += 1
        return processed
