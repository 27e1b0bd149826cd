"""Abstract job queue interface."""

from abc import ABC, abstractmethod
from typing import Optional

from bankimport.domain.entities import QueuedJob


class JobQueue(ABC):
    """At-least-once message queue for deferred imports."""

    @abstractmethod
    def send(self, message: dict) -> int:
        """Enqueue a JSON-serialisable message. Returns the job ID."""
        pass

    @abstractmethod
    def claim(self) -> Optional[QueuedJob]:
        """Take the next pending job, or None if the queue is empty."""
        pass

    @abstractmethod
    def ack(self, job_id: int) -> None:
        """Mark a claimed job as done."""
        pass

    @abstractmethod
    def release(self, job_id: int, error: str) -> None:
        """Return a claimed job to the queue for another delivery."""
        pass

    @abstractmethod
    def dead_letter(self, job_id: int, error: str) -> None:
        """Park a claimed job that will never be delivered again."""
        pass
