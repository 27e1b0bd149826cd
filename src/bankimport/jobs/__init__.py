"""Deferred import jobs: queue adapters and the worker loop."""

from bankimport.jobs.base import JobQueue
from bankimport.jobs.database_queue import DatabaseJobQueue
from bankimport.jobs.factories import create_queue
from bankimport.jobs.worker import QueueWorker

__all__ = ["DatabaseJobQueue", "JobQueue", "QueueWorker", "create_queue"]
