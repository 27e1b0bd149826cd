"""Tests for the background PDF import consumer."""

from decimal import Decimal
from unittest.mock import patch

import pytest

from bankimport.domain.entities import ImportStatus
from bankimport.domain.errors import StorageUnavailableError, StoreUnavailableError
from bankimport.domain.queue_consumer import ConsumeOutcome, PdfImportConsumer
from bankimport.jobs.worker import QueueWorker

TENANT_ID = "tenant-1"


@pytest.fixture
def consumer(temp_db, storage, settings):
    return PdfImportConsumer(temp_db, storage, settings)


@pytest.fixture
def pending_import(temp_db, storage, sample_account, default_category):
    """Return a function that stores a PDF and builds its queue message."""

    def _pending(content: bytes, **overrides) -> dict:
        log = temp_db.create_import_log(
            TENANT_ID, "user-1", sample_account.id, "statement.pdf", "pdf", len(content)
        )
        file_key = f"imports/{TENANT_ID}/{sample_account.id}/{log.id}-1-statement.pdf"
        storage.put(file_key, content)
        message = {
            "type": "pdf-import",
            "tenantId": TENANT_ID,
            "accountId": sample_account.id,
            "logId": log.id,
            "fileKey": file_key,
            "defaultCategoryId": default_category.id,
            "userId": "user-1",
            "fileName": "statement.pdf",
        }
        message.update(overrides)
        return message

    return _pending


STATEMENT_LINES = [
    "Date Description Amount Balance",
    "01/02/2024 Coffee Shop -5.50 995.00",
    "02/02/2024 Salary 2000.00 2995.00",
]


def test_successful_import(consumer, temp_db, sample_account, pending_import, make_pdf):
    """A queued PDF is parsed and persisted."""
    message = pending_import(make_pdf(STATEMENT_LINES))

    assert consumer.handle(message) is ConsumeOutcome.ACKNOWLEDGED

    log = temp_db.get_import_log(message["logId"])
    assert log.status is ImportStatus.SUCCESS
    assert log.transactions_imported == 2
    assert temp_db.get_account(TENANT_ID, sample_account.id).balance == Decimal("2994.50")


def test_redelivery_after_success_is_acknowledged(consumer, temp_db, sample_account, pending_import, make_pdf):
    """A message for a finished log changes nothing."""
    message = pending_import(make_pdf(STATEMENT_LINES))
    consumer.handle(message)

    assert consumer.handle(message) is ConsumeOutcome.ACKNOWLEDGED

    assert len(temp_db.list_transactions(TENANT_ID)) == 2
    assert temp_db.get_account(TENANT_ID, sample_account.id).balance == Decimal("2994.50")


@pytest.mark.parametrize(
    "message",
    [
        None,
        "pdf-import",
        {"type": "csv-import"},
        {"type": "pdf-import", "tenantId": TENANT_ID},
    ],
)
def test_malformed_messages_are_dropped(consumer, message):
    """Messages of the wrong type or with missing fields are dropped."""
    assert consumer.handle(message) is ConsumeOutcome.DROPPED


def test_unknown_log_is_dropped(consumer, pending_import, make_pdf):
    """A message for a log that does not exist is dropped."""
    message = pending_import(make_pdf(STATEMENT_LINES), logId="missing")

    assert consumer.handle(message) is ConsumeOutcome.DROPPED


def test_log_of_other_tenant_is_dropped(consumer, pending_import, make_pdf):
    """The log must belong to the message's tenant."""
    message = pending_import(make_pdf(STATEMENT_LINES), tenantId="tenant-2")

    assert consumer.handle(message) is ConsumeOutcome.DROPPED


def test_account_missing(consumer, temp_db, pending_import, make_pdf):
    """A deleted account fails the log."""
    message = pending_import(make_pdf(STATEMENT_LINES), accountId="gone")

    assert consumer.handle(message) is ConsumeOutcome.ACKNOWLEDGED

    log = temp_db.get_import_log(message["logId"])
    assert log.status is ImportStatus.FAILED
    assert log.error_message == "Account not found"


def test_file_missing(consumer, temp_db, storage, pending_import, make_pdf):
    """A file that vanished from storage fails the log."""
    message = pending_import(make_pdf(STATEMENT_LINES))
    storage.delete(message["fileKey"])

    assert consumer.handle(message) is ConsumeOutcome.ACKNOWLEDGED

    log = temp_db.get_import_log(message["logId"])
    assert log.status is ImportStatus.FAILED
    assert log.error_message == "File missing from storage"


def test_pdf_without_transactions(consumer, temp_db, pending_import, make_pdf):
    """A PDF with no recognisable rows fails the log."""
    message = pending_import(make_pdf(["Dear customer,", "Nothing to see here."]))

    assert consumer.handle(message) is ConsumeOutcome.ACKNOWLEDGED

    log = temp_db.get_import_log(message["logId"])
    assert log.status is ImportStatus.FAILED
    assert log.error_message == "No transactions found in PDF"


def test_corrupt_pdf(consumer, temp_db, pending_import):
    """Parse errors are recorded on the log and acknowledged."""
    message = pending_import(b"not a pdf")

    assert consumer.handle(message) is ConsumeOutcome.ACKNOWLEDGED

    log = temp_db.get_import_log(message["logId"])
    assert log.status is ImportStatus.FAILED
    assert log.error_message


def test_storage_outage_propagates(consumer, temp_db, storage, pending_import, make_pdf):
    """Infrastructure errors escape so the job is retried."""
    message = pending_import(make_pdf(STATEMENT_LINES))

    with patch.object(storage, "get", side_effect=StorageUnavailableError("offline")):
        with pytest.raises(StorageUnavailableError):
            consumer.handle(message)

    assert temp_db.get_import_log(message["logId"]).status is ImportStatus.PROCESSING


def test_template_from_message_is_used(consumer, temp_db, pending_import, make_pdf):
    """The templateId field selects the PDF layout."""
    content = make_pdf(
        [
            "10/12/2025 DIRECT DEPOSIT +2,345.67",
            "10/13/2025 CARD PURCHASE -23.45",
        ]
    )
    message = pending_import(content, templateId="us-generic")

    consumer.handle(message)

    log = temp_db.get_import_log(message["logId"])
    assert log.status is ImportStatus.SUCCESS
    assert log.transactions_imported == 2


def test_invalid_file_key_fails_log(consumer, temp_db, pending_import, make_pdf):
    """A file key storage rejects fails the log instead of leaving it processing."""
    message = pending_import(make_pdf(STATEMENT_LINES), fileKey="../outside.pdf")

    assert consumer.handle(message) is ConsumeOutcome.ACKNOWLEDGED

    log = temp_db.get_import_log(message["logId"])
    assert log.status is ImportStatus.FAILED
    assert "outside.pdf" in log.error_message


def test_fail_closes_processing_log(consumer, temp_db, pending_import, make_pdf):
    """fail marks a still-processing log failed and leaves finished ones alone."""
    message = pending_import(make_pdf(STATEMENT_LINES))

    consumer.fail(message, "storage offline")
    consumer.fail(message, "ignored")

    log = temp_db.get_import_log(message["logId"])
    assert log.status is ImportStatus.FAILED
    assert log.error_message == "Import abandoned after repeated failures: storage offline"


class TestWorkerDelivery:
    """The consumer driven by the queue worker."""

    def test_store_failure_while_persisting_is_not_retried(
        self, consumer, queue, temp_db, sample_account, pending_import, make_pdf
    ):
        """Rows written before a store failure are never imported twice."""
        message = pending_import(make_pdf(STATEMENT_LINES))
        job_id = queue.send(message)
        original = temp_db.finalize_import_log
        calls = []

        def flaky(*args, **kwargs):
            calls.append(args)
            if len(calls) == 1:
                raise StoreUnavailableError("store down")
            return original(*args, **kwargs)

        with patch.object(temp_db, "finalize_import_log", side_effect=flaky):
            processed = QueueWorker(queue, consumer, max_attempts=3).run()

        assert processed == 1
        assert queue.status(job_id) == "done"
        assert len(temp_db.list_transactions(TENANT_ID)) == 2
        assert temp_db.get_account(TENANT_ID, sample_account.id).balance == Decimal("2994.50")

        log = temp_db.get_import_log(message["logId"])
        assert log.status is ImportStatus.FAILED
        assert log.error_message == "Import interrupted: store down"

    def test_dead_lettered_job_fails_log(self, consumer, queue, temp_db, storage, pending_import, make_pdf):
        """When retries run out the import log ends up failed."""
        message = pending_import(make_pdf(STATEMENT_LINES))
        job_id = queue.send(message)

        with patch.object(storage, "get", side_effect=StorageUnavailableError("storage offline")):
            processed = QueueWorker(queue, consumer, max_attempts=2).run()

        assert processed == 2
        assert queue.status(job_id) == "dead"

        log = temp_db.get_import_log(message["logId"])
        assert log.status is ImportStatus.FAILED
        assert log.error_message == "Import abandoned after repeated failures: storage offline"
        assert temp_db.list_transactions(TENANT_ID) == []
