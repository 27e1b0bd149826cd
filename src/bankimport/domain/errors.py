"""Shared domain error messages and error types."""


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling. ``code`` and ``http_status``
    are what the HTTP layer reports.
    """

    code = "DOMAIN_ERROR"
    http_status = 400


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""

    code = "VALIDATION_ERROR"


class UnsupportedFormatError(ValidationError):
    """The uploaded file's extension is not a supported statement format."""

    code = "UNSUPPORTED_FORMAT"


class ParseError(DomainError):
    """A statement file is structurally invalid for its format."""

    code = "PARSE_ERROR"


class EmptyResultError(DomainError):
    """A statement parsed cleanly but contained no transactions."""

    code = "EMPTY_FILE"


class NotFoundError(DomainError):
    """Requested domain entity does not exist for the tenant."""

    code = "NOT_FOUND"
    http_status = 404


class RecordImportError(DomainError):
    """A single transaction could not be persisted.

    Raised inside the persistence loop and recovered there; never surfaces
    as a request-level error.
    """

    code = "RECORD_FAILED"


class InfrastructureError(Exception):
    """A backing service is unreachable.

    These are the only errors that make a queued job retry.
    """

    code = "INTERNAL_ERROR"
    http_status = 500


class StorageUnavailableError(InfrastructureError):
    """Object storage could not be read or written."""

    code = "STORAGE_UNAVAILABLE"


class QueueUnavailableError(InfrastructureError):
    """The job queue could not accept or hand out messages."""

    code = "QUEUE_UNAVAILABLE"


class StoreUnavailableError(InfrastructureError):
    """The relational store could not be reached."""

    code = "STORE_UNAVAILABLE"


def account_not_found(account_id: str) -> str:
    """Return message for missing account."""
    return f"Account {account_id} not found"


def category_not_found(category_id: str) -> str:
    """Return message for missing category by ID."""
    return f"Category {category_id} not found"


def import_log_not_found(log_id: str) -> str:
    """Return message for missing import log."""
    return f"Import log {log_id} not found"


def unsupported_format(file_name: str, supported: list[str]) -> str:
    """Return message for an unrecognised file extension."""
    return (
        f"Unsupported file type for '{file_name}'. "
        f"Supported extensions: {', '.join(supported)}"
    )


def no_transactions_found(file_name: str) -> str:
    """Return message for a statement without recognisable transactions."""
    return f"No transactions found in file '{file_name}'"


def file_too_large(size: int, limit: int) -> str:
    """Return message for an upload over the size limit."""
    return f"File is too large ({size} bytes). Maximum size is {limit} bytes"


def record_failed(description: str, error: Exception | str) -> str:
    """Return the per-record failure line stored in import error details."""
    return f"Failed to import: {description} - {error}"
