"""Tests for the account service."""

from decimal import Decimal

import pytest

from bankimport.domain.errors import NotFoundError, ValidationError

TENANT_ID = "tenant-1"


def test_create_account(account_service):
    """Accounts are created with their opening balance."""
    account_id = account_service.create_account(
        TENANT_ID, "Checking", currency="usd", balance="250.75"
    )

    account = account_service.get_account(TENANT_ID, account_id)
    assert account.name == "Checking"
    assert account.currency == "USD"
    assert account.balance == Decimal("250.75")


def test_duplicate_name_rejected(account_service):
    """Names are unique within a tenant."""
    account_service.create_account(TENANT_ID, "Checking")

    with pytest.raises(ValidationError):
        account_service.create_account(TENANT_ID, "Checking")

    # Another tenant may reuse the name
    account_service.create_account("tenant-2", "Checking")


def test_invalid_input(account_service):
    """Empty names and non-numeric balances are rejected."""
    with pytest.raises(ValidationError):
        account_service.create_account(TENANT_ID, "   ")
    with pytest.raises(ValidationError):
        account_service.create_account(TENANT_ID, "Savings", balance="lots")


def test_require_account(account_service, sample_account):
    """Missing accounts raise NotFoundError."""
    assert account_service.require_account(TENANT_ID, sample_account.id) == sample_account

    with pytest.raises(NotFoundError):
        account_service.require_account(TENANT_ID, "missing")
    with pytest.raises(NotFoundError):
        account_service.require_account("tenant-2", sample_account.id)
