"""Tests for the category service."""

import random
import re

import pytest

from bankimport.domain.category import DEFAULT_CATEGORY_COLOR, DEFAULT_CATEGORY_NAME, random_color
from bankimport.domain.entities import TransactionType
from bankimport.domain.errors import NotFoundError

TENANT_ID = "tenant-1"


def test_default_category_is_created_once(category_service):
    """Uncategorized is created on first use and reused afterwards."""
    first = category_service.resolve_default_category(TENANT_ID)
    second = category_service.resolve_default_category(TENANT_ID)

    assert first.id == second.id
    assert first.name == DEFAULT_CATEGORY_NAME
    assert first.color == DEFAULT_CATEGORY_COLOR
    assert first.type is TransactionType.EXPENSE


def test_explicit_default_category(category_service):
    """A supplied default category must exist for the tenant."""
    chosen = category_service.get_or_create(TENANT_ID, "Imported", TransactionType.EXPENSE)

    assert category_service.resolve_default_category(TENANT_ID, chosen.id).id == chosen.id
    with pytest.raises(NotFoundError):
        category_service.resolve_default_category(TENANT_ID, "missing")
    with pytest.raises(NotFoundError):
        category_service.resolve_default_category("tenant-2", chosen.id)


def test_get_or_create_is_case_insensitive(category_service):
    """Existing categories are found regardless of case."""
    created = category_service.get_or_create(TENANT_ID, "Travel", TransactionType.EXPENSE)
    found = category_service.get_or_create(TENANT_ID, "travel", TransactionType.INCOME)

    assert found.id == created.id
    assert len(category_service.list_categories(TENANT_ID)) == 1


def test_random_color():
    """Generated colors are #rrggbb strings."""
    assert re.fullmatch(r"#[0-9a-f]{6}", random_color())
    assert random_color(random.Random(1)) == random_color(random.Random(1))
