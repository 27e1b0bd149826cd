"""Category domain service."""

import random
from typing import Optional

from bankimport.database.base import Database
from bankimport.domain.entities import Category, TransactionType
from bankimport.domain.errors import NotFoundError, category_not_found

DEFAULT_CATEGORY_NAME = "Uncategorized"
DEFAULT_CATEGORY_COLOR = "#999999"


def random_color(rng: Optional[random.Random] = None) -> str:
    """Return a random ``#rrggbb`` color for an auto-created category."""
    rng = rng or random
    return f"#{rng.randrange(0x1000000):06x}"


class CategoryService:
    """Service for looking up and creating categories."""

    def __init__(self, db: Database):
        """Initialize category service.

        Args:
            db: Database instance
        """
        self.db = db

    def get_or_create(
        self,
        tenant_id: str,
        name: str,
        category_type: TransactionType = TransactionType.EXPENSE,
        color: Optional[str] = None,
    ) -> Category:
        """Return the tenant's category with this name, creating it if needed.

        Names match case-insensitively. Creation goes through the store's
        upsert, so a concurrent creator of the same name wins harmlessly.
        """
        existing = self.db.get_category_by_name(tenant_id, name)
        if existing is not None:
            return existing
        return self.db.create_category(
            tenant_id=tenant_id,
            name=name,
            category_type=category_type,
            color=color or random_color(),
        )

    def resolve_default_category(self, tenant_id: str, default_category_id: Optional[str] = None) -> Category:
        """Resolve the category used for records without a category hint.

        Args:
            tenant_id: Tenant ID
            default_category_id: Category chosen by the caller, if any

        Returns:
            The chosen category, or the tenant's "Uncategorized" category

        Raises:
            NotFoundError: If a chosen category does not exist for the tenant
        """
        if default_category_id:
            category = self.db.get_category(tenant_id, default_category_id)
            if category is None:
                raise NotFoundError(category_not_found(default_category_id))
            return category

        return self.get_or_create(
            tenant_id,
            DEFAULT_CATEGORY_NAME,
            category_type=TransactionType.EXPENSE,
            color=DEFAULT_CATEGORY_COLOR,
        )

    def list_categories(self, tenant_id: str) -> list[Category]:
        return self.db.list_categories(tenant_id)
