"""Account domain service."""

from decimal import Decimal, InvalidOperation
from typing import Optional

from bankimport.database.base import Database
from bankimport.domain.entities import Account as AccountEntity
from bankimport.domain.errors import NotFoundError, ValidationError, account_not_found


class AccountService:
    """Service for the accounts that imports post into.

    Account management belongs to another part of the product; this is the
    small surface the import pipeline and the local CLI need.
    """

    def __init__(self, db: Database):
        """Initialize account service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_account(
        self,
        tenant_id: str,
        name: str,
        account_type: str = "current",
        currency: str = "GBP",
        balance: Decimal | str = Decimal("0"),
    ) -> str:
        """Create a new account.

        Args:
            tenant_id: Owning tenant
            name: Account name
            account_type: Free-form account type (current, savings, ...)
            currency: ISO currency code
            balance: Opening balance

        Returns:
            Account ID

        Raises:
            ValidationError: If the name is empty, the tenant already has an
                account with that name, or the balance is not a number
        """
        name = name.strip()
        if not name:
            raise ValidationError("Account name is required")

        for acc in self.db.list_accounts(tenant_id):
            if acc.name == name:
                raise ValidationError(f"Account with name '{name}' already exists")

        try:
            opening = Decimal(str(balance))
        except InvalidOperation as e:
            raise ValidationError(f"Invalid balance: {balance}") from e

        return self.db.create_account(
            tenant_id=tenant_id,
            name=name,
            account_type=account_type,
            currency=currency.upper(),
            balance=opening,
        )

    def get_account(self, tenant_id: str, account_id: str) -> Optional[AccountEntity]:
        """Get account by ID, or None if the tenant has no such account."""
        return self.db.get_account(tenant_id, account_id)

    def require_account(self, tenant_id: str, account_id: str) -> AccountEntity:
        """Get account by ID.

        Raises:
            NotFoundError: If the tenant has no such account
        """
        account = self.db.get_account(tenant_id, account_id)
        if account is None:
            raise NotFoundError(account_not_found(account_id))
        return account

    def list_accounts(self, tenant_id: str) -> list[AccountEntity]:
        """List all accounts of a tenant."""
        return self.db.list_accounts(tenant_id)
