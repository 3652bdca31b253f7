"""External (net-worth) account domain service."""

import logging
import uuid
from dataclasses import replace
from datetime import date, datetime, UTC
from decimal import Decimal
from typing import Optional

from ledgerbook.database.base import Database
from ledgerbook.domain.entities import ExternalAccount, ExternalAccountType
from ledgerbook.domain.errors import (
    ConflictError,
    NotFoundError,
    ValidationError,
    external_account_not_found,
)
from ledgerbook.domain.money import Money

logger = logging.getLogger(__name__)

_UPDATABLE_FIELDS = {
    "name",
    "type",
    "estimated_yield",
    "due_date",
    "recurring_due_date",
    "is_paid_this_month",
    "last_paid_date",
    "min_monthly_payment",
    "payment_to_avoid_interest",
    "exclude_from_total",
}


class ExternalAccountService:
    """Service for managing hand-maintained external accounts."""

    def __init__(self, db: Database, owner_id: str):
        """Initialize external account service.

        Args:
            db: Database instance
            owner_id: Owner of the accounts
        """
        self.db = db
        self.owner_id = owner_id

    def _check_name(self, name: str, exclude_id: Optional[str] = None) -> str:
        if not name or not name.strip():
            raise ValidationError("Account name is required")
        name = name.strip()
        for acc in self.list_accounts():
            if acc.id != exclude_id and acc.name == name:
                raise ConflictError(f"External account with name '{name}' already exists")
        return name

    @staticmethod
    def _check_fields(account: ExternalAccount) -> None:
        if account.recurring_due_date is not None and not 1 <= account.recurring_due_date <= 31:
            raise ValidationError("Recurring due date must be a day between 1 and 31")
        for label, money in (
            ("Minimum monthly payment", account.min_monthly_payment),
            ("Payment to avoid interest", account.payment_to_avoid_interest),
        ):
            if money is not None and money.currency != account.currency:
                raise ValidationError(f"{label} must be in {account.currency}")

    def add_account(
        self,
        name: str,
        account_type: ExternalAccountType,
        balance: Money,
        exclude_from_total: bool = False,
        estimated_yield: Optional[Decimal] = None,
        due_date: Optional[date] = None,
        recurring_due_date: Optional[int] = None,
        min_monthly_payment: Optional[Money] = None,
        payment_to_avoid_interest: Optional[Money] = None,
    ) -> ExternalAccount:
        """Create an external account.

        Returns:
            The created account

        Raises:
            ValidationError: If the name is blank or fields are inconsistent
            ConflictError: If the name is already used
        """
        account = ExternalAccount(
            id=str(uuid.uuid4()),
            name=self._check_name(name),
            type=ExternalAccountType(account_type),
            balance=balance,
            last_updated=datetime.now(UTC),
            exclude_from_total=exclude_from_total,
            estimated_yield=estimated_yield,
            due_date=due_date,
            recurring_due_date=recurring_due_date,
            min_monthly_payment=min_monthly_payment,
            payment_to_avoid_interest=payment_to_avoid_interest,
        )
        self._check_fields(account)
        self.db.save_external_account(self.owner_id, account)
        logger.info("Added external account %s (%s)", account.id, account.name)
        return account

    def get_account(self, account_id: str) -> Optional[ExternalAccount]:
        for account in self.list_accounts():
            if account.id == account_id:
                return account
        return None

    def require_account(self, account_id: str) -> ExternalAccount:
        account = self.get_account(account_id)
        if account is None:
            raise NotFoundError(external_account_not_found(account_id))
        return account

    def list_accounts(self) -> list[ExternalAccount]:
        """List external accounts ordered by name."""
        return self.db.load_external_accounts(self.owner_id)

    def update_account(self, account_id: str, **changes) -> ExternalAccount:
        """Update metadata fields of an external account.

        Args:
            account_id: Account to update
            **changes: Any of name, type, estimated_yield, due_date,
                recurring_due_date, is_paid_this_month, last_paid_date,
                min_monthly_payment, payment_to_avoid_interest, exclude_from_total

        Raises:
            NotFoundError: If the account does not exist
            ValidationError: If an unknown field is given
        """
        unknown = set(changes) - _UPDATABLE_FIELDS
        if unknown:
            raise ValidationError(f"Cannot update fields: {', '.join(sorted(unknown))}")
        account = self.require_account(account_id)
        if "name" in changes:
            changes["name"] = self._check_name(changes["name"], exclude_id=account_id)
        if "type" in changes:
            changes["type"] = ExternalAccountType(changes["type"])
        updated = replace(account, last_updated=datetime.now(UTC), **changes)
        self._check_fields(updated)
        self.db.save_external_account(self.owner_id, updated)
        return updated

    def update_balance(self, account_id: str, balance: Money) -> ExternalAccount:
        """Replace the single balance figure of an external account.

        Raises:
            NotFoundError: If the account does not exist
            ValidationError: If the currency differs from the account's
        """
        account = self.require_account(account_id)
        if balance.currency != account.currency:
            raise ValidationError(
                f"Balance must be in {account.currency}, got {balance.currency}"
            )
        updated = replace(account, balance=balance, last_updated=datetime.now(UTC))
        self.db.save_external_account(self.owner_id, updated)
        logger.info("Updated balance of external account %s", account_id)
        return updated

    def toggle_exclude_from_total(self, account_id: str) -> ExternalAccount:
        account = self.require_account(account_id)
        return self.update_account(account_id, exclude_from_total=not account.exclude_from_total)

    def delete_account(self, account_id: str) -> None:
        self.db.delete_external_account(self.owner_id, account_id)
        logger.info("Deleted external account %s", account_id)
