"""Abstract database interface."""

from abc import ABC, abstractmethod
from typing import Optional

# Import entities directly to avoid circular import through domain/__init__.py
from ledgerbook.domain.entities import (
    Account,
    ExternalAccount,
    NetWorthSnapshot,
    Transaction,
    TransactionFilters,
)


class Database(ABC):
    """Abstract persistence interface for ledgerbook.

    Every operation is scoped by ``owner_id``; one owner never sees
    another owner's rows.
    """

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    # Account operations
    @abstractmethod
    def load_accounts(self, owner_id: str) -> list[Account]:
        """Load all ledger accounts, ordered by code."""
        pass

    @abstractmethod
    def save_account(self, owner_id: str, account: Account) -> None:
        """Insert or replace a ledger account."""
        pass

    @abstractmethod
    def delete_account(self, owner_id: str, account_id: str) -> None:
        """Physically delete a ledger account. Raises NotFoundError if missing."""
        pass

    # Transaction operations
    @abstractmethod
    def load_transactions(
        self, owner_id: str, filters: Optional[TransactionFilters] = None
    ) -> list[Transaction]:
        """Load transactions with their postings, newest first."""
        pass

    @abstractmethod
    def save_transaction(self, owner_id: str, transaction: Transaction) -> None:
        """Insert or replace a transaction and its whole posting set atomically."""
        pass

    @abstractmethod
    def delete_transaction(self, owner_id: str, transaction_id: str) -> None:
        """Delete a transaction and its postings. Raises NotFoundError if missing."""
        pass

    # External account operations
    @abstractmethod
    def load_external_accounts(self, owner_id: str) -> list[ExternalAccount]:
        """Load external accounts, ordered by name."""
        pass

    @abstractmethod
    def save_external_account(self, owner_id: str, account: ExternalAccount) -> None:
        """Insert or replace an external account."""
        pass

    @abstractmethod
    def delete_external_account(self, owner_id: str, account_id: str) -> None:
        """Delete an external account. Raises NotFoundError if missing."""
        pass

    # Snapshot operations
    @abstractmethod
    def load_snapshots(self, owner_id: str) -> list[NetWorthSnapshot]:
        """Load month-end snapshots in ascending month order."""
        pass

    @abstractmethod
    def get_snapshot(self, owner_id: str, month: str) -> Optional[NetWorthSnapshot]:
        """Get the snapshot for a YYYY-MM month."""
        pass

    @abstractmethod
    def save_snapshot(self, owner_id: str, snapshot: NetWorthSnapshot) -> None:
        """Insert or replace the snapshot for its month."""
        pass

    @abstractmethod
    def delete_snapshot(self, owner_id: str, month: str) -> None:
        """Delete a snapshot. Raises NotFoundError if missing."""
        pass
