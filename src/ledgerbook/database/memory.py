"""In-memory database implementation, used for tests and ephemeral sessions."""

import logging
from typing import Optional

from ledgerbook.database.base import Database
from ledgerbook.database.records import (
    Record,
    external_account_from_record,
    external_account_to_record,
    snapshot_from_record,
    snapshot_to_record,
    transaction_from_record,
    transaction_to_record,
)
from ledgerbook.domain.entities import (
    Account,
    ExternalAccount,
    NetWorthSnapshot,
    Transaction,
    TransactionFilters,
)
from ledgerbook.domain.errors import (
    NotFoundError,
    account_not_found,
    external_account_not_found,
    snapshot_not_found,
    transaction_not_found,
)
from ledgerbook.domain.filters import matches_filters, sort_newest_first

logger = logging.getLogger(__name__)


class InMemoryDatabase(Database):
    """Database held in process memory.

    Transactions, external accounts and snapshots are stored as serialized
    records so that reads go through the same boundary as the durable
    backends.
    """

    def __init__(self):
        self._accounts: dict[str, dict[str, Account]] = {}
        self._transactions: dict[str, dict[str, Record]] = {}
        self._external_accounts: dict[str, dict[str, Record]] = {}
        self._snapshots: dict[str, dict[str, Record]] = {}

    def connect(self) -> None:
        pass

    def disconnect(self) -> None:
        pass

    def initialize_schema(self) -> None:
        pass

    # Account operations
    def load_accounts(self, owner_id: str) -> list[Account]:
        accounts = self._accounts.get(owner_id, {}).values()
        return sorted(accounts, key=lambda a: a.code)

    def save_account(self, owner_id: str, account: Account) -> None:
        self._accounts.setdefault(owner_id, {})[account.id] = account

    def delete_account(self, owner_id: str, account_id: str) -> None:
        accounts = self._accounts.get(owner_id, {})
        if account_id not in accounts:
            raise NotFoundError(account_not_found(account_id))
        del accounts[account_id]

    # Transaction operations
    def load_transactions(
        self, owner_id: str, filters: Optional[TransactionFilters] = None
    ) -> list[Transaction]:
        records = self._transactions.get(owner_id, {}).values()
        transactions = [transaction_from_record(r) for r in records]
        return sort_newest_first(t for t in transactions if matches_filters(t, filters))

    def save_transaction(self, owner_id: str, transaction: Transaction) -> None:
        record = transaction_to_record(transaction)
        self._transactions.setdefault(owner_id, {})[transaction.id] = record
        logger.debug("Stored transaction %s for %s", transaction.id, owner_id)

    def delete_transaction(self, owner_id: str, transaction_id: str) -> None:
        transactions = self._transactions.get(owner_id, {})
        if transaction_id not in transactions:
            raise NotFoundError(transaction_not_found(transaction_id))
        del transactions[transaction_id]

    # External account operations
    def load_external_accounts(self, owner_id: str) -> list[ExternalAccount]:
        records = self._external_accounts.get(owner_id, {}).values()
        return sorted((external_account_from_record(r) for r in records), key=lambda a: a.name)

    def save_external_account(self, owner_id: str, account: ExternalAccount) -> None:
        self._external_accounts.setdefault(owner_id, {})[account.id] = (
            external_account_to_record(account)
        )

    def delete_external_account(self, owner_id: str, account_id: str) -> None:
        accounts = self._external_accounts.get(owner_id, {})
        if account_id not in accounts:
            raise NotFoundError(external_account_not_found(account_id))
        del accounts[account_id]

    # Snapshot operations
    def load_snapshots(self, owner_id: str) -> list[NetWorthSnapshot]:
        records = self._snapshots.get(owner_id, {})
        return [snapshot_from_record(records[month]) for month in sorted(records)]

    def get_snapshot(self, owner_id: str, month: str) -> Optional[NetWorthSnapshot]:
        record = self._snapshots.get(owner_id, {}).get(month)
        if record is None:
            return None
        return snapshot_from_record(record)

    def save_snapshot(self, owner_id: str, snapshot: NetWorthSnapshot) -> None:
        self._snapshots.setdefault(owner_id, {})[snapshot.month] = snapshot_to_record(snapshot)

    def delete_snapshot(self, owner_id: str, month: str) -> None:
        snapshots = self._snapshots.get(owner_id, {})
        if month not in snapshots:
            raise NotFoundError(snapshot_not_found(month))
        del snapshots[month]
