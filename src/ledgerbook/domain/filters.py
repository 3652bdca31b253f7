"""Transaction filtering and ordering shared by the engine and backends."""

from typing import Iterable, Optional

from ledgerbook.domain.entities import Transaction, TransactionFilters


def matches_filters(transaction: Transaction, filters: Optional[TransactionFilters]) -> bool:
    """Return True if a transaction satisfies every criterion that is set."""
    if filters is None:
        return True
    if filters.date_from is not None and transaction.date < filters.date_from:
        return False
    if filters.date_to is not None and transaction.date > filters.date_to:
        return False
    if filters.account_ids:
        wanted = set(filters.account_ids)
        if not any(p.account_id in wanted for p in transaction.postings):
            return False
    if filters.description:
        if filters.description.lower() not in (transaction.description or "").lower():
            return False
    if filters.reference:
        if filters.reference.lower() not in (transaction.reference or "").lower():
            return False
    if filters.tags:
        if not set(filters.tags) & set(transaction.tags):
            return False
    return True


def sort_newest_first(transactions: Iterable[Transaction]) -> list[Transaction]:
    """Order by date descending, then creation order descending."""
    return sorted(transactions, key=lambda t: (t.date, t.sequence), reverse=True)
