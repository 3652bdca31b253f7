"""Mapper functions to convert between domain models and SQLAlchemy models.

This layer isolates the conversion logic so the table layout can change
without touching the domain entities.
"""

from datetime import datetime, UTC
from decimal import Decimal
from typing import Optional

from ledgerbook.domain import entities as domain
from ledgerbook.domain.errors import ValidationError
from ledgerbook.domain.money import Money
from ledgerbook.database.models import (
    Account as ORMAccount,
    ExternalAccount as ORMExternalAccount,
    Posting as ORMPosting,
    Snapshot as ORMSnapshot,
    Transaction as ORMTransaction,
)
from ledgerbook.database.records import (
    TRANSACTION_SCHEMA_VERSION,
    account_snapshot_from_record,
    account_snapshot_to_record,
    totals_from_record,
    totals_to_record,
)


def _aware(value: datetime) -> datetime:
    """SQLite drops tzinfo; stored timestamps are always UTC."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def _optional_money(amount_minor: Optional[int], currency: str) -> Optional[Money]:
    if amount_minor is None:
        return None
    return Money(amount_minor, currency)


def account_to_domain(orm_account: ORMAccount) -> domain.Account:
    """Convert SQLAlchemy Account model to domain Account entity."""
    return domain.Account(
        id=orm_account.id,
        code=orm_account.code,
        name=orm_account.name,
        nature=domain.AccountNature(orm_account.nature),
        is_active=orm_account.is_active,
        parent_id=orm_account.parent_id,
        description=orm_account.description,
        created_at=_aware(orm_account.created_at),
        updated_at=_aware(orm_account.updated_at),
    )


def apply_account(orm_account: ORMAccount, account: domain.Account) -> None:
    """Copy domain Account fields onto an ORM row."""
    orm_account.code = account.code
    orm_account.name = account.name
    orm_account.nature = account.nature.value
    orm_account.is_active = account.is_active
    orm_account.parent_id = account.parent_id
    orm_account.description = account.description
    orm_account.created_at = account.created_at
    orm_account.updated_at = account.updated_at


def posting_to_domain(orm_posting: ORMPosting) -> domain.Posting:
    """Convert SQLAlchemy Posting model to domain Posting entity."""
    original = Money(orm_posting.original_amount_minor, orm_posting.original_currency)
    booked = Money(orm_posting.booked_amount_minor, orm_posting.booked_currency)
    is_debit = orm_posting.side == domain.EntrySide.DEBIT.value
    return domain.Posting(
        id=orm_posting.id,
        transaction_id=orm_posting.transaction_id,
        account_id=orm_posting.account_id,
        original_debit=original if is_debit else None,
        original_credit=None if is_debit else original,
        booked_debit=booked if is_debit else None,
        booked_credit=None if is_debit else booked,
        exchange_rate=Decimal(orm_posting.exchange_rate)
        if orm_posting.exchange_rate is not None
        else None,
        description=orm_posting.description,
    )


def posting_to_orm(posting: domain.Posting, position: int) -> ORMPosting:
    """Convert domain Posting entity to a new SQLAlchemy Posting row."""
    return ORMPosting(
        id=posting.id,
        position=position,
        account_id=posting.account_id,
        side=posting.side.value,
        original_amount_minor=posting.original.amount_minor,
        original_currency=posting.original.currency,
        booked_amount_minor=posting.booked.amount_minor,
        booked_currency=posting.booked.currency,
        exchange_rate=str(posting.exchange_rate) if posting.exchange_rate is not None else None,
        description=posting.description,
    )


def transaction_to_domain(orm_transaction: ORMTransaction) -> domain.Transaction:
    """Convert SQLAlchemy Transaction model to domain Transaction entity.

    Raises:
        ValidationError: If the row was written with an unknown schema version
    """
    if orm_transaction.schema_version != TRANSACTION_SCHEMA_VERSION:
        raise ValidationError(
            "Unsupported transaction record schema version: "
            f"{orm_transaction.schema_version!r}"
        )
    return domain.Transaction(
        id=orm_transaction.id,
        date=orm_transaction.date,
        description=orm_transaction.description,
        base_currency=orm_transaction.base_currency,
        memo=orm_transaction.memo,
        reference=orm_transaction.reference,
        tags=tuple(orm_transaction.tags or ()),
        sequence=orm_transaction.sequence,
        created_at=_aware(orm_transaction.created_at),
        updated_at=_aware(orm_transaction.updated_at),
        postings=tuple(posting_to_domain(p) for p in orm_transaction.postings),
    )


def apply_transaction(orm_transaction: ORMTransaction, transaction: domain.Transaction) -> None:
    """Copy a domain Transaction onto an ORM row, replacing all postings."""
    orm_transaction.schema_version = TRANSACTION_SCHEMA_VERSION
    orm_transaction.sequence = transaction.sequence
    orm_transaction.date = transaction.date
    orm_transaction.description = transaction.description
    orm_transaction.base_currency = transaction.base_currency
    orm_transaction.memo = transaction.memo
    orm_transaction.reference = transaction.reference
    orm_transaction.tags = list(transaction.tags)
    orm_transaction.created_at = transaction.created_at
    orm_transaction.updated_at = transaction.updated_at
    orm_transaction.postings = [
        posting_to_orm(p, position) for position, p in enumerate(transaction.postings)
    ]


def external_account_to_domain(orm_account: ORMExternalAccount) -> domain.ExternalAccount:
    """Convert SQLAlchemy ExternalAccount model to domain ExternalAccount entity."""
    currency = orm_account.currency
    return domain.ExternalAccount(
        id=orm_account.id,
        name=orm_account.name,
        type=domain.ExternalAccountType(orm_account.type),
        balance=Money(orm_account.balance_minor, currency),
        exclude_from_total=orm_account.exclude_from_total,
        estimated_yield=Decimal(orm_account.estimated_yield)
        if orm_account.estimated_yield is not None
        else None,
        due_date=orm_account.due_date,
        recurring_due_date=orm_account.recurring_due_date,
        is_paid_this_month=orm_account.is_paid_this_month,
        last_paid_date=orm_account.last_paid_date,
        min_monthly_payment=_optional_money(orm_account.min_monthly_payment_minor, currency),
        payment_to_avoid_interest=_optional_money(
            orm_account.payment_to_avoid_interest_minor, currency
        ),
        last_updated=_aware(orm_account.last_updated),
    )


def apply_external_account(
    orm_account: ORMExternalAccount, account: domain.ExternalAccount
) -> None:
    """Copy domain ExternalAccount fields onto an ORM row."""
    orm_account.name = account.name
    orm_account.type = account.type.value
    orm_account.balance_minor = account.balance.amount_minor
    orm_account.currency = account.balance.currency
    orm_account.exclude_from_total = account.exclude_from_total
    orm_account.estimated_yield = (
        str(account.estimated_yield) if account.estimated_yield is not None else None
    )
    orm_account.due_date = account.due_date
    orm_account.recurring_due_date = account.recurring_due_date
    orm_account.is_paid_this_month = account.is_paid_this_month
    orm_account.last_paid_date = account.last_paid_date
    orm_account.min_monthly_payment_minor = (
        account.min_monthly_payment.amount_minor if account.min_monthly_payment else None
    )
    orm_account.payment_to_avoid_interest_minor = (
        account.payment_to_avoid_interest.amount_minor
        if account.payment_to_avoid_interest
        else None
    )
    orm_account.last_updated = account.last_updated


def snapshot_to_domain(orm_snapshot: ORMSnapshot) -> domain.NetWorthSnapshot:
    """Convert SQLAlchemy Snapshot model to domain NetWorthSnapshot entity."""
    return domain.NetWorthSnapshot(
        month=orm_snapshot.month,
        net_worth=Money(orm_snapshot.net_worth_minor, orm_snapshot.currency),
        totals_by_nature=totals_from_record(orm_snapshot.totals_by_nature),
        account_snapshots=tuple(
            account_snapshot_from_record(r) for r in orm_snapshot.account_snapshots
        ),
        created_at=_aware(orm_snapshot.created_at),
    )


def apply_snapshot(orm_snapshot: ORMSnapshot, snapshot: domain.NetWorthSnapshot) -> None:
    """Copy domain NetWorthSnapshot fields onto an ORM row."""
    orm_snapshot.net_worth_minor = snapshot.net_worth.amount_minor
    orm_snapshot.currency = snapshot.net_worth.currency
    orm_snapshot.totals_by_nature = totals_to_record(snapshot.totals_by_nature)
    orm_snapshot.account_snapshots = [
        account_snapshot_to_record(a) for a in snapshot.account_snapshots
    ]
    orm_snapshot.created_at = snapshot.created_at
