"""Plain-dict record format for domain entities.

This is the serialization boundary: the in-memory backend, JSON export and
the snapshot table all store these records. Money is always an
``{"amount_minor": int, "currency": str}`` pair, never a float.
"""

from datetime import datetime, date, UTC
from decimal import Decimal
from typing import Any, Optional

from ledgerbook.domain.entities import (
    Account,
    AccountNature,
    AccountSnapshot,
    ExternalAccount,
    ExternalAccountType,
    NetWorthSnapshot,
    Posting,
    Transaction,
)
from ledgerbook.domain.errors import ValidationError
from ledgerbook.domain.money import Money

TRANSACTION_SCHEMA_VERSION = 1

Record = dict[str, Any]


def _date_to_str(value: Optional[date]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def _date_from_str(value: Optional[str]) -> Optional[date]:
    return date.fromisoformat(value) if value else None


def _datetime_from_str(value: str) -> datetime:
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def _decimal_to_str(value: Optional[Decimal]) -> Optional[str]:
    return str(value) if value is not None else None


def _decimal_from_str(value: Optional[str]) -> Optional[Decimal]:
    return Decimal(value) if value is not None else None


def money_to_record(money: Optional[Money]) -> Optional[Record]:
    if money is None:
        return None
    return {"amount_minor": money.amount_minor, "currency": money.currency}


def money_from_record(record: Optional[Record]) -> Optional[Money]:
    if record is None:
        return None
    return Money.from_minor_units(record["amount_minor"], record["currency"])


def posting_to_record(posting: Posting) -> Record:
    return {
        "id": posting.id,
        "account_id": posting.account_id,
        "side": posting.side.value,
        "original": money_to_record(posting.original),
        "booked": money_to_record(posting.booked),
        "exchange_rate": _decimal_to_str(posting.exchange_rate),
        "description": posting.description,
    }


def posting_from_record(record: Record, transaction_id: Optional[str] = None) -> Posting:
    original = money_from_record(record["original"])
    booked = money_from_record(record["booked"])
    is_debit = record["side"] == "debit"
    return Posting(
        id=record.get("id"),
        transaction_id=transaction_id,
        account_id=record["account_id"],
        original_debit=original if is_debit else None,
        original_credit=None if is_debit else original,
        booked_debit=booked if is_debit else None,
        booked_credit=None if is_debit else booked,
        exchange_rate=_decimal_from_str(record.get("exchange_rate")),
        description=record.get("description"),
    )


def transaction_to_record(transaction: Transaction) -> Record:
    """Serialize a transaction with the current record schema."""
    return {
        "schema_version": TRANSACTION_SCHEMA_VERSION,
        "id": transaction.id,
        "date": transaction.date.isoformat(),
        "description": transaction.description,
        "base_currency": transaction.base_currency,
        "memo": transaction.memo,
        "reference": transaction.reference,
        "tags": list(transaction.tags),
        "sequence": transaction.sequence,
        "created_at": transaction.created_at.isoformat(),
        "updated_at": transaction.updated_at.isoformat(),
        "postings": [posting_to_record(p) for p in transaction.postings],
    }


def transaction_from_record(record: Record) -> Transaction:
    """Deserialize a transaction record.

    Raises:
        ValidationError: If the record uses an unknown schema version
    """
    version = record.get("schema_version")
    if version != TRANSACTION_SCHEMA_VERSION:
        raise ValidationError(f"Unsupported transaction record schema version: {version!r}")
    return Transaction(
        id=record["id"],
        date=date.fromisoformat(record["date"]),
        description=record["description"],
        base_currency=record["base_currency"],
        memo=record.get("memo"),
        reference=record.get("reference"),
        tags=tuple(record.get("tags") or ()),
        sequence=record["sequence"],
        created_at=_datetime_from_str(record["created_at"]),
        updated_at=_datetime_from_str(record["updated_at"]),
        postings=tuple(posting_from_record(p, record["id"]) for p in record["postings"]),
    )


def account_to_record(account: Account) -> Record:
    return {
        "id": account.id,
        "code": account.code,
        "name": account.name,
        "nature": account.nature.value,
        "is_active": account.is_active,
        "parent_id": account.parent_id,
        "description": account.description,
        "created_at": account.created_at.isoformat(),
        "updated_at": account.updated_at.isoformat(),
    }


def external_account_to_record(account: ExternalAccount) -> Record:
    return {
        "id": account.id,
        "name": account.name,
        "type": account.type.value,
        "balance": money_to_record(account.balance),
        "exclude_from_total": account.exclude_from_total,
        "estimated_yield": _decimal_to_str(account.estimated_yield),
        "due_date": _date_to_str(account.due_date),
        "recurring_due_date": account.recurring_due_date,
        "is_paid_this_month": account.is_paid_this_month,
        "last_paid_date": _date_to_str(account.last_paid_date),
        "min_monthly_payment": money_to_record(account.min_monthly_payment),
        "payment_to_avoid_interest": money_to_record(account.payment_to_avoid_interest),
        "last_updated": account.last_updated.isoformat(),
    }


def external_account_from_record(record: Record) -> ExternalAccount:
    return ExternalAccount(
        id=record["id"],
        name=record["name"],
        type=ExternalAccountType(record["type"]),
        balance=money_from_record(record["balance"]),
        exclude_from_total=record.get("exclude_from_total", False),
        estimated_yield=_decimal_from_str(record.get("estimated_yield")),
        due_date=_date_from_str(record.get("due_date")),
        recurring_due_date=record.get("recurring_due_date"),
        is_paid_this_month=record.get("is_paid_this_month", False),
        last_paid_date=_date_from_str(record.get("last_paid_date")),
        min_monthly_payment=money_from_record(record.get("min_monthly_payment")),
        payment_to_avoid_interest=money_from_record(record.get("payment_to_avoid_interest")),
        last_updated=_datetime_from_str(record["last_updated"]),
    )


def account_snapshot_to_record(item: AccountSnapshot) -> Record:
    return {
        "account_id": item.account_id,
        "account_name": item.account_name,
        "account_type": item.account_type,
        "nature": item.nature.value,
        "balance": money_to_record(item.balance),
        "balance_base": money_to_record(item.balance_base),
    }


def account_snapshot_from_record(record: Record) -> AccountSnapshot:
    return AccountSnapshot(
        account_id=record["account_id"],
        account_name=record["account_name"],
        account_type=record["account_type"],
        nature=AccountNature(record["nature"]),
        balance=money_from_record(record["balance"]),
        balance_base=money_from_record(record["balance_base"]),
    )


def totals_to_record(totals) -> Record:
    return {nature.value: money_to_record(amount) for nature, amount in totals.items()}


def totals_from_record(record: Record) -> dict[AccountNature, Money]:
    return {AccountNature(key): money_from_record(value) for key, value in record.items()}


def snapshot_to_record(snapshot: NetWorthSnapshot) -> Record:
    return {
        "month": snapshot.month,
        "net_worth": money_to_record(snapshot.net_worth),
        "totals_by_nature": totals_to_record(snapshot.totals_by_nature),
        "account_snapshots": [account_snapshot_to_record(a) for a in snapshot.account_snapshots],
        "created_at": snapshot.created_at.isoformat(),
    }


def snapshot_from_record(record: Record) -> NetWorthSnapshot:
    return NetWorthSnapshot(
        month=record["month"],
        net_worth=money_from_record(record["net_worth"]),
        totals_by_nature=totals_from_record(record["totals_by_nature"]),
        account_snapshots=tuple(
            account_snapshot_from_record(a) for a in record["account_snapshots"]
        ),
        created_at=_datetime_from_str(record["created_at"]),
    )
