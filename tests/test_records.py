"""Tests for the plain-dict record format."""

import json
import pytest
from datetime import date, datetime, UTC
from decimal import Decimal

from ledgerbook.database.records import (
    TRANSACTION_SCHEMA_VERSION,
    external_account_from_record,
    external_account_to_record,
    money_from_record,
    money_to_record,
    snapshot_from_record,
    snapshot_to_record,
    transaction_from_record,
    transaction_to_record,
)
from ledgerbook.domain.entities import (
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

NOW = datetime(2025, 10, 15, 12, 30, tzinfo=UTC)


@pytest.fixture
def transaction():
    usd = Money.from_major_units("100", "USD")
    mxn = Money.from_major_units("1750", "MXN")
    return Transaction(
        id="tx-1",
        date=date(2025, 10, 15),
        description="Freelance invoice",
        base_currency="MXN",
        postings=(
            Posting(
                "checking",
                original_debit=usd,
                booked_debit=mxn,
                exchange_rate=Decimal("17.50"),
                id="p-1",
                transaction_id="tx-1",
            ),
            Posting(
                "freelance",
                original_credit=usd,
                booked_credit=mxn,
                exchange_rate=Decimal("17.50"),
                description="October",
                id="p-2",
                transaction_id="tx-1",
            ),
        ),
        created_at=NOW,
        updated_at=NOW,
        sequence=7,
        memo="net 30",
        reference="INV-42",
        tags=("work",),
    )


class TestMoneyRecord:
    """Tests for money serialization."""

    def test_money_is_minor_units_and_code(self):
        assert money_to_record(Money(123456, "MXN")) == {"amount_minor": 123456, "currency": "MXN"}

    def test_none_passes_through(self):
        assert money_to_record(None) is None
        assert money_from_record(None) is None


class TestTransactionRecord:
    """Tests for transaction records."""

    def test_record_shape(self, transaction):
        record = transaction_to_record(transaction)

        assert record["schema_version"] == TRANSACTION_SCHEMA_VERSION
        assert record["date"] == "2025-10-15"
        assert record["tags"] == ["work"]
        assert record["postings"][0] == {
            "id": "p-1",
            "account_id": "checking",
            "side": "debit",
            "original": {"amount_minor": 10000, "currency": "USD"},
            "booked": {"amount_minor": 175000, "currency": "MXN"},
            "exchange_rate": "17.50",
            "description": None,
        }

    def test_record_is_json_serializable(self, transaction):
        record = transaction_to_record(transaction)
        assert transaction_from_record(json.loads(json.dumps(record))) == transaction

    def test_unknown_schema_version(self, transaction):
        record = transaction_to_record(transaction)
        record["schema_version"] = TRANSACTION_SCHEMA_VERSION + 1
        with pytest.raises(ValidationError, match="schema version"):
            transaction_from_record(record)

    def test_missing_schema_version(self, transaction):
        record = transaction_to_record(transaction)
        del record["schema_version"]
        with pytest.raises(ValidationError):
            transaction_from_record(record)

    def test_naive_timestamps_read_as_utc(self, transaction):
        record = transaction_to_record(transaction)
        record["created_at"] = "2025-10-15T12:30:00"
        assert transaction_from_record(record).created_at == NOW


class TestExternalAccountRecord:
    """Tests for external account records."""

    def test_optional_fields(self):
        account = ExternalAccount(
            id="ext-1",
            name="Visa",
            type=ExternalAccountType.CREDIT_CARD,
            balance=Money.from_major_units("-3200.50", "MXN"),
            last_updated=NOW,
            estimated_yield=Decimal("0.035"),
            due_date=date(2025, 11, 20),
            recurring_due_date=20,
            min_monthly_payment=Money.from_major_units("500", "MXN"),
        )
        record = external_account_to_record(account)

        assert record["type"] == "credit-card"
        assert record["estimated_yield"] == "0.035"
        assert record["payment_to_avoid_interest"] is None
        assert external_account_from_record(record) == account


class TestSnapshotRecord:
    """Tests for snapshot records."""

    def test_snapshot_record(self):
        checking = Money.from_major_units("100", "MXN")
        snapshot = NetWorthSnapshot(
            month="2025-10",
            net_worth=checking,
            totals_by_nature={AccountNature.ASSET: checking},
            account_snapshots=(
                AccountSnapshot("checking", "Checking", "ledger", AccountNature.ASSET, checking, checking),
            ),
            created_at=NOW,
        )
        record = snapshot_to_record(snapshot)

        assert record["totals_by_nature"] == {"asset": {"amount_minor": 10000, "currency": "MXN"}}
        assert snapshot_from_record(record) == snapshot
