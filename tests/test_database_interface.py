"""Tests for the Database interface, run against every backend."""

import pytest
from datetime import date, datetime, UTC
from decimal import Decimal

from ledgerbook.domain import entities
from ledgerbook.domain.entities import (
    AccountNature,
    AccountSnapshot,
    ExternalAccount,
    ExternalAccountType,
    NetWorthSnapshot,
    Posting,
    Transaction,
    TransactionFilters,
)
from ledgerbook.domain.errors import NotFoundError
from ledgerbook.domain.ledger import LedgerEngine
from ledgerbook.domain.builder import TransactionBuilder
from ledgerbook.domain.money import Money

OWNER = "owner-a"
OTHER_OWNER = "owner-b"
NOW = datetime(2025, 10, 15, 9, 0, tzinfo=UTC)


def make_account(account_id, code, nature=AccountNature.ASSET, name=None):
    return entities.Account(
        id=account_id,
        code=code,
        name=name or account_id.title(),
        nature=nature,
        created_at=NOW,
        updated_at=NOW,
    )


def make_transaction(tx_id, day, debit, credit, amount_minor, sequence, **kwargs):
    money = Money(amount_minor, "MXN")
    return Transaction(
        id=tx_id,
        date=day,
        description=kwargs.pop("description", "Entry"),
        base_currency="MXN",
        postings=(
            Posting(debit, original_debit=money, booked_debit=money, id=f"{tx_id}-d", transaction_id=tx_id),
            Posting(credit, original_credit=money, booked_credit=money, id=f"{tx_id}-c", transaction_id=tx_id),
        ),
        created_at=NOW,
        updated_at=NOW,
        sequence=sequence,
        **kwargs,
    )


class TestAccounts:
    """Tests for ledger account storage."""

    def test_save_and_load(self, any_db):
        any_db.save_account(OWNER, make_account("savings", "1003"))
        any_db.save_account(OWNER, make_account("cash", "1001"))

        accounts = any_db.load_accounts(OWNER)

        assert [a.id for a in accounts] == ["cash", "savings"]
        assert all(isinstance(a, entities.Account) for a in accounts)
        assert accounts[0] == make_account("cash", "1001")

    def test_save_replaces(self, any_db):
        any_db.save_account(OWNER, make_account("cash", "1001"))
        any_db.save_account(OWNER, make_account("cash", "1001", name="Wallet"))
        accounts = any_db.load_accounts(OWNER)
        assert len(accounts) == 1
        assert accounts[0].name == "Wallet"

    def test_owners_are_isolated(self, any_db):
        any_db.save_account(OWNER, make_account("cash", "1001"))
        assert any_db.load_accounts(OTHER_OWNER) == []

    def test_delete(self, any_db):
        any_db.save_account(OWNER, make_account("cash", "1001"))
        any_db.delete_account(OWNER, "cash")
        assert any_db.load_accounts(OWNER) == []
        with pytest.raises(NotFoundError):
            any_db.delete_account(OWNER, "cash")


class TestTransactions:
    """Tests for transaction storage."""

    def test_save_and_load(self, any_db):
        transaction = make_transaction(
            "t1", date(2025, 10, 1), "checking", "salary", 3000000, 1, tags=("pay",), memo="Oct"
        )
        any_db.save_transaction(OWNER, transaction)

        loaded = any_db.load_transactions(OWNER)

        assert loaded == [transaction]

    def test_newest_first_with_sequence_ties(self, any_db):
        any_db.save_transaction(OWNER, make_transaction("a", date(2025, 10, 1), "food", "cash", 100, 1))
        any_db.save_transaction(OWNER, make_transaction("b", date(2025, 10, 5), "food", "cash", 100, 2))
        any_db.save_transaction(OWNER, make_transaction("c", date(2025, 10, 1), "food", "cash", 100, 3))

        assert [t.id for t in any_db.load_transactions(OWNER)] == ["b", "c", "a"]

    def test_replace_postings(self, any_db):
        any_db.save_transaction(OWNER, make_transaction("t1", date(2025, 10, 1), "food", "cash", 100, 1))
        any_db.save_transaction(OWNER, make_transaction("t1", date(2025, 10, 2), "housing", "checking", 500, 1))

        loaded = any_db.load_transactions(OWNER)

        assert len(loaded) == 1
        assert loaded[0].date == date(2025, 10, 2)
        assert {p.account_id for p in loaded[0].postings} == {"housing", "checking"}

    def test_filters(self, any_db):
        any_db.save_transaction(
            OWNER,
            make_transaction("a", date(2025, 9, 30), "food", "cash", 100, 1, description="Tacos"),
        )
        any_db.save_transaction(
            OWNER,
            make_transaction(
                "b", date(2025, 10, 2), "housing", "checking", 500, 2,
                description="Rent", reference="LEASE-1", tags=("home",),
            ),
        )

        def ids(**criteria):
            return [t.id for t in any_db.load_transactions(OWNER, TransactionFilters(**criteria))]

        assert ids(date_from=date(2025, 10, 1)) == ["b"]
        assert ids(date_to=date(2025, 9, 30)) == ["a"]
        assert ids(account_ids=("cash",)) == ["a"]
        assert ids(description="rent") == ["b"]
        assert ids(reference="lease") == ["b"]
        assert ids(tags=("home", "other")) == ["b"]

    def test_delete(self, any_db):
        any_db.save_transaction(OWNER, make_transaction("t1", date(2025, 10, 1), "food", "cash", 100, 1))
        any_db.delete_transaction(OWNER, "t1")
        assert any_db.load_transactions(OWNER) == []
        with pytest.raises(NotFoundError):
            any_db.delete_transaction(OWNER, "t1")

    def test_foreign_currency_postings(self, any_db):
        usd = Money(10000, "USD")
        mxn = Money(175000, "MXN")
        transaction = Transaction(
            id="fx",
            date=date(2025, 10, 15),
            description="Invoice",
            base_currency="MXN",
            postings=(
                Posting("checking", original_debit=usd, booked_debit=mxn,
                        exchange_rate=Decimal("17.50"), id="fx-d", transaction_id="fx"),
                Posting("freelance", original_credit=usd, booked_credit=mxn,
                        exchange_rate=Decimal("17.50"), id="fx-c", transaction_id="fx"),
            ),
            created_at=NOW,
            updated_at=NOW,
            sequence=1,
        )
        any_db.save_transaction(OWNER, transaction)
        assert any_db.load_transactions(OWNER)[0].postings == transaction.postings


class TestExternalAccounts:
    """Tests for external account storage."""

    def _account(self, account_id, name, **kwargs):
        return ExternalAccount(
            id=account_id,
            name=name,
            type=ExternalAccountType.BANK,
            balance=Money(100000, "MXN"),
            last_updated=NOW,
            **kwargs,
        )

    def test_save_load_delete(self, any_db):
        any_db.save_external_account(OWNER, self._account("2", "Zeta"))
        any_db.save_external_account(
            OWNER, self._account("1", "Alpha", due_date=date(2025, 11, 1), estimated_yield=Decimal("0.1"))
        )

        loaded = any_db.load_external_accounts(OWNER)
        assert [a.name for a in loaded] == ["Alpha", "Zeta"]
        assert loaded[0].estimated_yield == Decimal("0.1")
        assert loaded[0].due_date == date(2025, 11, 1)

        any_db.delete_external_account(OWNER, "1")
        assert [a.id for a in any_db.load_external_accounts(OWNER)] == ["2"]
        with pytest.raises(NotFoundError):
            any_db.delete_external_account(OWNER, "1")


class TestSnapshots:
    """Tests for snapshot storage."""

    def _snapshot(self, month, amount_minor):
        value = Money(amount_minor, "MXN")
        return NetWorthSnapshot(
            month=month,
            net_worth=value,
            totals_by_nature={AccountNature.ASSET: value},
            account_snapshots=(
                AccountSnapshot("cash", "Cash", "ledger", AccountNature.ASSET, value, value),
            ),
            created_at=NOW,
        )

    def test_one_per_month(self, any_db):
        any_db.save_snapshot(OWNER, self._snapshot("2025-10", 100))
        any_db.save_snapshot(OWNER, self._snapshot("2025-09", 50))
        any_db.save_snapshot(OWNER, self._snapshot("2025-10", 200))

        snapshots = any_db.load_snapshots(OWNER)
        assert [s.month for s in snapshots] == ["2025-09", "2025-10"]
        assert any_db.get_snapshot(OWNER, "2025-10") == self._snapshot("2025-10", 200)
        assert any_db.get_snapshot(OWNER, "2025-08") is None

    def test_delete(self, any_db):
        any_db.save_snapshot(OWNER, self._snapshot("2025-10", 100))
        any_db.delete_snapshot(OWNER, "2025-10")
        with pytest.raises(NotFoundError):
            any_db.delete_snapshot(OWNER, "2025-10")


class TestEngineReload:
    """Tests that the ledger survives a new engine over the same database."""

    def test_reload(self, any_db):
        engine = LedgerEngine(any_db, OWNER, "MXN")
        engine.initialize_default_accounts()
        engine.add_transaction(
            TransactionBuilder("Pay", "MXN", date(2025, 10, 1))
            .debit("checking", Money(100000, "MXN"))
            .credit("salary", Money(100000, "MXN"))
            .build()
        )
        second = engine.add_transaction(
            TransactionBuilder("Lunch", "MXN", date(2025, 10, 1))
            .debit("food", Money(2000, "MXN"))
            .credit("checking", Money(2000, "MXN"))
            .build()
        )

        reloaded = LedgerEngine(any_db, OWNER, "MXN")

        assert reloaded.get_account_balance("checking") == Money(98000, "MXN")
        assert reloaded.get_transactions()[0].id == second.id
        assert reloaded.initialize_default_accounts() == []
