"""Tests for the external account service."""

import pytest
from datetime import date
from decimal import Decimal

from ledgerbook.domain.entities import AccountNature, ExternalAccountType
from ledgerbook.domain.errors import ConflictError, NotFoundError, ValidationError
from ledgerbook.domain.money import Money


def mxn(amount: str) -> Money:
    return Money.from_major_units(amount, "MXN")


class TestExternalAccountService:
    """Tests for ExternalAccountService."""

    def test_add_account(self, external_service):
        account = external_service.add_account(
            "Broker", ExternalAccountType.INVESTMENT, mxn("50000"), estimated_yield=Decimal("0.08")
        )

        assert account.id
        assert account.name == "Broker"
        assert account.currency == "MXN"
        assert account.estimated_yield == Decimal("0.08")
        assert not account.exclude_from_total
        assert external_service.get_account(account.id) == account

    def test_type_accepts_string_value(self, external_service):
        account = external_service.add_account("Visa", "credit-card", mxn("-100"))
        assert account.type == ExternalAccountType.CREDIT_CARD
        assert account.type.is_liability

    def test_name_is_stripped_and_required(self, external_service):
        account = external_service.add_account("  Wallet ", ExternalAccountType.CASH, mxn("10"))
        assert account.name == "Wallet"
        with pytest.raises(ValidationError, match="name is required"):
            external_service.add_account("   ", ExternalAccountType.CASH, mxn("10"))

    def test_duplicate_name(self, external_service):
        external_service.add_account("Broker", ExternalAccountType.INVESTMENT, mxn("1"))
        with pytest.raises(ConflictError, match="already exists"):
            external_service.add_account("Broker", ExternalAccountType.BANK, mxn("2"))

    def test_recurring_due_date_range(self, external_service):
        with pytest.raises(ValidationError, match="between 1 and 31"):
            external_service.add_account(
                "Visa", ExternalAccountType.CREDIT_CARD, mxn("0"), recurring_due_date=32
            )
        account = external_service.add_account(
            "Visa", ExternalAccountType.CREDIT_CARD, mxn("0"), recurring_due_date=31
        )
        assert account.recurring_due_date == 31

    def test_payment_currency_must_match(self, external_service):
        with pytest.raises(ValidationError, match="Minimum monthly payment"):
            external_service.add_account(
                "Visa",
                ExternalAccountType.CREDIT_CARD,
                mxn("-500"),
                min_monthly_payment=Money.from_major_units("10", "USD"),
            )

    def test_list_accounts_by_name(self, external_service):
        external_service.add_account("Zeta", ExternalAccountType.BANK, mxn("1"))
        external_service.add_account("Alpha", ExternalAccountType.BANK, mxn("1"))
        assert [a.name for a in external_service.list_accounts()] == ["Alpha", "Zeta"]

    def test_update_account(self, external_service):
        account = external_service.add_account("Visa", ExternalAccountType.CREDIT_CARD, mxn("-1"))
        updated = external_service.update_account(
            account.id, name="Visa Gold", due_date=date(2025, 11, 20), is_paid_this_month=True
        )

        assert updated.name == "Visa Gold"
        assert updated.due_date == date(2025, 11, 20)
        assert updated.is_paid_this_month
        assert updated.balance == account.balance
        assert external_service.require_account(account.id).name == "Visa Gold"

    def test_update_account_rejects_unknown_fields(self, external_service):
        account = external_service.add_account("Visa", ExternalAccountType.CREDIT_CARD, mxn("-1"))
        with pytest.raises(ValidationError, match="Cannot update fields: balance"):
            external_service.update_account(account.id, balance=mxn("5"))

    def test_update_account_name_conflict(self, external_service):
        external_service.add_account("Visa", ExternalAccountType.CREDIT_CARD, mxn("-1"))
        other = external_service.add_account("Amex", ExternalAccountType.CREDIT_CARD, mxn("-1"))
        with pytest.raises(ConflictError):
            external_service.update_account(other.id, name="Visa")
        external_service.update_account(other.id, name="Amex")

    def test_update_balance(self, external_service):
        account = external_service.add_account("Broker", ExternalAccountType.INVESTMENT, mxn("100"))
        updated = external_service.update_balance(account.id, mxn("125.50"))
        assert updated.balance == mxn("125.50")
        assert updated.last_updated >= account.last_updated

    def test_update_balance_currency_mismatch(self, external_service):
        account = external_service.add_account("Broker", ExternalAccountType.INVESTMENT, mxn("100"))
        with pytest.raises(ValidationError, match="Balance must be in MXN"):
            external_service.update_balance(account.id, Money.from_major_units("5", "USD"))

    def test_toggle_exclude_from_total(self, external_service):
        account = external_service.add_account("House", ExternalAccountType.PROPERTY, mxn("1"))
        assert external_service.toggle_exclude_from_total(account.id).exclude_from_total
        assert not external_service.toggle_exclude_from_total(account.id).exclude_from_total

    def test_delete_account(self, external_service):
        account = external_service.add_account("Broker", ExternalAccountType.INVESTMENT, mxn("1"))
        external_service.delete_account(account.id)
        assert external_service.get_account(account.id) is None

    def test_missing_account(self, external_service):
        with pytest.raises(NotFoundError):
            external_service.delete_account("missing")
        with pytest.raises(NotFoundError):
            external_service.update_balance("missing", mxn("1"))


class TestLedgerMirror:
    """Tests for mirroring external accounts into the ledger."""

    def test_sync_creates_account_with_same_id(self, engine, external_service):
        visa = external_service.add_account("Visa", ExternalAccountType.CREDIT_CARD, mxn("-1"))
        mirrored = engine.sync_external_account(visa)

        assert mirrored.id == visa.id
        assert mirrored.name == "Visa"
        assert mirrored.nature == AccountNature.LIABILITY
        assert mirrored.code.startswith("EXT-2")

    def test_sync_is_idempotent(self, engine, external_service):
        broker = external_service.add_account("Broker", ExternalAccountType.INVESTMENT, mxn("1"))
        first = engine.sync_external_account(broker)
        second = engine.sync_external_account(broker)
        assert first == second
        assert len([a for a in engine.list_accounts() if a.id == broker.id]) == 1

    def test_sync_applies_renames(self, engine, external_service):
        broker = external_service.add_account("Broker", ExternalAccountType.INVESTMENT, mxn("1"))
        engine.sync_external_account(broker)
        renamed = external_service.update_account(broker.id, name="Brokerage")
        assert engine.sync_external_account(renamed).name == "Brokerage"
