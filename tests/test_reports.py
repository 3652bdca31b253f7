"""Tests for report builders: net worth, P&L, cash flow, expenses, savings, month end."""

import pytest
from datetime import date
from decimal import Decimal

from ledgerbook.domain import builder
from ledgerbook.domain.chart import (
    ACTION_PAYDOWN,
    ACTION_REVIEW,
    SUBTYPE_OTHER,
    SUBTYPE_SAVINGS,
    AccountMetadata,
    get_account_metadata,
)
from ledgerbook.domain.classifiers import ESSENTIAL, IMPORTANT
from ledgerbook.domain.entities import AccountNature, ExternalAccountType
from ledgerbook.domain.errors import FxMissingError, ValidationError
from ledgerbook.domain.money import Money
from ledgerbook.domain.reports import (
    INFLOW,
    LEDGER_ACCOUNT_TYPE,
    OUTFLOW,
    SOURCE_EXPENSE,
    SOURCE_INCOME,
    SOURCE_TRANSFER,
    ReportService,
)

OCT_1 = date(2025, 10, 1)
OCT_31 = date(2025, 10, 31)


def mxn(amount: str) -> Money:
    return Money.from_major_units(amount, "MXN")


@pytest.fixture
def october(engine):
    """A month of typical activity in the default chart."""
    engine.add_transaction(builder.salary("checking", "salary", mxn("30000"), date(2025, 10, 1)))
    engine.add_transaction(builder.expense("housing", "checking", mxn("8000"), "Rent", date(2025, 10, 2)))
    engine.add_transaction(
        builder.credit_card_purchase("food", "credit-card", mxn("250"), "Groceries", date(2025, 10, 15))
    )
    engine.add_transaction(builder.transfer("checking", "savings", mxn("5000"), "Save", date(2025, 10, 20)))
    engine.add_transaction(
        builder.expense("entertainment", "checking", mxn("1000"), "Concert", date(2025, 10, 25))
    )
    return engine


class TestNetWorth:
    """Tests for net worth positions and totals."""

    def test_ledger_only(self, reports, october):
        nw = reports.get_net_worth_at(OCT_31)
        assert nw.total_assets == mxn("21000")
        assert nw.total_liabilities == mxn("250")
        assert nw.net_worth == mxn("20750")
        assert nw.external_assets.is_zero()

    def test_positions_skip_zero_and_non_balance_sheet_accounts(self, reports, october):
        positions = reports.get_net_worth_positions(OCT_31)
        assert {p.account_id for p in positions} == {"checking", "savings", "credit-card"}
        assert all(p.account_type == LEDGER_ACCOUNT_TYPE for p in positions)

    def test_external_accounts(self, reports, october, external_service):
        external_service.add_account("Broker", ExternalAccountType.INVESTMENT, mxn("50000"))
        external_service.add_account("Visa", ExternalAccountType.CREDIT_CARD, mxn("-3000"))
        external_service.add_account(
            "Car", ExternalAccountType.PROPERTY, mxn("200000"), exclude_from_total=True
        )

        nw = reports.get_net_worth_at(OCT_31)
        assert nw.external_assets == mxn("50000")
        assert nw.external_liabilities == mxn("3000")
        assert nw.net_worth == mxn("67750")

    def test_mirrored_account_counted_once(self, reports, engine, october, external_service):
        broker = external_service.add_account("Broker", ExternalAccountType.INVESTMENT, mxn("50000"))
        engine.sync_external_account(broker)
        engine.add_transaction(builder.transfer("checking", broker.id, mxn("1000"), "Fund", OCT_31))

        nw = reports.get_net_worth_at(OCT_31)
        assert nw.external_assets == mxn("50000")
        assert nw.ledger_assets == mxn("20000")

    def test_history_before_activity(self, reports, october):
        assert reports.get_net_worth_at(date(2025, 9, 30)).net_worth.is_zero()

    def test_display_currency(self, reports, october):
        nw = reports.get_net_worth_at(OCT_31, "USD")
        assert nw.currency == "USD"
        assert nw.net_worth == Money.from_major_units("1182.75", "USD")

    def test_missing_rate(self, reports, october):
        with pytest.raises(FxMissingError):
            reports.get_net_worth_at(OCT_31, "BTC")


class TestProfitAndLoss:
    """Tests for P&L and expense analysis."""

    def test_pl(self, reports, october):
        pl = reports.get_pl(OCT_1, OCT_31)
        assert pl.total_income == mxn("30000")
        assert pl.total_expenses == mxn("9250")
        assert pl.net_income == mxn("20750")

    def test_pl_uses_report_converter(self, engine, october, converter):
        reports = ReportService(engine, converter=converter)
        pl = reports.get_pl(OCT_1, OCT_31, "USD")
        assert pl.total_income == Money.from_major_units("1710", "USD")

    def test_expense_breakdown(self, reports, october):
        breakdown = reports.get_expense_breakdown(OCT_1, OCT_31)
        assert breakdown.total == mxn("9250")
        assert breakdown.essential == mxn("8250")
        assert breakdown.important.is_zero()
        assert breakdown.non_essential == mxn("1000")
        assert breakdown.average_daily == mxn("298.39")
        assert [line.account_id for line in breakdown.by_account] == [
            "housing",
            "entertainment",
            "food",
        ]
        assert breakdown.by_account[0].category == ESSENTIAL

    def test_custom_expense_classifier(self, engine, october):
        reports = ReportService(engine, expense_classifier=lambda account: IMPORTANT)
        breakdown = reports.get_expense_breakdown(OCT_1, OCT_31)
        assert breakdown.important == mxn("9250")
        assert breakdown.non_essential.is_zero()

    def test_savings_potential(self, reports, october):
        savings = reports.get_savings_potential(OCT_1, OCT_31)
        assert savings.net_savings == mxn("20750")
        assert savings.savings_rate.quantize(Decimal("0.0001")) == Decimal("0.6917")
        assert savings.potential_savings == mxn("300")
        assert savings.projected_monthly_savings == mxn("21050")
        assert savings.projected_yearly_savings == mxn("252600")
        assert savings.gap_to_target.is_zero()

    def test_savings_gap_to_target(self, reports, engine):
        engine.add_transaction(builder.salary("checking", "salary", mxn("10000"), OCT_1))
        engine.add_transaction(builder.expense("housing", "checking", mxn("9000"), "Rent", OCT_1))
        savings = reports.get_savings_potential(OCT_1, OCT_31)
        assert savings.gap_to_target == mxn("1000")

    def test_savings_without_income(self, reports):
        savings = reports.get_savings_potential(OCT_1, OCT_31)
        assert savings.savings_rate == Decimal(0)

    def test_current_month_helpers(self, reports, engine, october):
        engine.add_transaction(builder.salary("checking", "salary", mxn("1000"), date(2025, 11, 5)))
        assert reports.get_current_month_pl().total_income == mxn("1000")
        assert reports.get_current_month_cashflow().total_inflows == mxn("1000")
        assert reports.get_current_month_expense_breakdown().total.is_zero()
        assert reports.get_current_month_savings_potential().net_savings == mxn("1000")


class TestCashflow:
    """Tests for the cash flow statement."""

    def test_totals(self, reports, october):
        statement = reports.get_cashflow_statement(OCT_1, OCT_31)
        assert statement.total_inflows == mxn("35000")
        assert statement.total_outflows == mxn("14250")
        assert statement.net_cashflow == mxn("20750")

    def test_by_source(self, reports, october):
        by_source = reports.get_cashflow_statement(OCT_1, OCT_31).by_source
        assert by_source[SOURCE_INCOME].inflow == mxn("30000")
        assert by_source[SOURCE_EXPENSE].outflow == mxn("9250")
        assert by_source[SOURCE_TRANSFER].inflow == mxn("5000")
        assert by_source[SOURCE_TRANSFER].outflow == mxn("5000")

    def test_details_newest_first(self, reports, october):
        details = reports.get_cashflow_statement(OCT_1, OCT_31).details
        assert details[0].date == date(2025, 10, 25)
        assert details[0].direction == OUTFLOW
        assert details[-1].date == date(2025, 10, 1)
        assert details[-1].direction == INFLOW
        assert details[-1].account_name == "Checking Account"
        assert details[-1].counterparty_account_id == "salary"

    def test_custom_cash_classifier(self, engine, october):
        reports = ReportService(engine, cash_classifier=lambda account: account.id == "savings")
        statement = reports.get_cashflow_statement(OCT_1, OCT_31)
        assert statement.total_inflows == mxn("5000")
        assert statement.total_outflows.is_zero()

    def test_inverted_range(self, reports):
        with pytest.raises(ValidationError):
            reports.get_cashflow_statement(OCT_31, OCT_1)


class TestMonthEnd:
    """Tests for the month-end summary."""

    def test_summary(self, reports, october):
        summary = reports.get_month_end_summary(OCT_31)
        assert [item.account_id for item in summary.cash] == ["cash", "checking", "savings"]
        assert [item.account_id for item in summary.liabilities] == ["credit-card", "loan"]
        assert summary.total_cash == mxn("21000")
        assert summary.total_liabilities == mxn("250")
        assert summary.net_cash == mxn("20750")
        assert summary.liabilities[0].action == "paydown"
        assert summary.cash[0].action is None

    def test_mirrored_external_accounts_listed(self, reports, engine, october, external_service):
        visa = external_service.add_account("Visa", ExternalAccountType.CREDIT_CARD, mxn("-500"))
        engine.sync_external_account(visa)
        engine.add_transaction(
            builder.credit_card_purchase("shopping", visa.id, mxn("500"), "Shoes", OCT_31)
        )

        summary = reports.get_month_end_summary(OCT_31)
        item = next(i for i in summary.liabilities if i.account_id == visa.id)
        assert item.source == "external"
        assert item.balance == mxn("500")
        assert summary.total_liabilities == mxn("750")

    def test_external_without_mirror_ignored(self, reports, october, external_service):
        external_service.add_account("Visa", ExternalAccountType.CREDIT_CARD, mxn("-500"))
        summary = reports.get_month_end_summary(OCT_31)
        assert summary.total_liabilities == mxn("250")

    def test_liability_natures(self, engine):
        assert engine.require_account("loan").nature == AccountNature.LIABILITY

    def test_account_metadata(self):
        assert get_account_metadata("savings") == AccountMetadata("savings", SUBTYPE_SAVINGS, ACTION_REVIEW)
        assert get_account_metadata("credit-card").month_end_action == ACTION_PAYDOWN
        assert get_account_metadata("food") == AccountMetadata("food", SUBTYPE_OTHER)

