"""Report builders layered on the ledger engine.

All amounts are converted to the report currency through a Converter. A
missing rate raises FxMissingError rather than silently counting as zero.
"""

from datetime import date
from decimal import Decimal
from typing import Callable, Optional

from ledgerbook.domain.chart import (
    ACTION_PAYDOWN,
    CASH_SUBTYPES,
    LIABILITY_SUBTYPES,
    SUBTYPE_CREDIT_CARD,
    SUBTYPE_OPERATING_CASH,
    get_account_metadata,
)
from ledgerbook.domain.classifiers import (
    ESSENTIAL,
    IMPORTANT,
    NON_ESSENTIAL,
    CashClassifier,
    ExpenseClassifier,
    categorize_expense,
    external_type_to_nature,
    is_cash_like_account,
)
from ledgerbook.domain.currencies import normalize_currency
from ledgerbook.domain.entities import (
    Account,
    AccountNature,
    AccountSnapshot,
    CashflowDetail,
    CashflowSourceTotals,
    CashflowStatement,
    ExpenseBreakdown,
    ExpenseLine,
    ExternalAccount,
    IncomeStatement,
    MonthEndItem,
    MonthEndSummary,
    NetWorth,
    SavingsPotential,
    TransactionFilters,
)
from ledgerbook.domain.errors import FxMissingError, ValidationError, fx_missing
from ledgerbook.domain.fx import Converter, convert_money
from ledgerbook.domain.ledger import LedgerEngine
from ledgerbook.domain.money import Money
from ledgerbook.utils.date_parser import month_bounds

LEDGER_ACCOUNT_TYPE = "ledger"

SOURCE_INCOME = "income"
SOURCE_EXPENSE = "expense"
SOURCE_TRANSFER = "transfer"

INFLOW = "inflow"
OUTFLOW = "outflow"

SAVINGS_REDUCTION_SHARE = Decimal("0.3")
TARGET_SAVINGS_RATE = Decimal("0.2")


class ReportService:
    """Service for building financial reports for one ledger owner."""

    def __init__(
        self,
        engine: LedgerEngine,
        converter: Optional[Converter] = None,
        cash_classifier: CashClassifier = is_cash_like_account,
        expense_classifier: ExpenseClassifier = categorize_expense,
        today: Callable[[], date] = date.today,
    ):
        """Initialize report service.

        Args:
            engine: Ledger engine to report on
            converter: Converter for non-base amounts; defaults to the engine's
            cash_classifier: Decides which accounts count as cash for cash flow
            expense_classifier: Groups expense accounts into essential/important/non_essential
            today: Clock used by the current-month helpers
        """
        self.engine = engine
        self.converter = converter if converter is not None else engine.converter
        self.cash_classifier = cash_classifier
        self.expense_classifier = expense_classifier
        self.today = today

    @property
    def base_currency(self) -> str:
        return self.engine.base_currency

    def _currency(self, currency: Optional[str]) -> str:
        return normalize_currency(currency or self.base_currency)

    def _convert(self, money: Money, currency: str) -> Money:
        if money.currency == currency:
            return money
        if self.converter is None:
            raise FxMissingError(fx_missing(money.currency, currency))
        return convert_money(self.converter, money, currency)

    def _external_accounts(self) -> list[ExternalAccount]:
        return self.engine.db.load_external_accounts(self.engine.owner_id)

    # Net worth

    def get_net_worth_positions(
        self, as_of: Optional[date] = None, currency: Optional[str] = None
    ) -> list[AccountSnapshot]:
        """Per-account positions that make up net worth.

        Ledger asset and liability accounts contribute their balance as of
        the date, except accounts mirrored from an external account, which
        are counted once through the external balance. External balances
        are current values and ignore ``as_of``. Liabilities carry a
        positive ``balance_base``.
        """
        currency = self._currency(currency)
        externals = self._external_accounts()
        mirrored = {e.id for e in externals}
        positions = []

        for entry in self.engine.get_all_account_balances(as_of):
            if entry.nature not in (AccountNature.ASSET, AccountNature.LIABILITY):
                continue
            if entry.account_id in mirrored or entry.balance.is_zero():
                continue
            positions.append(
                AccountSnapshot(
                    account_id=entry.account_id,
                    account_name=entry.name,
                    account_type=LEDGER_ACCOUNT_TYPE,
                    nature=entry.nature,
                    balance=entry.balance,
                    balance_base=self._convert(entry.balance, currency),
                )
            )

        for external in externals:
            if external.exclude_from_total:
                continue
            nature = external_type_to_nature(external.type)
            balance_base = self._convert(external.balance, currency)
            if nature == AccountNature.LIABILITY:
                balance_base = balance_base.abs()
            positions.append(
                AccountSnapshot(
                    account_id=external.id,
                    account_name=external.name,
                    account_type=external.type.value,
                    nature=nature,
                    balance=external.balance,
                    balance_base=balance_base,
                )
            )
        return positions

    def get_net_worth_at(
        self, as_of: Optional[date] = None, currency: Optional[str] = None
    ) -> NetWorth:
        """Assets minus liabilities across ledger and external accounts."""
        currency = self._currency(currency)
        as_of = as_of or self.today()
        zero = Money.zero(currency)
        totals = {
            (True, AccountNature.ASSET): zero,
            (True, AccountNature.LIABILITY): zero,
            (False, AccountNature.ASSET): zero,
            (False, AccountNature.LIABILITY): zero,
        }
        for position in self.get_net_worth_positions(as_of, currency):
            key = (position.account_type == LEDGER_ACCOUNT_TYPE, position.nature)
            totals[key] = totals[key].add(position.balance_base)

        ledger_assets = totals[(True, AccountNature.ASSET)]
        ledger_liabilities = totals[(True, AccountNature.LIABILITY)]
        external_assets = totals[(False, AccountNature.ASSET)]
        external_liabilities = totals[(False, AccountNature.LIABILITY)]
        total_assets = ledger_assets.add(external_assets)
        total_liabilities = ledger_liabilities.add(external_liabilities)
        return NetWorth(
            as_of=as_of,
            currency=currency,
            total_assets=total_assets,
            total_liabilities=total_liabilities,
            net_worth=total_assets.subtract(total_liabilities),
            ledger_assets=ledger_assets,
            ledger_liabilities=ledger_liabilities,
            external_assets=external_assets,
            external_liabilities=external_liabilities,
        )

    # Profit and loss

    def get_pl(
        self, from_date: date, to_date: date, currency: Optional[str] = None
    ) -> IncomeStatement:
        return self.engine.get_income_statement(
            from_date, to_date, self._currency(currency), self.converter
        )

    # Cash flow

    def _cash_accounts(self) -> dict[str, Account]:
        candidates = self.engine.get_accounts_by_nature(
            AccountNature.ASSET
        ) + self.engine.get_accounts_by_nature(AccountNature.LIABILITY)
        return {a.id: a for a in candidates if self.cash_classifier(a)}

    def _cashflow_source(self, non_cash_accounts: list[Optional[Account]]) -> str:
        for account in non_cash_accounts:
            if account is None:
                continue
            if account.nature == AccountNature.INCOME:
                return SOURCE_INCOME
            if account.nature == AccountNature.EXPENSE:
                return SOURCE_EXPENSE
            if account.nature == AccountNature.LIABILITY:
                return SOURCE_TRANSFER
        return SOURCE_TRANSFER

    def get_cashflow_statement(
        self, from_date: date, to_date: date, currency: Optional[str] = None
    ) -> CashflowStatement:
        """Money moving in and out of cash-like accounts over a date range.

        A debit to a cash-like account is an inflow and a credit is an
        outflow. Each movement is attributed to income, expense or transfer
        by the first non-cash counterparty in the transaction.
        """
        if from_date > to_date:
            raise ValidationError("Start date must be on or before end date")
        currency = self._currency(currency)
        zero = Money.zero(currency)
        cash_accounts = self._cash_accounts()

        total_inflows = zero
        total_outflows = zero
        by_source: dict[str, CashflowSourceTotals] = {}
        details = []

        transactions = self.engine.get_transactions(
            TransactionFilters(date_from=from_date, date_to=to_date)
        )
        for transaction in transactions:
            cash_postings = [p for p in transaction.postings if p.account_id in cash_accounts]
            if not cash_postings:
                continue
            non_cash_postings = [
                p for p in transaction.postings if p.account_id not in cash_accounts
            ]
            counterparty = non_cash_postings[0] if non_cash_postings else None
            source = self._cashflow_source(
                [self.engine.get_account(p.account_id) for p in non_cash_postings]
            )

            for posting in cash_postings:
                amount = self._convert(posting.booked, currency)
                entry = by_source.get(source, CashflowSourceTotals(zero, zero))
                if posting.booked_debit is not None:
                    direction = INFLOW
                    total_inflows = total_inflows.add(amount)
                    entry = CashflowSourceTotals(entry.inflow.add(amount), entry.outflow)
                else:
                    direction = OUTFLOW
                    total_outflows = total_outflows.add(amount)
                    entry = CashflowSourceTotals(entry.inflow, entry.outflow.add(amount))
                by_source[source] = entry
                details.append(
                    CashflowDetail(
                        transaction_id=transaction.id,
                        date=transaction.date,
                        description=transaction.description,
                        amount=amount,
                        direction=direction,
                        source=source,
                        account_id=posting.account_id,
                        account_name=cash_accounts[posting.account_id].name,
                        counterparty_account_id=counterparty.account_id if counterparty else None,
                    )
                )

        return CashflowStatement(
            from_date=from_date,
            to_date=to_date,
            currency=currency,
            total_inflows=total_inflows,
            total_outflows=total_outflows,
            net_cashflow=total_inflows.subtract(total_outflows),
            by_source=by_source,
            # Transactions arrive newest first; stable sort keeps that order within a day
            details=tuple(sorted(details, key=lambda d: d.date, reverse=True)),
        )

    # Expenses and savings

    def get_expense_breakdown(
        self, from_date: date, to_date: date, currency: Optional[str] = None
    ) -> ExpenseBreakdown:
        """Expenses grouped by account and by essential/important/non_essential."""
        pl = self.get_pl(from_date, to_date, currency)
        zero = Money.zero(pl.currency)
        categories = {ESSENTIAL: zero, IMPORTANT: zero, NON_ESSENTIAL: zero}
        lines = []
        for line in pl.expenses:
            account = self.engine.require_account(line.account_id)
            category = self.expense_classifier(account)
            categories[category] = categories.get(category, zero).add(line.amount)
            lines.append(ExpenseLine(line.account_id, line.name, category, line.amount))
        lines.sort(key=lambda item: item.amount.amount_minor, reverse=True)

        days = max(1, (to_date - from_date).days + 1)
        return ExpenseBreakdown(
            from_date=from_date,
            to_date=to_date,
            currency=pl.currency,
            total=pl.total_expenses,
            essential=categories[ESSENTIAL],
            important=categories[IMPORTANT],
            non_essential=categories[NON_ESSENTIAL],
            by_account=tuple(lines),
            average_daily=pl.total_expenses.divide(days),
        )

    def get_savings_potential(
        self, from_date: date, to_date: date, currency: Optional[str] = None
    ) -> SavingsPotential:
        """Savings rate for a period and how much trimming discretionary spend would add.

        Assumes 30% of non-essential spending could be saved and measures
        the gap to a 20% savings rate.
        """
        pl = self.get_pl(from_date, to_date, currency)
        breakdown = self.get_expense_breakdown(from_date, to_date, currency)
        zero = Money.zero(pl.currency)

        if pl.total_income.is_positive():
            savings_rate = Decimal(pl.net_income.amount_minor) / Decimal(
                pl.total_income.amount_minor
            )
        else:
            savings_rate = Decimal(0)

        potential = breakdown.non_essential.multiply(SAVINGS_REDUCTION_SHARE)
        projected_monthly = pl.net_income.add(potential)
        gap = pl.total_income.multiply(TARGET_SAVINGS_RATE).subtract(pl.net_income)
        if gap.is_negative():
            gap = zero

        return SavingsPotential(
            total_income=pl.total_income,
            total_expenses=pl.total_expenses,
            net_savings=pl.net_income,
            savings_rate=savings_rate,
            potential_savings=potential,
            projected_monthly_savings=projected_monthly,
            projected_yearly_savings=projected_monthly.multiply(12),
            target_savings_rate=TARGET_SAVINGS_RATE,
            gap_to_target=gap,
        )

    # Month end

    def get_month_end_summary(
        self, as_of: Optional[date] = None, currency: Optional[str] = None
    ) -> MonthEndSummary:
        """Cash on hand versus short-term liabilities, with suggested actions.

        External accounts that have an active ledger mirror are summarised
        first; well-known ledger accounts (cash, savings, credit card, loan)
        follow. Liability balances are reported as positive amounts.
        """
        currency = self._currency(currency)
        as_of = as_of or self.today()
        zero = Money.zero(currency)
        externals = self._external_accounts()
        external_ids = {e.id for e in externals}

        cash_items: list[MonthEndItem] = []
        liability_items: list[MonthEndItem] = []

        def balance_of(account_id: str, is_liability: bool) -> Money:
            balance = self._convert(self.engine.get_account_balance(account_id, as_of), currency)
            return balance.abs() if is_liability else balance

        for external in externals:
            ledger_account = self.engine.get_account(external.id)
            if ledger_account is None or not ledger_account.is_active:
                continue
            is_liability = external.type.is_liability
            item = MonthEndItem(
                account_id=external.id,
                name=external.name,
                balance=balance_of(external.id, is_liability),
                action=ACTION_PAYDOWN if is_liability else None,
                source="external",
                subtype=SUBTYPE_CREDIT_CARD if is_liability else SUBTYPE_OPERATING_CASH,
            )
            (liability_items if is_liability else cash_items).append(item)

        for account in self.engine.list_accounts(include_inactive=False):
            if account.id in external_ids:
                continue
            metadata = get_account_metadata(account.id)
            if metadata.subtype not in CASH_SUBTYPES + LIABILITY_SUBTYPES:
                continue
            is_liability = metadata.subtype in LIABILITY_SUBTYPES
            item = MonthEndItem(
                account_id=account.id,
                name=account.name,
                balance=balance_of(account.id, is_liability),
                action=metadata.month_end_action,
                source="ledger",
                subtype=metadata.subtype,
            )
            (liability_items if is_liability else cash_items).append(item)

        total_cash = zero
        for item in cash_items:
            total_cash = total_cash.add(item.balance)
        total_liabilities = zero
        for item in liability_items:
            total_liabilities = total_liabilities.add(item.balance)

        return MonthEndSummary(
            as_of=as_of,
            currency=currency,
            cash=tuple(cash_items),
            liabilities=tuple(liability_items),
            total_cash=total_cash,
            total_liabilities=total_liabilities,
            net_cash=total_cash.subtract(total_liabilities),
        )

    # Current-month conveniences

    def get_current_month_pl(self) -> IncomeStatement:
        return self.get_pl(*month_bounds(self.today()))

    def get_current_month_cashflow(self) -> CashflowStatement:
        return self.get_cashflow_statement(*month_bounds(self.today()))

    def get_current_month_expense_breakdown(self) -> ExpenseBreakdown:
        return self.get_expense_breakdown(*month_bounds(self.today()))

    def get_current_month_savings_potential(self) -> SavingsPotential:
        return self.get_savings_potential(*month_bounds(self.today()))
