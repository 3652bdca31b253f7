"""Domain model entities for ledgerbook.

These are pure data classes representing business concepts, independent of
database schema. Persistence backends map to and from them in
``ledgerbook.database.mappers``.
"""

from dataclasses import dataclass, field
from datetime import datetime, date
from decimal import Decimal
from enum import Enum
from typing import Optional, Mapping

from ledgerbook.domain.money import Money


class AccountNature(str, Enum):
    """Top-level classification of a ledger account."""

    ASSET = "asset"
    LIABILITY = "liability"
    EQUITY = "equity"
    INCOME = "income"
    EXPENSE = "expense"

    @property
    def is_normal_debit(self) -> bool:
        """Asset and expense accounts grow with debits."""
        return self in (AccountNature.ASSET, AccountNature.EXPENSE)


class EntrySide(str, Enum):
    DEBIT = "debit"
    CREDIT = "credit"


class ExternalAccountType(str, Enum):
    """Kinds of real-world accounts tracked for net worth."""

    CASH = "cash"
    BANK = "bank"
    EXCHANGE = "exchange"
    INVESTMENT = "investment"
    PROPERTY = "property"
    LOAN = "loan"
    CREDIT_CARD = "credit-card"
    MORTGAGE = "mortgage"
    OTHER = "other"

    @property
    def is_liability(self) -> bool:
        return self in (
            ExternalAccountType.LOAN,
            ExternalAccountType.CREDIT_CARD,
            ExternalAccountType.MORTGAGE,
        )


@dataclass(frozen=True)
class Account:
    """Ledger account domain entity."""

    id: str
    code: str
    name: str
    nature: AccountNature
    created_at: datetime
    updated_at: datetime
    is_active: bool = True
    parent_id: Optional[str] = None
    description: Optional[str] = None


@dataclass(frozen=True)
class Posting:
    """One debit or credit line of a transaction.

    Exactly one of ``original_debit``/``original_credit`` is set, and the
    booked amount sits on the same side. Booked amounts are in the
    transaction's base currency and never change after creation.
    """

    account_id: str
    original_debit: Optional[Money] = None
    original_credit: Optional[Money] = None
    booked_debit: Optional[Money] = None
    booked_credit: Optional[Money] = None
    exchange_rate: Optional[Decimal] = None
    description: Optional[str] = None
    id: Optional[str] = None
    transaction_id: Optional[str] = None

    @property
    def side(self) -> EntrySide:
        return EntrySide.DEBIT if self.booked_debit is not None else EntrySide.CREDIT

    @property
    def original(self) -> Money:
        if self.original_debit is not None:
            return self.original_debit
        return self.original_credit

    @property
    def booked(self) -> Money:
        if self.booked_debit is not None:
            return self.booked_debit
        return self.booked_credit


@dataclass(frozen=True)
class TransactionDraft:
    """A transaction that has been described but not yet recorded."""

    date: date
    description: str
    base_currency: str
    postings: tuple[Posting, ...]
    memo: Optional[str] = None
    reference: Optional[str] = None
    tags: tuple[str, ...] = ()


@dataclass(frozen=True)
class Transaction:
    """Recorded, balanced transaction domain entity."""

    id: str
    date: date
    description: str
    base_currency: str
    postings: tuple[Posting, ...]
    created_at: datetime
    updated_at: datetime
    sequence: int
    memo: Optional[str] = None
    reference: Optional[str] = None
    tags: tuple[str, ...] = ()

    def touches(self, account_id: str) -> bool:
        return any(p.account_id == account_id for p in self.postings)


@dataclass(frozen=True)
class TransactionFilters:
    """Criteria for listing transactions. All set criteria must match."""

    date_from: Optional[date] = None
    date_to: Optional[date] = None
    account_ids: Optional[tuple[str, ...]] = None
    description: Optional[str] = None
    reference: Optional[str] = None
    tags: Optional[tuple[str, ...]] = None


# Statements


@dataclass(frozen=True)
class AccountBalance:
    account_id: str
    code: str
    name: str
    nature: AccountNature
    balance: Money


@dataclass(frozen=True)
class TrialBalanceLine:
    account_id: str
    code: str
    name: str
    nature: AccountNature
    debit: Money
    credit: Money


@dataclass(frozen=True)
class TrialBalance:
    as_of: date
    currency: str
    lines: tuple[TrialBalanceLine, ...]
    total_debits: Money
    total_credits: Money

    @property
    def is_balanced(self) -> bool:
        return self.total_debits.equals(self.total_credits)


@dataclass(frozen=True)
class StatementLine:
    account_id: str
    code: str
    name: str
    amount: Money


@dataclass(frozen=True)
class BalanceSheet:
    """Assets, liabilities and equity as of a date.

    ``equity`` includes a derived current-earnings line so that the
    accounting identity holds before income and expenses are closed.
    Totals are sums of the listed lines; ``is_balanced`` is checked in the
    ledger currency.
    """

    as_of: date
    currency: str
    assets: tuple[StatementLine, ...]
    liabilities: tuple[StatementLine, ...]
    equity: tuple[StatementLine, ...]
    total_assets: Money
    total_liabilities: Money
    total_equity: Money
    current_earnings: Money
    is_balanced: bool


@dataclass(frozen=True)
class IncomeStatement:
    from_date: date
    to_date: date
    currency: str
    income: tuple[StatementLine, ...]
    expenses: tuple[StatementLine, ...]
    total_income: Money
    total_expenses: Money
    net_income: Money


# External (net-worth) accounts


@dataclass(frozen=True)
class ExternalAccount:
    """Real-world account whose balance is entered by hand."""

    id: str
    name: str
    type: ExternalAccountType
    balance: Money
    last_updated: datetime
    exclude_from_total: bool = False
    estimated_yield: Optional[Decimal] = None
    due_date: Optional[date] = None
    recurring_due_date: Optional[int] = None
    is_paid_this_month: bool = False
    last_paid_date: Optional[date] = None
    min_monthly_payment: Optional[Money] = None
    payment_to_avoid_interest: Optional[Money] = None

    @property
    def currency(self) -> str:
        return self.balance.currency


# Reports


@dataclass(frozen=True)
class NetWorth:
    as_of: date
    currency: str
    total_assets: Money
    total_liabilities: Money
    net_worth: Money
    ledger_assets: Money
    ledger_liabilities: Money
    external_assets: Money
    external_liabilities: Money


@dataclass(frozen=True)
class CashflowDetail:
    transaction_id: str
    date: date
    description: str
    amount: Money
    direction: str
    source: str
    account_id: str
    account_name: str
    counterparty_account_id: Optional[str]


@dataclass(frozen=True)
class CashflowSourceTotals:
    inflow: Money
    outflow: Money


@dataclass(frozen=True)
class CashflowStatement:
    from_date: date
    to_date: date
    currency: str
    total_inflows: Money
    total_outflows: Money
    net_cashflow: Money
    by_source: Mapping[str, CashflowSourceTotals]
    details: tuple[CashflowDetail, ...]


@dataclass(frozen=True)
class ExpenseLine:
    account_id: str
    name: str
    category: str
    amount: Money


@dataclass(frozen=True)
class ExpenseBreakdown:
    from_date: date
    to_date: date
    currency: str
    total: Money
    essential: Money
    important: Money
    non_essential: Money
    by_account: tuple[ExpenseLine, ...]
    average_daily: Money


@dataclass(frozen=True)
class SavingsPotential:
    total_income: Money
    total_expenses: Money
    net_savings: Money
    savings_rate: Decimal
    potential_savings: Money
    projected_monthly_savings: Money
    projected_yearly_savings: Money
    target_savings_rate: Decimal
    gap_to_target: Money


@dataclass(frozen=True)
class MonthEndItem:
    account_id: str
    name: str
    balance: Money
    action: Optional[str]
    source: str
    subtype: str


@dataclass(frozen=True)
class MonthEndSummary:
    as_of: date
    currency: str
    cash: tuple[MonthEndItem, ...]
    liabilities: tuple[MonthEndItem, ...]
    total_cash: Money
    total_liabilities: Money
    net_cash: Money


# Snapshots


@dataclass(frozen=True)
class AccountSnapshot:
    account_id: str
    account_name: str
    account_type: str
    nature: AccountNature
    balance: Money
    balance_base: Money


@dataclass(frozen=True)
class NetWorthSnapshot:
    """Frozen month-end net worth. One per owner per ``YYYY-MM``."""

    month: str
    net_worth: Money
    totals_by_nature: Mapping[AccountNature, Money]
    account_snapshots: tuple[AccountSnapshot, ...]
    created_at: datetime


@dataclass(frozen=True)
class MonthOverMonthChange:
    current: Money
    previous: Optional[Money]
    delta_abs: Optional[Money]
    delta_pct: Optional[Decimal]
    has_previous_data: bool


# FX revaluation


@dataclass(frozen=True)
class FxPosition:
    """Net foreign-currency exposure held in one ledger account."""

    account_id: str
    currency: str
    original_amount: Money
    booked_amount: Money
    current_rate: Decimal
    current_value: Money
    unrealized: Money


@dataclass(frozen=True)
class RevaluationResult:
    as_of: date
    positions: tuple[FxPosition, ...]
    drafts: tuple[TransactionDraft, ...]
    posted_transaction_ids: tuple[str, ...] = field(default_factory=tuple)
