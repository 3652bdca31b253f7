"""Ledger engine: account registry, transaction log and statements."""

import logging
import uuid
from dataclasses import replace
from datetime import date, datetime, UTC
from typing import Iterable, Optional

from ledgerbook.database.base import Database
from ledgerbook.domain.builder import TransactionBuilder
from ledgerbook.domain.chart import DEFAULT_ACCOUNTS
from ledgerbook.domain.classifiers import external_type_to_nature
from ledgerbook.domain.currencies import normalize_currency
from ledgerbook.domain.entities import (
    Account,
    AccountBalance,
    AccountNature,
    BalanceSheet,
    ExternalAccount,
    IncomeStatement,
    Posting,
    StatementLine,
    Transaction,
    TransactionDraft,
    TransactionFilters,
    TrialBalance,
    TrialBalanceLine,
)
from ledgerbook.domain.errors import (
    ConflictError,
    DependencyError,
    DomainError,
    FxMissingError,
    NotFoundError,
    ValidationError,
    account_delete_blocked,
    account_not_found,
    fx_missing,
    transaction_not_found,
)
from ledgerbook.domain.filters import matches_filters, sort_newest_first
from ledgerbook.domain.fx import Converter, convert_money
from ledgerbook.domain.money import Money
from ledgerbook.domain.validation import validate_draft

logger = logging.getLogger(__name__)

CURRENT_EARNINGS_ID = "current-earnings"


def _new_id() -> str:
    return uuid.uuid4().hex


def _now() -> datetime:
    return datetime.now(UTC)


class LedgerEngine:
    """Double-entry ledger for one owner.

    The engine loads the owner's accounts and transactions from the database
    on construction and writes every change through before updating its own
    state, so a failed write leaves the log untouched. Balances are always
    recomputed from the transaction history.
    """

    def __init__(
        self,
        db: Database,
        owner_id: str,
        base_currency: str = "MXN",
        converter: Optional[Converter] = None,
    ):
        """Initialize the ledger engine.

        Args:
            db: Database instance
            owner_id: Owner whose ledger this is
            base_currency: Currency every transaction is booked in
            converter: Optional display converter for statements in other currencies
        """
        self.db = db
        self.owner_id = owner_id
        self.base_currency = normalize_currency(base_currency)
        self.converter = converter
        self._accounts: dict[str, Account] = {
            a.id: a for a in db.load_accounts(owner_id)
        }
        self._transactions: list[Transaction] = db.load_transactions(owner_id)
        self._sequence = max((t.sequence for t in self._transactions), default=0)

    # Account operations

    def initialize_default_accounts(self) -> list[Account]:
        """Create any default chart-of-accounts entries not yet present.

        Returns:
            The accounts that were created
        """
        created = []
        for account_id, code, name, nature in DEFAULT_ACCOUNTS:
            if account_id not in self._accounts:
                created.append(self.create_account(code, name, nature, account_id=account_id))
        return created

    def create_account(
        self,
        code: str,
        name: str,
        nature: AccountNature,
        account_id: Optional[str] = None,
        parent_id: Optional[str] = None,
        description: Optional[str] = None,
    ) -> Account:
        """Create a new ledger account.

        Args:
            code: Display code, e.g. "1001"
            name: Account name
            nature: Account nature
            account_id: Optional stable id; generated when omitted
            parent_id: Optional parent account id
            description: Optional free text

        Returns:
            The created account

        Raises:
            ValidationError: If code or name is empty
            ConflictError: If the id is already used
            NotFoundError: If the parent account does not exist
        """
        if not code or not code.strip():
            raise ValidationError("Account code is required")
        if not name or not name.strip():
            raise ValidationError("Account name is required")
        account_id = account_id or _new_id()
        if account_id in self._accounts:
            raise ConflictError(f"Account with id '{account_id}' already exists")
        if parent_id is not None:
            self.require_account(parent_id)

        now = _now()
        account = Account(
            id=account_id,
            code=code.strip(),
            name=name.strip(),
            nature=AccountNature(nature),
            created_at=now,
            updated_at=now,
            parent_id=parent_id,
            description=description,
        )
        self.db.save_account(self.owner_id, account)
        self._accounts[account.id] = account
        logger.info("Created account %s (%s %s)", account.id, account.code, account.name)
        return account

    def update_account(
        self,
        account_id: str,
        name: Optional[str] = None,
        code: Optional[str] = None,
        description: Optional[str] = None,
    ) -> Account:
        """Rename or re-code an account. Nature is fixed once created.

        Raises:
            NotFoundError: If the account does not exist
            ValidationError: If a provided name or code is blank
        """
        account = self.require_account(account_id)
        changes = {}
        if name is not None:
            if not name.strip():
                raise ValidationError("Account name is required")
            changes["name"] = name.strip()
        if code is not None:
            if not code.strip():
                raise ValidationError("Account code is required")
            changes["code"] = code.strip()
        if description is not None:
            changes["description"] = description
        if not changes:
            return account
        return self._store_account(replace(account, updated_at=_now(), **changes))

    def deactivate_account(self, account_id: str) -> Account:
        """Mark an account inactive. History and balances are unaffected."""
        account = self.require_account(account_id)
        if not account.is_active:
            return account
        logger.info("Deactivating account %s", account_id)
        return self._store_account(replace(account, is_active=False, updated_at=_now()))

    def activate_account(self, account_id: str) -> Account:
        account = self.require_account(account_id)
        if account.is_active:
            return account
        return self._store_account(replace(account, is_active=True, updated_at=_now()))

    def delete_account(self, account_id: str) -> None:
        """Delete an account that no posting references.

        Raises:
            NotFoundError: If the account does not exist
            DependencyError: If any posting references the account
        """
        self.require_account(account_id)
        posting_count = self.count_postings(account_id)
        if posting_count > 0:
            raise DependencyError(account_delete_blocked(account_id, posting_count))
        self.db.delete_account(self.owner_id, account_id)
        del self._accounts[account_id]
        logger.info("Deleted account %s", account_id)

    def _store_account(self, account: Account) -> Account:
        self.db.save_account(self.owner_id, account)
        self._accounts[account.id] = account
        return account

    def get_account(self, account_id: str) -> Optional[Account]:
        """Get account by id, or None if not found."""
        return self._accounts.get(account_id)

    def require_account(self, account_id: str) -> Account:
        """Get account by id.

        Raises:
            NotFoundError: If the account does not exist
        """
        account = self._accounts.get(account_id)
        if account is None:
            raise NotFoundError(account_not_found(account_id))
        return account

    def list_accounts(self, include_inactive: bool = True) -> list[Account]:
        """List accounts ordered by code."""
        accounts = sorted(self._accounts.values(), key=lambda a: (a.code, a.id))
        if include_inactive:
            return accounts
        return [a for a in accounts if a.is_active]

    def get_accounts_by_nature(self, nature: AccountNature) -> list[Account]:
        """List active accounts of one nature, ordered by code."""
        return [a for a in self.list_accounts(include_inactive=False) if a.nature == nature]

    def count_postings(self, account_id: str) -> int:
        return sum(
            1 for t in self._transactions for p in t.postings if p.account_id == account_id
        )

    def sync_external_account(self, external: ExternalAccount) -> Account:
        """Mirror an external account into the ledger under the same id.

        Repeated calls are idempotent; name or nature drift is applied to the
        existing ledger account.
        """
        nature = external_type_to_nature(external.type)
        existing = self._accounts.get(external.id)
        if existing is not None:
            if existing.name != external.name or existing.nature != nature:
                logger.info("Updating mirrored account %s from external data", external.id)
                return self._store_account(
                    replace(existing, name=external.name, nature=nature, updated_at=_now())
                )
            return existing

        prefix = "1" if nature == AccountNature.ASSET else "2"
        suffix = external.id.replace("-", "")[:4].upper().ljust(4, "0")
        return self.create_account(
            f"EXT-{prefix}{suffix}", external.name, nature, account_id=external.id
        )

    # Transaction operations

    def _validate(self, draft: TransactionDraft, existing: Optional[Transaction] = None) -> None:
        if normalize_currency(draft.base_currency) != self.base_currency:
            raise ValidationError(
                f"Transaction currency {draft.base_currency} does not match "
                f"ledger currency {self.base_currency}"
            )
        validate_draft(draft)
        for posting in draft.postings:
            account = self.require_account(posting.account_id)
            if not account.is_active and not (existing and existing.touches(account.id)):
                raise ValidationError(f"Account {account.id} is inactive")

    def _assign_posting_ids(self, transaction_id: str, postings: Iterable[Posting]) -> tuple:
        return tuple(
            replace(p, id=_new_id(), transaction_id=transaction_id) for p in postings
        )

    def add_transaction(self, draft: TransactionDraft) -> Transaction:
        """Validate and record a transaction.

        Args:
            draft: Transaction draft

        Returns:
            The recorded transaction with ids and timestamps assigned

        Raises:
            ValidationError: If the draft is malformed or uses an inactive account
            UnbalancedTransactionError: If booked debits differ from booked credits
            NotFoundError: If a posting references an unknown account
        """
        try:
            self._validate(draft)
        except DomainError as e:
            logger.warning("Rejected transaction '%s': %s", draft.description, e)
            raise

        transaction_id = _new_id()
        now = _now()
        transaction = Transaction(
            id=transaction_id,
            date=draft.date,
            description=draft.description,
            base_currency=self.base_currency,
            postings=self._assign_posting_ids(transaction_id, draft.postings),
            created_at=now,
            updated_at=now,
            sequence=self._sequence + 1,
            memo=draft.memo,
            reference=draft.reference,
            tags=tuple(draft.tags),
        )
        self.db.save_transaction(self.owner_id, transaction)
        self._sequence = transaction.sequence
        self._transactions.append(transaction)
        logger.info(
            "Recorded transaction %s '%s' on %s", transaction.id, transaction.description, transaction.date
        )
        return transaction

    def update_transaction(self, transaction_id: str, draft: TransactionDraft) -> Transaction:
        """Replace a transaction's contents and whole posting set.

        Raises:
            NotFoundError: If the transaction does not exist
            ValidationError: If the replacement is invalid
            UnbalancedTransactionError: If the replacement does not balance
        """
        existing = self.require_transaction(transaction_id)
        try:
            self._validate(draft, existing)
        except DomainError as e:
            logger.warning("Rejected update of transaction %s: %s", transaction_id, e)
            raise

        transaction = replace(
            existing,
            date=draft.date,
            description=draft.description,
            postings=self._assign_posting_ids(transaction_id, draft.postings),
            memo=draft.memo,
            reference=draft.reference,
            tags=tuple(draft.tags),
            updated_at=_now(),
        )
        self.db.save_transaction(self.owner_id, transaction)
        self._transactions = [
            transaction if t.id == transaction_id else t for t in self._transactions
        ]
        logger.info("Updated transaction %s", transaction_id)
        return transaction

    def delete_transaction(self, transaction_id: str) -> None:
        """Delete a transaction together with its postings."""
        self.require_transaction(transaction_id)
        self.db.delete_transaction(self.owner_id, transaction_id)
        self._transactions = [t for t in self._transactions if t.id != transaction_id]
        logger.info("Deleted transaction %s", transaction_id)

    def get_transaction(self, transaction_id: str) -> Optional[Transaction]:
        for transaction in self._transactions:
            if transaction.id == transaction_id:
                return transaction
        return None

    def require_transaction(self, transaction_id: str) -> Transaction:
        transaction = self.get_transaction(transaction_id)
        if transaction is None:
            raise NotFoundError(transaction_not_found(transaction_id))
        return transaction

    def get_transactions(self, filters: Optional[TransactionFilters] = None) -> list[Transaction]:
        """List transactions matching filters, newest first.

        Ties on date are broken by creation order, latest first.
        """
        return sort_newest_first(t for t in self._transactions if matches_filters(t, filters))

    # Balances

    def _net_by_account(
        self, as_of: Optional[date] = None, from_date: Optional[date] = None
    ) -> dict[str, int]:
        """Sum booked debits minus credits per account, in minor units."""
        totals: dict[str, int] = {}
        for transaction in self._transactions:
            if as_of is not None and transaction.date > as_of:
                continue
            if from_date is not None and transaction.date < from_date:
                continue
            for posting in transaction.postings:
                amount = posting.booked.amount_minor
                if posting.booked_credit is not None:
                    amount = -amount
                totals[posting.account_id] = totals.get(posting.account_id, 0) + amount
        return totals

    @staticmethod
    def _signed(account: Account, net_debit: int) -> int:
        return net_debit if account.nature.is_normal_debit else -net_debit

    def get_account_balance(self, account_id: str, as_of: Optional[date] = None) -> Money:
        """Balance of one account, positive on its normal side.

        Args:
            account_id: Account id
            as_of: Include transactions dated on or before this date; all when None

        Raises:
            NotFoundError: If the account does not exist
        """
        account = self.require_account(account_id)
        net = self._net_by_account(as_of).get(account_id, 0)
        return Money(self._signed(account, net), self.base_currency)

    def get_all_account_balances(self, as_of: Optional[date] = None) -> list[AccountBalance]:
        net = self._net_by_account(as_of)
        return [
            AccountBalance(
                account_id=a.id,
                code=a.code,
                name=a.name,
                nature=a.nature,
                balance=Money(self._signed(a, net.get(a.id, 0)), self.base_currency),
            )
            for a in self.list_accounts()
        ]

    # Statements

    def _convert(
        self, money: Money, currency: str, converter: Optional[Converter] = None
    ) -> Money:
        if money.currency == currency:
            return money
        converter = converter if converter is not None else self.converter
        if converter is None:
            raise FxMissingError(fx_missing(money.currency, currency))
        return convert_money(converter, money, currency)

    def get_trial_balance(self, as_of: Optional[date] = None) -> TrialBalance:
        """Debit and credit columns per account with a non-zero balance."""
        zero = Money.zero(self.base_currency)
        lines = []
        total_debits = zero
        total_credits = zero
        for entry in self.get_all_account_balances(as_of):
            balance = entry.balance
            if balance.is_zero():
                continue
            on_debit_side = entry.nature.is_normal_debit != balance.is_negative()
            debit = balance.abs() if on_debit_side else zero
            credit = zero if on_debit_side else balance.abs()
            total_debits = total_debits.add(debit)
            total_credits = total_credits.add(credit)
            lines.append(
                TrialBalanceLine(
                    account_id=entry.account_id,
                    code=entry.code,
                    name=entry.name,
                    nature=entry.nature,
                    debit=debit,
                    credit=credit,
                )
            )
        return TrialBalance(
            as_of=as_of or date.today(),
            currency=self.base_currency,
            lines=tuple(lines),
            total_debits=total_debits,
            total_credits=total_credits,
        )

    def get_balance_sheet(
        self, as_of: Optional[date] = None, currency: Optional[str] = None
    ) -> BalanceSheet:
        """Assets, liabilities and equity as of a date.

        Equity carries a current-earnings line (income minus expenses to
        date). ``is_balanced`` is checked in the ledger currency. In another
        ``currency`` each line is converted on its own and the totals are the
        sums of the converted lines, so the converted sides can differ by
        rounding.

        Raises:
            FxMissingError: If conversion to ``currency`` is not possible
        """
        currency = normalize_currency(currency or self.base_currency)
        zero = Money.zero(self.base_currency)
        sections: dict[AccountNature, list[StatementLine]] = {
            AccountNature.ASSET: [],
            AccountNature.LIABILITY: [],
            AccountNature.EQUITY: [],
        }
        totals = {nature: zero for nature in AccountNature}
        for entry in self.get_all_account_balances(as_of):
            totals[entry.nature] = totals[entry.nature].add(entry.balance)
            if entry.nature in sections and not entry.balance.is_zero():
                sections[entry.nature].append(
                    StatementLine(entry.account_id, entry.code, entry.name, entry.balance)
                )

        current_earnings = totals[AccountNature.INCOME].subtract(totals[AccountNature.EXPENSE])
        if not current_earnings.is_zero():
            sections[AccountNature.EQUITY].append(
                StatementLine(CURRENT_EARNINGS_ID, "", "Current Earnings", current_earnings)
            )
        total_assets = totals[AccountNature.ASSET]
        total_liabilities = totals[AccountNature.LIABILITY]
        total_equity = totals[AccountNature.EQUITY].add(current_earnings)
        is_balanced = total_assets.equals(total_liabilities.add(total_equity))
        if not is_balanced:
            logger.error(
                "Balance sheet out of balance as of %s: assets %s, liabilities+equity %s",
                as_of,
                total_assets,
                total_liabilities.add(total_equity),
            )

        def convert_lines(lines: list[StatementLine]) -> tuple[StatementLine, ...]:
            return tuple(replace(line, amount=self._convert(line.amount, currency)) for line in lines)

        def line_total(lines: tuple[StatementLine, ...]) -> Money:
            total = Money.zero(currency)
            for line in lines:
                total = total.add(line.amount)
            return total

        assets = convert_lines(sections[AccountNature.ASSET])
        liabilities = convert_lines(sections[AccountNature.LIABILITY])
        equity = convert_lines(sections[AccountNature.EQUITY])
        earnings_lines = tuple(line for line in equity if line.account_id == CURRENT_EARNINGS_ID)

        return BalanceSheet(
            as_of=as_of or date.today(),
            currency=currency,
            assets=assets,
            liabilities=liabilities,
            equity=equity,
            total_assets=line_total(assets),
            total_liabilities=line_total(liabilities),
            total_equity=line_total(equity),
            current_earnings=line_total(earnings_lines),
            is_balanced=is_balanced,
        )

    def get_income_statement(
        self,
        from_date: date,
        to_date: date,
        currency: Optional[str] = None,
        converter: Optional[Converter] = None,
    ) -> IncomeStatement:
        """Income and expense activity within an inclusive date range.

        Each posting is converted to ``currency`` at query time; accounts
        with no net activity are omitted.

        Raises:
            ValidationError: If from_date is after to_date
            FxMissingError: If conversion to ``currency`` is not possible
        """
        if from_date > to_date:
            raise ValidationError("Start date must be on or before end date")
        currency = normalize_currency(currency or self.base_currency)
        zero = Money.zero(currency)
        amounts: dict[str, Money] = {}
        for transaction in self._transactions:
            if transaction.date < from_date or transaction.date > to_date:
                continue
            for posting in transaction.postings:
                account = self._accounts.get(posting.account_id)
                if account is None or account.nature not in (
                    AccountNature.INCOME,
                    AccountNature.EXPENSE,
                ):
                    continue
                amount = self._convert(posting.booked, currency, converter)
                grows = (posting.booked_debit is not None) == account.nature.is_normal_debit
                current = amounts.get(account.id, zero)
                amounts[account.id] = current.add(amount) if grows else current.subtract(amount)

        income_lines = []
        expense_lines = []
        for account in self.list_accounts():
            amount = amounts.get(account.id)
            if amount is None or amount.is_zero():
                continue
            line = StatementLine(account.id, account.code, account.name, amount)
            if account.nature == AccountNature.INCOME:
                income_lines.append(line)
            else:
                expense_lines.append(line)

        total_income = zero
        for line in income_lines:
            total_income = total_income.add(line.amount)
        total_expenses = zero
        for line in expense_lines:
            total_expenses = total_expenses.add(line.amount)

        return IncomeStatement(
            from_date=from_date,
            to_date=to_date,
            currency=currency,
            income=tuple(income_lines),
            expenses=tuple(expense_lines),
            total_income=total_income,
            total_expenses=total_expenses,
            net_income=total_income.subtract(total_expenses),
        )

    # Convenience entry points

    def _two_leg(
        self,
        debit_account_id: str,
        credit_account_id: str,
        amount: Money,
        tx_date: date,
        description: str,
    ) -> Transaction:
        booked = self._convert(amount, self.base_currency)
        draft = (
            TransactionBuilder(description, self.base_currency, tx_date)
            .debit(debit_account_id, amount, booked=booked)
            .credit(credit_account_id, amount, booked=booked)
            .build()
        )
        return self.add_transaction(draft)

    def add_income_transaction(
        self,
        income_account_id: str,
        deposit_account_id: str,
        amount: Money,
        tx_date: date,
        description: str,
    ) -> Transaction:
        """Debit the deposit account, credit the income account."""
        return self._two_leg(deposit_account_id, income_account_id, amount, tx_date, description)

    def add_expense_transaction(
        self,
        expense_account_id: str,
        payment_account_id: str,
        amount: Money,
        tx_date: date,
        description: str,
    ) -> Transaction:
        """Debit the expense account, credit the paying account."""
        return self._two_leg(expense_account_id, payment_account_id, amount, tx_date, description)

    def add_transfer_transaction(
        self,
        from_account_id: str,
        to_account_id: str,
        amount: Money,
        tx_date: date,
        description: str,
    ) -> Transaction:
        return self._two_leg(to_account_id, from_account_id, amount, tx_date, description)
