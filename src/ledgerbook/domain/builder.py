"""Fluent construction of transaction drafts and common entry shapes."""

from datetime import date
from decimal import Decimal
from typing import Optional

from ledgerbook.domain.currencies import normalize_currency
from ledgerbook.domain.entities import EntrySide, Posting, TransactionDraft
from ledgerbook.domain.errors import ValidationError
from ledgerbook.domain.fx import FxTable
from ledgerbook.domain.money import Money
from ledgerbook.domain.validation import validate_draft

REVALUATION_TAG = "fx-revaluation"


class TransactionBuilder:
    """Collects postings and produces a validated TransactionDraft.

    Example:
        draft = (
            TransactionBuilder("Groceries", "MXN", date(2025, 10, 15))
            .debit("food", Money.from_major_units("250", "MXN"))
            .credit("credit-card", Money.from_major_units("250", "MXN"))
            .build()
        )

    Postings in a foreign currency are booked at the rate the caller
    supplies, or at the FxTable rate for the transaction date.
    """

    def __init__(
        self,
        description: str,
        base_currency: str,
        tx_date: date,
        fx: Optional[FxTable] = None,
    ):
        self.description = description
        self.base_currency = normalize_currency(base_currency)
        self.tx_date = tx_date
        self.fx = fx
        self._postings: list[Posting] = []
        self._memo: Optional[str] = None
        self._reference: Optional[str] = None
        self._tags: list[str] = []

    def _book(
        self,
        original: Money,
        booked: Optional[Money],
        exchange_rate: Optional[Decimal],
    ) -> tuple[Money, Optional[Decimal]]:
        if booked is not None:
            if exchange_rate is None and original.currency != booked.currency:
                exchange_rate = booked.to_major_units() / original.to_major_units()
            return booked, exchange_rate

        if original.currency == self.base_currency:
            return original, exchange_rate

        if exchange_rate is None:
            if self.fx is None:
                raise ValidationError(
                    f"Posting in {original.currency} needs a booked amount or exchange rate"
                )
            exchange_rate = self.fx.get_rate(original.currency, self.base_currency, self.tx_date)

        converted = original.to_major_units() * exchange_rate
        return Money.from_major_units(converted, self.base_currency), exchange_rate

    def _add(
        self,
        side: EntrySide,
        account_id: str,
        original: Money,
        booked: Optional[Money],
        exchange_rate: Optional[Decimal],
        description: Optional[str],
    ) -> "TransactionBuilder":
        if not original.is_positive():
            raise ValidationError(f"Posting amount for {account_id} must be positive")
        booked, exchange_rate = self._book(original, booked, exchange_rate)
        if side == EntrySide.DEBIT:
            posting = Posting(
                account_id=account_id,
                original_debit=original,
                booked_debit=booked,
                exchange_rate=exchange_rate,
                description=description,
            )
        else:
            posting = Posting(
                account_id=account_id,
                original_credit=original,
                booked_credit=booked,
                exchange_rate=exchange_rate,
                description=description,
            )
        self._postings.append(posting)
        return self

    def debit(
        self,
        account_id: str,
        original: Money,
        booked: Optional[Money] = None,
        exchange_rate: Optional[Decimal] = None,
        description: Optional[str] = None,
    ) -> "TransactionBuilder":
        return self._add(EntrySide.DEBIT, account_id, original, booked, exchange_rate, description)

    def credit(
        self,
        account_id: str,
        original: Money,
        booked: Optional[Money] = None,
        exchange_rate: Optional[Decimal] = None,
        description: Optional[str] = None,
    ) -> "TransactionBuilder":
        return self._add(EntrySide.CREDIT, account_id, original, booked, exchange_rate, description)

    def memo(self, memo: str) -> "TransactionBuilder":
        self._memo = memo
        return self

    def reference(self, reference: str) -> "TransactionBuilder":
        self._reference = reference
        return self

    def tags(self, *tags: str) -> "TransactionBuilder":
        for tag in tags:
            if tag not in self._tags:
                self._tags.append(tag)
        return self

    def build(self) -> TransactionDraft:
        """Return the draft after structural validation.

        Raises:
            ValidationError: If the postings are malformed
            UnbalancedTransactionError: If debits and credits differ
        """
        draft = TransactionDraft(
            date=self.tx_date,
            description=self.description,
            base_currency=self.base_currency,
            postings=tuple(self._postings),
            memo=self._memo,
            reference=self._reference,
            tags=tuple(self._tags),
        )
        validate_draft(draft)
        return draft


# Common transaction shapes. Each is booked in the amount's own currency.


def salary(
    deposit_account_id: str, income_account_id: str, amount: Money, tx_date: date
) -> TransactionDraft:
    """Debit the receiving account, credit salary income."""
    return (
        TransactionBuilder("Salary payment", amount.currency, tx_date)
        .debit(deposit_account_id, amount, description="Salary received")
        .credit(income_account_id, amount, description="Salary earned")
        .build()
    )


def expense(
    expense_account_id: str,
    payment_account_id: str,
    amount: Money,
    description: str,
    tx_date: date,
) -> TransactionDraft:
    """Debit an expense, credit the account that paid for it."""
    return (
        TransactionBuilder(description, amount.currency, tx_date)
        .debit(expense_account_id, amount, description=description)
        .credit(payment_account_id, amount, description=f"Payment for {description}")
        .build()
    )


def credit_card_purchase(
    expense_account_id: str,
    card_account_id: str,
    amount: Money,
    description: str,
    tx_date: date,
) -> TransactionDraft:
    return (
        TransactionBuilder(description, amount.currency, tx_date)
        .debit(expense_account_id, amount, description=description)
        .credit(card_account_id, amount, description="Credit card purchase")
        .build()
    )


def credit_card_payment(
    card_account_id: str, payment_account_id: str, amount: Money, tx_date: date
) -> TransactionDraft:
    return (
        TransactionBuilder("Credit card payment", amount.currency, tx_date)
        .debit(card_account_id, amount, description="Payment to credit card")
        .credit(payment_account_id, amount, description="Credit card payment")
        .build()
    )


def transfer(
    from_account_id: str,
    to_account_id: str,
    amount: Money,
    description: str,
    tx_date: date,
) -> TransactionDraft:
    return (
        TransactionBuilder(description, amount.currency, tx_date)
        .debit(to_account_id, amount, description="Transfer received")
        .credit(from_account_id, amount, description="Transfer sent")
        .build()
    )


def loan_payment(
    loan_account_id: str,
    interest_account_id: str,
    payment_account_id: str,
    principal: Money,
    interest: Money,
    tx_date: date,
) -> TransactionDraft:
    """Split a loan payment into principal and interest."""
    builder = TransactionBuilder("Loan payment", principal.currency, tx_date)
    builder.debit(loan_account_id, principal, description="Principal payment")
    if interest.is_positive():
        builder.debit(interest_account_id, interest, description="Interest expense")
    builder.credit(payment_account_id, principal.add(interest), description="Loan payment")
    return builder.build()


def fx_revaluation(
    account_id: str,
    gain_account_id: str,
    loss_account_id: str,
    amount: Money,
    description: str,
    tx_date: date,
    tags: tuple[str, ...] = (),
) -> TransactionDraft:
    """Book an unrealized FX gain (positive amount) or loss (negative amount).

    Raises:
        ValidationError: If amount is zero
    """
    if amount.is_zero():
        raise ValidationError("Revaluation amount must be non-zero")
    magnitude = amount.abs()
    builder = TransactionBuilder(description, amount.currency, tx_date).tags(
        REVALUATION_TAG, *tags
    )
    if amount.is_positive():
        builder.debit(account_id, magnitude, description="FX revaluation gain")
        builder.credit(gain_account_id, magnitude, description="FX gain")
    else:
        builder.debit(loss_account_id, magnitude, description="FX loss")
        builder.credit(account_id, magnitude, description="FX revaluation loss")
    return builder.build()
