"""Structural validation of transaction drafts."""

from ledgerbook.domain.currencies import normalize_currency
from ledgerbook.domain.entities import Posting, TransactionDraft
from ledgerbook.domain.errors import (
    UnbalancedTransactionError,
    ValidationError,
    unbalanced_transaction,
)
from ledgerbook.domain.money import Money


def _validate_posting(index: int, posting: Posting, base_currency: str) -> None:
    label = f"Posting {index + 1} ({posting.account_id})"
    if not posting.account_id:
        raise ValidationError(f"Posting {index + 1} has no account")

    has_original_debit = posting.original_debit is not None
    has_original_credit = posting.original_credit is not None
    if has_original_debit == has_original_credit:
        raise ValidationError(
            f"{label} must have exactly one of original debit or credit"
        )

    has_booked_debit = posting.booked_debit is not None
    has_booked_credit = posting.booked_credit is not None
    if has_booked_debit == has_booked_credit:
        raise ValidationError(f"{label} must have exactly one of booked debit or credit")

    if has_original_debit != has_booked_debit:
        raise ValidationError(f"{label} original and booked amounts must be on the same side")

    if not posting.original.is_positive() or not posting.booked.is_positive():
        raise ValidationError(f"{label} amounts must be positive")

    if posting.booked.currency != base_currency:
        raise ValidationError(
            f"{label} booked amount is in {posting.booked.currency}, "
            f"expected base currency {base_currency}"
        )

    if posting.exchange_rate is not None and posting.exchange_rate <= 0:
        raise ValidationError(f"{label} exchange rate must be positive")


def validate_draft(draft: TransactionDraft) -> None:
    """Check that a draft is well formed and balanced.

    Args:
        draft: Transaction draft to validate

    Raises:
        ValidationError: If the draft is structurally invalid
        UnbalancedTransactionError: If booked debits differ from booked credits
    """
    if not draft.description or not draft.description.strip():
        raise ValidationError("Transaction description is required")

    base_currency = normalize_currency(draft.base_currency)
    if len(draft.postings) < 2:
        raise ValidationError("Transaction must have at least 2 postings")

    for index, posting in enumerate(draft.postings):
        _validate_posting(index, posting, base_currency)

    total_debits = Money.zero(base_currency)
    total_credits = Money.zero(base_currency)
    for posting in draft.postings:
        if posting.booked_debit is not None:
            total_debits = total_debits.add(posting.booked_debit)
        else:
            total_credits = total_credits.add(posting.booked_credit)

    if not total_debits.equals(total_credits):
        raise UnbalancedTransactionError(
            unbalanced_transaction(total_debits.format(), total_credits.format())
        )
