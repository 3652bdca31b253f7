"""Shared domain error messages and error types."""

from datetime import date


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class NotFoundError(DomainError):
    """Requested domain entity does not exist."""


class ConflictError(DomainError):
    """Domain conflict, such as uniqueness violations."""


class DependencyError(DomainError):
    """Operation blocked due to dependent domain data."""


class CurrencyMismatchError(DomainError):
    """Arithmetic or comparison attempted across two currencies."""


class FxMissingError(DomainError):
    """No exchange rate is registered for a currency pair and date."""


class UnbalancedTransactionError(ValidationError):
    """Booked debits and credits of a transaction do not match."""


def account_not_found(account_id: str) -> str:
    """Return message for missing account."""
    return f"Account {account_id} not found"


def transaction_not_found(transaction_id: str) -> str:
    """Return message for missing transaction."""
    return f"Transaction {transaction_id} not found"


def external_account_not_found(account_id: str) -> str:
    """Return message for missing external account."""
    return f"External account {account_id} not found"


def snapshot_not_found(month: str) -> str:
    """Return message for missing month-end snapshot."""
    return f"Snapshot for {month} not found"


def currency_mismatch(left: str, right: str) -> str:
    """Return message for mixed-currency arithmetic."""
    return f"Currency mismatch: {left} vs {right}"


def fx_missing(base: str, quote: str, as_of: date | None = None) -> str:
    """Return message for a missing exchange rate."""
    if as_of is None:
        return f"Missing FX rate for {base}/{quote}"
    return f"Missing FX rate for {base}/{quote} @ {as_of.isoformat()}"


def unbalanced_transaction(debits: str, credits: str) -> str:
    """Return message when booked debits and credits differ."""
    return (
        "Transaction debits must equal credits "
        f"(debits {debits}, credits {credits})"
    )


def account_delete_blocked(account_id: str, posting_count: int) -> str:
    """Return message when an account still has postings."""
    return (
        f"Cannot delete account {account_id}: it has {posting_count} "
        f"posting{'s' if posting_count != 1 else ''}. "
        "Deactivate it instead."
    )
