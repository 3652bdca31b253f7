"""Utility for resolving account references to IDs."""

from ledgerbook.domain.errors import NotFoundError, ValidationError
from ledgerbook.domain.ledger import LedgerEngine


def resolve_account(engine: LedgerEngine, account: str) -> str:
    """Resolve an account id, code or name to the account id.

    Lookup order is exact id, then code, then case-insensitive name.

    Args:
        engine: Ledger engine holding the accounts
        account: Account id, code or name

    Returns:
        Account ID

    Raises:
        NotFoundError: If no account matches
        ValidationError: If a name matches more than one account
    """
    if engine.get_account(account) is not None:
        return account

    accounts = engine.list_accounts()
    for acc in accounts:
        if acc.code == account:
            return acc.id

    matches = [acc for acc in accounts if acc.name.lower() == account.lower()]
    if len(matches) > 1:
        raise ValidationError(f"Account name '{account}' is ambiguous; use the id or code")
    if matches:
        return matches[0].id

    raise NotFoundError(f"Account '{account}' not found")
