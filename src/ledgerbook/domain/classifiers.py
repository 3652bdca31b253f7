"""Pluggable heuristics used by the report builders.

Reports accept any callable with the same signature, so callers can swap in
rules that fit their own chart of accounts.
"""

import re
from typing import Callable

from ledgerbook.domain.entities import Account, AccountNature, ExternalAccountType

CashClassifier = Callable[[Account], bool]
ExpenseClassifier = Callable[[Account], str]

CASH_KEYWORDS = ("cash", "checking", "savings", "wallet", "bank", "card")
_CASH_CODE = re.compile(r"^10\d{2}")

ESSENTIAL = "essential"
IMPORTANT = "important"
NON_ESSENTIAL = "non_essential"

_ESSENTIAL_KEYWORDS = ("food", "housing", "utilities", "healthcare")
_IMPORTANT_KEYWORDS = ("transport", "shopping")


def is_cash_like_account(account: Account) -> bool:
    """Default rule for accounts whose movements count as cash flow."""
    if account.nature not in (AccountNature.ASSET, AccountNature.LIABILITY):
        return False
    name = account.name.lower()
    if any(keyword in name for keyword in CASH_KEYWORDS):
        return True
    return account.nature == AccountNature.ASSET and bool(_CASH_CODE.match(account.code))


def categorize_expense(account: Account) -> str:
    """Default rule grouping expense accounts by how discretionary they are."""
    name = account.name.lower()
    if any(keyword in name for keyword in _ESSENTIAL_KEYWORDS):
        return ESSENTIAL
    if any(keyword in name for keyword in _IMPORTANT_KEYWORDS):
        return IMPORTANT
    return NON_ESSENTIAL


def external_type_to_nature(account_type: ExternalAccountType) -> AccountNature:
    if account_type.is_liability:
        return AccountNature.LIABILITY
    return AccountNature.ASSET
