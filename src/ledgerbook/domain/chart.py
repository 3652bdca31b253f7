"""Default chart of accounts and static per-account metadata."""

from dataclasses import dataclass
from typing import Optional

from ledgerbook.domain.entities import AccountNature

# (id, code, name, nature)
DEFAULT_ACCOUNTS: list[tuple[str, str, str, AccountNature]] = [
    ("cash", "1001", "Cash", AccountNature.ASSET),
    ("checking", "1002", "Checking Account", AccountNature.ASSET),
    ("savings", "1003", "Savings Account", AccountNature.ASSET),
    ("investments", "1200", "Investments", AccountNature.ASSET),
    ("credit-card", "2001", "Credit Card", AccountNature.LIABILITY),
    ("loan", "2002", "Loan Payable", AccountNature.LIABILITY),
    ("retained-earnings", "3001", "Retained Earnings", AccountNature.EQUITY),
    ("salary", "4001", "Salary Income", AccountNature.INCOME),
    ("freelance", "4002", "Freelance Income", AccountNature.INCOME),
    ("investment-income", "4003", "Investment Income", AccountNature.INCOME),
    ("fx-gain", "4900", "Foreign Exchange Gain", AccountNature.INCOME),
    ("food", "5001", "Food & Dining", AccountNature.EXPENSE),
    ("transport", "5002", "Transportation", AccountNature.EXPENSE),
    ("housing", "5003", "Housing", AccountNature.EXPENSE),
    ("utilities", "5004", "Utilities", AccountNature.EXPENSE),
    ("entertainment", "5005", "Entertainment", AccountNature.EXPENSE),
    ("healthcare", "5006", "Healthcare", AccountNature.EXPENSE),
    ("shopping", "5007", "Shopping", AccountNature.EXPENSE),
    ("fx-loss", "5900", "Foreign Exchange Loss", AccountNature.EXPENSE),
    ("other-expense", "5999", "Other Expenses", AccountNature.EXPENSE),
]

FX_GAIN_ACCOUNT_ID = "fx-gain"
FX_LOSS_ACCOUNT_ID = "fx-loss"

SUBTYPE_OPERATING_CASH = "operating-cash"
SUBTYPE_SAVINGS = "savings"
SUBTYPE_INVESTMENT = "investment"
SUBTYPE_CREDIT_CARD = "credit-card"
SUBTYPE_LOAN = "loan"
SUBTYPE_OTHER = "other"

CASH_SUBTYPES = (SUBTYPE_OPERATING_CASH, SUBTYPE_SAVINGS)
LIABILITY_SUBTYPES = (SUBTYPE_CREDIT_CARD, SUBTYPE_LOAN)

ACTION_PAYDOWN = "paydown"
ACTION_REVIEW = "review"


@dataclass(frozen=True)
class AccountMetadata:
    """Presentation hints for well-known ledger accounts."""

    account_id: str
    subtype: str
    month_end_action: Optional[str] = None


_ACCOUNT_METADATA: dict[str, AccountMetadata] = {
    "cash": AccountMetadata("cash", SUBTYPE_OPERATING_CASH),
    "checking": AccountMetadata("checking", SUBTYPE_OPERATING_CASH),
    "savings": AccountMetadata("savings", SUBTYPE_SAVINGS, ACTION_REVIEW),
    "investments": AccountMetadata("investments", SUBTYPE_INVESTMENT, ACTION_REVIEW),
    "credit-card": AccountMetadata("credit-card", SUBTYPE_CREDIT_CARD, ACTION_PAYDOWN),
    "loan": AccountMetadata("loan", SUBTYPE_LOAN, ACTION_REVIEW),
}


def get_account_metadata(account_id: str) -> AccountMetadata:
    """Return metadata for an account id, falling back to subtype ``other``."""
    return _ACCOUNT_METADATA.get(account_id, AccountMetadata(account_id, SUBTYPE_OTHER))
