"""Month-end revaluation of foreign-currency positions."""

import logging
from datetime import date
from typing import Optional

from ledgerbook.domain.builder import REVALUATION_TAG, fx_revaluation
from ledgerbook.domain.chart import FX_GAIN_ACCOUNT_ID, FX_LOSS_ACCOUNT_ID
from ledgerbook.domain.entities import (
    AccountNature,
    FxPosition,
    RevaluationResult,
    TransactionDraft,
    TransactionFilters,
)
from ledgerbook.domain.fx import FxTable
from ledgerbook.domain.ledger import LedgerEngine
from ledgerbook.domain.money import Money
from ledgerbook.utils.date_parser import month_end

logger = logging.getLogger(__name__)


def _currency_tag(currency: str) -> str:
    return f"fx:{currency}"


class FxRevaluationService:
    """Service for measuring and booking unrealized FX gains and losses.

    A position is the net (debit minus credit) foreign amount an asset or
    liability account holds in one currency. Its carrying value is the net booked amount plus
    earlier revaluations of the same position; the unrealized gain or loss
    is the value at the as-of rate minus that carrying value.
    """

    def __init__(
        self,
        engine: LedgerEngine,
        fx: FxTable,
        gain_account_id: str = FX_GAIN_ACCOUNT_ID,
        loss_account_id: str = FX_LOSS_ACCOUNT_ID,
    ):
        """Initialize revaluation service.

        Args:
            engine: Ledger engine holding the postings
            fx: Table providing the as-of rates
            gain_account_id: Income account credited with gains
            loss_account_id: Expense account debited with losses
        """
        self.engine = engine
        self.fx = fx
        self.gain_account_id = gain_account_id
        self.loss_account_id = loss_account_id

    def calculate_fx_positions(self, as_of: date) -> list[FxPosition]:
        """Net foreign-currency positions per account as of a date.

        Raises:
            FxMissingError: If a rate for a held currency is not registered for as_of
        """
        base = self.engine.base_currency
        balance_sheet = {
            a.id
            for a in self.engine.list_accounts()
            if a.nature in (AccountNature.ASSET, AccountNature.LIABILITY)
        }
        originals: dict[tuple[str, str], int] = {}
        carrying: dict[tuple[str, str], int] = {}

        transactions = self.engine.get_transactions(TransactionFilters(date_to=as_of))
        for transaction in transactions:
            for posting in transaction.postings:
                currency = posting.original.currency
                if currency == base or posting.account_id not in balance_sheet:
                    continue
                sign = 1 if posting.booked_debit is not None else -1
                key = (posting.account_id, currency)
                originals[key] = originals.get(key, 0) + sign * posting.original.amount_minor
                carrying[key] = carrying.get(key, 0) + sign * posting.booked.amount_minor

        # Earlier revaluations adjust the carrying value of the position they name.
        for transaction in transactions:
            if REVALUATION_TAG not in transaction.tags:
                continue
            revalued = [tag[3:] for tag in transaction.tags if tag.startswith("fx:")]
            for posting in transaction.postings:
                sign = 1 if posting.booked_debit is not None else -1
                for currency in revalued:
                    key = (posting.account_id, currency)
                    if key in carrying:
                        carrying[key] += sign * posting.booked.amount_minor

        positions = []
        for (account_id, currency), original_minor in sorted(originals.items()):
            original = Money(original_minor, currency)
            booked = Money(carrying[(account_id, currency)], base)
            rate = self.fx.get_rate(currency, base, as_of)
            current_value = Money.from_major_units(original.to_major_units() * rate, base)
            positions.append(
                FxPosition(
                    account_id=account_id,
                    currency=currency,
                    original_amount=original,
                    booked_amount=booked,
                    current_rate=rate,
                    current_value=current_value,
                    unrealized=current_value.subtract(booked),
                )
            )
        return positions

    def generate_revaluation_drafts(
        self,
        positions: list[FxPosition],
        as_of: date,
        description: str = "Monthly FX revaluation",
    ) -> list[TransactionDraft]:
        """Build one revaluation draft per position with a non-zero gain or loss."""
        drafts = []
        for position in positions:
            if position.unrealized.is_zero():
                continue
            drafts.append(
                fx_revaluation(
                    position.account_id,
                    self.gain_account_id,
                    self.loss_account_id,
                    position.unrealized,
                    f"{description} - {position.currency} position",
                    as_of,
                    tags=(_currency_tag(position.currency),),
                )
            )
        return drafts

    def total_unrealized(self, positions: list[FxPosition]) -> Money:
        total = Money.zero(self.engine.base_currency)
        for position in positions:
            total = total.add(position.unrealized)
        return total

    def is_revaluation_needed(self, positions: list[FxPosition], threshold: Money) -> bool:
        """True when the summed magnitude of gains and losses reaches threshold."""
        total = Money.zero(threshold.currency)
        for position in positions:
            total = total.add(position.unrealized.abs())
        return not total.is_less_than(threshold)

    def perform_month_end_revaluation(
        self, year: int, month: int, post: bool = False, threshold: Optional[Money] = None
    ) -> RevaluationResult:
        """Revalue positions at the last day of a month.

        Args:
            year: Calendar year
            month: Calendar month (1-12)
            post: Record the drafts in the ledger when True
            threshold: Skip posting when total movement is below this amount

        Raises:
            FxMissingError: If a month-end rate is missing
        """
        as_of = month_end(date(year, month, 1))
        positions = self.calculate_fx_positions(as_of)
        drafts = self.generate_revaluation_drafts(
            positions, as_of, f"Month-end FX revaluation {year}-{month:02d}"
        )

        posted: list[str] = []
        if post and drafts:
            if threshold is not None and not self.is_revaluation_needed(positions, threshold):
                logger.info("FX revaluation for %s below threshold; nothing posted", as_of)
            else:
                for draft in drafts:
                    posted.append(self.engine.add_transaction(draft).id)
                logger.info("Posted %d FX revaluation transactions for %s", len(posted), as_of)

        return RevaluationResult(
            as_of=as_of,
            positions=tuple(positions),
            drafts=tuple(drafts),
            posted_transaction_ids=tuple(posted),
        )
