"""Month-end net worth snapshots."""

import logging
from datetime import date, datetime, UTC
from decimal import Decimal
from typing import Callable, Optional

from ledgerbook.database.base import Database
from ledgerbook.domain.entities import (
    AccountNature,
    MonthOverMonthChange,
    NetWorthSnapshot,
)
from ledgerbook.domain.errors import ValidationError
from ledgerbook.domain.money import Money
from ledgerbook.domain.reports import ReportService
from ledgerbook.utils.date_parser import format_month, month_end, parse_month, previous_month

logger = logging.getLogger(__name__)


class SnapshotService:
    """Service for freezing and comparing month-end net worth."""

    def __init__(
        self,
        db: Database,
        owner_id: str,
        reports: ReportService,
        today: Callable[[], date] = date.today,
    ):
        """Initialize snapshot service.

        Args:
            db: Database instance
            owner_id: Owner of the snapshots
            reports: Report service used to compute net worth
            today: Clock deciding the current month
        """
        self.db = db
        self.owner_id = owner_id
        self.reports = reports
        self.today = today

    def create_snapshot(self, month: Optional[str] = None) -> NetWorthSnapshot:
        """Compute and store the net worth snapshot for a month.

        An existing snapshot for the same month is replaced.

        Args:
            month: YYYY-MM key; defaults to the current month

        Returns:
            The stored snapshot

        Raises:
            ValidationError: If the month is malformed or in the future
        """
        today = self.today()
        if month is None:
            month = format_month(today)
        try:
            first_day = parse_month(month)
        except ValueError as e:
            raise ValidationError(str(e)) from e
        if first_day > today.replace(day=1):
            raise ValidationError(f"Cannot snapshot future month {month}")

        as_of = month_end(first_day)
        currency = self.reports.base_currency
        positions = self.reports.get_net_worth_positions(as_of, currency)
        net_worth = self.reports.get_net_worth_at(as_of, currency)

        totals_by_nature = {nature: Money.zero(currency) for nature in AccountNature}
        totals_by_nature[AccountNature.ASSET] = net_worth.total_assets
        totals_by_nature[AccountNature.LIABILITY] = net_worth.total_liabilities

        snapshot = NetWorthSnapshot(
            month=month,
            net_worth=net_worth.net_worth,
            totals_by_nature=totals_by_nature,
            account_snapshots=tuple(positions),
            created_at=datetime.now(UTC),
        )
        self.db.save_snapshot(self.owner_id, snapshot)
        logger.info("Stored snapshot for %s: %s", month, snapshot.net_worth)
        return snapshot

    def get_snapshot(self, month: str) -> Optional[NetWorthSnapshot]:
        return self.db.get_snapshot(self.owner_id, month)

    def list_snapshots(self) -> list[NetWorthSnapshot]:
        """List snapshots in ascending month order."""
        return self.db.load_snapshots(self.owner_id)

    def delete_snapshot(self, month: str) -> None:
        self.db.delete_snapshot(self.owner_id, month)

    def ensure_current_month_snapshot(self) -> NetWorthSnapshot:
        """Return this month's snapshot, creating it if missing."""
        existing = self.get_snapshot(format_month(self.today()))
        if existing is not None:
            return existing
        return self.create_snapshot()

    def get_mom_change(self) -> MonthOverMonthChange:
        """Compare live net worth with last month's snapshot.

        ``delta_pct`` is a percentage of the previous value's magnitude,
        and zero when the previous value is zero.
        """
        today = self.today()
        current = self.reports.get_net_worth_at(today).net_worth
        previous_snapshot = self.get_snapshot(format_month(previous_month(today)))
        if previous_snapshot is None:
            return MonthOverMonthChange(
                current=current,
                previous=None,
                delta_abs=None,
                delta_pct=None,
                has_previous_data=False,
            )

        previous = previous_snapshot.net_worth
        delta = current.subtract(previous)
        if previous.is_zero():
            delta_pct = Decimal(0)
        else:
            delta_pct = Decimal(delta.amount_minor) * 100 / Decimal(abs(previous.amount_minor))
        return MonthOverMonthChange(
            current=current,
            previous=previous,
            delta_abs=delta,
            delta_pct=delta_pct,
            has_previous_data=True,
        )
