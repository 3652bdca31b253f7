"""Utility functions for ledgerbook."""

from ledgerbook.utils.date_parser import parse_date, parse_month, month_bounds, month_end
from ledgerbook.utils.amount_parser import parse_amount

__all__ = ["parse_date", "parse_month", "month_bounds", "month_end", "parse_amount"]
