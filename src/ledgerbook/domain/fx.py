"""Exchange-rate lookup and currency conversion.

Rates are registered explicitly; nothing here talks to the network. A rate
``FxTable.ensure("USD", "MXN", d, Decimal("17.50"))`` means one US dollar
buys 17.50 pesos on date ``d``.
"""

import logging
from datetime import date
from decimal import Decimal
from typing import Mapping, Protocol

from ledgerbook.domain.currencies import normalize_currency
from ledgerbook.domain.errors import FxMissingError, ValidationError, fx_missing
from ledgerbook.domain.money import Money, Number, to_decimal

logger = logging.getLogger(__name__)


class Converter(Protocol):
    """Anything able to convert a major-unit amount between currencies."""

    def convert(self, amount: Decimal, from_currency: str, to_currency: str) -> Decimal:
        ...


def convert_money(converter: Converter, money: Money, to_currency: str) -> Money:
    """Convert a Money value through a converter, rounding to the target scale."""
    target = normalize_currency(to_currency)
    if money.currency == target:
        return money
    converted = converter.convert(money.to_major_units(), money.currency, target)
    return Money.from_major_units(converted, target)


class FxTable:
    """Dated exchange rates keyed by (base, quote, as_of)."""

    def __init__(self):
        self._rates: dict[tuple[str, str, date], Decimal] = {}

    def ensure(self, base: str, quote: str, as_of: date, rate: Number) -> None:
        """Register or overwrite a rate.

        Args:
            base: Currency being priced
            quote: Currency the price is expressed in
            as_of: Date the rate applies to
            rate: Units of quote per one unit of base

        Raises:
            ValidationError: If the rate is not positive
        """
        value = to_decimal(rate, "FX rate")
        if value <= 0:
            raise ValidationError(f"FX rate must be positive, got {rate}")
        key = (normalize_currency(base), normalize_currency(quote), as_of)
        self._rates[key] = value
        logger.debug("Registered FX rate %s/%s @ %s = %s", key[0], key[1], as_of, value)

    def get_rate(self, base: str, quote: str, as_of: date) -> Decimal:
        """Return the rate for an exact date.

        Same-currency lookups return 1. There is no inverse lookup or
        nearest-date fallback.

        Raises:
            FxMissingError: If no rate is registered for the pair and date
        """
        base = normalize_currency(base)
        quote = normalize_currency(quote)
        if base == quote:
            return Decimal(1)
        rate = self._rates.get((base, quote, as_of))
        if rate is None:
            raise FxMissingError(fx_missing(base, quote, as_of))
        return rate

    def has_rate(self, base: str, quote: str, as_of: date) -> bool:
        base = normalize_currency(base)
        quote = normalize_currency(quote)
        return base == quote or (base, quote, as_of) in self._rates

    def convert(self, amount: Number, base: str, quote: str, as_of: date) -> Decimal:
        """Convert a major-unit amount from base to quote."""
        return to_decimal(amount) * self.get_rate(base, quote, as_of)

    def converter(self, as_of: date) -> "DatedConverter":
        """Return a converter bound to one date."""
        return DatedConverter(self, as_of)

    def __len__(self) -> int:
        return len(self._rates)


class DatedConverter:
    """Converter view of an FxTable at a fixed date."""

    def __init__(self, table: FxTable, as_of: date):
        self.table = table
        self.as_of = as_of

    def convert(self, amount: Decimal, from_currency: str, to_currency: str) -> Decimal:
        return self.table.convert(amount, from_currency, to_currency, self.as_of)


class StaticRatesConverter:
    """Converter over a flat map of quotes relative to one base currency.

    ``rates`` holds units of each currency per one unit of base, e.g. with
    base MXN, ``{"USD": Decimal("0.057")}``.
    """

    def __init__(self, base_currency: str, rates: Mapping[str, Number]):
        self.base_currency = normalize_currency(base_currency)
        self.rates: dict[str, Decimal] = {self.base_currency: Decimal(1)}
        for code, rate in rates.items():
            value = to_decimal(rate, f"FX rate for {code}")
            if value <= 0:
                raise ValidationError(f"FX rate for {code} must be positive, got {rate}")
            self.rates[normalize_currency(code)] = value

    def _rate(self, currency: str) -> Decimal:
        rate = self.rates.get(currency)
        if rate is None:
            raise FxMissingError(fx_missing(self.base_currency, currency))
        return rate

    def convert(self, amount: Decimal, from_currency: str, to_currency: str) -> Decimal:
        from_currency = normalize_currency(from_currency)
        to_currency = normalize_currency(to_currency)
        if from_currency == to_currency:
            return to_decimal(amount)
        in_base = to_decimal(amount) / self._rate(from_currency)
        return in_base * self._rate(to_currency)
