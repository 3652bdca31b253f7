"""Money value object stored in integer minor units."""

from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP, InvalidOperation
from typing import Union

from ledgerbook.domain.currencies import get_currency_config, normalize_currency
from ledgerbook.domain.errors import (
    CurrencyMismatchError,
    ValidationError,
    currency_mismatch,
)

Number = Union[Decimal, int, str, float]


def to_decimal(value: Number, kind: str = "amount") -> Decimal:
    """Convert a numeric input to a finite Decimal without float artifacts.

    Raises:
        ValidationError: If the value is not numeric, or is NaN or infinite.
            The message names ``kind``.
    """
    if isinstance(value, bool):
        raise ValidationError(f"Invalid {kind}: {value!r}")
    try:
        if isinstance(value, Decimal):
            result = value
        elif isinstance(value, float):
            result = Decimal(str(value))
        else:
            result = Decimal(value)
    except (InvalidOperation, TypeError, ValueError) as e:
        raise ValidationError(f"Invalid {kind}: {value!r}") from e
    if not result.is_finite():
        raise ValidationError(f"Invalid {kind}: {value!r} is not a finite number")
    return result


def round_half_up(value: Decimal) -> int:
    """Round to the nearest integer, halves away from zero."""
    return int(value.quantize(Decimal(1), rounding=ROUND_HALF_UP))


@dataclass(frozen=True)
class Money:
    """An immutable amount of a single currency.

    ``amount_minor`` is an integer count of the currency's smallest unit
    (cents for MXN, satoshis for BTC). All arithmetic stays in minor units;
    major units exist only for input and display.
    """

    amount_minor: int
    currency: str

    def __post_init__(self):
        if isinstance(self.amount_minor, bool) or not isinstance(self.amount_minor, int):
            raise ValidationError(
                f"Minor-unit amount must be an integer, got {self.amount_minor!r}"
            )
        object.__setattr__(self, "currency", normalize_currency(self.currency))

    # Construction
    @classmethod
    def from_major_units(cls, amount: Number, currency: str) -> "Money":
        """Create Money from a major-unit amount such as ``Decimal("12.34")``."""
        config = get_currency_config(currency)
        scaled = to_decimal(amount) * (Decimal(10) ** config.decimals)
        return cls(round_half_up(scaled), config.code)

    @classmethod
    def from_minor_units(cls, amount_minor: int, currency: str) -> "Money":
        """Create Money from an integer minor-unit amount."""
        return cls(amount_minor, currency)

    @classmethod
    def zero(cls, currency: str) -> "Money":
        """Return zero in the given currency."""
        return cls(0, currency)

    # Arithmetic
    def _check_currency(self, other: "Money") -> None:
        if self.currency != other.currency:
            raise CurrencyMismatchError(currency_mismatch(self.currency, other.currency))

    def add(self, other: "Money") -> "Money":
        self._check_currency(other)
        return Money(self.amount_minor + other.amount_minor, self.currency)

    def subtract(self, other: "Money") -> "Money":
        self._check_currency(other)
        return Money(self.amount_minor - other.amount_minor, self.currency)

    def multiply(self, factor: Number) -> "Money":
        """Multiply by a scalar, rounding half away from zero."""
        return Money(round_half_up(Decimal(self.amount_minor) * to_decimal(factor)), self.currency)

    def divide(self, divisor: Number) -> "Money":
        """Divide by a scalar, rounding half away from zero.

        Raises:
            ValidationError: If divisor is zero
        """
        value = to_decimal(divisor)
        if value == 0:
            raise ValidationError("Cannot divide money by zero")
        return Money(round_half_up(Decimal(self.amount_minor) / value), self.currency)

    def negate(self) -> "Money":
        return Money(-self.amount_minor, self.currency)

    def abs(self) -> "Money":
        return Money(abs(self.amount_minor), self.currency)

    # Comparison
    def equals(self, other: "Money") -> bool:
        return self.currency == other.currency and self.amount_minor == other.amount_minor

    def is_zero(self) -> bool:
        return self.amount_minor == 0

    def is_negative(self) -> bool:
        return self.amount_minor < 0

    def is_positive(self) -> bool:
        return self.amount_minor > 0

    def is_greater_than(self, other: "Money") -> bool:
        self._check_currency(other)
        return self.amount_minor > other.amount_minor

    def is_less_than(self, other: "Money") -> bool:
        self._check_currency(other)
        return self.amount_minor < other.amount_minor

    # Conversion
    def get_currency(self) -> str:
        return self.currency

    def to_minor_units(self) -> int:
        return self.amount_minor

    def to_major_units(self) -> Decimal:
        """Return the amount in major units, exact to the currency scale."""
        decimals = get_currency_config(self.currency).decimals
        return Decimal(self.amount_minor).scaleb(-decimals)

    def format(self, show_symbol: bool = True, show_code: bool = False) -> str:
        """Render for display using the currency's conventions.

        Examples:
            Money(123456, "MXN").format() -> "$1,234.56"
            Money(123456, "EUR").format() -> "1.234,56 €"
        """
        config = get_currency_config(self.currency)
        major = abs(self.to_major_units())
        text = f"{major:,.{config.decimals}f}"
        # Swap separators through a placeholder so "." and "," can trade places
        text = (
            text.replace(",", "\0")
            .replace(".", config.decimal_separator)
            .replace("\0", config.thousands_separator)
        )
        if show_symbol:
            if config.symbol_position == "after":
                text = f"{text} {config.symbol}"
            else:
                text = f"{config.symbol}{text}"
        if self.amount_minor < 0:
            text = f"-{text}"
        if show_code:
            text = f"{text} {self.currency}"
        return text

    def __str__(self) -> str:
        return self.format(show_code=True)
