"""Tests for the Money value object and currency registry."""

import pytest
from decimal import Decimal

from ledgerbook.domain import currencies
from ledgerbook.domain.currencies import (
    CurrencyConfig,
    get_currency_config,
    normalize_currency,
    register_currency,
    supported_currencies,
)
from ledgerbook.domain.errors import CurrencyMismatchError, ValidationError
from ledgerbook.domain.money import Money


class TestConstruction:
    """Tests for creating Money values."""

    def test_from_major_units_stores_minor_units(self):
        money = Money.from_major_units(Decimal("12.34"), "MXN")
        assert money.amount_minor == 1234
        assert money.currency == "MXN"

    def test_from_major_units_rounds_half_up(self):
        assert Money.from_major_units("0.005", "MXN").amount_minor == 1
        assert Money.from_major_units("0.004", "MXN").amount_minor == 0
        assert Money.from_major_units("-0.005", "MXN").amount_minor == -1

    def test_float_input_has_no_binary_artifacts(self):
        assert Money.from_major_units(0.1, "USD").amount_minor == 10
        assert Money.from_major_units(1.15, "USD").amount_minor == 115

    def test_crypto_scale(self):
        assert Money.from_major_units("0.00000001", "BTC").amount_minor == 1
        assert Money.from_major_units("1", "ETH").amount_minor == 100_000_000

    def test_currency_is_normalized(self):
        assert Money(100, "usd").currency == "USD"

    def test_non_integer_minor_units_rejected(self):
        with pytest.raises(ValidationError):
            Money(12.5, "MXN")
        with pytest.raises(ValidationError):
            Money(True, "MXN")

    def test_invalid_amount_rejected(self):
        with pytest.raises(ValidationError, match="Invalid amount"):
            Money.from_major_units("abc", "MXN")

    @pytest.mark.parametrize(
        "amount", ["NaN", "Infinity", "-Infinity", float("nan"), float("inf"), Decimal("NaN")]
    )
    def test_non_finite_amount_rejected(self, amount):
        with pytest.raises(ValidationError, match="not a finite number"):
            Money.from_major_units(amount, "MXN")

    def test_non_finite_factor_rejected(self):
        with pytest.raises(ValidationError):
            Money(100, "MXN").multiply("NaN")
        with pytest.raises(ValidationError):
            Money(100, "MXN").divide(Decimal("Infinity"))


    def test_unsupported_currency_rejected(self):
        with pytest.raises(ValidationError, match="Unsupported currency"):
            Money.from_major_units("1", "XYZ")

    def test_zero(self):
        assert Money.zero("EUR").is_zero()


class TestArithmetic:
    """Tests for Money arithmetic."""

    def test_add_and_subtract(self):
        a = Money(1000, "MXN")
        b = Money(250, "MXN")
        assert a.add(b) == Money(1250, "MXN")
        assert a.subtract(b) == Money(750, "MXN")

    def test_mixing_currencies_fails(self):
        with pytest.raises(CurrencyMismatchError):
            Money(100, "MXN").add(Money(100, "USD"))
        with pytest.raises(CurrencyMismatchError):
            Money(100, "MXN").is_greater_than(Money(1, "USD"))

    def test_multiply_rounds_half_up(self):
        assert Money(333, "MXN").multiply(Decimal("0.5")) == Money(167, "MXN")
        assert Money(100, "MXN").multiply(3) == Money(300, "MXN")

    def test_divide(self):
        assert Money(1000, "MXN").divide(3) == Money(333, "MXN")
        assert Money(1000, "MXN").divide(6) == Money(167, "MXN")

    def test_divide_by_zero(self):
        with pytest.raises(ValidationError, match="divide money by zero"):
            Money(1000, "MXN").divide(0)

    def test_negate_and_abs(self):
        money = Money(-500, "MXN")
        assert money.negate() == Money(500, "MXN")
        assert money.abs() == Money(500, "MXN")

    def test_money_is_immutable(self):
        money = Money(100, "MXN")
        with pytest.raises(AttributeError):
            money.amount_minor = 200


class TestComparison:
    """Tests for predicates and comparisons."""

    def test_predicates(self):
        assert Money(1, "MXN").is_positive()
        assert Money(-1, "MXN").is_negative()
        assert not Money(0, "MXN").is_positive()

    def test_equals_requires_same_currency(self):
        assert Money(100, "MXN").equals(Money(100, "MXN"))
        assert not Money(100, "MXN").equals(Money(100, "USD"))

    def test_ordering(self):
        assert Money(200, "MXN").is_greater_than(Money(100, "MXN"))
        assert Money(100, "MXN").is_less_than(Money(200, "MXN"))


class TestFormatting:
    """Tests for conversion and display."""

    def test_to_major_units(self):
        assert Money(123456, "MXN").to_major_units() == Decimal("1234.56")
        assert Money(1, "BTC").to_major_units() == Decimal("0.00000001")

    def test_format_default(self):
        assert Money(123456, "MXN").format() == "$1,234.56"

    def test_format_negative(self):
        assert Money(-25000, "MXN").format() == "-$250.00"

    def test_format_with_code(self):
        assert Money(123456, "MXN").format(show_code=True) == "$1,234.56 MXN"
        assert str(Money(500, "USD")) == "$5.00 USD"

    def test_format_without_symbol(self):
        assert Money(123456, "MXN").format(show_symbol=False) == "1,234.56"

    def test_format_european_conventions(self):
        assert Money(123456, "EUR").format() == "1.234,56 €"

    def test_format_crypto(self):
        assert Money(150_000_000, "BTC").format() == "₿1.50000000"


class TestCurrencies:
    """Tests for the currency registry."""

    def test_normalize_currency(self):
        assert normalize_currency(" usd ") == "USD"

    def test_normalize_rejects_bad_codes(self):
        for code in ("", "US", "U5D", "TOOLONGX"):
            with pytest.raises(ValidationError):
                normalize_currency(code)

    def test_registered_currencies(self):
        codes = supported_currencies()
        for code in ("MXN", "USD", "EUR", "BTC", "ETH", "USDT", "USDC"):
            assert code in codes
        assert get_currency_config("btc").decimals == 8


@pytest.fixture
def scratch_registry(monkeypatch):
    """Let a test register currencies without leaking them into other tests."""
    monkeypatch.setattr(currencies, "_REGISTRY", dict(currencies._REGISTRY))


class TestRegisterCurrency:
    """Tests for adding currencies with their own minor-unit scale."""

    def test_zero_decimal_currency(self, scratch_registry):
        register_currency(CurrencyConfig("JPY", "Japanese Yen", "¥", 0))

        money = Money.from_major_units("1234.5", "JPY")
        assert money.amount_minor == 1235
        assert money.to_major_units() == Decimal("1235")
        assert money.format(show_code=True) == "¥1,235 JPY"

    def test_three_decimal_currency(self, scratch_registry):
        register_currency(CurrencyConfig("KWD", "Kuwaiti Dinar", "KD", 3))

        money = Money.from_major_units("1.2345", "KWD")
        assert money.amount_minor == 1235
        assert money.to_major_units() == Decimal("1.235")
        assert Money.from_major_units(money.to_major_units(), "KWD") == money

    def test_replacing_a_currency_changes_its_scale(self, scratch_registry):
        register_currency(CurrencyConfig("USDT", "Tether", "₮", 6))

        assert Money.from_major_units("0.000001", "USDT").amount_minor == 1

    def test_negative_scale_rejected(self, scratch_registry):
        with pytest.raises(ValidationError, match="non-negative scale"):
            register_currency(CurrencyConfig("XBT", "Broken", "X", -1))
        assert "XBT" not in supported_currencies()

    def test_registry_is_restored(self):
        assert "JPY" not in supported_currencies()
        assert get_currency_config("USDT").decimals == 2
