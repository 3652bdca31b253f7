"""Currency registry: minor-unit scale and display conventions."""

import re
from dataclasses import dataclass

from ledgerbook.domain.errors import ValidationError

_CODE_PATTERN = re.compile(r"^[A-Z]{3,6}$")


@dataclass(frozen=True)
class CurrencyConfig:
    """Display and precision settings for one currency."""

    code: str
    name: str
    symbol: str
    decimals: int
    symbol_position: str = "before"
    thousands_separator: str = ","
    decimal_separator: str = "."


_REGISTRY: dict[str, CurrencyConfig] = {}


def normalize_currency(code: str) -> str:
    """Upper-case and validate a currency code.

    Raises:
        ValidationError: If the code is not 3-6 letters
    """
    if not isinstance(code, str):
        raise ValidationError(f"Invalid currency code: {code!r}")
    normalized = code.strip().upper()
    if not _CODE_PATTERN.match(normalized):
        raise ValidationError(f"Invalid currency code: {code!r}")
    return normalized


def register_currency(config: CurrencyConfig) -> None:
    """Register (or replace) a currency configuration."""
    code = normalize_currency(config.code)
    if config.decimals < 0:
        raise ValidationError(f"Currency {code} must have a non-negative scale")
    _REGISTRY[code] = config


def get_currency_config(code: str) -> CurrencyConfig:
    """Look up the configuration for a currency.

    Raises:
        ValidationError: If the currency is not registered
    """
    normalized = normalize_currency(code)
    config = _REGISTRY.get(normalized)
    if config is None:
        raise ValidationError(f"Unsupported currency: {normalized}")
    return config


def supported_currencies() -> list[str]:
    """Return registered currency codes in sorted order."""
    return sorted(_REGISTRY)


for _config in (
    CurrencyConfig("MXN", "Mexican Peso", "$", 2),
    CurrencyConfig("USD", "US Dollar", "$", 2),
    CurrencyConfig(
        "EUR",
        "Euro",
        "€",
        2,
        symbol_position="after",
        thousands_separator=".",
        decimal_separator=",",
    ),
    CurrencyConfig("BTC", "Bitcoin", "₿", 8),
    CurrencyConfig("ETH", "Ethereum", "Ξ", 8),
    CurrencyConfig("USDT", "Tether", "₮", 2),
    CurrencyConfig("USDC", "USD Coin", "$", 2),
):
    register_currency(_config)
