"""Supported currencies, their display rules, and the USD-pegged rate table."""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Dict, Optional

from errors import ValidationError

BASE_CURRENCY = "USD"


@dataclass(frozen=True)
class Currency:
    code: str
    symbol: str
    decimals: int


CURRENCIES: Dict[str, Currency] = {
    "USD": Currency("USD", "$", 2),
    "EUR": Currency("EUR", "€", 2),
    "GBP": Currency("GBP", "£", 2),
    "JPY": Currency("JPY", "¥", 0),
    "CAD": Currency("CAD", "C$", 2),
    "AUD": Currency("AUD", "A$", 2),
}

SUPPORTED_CURRENCIES = tuple(CURRENCIES)


def format_currency(amount: Decimal, code: str) -> str:
    """Format an amount with the currency's symbol and decimal places.

    Unknown codes are formatted as USD.
    """
    currency = CURRENCIES.get(code, CURRENCIES[BASE_CURRENCY])
    quantum = Decimal(1).scaleb(-currency.decimals)
    value = Decimal(str(amount)).quantize(quantum, rounding=ROUND_HALF_UP)
    sign = "-" if value < 0 else ""
    return f"{sign}{currency.symbol}{abs(value)}"


@dataclass
class ExchangeRates:
    """Units of each currency per 1 USD.

    Attributes:
        rates: Mapping of currency code to units per USD.
        last_updated: When the table was last refreshed, None for the static table.
    """

    rates: Dict[str, Decimal] = field(default_factory=dict)
    last_updated: Optional[datetime] = None

    @classmethod
    def from_mapping(cls, mapping: Dict[str, float]) -> "ExchangeRates":
        """Build a table from plain numbers.

        Raises:
            ValidationError: If a rate is not a positive finite number.
        """
        rates = {}
        for code, rate in mapping.items():
            try:
                value = Decimal(str(rate))
            except InvalidOperation:
                raise ValidationError(f"Invalid exchange rate for {code}: {rate!r}")
            if not value.is_finite() or value <= 0:
                raise ValidationError(f"Exchange rate for {code} must be positive: {rate}")
            rates[code] = value
        return cls(rates=rates)

    def units_per_usd(self, code: str) -> Decimal:
        """Look up a rate. Missing codes count as 1, like USD."""
        return self.rates.get(code, Decimal("1"))
