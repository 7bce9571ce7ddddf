"""Currency service: exchange rates and ledger re-denomination."""

import json
import random
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Callable, Optional

from config import Config
from db.store import RATES_KEY
from errors import ValidationError
from logger import get_logger
from models.currency import (
    BASE_CURRENCY,
    SUPPORTED_CURRENCIES,
    ExchangeRates,
    format_currency,
)

logger = get_logger("currency")

CENTS = Decimal("0.01")

# confirm(from_code, to_code, rate) -> bool
ConfirmCallback = Callable[[str, str, Decimal], bool]


def round_amount(amount: Decimal) -> Decimal:
    """Round to 2 decimal places, halves away from zero."""
    return amount.quantize(CENTS, rounding=ROUND_HALF_UP)


class CurrencyService:
    """Holds the USD-pegged rate table and converts the whole ledger.

    Conversion rounds every amount to cents individually, so converting
    A -> B -> A may not give back the exact original amounts. Each step is
    off by at most half a cent per record.

    Args:
        ledger: LedgerService whose amounts are converted.
        config: Application configuration (base rates and refresh jitter).
        store: Optional key-value store remembering the last refreshed table.
        rng: Random source for simulated rate refreshes.
    """

    def __init__(
        self,
        ledger,
        config: Config,
        store=None,
        rng: Optional[random.Random] = None,
    ):
        self.ledger = ledger
        self.config = config
        self.store = store
        self.base_rates = ExchangeRates.from_mapping(config.exchange_rates)
        self.rates = self._load_rates() or ExchangeRates.from_mapping(
            config.exchange_rates
        )
        self.rng = rng or random.Random()

    def _load_rates(self) -> Optional[ExchangeRates]:
        if self.store is None:
            return None
        raw = self.store.get(RATES_KEY)
        if raw is None:
            return None
        try:
            data = json.loads(raw)
            rates = ExchangeRates.from_mapping(
                {
                    code: value
                    for code, value in data["rates"].items()
                    if code in SUPPORTED_CURRENCIES
                }
            )
            last_updated = data.get("lastUpdated")
            if last_updated:
                rates.last_updated = datetime.fromisoformat(last_updated)
            return rates
        except (json.JSONDecodeError, KeyError, TypeError, ValueError, ArithmeticError) as e:
            logger.error(f"Error loading exchange rates, using defaults: {e}")
            return None

    def _save_rates(self) -> None:
        if self.store is None:
            return
        data = {
            "rates": {code: str(rate) for code, rate in self.rates.rates.items()},
            "lastUpdated": (
                self.rates.last_updated.isoformat() if self.rates.last_updated else None
            ),
        }
        try:
            self.store.set(RATES_KEY, json.dumps(data))
        except OSError as e:
            logger.error(f"Error saving exchange rates: {e}")

    def _check_code(self, code: str) -> str:
        code = (code or "").strip().upper()
        if code not in SUPPORTED_CURRENCIES:
            raise ValidationError(f"Unsupported currency: {code}")
        return code

    def rate(self, from_code: str, to_code: str) -> Decimal:
        """Units of to_code per unit of from_code, via the USD cross-rate."""
        from_rate = self.rates.units_per_usd(from_code)
        to_rate = self.rates.units_per_usd(to_code)
        return to_rate / from_rate

    def preview(self, amount, from_code: str, to_code: str) -> str:
        """Describe what amount becomes, e.g. "$100.00 → €85.00"."""
        amount = Decimal(str(amount))
        converted = round_amount(amount * self.rate(from_code, to_code))
        return f"{format_currency(amount, from_code)} → {format_currency(converted, to_code)}"

    def convert(
        self,
        from_code: str,
        to_code: str,
        confirm: Optional[ConfirmCallback] = None,
    ) -> bool:
        """Re-denominate every transaction and budget from from_code to to_code.

        New amounts are computed for every record first; the ledger is only
        touched once all of them are ready, and then all amounts and the
        currency setting switch together. If confirm returns False nothing
        changes.

        Args:
            from_code: Current ledger currency.
            to_code: Target currency.
            confirm: Optional callback asked before anything is changed.

        Returns:
            True if the ledger was converted, False for a no-op or cancellation.

        Raises:
            ValidationError: If a code is unsupported or from_code is not the
                ledger's current currency.
        """
        from_code = self._check_code(from_code)
        to_code = self._check_code(to_code)

        if from_code == to_code:
            return False

        if from_code != self.ledger.settings.currency:
            raise ValidationError(
                f"Ledger is in {self.ledger.settings.currency}, not {from_code}"
            )

        conversion_rate = self.rate(from_code, to_code)

        if confirm is not None and not confirm(from_code, to_code, conversion_rate):
            logger.info(f"Currency conversion {from_code} → {to_code} cancelled")
            return False

        transaction_amounts = {
            t.id: round_amount(t.amount * conversion_rate)
            for t in self.ledger.transactions
        }
        budget_amounts = {
            b.id: round_amount(b.amount * conversion_rate) for b in self.ledger.budgets
        }

        self.ledger.apply_conversion(transaction_amounts, budget_amounts, to_code)

        logger.info(
            f"Currency converted from {from_code} to {to_code} "
            f"({len(transaction_amounts)} transactions, {len(budget_amounts)} budgets)"
        )
        return True

    def refresh_rates(self) -> ExchangeRates:
        """Simulate a rate feed: jitter every non-USD base rate by up to ±jitter.

        The result is cosmetic; it is not fetched from anywhere.
        """
        jitter = self.config.rate_jitter
        rates = {}
        for code, base in self.base_rates.rates.items():
            if code == BASE_CURRENCY:
                rates[code] = base
                continue
            variation = Decimal(str(self.rng.uniform(-jitter, jitter)))
            rates[code] = (base * (1 + variation)).quantize(
                Decimal("0.0001"), rounding=ROUND_HALF_UP
            )

        self.rates = ExchangeRates(rates=rates, last_updated=datetime.now())
        self._save_rates()
        logger.info("Exchange rates updated")
        return self.rates
