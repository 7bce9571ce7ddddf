import json
import random
from decimal import Decimal

import pytest

from db.store import RATES_KEY
from errors import ValidationError
from models.currency import ExchangeRates
from services.currency import CurrencyService, round_amount
from tests.helpers import make_transaction


class TestRates:
    """Tests for rate lookups and previews."""

    def test_cross_rate(self, services):
        """Test conversion rates through USD."""
        assert services.currency.rate("USD", "EUR") == Decimal("0.85")
        assert services.currency.rate("EUR", "GBP") == Decimal("0.73") / Decimal("0.85")

    def test_preview(self, services):
        """Test the sample conversion text."""
        assert services.currency.preview(100, "USD", "EUR") == "$100.00 → €85.00"
        assert services.currency.preview(100, "USD", "JPY") == "$100.00 → ¥11000"

    def test_round_amount_half_up(self):
        """Test rounding halves away from zero."""
        assert round_amount(Decimal("2.345")) == Decimal("2.35")
        assert round_amount(Decimal("2.344")) == Decimal("2.34")


class TestConvert:
    """Tests for CurrencyService.convert."""

    def test_converts_all_amounts(self, services):
        """Test that transactions, budgets and the setting change together."""
        t = services.ledger.add_transaction(make_transaction(amount="100"))
        services.ledger.upsert_budget("Travel", "200")

        assert services.currency.convert("USD", "EUR") is True

        assert services.ledger.settings.currency == "EUR"
        assert t.amount == Decimal("85.00")
        assert services.ledger.budgets[0].amount == Decimal("170.00")

    def test_round_trip_within_a_cent(self, services):
        """Test that USD -> EUR -> USD returns each amount within 0.01."""
        originals = ["12.34", "0.99", "1000.00", "57.77", "3.01"]
        added = [services.ledger.add_transaction(make_transaction(amount=a)) for a in originals]

        services.currency.convert("USD", "EUR")
        services.currency.convert("EUR", "USD")

        for original, t in zip(originals, added):
            assert abs(t.amount - Decimal(original)) <= Decimal("0.01")

    def test_same_currency_is_noop(self, services):
        """Test that converting to the current currency changes nothing."""
        t = services.ledger.add_transaction(make_transaction(amount="10"))
        revision = services.ledger.revision
        assert services.currency.convert("USD", "USD") is False
        assert t.amount == Decimal("10")
        assert services.ledger.revision == revision

    def test_cancel_changes_nothing(self, services):
        """Test that a declined confirmation leaves the ledger untouched."""
        t = services.ledger.add_transaction(make_transaction(amount="10"))
        asked = []

        def decline(from_code, to_code, rate):
            asked.append((from_code, to_code))
            return False

        assert services.currency.convert("USD", "GBP", confirm=decline) is False
        assert asked == [("USD", "GBP")]
        assert t.amount == Decimal("10")
        assert services.ledger.settings.currency == "USD"

    def test_wrong_source_currency(self, services):
        """Test that from_code must match the ledger currency."""
        with pytest.raises(ValidationError):
            services.currency.convert("EUR", "GBP")

    def test_unsupported_currency(self, services):
        """Test that unknown codes are rejected."""
        with pytest.raises(ValidationError):
            services.currency.convert("USD", "XYZ")

    def test_amount_rounding_to_zero_aborts(self, services):
        """Test that a conversion producing a zero amount changes nothing."""
        kept = services.ledger.add_transaction(make_transaction(amount="10"))
        tiny = services.ledger.add_transaction(make_transaction(amount="0.001"))

        with pytest.raises(ValidationError):
            services.currency.convert("USD", "GBP")

        assert services.ledger.settings.currency == "USD"
        assert kept.amount == Decimal("10")
        assert tiny.amount == Decimal("0.001")


class TestRateTable:
    """Tests for rate table validation."""

    @pytest.mark.parametrize("rate", [0, -1.25, "abc", float("inf")])
    def test_invalid_rate_rejected(self, rate):
        """Test that a rate that is not a positive number is rejected."""
        with pytest.raises(ValidationError):
            ExchangeRates.from_mapping({"USD": 1.0, "EUR": rate})

    def test_zero_rate_in_config_rejected(self, services, test_config):
        """Test that a currency service cannot be built from a zero rate."""
        test_config.exchange_rates["EUR"] = 0.0
        with pytest.raises(ValidationError):
            CurrencyService(services.ledger, test_config)

    def test_stored_zero_rate_falls_back_to_config(self, services, memory_store, test_config):
        """Test that an invalid stored table is ignored."""
        memory_store.set(RATES_KEY, json.dumps({"rates": {"EUR": 0}, "lastUpdated": None}))
        currency = CurrencyService(services.ledger, test_config, memory_store)
        assert currency.rate("USD", "EUR") == Decimal("0.85")


class TestRefresh:
    """Tests for simulated rate refreshes."""

    def test_refresh_stays_within_jitter(self, services):
        """Test that every rate moves at most 2% and USD stays at 1."""
        rates = services.currency.refresh_rates()

        assert rates.rates["USD"] == Decimal("1.0")
        assert rates.last_updated is not None
        for code, base in services.currency.base_rates.rates.items():
            assert abs(rates.rates[code] - base) <= base * Decimal("0.0201")

    def test_refresh_is_persisted(self, services, memory_store, test_config):
        """Test that refreshed rates are reloaded by a new service."""
        services.currency.refresh_rates()
        stored = json.loads(memory_store.get(RATES_KEY))
        assert stored["lastUpdated"]

        reloaded = CurrencyService(services.ledger, test_config, memory_store, random.Random(1))
        assert reloaded.rates.rates["EUR"] == services.currency.rates.rates["EUR"]
