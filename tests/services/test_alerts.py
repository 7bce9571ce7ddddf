import json
from datetime import date

import pytest

from db.store import ALERTS_KEY, MemoryStore
from services.alerts import AlertService
from services.ledger import LedgerService
from tests.helpers import make_transaction

TODAY = date(2025, 6, 20)


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def ledger(store):
    ledger = LedgerService(store)
    ledger.upsert_budget("Food & Dining", "200")
    return ledger


class TestAlertService:
    """Tests for the once-per-day budget alert policy."""

    def test_warning_fires_once_per_day(self, ledger, store):
        """Test that 80% usage raises exactly one warning per day."""
        ledger.add_transaction(make_transaction(on=TODAY, amount="160"))
        alerts = AlertService(ledger, store)

        fired = alerts.evaluate(TODAY)

        assert [a.key for a in fired] == ["Food & Dining-warning"]
        assert fired[0].percent == pytest.approx(80.0)
        assert "80.0%" in fired[0].message("USD")
        assert alerts.evaluate(TODAY) == []

    def test_fires_again_next_day(self, ledger, store):
        """Test that the raised set resets when the date changes."""
        ledger.add_transaction(make_transaction(on=TODAY, amount="160"))
        alerts = AlertService(ledger, store)

        alerts.evaluate(TODAY)
        fired = alerts.evaluate(date(2025, 6, 21))

        assert [a.key for a in fired] == ["Food & Dining-warning"]

    def test_over_budget(self, ledger, store):
        """Test that 100% or more raises the over-budget alert."""
        ledger.add_transaction(make_transaction(on=TODAY, amount="250"))
        fired = AlertService(ledger, store).evaluate(TODAY)

        assert [a.level for a in fired] == ["over"]
        assert "Budget exceeded for Food & Dining" in fired[0].message("USD")
        assert "$250.00" in fired[0].message("USD")

    def test_warning_then_over_same_day(self, ledger, store):
        """Test that crossing 100% after a warning still raises the over alert."""
        alerts = AlertService(ledger, store)
        ledger.add_transaction(make_transaction(on=TODAY, amount="170"))
        assert [a.level for a in alerts.evaluate(TODAY)] == ["warning"]

        ledger.add_transaction(make_transaction(on=TODAY, amount="40"))
        assert [a.level for a in alerts.evaluate(TODAY)] == ["over"]
        assert alerts.evaluate(TODAY) == []

    def test_below_threshold_is_silent(self, ledger, store):
        """Test that spending under 80% raises nothing."""
        ledger.add_transaction(make_transaction(on=TODAY, amount="159.99"))
        assert AlertService(ledger, store).evaluate(TODAY) == []

    def test_disabled_alerts(self, ledger, store):
        """Test that nothing fires with budget alerts turned off."""
        ledger.add_transaction(make_transaction(on=TODAY, amount="500"))
        ledger.update_settings(budget_alerts=False)
        assert AlertService(ledger, store).evaluate(TODAY) == []

    def test_state_survives_restart(self, ledger, store):
        """Test that a new service remembers what was raised today."""
        ledger.add_transaction(make_transaction(on=TODAY, amount="160"))
        AlertService(ledger, store).evaluate(TODAY)

        stored = json.loads(store.get(ALERTS_KEY))
        assert stored == {"raised": ["Food & Dining-warning"], "lastReset": "2025-06-20"}
        assert AlertService(ledger, store).evaluate(TODAY) == []

    def test_corrupt_state_starts_fresh(self, ledger, store):
        """Test that unreadable stored state is ignored."""
        store.set(ALERTS_KEY, "{broken")
        ledger.add_transaction(make_transaction(on=TODAY, amount="160"))
        assert len(AlertService(ledger, store).evaluate(TODAY)) == 1


class TestLedgerTriggers:
    """Tests for alerts raised by ledger changes."""

    def test_import_with_expenses_evaluates_alerts(self, services):
        """Test that importing expenses past a threshold raises the alert."""
        services.ledger.upsert_budget("Travel", "100")

        services.ledger.import_transactions(
            [make_transaction(on=date.today(), category="Travel", amount="90")]
        )

        assert "Travel-warning" in services.alerts.raised

    def test_import_of_income_only_does_not_evaluate(self, services):
        """Test that an income-only import leaves the alert state alone."""
        services.ledger.upsert_budget("Travel", "100")
        services.ledger.update_settings(budget_alerts=False)
        services.ledger.add_transaction(
            make_transaction(on=date.today(), category="Travel", amount="90")
        )
        services.ledger.update_settings(budget_alerts=True)

        services.ledger.import_transactions([make_transaction("income", on=date.today())])

        assert services.alerts.raised == set()
