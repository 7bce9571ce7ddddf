"""Budget alert policy: one warning and one over-budget alert per category per day."""

import json
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import List, Optional, Set

from db.store import ALERTS_KEY
from logger import get_logger
from models.currency import format_currency
from tools.metrics import OVER_THRESHOLD, WARNING_THRESHOLD, BudgetStatus, budget_statuses

logger = get_logger("alerts")


@dataclass
class Alert:
    """A budget threshold crossing that should be shown to the user."""

    key: str  # "{category}-over" or "{category}-warning"
    category: str
    level: str  # "over" or "warning"
    percent: float
    spent: Decimal
    budget: Decimal

    def message(self, currency: str) -> str:
        if self.level == "over":
            return (
                f"Budget exceeded for {self.category}! You've spent "
                f"{format_currency(self.spent, currency)} of "
                f"{format_currency(self.budget, currency)}"
            )
        return (
            f"Warning: You've used {self.percent:.1f}% of your "
            f"{self.category} budget"
        )


class AlertService:
    """Decides which budget alerts fire.

    An alert key is raised at most once per calendar day. The raised set is
    cleared whenever the date differs from the last reset date, so an alert
    whose condition still holds fires again the next day. The raised set is
    kept in the store so the rule holds across separate runs.

    Args:
        ledger: LedgerService providing budgets, transactions and settings.
        store: Optional key-value store for the raised-alert state.
    """

    def __init__(self, ledger, store=None):
        self.ledger = ledger
        self.store = store
        self.raised: Set[str] = set()
        self.last_reset: Optional[str] = None
        self._load_state()

    def _load_state(self) -> None:
        if self.store is None:
            return
        raw = self.store.get(ALERTS_KEY)
        if raw is None:
            return
        try:
            data = json.loads(raw)
            self.raised = set(data.get("raised", []))
            self.last_reset = data.get("lastReset")
        except (json.JSONDecodeError, AttributeError, TypeError) as e:
            logger.error(f"Error loading alert state, starting fresh: {e}")
            self.raised = set()
            self.last_reset = None

    def _save_state(self) -> None:
        if self.store is None:
            return
        data = {"raised": sorted(self.raised), "lastReset": self.last_reset}
        try:
            self.store.set(ALERTS_KEY, json.dumps(data))
        except OSError as e:
            logger.error(f"Error saving alert state: {e}")

    def _reset_if_new_day(self, today: date) -> None:
        stamp = today.isoformat()
        if self.last_reset != stamp:
            self.raised = set()
            self.last_reset = stamp

    def evaluate(
        self,
        today: Optional[date] = None,
        statuses: Optional[List[BudgetStatus]] = None,
    ) -> List[Alert]:
        """Check every budget and return the alerts that fire now.

        Args:
            today: Reference date, defaults to date.today().
            statuses: Precomputed budget statuses for today's month.

        Returns:
            Newly fired alerts; empty when budget alerts are disabled.
        """
        if not self.ledger.settings.budget_alerts:
            return []

        today = today or date.today()
        if statuses is None:
            statuses = budget_statuses(self.ledger.budgets, self.ledger.transactions, today)

        previous_state = (set(self.raised), self.last_reset)
        self._reset_if_new_day(today)

        fired = []
        for status in statuses:
            category = status.budget.category
            if status.percent >= OVER_THRESHOLD:
                level = "over"
            elif status.percent >= WARNING_THRESHOLD:
                level = "warning"
            else:
                continue

            key = f"{category}-{level}"
            if key in self.raised:
                continue

            alert = Alert(
                key=key,
                category=category,
                level=level,
                percent=status.percent,
                spent=status.spent,
                budget=status.budget.amount,
            )
            self.raised.add(key)
            fired.append(alert)
            logger.warning(alert.message(self.ledger.settings.currency))

        if (self.raised, self.last_reset) != previous_state:
            self._save_state()

        return fired
