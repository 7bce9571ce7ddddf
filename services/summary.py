"""Monthly summary: last month's totals, shown once on the first day of a month."""

import sched
import time
from datetime import date
from typing import Dict, List, Optional

from db.store import MONTHLY_SUMMARY_KEY
from logger import get_logger
from models.currency import format_currency
from tools.metrics import month_summary, previous_month

logger = get_logger("summary")


class MonthlySummaryService:
    """Schedules the monthly summary notification.

    The summary is shown after a fixed delay and cannot be cancelled once
    scheduled. Showing it stores a "YYYY-MM" marker; a second scheduled or
    duplicate run in the same month sees the marker and does nothing.

    Args:
        ledger: LedgerService providing transactions and settings.
        store: Key-value store holding the marker.
        delay: Seconds between scheduling and showing the summary.
    """

    def __init__(self, ledger, store, delay: float = 2.0):
        self.ledger = ledger
        self.store = store
        self.delay = delay
        self.shown: List[Dict] = []

    @staticmethod
    def marker_for(today: date) -> str:
        return f"{today.year:04d}-{today.month:02d}"

    def is_due(self, today: Optional[date] = None) -> bool:
        """True on the first of the month if this month's summary hasn't been shown."""
        if not self.ledger.settings.monthly_summary:
            return False
        today = today or date.today()
        if today.day != 1:
            return False
        return self.store.get(MONTHLY_SUMMARY_KEY) != self.marker_for(today)

    def build(self, today: Optional[date] = None) -> Dict:
        """Totals for the calendar month before today's."""
        month = previous_month(today)
        return month_summary(self.ledger.transactions, month.year, month.month)

    def format(self, summary: Dict) -> str:
        currency = self.ledger.settings.currency
        month_name = date(summary["year"], summary["month"], 1).strftime("%B %Y")
        return (
            f"{month_name} Summary: "
            f"Income {format_currency(summary['income'], currency)}, "
            f"Expenses {format_currency(summary['expenses'], currency)}, "
            f"Balance {format_currency(summary['balance'], currency)}"
        )

    def show(self, today: Optional[date] = None) -> Optional[Dict]:
        """Show the summary now unless this month's marker is already set."""
        today = today or date.today()
        marker = self.marker_for(today)
        if self.store.get(MONTHLY_SUMMARY_KEY) == marker:
            return None

        summary = self.build(today)
        self.store.set(MONTHLY_SUMMARY_KEY, marker)
        self.shown.append(summary)
        logger.info(self.format(summary))
        return summary

    def schedule(
        self, scheduler: sched.scheduler, today: Optional[date] = None
    ) -> bool:
        """Queue the summary on scheduler if it is due.

        Returns:
            True if an event was queued.
        """
        today = today or date.today()
        if not self.is_due(today):
            return False
        scheduler.enter(self.delay, 1, self.show, (today,))
        return True


def make_scheduler() -> sched.scheduler:
    """Scheduler for deferred actions, driven by wall-clock time."""
    return sched.scheduler(time.monotonic, time.sleep)
