"""Dashboard service: the guarded "recompute every derived view" step."""

import threading
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Dict, Iterator, List, Optional, Tuple

from logger import get_logger
from models.transaction import Transaction
from services.alerts import Alert
from tools.metrics import (
    BudgetStatus,
    HealthScore,
    budget_statuses,
    budget_summary,
    daily_trend,
    dashboard_summary,
    financial_health_score,
    top_categories,
)

logger = get_logger("dashboard")


class RefreshGuard:
    """Mutual-exclusion token for the refresh step.

    `hold()` yields True when the token was acquired and False when a refresh
    is already running. The token is always released when the block exits,
    including on exceptions.
    """

    def __init__(self):
        self._lock = threading.Lock()

    @contextmanager
    def hold(self) -> Iterator[bool]:
        acquired = self._lock.acquire(blocking=False)
        try:
            yield acquired
        finally:
            if acquired:
                self._lock.release()

    @property
    def busy(self) -> bool:
        return self._lock.locked()


@dataclass
class DashboardSnapshot:
    """Everything a screen needs after one refresh."""

    today: date
    currency: str
    summary: Dict
    health: HealthScore
    budgets: List[BudgetStatus]
    budget_totals: Dict[str, Decimal]
    alerts: List[Alert]
    top_categories: List[Tuple[str, Decimal]]
    trend: List[Dict]
    recent: List[Transaction]
    categories: List[str]
    page: List[Transaction]
    page_number: int
    page_count: int
    match_count: int
    total_count: int


class DashboardService:
    """Recomputes dashboard figures, the transaction page, budgets and alerts.

    Args:
        ledger: LedgerService with the authoritative data.
        view: TransactionView for the filtered page.
        alerts: AlertService deciding which budget alerts fire.
    """

    def __init__(self, ledger, view, alerts):
        self.ledger = ledger
        self.view = view
        self.alerts = alerts
        self.guard = RefreshGuard()

    def refresh(self, today: Optional[date] = None) -> Optional[DashboardSnapshot]:
        """Recompute every derived view.

        Returns:
            The new snapshot, or None if a refresh was already in progress.
        """
        with self.guard.hold() as acquired:
            if not acquired:
                logger.debug("Refresh already in progress, skipping")
                return None
            return self._build(today or date.today())

    def _build(self, today: date) -> DashboardSnapshot:
        ledger = self.ledger
        summary = dashboard_summary(ledger.transactions, self.view.filters.date_range, today)

        statuses = budget_statuses(ledger.budgets, ledger.transactions, today)
        health = financial_health_score(
            summary["current"],
            ledger.budgets,
            today,
            all_transactions=ledger.transactions,
        )
        fired = self.alerts.evaluate(today, statuses)

        return DashboardSnapshot(
            today=today,
            currency=ledger.settings.currency,
            summary=summary,
            health=health,
            budgets=statuses,
            budget_totals=budget_summary(statuses),
            alerts=fired,
            top_categories=top_categories(summary["current"]),
            trend=daily_trend(summary["current"]),
            recent=ledger.recent(),
            categories=ledger.categories(),
            page=self.view.page(),
            page_number=self.view.current_page,
            page_count=self.view.page_count,
            match_count=self.view.match_count,
            total_count=len(ledger.transactions),
        )
