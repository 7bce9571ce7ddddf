"""Base services container for dependency injection."""

from config import Config
from db.store import FileStore


class Services:
    """Container for all application services.

    This is the application-state object: it is built once by the CLI (or a
    test) and passed to whatever needs it. There is no global instance.

    Args:
        config: Application configuration object.
        store: Optional key-value store for testing. If None, a FileStore
            under config.data_dir is used.
        rng: Optional random source for simulated exchange-rate refreshes.
    """

    def __init__(self, config: Config, store=None, rng=None):
        self.config = config
        self.store = store if store is not None else FileStore(config)

        # Lazy import to avoid circular dependencies
        from services.ledger import LedgerService
        from services.view import TransactionView
        from services.currency import CurrencyService
        from services.alerts import AlertService
        from services.summary import MonthlySummaryService
        from services.dashboard import DashboardService

        self.ledger = LedgerService(self.store, config.default_currency)
        self.ledger.load()

        self.view = TransactionView(self.ledger, config.page_size)
        self.currency = CurrencyService(self.ledger, config, self.store, rng)
        self.alerts = AlertService(self.ledger, self.store)
        self.summary = MonthlySummaryService(
            self.ledger, self.store, config.summary_delay_seconds
        )
        self.dashboard = DashboardService(self.ledger, self.view, self.alerts)

        self.ledger.subscribe(self._on_ledger_change)

    def _on_ledger_change(self, event: str, payload) -> None:
        # New expenses can push a budget over a threshold
        if event == "transaction_added" and payload.is_expense:
            self.alerts.evaluate()
        elif event == "transactions_imported" and any(t.is_expense for t in payload):
            self.alerts.evaluate()
