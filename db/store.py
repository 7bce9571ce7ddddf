"""Key-value stores holding the serialized ledger records."""

import os
import tempfile
from pathlib import Path
from typing import Dict, Optional

from config import Config

TRANSACTIONS_KEY = "ledger_transactions"
BUDGETS_KEY = "ledger_budgets"
SETTINGS_KEY = "ledger_settings"
ALERTS_KEY = "ledger_alerts"
MONTHLY_SUMMARY_KEY = "last_monthly_summary"
RATES_KEY = "exchange_rates"

LEDGER_KEYS = (TRANSACTIONS_KEY, BUDGETS_KEY, SETTINGS_KEY)


class FileStore:
    """Stores each key as one file under the configured data directory.

    Args:
        config: Application configuration object.
    """

    def __init__(self, config: Config):
        self.config = config

    def _path(self, key: str) -> Path:
        return self.config.data_dir / f"{key}.json"

    def get(self, key: str) -> Optional[str]:
        """Read the raw string stored under key, or None if nothing is stored."""
        path = self._path(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def set(self, key: str, value: str) -> None:
        """Replace the value stored under key.

        The new content is written to a temporary file in the same directory and
        renamed over the old one, so a failed write leaves the old value intact.
        """
        path = self._path(key)
        path.parent.mkdir(parents=True, exist_ok=True)

        fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{key}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(value)
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def delete(self, key: str) -> None:
        """Remove the value stored under key, if any."""
        self._path(key).unlink(missing_ok=True)


class MemoryStore:
    """In-process store with the same interface as FileStore."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self.data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value

    def delete(self, key: str) -> None:
        self.data.pop(key, None)
