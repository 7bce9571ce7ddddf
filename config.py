"""Configuration management for Ledgerly.

Reads configuration from ~/.config/ledgerly.toml and creates default config if needed.
"""

from pathlib import Path
from dataclasses import dataclass, field
from typing import Dict
import tomllib
import tomli_w


DEFAULT_EXCHANGE_RATES = {
    "USD": 1.00,
    "EUR": 0.85,
    "GBP": 0.73,
    "JPY": 110.00,
    "CAD": 1.25,
    "AUD": 1.35,
}


@dataclass
class Config:
    """Application configuration."""

    base_dir: Path
    data_dir: Path
    log_level: str
    log_dir: Path
    page_size: int = 10
    default_currency: str = "USD"
    exchange_rates: Dict[str, float] = field(
        default_factory=lambda: dict(DEFAULT_EXCHANGE_RATES)
    )
    rate_jitter: float = 0.02
    summary_delay_seconds: float = 2.0

    @classmethod
    def default(cls) -> "Config":
        """Create a Config with default values."""
        home = Path.home()
        base_dir = home / "data" / "ledgerly"
        return cls(
            base_dir=base_dir,
            data_dir=base_dir / "store",
            log_level="INFO",
            log_dir=base_dir / "logs",
        )


def get_config_path() -> Path:
    """Get the path to the config file."""
    return Path.home() / ".config" / "ledgerly.toml"


def load_config() -> Config:
    """Load configuration from file, creating default if it doesn't exist.

    Returns:
        Config object with loaded or default values.
    """
    config_path = get_config_path()

    # If config doesn't exist, create it with defaults
    if not config_path.exists():
        config = Config.default()
        _write_config(config)
        return config

    # Load existing config
    with open(config_path, "rb") as f:
        data = tomllib.load(f)

    # Parse with defaults for any missing values
    base_dir = Path(data.get("base_dir", Path.home() / "data" / "ledgerly"))

    storage_config = data.get("storage", {})
    data_dir = Path(storage_config.get("data_dir", base_dir / "store"))

    log_config = data.get("logging", {})
    log_level = log_config.get("level", "INFO")
    log_dir = Path(log_config.get("log_dir", base_dir / "logs"))

    ledger_config = data.get("ledger", {})
    page_size = int(ledger_config.get("page_size", 10))
    summary_delay_seconds = float(ledger_config.get("summary_delay_seconds", 2.0))

    currency_config = data.get("currency", {})
    default_currency = currency_config.get("default", "USD")
    rate_jitter = float(currency_config.get("rate_jitter", 0.02))
    exchange_rates = dict(DEFAULT_EXCHANGE_RATES)
    exchange_rates.update(
        {code: float(rate) for code, rate in currency_config.get("rates", {}).items()}
    )

    return Config(
        base_dir=base_dir,
        data_dir=data_dir,
        log_level=log_level,
        log_dir=log_dir,
        page_size=page_size,
        default_currency=default_currency,
        exchange_rates=exchange_rates,
        rate_jitter=rate_jitter,
        summary_delay_seconds=summary_delay_seconds,
    )


def _write_config(config: Config) -> None:
    """Write config to the config file.

    Args:
        config: Config object to write.
    """
    config_path = get_config_path()

    # Ensure config directory exists
    config_path.parent.mkdir(parents=True, exist_ok=True)

    # Convert config to TOML structure
    data = {
        "base_dir": str(config.base_dir),
        "storage": {
            "data_dir": str(config.data_dir),
        },
        "logging": {
            "level": config.log_level,
            "log_dir": str(config.log_dir),
        },
        "ledger": {
            "page_size": config.page_size,
            "summary_delay_seconds": config.summary_delay_seconds,
        },
        "currency": {
            "default": config.default_currency,
            "rate_jitter": config.rate_jitter,
            "rates": dict(config.exchange_rates),
        },
    }

    # Write TOML file
    with open(config_path, "wb") as f:
        tomli_w.dump(data, f)
