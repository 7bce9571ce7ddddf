"""Shared pytest fixtures for all tests."""

import random
import pytest

from config import Config
from db.store import MemoryStore
from services.base import Services


@pytest.fixture
def test_config(tmp_path):
    """Create a test configuration pointing to a temporary data directory.

    Args:
        tmp_path: pytest tmp_path fixture for temporary directory.

    Returns:
        Config: Test configuration object.
    """
    return Config(
        base_dir=tmp_path / "ledgerly",
        data_dir=tmp_path / "ledgerly" / "store",
        log_level="DEBUG",
        log_dir=tmp_path / "ledgerly" / "logs",
        summary_delay_seconds=0.0,
    )


@pytest.fixture
def memory_store():
    """Create an empty in-memory key-value store.

    Returns:
        MemoryStore: Store shared by the services built in a test.
    """
    return MemoryStore()


@pytest.fixture
def services(test_config, memory_store):
    """Create a Services container backed by an in-memory store.

    This fixture provides access to all services with an empty ledger.

    Args:
        test_config: Test configuration fixture.
        memory_store: In-memory store fixture.

    Returns:
        Services: Services container for testing.
    """
    return Services(test_config, store=memory_store, rng=random.Random(42))
