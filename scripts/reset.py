#!/usr/bin/env python3
"""Reset script for Ledgerly.

This script will:
1. Delete the data directory (stored ledger, alert state and logs)
2. Start the ledger again with empty transactions, budgets and default settings
"""

import shutil
import sys

from config import load_config
from services.base import Services


def reset():
    """Reset the application state."""
    print("Ledgerly Reset Script")
    print("=" * 50)

    # Load configuration
    config = load_config()

    # Show what will be deleted
    print(f"\nData directory: {config.base_dir}")
    print(f"Store: {config.data_dir}")
    print(f"Logs: {config.log_dir}")

    # Confirm with user
    response = input("\nThis will delete ALL data. Continue? (yes/no): ")
    if response.lower() != "yes":
        print("Reset cancelled.")
        sys.exit(0)

    # Delete the data directory
    if config.base_dir.exists():
        print(f"\nDeleting {config.base_dir}...")
        shutil.rmtree(config.base_dir)
        print("✓ Data directory deleted")
    else:
        print(f"\n✓ Data directory does not exist: {config.base_dir}")

    # Write a fresh, empty ledger
    services = Services(config)
    services.ledger.save(force=True)

    print("\n" + "=" * 50)
    print("Reset complete! Ledger has been recreated.")
    print(f"Store location: {config.data_dir}")


if __name__ == "__main__":
    reset()
