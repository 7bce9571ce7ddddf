#!/usr/bin/env python3
"""
Ledgerly CLI - Personal finance ledger with budgets and currency conversion.

Usage:
    python -m cli <command> <subcommand> [options]

Commands:
    transactions Add, list, import and export transactions
    budgets      Manage monthly category budgets
    dashboard    Totals, period changes, health score and alerts
    currency     Convert the ledger currency and view exchange rates
    settings     View and change settings, clear data

Examples:
    python -m cli transactions add --description Lunch --category "Food & Dining" --amount 12.50
    python -m cli transactions list --type expense --sort amount-desc
    python -m cli budgets set "Food & Dining" 400
    python -m cli dashboard show --range 30
    python -m cli currency convert EUR
"""

import sys
import argparse
from cli import budgets, currency, dashboard, settings, transactions
from config import load_config
from services.base import Services
from logger import setup_logging


def main():
    """Main CLI entry point with subcommands."""
    parser = argparse.ArgumentParser(
        prog="cli",
        description="Ledgerly - Personal finance ledger",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    # Create subparsers for each command
    subparsers = parser.add_subparsers(
        title="commands",
        description="Available commands",
        dest="command",
        required=True,
    )

    # Register each command's subparser
    transactions.setup_parser(subparsers)
    budgets.setup_parser(subparsers)
    dashboard.setup_parser(subparsers)
    currency.setup_parser(subparsers)
    settings.setup_parser(subparsers)

    # Parse arguments and execute
    args = parser.parse_args()

    if hasattr(args, "func"):
        try:
            # Load configuration
            config = load_config()

            # Set up logging
            setup_logging(config)

            # Build the application state once and hand it to the command
            services = Services(config)
            args.func(args, services)
        except Exception as e:
            print(f"Error: {e}")
            sys.exit(1)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
