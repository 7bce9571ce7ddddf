#!/usr/bin/env python3

import sys
from datetime import date
from pathlib import Path

from cli.prompts import confirm
from errors import SerializationError, ValidationError
from ingestion import json_format
from logger import get_logger
from models.currency import format_currency
from tools.metrics import budget_statuses, budget_summary

logger = get_logger()


def cmd_set(args, services):
    """Set (or replace) the monthly budget for a category."""
    existing = services.ledger.find_budget(args.category)
    try:
        budget = services.ledger.upsert_budget(args.category, args.amount)
    except ValidationError as e:
        logger.error(f"Please fill in all budget fields correctly: {e}")
        sys.exit(1)

    amount = format_currency(budget.amount, services.ledger.settings.currency)
    verb = "updated to" if existing else "set to"
    logger.info(f"✓ Budget for {budget.category} {verb} {amount}")

    services.alerts.evaluate()


def cmd_list(args, services):
    """List budgets with this month's spending."""
    ledger = services.ledger
    if not ledger.budgets:
        logger.info("No budgets found.")
        return

    currency = ledger.settings.currency
    statuses = budget_statuses(ledger.budgets, ledger.transactions, date.today())

    logger.info("\nBudgets (this month):")
    logger.info("=" * 80)
    for s in statuses:
        label = "Remaining" if s.remaining >= 0 else "Over"
        logger.info(f"{s.budget.category}  [{s.status}]")
        logger.info(
            f"  Spent: {format_currency(s.spent, currency)}  "
            f"Budget: {format_currency(s.budget.amount, currency)}  "
            f"({s.percent:.1f}%)"
        )
        logger.info(f"  {label}: {format_currency(abs(s.remaining), currency)}")
        logger.info("-" * 80)

    totals = budget_summary(statuses)
    logger.info(f"Total budget:    {format_currency(totals['total_budget'], currency)}")
    logger.info(f"Total spent:     {format_currency(totals['total_spent'], currency)}")
    logger.info(f"Total remaining: {format_currency(totals['total_remaining'], currency)}")


def cmd_delete(args, services):
    """Delete the budget for a category."""
    if not services.ledger.find_budget(args.category):
        logger.error(f"No budget found for {args.category}.")
        sys.exit(1)

    if not confirm(
        f"Are you sure you want to delete the budget for {args.category}?", args.yes
    ):
        logger.info("Deletion cancelled.")
        return

    services.ledger.delete_budget(args.category)
    logger.info(f"✓ Budget for {args.category} deleted successfully")


def cmd_import(args, services):
    """Import budgets from a JSON file."""
    path = Path(args.file)
    if not path.exists():
        logger.error(f"File not found: {args.file}")
        sys.exit(1)

    try:
        budgets = json_format.parse_budgets(path.read_text(encoding="utf-8"))
        count = services.ledger.import_budgets(budgets)
    except (SerializationError, ValidationError) as e:
        logger.error(f"Error importing budgets: {e}")
        sys.exit(1)

    logger.info(f"✓ {count} budgets imported successfully")


def cmd_export(args, services):
    """Export all budgets to JSON."""
    output = Path(args.output or f"budgets_{date.today().isoformat()}.json")
    try:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(json_format.dump_budgets(services.ledger.budgets), encoding="utf-8")
    except OSError as e:
        logger.error(f"Error exporting budgets: {e}")
        sys.exit(1)

    logger.info(f"✓ Budgets exported successfully to: {output}")


def setup_parser(subparsers):
    """Setup budgets subcommand parser.

    Args:
        subparsers: The subparsers object from the main CLI
    """
    parser = subparsers.add_parser(
        "budgets",
        help="Manage monthly category budgets",
        description="Set, list, delete, import and export category budgets",
    )

    budgets_subparsers = parser.add_subparsers(
        title="subcommands",
        description="Available budget commands",
        dest="subcommand",
        required=True,
    )

    # budgets set
    set_parser = budgets_subparsers.add_parser(
        "set", help="Set the monthly budget for a category"
    )
    set_parser.add_argument("category")
    set_parser.add_argument("amount")
    set_parser.set_defaults(func=cmd_set)

    # budgets list
    list_parser = budgets_subparsers.add_parser("list", help="List budgets")
    list_parser.set_defaults(func=cmd_list)

    # budgets delete
    delete_parser = budgets_subparsers.add_parser(
        "delete", help="Delete the budget for a category"
    )
    delete_parser.add_argument("category")
    delete_parser.add_argument("--yes", action="store_true", help="Skip confirmation")
    delete_parser.set_defaults(func=cmd_delete)

    # budgets import
    import_parser = budgets_subparsers.add_parser(
        "import", help="Import budgets from a JSON file"
    )
    import_parser.add_argument("file")
    import_parser.set_defaults(func=cmd_import)

    # budgets export
    export_parser = budgets_subparsers.add_parser("export", help="Export budgets to JSON")
    export_parser.add_argument("--output", help="Output path (default: budgets_<date>.json)")
    export_parser.set_defaults(func=cmd_export)
