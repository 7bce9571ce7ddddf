#!/usr/bin/env python3

import sys
from datetime import date
from pathlib import Path

from cli.prompts import confirm
from errors import NotFoundError, SerializationError, ValidationError
from ingestion import get_ingestion_module, get_module_for_path
from logger import get_logger
from models.currency import format_currency
from models.transaction import PREDEFINED_CATEGORIES

logger = get_logger()


def cmd_add(args, services):
    """Add a transaction.

    Args:
        args: Parsed command-line arguments with the transaction fields
        services: Services container with the ledger service
    """
    try:
        transaction = services.ledger.record(
            type=args.type,
            date_value=args.date or date.today().isoformat(),
            description=args.description,
            category=args.category,
            amount=args.amount,
            payment_method=args.payment_method,
        )
    except ValidationError as e:
        logger.error(f"Please fill in all fields with valid data: {e}")
        sys.exit(1)

    currency = services.ledger.settings.currency
    logger.info(f"✓ Transaction added with ID: {transaction.id}")
    logger.info(f"  {transaction.date.isoformat()}  {transaction.type}")
    logger.info(f"  {transaction.description} ({transaction.category})")
    logger.info(f"  Amount: {format_currency(transaction.amount, currency)}")
    if transaction.category not in PREDEFINED_CATEGORIES:
        logger.info(f"  Custom category: {transaction.category}")


def cmd_list(args, services):
    """List transactions matching the filters, one page at a time."""
    view = services.view
    try:
        view.set_filters(
            category=args.category,
            type=args.type,
            search=args.search or "",
            sort=args.sort,
        )
    except ValidationError as e:
        logger.error(str(e))
        sys.exit(1)

    page_number = args.page
    page = view.page(page_number)
    currency = services.ledger.settings.currency

    if not page:
        logger.info("No transactions found.")
    else:
        logger.info("")
        logger.info(f"{'Date':<12}{'Type':<9}{'Category':<20}{'Amount':>14}  Description")
        logger.info("=" * 80)
        for t in page:
            sign = "+" if t.is_income else "-"
            amount = f"{sign}{format_currency(t.amount, currency)}"
            logger.info(
                f"{t.date.isoformat():<12}{t.type:<9}{t.category[:19]:<20}"
                f"{amount:>14}  {t.description}"
            )
            if args.ids:
                logger.info(f"{'':<12}id: {t.id}")

    logger.info("-" * 80)
    logger.info(f"Page {page_number} of {view.page_count}, sorted by {view.filters.sort_token}")
    logger.info(
        f"Showing {view.match_count} of {len(services.ledger.transactions)} transactions"
    )


def cmd_show(args, services):
    """Show one transaction in full."""
    try:
        t = services.ledger.get_transaction(args.transaction_id)
    except NotFoundError as e:
        logger.error(str(e))
        sys.exit(1)

    currency = services.ledger.settings.currency
    logger.info(f"\nTransaction {t.id}")
    logger.info("=" * 80)
    logger.info(f"Date:           {t.date.isoformat()}")
    logger.info(f"Type:           {t.type}")
    logger.info(f"Description:    {t.description}")
    logger.info(f"Category:       {t.category}")
    logger.info(f"Amount:         {format_currency(t.amount, currency)}")
    logger.info(f"Payment method: {t.payment_method}")
    logger.info(f"Created:        {t.created_at.strftime('%Y-%m-%d %H:%M:%S')}")


def cmd_delete(args, services):
    """Delete a transaction by ID."""
    try:
        transaction = services.ledger.get_transaction(args.transaction_id)
    except NotFoundError as e:
        logger.error(str(e))
        sys.exit(1)

    logger.info("\nTransaction to delete:")
    logger.info(f"  ID: {transaction.id}")
    logger.info(f"  {transaction.date.isoformat()} {transaction.description}")

    if not confirm("Delete this transaction?", args.yes):
        logger.info("Deletion cancelled.")
        return

    if services.ledger.delete_transaction(transaction.id):
        logger.info(f'✓ Transaction "{transaction.description}" deleted successfully')
    else:
        logger.error("Failed to delete transaction.")
        sys.exit(1)


def cmd_import(args, services):
    """Import transactions from a JSON or CSV file.

    Args:
        args: Parsed command-line arguments with the input file
        services: Services container with the ledger service
    """
    path = Path(args.file)
    if not path.exists():
        logger.error(f"File not found: {args.file}")
        sys.exit(1)

    module = (
        get_ingestion_module(args.format) if args.format else get_module_for_path(path)
    )

    try:
        with open(path, "r", newline="", encoding="utf-8") as f:
            transactions = module.ingest(f)
        count = services.ledger.import_transactions(transactions)
    except (SerializationError, ValidationError) as e:
        logger.error(f"Error importing transactions: {e}")
        sys.exit(1)

    logger.info(f"✓ {count} transactions imported successfully")


def cmd_export(args, services):
    """Export all transactions to JSON or CSV."""
    output = Path(
        args.output or f"transactions_{date.today().isoformat()}.{args.format}"
    )
    module = get_ingestion_module(args.format)

    try:
        output.parent.mkdir(parents=True, exist_ok=True)
        with open(output, "w", newline="", encoding="utf-8") as f:
            module.export(services.ledger.transactions, f)
    except OSError as e:
        logger.error(f"Error exporting transactions: {e}")
        sys.exit(1)

    logger.info(f"✓ Transactions exported as {args.format.upper()} to: {output}")


def setup_parser(subparsers):
    """Setup transactions subcommand parser.

    Args:
        subparsers: The subparsers object from the main CLI
    """
    parser = subparsers.add_parser(
        "transactions",
        help="Add, list, import and export transactions",
        description="Manage income and expense transactions",
    )

    # Add subcommands for transactions
    transactions_subparsers = parser.add_subparsers(
        title="subcommands",
        description="Available transaction commands",
        dest="subcommand",
        required=True,
    )

    # transactions add
    add_parser = transactions_subparsers.add_parser(
        "add",
        help="Add a transaction",
        epilog="""
Examples:
  python -m cli transactions add --type expense --description "Lunch" --category "Food & Dining" --amount 12.50
  python -m cli transactions add --type income --date 2025-10-01 --description Salary --category Income --amount 3000
        """,
    )
    add_parser.add_argument("--type", choices=["income", "expense"], default="expense")
    add_parser.add_argument("--date", help="Date in YYYY-MM-DD format (default: today)")
    add_parser.add_argument("--description", required=True)
    add_parser.add_argument(
        "--category",
        required=True,
        help=f"One of: {', '.join(PREDEFINED_CATEGORIES)}, or any custom name",
    )
    add_parser.add_argument("--amount", required=True)
    add_parser.add_argument("--payment-method", default="cash")
    add_parser.set_defaults(func=cmd_add)

    # transactions list
    list_parser = transactions_subparsers.add_parser(
        "list", help="List transactions with filters and paging"
    )
    list_parser.add_argument("--category", default="all")
    list_parser.add_argument(
        "--type", choices=["all", "income", "expense"], default="all"
    )
    list_parser.add_argument("--search", help="Text to look for in description or category")
    list_parser.add_argument(
        "--sort",
        choices=["date-desc", "date-asc", "amount-desc", "amount-asc"],
        default="date-desc",
    )
    list_parser.add_argument("--page", type=int, default=1)
    list_parser.add_argument("--ids", action="store_true", help="Show transaction IDs")
    list_parser.set_defaults(func=cmd_list)

    # transactions show
    show_parser = transactions_subparsers.add_parser(
        "show", help="Show a transaction by ID"
    )
    show_parser.add_argument("transaction_id", help="Transaction ID")
    show_parser.set_defaults(func=cmd_show)

    # transactions delete
    delete_parser = transactions_subparsers.add_parser(
        "delete", help="Delete a transaction by ID"
    )
    delete_parser.add_argument("transaction_id", help="Transaction ID")
    delete_parser.add_argument("--yes", action="store_true", help="Skip confirmation")
    delete_parser.set_defaults(func=cmd_delete)

    # transactions import
    import_parser = transactions_subparsers.add_parser(
        "import", help="Import transactions from a JSON or CSV file"
    )
    import_parser.add_argument("file", help="Path to a .json or .csv file")
    import_parser.add_argument(
        "--format",
        choices=["json", "csv"],
        help="File format (default: from the file extension)",
    )
    import_parser.set_defaults(func=cmd_import)

    # transactions export
    export_parser = transactions_subparsers.add_parser(
        "export", help="Export all transactions"
    )
    export_parser.add_argument("--format", choices=["json", "csv"], default="json")
    export_parser.add_argument(
        "--output", help="Output path (default: transactions_<date>.<format>)"
    )
    export_parser.set_defaults(func=cmd_export)
