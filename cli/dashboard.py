#!/usr/bin/env python3

import sys

from cli.prompts import format_change
from errors import ValidationError
from logger import get_logger
from models.currency import format_currency
from services.summary import make_scheduler

logger = get_logger()


def cmd_show(args, services):
    """Show totals, period-over-period changes, financial health and budgets."""
    try:
        services.view.set_filters(date_range=args.range)
    except ValidationError as e:
        logger.error(str(e))
        sys.exit(1)

    snapshot = services.dashboard.refresh()
    if snapshot is None:
        return

    currency = snapshot.currency
    summary = snapshot.summary
    window = "all time" if args.range == "all" else f"last {args.range} days"

    logger.info(f"\nDashboard ({window}):")
    logger.info("=" * 80)
    logger.info(
        f"Income:       {format_currency(summary['income'], currency):>14}  "
        f"{format_change(summary['income_change'])}"
    )
    logger.info(
        f"Expenses:     {format_currency(summary['expenses'], currency):>14}  "
        f"{format_change(summary['expense_change'])}"
    )
    logger.info(
        f"Balance:      {format_currency(summary['balance'], currency):>14}  "
        f"{format_change(summary['balance_change'])}"
    )
    logger.info(
        f"Savings rate: {summary['savings_rate']:>13.1f}%  "
        f"{format_change(summary['savings_change'])}"
    )

    health = snapshot.health
    logger.info("-" * 80)
    logger.info(f"Financial health: {health.score}/100")
    logger.info(f"  Savings rate:        {health.savings_rate:.1f}%")
    logger.info(f"  Budget adherence:    {health.budget_adherence:.1f}%")
    logger.info(f"  Expense consistency: {health.expense_consistency:.1f}%")

    if snapshot.top_categories:
        logger.info("-" * 80)
        logger.info("Top categories:")
        for index, (category, amount) in enumerate(snapshot.top_categories, start=1):
            logger.info(f"  {index}. {category:<24}{format_currency(amount, currency):>14}")

    if snapshot.trend:
        logger.info("-" * 80)
        logger.info("Daily trend:")
        for day in snapshot.trend[-7:]:
            logger.info(
                f"  {day['date'].isoformat()}  "
                f"in {format_currency(day['income'], currency):>12}  "
                f"out {format_currency(day['expense'], currency):>12}"
            )

    if snapshot.budgets:
        totals = snapshot.budget_totals
        logger.info("-" * 80)
        logger.info(
            f"Budgets: {format_currency(totals['total_spent'], currency)} spent of "
            f"{format_currency(totals['total_budget'], currency)}, "
            f"{format_currency(totals['total_remaining'], currency)} remaining"
        )

    if snapshot.recent:
        logger.info("-" * 80)
        logger.info("Recent transactions:")
        for t in snapshot.recent:
            sign = "+" if t.is_income else "-"
            logger.info(
                f"  {t.date.isoformat()}  {t.description[:40]:<40}"
                f"{sign}{format_currency(t.amount, currency)}"
            )

    # Show last month's summary on the first of the month
    scheduler = make_scheduler()
    if services.summary.schedule(scheduler):
        scheduler.run()


def setup_parser(subparsers):
    """Setup dashboard subcommand parser.

    Args:
        subparsers: The subparsers object from the main CLI
    """
    parser = subparsers.add_parser(
        "dashboard",
        help="Show the dashboard",
        description="Totals, changes versus the previous period, health score and budgets",
    )

    dashboard_subparsers = parser.add_subparsers(
        title="subcommands",
        description="Available dashboard commands",
        dest="subcommand",
        required=True,
    )

    show_parser = dashboard_subparsers.add_parser("show", help="Show the dashboard")
    show_parser.add_argument(
        "--range",
        default="30",
        help="Window in days (e.g. 7, 30, 90, 365) or 'all' (default: 30)",
    )
    show_parser.set_defaults(func=cmd_show)
