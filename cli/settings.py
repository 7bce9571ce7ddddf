#!/usr/bin/env python3

import sys

from cli.prompts import confirm
from errors import ValidationError
from logger import get_logger

logger = get_logger()

_BOOLEAN_SETTINGS = {
    "auto-save": "auto_save",
    "budget-alerts": "budget_alerts",
    "monthly-summary": "monthly_summary",
}


def _parse_bool(value: str) -> bool:
    value = value.strip().lower()
    if value in ("on", "true", "yes", "1"):
        return True
    if value in ("off", "false", "no", "0"):
        return False
    raise ValidationError(f"Expected on/off, got {value!r}")


def cmd_show(args, services):
    """Show current settings."""
    settings = services.ledger.settings
    logger.info("\nSettings:")
    logger.info("=" * 40)
    logger.info(f"  currency:        {settings.currency}")
    logger.info(f"  auto-save:       {'on' if settings.auto_save else 'off'}")
    logger.info(f"  budget-alerts:   {'on' if settings.budget_alerts else 'off'}")
    logger.info(f"  monthly-summary: {'on' if settings.monthly_summary else 'off'}")
    logger.info(f"  theme:           {settings.theme}")


def cmd_set(args, services):
    """Change a setting."""
    try:
        if args.key == "theme":
            services.ledger.update_settings(theme=args.value)
        else:
            services.ledger.update_settings(
                **{_BOOLEAN_SETTINGS[args.key]: _parse_bool(args.value)}
            )
    except ValidationError as e:
        logger.error(f"Invalid setting: {e}")
        sys.exit(1)

    logger.info(f"✓ {args.key} set to {args.value}")


def cmd_save(args, services):
    """Save all data now, even with auto-save off."""
    if services.ledger.save(force=True):
        logger.info("✓ Data saved")
    else:
        logger.error("Failed to save data.")
        sys.exit(1)


def cmd_clear(args, services):
    """Delete all transactions and budgets."""
    if not confirm(
        "Are you sure you want to clear all data? This action cannot be undone.",
        args.yes,
    ):
        logger.info("Clear cancelled.")
        return

    services.ledger.clear_all()
    logger.info("✓ All data cleared successfully")


def setup_parser(subparsers):
    """Setup settings subcommand parser.

    Args:
        subparsers: The subparsers object from the main CLI
    """
    parser = subparsers.add_parser(
        "settings",
        help="View and change settings",
        description="Toggle auto-save, alerts and summaries; clear all data",
    )

    settings_subparsers = parser.add_subparsers(
        title="subcommands",
        description="Available settings commands",
        dest="subcommand",
        required=True,
    )

    show_parser = settings_subparsers.add_parser("show", help="Show settings")
    show_parser.set_defaults(func=cmd_show)

    set_parser = settings_subparsers.add_parser("set", help="Change a setting")
    set_parser.add_argument("key", choices=[*_BOOLEAN_SETTINGS, "theme"])
    set_parser.add_argument("value", help="on/off, or light/dark for theme")
    set_parser.set_defaults(func=cmd_set)

    save_parser = settings_subparsers.add_parser("save", help="Save all data now")
    save_parser.set_defaults(func=cmd_save)

    clear_parser = settings_subparsers.add_parser("clear", help="Clear all data")
    clear_parser.add_argument("--yes", action="store_true", help="Skip confirmation")
    clear_parser.set_defaults(func=cmd_clear)
