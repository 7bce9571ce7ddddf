#!/usr/bin/env python3

import sys

from cli.prompts import confirm
from errors import ValidationError
from logger import get_logger
from models.currency import CURRENCIES, SUPPORTED_CURRENCIES

logger = get_logger()


def cmd_convert(args, services):
    """Convert every amount in the ledger to another currency."""
    currency = services.currency
    old_code = services.ledger.settings.currency
    new_code = args.code.upper()

    if new_code == old_code:
        logger.info(f"Ledger is already in {old_code}.")
        return

    def ask(from_code, to_code, rate):
        sample = currency.preview(100, from_code, to_code)
        message = (
            f"This will convert ALL existing amounts from {from_code} to {to_code}.\n"
            f"Example: {sample}\n\n"
            "Rounding is applied to each amount, so converting back later may "
            "not restore the exact original values. Continue?"
        )
        return confirm(message, args.yes)

    try:
        converted = currency.convert(old_code, new_code, confirm=ask)
    except ValidationError as e:
        logger.error(f"Error converting currency: {e}")
        sys.exit(1)

    if converted:
        logger.info(f"✓ Currency converted from {old_code} to {new_code}")
    else:
        logger.info("Conversion cancelled.")


def cmd_rates(args, services):
    """Show the exchange-rate table."""
    rates = services.currency.rates
    logger.info("\nExchange rates (per 1 USD):")
    logger.info("=" * 40)
    for code in SUPPORTED_CURRENCIES:
        if code == "USD":
            continue
        places = 2 if code == "JPY" else 4
        rate = rates.units_per_usd(code)
        logger.info(f"  {code}: {CURRENCIES[code].symbol}{rate:.{places}f}")
    if rates.last_updated:
        logger.info(f"Last updated: {rates.last_updated.strftime('%Y-%m-%d %H:%M:%S')}")


def cmd_refresh(args, services):
    """Refresh the exchange-rate table (simulated)."""
    services.currency.refresh_rates()
    logger.info("✓ Exchange rates updated successfully")
    cmd_rates(args, services)


def setup_parser(subparsers):
    """Setup currency subcommand parser.

    Args:
        subparsers: The subparsers object from the main CLI
    """
    parser = subparsers.add_parser(
        "currency",
        help="Convert the ledger currency and view exchange rates",
        description="Re-denominate all amounts and manage the exchange-rate table",
    )

    currency_subparsers = parser.add_subparsers(
        title="subcommands",
        description="Available currency commands",
        dest="subcommand",
        required=True,
    )

    convert_parser = currency_subparsers.add_parser(
        "convert", help="Convert all amounts to another currency"
    )
    convert_parser.add_argument("code", choices=list(SUPPORTED_CURRENCIES), type=str.upper)
    convert_parser.add_argument("--yes", action="store_true", help="Skip confirmation")
    convert_parser.set_defaults(func=cmd_convert)

    rates_parser = currency_subparsers.add_parser("rates", help="Show exchange rates")
    rates_parser.set_defaults(func=cmd_rates)

    refresh_parser = currency_subparsers.add_parser(
        "refresh", help="Refresh exchange rates"
    )
    refresh_parser.set_defaults(func=cmd_refresh)
