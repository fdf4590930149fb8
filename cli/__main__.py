#!/usr/bin/env python3
"""
Rollcast CLI - Recurring transactions and month-end spending forecasts.

Usage:
    python -m cli <command> <subcommand> [options]

Commands:
    recurring    Manage and roll over recurring transactions
    forecast     Month-end spending forecast and category budgets
    migrate      Database migrations

Examples:
    python -m cli migrate apply
    python -m cli recurring add 49.99 Membership "Gym" --frequency monthly
    python -m cli recurring rollover
    python -m cli forecast show --budget 1500
    python -m cli forecast limit set "Food & Dining" 400
    python -m cli forecast budgets --limit "Food & Dining=400"
"""

import sys
import argparse
from cli import recurring, forecast, migrate
from config import load_config
from services.base import Services
from db.manager import DatabaseManager
from logger import setup_logging


def main():
    """Main CLI entry point with subcommands."""
    parser = argparse.ArgumentParser(
        prog="cli",
        description="Rollcast - Recurring transactions and spending forecasts",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    subparsers = parser.add_subparsers(
        title="commands",
        description="Available commands",
        dest="command",
        required=True,
    )

    # Register each command's subparser
    recurring.setup_parser(subparsers)
    forecast.setup_parser(subparsers)
    migrate.setup_parser(subparsers)

    args = parser.parse_args()

    if hasattr(args, "func"):
        try:
            config = load_config()
            setup_logging(config)

            # migrate works on raw connections, everything else on services
            if args.command == "migrate":
                args.func(args, DatabaseManager(config))
            else:
                args.func(args, Services(config))
        except Exception as e:
            print(f"Error: {e}")
            sys.exit(1)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
