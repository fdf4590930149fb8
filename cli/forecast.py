#!/usr/bin/env python3

import argparse
import sys
from datetime import date
from decimal import Decimal
from models.transaction import parse_amount
from tools.recurring import get_category_budgets, get_month_forecast
from logger import get_logger

logger = get_logger()


def _money(amount: Decimal) -> str:
    return f"{amount.quantize(Decimal('0.01')):,}"


def cmd_show(args, services):
    """Show the month-end spending forecast."""
    today = args.date or date.today()
    budget_limit = (
        args.budget if args.budget is not None else services.config.budget_limit
    )

    result = get_month_forecast(services, today, budget_limit)
    if result is None:
        logger.info("No forecast available.")
        return

    logger.info(f"\n{result.month_name} Spending Forecast")
    logger.info("=" * 80)
    logger.info(f"Spent so far:       {_money(result.total_spent)}")
    logger.info(f"Daily average:      {_money(result.daily_average)}")
    logger.info(f"Days remaining:     {result.days_remaining}")
    logger.info(f"Projected total:    {_money(result.projected_total)}")
    logger.info(f"Budget:             {_money(Decimal(budget_limit))}")
    if result.pending_recurring_total > 0:
        logger.info(
            f"Upcoming recurring: +{_money(result.pending_recurring_total)}"
        )

    if result.trending_over:
        logger.warning("Projected spending is over budget.")
    else:
        logger.info("Projected spending is within budget.")


def cmd_budgets(args, services):
    """Show this month's spend against per-category limits.

    Stored limits apply unless overridden with --limit.
    """
    today = args.date or date.today()

    limits = services.category_limits.find_all()
    for item in args.limit or []:
        category, sep, amount = item.rpartition("=")
        try:
            if not sep or not category:
                raise ValueError
            limits[category] = parse_amount(amount)
        except ValueError:
            logger.error(f"Invalid limit '{item}', expected CATEGORY=AMOUNT")
            sys.exit(1)

    items = get_category_budgets(services, limits, today)
    if not items:
        logger.info("No spending data yet.")
        return

    for item in items:
        if item.limit > 0:
            marker = " OVER" if item.is_over else ""
            logger.info(
                f"{item.category:<20} {_money(item.spent):>12} "
                f"/ {_money(item.limit)}{marker}"
            )
        else:
            logger.info(f"{item.category:<20} {_money(item.spent):>12}")


def cmd_limit_set(args, services):
    """Store a category's monthly limit. Zero clears it."""
    if services.category_limits.set(args.category, args.amount):
        logger.info(f"Limit for {args.category} set to {_money(args.amount)}")
    else:
        logger.info(f"Limit for {args.category} cleared")


def cmd_limit_list(args, services):
    """List the stored category limits."""
    limits = services.category_limits.find_all()
    if not limits:
        logger.info("No category limits set.")
        return

    for category, limit in limits.items():
        logger.info(f"{category:<20} {_money(limit):>12}")


def cmd_limit_delete(args, services):
    """Clear a category's limit."""
    if not services.category_limits.delete(args.category):
        logger.error(f"No limit set for {args.category}")
        sys.exit(1)
    logger.info(f"Limit for {args.category} cleared")


def _parse_date_arg(value):
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise argparse.ArgumentTypeError(
            f"invalid date '{value}', expected YYYY-MM-DD"
        ) from None


def _parse_amount_arg(value):
    try:
        return parse_amount(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid amount '{value}'") from None


def setup_parser(subparsers):
    """Setup forecast subcommand parser.

    Args:
        subparsers: The subparsers object from the main CLI
    """
    parser = subparsers.add_parser(
        "forecast",
        help="Spending forecast",
        description="Project this month's spending and compare with budgets",
    )

    forecast_subparsers = parser.add_subparsers(
        title="subcommands",
        description="Available forecast commands",
        dest="subcommand",
        required=True,
    )

    # forecast show
    show_parser = forecast_subparsers.add_parser(
        "show", help="Show the month-end projection"
    )
    show_parser.add_argument(
        "--date", type=_parse_date_arg, help="Reference date (default: today)"
    )
    show_parser.add_argument(
        "--budget",
        type=_parse_amount_arg,
        default=None,
        help="Monthly budget (default: from config)",
    )
    show_parser.set_defaults(func=cmd_show)

    # forecast budgets
    budgets_parser = forecast_subparsers.add_parser(
        "budgets", help="Show spend per category against limits"
    )
    budgets_parser.add_argument(
        "--limit",
        action="append",
        metavar="CATEGORY=AMOUNT",
        help="Override a category limit for this run (repeatable)",
    )
    budgets_parser.add_argument(
        "--date", type=_parse_date_arg, help="Reference date (default: today)"
    )
    budgets_parser.set_defaults(func=cmd_budgets)

    # forecast limit
    limit_parser = forecast_subparsers.add_parser(
        "limit", help="Manage stored category limits"
    )
    limit_subparsers = limit_parser.add_subparsers(
        title="limit commands",
        dest="limit_command",
        required=True,
    )

    limit_set_parser = limit_subparsers.add_parser(
        "set", help="Set a category's monthly limit (0 clears it)"
    )
    limit_set_parser.add_argument("category", help="Category label")
    limit_set_parser.add_argument(
        "amount", type=_parse_amount_arg, help="Monthly limit"
    )
    limit_set_parser.set_defaults(func=cmd_limit_set)

    limit_list_parser = limit_subparsers.add_parser(
        "list", help="List stored category limits"
    )
    limit_list_parser.set_defaults(func=cmd_limit_list)

    limit_delete_parser = limit_subparsers.add_parser(
        "delete", help="Clear a category's limit"
    )
    limit_delete_parser.add_argument("category", help="Category label")
    limit_delete_parser.set_defaults(func=cmd_limit_delete)
