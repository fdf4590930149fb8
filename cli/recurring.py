#!/usr/bin/env python3

import argparse
import sys
from datetime import date
from models.recurring_rule import Frequency
from models.transaction import Transaction, TransactionType
from rollover import rule_from_transaction
from tools.recurring import run_rollover
from logger import get_logger

logger = get_logger()


def cmd_list(args, services):
    """List all recurring rules."""
    rules = services.recurring_rules.find_all()

    if not rules:
        logger.info("No recurring rules found.")
        return

    logger.info("\nRecurring rules:")
    logger.info("=" * 80)
    for rule in rules:
        logger.info(f"ID: {rule.id}")
        logger.info(f"Description: {rule.description}")
        logger.info(f"Amount: {rule.amount} ({rule.type.value.lower()})")
        logger.info(f"Category: {rule.category}")
        logger.info(f"Frequency: {rule.frequency.value.lower()}")
        logger.info(f"Next due: {rule.next_due_date.isoformat()}")
        logger.info("-" * 80)

    logger.info(f"\nTotal rules: {len(rules)}")


def cmd_add(args, services):
    """Record a transaction and, unless it happens once, a rule repeating it.

    Args:
        args: Parsed command-line arguments with the transaction fields
        services: Services container with transactions and recurring_rules
    """
    try:
        transaction = Transaction(
            amount=args.amount,
            category=args.category,
            description=args.description,
            type=args.type,
            transaction_date=args.date or date.today(),
        )
        frequency = Frequency.parse(args.frequency)
    except ValueError as e:
        logger.error(str(e))
        sys.exit(1)

    services.transactions.create(transaction)
    logger.info(
        f"✓ Recorded {transaction.description} ({transaction.amount}) "
        f"on {transaction.transaction_date.isoformat()}"
    )

    rule = rule_from_transaction(transaction, frequency)
    if rule is None:
        return

    services.recurring_rules.create(rule)
    logger.info(f"✓ Recurring rule created with ID: {rule.id}")
    logger.info(f"  Next due: {rule.next_due_date.isoformat()}")


def cmd_delete(args, services):
    """Stop a recurring rule. Transactions already recorded are kept."""
    if not services.recurring_rules.delete(args.rule_id):
        logger.error(f"Recurring rule '{args.rule_id}' not found.")
        sys.exit(1)

    logger.info(f"✓ Recurring rule {args.rule_id} deleted.")


def cmd_rollover(args, services):
    """Create every recurring transaction that has come due."""
    today = args.date or date.today()
    created = run_rollover(services, today, args.catch_up_limit)

    if not created:
        logger.info(f"Nothing due on or before {today.isoformat()}.")
        return

    for transaction in created:
        logger.info(
            f"  {transaction.transaction_date.isoformat()}  "
            f"{transaction.amount:>10}  {transaction.description}"
        )
    logger.info(f"\n✓ Created {len(created)} recurring transaction(s)")


def _parse_date_arg(value):
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise argparse.ArgumentTypeError(
            f"invalid date '{value}', expected YYYY-MM-DD"
        ) from None


def setup_parser(subparsers):
    """Setup recurring subcommand parser.

    Args:
        subparsers: The subparsers object from the main CLI
    """
    parser = subparsers.add_parser(
        "recurring",
        help="Manage recurring transactions",
        description="Create, list and roll over recurring transactions",
    )

    recurring_subparsers = parser.add_subparsers(
        title="subcommands",
        description="Available recurring commands",
        dest="subcommand",
        required=True,
    )

    # recurring list
    list_parser = recurring_subparsers.add_parser(
        "list", help="List all recurring rules"
    )
    list_parser.set_defaults(func=cmd_list)

    # recurring add
    add_parser = recurring_subparsers.add_parser(
        "add", help="Record a transaction and repeat it"
    )
    add_parser.add_argument("amount", help="Amount (positive)")
    add_parser.add_argument("category", help="Category label")
    add_parser.add_argument("description", help="Description")
    add_parser.add_argument(
        "--type",
        choices=[t.value.lower() for t in TransactionType],
        default="expense",
        help="Transaction type (default: expense)",
    )
    add_parser.add_argument(
        "--frequency",
        choices=[f.value.lower() for f in Frequency],
        default="monthly",
        help="How often it repeats (default: monthly)",
    )
    add_parser.add_argument(
        "--date",
        type=_parse_date_arg,
        help="Date of the first occurrence (YYYY-MM-DD, default: today)",
    )
    add_parser.set_defaults(func=cmd_add)

    # recurring delete
    delete_parser = recurring_subparsers.add_parser(
        "delete", help="Stop a recurring rule"
    )
    delete_parser.add_argument("rule_id", help="ID of the rule to delete")
    delete_parser.set_defaults(func=cmd_delete)

    # recurring rollover
    rollover_parser = recurring_subparsers.add_parser(
        "rollover", help="Create all recurring transactions now due"
    )
    rollover_parser.add_argument(
        "--date",
        type=_parse_date_arg,
        help="Roll over up to this date (YYYY-MM-DD, default: today)",
    )
    rollover_parser.add_argument(
        "--catch-up-limit",
        type=int,
        default=None,
        help="Maximum occurrences per rule in this run (default: from config)",
    )
    rollover_parser.set_defaults(func=cmd_rollover)
