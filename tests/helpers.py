"""Helper utilities for tests."""

from datetime import date
from decimal import Decimal
from pathlib import Path
import sqlite3

from db.migrator import apply_pending
from models.recurring_rule import Frequency, RecurringRule
from models.transaction import Transaction, TransactionType


def run_migrations(conn: sqlite3.Connection, migrations_dir: Path) -> None:
    """Run all SQL migrations in order.

    Args:
        conn: SQLite connection to run migrations against.
        migrations_dir: Path to directory containing .sql migration files.
    """
    apply_pending(conn, migrations_dir)


def make_rule(
    next_due_date,
    frequency=Frequency.MONTHLY,
    amount="10.00",
    type=TransactionType.EXPENSE,
    category="Bills & Utilities",
    description="Internet",
    **kwargs,
) -> RecurringRule:
    """Build a RecurringRule with sensible defaults."""
    return RecurringRule(
        amount=Decimal(amount),
        category=category,
        description=description,
        type=type,
        frequency=frequency,
        next_due_date=next_due_date,
        **kwargs,
    )


def make_expense(
    amount,
    transaction_date: date,
    category="Food & Dining",
    description="Groceries",
    type=TransactionType.EXPENSE,
) -> Transaction:
    """Build a manually entered Transaction."""
    return Transaction(
        amount=Decimal(str(amount)),
        category=category,
        description=description,
        type=type,
        transaction_date=transaction_date,
    )
