"""Recurring rule service for database operations."""

from typing import List, Optional, Sequence
from datetime import date
from decimal import Decimal
from models.recurring_rule import Frequency, RecurringRule
from models.transaction import Transaction, TransactionType
from services.transactions import INSERT_TRANSACTION_SQL, transaction_params
from logger import get_logger

logger = get_logger()

_RULE_FIELDS = """id, amount, category, description, transaction_type,
       frequency, next_due_date"""


class RecurringRuleService:
    """Service for managing recurring rules."""

    def __init__(self, db_manager):
        """Initialize the recurring rule service.

        Args:
            db_manager: Database manager instance for database operations.
        """
        self.db_manager = db_manager

    def find_all(self) -> List[RecurringRule]:
        """Get all rules, ordered by next due date then id."""
        with self.db_manager.connect() as conn:
            cursor = conn.execute(
                f"SELECT {_RULE_FIELDS} FROM recurring_rules "
                "ORDER BY next_due_date, id"
            )
            return [self._row_to_rule(row) for row in cursor.fetchall()]

    def find(self, rule_id: str) -> Optional[RecurringRule]:
        """Get a single rule by ID.

        Returns:
            RecurringRule if found, None otherwise.
        """
        with self.db_manager.connect() as conn:
            cursor = conn.execute(
                f"SELECT {_RULE_FIELDS} FROM recurring_rules WHERE id = ?",
                (rule_id,),
            )
            row = cursor.fetchone()

            if row:
                return self._row_to_rule(row)
            return None

    def create(self, rule: RecurringRule) -> RecurringRule:
        """Insert a new rule.

        Raises:
            sqlite3.IntegrityError: If a rule with the same id exists.
        """
        with self.db_manager.connect() as conn:
            conn.execute(
                f"INSERT INTO recurring_rules ({_RULE_FIELDS}) "
                "VALUES (?, ?, ?, ?, ?, ?, ?)",
                (
                    rule.id,
                    float(rule.amount),
                    rule.category,
                    rule.description,
                    rule.type.value,
                    rule.frequency.value,
                    rule.next_due_date.isoformat(),
                ),
            )
            conn.commit()

        return rule

    def delete(self, rule_id: str) -> bool:
        """Delete a rule. Transactions it already produced are kept.

        Returns:
            True if the rule was deleted, False if not found.
        """
        with self.db_manager.connect() as conn:
            cursor = conn.execute(
                "DELETE FROM recurring_rules WHERE id = ?", (rule_id,)
            )
            conn.commit()
            return cursor.rowcount > 0

    def apply_rollover(
        self,
        new_transactions: Sequence[Transaction],
        changed_rules: Sequence[RecurringRule],
    ) -> int:
        """Store a rollover result in one database transaction.

        Either every new transaction is inserted and every rule pointer is
        moved, or nothing is written. A partial write would leave a rule
        pointing at dates that already have transactions, or the reverse.

        Args:
            new_transactions: Transactions materialized by the rollover.
            changed_rules: Rules whose next_due_date moved.

        Returns:
            Number of transactions inserted.

        Raises:
            sqlite3.Error: If any write fails. All writes are rolled back.
        """
        if not new_transactions and not changed_rules:
            return 0

        with self.db_manager.connect() as conn:
            try:
                conn.executemany(
                    INSERT_TRANSACTION_SQL,
                    [transaction_params(t) for t in new_transactions],
                )
                conn.executemany(
                    "UPDATE recurring_rules SET next_due_date = ? WHERE id = ?",
                    [(r.next_due_date.isoformat(), r.id) for r in changed_rules],
                )
                conn.commit()
            except Exception as e:
                conn.rollback()
                logger.error(f"Error applying rollover, nothing was saved: {e}")
                raise

        logger.info(
            f"Saved {len(new_transactions)} transaction(s) and "
            f"{len(changed_rules)} rule update(s)"
        )
        return len(new_transactions)

    def _row_to_rule(self, row: tuple) -> RecurringRule:
        """Convert a database row to a RecurringRule object."""
        return RecurringRule(
            id=row[0],
            amount=Decimal(str(row[1])),
            category=row[2],
            description=row[3],
            type=TransactionType(row[4]),
            frequency=Frequency(row[5]),
            next_due_date=date.fromisoformat(row[6]),
        )
