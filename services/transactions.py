"""Transaction service for database operations."""

from typing import List, Optional
from datetime import date
from decimal import Decimal
from models.transaction import Transaction, TransactionType
from schedule import month_end

# SQL Query Constants
_TRANSACTION_FIELDS = """id, amount, category, description, transaction_type,
       transaction_date, timestamp, recurring_rule_id"""

# Automatically generate placeholders from field count
_TRANSACTION_INSERT_PLACEHOLDERS = (
    f"({', '.join(['?'] * len(_TRANSACTION_FIELDS.split(',')))})"
)

INSERT_TRANSACTION_SQL = f"""
    INSERT INTO transactions ({_TRANSACTION_FIELDS})
    VALUES {_TRANSACTION_INSERT_PLACEHOLDERS}
"""


def transaction_params(transaction: Transaction) -> tuple:
    """Positional parameters for INSERT_TRANSACTION_SQL."""
    return (
        transaction.id,
        float(transaction.amount),
        transaction.category,
        transaction.description,
        transaction.type.value,
        transaction.transaction_date.isoformat(),
        transaction.timestamp,
        transaction.recurring_rule_id,
    )


class TransactionService:
    """Service for managing transactions."""

    def __init__(self, db_manager):
        """Initialize the transaction service.

        Args:
            db_manager: Database manager instance for database operations.
        """
        self.db_manager = db_manager

    def create(self, transaction: Transaction) -> Transaction:
        """Create a single transaction in the database.

        Args:
            transaction: Transaction object to insert.

        Returns:
            The same Transaction object.

        Raises:
            sqlite3.IntegrityError: If the id already exists, or the rule
                already has an occurrence on that date.
        """
        with self.db_manager.connect() as conn:
            conn.execute(INSERT_TRANSACTION_SQL, transaction_params(transaction))
            conn.commit()

        return transaction

    def find(self, transaction_id: str) -> Optional[Transaction]:
        """Get a single transaction by ID.

        Returns:
            Transaction object if found, None otherwise.
        """
        with self.db_manager.connect() as conn:
            cursor = conn.execute(
                f"SELECT {_TRANSACTION_FIELDS} FROM transactions WHERE id = ?",
                (transaction_id,),
            )
            row = cursor.fetchone()

            if row:
                return self._row_to_transaction(row)
            return None

    def find_by_rule(self, rule_id: str) -> List[Transaction]:
        """Get all occurrences materialized from a rule, oldest first."""
        with self.db_manager.connect() as conn:
            cursor = conn.execute(
                f"""
                SELECT {_TRANSACTION_FIELDS}
                FROM transactions
                WHERE recurring_rule_id = ?
                ORDER BY transaction_date, timestamp
                """,
                (rule_id,),
            )
            return [self._row_to_transaction(row) for row in cursor.fetchall()]

    def get_transactions_by_month(
        self,
        year: int,
        month: int,
        *,
        transaction_type: Optional[TransactionType] = None,
    ) -> List[Transaction]:
        """Get transactions for a specific month.

        Args:
            year: Year (e.g., 2025).
            month: Month (1-12).
            transaction_type: Optional transaction type to filter by.

        Returns:
            List of Transaction objects ordered by timestamp (newest first).
        """
        first_day = date(year, month, 1)
        start_date = first_day.isoformat()
        end_date = month_end(first_day).isoformat()

        query = f"""
            SELECT {_TRANSACTION_FIELDS}
            FROM transactions
            WHERE transaction_date >= ? AND transaction_date <= ?
        """
        params = [start_date, end_date]

        if transaction_type is not None:
            query += " AND transaction_type = ?"
            params.append(TransactionType.parse(transaction_type).value)

        query += " ORDER BY timestamp DESC, id"

        with self.db_manager.connect() as conn:
            cursor = conn.execute(query, params)
            return [self._row_to_transaction(row) for row in cursor.fetchall()]

    def delete(self, transaction_id: str) -> bool:
        """Delete a transaction by ID.

        Returns:
            True if the transaction was deleted, False if not found.
        """
        with self.db_manager.connect() as conn:
            cursor = conn.execute(
                "DELETE FROM transactions WHERE id = ?", (transaction_id,)
            )
            conn.commit()
            return cursor.rowcount > 0

    def _row_to_transaction(self, row: tuple) -> Transaction:
        """Convert a database row to a Transaction object."""
        return Transaction(
            id=row[0],
            amount=Decimal(str(row[1])),
            category=row[2],
            description=row[3],
            type=TransactionType(row[4]),
            transaction_date=date.fromisoformat(row[5]),
            timestamp=row[6],
            recurring_rule_id=row[7],
        )
