"""Category limit service for database operations."""

from typing import Dict, Optional, Union
from decimal import Decimal, InvalidOperation
from logger import get_logger

logger = get_logger()


class CategoryLimitService:
    """Service for the stored monthly limit of each category."""

    def __init__(self, db_manager):
        """Initialize the category limit service.

        Args:
            db_manager: Database manager instance for database operations.
        """
        self.db_manager = db_manager

    def set(self, category: str, limit: Union[Decimal, str, int, float]) -> bool:
        """Store the monthly limit for a category.

        A limit of zero or less clears the category's limit instead.

        Args:
            category: Category label.
            limit: Monthly limit.

        Returns:
            True if a limit is now stored, False if it was cleared.

        Raises:
            ValueError: If category is empty or limit is not a finite number.
        """
        category = (category or "").strip()
        if not category:
            raise ValueError("Category must not be empty")
        try:
            limit = Decimal(str(limit).strip())
        except InvalidOperation:
            raise ValueError(f"Invalid limit: {limit!r}") from None
        if not limit.is_finite():
            raise ValueError(f"Invalid limit: {limit!r}")

        if limit <= 0:
            self.delete(category)
            return False

        with self.db_manager.connect() as conn:
            conn.execute(
                """
                INSERT INTO category_limits (category, monthly_limit)
                VALUES (?, ?)
                ON CONFLICT(category) DO UPDATE SET
                    monthly_limit = excluded.monthly_limit
                """,
                (category, float(limit)),
            )
            conn.commit()

        logger.debug(f"Limit for {category} set to {limit}")
        return True

    def find(self, category: str) -> Optional[Decimal]:
        """Get the stored limit for a category, or None if it has none."""
        with self.db_manager.connect() as conn:
            cursor = conn.execute(
                "SELECT monthly_limit FROM category_limits WHERE category = ?",
                (category,),
            )
            row = cursor.fetchone()

            if row:
                return Decimal(str(row[0]))
            return None

    def find_all(self) -> Dict[str, Decimal]:
        """Get every stored limit keyed by category, in category order."""
        with self.db_manager.connect() as conn:
            cursor = conn.execute(
                "SELECT category, monthly_limit FROM category_limits "
                "ORDER BY category"
            )
            return {row[0]: Decimal(str(row[1])) for row in cursor.fetchall()}

    def delete(self, category: str) -> bool:
        """Clear a category's limit.

        Returns:
            True if a limit was removed, False if none was stored.
        """
        with self.db_manager.connect() as conn:
            cursor = conn.execute(
                "DELETE FROM category_limits WHERE category = ?", (category,)
            )
            conn.commit()
            return cursor.rowcount > 0
