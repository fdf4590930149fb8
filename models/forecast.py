"""Derived forecast values. Computed on demand, never stored."""

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional


@dataclass
class ForecastResult:
    """Month-end spending projection.

    Attributes:
        projected_total: total_spent + daily_average * days_remaining.
        trending_over: True when projected_total exceeds the budget limit.
        daily_average: Month-to-date spend divided by the day of month.
        days_remaining: Days left in the month after today.
        pending_recurring_total: Expense rule occurrences still due after
            today and on or before month end.
        total_spent: Month-to-date spend the projection is based on.
        month_name: Full month name, e.g. "April".
    """

    projected_total: Decimal
    trending_over: bool
    daily_average: Decimal
    days_remaining: int
    pending_recurring_total: Decimal
    total_spent: Decimal
    month_name: str


@dataclass
class CategoryBudgetStatus:
    category: str
    spent: Decimal
    limit: Decimal  # 0 means no limit set

    @property
    def utilisation(self) -> Optional[Decimal]:
        """Fraction of the limit spent, None without a limit."""
        if self.limit <= 0:
            return None
        return self.spent / self.limit

    @property
    def is_over(self) -> bool:
        return self.limit > 0 and self.spent > self.limit
