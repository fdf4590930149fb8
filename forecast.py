"""Month-end spending forecast.

The projection extends the month-to-date daily run-rate over the rest of
the month. Recurring expenses that are still due this month are reported
separately as pending_recurring_total; already materialized occurrences are
part of month_expenses and never counted twice because a rule's
next_due_date is always after today once rollover has run.
"""

from datetime import date
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Sequence

from models.category import EXPENSE_CATEGORIES
from models.forecast import CategoryBudgetStatus, ForecastResult
from models.recurring_rule import RecurringRule
from models.transaction import Transaction, TransactionType
from schedule import days_in_month, iter_occurrences, month_end
from logger import get_logger

logger = get_logger()


def forecast(
    month_expenses: Sequence[Transaction],
    rules: Sequence[RecurringRule],
    today: date,
    budget_limit: Decimal,
) -> Optional[ForecastResult]:
    """Project total spending for today's calendar month.

    Args:
        month_expenses: EXPENSE transactions dated in today's month. The
            caller filters; amounts are summed as given.
        rules: Current recurring rules, rolled over up to today.
        today: Reference date.
        budget_limit: Monthly budget the projection is compared against.

    Returns:
        ForecastResult, or None if the day of month is zero.
    """
    current_day = today.day
    if current_day == 0:
        return None

    total_spent = sum((t.amount for t in month_expenses), Decimal("0"))
    daily_average = total_spent / current_day
    days_remaining = days_in_month(today) - current_day
    projected_total = total_spent + daily_average * days_remaining

    result = ForecastResult(
        projected_total=projected_total,
        trending_over=projected_total > Decimal(budget_limit),
        daily_average=daily_average,
        days_remaining=days_remaining,
        pending_recurring_total=pending_recurring_total(rules, today),
        total_spent=total_spent,
        month_name=today.strftime("%B"),
    )
    logger.debug(
        f"Forecast for {today.isoformat()}: spent {total_spent}, "
        f"projected {projected_total}, pending {result.pending_recurring_total}"
    )
    return result


def pending_recurring_total(rules: Iterable[RecurringRule], today: date) -> Decimal:
    """Sum the expense occurrences due after today and by the end of its month."""
    end = month_end(today)
    total = Decimal("0")

    for rule in rules:
        if rule.type != TransactionType.EXPENSE:
            continue
        for due_date in iter_occurrences(rule.next_due_date, rule.frequency, end):
            if due_date > today:
                total += rule.amount

    return total


def category_budget_status(
    month_expenses: Iterable[Transaction],
    limits: Dict[str, Decimal],
    categories: Optional[Iterable[str]] = None,
) -> List[CategoryBudgetStatus]:
    """Compare this month's spend per category against its limit.

    Categories with neither spend nor a limit are left out. Categories with
    a limit come first, highest utilisation first; the rest follow by spend.

    Args:
        month_expenses: Transactions dated in the month. INCOME is ignored.
        limits: Category -> monthly limit. Missing means no limit.
        categories: Categories to report on. Defaults to the built-in
            expense categories; categories found in the spend or in limits
            are always included.
    """
    spent: Dict[str, Decimal] = {}
    for transaction in month_expenses:
        if transaction.type != TransactionType.EXPENSE:
            continue
        spent[transaction.category] = (
            spent.get(transaction.category, Decimal("0")) + transaction.amount
        )

    names = list(EXPENSE_CATEGORIES if categories is None else categories)
    for name in list(spent) + list(limits):
        if name not in names:
            names.append(name)

    items = []
    for name in names:
        item = CategoryBudgetStatus(
            category=name,
            spent=spent.get(name, Decimal("0")),
            limit=Decimal(str(limits.get(name, 0))),
        )
        if item.spent > 0 or item.limit > 0:
            items.append(item)

    return _sort_budget_items(items)


def _sort_budget_items(items: List[CategoryBudgetStatus]) -> List[CategoryBudgetStatus]:
    # Limited categories by utilisation, then the rest by spend. Both sides
    # sort descending.
    limited = [item for item in items if item.limit > 0]
    unlimited = [item for item in items if item.limit <= 0]
    limited.sort(key=lambda item: item.utilisation, reverse=True)
    unlimited.sort(key=lambda item: item.spent, reverse=True)
    return limited + unlimited

