"""Rollover and forecast operations over the stored rules and transactions."""

from datetime import date
from decimal import Decimal
from typing import Dict, List, Optional

from forecast import category_budget_status, forecast
from models.forecast import CategoryBudgetStatus, ForecastResult
from models.transaction import Transaction, TransactionType
from rollover import advance, changed_rules


def run_rollover(
    services,
    today: Optional[date] = None,
    catch_up_limit: Optional[int] = None,
) -> List[Transaction]:
    """Materialize all due recurring transactions and save them.

    Only rules whose next_due_date moved are written back. New
    transactions and rule updates are saved together or not at all.

    Args:
        services: Services container with recurring_rules service.
        today: Date to roll forward to. Defaults to date.today().
        catch_up_limit: Per-rule cap for this run. Defaults to the config.

    Returns:
        The transactions that were created, in rule order.
    """
    today = today or date.today()
    if catch_up_limit is None:
        catch_up_limit = services.config.catch_up_limit

    rules = services.recurring_rules.find_all()
    new_transactions, updated_rules = advance(rules, today, catch_up_limit)
    moved = changed_rules(rules, updated_rules)

    services.recurring_rules.apply_rollover(new_transactions, moved)
    return new_transactions


def get_month_forecast(
    services,
    today: Optional[date] = None,
    budget_limit: Optional[Decimal] = None,
) -> Optional[ForecastResult]:
    """Forecast spending for the month containing today.

    Args:
        services: Services container with transactions and recurring_rules.
        today: Reference date. Defaults to date.today().
        budget_limit: Monthly budget. Defaults to the config.

    Returns:
        ForecastResult, or None if no forecast can be made.
    """
    today = today or date.today()
    if budget_limit is None:
        budget_limit = services.config.budget_limit

    month_expenses = services.transactions.get_transactions_by_month(
        today.year, today.month, transaction_type=TransactionType.EXPENSE
    )
    rules = services.recurring_rules.find_all()
    return forecast(month_expenses, rules, today, budget_limit)


def get_category_budgets(
    services,
    limits: Optional[Dict[str, Decimal]] = None,
    today: Optional[date] = None,
) -> List[CategoryBudgetStatus]:
    """Spend vs. limit per category for the month containing today.

    Args:
        services: Services container with transactions and category_limits.
        limits: Limits by category. Defaults to the stored limits.
        today: Reference date. Defaults to date.today().
    """
    today = today or date.today()
    if limits is None:
        limits = services.category_limits.find_all()
    month_expenses = services.transactions.get_transactions_by_month(
        today.year, today.month, transaction_type=TransactionType.EXPENSE
    )
    return category_budget_status(month_expenses, limits)
