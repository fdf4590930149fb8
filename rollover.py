"""Recurring rule rollover.

Turns elapsed calendar time into concrete transactions. Each rule keeps a
next_due_date pointer; advancing materializes one transaction for every due
date up to and including today and moves the pointer past it, so a date is
never materialized twice and never skipped.

Catch-up is bounded: a rule materializes at most MAX_CATCH_UP occurrences
per call. A long-dormant rule stays behind today and continues on the next
call instead of producing an unbounded batch.
"""

from dataclasses import replace
from datetime import date
from typing import List, Optional, Sequence, Tuple

from models.recurring_rule import Frequency, RecurringRule
from models.transaction import Transaction
from schedule import iter_occurrences, step_date
from logger import get_logger

logger = get_logger()

MAX_CATCH_UP = 12


def advance(
    rules: Sequence[RecurringRule],
    today: date,
    catch_up_limit: int = MAX_CATCH_UP,
) -> Tuple[List[Transaction], List[RecurringRule]]:
    """Materialize every due occurrence of every rule.

    Rules are processed independently and in input order. For each rule,
    every date from next_due_date stepping by the rule's frequency while the
    date is <= today becomes one Transaction, up to catch_up_limit
    occurrences. The rule's next_due_date then points at the first date not
    materialized.

    ONCE rules never advance. Rules with nothing due are returned unchanged
    (the same object), so every input rule has exactly one counterpart in
    the returned list, at the same position.

    Args:
        rules: Current rules. Never modified.
        today: The date to roll forward to (inclusive).
        catch_up_limit: Maximum occurrences per rule for this call.

    Returns:
        Tuple of (new_transactions, updated_rules). new_transactions is
        ordered by rule, then chronologically within a rule.

    Raises:
        ValueError: If catch_up_limit is less than 1.
    """
    if catch_up_limit < 1:
        raise ValueError(f"catch_up_limit must be at least 1, got {catch_up_limit}")

    new_transactions: List[Transaction] = []
    updated_rules: List[RecurringRule] = []

    for rule in rules:
        if rule.frequency == Frequency.ONCE:
            updated_rules.append(rule)
            continue

        due_dates = list(
            iter_occurrences(
                rule.next_due_date, rule.frequency, today, limit=catch_up_limit
            )
        )
        if not due_dates:
            updated_rules.append(rule)
            continue

        for due_date in due_dates:
            new_transactions.append(Transaction.from_rule(rule, due_date))

        next_due = step_date(due_dates[-1], rule.frequency)
        updated_rules.append(replace(rule, next_due_date=next_due))

        logger.debug(
            f"Rule {rule.id[:8]}... materialized {len(due_dates)} occurrence(s), "
            f"next due {next_due.isoformat()}"
        )
        if next_due <= today:
            logger.warning(
                f"Rule {rule.id[:8]}... reached the catch-up limit of "
                f"{catch_up_limit}; still behind ({next_due.isoformat()} <= "
                f"{today.isoformat()}), will continue on the next run"
            )

    if new_transactions:
        logger.info(f"Processing {len(new_transactions)} new recurring items.")

    return new_transactions, updated_rules


def changed_rules(
    original: Sequence[RecurringRule], updated: Sequence[RecurringRule]
) -> List[RecurringRule]:
    """Return the rules in updated whose next_due_date moved.

    Rules are matched by id. Rules missing from original are ignored.
    """
    original_due = {rule.id: rule.next_due_date for rule in original}
    return [
        rule
        for rule in updated
        if rule.id in original_due and original_due[rule.id] != rule.next_due_date
    ]


def rule_from_transaction(
    transaction: Transaction, frequency: Frequency
) -> Optional[RecurringRule]:
    """Create the rule for a transaction the user marked as recurring.

    The transaction itself is the first occurrence, so the rule starts one
    period after its date. Returns None for ONCE.
    """
    frequency = Frequency.parse(frequency)
    if frequency == Frequency.ONCE:
        return None

    return RecurringRule(
        amount=transaction.amount,
        category=transaction.category,
        description=transaction.description,
        type=transaction.type,
        frequency=frequency,
        next_due_date=step_date(transaction.transaction_date, frequency),
    )
