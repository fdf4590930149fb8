import logging
from datetime import date, timedelta
from decimal import Decimal

import pytest
from dateutil.relativedelta import relativedelta

from models.recurring_rule import Frequency
from models.transaction import Transaction, TransactionType
from rollover import MAX_CATCH_UP, advance, changed_rules, rule_from_transaction
from tests.helpers import make_expense, make_rule


class TestAdvance:
    """Tests for advance."""

    def test_monthly_rule_catches_up_to_today(self):
        """Rule due 2024-01-15 rolled to 2024-04-20 produces four occurrences."""
        rule = make_rule(date(2024, 1, 15), Frequency.MONTHLY, amount="10")

        new, updated = advance([rule], date(2024, 4, 20))

        assert [t.transaction_date for t in new] == [
            date(2024, 1, 15),
            date(2024, 2, 15),
            date(2024, 3, 15),
            date(2024, 4, 15),
        ]
        assert updated[0].next_due_date == date(2024, 5, 15)

    def test_occurrence_due_today_is_materialized(self):
        rule = make_rule(date(2024, 4, 20), Frequency.MONTHLY)

        new, updated = advance([rule], date(2024, 4, 20))

        assert [t.transaction_date for t in new] == [date(2024, 4, 20)]
        assert updated[0].next_due_date == date(2024, 5, 20)

    def test_rule_not_yet_due_is_returned_unchanged(self):
        rule = make_rule(date(2024, 4, 21), Frequency.DAILY)

        new, updated = advance([rule], date(2024, 4, 20))

        assert new == []
        assert updated == [rule]
        assert updated[0] is rule

    def test_once_rule_never_advances(self):
        rule = make_rule(date(2024, 1, 1), Frequency.ONCE)

        new, updated = advance([rule], date(2024, 4, 20))

        assert new == []
        assert updated[0] is rule
        assert updated[0].next_due_date == date(2024, 1, 1)

    def test_second_run_is_a_no_op(self):
        rules = [
            make_rule(date(2024, 4, 1), Frequency.DAILY),
            make_rule(date(2024, 3, 31), Frequency.WEEKLY),
            make_rule(date(2024, 1, 31), Frequency.MONTHLY),
            make_rule(date(2023, 5, 1), Frequency.YEARLY),
            make_rule(date(2024, 2, 1), Frequency.ONCE),
        ]
        today = date(2024, 4, 10)

        first_new, first_rules = advance(rules, today)
        second_new, second_rules = advance(first_rules, today)

        assert len(first_new) > 0
        assert second_new == []
        assert all(a is b for a, b in zip(first_rules, second_rules))

    def test_no_gaps_or_duplicates(self):
        start = date(2024, 3, 1)
        today = date(2024, 3, 29)
        rule = make_rule(start, Frequency.WEEKLY)

        new, updated = advance([rule], today)

        dates = [t.transaction_date for t in new]
        assert dates == [start + timedelta(weeks=i) for i in range(5)]
        assert len(set(dates)) == len(dates)
        assert updated[0].next_due_date == date(2024, 4, 5)

    def test_monthly_from_month_end_clamps(self):
        rule = make_rule(date(2023, 1, 31), Frequency.MONTHLY)

        new, updated = advance([rule], date(2023, 2, 28))

        dates = [t.transaction_date for t in new]
        assert dates == [date(2023, 1, 31), date(2023, 2, 28)]
        assert updated[0].next_due_date == date(2023, 3, 28)

    def test_catch_up_is_bounded(self):
        """A daily rule dormant for 100 days advances 12 days per call."""
        start = date(2024, 1, 1)
        rule = make_rule(start, Frequency.DAILY)

        new, updated = advance([rule], start + timedelta(days=100))

        assert len(new) == MAX_CATCH_UP == 12
        assert new[-1].transaction_date == start + timedelta(days=11)
        assert updated[0].next_due_date == start + timedelta(days=12)

    def test_catch_up_converges_over_repeated_calls(self):
        rule = make_rule(date(2024, 1, 1), Frequency.DAILY)
        today = date(2024, 1, 31)

        counts = []
        rules = [rule]
        all_dates = []
        for _ in range(4):
            new, rules = advance(rules, today)
            counts.append(len(new))
            all_dates.extend(t.transaction_date for t in new)

        assert counts == [12, 12, 7, 0]
        assert all_dates == [date(2024, 1, 1) + timedelta(days=i) for i in range(31)]
        assert rules[0].next_due_date == date(2024, 2, 1)

    def test_custom_catch_up_limit(self):
        rule = make_rule(date(2024, 1, 1), Frequency.MONTHLY)

        new, updated = advance([rule], date(2024, 12, 31), catch_up_limit=2)

        assert len(new) == 2
        assert updated[0].next_due_date == date(2024, 3, 1)

    def test_invalid_catch_up_limit_raises(self):
        with pytest.raises(ValueError):
            advance([], date(2024, 1, 1), catch_up_limit=0)

    def test_ceiling_logs_warning(self, caplog):
        rule = make_rule(date(2024, 1, 1), Frequency.DAILY)

        with caplog.at_level(logging.WARNING, logger="rollcast"):
            advance([rule], date(2024, 6, 1))

        assert any("catch-up limit" in r.getMessage() for r in caplog.records)

    def test_input_rules_are_not_mutated(self):
        rule = make_rule(date(2024, 1, 15), Frequency.MONTHLY)

        _, updated = advance([rule], date(2024, 4, 20))

        assert rule.next_due_date == date(2024, 1, 15)
        assert updated[0] is not rule
        assert updated[0].id == rule.id

    def test_output_order_follows_rules_then_dates(self):
        first = make_rule(date(2024, 4, 8), Frequency.DAILY, description="A")
        second = make_rule(date(2024, 4, 1), Frequency.WEEKLY, description="B")
        today = date(2024, 4, 10)

        new, updated = advance([first, second], today)

        assert [(t.description, t.transaction_date) for t in new] == [
            ("A (Recurring)", date(2024, 4, 8)),
            ("A (Recurring)", date(2024, 4, 9)),
            ("A (Recurring)", date(2024, 4, 10)),
            ("B (Recurring)", date(2024, 4, 1)),
            ("B (Recurring)", date(2024, 4, 8)),
        ]
        assert [r.id for r in updated] == [first.id, second.id]

    def test_instances_copy_rule_fields(self):
        rule = make_rule(
            date(2024, 4, 1),
            Frequency.MONTHLY,
            amount="3500.00",
            type=TransactionType.INCOME,
            category="Salary",
            description="Paycheck",
        )

        new, _ = advance([rule], date(2024, 4, 1))

        instance = new[0]
        assert instance.amount == Decimal("3500.00")
        assert instance.type == TransactionType.INCOME
        assert instance.category == "Salary"
        assert instance.description == "Paycheck (Recurring)"
        assert instance.recurring_rule_id == rule.id

    def test_instances_get_fresh_ids(self):
        rule = make_rule(date(2024, 4, 1), Frequency.DAILY)

        first, _ = advance([rule], date(2024, 4, 3))
        again, _ = advance([rule], date(2024, 4, 3))

        ids = {t.id for t in first} | {t.id for t in again}
        assert len(ids) == 6

    def test_next_due_is_after_every_materialized_date(self):
        today = date(2024, 4, 10)
        rules = [
            make_rule(today - relativedelta(months=3), Frequency.MONTHLY),
            make_rule(today - relativedelta(years=2), Frequency.YEARLY),
            make_rule(today - timedelta(days=20), Frequency.WEEKLY),
        ]

        new, updated = advance(rules, today)

        for rule in updated:
            own = [t.transaction_date for t in new if t.recurring_rule_id == rule.id]
            assert all(d < rule.next_due_date for d in own)
            assert rule.next_due_date > today


class TestChangedRules:
    """Tests for changed_rules."""

    def test_returns_only_moved_rules(self):
        due = make_rule(date(2024, 4, 1), Frequency.MONTHLY)
        not_due = make_rule(date(2024, 5, 1), Frequency.MONTHLY)
        rules = [due, not_due]

        _, updated = advance(rules, date(2024, 4, 10))
        moved = changed_rules(rules, updated)

        assert [r.id for r in moved] == [due.id]
        assert moved[0].next_due_date == date(2024, 5, 1)

    def test_ignores_unknown_rules(self):
        known = make_rule(date(2024, 4, 1))
        stranger = make_rule(date(2024, 6, 1))

        assert changed_rules([known], [stranger]) == []


class TestRuleFromTransaction:
    """Tests for rule_from_transaction."""

    def test_rule_starts_one_period_after_transaction(self):
        transaction = make_expense("49.99", date(2024, 1, 31), category="Membership")

        rule = rule_from_transaction(transaction, Frequency.MONTHLY)

        assert rule.next_due_date == date(2024, 2, 29)
        assert rule.amount == Decimal("49.99")
        assert rule.category == "Membership"
        assert rule.description == transaction.description
        assert rule.type == TransactionType.EXPENSE
        assert rule.frequency == Frequency.MONTHLY

    def test_accepts_frequency_string(self):
        transaction = make_expense("5", date(2024, 4, 1))

        rule = rule_from_transaction(transaction, "weekly")

        assert rule.next_due_date == date(2024, 4, 8)

    def test_once_creates_no_rule(self):
        transaction = make_expense("5", date(2024, 4, 1))

        assert rule_from_transaction(transaction, Frequency.ONCE) is None

    def test_new_rule_does_not_repeat_the_original(self):
        """Rolling over the new rule never re-creates the entered transaction."""
        transaction = Transaction(
            amount=Decimal("12"),
            category="Membership",
            description="Music",
            type=TransactionType.EXPENSE,
            transaction_date=date(2024, 4, 10),
        )
        rule = rule_from_transaction(transaction, Frequency.DAILY)

        new, _ = advance([rule], date(2024, 4, 10))

        assert new == []
