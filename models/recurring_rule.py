"""Recurring rule model: a repeating transaction template."""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Union

from models.transaction import (
    TransactionType,
    new_id,
    parse_amount,
    parse_date,
)


class Frequency(str, Enum):
    ONCE = "ONCE"
    DAILY = "DAILY"
    WEEKLY = "WEEKLY"
    MONTHLY = "MONTHLY"
    YEARLY = "YEARLY"

    @classmethod
    def parse(cls, value: Union[str, "Frequency"]) -> "Frequency":
        """Parse a frequency, accepting any letter case."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().upper())
        except ValueError:
            raise ValueError(f"Unknown frequency: {value!r}") from None


@dataclass
class RecurringRule:
    """A user-defined recurring payment.

    Attributes:
        amount: Amount of every occurrence (never negative).
        category: Category label copied onto each occurrence.
        description: Free text; occurrences get a "(Recurring)" suffix.
        type: INCOME or EXPENSE.
        frequency: How far one step advances the schedule.
        next_due_date: Earliest date not yet materialized.
        id: Opaque identifier, stable for the rule's lifetime.

    Raises:
        ValueError: On a negative amount, a malformed date or an unknown
            type/frequency string.
    """

    amount: Decimal
    category: str
    description: str
    type: TransactionType
    frequency: Frequency
    next_due_date: date
    id: str = field(default_factory=new_id)

    def __post_init__(self):
        self.amount = parse_amount(self.amount)
        self.type = TransactionType.parse(self.type)
        self.frequency = Frequency.parse(self.frequency)
        self.next_due_date = parse_date(self.next_due_date)

    @classmethod
    def from_dict(cls, data: dict) -> "RecurringRule":
        """Build a rule from a dict as produced by to_dict()."""
        kwargs = dict(
            amount=data["amount"],
            category=data["category"],
            description=data.get("description", ""),
            type=data.get("transaction_type", TransactionType.EXPENSE),
            frequency=data["frequency"],
            next_due_date=data["next_due_date"],
        )
        if data.get("id"):
            kwargs["id"] = data["id"]
        return cls(**kwargs)

    def to_dict(self) -> dict:
        """Convert rule to dictionary for database storage."""
        return {
            "id": self.id,
            "amount": float(self.amount),
            "category": self.category,
            "description": self.description,
            "transaction_type": self.type.value,
            "frequency": self.frequency.value,
            "next_due_date": self.next_due_date.isoformat(),
        }
