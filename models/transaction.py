from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Optional, Union
import uuid


class TransactionType(str, Enum):
    INCOME = "INCOME"
    EXPENSE = "EXPENSE"

    @classmethod
    def parse(cls, value: Union[str, "TransactionType"]) -> "TransactionType":
        """Parse a transaction type, accepting any letter case."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().upper())
        except ValueError:
            raise ValueError(f"Unknown transaction type: {value!r}") from None


def new_id() -> str:
    return uuid.uuid4().hex


def parse_amount(value) -> Decimal:
    """Convert an amount to Decimal, rejecting negatives and non-numbers."""
    if isinstance(value, Decimal):
        amount = value
    else:
        try:
            amount = Decimal(str(value).strip())
        except InvalidOperation:
            raise ValueError(f"Invalid amount: {value!r}") from None
    if not amount.is_finite():
        raise ValueError(f"Invalid amount: {value!r}")
    if amount < 0:
        raise ValueError(f"Amount must not be negative, got {amount}")
    return amount


def parse_date(value: Union[str, date]) -> date:
    """Parse a YYYY-MM-DD string into a date; dates pass through."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value).strip())
    except ValueError:
        raise ValueError(f"Invalid date (expected YYYY-MM-DD): {value!r}") from None


def date_timestamp(d: date) -> int:
    """Ordering key for a calendar date: epoch milliseconds at UTC midnight."""
    return int(datetime(d.year, d.month, d.day, tzinfo=timezone.utc).timestamp() * 1000)


@dataclass
class Transaction:
    amount: Decimal  # always positive
    category: str
    description: str
    type: TransactionType
    transaction_date: date
    id: str = field(default_factory=new_id)
    timestamp: Optional[int] = None  # sort key, derived from the date when unset
    recurring_rule_id: Optional[str] = None  # set when materialized from a rule

    def __post_init__(self):
        self.amount = parse_amount(self.amount)
        self.type = TransactionType.parse(self.type)
        self.transaction_date = parse_date(self.transaction_date)
        if self.timestamp is None:
            self.timestamp = date_timestamp(self.transaction_date)

    @classmethod
    def from_rule(cls, rule, due_date: date) -> "Transaction":
        """Materialize one occurrence of a recurring rule on due_date."""
        return cls(
            amount=rule.amount,
            category=rule.category,
            description=f"{rule.description} (Recurring)",
            type=rule.type,
            transaction_date=due_date,
            recurring_rule_id=rule.id,
        )

    def to_dict(self) -> dict:
        """Convert transaction to dictionary for database storage."""
        return {
            "id": self.id,
            "amount": float(self.amount),
            "category": self.category,
            "description": self.description,
            "transaction_type": self.type.value,
            "transaction_date": self.transaction_date.isoformat(),
            "timestamp": self.timestamp,
            "recurring_rule_id": self.recurring_rule_id,
        }
