"""Built-in category labels."""

EXPENSE_CATEGORIES = [
    "Shopping",
    "Food & Dining",
    "Friends",
    "Family",
    "Petrol/Transport",
    "EMI/Loans",
    "Membership",
    "Bills & Utilities",
    "Entertainment",
    "Health",
    "Travel",
    "Other",
]
