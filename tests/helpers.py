"""Helper utilities for tests."""

from datetime import date
from decimal import Decimal

from models.budget import Budget
from models.transaction import Transaction


def make_transaction(
    type: str = "expense",
    on: date = date(2025, 1, 15),
    description: str = "Coffee",
    category: str = "Food & Dining",
    amount="10.00",
    payment_method: str = "cash",
) -> Transaction:
    """Build a Transaction with sensible defaults.

    Args:
        type: "income" or "expense".
        on: Transaction date.
        description: Free-text description.
        category: Category label.
        amount: Anything Decimal accepts as a string.
        payment_method: Payment method label.
    """
    return Transaction.create(
        type=type,
        date=on,
        description=description,
        category=category,
        amount=Decimal(str(amount)),
        payment_method=payment_method,
    )


def make_budget(category: str = "Food & Dining", amount="200.00") -> Budget:
    """Build a Budget for category."""
    return Budget.create(category, Decimal(str(amount)))
