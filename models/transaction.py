from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
import uuid

TRANSACTION_TYPES = ("income", "expense")

PREDEFINED_CATEGORIES = [
    "Food & Dining",
    "Transportation",
    "Shopping",
    "Entertainment",
    "Bills & Utilities",
    "Healthcare",
    "Education",
    "Travel",
    "Income",
    "Investment",
    "Other",
]


def new_id() -> str:
    """Generate a fresh record id. Ids are never reused."""
    return uuid.uuid4().hex


@dataclass
class Transaction:
    id: str
    type: str  # 'income' or 'expense'
    date: date
    description: str
    category: str  # predefined name or a custom label
    amount: Decimal  # always positive, in the ledger's current currency
    payment_method: str = "cash"
    created_at: datetime = field(default_factory=datetime.now)

    @classmethod
    def create(
        cls,
        type: str,
        date: date,
        description: str,
        category: str,
        amount: Decimal,
        payment_method: str = "cash",
    ) -> "Transaction":
        """Create a Transaction with a freshly generated id and creation time."""
        return cls(
            id=new_id(),
            type=type,
            date=date,
            description=description,
            category=category,
            amount=amount,
            payment_method=payment_method or "cash",
        )

    @property
    def is_expense(self) -> bool:
        return self.type == "expense"

    @property
    def is_income(self) -> bool:
        return self.type == "income"

    def to_dict(self) -> dict:
        """Convert transaction to a JSON-ready dictionary for storage and export."""
        return {
            "id": self.id,
            "type": self.type,
            "date": self.date.isoformat(),
            "description": self.description,
            "category": self.category,
            "amount": str(self.amount),
            "paymentMethod": self.payment_method,
            "createdAt": self.created_at.isoformat(),
        }
