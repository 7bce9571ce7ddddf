"""Budget model: a monthly spending cap for one category."""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal

from models.transaction import new_id


@dataclass
class Budget:
    """Represents the monthly cap for a category.

    Attributes:
        id: Unique identifier.
        category: Category label. At most one budget exists per category.
        amount: Monthly cap, positive, in the ledger's current currency.
        created_at: Timestamp when the budget was first set.
    """

    id: str
    category: str
    amount: Decimal
    created_at: datetime = field(default_factory=datetime.now)

    @classmethod
    def create(cls, category: str, amount: Decimal) -> "Budget":
        """Create a Budget with a freshly generated id."""
        return cls(id=new_id(), category=category, amount=amount)

    def to_dict(self) -> dict:
        """Convert budget to a JSON-ready dictionary for storage and export."""
        return {
            "id": self.id,
            "category": self.category,
            "amount": str(self.amount),
            "createdAt": self.created_at.isoformat(),
        }
