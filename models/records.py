"""Validated record shapes for everything that crosses the storage or import boundary.

Loose dictionaries (stored JSON, imported JSON, parsed CSV rows) are parsed into
these pydantic models first and only then turned into ledger objects, so nothing
with a missing or malformed field reaches the ledger.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Literal, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from models.budget import Budget
from models.currency import SUPPORTED_CURRENCIES
from models.settings import Settings, THEMES
from models.transaction import Transaction, new_id


def _positive_amount(value: Decimal) -> Decimal:
    if not value.is_finite() or value <= 0:
        raise ValueError("amount must be a positive number")
    return value


def _required_text(value: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError("must not be empty")
    return value


class TransactionRecord(BaseModel):
    """A transaction as found in stored or imported JSON."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: Optional[str] = None
    type: Literal["income", "expense"]
    date: date
    description: str
    category: str
    amount: Decimal
    payment_method: str = Field(
        default="cash",
        validation_alias=AliasChoices("paymentMethod", "payment_method"),
    )
    created_at: Optional[datetime] = Field(
        default=None,
        validation_alias=AliasChoices("createdAt", "created_at", "timestamp"),
    )

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value):
        # Older exports used numeric ids
        if value is None or value == "":
            return None
        return str(value)

    @field_validator("type", mode="before")
    @classmethod
    def _lower_type(cls, value):
        return value.strip().lower() if isinstance(value, str) else value

    @field_validator("description", "category")
    @classmethod
    def _check_text(cls, value: str) -> str:
        return _required_text(value)

    @field_validator("amount")
    @classmethod
    def _check_amount(cls, value: Decimal) -> Decimal:
        return _positive_amount(value)

    @field_validator("payment_method", mode="before")
    @classmethod
    def _default_payment_method(cls, value):
        if value is None or (isinstance(value, str) and not value.strip()):
            return "cash"
        return value.strip() if isinstance(value, str) else value

    def to_transaction(self) -> Transaction:
        """Build a ledger Transaction, generating an id if the record has none."""
        return Transaction(
            id=self.id or new_id(),
            type=self.type,
            date=self.date,
            description=self.description,
            category=self.category,
            amount=self.amount,
            payment_method=self.payment_method,
            created_at=self.created_at or datetime.now(),
        )


class BudgetRecord(BaseModel):
    """A budget as found in stored or imported JSON."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: Optional[str] = None
    category: str
    amount: Decimal
    created_at: Optional[datetime] = Field(
        default=None,
        validation_alias=AliasChoices("createdAt", "created_at"),
    )

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value):
        if value is None or value == "":
            return None
        return str(value)

    @field_validator("category")
    @classmethod
    def _check_category(cls, value: str) -> str:
        return _required_text(value)

    @field_validator("amount")
    @classmethod
    def _check_amount(cls, value: Decimal) -> Decimal:
        return _positive_amount(value)

    def to_budget(self) -> Budget:
        return Budget(
            id=self.id or new_id(),
            category=self.category,
            amount=self.amount,
            created_at=self.created_at or datetime.now(),
        )


class SettingsRecord(BaseModel):
    """Stored settings. Missing keys take the defaults."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    currency: str = "USD"
    auto_save: bool = Field(
        default=True, validation_alias=AliasChoices("autoSave", "auto_save")
    )
    budget_alerts: bool = Field(
        default=True, validation_alias=AliasChoices("budgetAlerts", "budget_alerts")
    )
    monthly_summary: bool = Field(
        default=True,
        validation_alias=AliasChoices("monthlySummary", "monthly_summary"),
    )
    theme: str = "light"

    @field_validator("currency")
    @classmethod
    def _check_currency(cls, value: str) -> str:
        value = value.strip().upper()
        if value not in SUPPORTED_CURRENCIES:
            raise ValueError(f"unsupported currency {value}")
        return value

    @field_validator("theme")
    @classmethod
    def _check_theme(cls, value: str) -> str:
        return value if value in THEMES else "light"

    def to_settings(self) -> Settings:
        return Settings(
            currency=self.currency,
            auto_save=self.auto_save,
            budget_alerts=self.budget_alerts,
            monthly_summary=self.monthly_summary,
            theme=self.theme,
        )
