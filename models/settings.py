"""User settings stored alongside the ledger."""

from dataclasses import dataclass

THEMES = ("light", "dark")


@dataclass
class Settings:
    """User settings.

    Attributes:
        currency: Code of the currency every stored amount is denominated in.
        auto_save: Persist after every successful mutation.
        budget_alerts: Raise budget threshold alerts.
        monthly_summary: Show last month's summary on the first of the month.
        theme: Presentation only.
    """

    currency: str = "USD"
    auto_save: bool = True
    budget_alerts: bool = True
    monthly_summary: bool = True
    theme: str = "light"

    def to_dict(self) -> dict:
        """Convert settings to a JSON-ready dictionary for storage."""
        return {
            "currency": self.currency,
            "autoSave": self.auto_save,
            "budgetAlerts": self.budget_alerts,
            "monthlySummary": self.monthly_summary,
            "theme": self.theme,
        }
