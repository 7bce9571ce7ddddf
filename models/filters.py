"""Filter, sort and date-range parameters for transaction queries."""

from dataclasses import dataclass
from typing import Union

from errors import ValidationError

ALL = "all"
SORT_FIELDS = ("date", "amount")
SORT_DIRECTIONS = ("asc", "desc")

DateRange = Union[int, str]  # day count, or "all"


def parse_date_range(value) -> DateRange:
    """Parse a date-range window: a positive day count or "all"."""
    if isinstance(value, str):
        if value.strip().lower() == ALL:
            return ALL
        try:
            value = int(value)
        except ValueError:
            raise ValidationError(f"Invalid date range: {value!r}")
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ValidationError(f"Invalid date range: {value!r}")
    return value


@dataclass
class FilterSpec:
    """Ephemeral query parameters. Never persisted.

    Attributes:
        category: Exact category to keep, or "all".
        type: "income", "expense" or "all".
        search: Case-insensitive substring matched against description or category.
        sort_field: "date" or "amount".
        sort_direction: "asc" or "desc".
        date_range: Dashboard window in days, or "all".
    """

    category: str = ALL
    type: str = ALL
    search: str = ""
    sort_field: str = "date"
    sort_direction: str = "desc"
    date_range: DateRange = 30

    def __post_init__(self):
        if self.sort_field not in SORT_FIELDS:
            raise ValidationError(f"Invalid sort field: {self.sort_field}")
        if self.sort_direction not in SORT_DIRECTIONS:
            raise ValidationError(f"Invalid sort direction: {self.sort_direction}")
        if self.type not in (ALL, "income", "expense"):
            raise ValidationError(f"Invalid type filter: {self.type}")
        self.date_range = parse_date_range(self.date_range)

    @property
    def sort_token(self) -> str:
        """Combined sort token, e.g. "date-desc"."""
        return f"{self.sort_field}-{self.sort_direction}"

    @staticmethod
    def split_sort_token(token: str):
        """Split a token such as "amount-asc" into (field, direction).

        Raises:
            ValidationError: If the token is not field-direction.
        """
        parts = token.split("-")
        if len(parts) != 2:
            raise ValidationError(f"Invalid sort order: {token!r}")
        return parts[0], parts[1]
