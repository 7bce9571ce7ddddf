"""Transaction query tools: filtering, sorting, pagination and date windows."""

import math
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Iterable, List, Optional, Sequence

from errors import ValidationError
from models.filters import ALL, DateRange, FilterSpec
from models.transaction import Transaction

PAGE_SIZE = 10


@dataclass
class DateWindows:
    """Transactions split into a current window and the equal-length window before it."""

    current: List[Transaction] = field(default_factory=list)
    previous: List[Transaction] = field(default_factory=list)


def matches(transaction: Transaction, spec: FilterSpec) -> bool:
    """Check a single transaction against the category, type and search filters."""
    if spec.category != ALL and transaction.category != spec.category:
        return False

    if spec.type != ALL and transaction.type != spec.type:
        return False

    needle = spec.search.strip().lower()
    if needle:
        return (
            needle in transaction.description.lower()
            or needle in transaction.category.lower()
        )

    return True


def filter_transactions(
    transactions: Iterable[Transaction], spec: FilterSpec
) -> List[Transaction]:
    """Keep the transactions that match spec, in their original order."""
    return [t for t in transactions if matches(t, spec)]


def sort_transactions(
    transactions: Iterable[Transaction], field: str = "date", direction: str = "desc"
) -> List[Transaction]:
    """Sort transactions by date or amount.

    The sort is stable in both directions: transactions with equal keys keep
    their relative (insertion) order.

    Args:
        transactions: Transactions to sort.
        field: "date" or "amount".
        direction: "asc" or "desc".

    Returns:
        A new sorted list.

    Raises:
        ValidationError: If field or direction is not supported.
    """
    if field == "date":
        key = lambda t: t.date  # noqa: E731
    elif field == "amount":
        key = lambda t: t.amount  # noqa: E731
    else:
        raise ValidationError(f"Unsupported sort field: {field}")

    if direction not in ("asc", "desc"):
        raise ValidationError(f"Unsupported sort direction: {direction}")

    # sorted() keeps equal elements in order even with reverse=True
    return sorted(transactions, key=key, reverse=(direction == "desc"))


def query_transactions(
    transactions: Iterable[Transaction], spec: FilterSpec
) -> List[Transaction]:
    """Filter then sort transactions according to spec."""
    return sort_transactions(
        filter_transactions(transactions, spec), spec.sort_field, spec.sort_direction
    )


def page_count(total: int, page_size: int = PAGE_SIZE) -> int:
    """Number of pages for total matches. Always at least 1."""
    return max(1, math.ceil(total / page_size))


def paginate(
    items: Sequence[Transaction], page: int, page_size: int = PAGE_SIZE
) -> List[Transaction]:
    """Return the 1-indexed page of items.

    Pages past the last one (and page numbers below 1) give an empty list.
    """
    if page < 1:
        return []
    start = (page - 1) * page_size
    return list(items[start : start + page_size])


def split_by_date_range(
    transactions: Iterable[Transaction],
    date_range: DateRange,
    today: Optional[date] = None,
) -> DateWindows:
    """Split transactions into the current window and the previous one.

    With a window of d days the current window holds every transaction dated
    on or after today - d, and the previous window holds those dated from
    today - 2d up to (not including) today - d. With "all" every transaction
    is current and the previous window is empty.

    Args:
        transactions: Transactions to split.
        date_range: Window length in days, or "all".
        today: Reference date, defaults to date.today().

    Returns:
        DateWindows with both lists in original order.
    """
    transactions = list(transactions)

    if date_range == ALL:
        return DateWindows(current=transactions, previous=[])

    today = today or date.today()
    current_start = today - timedelta(days=date_range)
    previous_start = current_start - timedelta(days=date_range)

    windows = DateWindows()
    for t in transactions:
        if t.date >= current_start:
            windows.current.append(t)
        elif previous_start <= t.date < current_start:
            windows.previous.append(t)

    return windows


def unique_categories(transactions: Iterable[Transaction]) -> List[str]:
    """Sorted list of distinct categories used by transactions."""
    return sorted({t.category for t in transactions})
