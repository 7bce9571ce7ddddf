"""Filtered, sorted and paginated projection of the ledger's transactions."""

from dataclasses import astuple, replace
from typing import List, Optional

from models.filters import FilterSpec
from models.transaction import Transaction
from tools.query import PAGE_SIZE, page_count, paginate, query_transactions


class TransactionView:
    """Disposable view over LedgerService.transactions.

    The view never holds its own copy of the data between ledger mutations:
    the matching list is cached against the ledger revision and the filter,
    and recomputed as soon as either changes. A transaction deleted from the
    ledger therefore disappears from every page on the next read.

    Args:
        ledger: The LedgerService that owns the transactions.
        page_size: Number of transactions per page.
    """

    def __init__(self, ledger, page_size: int = PAGE_SIZE):
        self.ledger = ledger
        self.page_size = page_size
        self.filters = FilterSpec()
        self.current_page = 1
        self._cache_key = None
        self._results: List[Transaction] = []

    def set_filters(self, **changes) -> FilterSpec:
        """Update filter fields (category, type, search, sort_field,
        sort_direction, date_range) and go back to the first page."""
        if "sort" in changes:
            field, direction = FilterSpec.split_sort_token(changes.pop("sort"))
            changes.setdefault("sort_field", field)
            changes.setdefault("sort_direction", direction)
        if "search" in changes:
            changes["search"] = (changes["search"] or "").lower()
        self.filters = replace(self.filters, **changes)
        self.current_page = 1
        return self.filters

    def results(self) -> List[Transaction]:
        """All matching transactions in sort order."""
        key = (self.ledger.revision, astuple(self.filters))
        if key != self._cache_key:
            self._results = query_transactions(self.ledger.transactions, self.filters)
            self._cache_key = key
        return self._results

    @property
    def match_count(self) -> int:
        return len(self.results())

    @property
    def page_count(self) -> int:
        return page_count(self.match_count, self.page_size)

    def page(self, number: Optional[int] = None) -> List[Transaction]:
        """Transactions on a 1-indexed page (the current page by default).

        A page past the last one is empty.
        """
        if number is None:
            number = self.current_page
        return paginate(self.results(), number, self.page_size)

    def change_page(self, delta: int) -> int:
        """Move by delta pages if the target page exists; returns the current page."""
        target = self.current_page + delta
        if 1 <= target <= self.page_count:
            self.current_page = target
        return self.current_page

    def ids(self) -> List[str]:
        return [t.id for t in self.results()]
