from datetime import date, timedelta
from decimal import Decimal

import pytest

from errors import ValidationError
from models.filters import FilterSpec
from tests.helpers import make_transaction
from tools.query import (
    filter_transactions,
    page_count,
    paginate,
    query_transactions,
    sort_transactions,
    split_by_date_range,
    unique_categories,
)


@pytest.fixture
def sample():
    return [
        make_transaction("expense", date(2025, 1, 10), "Groceries at Market", "Food & Dining", "45.20"),
        make_transaction("income", date(2025, 1, 1), "Salary", "Income", "3000"),
        make_transaction("expense", date(2025, 1, 12), "Bus pass", "Transportation", "60"),
        make_transaction("expense", date(2025, 1, 5), "Dinner", "Food & Dining", "30"),
    ]


class TestFilterTransactions:
    """Tests for filter_transactions."""

    def test_default_filter_keeps_everything(self, sample):
        """Test that the default filter keeps every transaction in order."""
        assert filter_transactions(sample, FilterSpec()) == sample

    def test_filter_by_category(self, sample):
        """Test exact category filtering."""
        result = filter_transactions(sample, FilterSpec(category="Food & Dining"))
        assert [t.description for t in result] == ["Groceries at Market", "Dinner"]

    def test_filter_by_type(self, sample):
        """Test type filtering."""
        result = filter_transactions(sample, FilterSpec(type="income"))
        assert [t.description for t in result] == ["Salary"]

    def test_search_is_case_insensitive(self, sample):
        """Test that search matches description regardless of case."""
        result = filter_transactions(sample, FilterSpec(search="MARKET"))
        assert [t.description for t in result] == ["Groceries at Market"]

    def test_search_matches_category(self, sample):
        """Test that search also matches the category label."""
        result = filter_transactions(sample, FilterSpec(search="transport"))
        assert [t.description for t in result] == ["Bus pass"]

    def test_filters_combine(self, sample):
        """Test that category, type and search must all match."""
        spec = FilterSpec(category="Food & Dining", type="expense", search="dinner")
        assert [t.description for t in filter_transactions(sample, spec)] == ["Dinner"]

    def test_invalid_type_filter_raises(self):
        """Test that an unknown type filter is rejected."""
        with pytest.raises(ValidationError):
            FilterSpec(type="transfer")


class TestSortTransactions:
    """Tests for sort_transactions."""

    def test_date_desc(self, sample):
        """Test newest-first ordering."""
        result = sort_transactions(sample, "date", "desc")
        assert [t.date.day for t in result] == [12, 10, 5, 1]

    def test_amount_asc(self, sample):
        """Test smallest-first ordering by amount."""
        result = sort_transactions(sample, "amount", "asc")
        assert [t.amount for t in result] == [
            Decimal("30"),
            Decimal("45.20"),
            Decimal("60"),
            Decimal("3000"),
        ]

    def test_stable_for_equal_keys(self):
        """Test that equal keys keep their insertion order in both directions."""
        same_day = [
            make_transaction(on=date(2025, 3, 1), description=f"T{i}") for i in range(5)
        ]
        for direction in ("asc", "desc"):
            result = sort_transactions(same_day, "date", direction)
            assert [t.description for t in result] == ["T0", "T1", "T2", "T3", "T4"]

    def test_does_not_mutate_input(self, sample):
        """Test that sorting returns a new list."""
        original = list(sample)
        sort_transactions(sample, "amount", "desc")
        assert sample == original

    def test_invalid_field_raises(self, sample):
        """Test that an unsupported sort field is rejected."""
        with pytest.raises(ValidationError):
            sort_transactions(sample, "description", "asc")

    def test_query_filters_then_sorts(self, sample):
        """Test query_transactions applies filter and sort together."""
        spec = FilterSpec(type="expense", sort_field="amount", sort_direction="desc")
        result = query_transactions(sample, spec)
        assert [t.description for t in result] == ["Bus pass", "Groceries at Market", "Dinner"]


class TestPagination:
    """Tests for page_count and paginate."""

    def test_page_count_rounds_up(self):
        """Test that 23 matches need 3 pages of 10."""
        assert page_count(23, 10) == 3

    def test_page_count_is_at_least_one(self):
        """Test that an empty result still has one page."""
        assert page_count(0, 10) == 1

    def test_pages_of_23_items(self):
        """Test page sizes for 23 items."""
        items = list(range(23))
        assert len(paginate(items, 1, 10)) == 10
        assert len(paginate(items, 2, 10)) == 10
        assert paginate(items, 3, 10) == [20, 21, 22]

    def test_page_past_end_is_empty(self):
        """Test that a page beyond the last one is empty."""
        assert paginate(list(range(23)), 4, 10) == []

    def test_page_zero_is_empty(self):
        """Test that page numbers below 1 give nothing."""
        assert paginate(list(range(5)), 0, 10) == []


class TestSplitByDateRange:
    """Tests for split_by_date_range."""

    def test_windows(self):
        """Test current and previous window boundaries."""
        today = date(2025, 6, 30)
        on_boundary = make_transaction(on=today - timedelta(days=30), description="boundary")
        inside = make_transaction(on=today - timedelta(days=3), description="inside")
        previous = make_transaction(on=today - timedelta(days=31), description="previous")
        previous_edge = make_transaction(on=today - timedelta(days=60), description="edge")
        too_old = make_transaction(on=today - timedelta(days=61), description="old")

        windows = split_by_date_range(
            [on_boundary, inside, previous, previous_edge, too_old], 30, today
        )

        assert [t.description for t in windows.current] == ["boundary", "inside"]
        assert [t.description for t in windows.previous] == ["previous", "edge"]

    def test_all_has_no_previous_window(self):
        """Test that "all" puts everything in the current window."""
        items = [make_transaction(on=date(2000, 1, 1)), make_transaction(on=date(2025, 1, 1))]
        windows = split_by_date_range(items, "all", date(2025, 6, 30))
        assert windows.current == items
        assert windows.previous == []

    def test_future_dates_are_current(self):
        """Test that future-dated transactions count in the current window."""
        today = date(2025, 6, 30)
        future = make_transaction(on=today + timedelta(days=10))
        assert split_by_date_range([future], 7, today).current == [future]


class TestUniqueCategories:
    """Tests for unique_categories."""

    def test_sorted_and_distinct(self, sample):
        """Test that categories are deduplicated and sorted."""
        assert unique_categories(sample) == ["Food & Dining", "Income", "Transportation"]
