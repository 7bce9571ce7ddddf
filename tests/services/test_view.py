from datetime import date

import pytest

from errors import ValidationError
from tests.helpers import make_transaction


@pytest.fixture
def populated(services):
    for day in range(1, 24):
        services.ledger.add_transaction(
            make_transaction(on=date(2025, 1, day), description=f"Item {day}", amount=str(day))
        )
    return services


class TestTransactionView:
    """Tests for TransactionView."""

    def test_paging_23_matches(self, populated):
        """Test page sizes and the empty page past the end."""
        view = populated.view
        assert view.match_count == 23
        assert view.page_count == 3
        assert len(view.page(1)) == 10
        assert len(view.page(3)) == 3
        assert view.page(4) == []

    def test_default_order_is_newest_first(self, populated):
        """Test the default date-desc sort."""
        assert populated.view.page(1)[0].description == "Item 23"

    def test_set_filters_resets_page(self, populated):
        """Test that changing a filter goes back to page 1."""
        view = populated.view
        view.change_page(1)
        assert view.current_page == 2
        view.set_filters(sort="amount-asc")
        assert view.current_page == 1
        assert view.page()[0].description == "Item 1"

    def test_change_page_stays_in_range(self, populated):
        """Test that paging past either end is ignored."""
        view = populated.view
        assert view.change_page(-1) == 1
        view.change_page(1)
        view.change_page(1)
        assert view.change_page(1) == 3

    def test_search_is_lowercased(self, populated):
        """Test that search terms are matched case-insensitively."""
        populated.view.set_filters(search="ITEM 2")
        descriptions = {t.description for t in populated.view.results()}
        assert descriptions == {"Item 2", "Item 20", "Item 21", "Item 22", "Item 23"}

    def test_deleted_transaction_disappears(self, populated):
        """Test that a deletion is reflected on the next read."""
        view = populated.view
        first = view.page(1)[0]
        populated.ledger.delete_transaction(first.id)
        assert first.id not in view.ids()
        assert view.match_count == 22

    def test_added_transaction_appears(self, populated):
        """Test that an addition is reflected on the next read."""
        view = populated.view
        view.results()
        t = populated.ledger.add_transaction(make_transaction(on=date(2025, 2, 1)))
        assert view.ids()[0] == t.id

    def test_cleared_search_matches_everything(self, populated):
        """Test that a search of None is treated as no search."""
        populated.view.set_filters(search="item 2")
        populated.view.set_filters(search=None)
        assert populated.view.filters.search == ""
        assert populated.view.match_count == 23

    def test_sort_token_follows_filters(self, populated):
        """Test that the combined sort token reflects the sort fields."""
        assert populated.view.filters.sort_token == "date-desc"
        populated.view.set_filters(sort="amount-asc")
        assert populated.view.filters.sort_token == "amount-asc"

    def test_invalid_sort_token(self, populated):
        """Test that a malformed sort token is rejected."""
        with pytest.raises(ValidationError):
            populated.view.set_filters(sort="amount")
        with pytest.raises(ValidationError):
            populated.view.set_filters(sort="name-asc")
