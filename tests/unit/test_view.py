"""
SummerEase - Library View Unit Tests
====================================
"""

import pytest

from summerease.library.view import dashboard_preview, view
from summerease.shared.enums import Category, CategoryFilter, SortOrder
from summerease.shared.models import LibraryViewState


@pytest.fixture
def records(make_record):
    return [
        make_record("Alpha Report", t=100, category=Category.TEXT, summary="growth plan"),
        make_record("Beta Doc", t=200, category=Category.DOCUMENT, summary="risk register"),
        make_record("Gamma", t=50, category=Category.TEXT, summary="hiring ALPine office"),
    ]


def titles(rows):
    return [r.title for r in rows]


class TestView:
    """Tests for view()."""

    def test_newest(self, records):
        assert titles(view(records, LibraryViewState())) == ["Beta Doc", "Alpha Report", "Gamma"]

    def test_oldest(self, records):
        state = LibraryViewState(sort_order=SortOrder.OLDEST)
        assert titles(view(records, state)) == ["Gamma", "Alpha Report", "Beta Doc"]

    def test_alphabetical(self, records):
        state = LibraryViewState(sort_order=SortOrder.ALPHABETICAL)
        assert titles(view(records, state)) == ["Alpha Report", "Beta Doc", "Gamma"]

    def test_alphabetical_ignores_case(self, make_record):
        rows = [make_record("beta"), make_record("Alpha"), make_record("gamma")]
        state = LibraryViewState(sort_order=SortOrder.ALPHABETICAL)
        assert titles(view(rows, state)) == ["Alpha", "beta", "gamma"]

    def test_category_filter(self, records):
        state = LibraryViewState(category_filter=CategoryFilter.DOCUMENT)
        assert titles(view(records, state)) == ["Beta Doc"]

    def test_search_title_case_insensitive(self, records):
        state = LibraryViewState(search_term="alp", sort_order=SortOrder.ALPHABETICAL)
        # "Gamma" matches through its summary
        assert titles(view(records, state)) == ["Alpha Report", "Gamma"]

    def test_search_title_only_match(self, make_record):
        rows = [make_record("Alpha Report", summary="x"), make_record("Beta", summary="y")]
        assert titles(view(rows, LibraryViewState(search_term="ALP"))) == ["Alpha Report"]

    def test_search_and_filter_combine(self, records):
        state = LibraryViewState(search_term="report", category_filter=CategoryFilter.TEXT)
        assert titles(view(records, state)) == ["Alpha Report"]

    def test_empty_search_skips_filtering(self, records):
        assert len(view(records, LibraryViewState(search_term=""))) == 3

    def test_ties_keep_input_order(self, make_record):
        rows = [make_record("first", t=10), make_record("second", t=10), make_record("third", t=10)]
        assert titles(view(rows, LibraryViewState())) == ["first", "second", "third"]
        state = LibraryViewState(sort_order=SortOrder.OLDEST)
        assert titles(view(rows, state)) == ["first", "second", "third"]

    def test_input_not_mutated(self, records):
        before = list(records)
        view(records, LibraryViewState(sort_order=SortOrder.ALPHABETICAL))
        assert records == before

    def test_empty_input(self):
        assert view([], LibraryViewState(search_term="x")) == []

    def test_state_builders(self):
        state = LibraryViewState().with_search("q").with_filter(CategoryFilter.TEXT)
        state = state.with_sort(SortOrder.OLDEST)
        assert state == LibraryViewState("q", CategoryFilter.TEXT, SortOrder.OLDEST)


class TestDashboardPreview:
    """Tests for dashboard_preview()."""

    def test_three_newest(self, make_record):
        rows = [make_record(f"r{i}", t=i) for i in range(6)]
        assert titles(dashboard_preview(rows)) == ["r5", "r4", "r3"]
