"""Search, filter and sort over the in-memory record collection."""

import locale
from typing import Iterable, List

from summerease.shared.enums import CategoryFilter, SortOrder
from summerease.shared.models import LibraryViewState, SummaryRecord


def _matches(record: SummaryRecord, needle: str) -> bool:
    return needle in record.title.casefold() or needle in record.summary.casefold()


def _title_key(record: SummaryRecord) -> str:
    return locale.strxfrm(record.title.casefold())


def view(records: Iterable[SummaryRecord], state: LibraryViewState) -> List[SummaryRecord]:
    """
    Display-ordered, display-filtered copy of ``records``.

    Search is a case-insensitive substring match on title or summary and is
    skipped when the term is empty. Sorting is stable, so ties keep input order.
    The input collection is never mutated.
    """
    result = list(records)

    needle = state.search_term.casefold()
    if needle:
        result = [r for r in result if _matches(r, needle)]

    if state.category_filter != CategoryFilter.ALL:
        wanted = state.category_filter.value
        result = [r for r in result if r.category.value == wanted]

    if state.sort_order == SortOrder.NEWEST:
        result.sort(key=lambda r: r.created_ts, reverse=True)
    elif state.sort_order == SortOrder.OLDEST:
        result.sort(key=lambda r: r.created_ts)
    else:
        result.sort(key=_title_key)

    return result


def dashboard_preview(records: Iterable[SummaryRecord], size: int = 3) -> List[SummaryRecord]:
    """Newest ``size`` records."""
    return view(records, LibraryViewState())[:size]
