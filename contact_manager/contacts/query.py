"""Search + pagination over the contact store."""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import List, Sequence, TypeVar

from .store import Contact, ContactStore

T = TypeVar("T")


@dataclass(slots=True)
class ContactPage:
    """One page of the effective result set."""

    items: List[Contact] = field(default_factory=list)
    page: int = 1
    total_pages: int = 0
    total_items: int = 0


def total_pages(count: int, page_size: int) -> int:
    """Number of pages needed for ``count`` items (0 when there are none)."""
    if page_size <= 0:
        raise ValueError("page_size must be positive")
    return math.ceil(count / page_size)


def paginate(items: Sequence[T], page: int, page_size: int) -> List[T]:
    """Slice 1-indexed ``page`` out of ``items``; out-of-range pages are empty."""
    if page_size <= 0:
        raise ValueError("page_size must be positive")
    if page < 1:
        return []
    start = (page - 1) * page_size
    return list(items[start:start + page_size])


def effective_results(store: ContactStore, query: str) -> List[Contact]:
    """Search results for a non-empty query, otherwise every contact."""
    if query:
        return store.search(query)
    return store.get_all()


class ContactQuery:
    """Holds the current search text and page number for a contact list view.

    Results are recomputed from the store on every access, so a mutation
    made between calls is always reflected.
    """

    def __init__(self, store: ContactStore, page_size: int = 10) -> None:
        if page_size <= 0:
            raise ValueError("page_size must be positive")
        self.store = store
        self.page_size = page_size
        self._query = ""
        self.current_page = 1

    @property
    def query(self) -> str:
        return self._query

    @query.setter
    def query(self, value: str) -> None:
        self._query = value or ""
        self.current_page = 1

    def results(self) -> List[Contact]:
        return effective_results(self.store, self._query)

    @property
    def total_pages(self) -> int:
        return total_pages(len(self.results()), self.page_size)

    def page(self, number: int) -> List[Contact]:
        return paginate(self.results(), number, self.page_size)

    def current(self) -> ContactPage:
        results = self.results()
        return ContactPage(
            items=paginate(results, self.current_page, self.page_size),
            page=self.current_page,
            total_pages=total_pages(len(results), self.page_size),
            total_items=len(results),
        )

    def go_to(self, number: int) -> int:
        """Jump to ``number``, clamped to the available pages."""
        last = max(self.total_pages, 1)
        self.current_page = min(max(number, 1), last)
        return self.current_page

    def next(self) -> int:
        if self.current_page < self.total_pages:
            self.current_page += 1
        return self.current_page

    def previous(self) -> int:
        if self.current_page > 1:
            self.current_page -= 1
        return self.current_page
