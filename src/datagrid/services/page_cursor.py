"""Page cursor for remotely paginated collections.

The remote total count is authoritative. The cursor remembers the page the
user asked for and the page size; every reconciliation adopts the response's
total count and clamps the current page into ``[1, max(1, total_pages)]``.

Decisions:
 - ``reconcile`` never moves the cursor to the response's ``page_index``;
   it only adopts ``total_count`` and clamps. Applying the same (or an older)
   page twice therefore yields the same state.
 - Changing the page size is a new query: the current page resets to 1.
 - Page sizes below 1 and negative totals are ignored / treated as 0.
"""

from __future__ import annotations

import logging
import math
from typing import List, Optional, Sequence, Tuple, Union

from datagrid import settings
from datagrid.models import FetchParams, FilterDirective, NoOpReason, PageState, RecordPage, SortDirective

__all__ = ["PageCursor", "total_pages_for", "page_window"]

_logger = logging.getLogger(__name__)

ELLIPSIS = "..."


def total_pages_for(total_count: int, page_size: int) -> int:
    if page_size < 1 or total_count <= 0:
        return 0
    return math.ceil(total_count / page_size)


def page_window(
    current_page: int, total_pages: int, max_visible: int = settings.MAX_VISIBLE_PAGES
) -> List[Union[int, str]]:
    """Page numbers for a pagination control, with ``"..."`` for gaps.

    Near the start the first ``max_visible`` pages are shown, near the end
    the last ``max_visible``; otherwise the current page with neighbours on
    both sides framed by the first and last page.
    """
    if total_pages <= max_visible:
        return list(range(1, total_pages + 1))
    side = max_visible // 2
    if current_page <= side + 1:
        return list(range(1, max_visible + 1)) + [ELLIPSIS, total_pages]
    if current_page >= total_pages - side:
        return [1, ELLIPSIS] + list(range(total_pages - max_visible + 1, total_pages + 1))
    middle = list(range(current_page - side, current_page + side + 1))
    return [1, ELLIPSIS] + middle + [ELLIPSIS, total_pages]


class PageCursor:
    def __init__(self, page_size: int = settings.DEFAULT_PAGE_SIZE, current_page: int = 1):
        self._page_size = page_size if page_size >= 1 else settings.DEFAULT_PAGE_SIZE
        self._current_page = max(1, current_page)
        self._total_count = 0
        self._reconciled = False

    # State ------------------------------------------------------------
    @property
    def current_page(self) -> int:
        return self._current_page

    @property
    def page_size(self) -> int:
        return self._page_size

    @property
    def total_count(self) -> int:
        return self._total_count

    @property
    def total_pages(self) -> int:
        return total_pages_for(self._total_count, self._page_size)

    def state(self) -> PageState:
        return PageState(
            current_page=self._current_page,
            page_size=self._page_size,
            total_pages=self.total_pages,
            total_count=self._total_count,
        )

    # Requests ---------------------------------------------------------
    def request(
        self,
        page_index: Optional[int] = None,
        page_size: Optional[int] = None,
        *,
        sort: Optional[SortDirective] = None,
        filters: Sequence[FilterDirective] = (),
    ) -> FetchParams:
        """Record the wanted page / size and return the fetch parameters."""
        size_changed = page_size is not None and self.set_page_size(page_size)
        if page_index is not None and not size_changed:
            self._current_page = max(1, page_index)
        return FetchParams(
            page_index=self._current_page,
            page_size=self._page_size,
            sort=sort,
            filters=tuple(filters),
        )

    def set_page_size(self, page_size: int) -> bool:
        if page_size < 1:
            _logger.debug("page size %s ignored", page_size)
            return False
        if page_size == self._page_size:
            return False
        self._page_size = page_size
        self._current_page = 1
        return True

    def go_to(self, page_index: int) -> int:
        """Move to ``page_index``, clamped once a total count is known."""
        target = max(1, page_index)
        if self._reconciled:
            target = self._clamp(target)
        self._current_page = target
        return target

    def next_page(self) -> int:
        return self.go_to(self._current_page + 1)

    def previous_page(self) -> int:
        return self.go_to(self._current_page - 1)

    def has_next(self) -> bool:
        return self._current_page < self.total_pages

    def has_previous(self) -> bool:
        return self._current_page > 1

    # Reconciliation ---------------------------------------------------
    def reconcile(self, response: RecordPage) -> PageState:
        self._total_count = max(0, int(response.total_count))
        self._reconciled = True
        clamped = self._clamp(self._current_page)
        if clamped != self._current_page:
            _logger.debug(
                "page %d clamped to %d (%s)",
                self._current_page,
                clamped,
                NoOpReason.PAGE_OUT_OF_RANGE.value,
            )
            self._current_page = clamped
        return self.state()

    def _clamp(self, page: int) -> int:
        return min(max(1, page), max(1, self.total_pages))

    # Presentation helpers --------------------------------------------
    def visible_range(self) -> Tuple[int, int]:
        """1-based (first, last) item numbers on the current page; (0, 0) when empty."""
        if self._total_count == 0:
            return (0, 0)
        first = min((self._current_page - 1) * self._page_size + 1, self._total_count)
        last = min(self._current_page * self._page_size, self._total_count)
        return (first, last)

    def page_window(self, max_visible: int = settings.MAX_VISIBLE_PAGES) -> List[Union[int, str]]:
        return page_window(self._current_page, self.total_pages, max_visible)
