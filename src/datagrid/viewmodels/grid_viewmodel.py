"""ViewModel for a configurable data grid.

One instance per collection view (all issues, a project's issues, vendors,
...). It owns the column model, the transient sort / filter / search
directives, the page cursor and a view-scoped event bus, and exposes the
header and row lists the widget layer renders. No Qt imports so unit tests
can exercise it headless.

Nothing here raises on stale input: ignored directives are announced as
``GridEvent.DIRECTIVE_IGNORED`` with a ``NoOpReason`` payload instead.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterable, List, Mapping, Optional, Sequence

from datagrid import settings
from datagrid.models import (
    Column,
    FetchParams,
    Field,
    FilterDirective,
    NoOpReason,
    PageState,
    RecordPage,
    SearchDirective,
    SortDirective,
)
from datagrid.services.cell_renderers import CellRendererRegistry
from datagrid.services.column_layout_persistence import (
    ColumnLayoutPersistenceService,
    ColumnLayoutState,
)
from datagrid.services.column_model import ColumnModel
from datagrid.services.column_reorder import DragSession, ReorderResult, move_column
from datagrid.services.event_bus import EventBus, GridEvent
from datagrid.services.page_cursor import PageCursor
from datagrid.services.view_compute import Accessor, FilterSet, compute, next_sort

__all__ = ["GridViewModel", "GridSummary"]

_logger = logging.getLogger(__name__)


@dataclass
class GridSummary:
    first: int = 0
    last: int = 0
    total_count: int = 0

    def as_text(self) -> str:
        if self.total_count == 0:
            return "No results"
        return f"Showing {self.first} to {self.last} of {self.total_count} results"


class GridViewModel:
    def __init__(
        self,
        collection: str,
        default_columns: Iterable[Column] = (),
        *,
        page_size: int = settings.DEFAULT_PAGE_SIZE,
        search_fields: Sequence[str] = (),
        renderers: CellRendererRegistry | None = None,
        accessors: Mapping[str, Accessor] | None = None,
        event_bus: EventBus | None = None,
        persistence: ColumnLayoutPersistenceService | None = None,
    ):
        self.collection = collection
        self.columns = ColumnModel(default_columns)
        self.cursor = PageCursor(page_size)
        self.bus = event_bus or EventBus()
        self.renderers = renderers or CellRendererRegistry()
        self._accessors = dict(accessors or {})
        self._persistence = persistence
        self._sort: Optional[SortDirective] = None
        self._filters = FilterSet()
        self._search = SearchDirective("", tuple(search_fields))
        self._page = RecordPage(page_size=self.cursor.page_size)
        self._drag: Optional[DragSession] = None
        self.summary = GridSummary()

    # ------------------------------------------------------------------
    # Columns
    # ------------------------------------------------------------------
    def headers(self) -> List[Column]:
        return self.columns.visible()

    def apply_schema(self, fields: Optional[Sequence[Field]]) -> bool:
        if not fields:
            self._ignored(NoOpReason.SCHEMA_EMPTY, collection=self.collection)
            return False
        changed = self.columns.merge_schema(fields)
        self.bus.publish(GridEvent.SCHEMA_MERGED, {"collection": self.collection, "changed": changed})
        if changed:
            self._columns_changed("schema")
        return changed

    def toggle_column(self, key: str) -> bool:
        return self._after_visibility(self.columns.toggle(key), "toggle")

    def set_column_selected(self, key: str, flag: bool) -> bool:
        return self._after_visibility(self.columns.set_selected(key, flag), "toggle")

    def select_all_columns(self) -> bool:
        return self._after_visibility(self.columns.select_all(), "select_all")

    def deselect_all_columns(self) -> bool:
        return self._after_visibility(self.columns.deselect_all(), "deselect_all")

    def reset_columns(self) -> bool:
        before = self.columns.columns
        self.columns.reset()
        return self._after_visibility(before != self.columns.columns, "reset")

    def _after_visibility(self, changed: bool, reason: str) -> bool:
        if changed:
            # A drag in progress must not carry a stale visible index across a toggle
            self.end_drag()
            self._columns_changed(reason)
        return changed

    def move_column(self, drag_visible_index: int, hover_visible_index: int) -> bool:
        count = len(self.headers())
        if not (0 <= drag_visible_index < count and 0 <= hover_visible_index < count):
            self._ignored(
                NoOpReason.INVALID_REORDER_INDICES,
                drag=drag_visible_index,
                hover=hover_visible_index,
            )
            return False
        changed = self.columns.reorder(drag_visible_index, hover_visible_index)
        if changed:
            self._columns_changed("reorder")
        return changed

    def begin_drag(self, visible_index: int) -> bool:
        self._drag = DragSession(self.columns.columns, visible_index)
        if not self._drag.active:
            self._drag = None
            self._ignored(NoOpReason.INVALID_REORDER_INDICES, drag=visible_index)
            return False
        return True

    def drag_hover(self, hover_visible_index: int, pointer_offset: float, extent: float) -> bool:
        if self._drag is None:
            return False
        columns, moved = self._drag.hover(
            self.columns.columns, hover_visible_index, pointer_offset, extent
        )
        if not self._drag.active:
            self._drag = None
        if moved:
            self.columns.replace_columns(columns)
            self._columns_changed("reorder")
        return moved

    def end_drag(self) -> None:
        self._drag = None

    @property
    def dragging(self) -> bool:
        return self._drag is not None

    def keyboard_move(self, visible_index: int, command: str) -> ReorderResult:
        result = move_column(self.columns.columns, visible_index, command)
        if result.changed:
            self.columns.replace_columns(result.columns)
            self._columns_changed("reorder")
        return result

    def _columns_changed(self, reason: str) -> None:
        self.bus.publish(
            GridEvent.COLUMNS_CHANGED,
            {"reason": reason, "visible": [c.key for c in self.headers()]},
        )

    # ------------------------------------------------------------------
    # Sort / filter / search
    # ------------------------------------------------------------------
    @property
    def sort(self) -> Optional[SortDirective]:
        return self._sort

    @property
    def filters(self) -> FilterSet:
        return self._filters

    @property
    def search_text(self) -> str:
        return self._search.text

    def set_sort(self, directive: Optional[SortDirective]) -> None:
        """Store a sort directive; invalid targets are kept but ignored by ``rows``."""
        if directive == self._sort:
            return
        self._sort = directive
        if directive is not None and not self._is_sortable(directive.field):
            self._ignored(NoOpReason.INVALID_SORT_TARGET, field=directive.field)
        self.bus.publish(GridEvent.SORT_CHANGED, directive)

    def request_sort(self, key: str) -> Optional[SortDirective]:
        """Header click. Non-sortable columns leave the current sort untouched."""
        if not self._is_sortable(key):
            self._ignored(NoOpReason.INVALID_SORT_TARGET, field=key)
            return self._sort
        self.set_sort(next_sort(self._sort, key))
        return self._sort

    def clear_sort(self) -> None:
        self.set_sort(None)

    def _is_sortable(self, key: str) -> bool:
        col = self.columns.get(key)
        return col is not None and col.is_sortable

    def set_filter(self, field: str, value: Any, mode: str = "equals") -> None:
        directive = FilterDirective(field, value, mode)
        if self._filters.get(field) == directive:
            return
        self._filters.add(directive)
        self.bus.publish(GridEvent.FILTERS_CHANGED, self._filters.directives())

    def remove_filter(self, field: str) -> bool:
        removed = self._filters.remove(field)
        if removed:
            self.bus.publish(GridEvent.FILTERS_CHANGED, self._filters.directives())
        return removed

    def clear_filters(self) -> None:
        if not len(self._filters) and not self._search.text:
            return
        self._filters.clear()
        self._search = SearchDirective("", self._search.fields)
        self.bus.publish(GridEvent.FILTERS_CHANGED, ())

    def set_search(self, text: str) -> None:
        if text == self._search.text:
            return
        self._search = SearchDirective(text, self._search.fields)
        self.bus.publish(GridEvent.FILTERS_CHANGED, self._filters.directives())

    # ------------------------------------------------------------------
    # Records
    # ------------------------------------------------------------------
    def apply_page(self, page: RecordPage) -> PageState:
        before = self.cursor.current_page
        self._page = page
        state = self.cursor.reconcile(page)
        if state.current_page != before:
            self._ignored(NoOpReason.PAGE_OUT_OF_RANGE, requested=before, current=state.current_page)
        first, last = self.cursor.visible_range()
        self.summary = GridSummary(first=first, last=last, total_count=state.total_count)
        self.bus.publish(GridEvent.RECORDS_UPDATED, {"count": len(page.items)})
        self.bus.publish(GridEvent.PAGE_CHANGED, state)
        return state

    def rows(self) -> List[Any]:
        return compute(
            self._page.items,
            self._sort,
            self._filters,
            columns=self.columns.columns,
            search=self._search,
            accessors=self._accessors,
        )

    def cell(self, record: Any, key: str) -> Any:
        return self.renderers.render(key, record)

    def row_values(self, record: Any) -> List[Any]:
        return [self.cell(record, c.key) for c in self.headers()]

    # ------------------------------------------------------------------
    # Pagination / refresh
    # ------------------------------------------------------------------
    def page_state(self) -> PageState:
        return self.cursor.state()

    def fetch_params(self) -> FetchParams:
        return FetchParams(
            page_index=self.cursor.current_page,
            page_size=self.cursor.page_size,
            sort=self._sort if self._sort and self._is_sortable(self._sort.field) else None,
            filters=self._filters.active(),
        )

    def change_page(self, page_index: int) -> FetchParams:
        self.cursor.go_to(page_index)
        return self.request_refresh("page")

    def change_page_size(self, page_size: int) -> FetchParams:
        if not self.cursor.set_page_size(page_size):
            return self.fetch_params()
        return self.request_refresh("page_size")

    def request_refresh(self, reason: str = "manual") -> FetchParams:
        """Ask this view's fetch layer to reload the current page.

        Replaces window-wide "issue created" style broadcasts: whoever
        creates or edits a record calls this on the view that shows it.
        """
        params = self.fetch_params()
        self.bus.publish(GridEvent.REFRESH_REQUESTED, {"reason": reason, "params": params})
        return params

    # ------------------------------------------------------------------
    # Layout persistence
    # ------------------------------------------------------------------
    def save_layout(self) -> bool:
        if self._persistence is None:
            return False
        state = ColumnLayoutState(columns=self.columns.to_layout())
        return self._persistence.save(self.collection, state)

    def restore_layout(self) -> bool:
        if self._persistence is None:
            return False
        state = self._persistence.load(self.collection)
        if not state.columns:
            return False
        before = self.columns.columns
        self.columns.apply_layout(state.columns)
        if before != self.columns.columns:
            self._columns_changed("restore")
        return True

    # ------------------------------------------------------------------
    def _ignored(self, reason: NoOpReason, **details: Any) -> None:
        _logger.debug("%s ignored: %s", reason.value, details)
        self.bus.publish(GridEvent.DIRECTIVE_IGNORED, {"reason": reason, **details})
