"""Grid-facing lightweight models and value objects.

Everything here is immutable: services return new instances instead of
mutating their inputs, which keeps ``merge`` / ``reconcile`` idempotent and
makes results safe to compare in tests.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

__all__ = [
    "Field",
    "Column",
    "SortDirective",
    "FilterDirective",
    "SearchDirective",
    "RecordPage",
    "PageState",
    "FetchParams",
    "NoOpReason",
    "SORT_DIRECTIONS",
    "FILTER_MODES",
]

SORT_DIRECTIONS = ("asc", "desc")
FILTER_MODES = ("equals", "contains")


class NoOpReason(str, Enum):
    """Why a directive or update was ignored instead of applied."""

    SCHEMA_EMPTY = "schema_empty"
    INVALID_SORT_TARGET = "invalid_sort_target"
    INVALID_REORDER_INDICES = "invalid_reorder_indices"
    PAGE_OUT_OF_RANGE = "page_out_of_range"


@dataclass(frozen=True)
class Field:
    """A remotely defined attribute of a record collection."""

    id: str
    name: str
    custom: bool = False
    orderable: bool = False
    navigable: bool = False

    @classmethod
    def from_json_obj(cls, obj: Mapping[str, Any]) -> "Field":
        # Remote payloads carry extra keys (searchable, clauseNames, schema); ignore them
        field_id = str(obj["id"])
        return cls(
            id=field_id,
            name=str(obj.get("name") or field_id),
            custom=bool(obj.get("custom", False)),
            orderable=bool(obj.get("orderable", False)),
            navigable=bool(obj.get("navigable", False)),
        )


@dataclass(frozen=True)
class Column:
    key: str
    title: str
    is_sortable: bool = True
    is_selected: bool = True


@dataclass(frozen=True)
class SortDirective:
    field: str
    direction: str = "asc"

    def __post_init__(self):
        if self.direction not in SORT_DIRECTIONS:
            raise ValueError(f"unknown sort direction: {self.direction!r}")

    @property
    def ascending(self) -> bool:
        return self.direction == "asc"

    def flipped(self) -> "SortDirective":
        return SortDirective(self.field, "desc" if self.ascending else "asc")


@dataclass(frozen=True)
class FilterDirective:
    """Equality or substring predicate against a single field.

    An empty or ``None`` value matches every record (the "All" choice of a
    filter dropdown).
    """

    field: str
    value: Any = None
    mode: str = "equals"

    def __post_init__(self):
        if self.mode not in FILTER_MODES:
            raise ValueError(f"unknown filter mode: {self.mode!r}")

    @property
    def is_empty(self) -> bool:
        return self.value is None or (isinstance(self.value, str) and self.value == "")


@dataclass(frozen=True)
class SearchDirective:
    """Free-text search across several fields (OR within, AND with filters)."""

    text: str = ""
    fields: Tuple[str, ...] = ()


@dataclass(frozen=True)
class RecordPage:
    items: Tuple[Any, ...] = ()
    page_index: int = 1
    page_size: int = 10
    total_count: int = 0

    @classmethod
    def from_records(cls, records: Sequence[Any], page_index: int, page_size: int) -> "RecordPage":
        """Slice an in-memory record list into a page.

        Used for collections the server hands over in full; ``total_count``
        is then the length of the list.
        """
        size = max(1, page_size)
        index = max(1, page_index)
        start = (index - 1) * size
        return cls(
            items=tuple(records[start : start + size]),
            page_index=index,
            page_size=size,
            total_count=len(records),
        )


@dataclass(frozen=True)
class PageState:
    current_page: int = 1
    page_size: int = 10
    total_pages: int = 0
    total_count: int = 0


@dataclass(frozen=True)
class FetchParams:
    page_index: int
    page_size: int
    sort: Optional[SortDirective] = None
    filters: Tuple[FilterDirective, ...] = ()

    @property
    def offset(self) -> int:
        return (self.page_index - 1) * self.page_size

    def to_query(self) -> Dict[str, Any]:
        """Flatten into query-string friendly primitives for the fetch layer."""
        query: Dict[str, Any] = {
            "page": self.page_index,
            "pageSize": self.page_size,
            "startAt": self.offset,
        }
        if self.sort is not None:
            query["sortField"] = self.sort.field
            query["sortDirection"] = self.sort.direction
        active: List[FilterDirective] = [f for f in self.filters if not f.is_empty]
        for flt in active:
            query[f"filter.{flt.field}"] = flt.value
        return query
