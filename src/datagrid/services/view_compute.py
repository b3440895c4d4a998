"""Filtered and sorted views over an in-memory record set.

``compute`` applies every filter (AND), an optional free-text search and at
most one sort directive, and returns a new list. Sorting is stable in both
directions: Python's ``sorted(..., reverse=True)`` keeps equal elements in
input order, so descending reverses the comparator and not the input.

Ordering for mixed-type columns (ascending; descending is the mirror):
 1. missing, ``None`` or blank values
 2. numbers (int / float / bool and strings parsing as a finite float),
    compared numerically
 3. all other values, compared by a locale-aware key: accents stripped and
    case folded, the raw text breaking ties

Stale directives degrade instead of failing: a sort on an unknown or
non-sortable column, or on a field no record carries, leaves the filtered
list in input order.
"""

from __future__ import annotations

import logging
import math
import unicodedata
from typing import (
    Any,
    Callable,
    Dict,
    Iterable,
    Iterator,
    List,
    Mapping,
    Optional,
    Sequence,
    Tuple,
)

from datagrid.models import Column, FilterDirective, NoOpReason, SearchDirective, SortDirective

__all__ = [
    "MISSING",
    "Accessor",
    "value_at",
    "sort_key",
    "matches_filter",
    "matches_search",
    "FilterSet",
    "next_sort",
    "compute",
]

_logger = logging.getLogger(__name__)

Accessor = Callable[[Any], Any]


class _Missing:
    def __repr__(self) -> str:  # pragma: no cover - debug aid
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING: Any = _Missing()


def value_at(record: Any, key: str, accessors: Mapping[str, Accessor] | None = None) -> Any:
    """Resolve ``key`` on a record.

    Lookup order: an explicit accessor for the key, a direct mapping key,
    then a dotted path through nested mappings / attributes
    (``fields.status.name``). Returns ``MISSING`` when nothing resolves.
    """
    if accessors and key in accessors:
        return accessors[key](record)
    if isinstance(record, Mapping) and key in record:
        return record[key]
    current = record
    for part in key.split("."):
        if current is None:
            return MISSING
        if isinstance(current, Mapping):
            if part not in current:
                return MISSING
            current = current[part]
        elif hasattr(current, part):
            current = getattr(current, part)
        else:
            return MISSING
    return current


def _is_blank(value: Any) -> bool:
    return value is None or value is MISSING or (isinstance(value, str) and not value.strip())


def _parse_number(text: str) -> float | None:
    try:
        num = float(text)
    except ValueError:
        return None
    return num if math.isfinite(num) else None


def _collate(text: str) -> str:
    decomposed = unicodedata.normalize("NFKD", text)
    return "".join(c for c in decomposed if not unicodedata.combining(c)).casefold()


def sort_key(value: Any) -> Tuple[int, float, str, str]:
    if _is_blank(value):
        return (0, 0.0, "", "")
    if isinstance(value, (bool, int)):
        return (1, value, "", "")  # type: ignore[return-value]
    if isinstance(value, float) and math.isfinite(value):
        return (1, value, "", "")
    text = value if isinstance(value, str) else str(value)
    num = _parse_number(text.strip())
    if num is not None:
        return (1, num, "", "")
    return (2, 0.0, _collate(text), text)


def _text(value: Any) -> str:
    return value if isinstance(value, str) else str(value)


def matches_filter(record: Any, flt: FilterDirective, accessors: Mapping[str, Accessor] | None = None) -> bool:
    if flt.is_empty:
        return True
    value = value_at(record, flt.field, accessors)
    if value is None or value is MISSING:
        return False
    if flt.mode == "equals":
        return _text(value) == _text(flt.value)
    return _text(flt.value).lower() in _text(value).lower()


def matches_search(record: Any, search: SearchDirective, accessors: Mapping[str, Accessor] | None = None) -> bool:
    needle = search.text.strip().lower()
    if not needle or not search.fields:
        return True
    for key in search.fields:
        value = value_at(record, key, accessors)
        if value is None or value is MISSING:
            continue
        if needle in _text(value).lower():
            return True
    return False


class FilterSet:
    """Filters keyed by field; adding a second directive for a field replaces it."""

    def __init__(self, directives: Iterable[FilterDirective] = ()):
        self._by_field: Dict[str, FilterDirective] = {}
        for d in directives:
            self.add(d)

    def add(self, directive: FilterDirective) -> None:
        # Replacement keeps the field's original position
        self._by_field[directive.field] = directive

    def remove(self, field: str) -> bool:
        return self._by_field.pop(field, None) is not None

    def clear(self) -> None:
        self._by_field.clear()

    def get(self, field: str) -> FilterDirective | None:
        return self._by_field.get(field)

    def directives(self) -> Tuple[FilterDirective, ...]:
        return tuple(self._by_field.values())

    def active(self) -> Tuple[FilterDirective, ...]:
        return tuple(d for d in self._by_field.values() if not d.is_empty)

    def __iter__(self) -> Iterator[FilterDirective]:
        return iter(self.directives())

    def __len__(self) -> int:
        return len(self._by_field)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FilterSet):
            return NotImplemented
        return self.directives() == other.directives()


def next_sort(current: Optional[SortDirective], key: str) -> SortDirective:
    """Header click: same key toggles asc/desc, a new key starts ascending."""
    if current is not None and current.field == key:
        return current.flipped()
    return SortDirective(key, "asc")


def _sortable(sort: SortDirective, columns: Sequence[Column] | None) -> bool:
    if columns is None:
        return True
    for col in columns:
        if col.key == sort.field:
            return col.is_sortable
    return False


def compute(
    records: Iterable[Any],
    sort: Optional[SortDirective] = None,
    filters: Iterable[FilterDirective] = (),
    *,
    columns: Sequence[Column] | None = None,
    search: Optional[SearchDirective] = None,
    accessors: Mapping[str, Accessor] | None = None,
) -> List[Any]:
    """Return the filtered (and possibly sorted) records.

    ``columns`` is the column model used to validate the sort target; when
    omitted every field is considered sortable.
    """
    active = [f for f in filters if not f.is_empty]
    result: List[Any] = []
    for record in records:
        if not all(matches_filter(record, f, accessors) for f in active):
            continue
        if search is not None and not matches_search(record, search, accessors):
            continue
        result.append(record)

    if sort is None:
        return result
    if not _sortable(sort, columns):
        _logger.debug("sort on %r ignored (%s)", sort.field, NoOpReason.INVALID_SORT_TARGET.value)
        return result
    values = [value_at(r, sort.field, accessors) for r in result]
    if result and all(v is MISSING for v in values):
        _logger.debug(
            "sort on %r ignored (%s): field absent from records",
            sort.field,
            NoOpReason.INVALID_SORT_TARGET.value,
        )
        return result
    order = sorted(range(len(result)), key=lambda i: sort_key(values[i]), reverse=not sort.ascending)
    return [result[i] for i in order]
