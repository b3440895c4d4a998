"""Column model and schema merge.

The column model is the single ordered list of columns for one collection
view. Visible headers are read straight off it (selected columns in model
order); there is no second "visible order" structure to keep in sync.

Schema merge rules:
 - Navigable fields update the title / sortability of an existing column of
   the same key but never its selection.
 - Unknown navigable fields are appended in schema order, selected.
 - Columns without a backing field (e.g. ``actions``) stay where they are.
 - An empty or missing schema leaves the model untouched so a failed fetch
   never blanks the grid.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Dict, Iterable, List, Optional, Sequence, Set, Tuple

from datagrid.models import Column, Field, NoOpReason
from datagrid.services.column_reorder import reorder

__all__ = ["merge", "ColumnModel"]

_logger = logging.getLogger(__name__)


def merge(existing: Sequence[Column], incoming_fields: Optional[Sequence[Field]]) -> List[Column]:
    """Merge a freshly fetched field schema into an existing column list.

    Returns a new list; ``existing`` is not modified. Duplicate keys in
    ``existing`` collapse to their first occurrence. Applying the same
    schema twice yields the same result as applying it once.
    """
    result: List[Column] = _dedupe(existing)
    if not incoming_fields:
        _logger.debug("schema merge skipped (%s)", NoOpReason.SCHEMA_EMPTY.value)
        return result

    position: Dict[str, int] = {}
    for i, col in enumerate(result):
        position.setdefault(col.key, i)

    appended: List[Column] = []
    seen: Set[str] = set()
    for fld in incoming_fields:
        if not fld.navigable or fld.id in seen:
            continue
        seen.add(fld.id)
        idx = position.get(fld.id)
        if idx is not None:
            current = result[idx]
            result[idx] = replace(current, title=fld.name, is_sortable=fld.orderable)
        else:
            appended.append(
                Column(
                    key=fld.id,
                    title=fld.name,
                    is_sortable=fld.orderable,
                    is_selected=fld.navigable,
                )
            )
    if appended:
        _logger.debug("schema merge appended %d new column(s)", len(appended))
    return result + appended


def _dedupe(columns: Iterable[Column]) -> List[Column]:
    out: List[Column] = []
    seen: Set[str] = set()
    for col in columns:
        if col.key in seen:
            continue
        seen.add(col.key)
        out.append(col)
    return out


class ColumnModel:
    """Mutable owner of one view's column list.

    Every operation replaces the internal list wholesale; the tuples handed
    out by :attr:`columns` are never mutated afterwards.
    """

    def __init__(self, defaults: Iterable[Column] = ()):
        self._defaults: Tuple[Column, ...] = tuple(_dedupe(defaults))
        self._columns: List[Column] = list(self._defaults)
        self._known_field_ids: Set[str] = set()

    # Read access -------------------------------------------------------
    @property
    def columns(self) -> Tuple[Column, ...]:
        return tuple(self._columns)

    @property
    def defaults(self) -> Tuple[Column, ...]:
        return self._defaults

    def keys(self) -> List[str]:
        return [c.key for c in self._columns]

    def visible(self) -> List[Column]:
        return [c for c in self._columns if c.is_selected]

    def get(self, key: str) -> Column | None:
        for col in self._columns:
            if col.key == key:
                return col
        return None

    def is_local(self, key: str) -> bool:
        """True when no schema merged so far has described ``key``."""
        return key not in self._known_field_ids

    def search(self, term: str) -> List[Column]:
        """Columns whose title or key contains ``term`` (case-insensitive)."""
        needle = term.strip().lower()
        if not needle:
            return list(self._columns)
        return [c for c in self._columns if needle in c.title.lower() or needle in c.key.lower()]

    def __len__(self) -> int:  # pragma: no cover - trivial
        return len(self._columns)

    def __iter__(self):  # pragma: no cover - trivial
        return iter(tuple(self._columns))

    # Schema ------------------------------------------------------------
    def merge_schema(self, fields: Optional[Sequence[Field]]) -> bool:
        """Merge a schema; returns True when the column list changed."""
        if fields:
            self._known_field_ids.update(f.id for f in fields)
        merged = merge(self._columns, fields)
        changed = merged != self._columns
        self._columns = merged
        return changed

    # Visibility --------------------------------------------------------
    def set_selected(self, key: str, flag: bool) -> bool:
        for i, col in enumerate(self._columns):
            if col.key == key:
                if col.is_selected == flag:
                    return False
                self._columns[i] = replace(col, is_selected=flag)
                return True
        return False

    def toggle(self, key: str) -> bool:
        col = self.get(key)
        if col is None:
            return False
        return self.set_selected(key, not col.is_selected)

    def select_all(self) -> bool:
        return self._set_all(True)

    def deselect_all(self) -> bool:
        return self._set_all(False)

    def _set_all(self, flag: bool) -> bool:
        updated = [c if c.is_selected == flag else replace(c, is_selected=flag) for c in self._columns]
        changed = updated != self._columns
        self._columns = updated
        return changed

    def reset(self) -> None:
        """Restore the construction defaults (order and visibility)."""
        self._columns = list(self._defaults)

    # Ordering ----------------------------------------------------------
    def reorder(self, drag_visible_index: int, hover_visible_index: int) -> bool:
        result = reorder(self._columns, drag_visible_index, hover_visible_index)
        changed = result != self._columns
        self._columns = result
        return changed

    def replace_columns(self, columns: Iterable[Column]) -> None:
        self._columns = _dedupe(columns)

    # Layout (persistence shape) ----------------------------------------
    def to_layout(self) -> List[Dict[str, object]]:
        return [{"key": c.key, "selected": c.is_selected} for c in self._columns]

    def apply_layout(self, layout: Iterable[Dict[str, object]]) -> None:
        """Apply a saved ``{key, selected}`` sequence onto the current columns.

        Saved keys come first in saved order with their saved selection;
        saved keys the model does not know yet become placeholder columns
        (title = key, not sortable) for a later schema merge to fill in.
        Current columns missing from the layout keep their relative order
        after the saved ones.
        """
        current = {c.key: c for c in self._columns}
        restored: List[Column] = []
        seen: Set[str] = set()
        for entry in layout:
            key = entry.get("key")
            if not isinstance(key, str) or not key or key in seen:
                continue
            seen.add(key)
            selected = bool(entry.get("selected", True))
            base = current.get(key)
            if base is None:
                restored.append(Column(key=key, title=key, is_sortable=False, is_selected=selected))
            else:
                restored.append(replace(base, is_selected=selected))
        restored.extend(c for c in self._columns if c.key not in seen)
        self._columns = restored
