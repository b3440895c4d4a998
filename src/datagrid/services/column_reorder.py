"""Column reordering over the visible subset.

Drag targets are computed against what the user sees (selected columns)
while the model stores every column including hidden ones. ``reorder``
translates a move between visible positions into a new full ordering in
which hidden columns keep their exact slots.

Also provided:
 - ``should_commit_hover``: midpoint hysteresis for continuous pointer drags
 - ``DragSession``: tracks the dragged column's current visible index across
   hover events
 - ``move_column``: keyboard-only fallback (left/right/first/last) returning
   a result object with a screen-reader friendly announcement

All helpers return new lists and never raise on bad indices.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from datagrid.models import Column, NoOpReason

__all__ = [
    "reorder",
    "should_commit_hover",
    "DragSession",
    "ReorderResult",
    "move_column",
    "interpret_key_command",
]

_logger = logging.getLogger(__name__)


def _valid(visible: Sequence[Column], index: int) -> bool:
    return 0 <= index < len(visible)


def reorder(full: Sequence[Column], drag_visible_index: int, hover_visible_index: int) -> List[Column]:
    visible = [c for c in full if c.is_selected]
    if not _valid(visible, drag_visible_index) or not _valid(visible, hover_visible_index):
        _logger.debug(
            "reorder ignored (%s): drag=%s hover=%s visible=%d",
            NoOpReason.INVALID_REORDER_INDICES.value,
            drag_visible_index,
            hover_visible_index,
            len(visible),
        )
        return list(full)
    if drag_visible_index == hover_visible_index:
        return list(full)
    moved = visible.pop(drag_visible_index)
    visible.insert(hover_visible_index, moved)
    # Refill selected slots in sequence; hidden columns stay put
    it = iter(visible)
    return [next(it) if col.is_selected else col for col in full]


def should_commit_hover(
    drag_index: int, hover_index: int, pointer_offset: float, extent: float
) -> bool:
    """Decide whether a hover over ``hover_index`` should commit a move.

    ``pointer_offset`` is the pointer position measured from the leading edge
    of the hovered header and ``extent`` its size along the drag axis. When
    moving forward the pointer must be past the midpoint, when moving
    backward before it. Exactly on the midpoint nothing is committed.
    """
    if drag_index == hover_index or extent <= 0:
        return False
    middle = extent / 2
    if drag_index < hover_index:
        return pointer_offset > middle
    return pointer_offset < middle


class DragSession:
    """Follow one drag gesture across successive hover events.

    The session keeps the dragged column's *key* and re-derives its visible
    index from the model on every hover, so a visibility toggle in the middle
    of a drag cannot leave it pointing at the wrong column. If the dragged
    column disappears from the visible subset the session cancels itself.
    """

    def __init__(self, columns: Sequence[Column], visible_index: int):
        visible = [c for c in columns if c.is_selected]
        self.key: Optional[str] = visible[visible_index].key if _valid(visible, visible_index) else None
        self.index = visible_index if self.key is not None else -1

    @property
    def active(self) -> bool:
        return self.key is not None

    def cancel(self) -> None:
        self.key = None
        self.index = -1

    def hover(
        self,
        columns: Sequence[Column],
        hover_index: int,
        pointer_offset: float,
        extent: float,
    ) -> Tuple[List[Column], bool]:
        """Return ``(columns, moved)`` after a hover event."""
        if self.key is None:
            return list(columns), False
        visible_keys = [c.key for c in columns if c.is_selected]
        if self.key not in visible_keys:
            self.cancel()
            return list(columns), False
        self.index = visible_keys.index(self.key)
        if not should_commit_hover(self.index, hover_index, pointer_offset, extent):
            return list(columns), False
        result = reorder(columns, self.index, hover_index)
        moved = result != list(columns)
        if moved:
            self.index = hover_index
        return result, moved


# Keyboard fallback -------------------------------------------------------


@dataclass(frozen=True)
class ReorderResult:
    columns: Tuple[Column, ...]
    changed: bool
    focus_index: int
    announcement: str


def interpret_key_command(command: str) -> str:
    """Map a key command to one of: left, right, first, last ("" if unknown)."""
    cmd = command.lower()
    if cmd in {"left", "arrowleft", "up", "arrowup"}:
        return "left"
    if cmd in {"right", "arrowright", "down", "arrowdown"}:
        return "right"
    if cmd in {"home", "ctrl+home", "first", "top"}:
        return "first"
    if cmd in {"end", "ctrl+end", "last", "bottom"}:
        return "last"
    return ""


def move_column(full: Sequence[Column], visible_index: int, command: str) -> ReorderResult:
    visible = [c for c in full if c.is_selected]
    verb = interpret_key_command(command)
    if not verb or not _valid(visible, visible_index):
        return ReorderResult(tuple(full), False, visible_index, "No change")
    last = len(visible) - 1
    target = {
        "left": visible_index - 1,
        "right": visible_index + 1,
        "first": 0,
        "last": last,
    }[verb]
    target = max(0, min(last, target))
    if target == visible_index:
        return ReorderResult(tuple(full), False, visible_index, "No change")
    result = reorder(full, visible_index, target)
    title = visible[visible_index].title
    announcement = f"Moved column {title} from {visible_index + 1} to {target + 1} ({verb})."
    return ReorderResult(tuple(result), True, target, announcement)
