"""Headless grid services: column merge, reorder, view compute, paging."""

from .column_model import ColumnModel, merge  # noqa: F401
from .column_reorder import DragSession, move_column, reorder, should_commit_hover  # noqa: F401
from .page_cursor import PageCursor  # noqa: F401
from .view_compute import FilterSet, compute, next_sort  # noqa: F401
