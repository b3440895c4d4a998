"""Cell renderer registry.

Maps a column key to a callable turning a record into its display value,
with a fallback renderer for keys nobody registered. Pages register the
handful of columns that need special treatment and let every other column
(including custom fields discovered at runtime) go through the fallback.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Callable, Dict, List, Optional

from datagrid import settings
from datagrid.services.view_compute import MISSING, value_at

__all__ = [
    "CellRenderer",
    "CellRendererRegistry",
    "text_renderer",
    "date_renderer",
    "default_renderer",
    "register_issue_renderers",
]

CellRenderer = Callable[[Any], Any]


def _blank(value: Any) -> bool:
    return value is None or value is MISSING or (isinstance(value, str) and not value.strip())


def text_renderer(path: str, default: str = settings.MISSING_DISPLAY) -> CellRenderer:
    def render(record: Any) -> Any:
        value = value_at(record, path)
        return default if _blank(value) else value

    return render


def date_renderer(path: str, default: str = "Unknown") -> CellRenderer:
    """Render the date part of an ISO timestamp (``2024-03-01T10:00:00.000+0000``)."""

    def render(record: Any) -> Any:
        value = value_at(record, path)
        if _blank(value):
            return default
        if isinstance(value, date):
            return value.isoformat()[:10]
        try:
            return date.fromisoformat(str(value)[:10]).isoformat()
        except ValueError:
            return str(value)

    return render


def default_renderer(key: str) -> CellRenderer:
    return text_renderer(key)


@dataclass
class CellRendererRegistry:
    fallback: Callable[[str], CellRenderer] = default_renderer
    _renderers: Dict[str, CellRenderer] = field(default_factory=dict)

    def register(self, key: str, renderer: CellRenderer, *, overwrite: bool = False) -> None:
        if (not overwrite) and key in self._renderers:
            raise ValueError(f"renderer already registered: {key}")
        self._renderers[key] = renderer

    def unregister(self, key: str) -> None:
        self._renderers.pop(key, None)

    def keys(self) -> List[str]:
        return sorted(self._renderers.keys())

    def get(self, key: str) -> Optional[CellRenderer]:
        return self._renderers.get(key)

    def render(self, key: str, record: Any) -> Any:
        renderer = self._renderers.get(key) or self.fallback(key)
        return renderer(record)


def _issue_field_fallback(key: str) -> CellRenderer:
    # Custom fields (customfield_10200, ...) live under "fields"
    def render(record: Any) -> Any:
        value = value_at(record, key)
        if value is MISSING:
            value = value_at(record, f"fields.{key}")
        return settings.MISSING_DISPLAY if _blank(value) else value

    return render


def _assignee(record: Any) -> Any:
    assignee = value_at(record, "fields.assignee")
    if _blank(assignee):
        return "Unassigned"
    name = value_at(assignee, "displayName")
    return "No name" if _blank(name) else name


def register_issue_renderers(registry: CellRendererRegistry | None = None) -> CellRendererRegistry:
    """Renderers for the issue collection; idempotent on repeated calls."""
    reg = registry or CellRendererRegistry(fallback=_issue_field_fallback)
    stock: Dict[str, CellRenderer] = {
        "key": text_renderer("key"),
        "summary": text_renderer("fields.summary", "No summary"),
        "issuetype": text_renderer("fields.issuetype.name", "Unknown"),
        "status": text_renderer("fields.status.name", "Unknown"),
        "priority": text_renderer("fields.priority.name", "Unknown"),
        "assignee": _assignee,
        "reporter": text_renderer("fields.reporter.displayName", "Unknown"),
        "project": text_renderer("fields.project.name", "Unknown"),
        "created": date_renderer("fields.created"),
        "updated": date_renderer("fields.updated"),
        # Interactive content is supplied by the view layer
        "actions": lambda record: "",
    }
    for key, renderer in stock.items():
        if reg.get(key) is None:
            reg.register(key, renderer)
    return reg
