"""Configurable data grid core public API.

Curated, intentionally small surface for page glue: the view model, the
value objects it speaks, and the event channel. Deeper helpers stay
reachable through ``datagrid.services``. The Qt adapter lives in
``datagrid.qt`` and is not imported here so headless callers never load Qt.
"""

from __future__ import annotations

from .models import (  # noqa: F401
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
from .services.event_bus import Event, EventBus, GridEvent  # noqa: F401
from .viewmodels.grid_viewmodel import GridSummary, GridViewModel  # noqa: F401
