"""Qt table model over a ``GridViewModel``.

Exposes visible columns as horizontal headers and the view model's computed
rows as table rows. Header clicks (``sort``) and header drags
(``moveColumn``) are routed back into the view model; any change announced
on the view model's bus resets the model so attached views repaint.
"""

from __future__ import annotations

from typing import Any, List

from PyQt6.QtCore import QAbstractTableModel, QModelIndex, Qt

from datagrid.models import SortDirective
from datagrid.services.event_bus import Event, GridEvent, Subscription
from datagrid.viewmodels.grid_viewmodel import GridViewModel

__all__ = ["GridTableModel"]

_RESET_EVENTS = (
    GridEvent.COLUMNS_CHANGED,
    GridEvent.SORT_CHANGED,
    GridEvent.FILTERS_CHANGED,
    GridEvent.RECORDS_UPDATED,
)


class GridTableModel(QAbstractTableModel):
    def __init__(self, viewmodel: GridViewModel, parent=None):
        super().__init__(parent)
        self._vm = viewmodel
        self._rows: List[Any] = viewmodel.rows()
        self._subs: List[Subscription] = [
            viewmodel.bus.subscribe(evt, self._on_grid_event) for evt in _RESET_EVENTS
        ]

    @property
    def viewmodel(self) -> GridViewModel:
        return self._vm

    def detach(self) -> None:
        for sub in self._subs:
            self._vm.bus.unsubscribe(sub)
        self._subs = []

    # Required overrides
    def rowCount(self, parent: QModelIndex = QModelIndex()):  # type: ignore[override]
        if parent.isValid():
            return 0
        return len(self._rows)

    def columnCount(self, parent: QModelIndex = QModelIndex()):  # type: ignore[override]
        if parent.isValid():
            return 0
        return len(self._vm.headers())

    def data(self, index: QModelIndex, role: int = Qt.ItemDataRole.DisplayRole):  # type: ignore[override]
        if not index.isValid() or index.row() >= len(self._rows):
            return None
        headers = self._vm.headers()
        if index.column() >= len(headers):
            return None
        record = self._rows[index.row()]
        if role == Qt.ItemDataRole.DisplayRole:
            value = self._vm.cell(record, headers[index.column()].key)
            return value if isinstance(value, str) else str(value)
        if role == Qt.ItemDataRole.UserRole:
            return record
        return None

    def headerData(self, section: int, orientation: Qt.Orientation, role: int = Qt.ItemDataRole.DisplayRole):  # type: ignore[override]
        if orientation != Qt.Orientation.Horizontal:
            return None
        headers = self._vm.headers()
        if not 0 <= section < len(headers):
            return None
        if role == Qt.ItemDataRole.DisplayRole:
            return headers[section].title
        if role == Qt.ItemDataRole.UserRole:
            return headers[section].key
        return None

    def flags(self, index: QModelIndex):  # type: ignore[override]
        if not index.isValid():
            return Qt.ItemFlag.NoItemFlags
        return Qt.ItemFlag.ItemIsEnabled | Qt.ItemFlag.ItemIsSelectable

    def sort(self, column: int, order: Qt.SortOrder = Qt.SortOrder.AscendingOrder):  # type: ignore[override]
        headers = self._vm.headers()
        if not 0 <= column < len(headers):
            return
        key = headers[column].key
        if not headers[column].is_sortable:
            self._vm.request_sort(key)  # announces the ignored directive
            return
        direction = "asc" if order == Qt.SortOrder.AscendingOrder else "desc"
        self._vm.set_sort(SortDirective(key, direction))

    def moveColumn(self, sourceParent: QModelIndex, sourceColumn: int, destinationParent: QModelIndex, destinationChild: int) -> bool:  # type: ignore[override]
        # Qt counts destinationChild before removal; the view model takes the post-removal index
        dest = destinationChild - 1 if destinationChild > sourceColumn else destinationChild
        if dest == sourceColumn:
            return False
        return self._vm.move_column(sourceColumn, dest)

    # Internal -----------------------------------------------------
    def _on_grid_event(self, _event: Event) -> None:
        self.beginResetModel()
        self._rows = self._vm.rows()
        self.endResetModel()
