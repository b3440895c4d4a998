"""PyQt6 adapters for the grid view model."""

from .grid_table_model import GridTableModel  # noqa: F401
