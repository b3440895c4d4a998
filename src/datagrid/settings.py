"""Global configuration and constants for the data grid core."""

from __future__ import annotations

import os
from typing import Final, Tuple


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError:
        return default
    return value if value >= 1 else default


DATA_DIR: Final = os.environ.get("DATAGRID_DATA_DIR", "data")

# Offered in the "Per page" selector of the pagination control
PAGE_SIZE_OPTIONS: Final[Tuple[int, ...]] = (5, 10, 15, 20, 50)
DEFAULT_PAGE_SIZE: Final = _env_int("DATAGRID_PAGE_SIZE", 10)
MAX_VISIBLE_PAGES: Final = 5

LAYOUT_VERSION: Final = 1  # increment when the persisted column layout changes shape
MISSING_DISPLAY: Final = "N/A"
