"""Column layout persistence service.

Stores the order and visibility of one collection's columns as JSON
(``columns_<collection>.json`` inside ``base_dir``):

    {"version": 1, "columns": [{"key": "key", "selected": true}, ...]}

Only keys and selection are stored; titles and sortability come from the
next schema merge. Failures are non-fatal: a corrupt or version-mismatched
file is moved aside with a ``.corrupt.<timestamp>`` suffix and an empty
layout is returned.
"""

from __future__ import annotations

import json
import logging
import os
import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List

from datagrid import settings

__all__ = ["ColumnLayoutState", "ColumnLayoutPersistenceService"]

_logger = logging.getLogger(__name__)

_SANITIZE_PATTERN = re.compile(r"[^\w\s-]")
_WS_PATTERN = re.compile(r"[-\s]+")


def _sanitize(value: str) -> str:
    value = _SANITIZE_PATTERN.sub("", value).strip()
    return _WS_PATTERN.sub("_", value) or "default"


@dataclass
class ColumnLayoutState:
    columns: List[Dict[str, Any]] = field(default_factory=list)
    version: int = settings.LAYOUT_VERSION

    def to_json_obj(self) -> Dict[str, Any]:
        return {
            "version": self.version,
            "columns": [{"key": c["key"], "selected": bool(c.get("selected", True))} for c in self.columns],
        }

    @classmethod
    def from_json_obj(cls, obj: Dict[str, Any]) -> "ColumnLayoutState":
        if not isinstance(obj, dict) or obj.get("version") != settings.LAYOUT_VERSION:
            raise ValueError("version mismatch")
        raw = obj.get("columns")
        if not isinstance(raw, list):
            raise ValueError("columns must be a list")
        columns: List[Dict[str, Any]] = []
        seen = set()
        for entry in raw:
            if not isinstance(entry, dict):
                continue
            key = entry.get("key")
            if not isinstance(key, str) or not key or key in seen:
                continue
            seen.add(key)
            columns.append({"key": key, "selected": bool(entry.get("selected", True))})
        return cls(columns=columns, version=obj["version"])


class ColumnLayoutPersistenceService:
    def __init__(self, base_dir: str = settings.DATA_DIR):
        self.base_dir = base_dir

    def path_for(self, collection: str) -> str:
        return os.path.join(self.base_dir, f"columns_{_sanitize(collection)}.json")

    def load(self, collection: str) -> ColumnLayoutState:
        path = self.path_for(collection)
        if not os.path.exists(path):
            return ColumnLayoutState()
        try:
            with open(path, "r", encoding="utf-8") as f:
                obj = json.load(f)
            state = ColumnLayoutState.from_json_obj(obj)
        except (OSError, ValueError) as exc:
            _logger.warning("discarding column layout %s: %s", path, exc)
            self._backup(path)
            return ColumnLayoutState()
        _logger.info("restored %d column(s) for %s", len(state.columns), collection)
        return state

    def save(self, collection: str, state: ColumnLayoutState) -> bool:
        path = self.path_for(collection)
        try:
            os.makedirs(self.base_dir, exist_ok=True)
            with open(path, "w", encoding="utf-8") as f:
                json.dump(state.to_json_obj(), f, indent=2)
        except OSError as exc:
            _logger.warning("could not save column layout %s: %s", path, exc)
            return False
        _logger.info("saved %d column(s) for %s", len(state.columns), collection)
        return True

    def reset(self, collection: str) -> bool:
        path = self.path_for(collection)
        if not os.path.exists(path):
            return False
        try:
            os.remove(path)
            return True
        except OSError:
            return False

    def _backup(self, path: str) -> None:
        backup = path + f".corrupt.{datetime.now().strftime('%Y%m%d%H%M%S')}"
        try:
            os.replace(path, backup)
        except OSError as exc:  # pragma: no cover
            _logger.warning("could not move corrupt layout aside: %s", exc)
