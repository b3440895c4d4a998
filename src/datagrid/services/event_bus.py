"""View-scoped event channel.

Lightweight synchronous publish/subscribe used by one grid view to tell its
own UI glue that something changed (columns merged, page reconciled, a
refresh is wanted). Each view owns its bus; nothing is broadcast globally.

Goals:
 - No Qt dependency
 - One failing handler doesn't break the publish cycle (errors collected)
 - One-shot (once) subscriptions and unsubscribe handles
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from threading import RLock
from time import perf_counter
from typing import Any, Dict, List, Protocol, Tuple

__all__ = [
    "GridEvent",
    "Event",
    "EventBus",
    "EventHandler",
    "Subscription",
]


class GridEvent(str, Enum):
    SCHEMA_MERGED = "schema_merged"
    COLUMNS_CHANGED = "columns_changed"
    SORT_CHANGED = "sort_changed"
    FILTERS_CHANGED = "filters_changed"
    RECORDS_UPDATED = "records_updated"
    PAGE_CHANGED = "page_changed"
    REFRESH_REQUESTED = "refresh_requested"
    DIRECTIVE_IGNORED = "directive_ignored"


@dataclass
class Event:
    name: str  # GridEvent value or custom string
    payload: Any
    timestamp: float


class EventHandler(Protocol):  # noqa: D401 - protocol signature docs implicit
    def __call__(self, event: Event) -> None: ...  # pragma: no cover - structural


@dataclass
class Subscription:
    event: str
    handler: EventHandler
    once: bool
    active: bool = True

    def cancel(self) -> None:
        self.active = False


def _key(name: str | GridEvent) -> str:
    return name.value if isinstance(name, GridEvent) else name


class EventBus:
    """Synchronous event dispatcher.

    Handlers run on the publishing thread with the lock released (subscriber
    list is snapshotted first), so handlers may subscribe or unsubscribe
    without deadlocking.
    """

    def __init__(self) -> None:
        self._lock = RLock()
        self._subs: Dict[str, List[Subscription]] = {}
        self._errors: List[Tuple[Event, BaseException]] = []

    # Subscription management ---------------------------------------------
    def subscribe(
        self, name: str | GridEvent, handler: EventHandler, *, once: bool = False
    ) -> Subscription:
        sub = Subscription(event=_key(name), handler=handler, once=once)
        with self._lock:
            self._subs.setdefault(sub.event, []).append(sub)
        return sub

    def unsubscribe(self, sub: Subscription) -> None:
        with self._lock:
            bucket = self._subs.get(sub.event)
            if bucket:
                self._subs[sub.event] = [s for s in bucket if s is not sub]
                if not self._subs[sub.event]:
                    self._subs.pop(sub.event, None)
        sub.active = False

    def clear(self) -> None:
        with self._lock:
            self._subs.clear()
            self._errors.clear()

    # Publishing ----------------------------------------------------------
    def publish(self, name: str | GridEvent, payload: Any = None) -> Event:
        key = _key(name)
        evt = Event(name=key, payload=payload, timestamp=perf_counter())
        with self._lock:
            subs = list(self._subs.get(key, ()))
        finished: List[Subscription] = []
        for sub in subs:
            if not sub.active:
                continue
            try:
                sub.handler(evt)
            except Exception as exc:  # noqa: BLE001 - isolate handler failures
                with self._lock:
                    self._errors.append((evt, exc))
            else:
                if sub.once:
                    finished.append(sub)
        for sub in finished:
            self.unsubscribe(sub)
        return evt

    # Introspection -------------------------------------------------------
    def subscriber_count(self, name: str | GridEvent) -> int:
        with self._lock:
            return len(self._subs.get(_key(name), ()))

    @property
    def errors(self) -> List[Tuple[Event, BaseException]]:
        with self._lock:
            return list(self._errors)
