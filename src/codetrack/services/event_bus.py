"""Application event bus.

Synchronous publish/subscribe channel for app-wide notifications that are not
state fields: status messages, "summary list attached to the visible tree",
splitter preference changes and lifecycle milestones.

State changes do NOT travel through here; they are delivered by the
ApplicationState store. The bus only carries one-shot signals.

Handler failures are isolated: one failing handler does not stop the publish
cycle, the error is recorded in ``errors`` and logged.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from time import perf_counter
from typing import Any, Dict, List, Protocol

__all__ = [
    "AppEvent",
    "Event",
    "EventBus",
    "EventHandler",
    "Subscription",
]

_log = logging.getLogger(__name__)


class AppEvent(str, Enum):  # str subclass keeps payload logging readable
    STATUS_MESSAGE = "status_message"
    SUMMARY_ATTACHED = "summary_attached"
    FILTER_APPLIED = "filter_applied"
    SESSION_RESTORED = "session_restored"
    STARTUP_COMPLETE = "startup_complete"
    STARTUP_FAILED = "startup_failed"
    SESSION_SAVED = "session_saved"


@dataclass
class Event:
    name: str
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


class EventBus:
    """Synchronous event dispatcher.

    Handlers run in subscription order on the publishing call stack. The
    subscriber list is snapshotted before dispatch so handlers can subscribe
    or cancel while a publish is in progress.
    """

    def __init__(self) -> None:
        self._subs: Dict[str, List[Subscription]] = {}
        self._errors: List[tuple[Event, BaseException]] = []

    # ------------------------------------------------------------------
    # Subscription management
    # ------------------------------------------------------------------
    def subscribe(
        self, name: str | AppEvent, handler: EventHandler, *, once: bool = False
    ) -> Subscription:
        key = name.value if isinstance(name, AppEvent) else name
        sub = Subscription(event=key, handler=handler, once=once)
        self._subs.setdefault(key, []).append(sub)
        return sub

    def unsubscribe(self, sub: Subscription) -> None:
        bucket = self._subs.get(sub.event)
        if bucket and sub in bucket:
            bucket.remove(sub)
            if not bucket:
                self._subs.pop(sub.event, None)
        sub.active = False

    def clear(self) -> None:
        self._subs.clear()
        self._errors.clear()

    # ------------------------------------------------------------------
    # Publishing
    # ------------------------------------------------------------------
    def publish(self, name: str | AppEvent, payload: Any = None) -> Event:
        key = name.value if isinstance(name, AppEvent) else name
        evt = Event(name=key, payload=payload, timestamp=perf_counter())
        subs = list(self._subs.get(key, ()))
        finished_once: List[Subscription] = []
        for sub in subs:
            if not sub.active:
                continue
            if sub.once:
                sub.active = False
                finished_once.append(sub)
            try:
                sub.handler(evt)
            except Exception as exc:  # noqa: BLE001 - isolate handler failure
                _log.exception("Event handler for %s failed", key)
                self._errors.append((evt, exc))
        for sub in finished_once:
            self.unsubscribe(sub)
        return evt

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------
    def subscriber_count(self, name: str | AppEvent) -> int:
        key = name.value if isinstance(name, AppEvent) else name
        return len(self._subs.get(key, ()))

    def list_events(self) -> list[str]:
        return list(self._subs.keys())

    @property
    def errors(self) -> list[tuple[Event, BaseException]]:
        return list(self._errors)
