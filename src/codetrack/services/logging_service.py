"""Diagnostics logging driven by the ``show_diagnostics`` preference.

The preference lives in ApplicationState like every other field; this service
subscribes to it and flips the ``codetrack`` logger between DEBUG (diagnostics
on, records captured into a ring buffer) and WARNING (diagnostics off). Code
that wants a fast-path check asks the logger (``isEnabledFor(DEBUG)``) rather
than a mirrored global flag.
"""

from __future__ import annotations

import json
import logging
from collections import deque
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Deque, List, Optional

from codetrack.state.application_state import ApplicationState
from codetrack.state.observable import FieldChange, Subscription

__all__ = ["LogEntry", "DiagnosticsLoggingService", "ROOT_LOGGER_NAME"]

ROOT_LOGGER_NAME = "codetrack"


@dataclass(frozen=True)
class LogEntry:
    level: str
    name: str
    message: str
    created: float
    lineno: int


class _RingBufferHandler(logging.Handler):
    def __init__(self, svc: "DiagnosticsLoggingService") -> None:
        super().__init__(level=logging.DEBUG)
        self._svc = svc

    def emit(self, record: logging.LogRecord) -> None:  # noqa: D401
        self._svc._ingest_record(record)


class DiagnosticsLoggingService:
    def __init__(self, state: ApplicationState, capacity: int = 500) -> None:
        self._state = state
        self._entries: Deque[LogEntry] = deque(maxlen=capacity)
        self._handler = _RingBufferHandler(self)
        self._logger = logging.getLogger(ROOT_LOGGER_NAME)
        self._subscription: Subscription | None = None

    # Lifecycle --------------------------------------------------------
    def attach(self) -> None:
        """Start following the preference (idempotent)."""
        if self._subscription is not None:
            return
        self._subscription = self._state.on_change("show_diagnostics", self._on_preference)
        self._apply(self._state.show_diagnostics)

    def detach(self) -> None:
        if self._subscription is not None:
            self._subscription.cancel()
            self._subscription = None
        self._logger.removeHandler(self._handler)

    @property
    def enabled(self) -> bool:
        return self._logger.isEnabledFor(logging.DEBUG)

    def _on_preference(self, change: FieldChange) -> None:
        self._apply(bool(change.value))

    def _apply(self, enabled: bool) -> None:
        if enabled:
            self._logger.setLevel(logging.DEBUG)
            if self._handler not in self._logger.handlers:
                self._logger.addHandler(self._handler)
            self._logger.debug("diagnostics enabled")
        else:
            self._logger.setLevel(logging.WARNING)
            self._logger.removeHandler(self._handler)

    # Internal ingestion -----------------------------------------------
    def _ingest_record(self, record: logging.LogRecord) -> None:
        self._entries.append(
            LogEntry(
                level=record.levelname,
                name=record.name,
                message=record.getMessage(),
                created=record.created,
                lineno=record.lineno,
            )
        )

    # Query ------------------------------------------------------------
    def recent(self, limit: Optional[int] = None) -> List[LogEntry]:
        data = list(self._entries)
        return data[-limit:] if limit is not None else data

    def clear(self) -> None:
        self._entries.clear()

    def export_jsonl(self, path: str | Path) -> int:
        """Write captured entries as JSON lines; returns the number written."""
        entries = self.recent()
        with open(path, "w", encoding="utf-8") as f:
            for e in entries:
                f.write(json.dumps(asdict(e), sort_keys=True) + "\n")
        return len(entries)
