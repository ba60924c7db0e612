"""Application bootstrap for CodeTrack.

Responsibilities:
 - Optional headless bootstrap (tests / environments without a display)
 - Safe mode flag (skips restoring the previous session)
 - Creating the shared objects (state, event bus, preference store, item
   collection, router, diagnostics logging) and registering them as services
 - Single-instance guard so two processes never write the same store

Qt is not imported at module import time; headless bootstrap works without a
display and without creating a QApplication.
"""

from __future__ import annotations

import os
import sys
import tempfile
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Iterator, Optional

import psutil

from codetrack.config import settings
from codetrack.models import CodeTrackCollection
from codetrack.routing import Router
from codetrack.services.event_bus import EventBus
from codetrack.services.logging_service import DiagnosticsLoggingService
from codetrack.services.service_locator import ServiceLocator, services
from codetrack.state.application_state import ApplicationState, reset_application_state
from .preference_store import JsonPreferenceStore, MemoryPreferenceStore, PreferenceStore

try:  # Lazy / optional Qt import
    from PyQt6.QtWidgets import QApplication  # type: ignore

    _QT_AVAILABLE = True
except ImportError:  # pragma: no cover - depends on environment
    QApplication = None  # type: ignore
    _QT_AVAILABLE = False


@dataclass
class AppContext:
    """References created during bootstrap.

    Attributes
    ----------
    qt_app: The QApplication instance (None when headless)
    headless: Whether headless bootstrap was used
    safe_mode: Whether the previous session is left unrestored
    data_dir: Directory holding the preference store and item file
    state: Process-wide application state
    bus: Application event bus
    store: Persisted preference store
    collection: Tracked item collection
    router: Fragment router
    diagnostics: Diagnostics logging service (attached)
    services: Service locator after registration
    metadata: Free-form startup details
    """

    qt_app: Optional[Any]
    headless: bool
    safe_mode: bool
    data_dir: Path
    state: ApplicationState
    bus: EventBus
    store: PreferenceStore
    collection: CodeTrackCollection
    router: Router
    diagnostics: DiagnosticsLoggingService
    services: ServiceLocator
    metadata: dict[str, Any] = field(default_factory=dict)


def parse_safe_mode(argv: list[str] | None = None) -> bool:
    """Parse a `--safe-mode` flag from argv (non-destructive)."""
    args = argv if argv is not None else sys.argv[1:]
    return "--safe-mode" in args


def create_app(
    *,
    safe_mode: bool | None = None,
    headless: bool | None = None,
    data_dir: str | Path | None = None,
    store: PreferenceStore | None = None,
    scheduler: Callable[[Callable[[], None]], None] | None = None,
) -> AppContext:
    """Create the application context.

    Parameters
    ----------
    safe_mode: Explicit safe mode override. If None, inferred from argv.
    headless: Force headless (no QApplication). If None, inferred by Qt availability.
    data_dir: Data directory; defaults to ``settings.DATA_DIR``.
    store: Preference store override; headless default is an in-memory store.
    scheduler: Runs deferred work (item load, seed creation); default runs inline.
    """
    if safe_mode is None:
        safe_mode = parse_safe_mode()
    if headless is None:
        headless = not _QT_AVAILABLE
    base = Path(data_dir) if data_dir else Path(settings.DATA_DIR)

    qt_app = None
    if not headless and _QT_AVAILABLE:
        qt_app = QApplication.instance() or QApplication(sys.argv[:1])

    if store is None:
        store = MemoryPreferenceStore() if headless and data_dir is None else JsonPreferenceStore(base)

    state = reset_application_state()
    bus = EventBus()
    collection = CodeTrackCollection(base_dir=None if headless and data_dir is None else base)
    if scheduler is not None:
        collection.scheduler = scheduler
    router = Router(state)
    diagnostics = DiagnosticsLoggingService(state)
    diagnostics.attach()

    # Each bootstrap gets fresh instances (test isolation)
    for name, value in [
        ("app_state", state),
        ("event_bus", bus),
        ("preference_store", store),
        ("collection", collection),
        ("router", router),
        ("diagnostics", diagnostics),
        ("safe_mode", safe_mode),
    ]:
        services.register(name, value, allow_override=True)

    return AppContext(
        qt_app=qt_app,
        headless=headless,
        safe_mode=safe_mode,
        data_dir=base,
        state=state,
        bus=bus,
        store=store,
        collection=collection,
        router=router,
        diagnostics=diagnostics,
        services=services,
        metadata={"qt_available": _QT_AVAILABLE},
    )


# --------------------------------------------------------------------------------------
# Single-instance guard (file lock) utilities
# --------------------------------------------------------------------------------------

_LOCK_FD: int | None = None
_LOCK_PATH: str | None = None


def _default_lock_path(name: str = settings.LOCK_NAME) -> str:
    return os.path.join(tempfile.gettempdir(), name)


def _pid_alive(pid: int) -> bool:
    return psutil.pid_exists(pid)


def _write_lock(path: str) -> int:
    fd = os.open(path, os.O_CREAT | os.O_EXCL | os.O_RDWR, 0o644)
    os.write(fd, str(os.getpid()).encode("utf-8"))
    return fd


def acquire_single_instance(lock_name: str = settings.LOCK_NAME) -> bool:
    """Try to take the single-instance lock file.

    Returns True when this process holds the lock. A lock left by a process
    that no longer exists is reclaimed once.
    """
    global _LOCK_FD, _LOCK_PATH
    if _LOCK_FD is not None:
        return True
    path = _default_lock_path(lock_name)
    try:
        _LOCK_FD = _write_lock(path)
        _LOCK_PATH = path
        return True
    except FileExistsError:
        try:
            with open(path, "r", encoding="utf-8") as f:
                contents = f.read().strip()
        except OSError:
            return False
        stale_pid = int(contents) if contents.isdigit() else None
        if stale_pid is None or _pid_alive(stale_pid):
            return False
        try:
            os.unlink(path)
            _LOCK_FD = _write_lock(path)
            _LOCK_PATH = path
            return True
        except OSError:  # pragma: no cover - race with another starter
            return False


def release_single_instance() -> None:
    global _LOCK_FD, _LOCK_PATH
    if _LOCK_FD is None:
        return
    try:
        os.close(_LOCK_FD)
        if _LOCK_PATH and os.path.exists(_LOCK_PATH):
            os.unlink(_LOCK_PATH)
    finally:
        _LOCK_FD = None
        _LOCK_PATH = None


@contextmanager
def single_instance(lock_name: str = settings.LOCK_NAME) -> Iterator[bool]:
    """Yield True if the lock was acquired; release it on exit."""
    acquired = acquire_single_instance(lock_name)
    try:
        yield acquired
    finally:
        if acquired:
            release_single_instance()


__all__ = [
    "AppContext",
    "create_app",
    "parse_safe_mode",
    "single_instance",
    "acquire_single_instance",
    "release_single_instance",
]
