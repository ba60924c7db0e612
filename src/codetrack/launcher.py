"""Qt launcher: bootstrap, main window and session controller."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Optional

from codetrack.app.bootstrap import create_app, parse_safe_mode, single_instance
from codetrack.app.session import SessionController
from codetrack.config import settings
from codetrack.errors import StorageUnavailableError
from codetrack.models import CodeTrackCollection
from codetrack.routing import Router
from codetrack.services.event_bus import AppEvent, Event, EventBus
from codetrack.services.logging_service import DiagnosticsLoggingService
from codetrack.services.service_locator import services
from codetrack.state.application_state import ApplicationState

_log = logging.getLogger(__name__)


def qt_scheduler(fn: Callable[[], None]) -> None:
    """Run ``fn`` on the next event loop turn."""
    from PyQt6.QtCore import QTimer

    QTimer.singleShot(0, fn)


def diagnostics_exporter(path: Path) -> Callable[[Event], None]:
    """SESSION_SAVED handler writing the captured diagnostics to ``path``."""

    def _export(_event: Event) -> None:
        diagnostics = services.get_typed("diagnostics", DiagnosticsLoggingService)
        count = diagnostics.export_jsonl(path)
        _log.debug("exported %d diagnostics entries to %s", count, path)

    return _export


def build_session(ui, *, safe_mode: bool = False) -> SessionController:
    """Session controller wired to the registered services."""
    return SessionController(
        services.get_typed("app_state", ApplicationState),
        services.get("preference_store"),
        services.get_typed("collection", CodeTrackCollection),
        services.get_typed("router", Router),
        services.get_typed("event_bus", EventBus),
        ui,
        safe_mode=safe_mode,
    )


def run(
    *,
    data_dir: Optional[Path] = None,
    fragment: str = "",
    safe_mode: bool = False,
    diagnostics_log: Optional[Path] = None,
) -> int:  # pragma: no cover - runtime
    with single_instance() as acquired:
        if not acquired:
            print("Another CodeTrack instance is already running.")  # noqa: T201
            return 1
        ctx = create_app(
            safe_mode=safe_mode,
            headless=False,
            data_dir=data_dir or settings.DATA_DIR,
            scheduler=qt_scheduler,
        )
        from codetrack.views.main_window import MainWindow

        win = MainWindow()
        controller = build_session(win, safe_mode=ctx.safe_mode)
        if diagnostics_log is not None:
            ctx.bus.subscribe(AppEvent.SESSION_SAVED, diagnostics_exporter(Path(diagnostics_log)))
        win.resize(1000, 700)
        win.show()
        try:
            controller.start(fragment or settings.START_FRAGMENT)
        except StorageUnavailableError as exc:
            _log.error("startup aborted: %s", exc)
            win.alert(f"CodeTrack needs a writable data directory ({ctx.data_dir}).")
            return 2
        return ctx.qt_app.exec()


def main() -> int:  # pragma: no cover - runtime
    return run(safe_mode=parse_safe_mode())


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
