"""Session lifecycle controller.

Runs startup as an explicit sequence of named phases and saves the session on
shutdown:

1. ``restore_preferences`` - layout/diagnostics preferences, before any UI
2. ``load_data``           - asynchronous item load; an empty collection is
                             seeded first (first use) and startup resumes once
                             the seed data exists
3. ``build_ui``            - layout decision, pane layout and list sync
                             wiring (sharing the window's summary holder),
                             router start
4. ``restore_session``     - previous filter and browse/edit target, skipped
                             entirely when startup was given a fragment
5. ``attach_chrome``       - command/filter bars (built with the restored
                             filter), one layout decision against the real
                             width, resize listener, shutdown hooks

A failed item load is fatal: the user gets a blocking alert and no later phase
runs. Phases 3-5 are idempotent; re-entering them never double-subscribes or
rebuilds singleton views.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Callable, List, Optional, Protocol

from codetrack.errors import StartupError, StorageUnavailableError
from codetrack.services.event_bus import AppEvent, EventBus
from codetrack.services.layout_decision import LayoutDecisionService
from codetrack.services.list_sync import ListSynchronizer
from codetrack.services.pane_layout import PaneHost, PaneLayoutService, PersistentSummary
from codetrack.state.application_state import ApplicationState, AppStateName
from .preference_store import PreferenceStore
from .session_codec import read_field, persist_session, restore_preferences

__all__ = ["Phase", "SessionUi", "SessionController"]

_log = logging.getLogger(__name__)


class Phase(str, Enum):
    NEW = "new"
    PREFERENCES = "preferences"
    LOADING = "loading"
    SEEDING = "seeding"
    UI_BUILT = "ui_built"
    RESTORED = "restored"
    RUNNING = "running"
    FAILED = "failed"


class SessionUi(Protocol):
    """Window-side hooks the controller drives.

    ``summary_holder`` is the only place the summary list view gets built;
    the window, the pane layout and list sync all share it.
    """

    pane_host: PaneHost
    summary_holder: PersistentSummary[Any]

    def available_width(self) -> int: ...

    def build_chrome(self, filter_was_active: bool) -> None: ...

    def connect_resize(self, handler: Callable[[int], None]) -> None: ...

    def connect_shutdown(self, handler: Callable[[], None]) -> None: ...

    def alert(self, message: str) -> None: ...


class Collection(Protocol):
    def __len__(self) -> int: ...

    def get(self, item_id: str) -> Any: ...

    def fetch(self, on_success: Callable[[], None], on_failure: Callable[[Exception], None]) -> None: ...

    def create_seed_data(self, on_done: Callable[[], None]) -> None: ...


class Navigator(Protocol):
    def start(self, initial_fragment: str = "") -> None: ...

    def navigate(self, fragment: str, *, trigger: bool = True) -> Any: ...


class SessionController:
    def __init__(
        self,
        state: ApplicationState,
        store: PreferenceStore,
        collection: Collection,
        router: Navigator,
        bus: EventBus,
        ui: SessionUi,
        *,
        safe_mode: bool = False,
    ) -> None:
        self.state = state
        self.store = store
        self.collection = collection
        self.router = router
        self.bus = bus
        self.ui = ui
        self.safe_mode = safe_mode
        self.phase = Phase.NEW
        self.completed: List[Phase] = []
        self.error: Optional[StartupError] = None
        self.filter_was_active = False
        self.summary: PersistentSummary[Any] = ui.summary_holder
        self.layout_decision: Optional[LayoutDecisionService] = None
        self.pane_layout: Optional[PaneLayoutService] = None
        self.list_sync: Optional[ListSynchronizer] = None
        self._initial_fragment = ""
        self._chrome_attached = False
        self._restored = False

    # ------------------------------------------------------------------
    # Startup
    # ------------------------------------------------------------------
    def start(self, initial_fragment: str = "") -> None:
        """Run the startup sequence; data-dependent phases follow the load."""
        if not self.store.is_available():
            _log.error("no durable preference store available; aborting session")
            raise StorageUnavailableError("A writable data directory is required")
        self._initial_fragment = initial_fragment or ""
        self.restore_preferences()
        self.load_data()

    def restore_preferences(self) -> None:
        restore_preferences(self.store, self.state)
        _log.debug("***** starting CodeTrack session *****")
        self._advance(Phase.PREFERENCES)

    def load_data(self) -> None:
        self.phase = Phase.LOADING
        _log.debug("loading items into collection")
        self.collection.fetch(on_success=self._on_loaded, on_failure=self._on_load_failed)

    def _on_loaded(self) -> None:
        if len(self.collection) == 0:
            _log.debug("no items stored; creating sample data")
            self.state.set("first_use", True)
            self.phase = Phase.SEEDING
            self.bus.publish(AppEvent.STATUS_MESSAGE, "Creating sample data...")
            self.collection.create_seed_data(on_done=self._on_seeded)
            return
        _log.debug("collection populated with %d items", len(self.collection))
        self.run_ui_phases()

    def _on_seeded(self) -> None:
        _log.debug("sample data created; resuming startup")
        self.bus.publish(AppEvent.STATUS_MESSAGE, "Sample data created")
        self.run_ui_phases()

    def _on_load_failed(self, exc: Exception) -> None:
        self.phase = Phase.FAILED
        self.error = StartupError(f"Item load failed at startup: {exc}")
        _log.error("fatal startup failure: %s", exc)
        self.bus.publish(AppEvent.STARTUP_FAILED, str(exc))
        self.ui.alert("ERROR: the item database could not be loaded.")

    def raise_if_failed(self) -> None:
        if self.error is not None:
            raise self.error

    def run_ui_phases(self) -> None:
        """UI build, session restore and chrome; safe to call repeatedly."""
        if self.phase is Phase.FAILED:
            return
        if len(self.collection) == 0:
            # seed creation still in flight; it calls back here when done
            _log.debug("ui phases deferred: no data yet")
            return
        self.build_ui()
        if not self._restored:
            self._restored = True
            if self.safe_mode:
                _log.debug("safe mode: session restore skipped")
            else:
                self.restore_session(self._initial_fragment)
            self._advance(Phase.RESTORED)
        self.attach_chrome()
        if self.phase is not Phase.RUNNING:
            self._advance(Phase.RUNNING)
            self.bus.publish(AppEvent.STARTUP_COMPLETE, self.state.snapshot())

    def build_ui(self) -> None:
        if self.pane_layout is not None:
            return
        self.layout_decision = LayoutDecisionService(self.state, self.ui.available_width)
        self.layout_decision.attach()
        self.pane_layout = PaneLayoutService(
            self.state,
            self.ui.pane_host,
            self.summary,
            navigate=self.router.navigate,
            bus=self.bus,
        )
        self.pane_layout.attach()
        self.list_sync = ListSynchronizer(self.state, self.collection, self.summary.peek, self.bus)
        self.list_sync.attach()
        self.router.start(self._initial_fragment)
        self._advance(Phase.UI_BUILT)

    def restore_session(self, fragment: str = "") -> bool:
        """Restore the previous filter and browse/edit target.

        Returns False without touching the store when ``fragment`` is set:
        an explicit destination always wins over history.
        """
        if fragment:
            _log.debug("not restoring session; start fragment %r wins", fragment)
            return False
        previous_state = read_field(self.store, "current_state")
        model_id = read_field(self.store, "last_browsed_model_id")
        _log.debug("previous application state: %s", previous_state)

        self.filter_was_active = read_field(self.store, "filter_is_active")
        if self.filter_was_active:
            _log.debug("restoring previous session's filter")
            self.state.set("filter_is_active", True)
            self.state.set("filter_text", read_field(self.store, "filter_text"))
            self.state.set("filter_type", read_field(self.store, "filter_type"))
            self.state.set("filter_star", read_field(self.store, "filter_star"))
        else:
            # bar visibility only matters when no filter is being restored
            self.state.set("show_filter_bar", read_field(self.store, "show_filter_bar"))

        # only browse/edit is rebuilt; list is the router's default
        if previous_state is AppStateName.BROWSE_EDIT and model_id:
            _log.debug("restoring browse/edit of %s", model_id)
            self.router.navigate(f"edit/{model_id}")
        self.bus.publish(AppEvent.SESSION_RESTORED, previous_state)
        return True

    def attach_chrome(self) -> None:
        if self._chrome_attached or self.layout_decision is None:
            return
        self._chrome_attached = True
        self.ui.build_chrome(self.filter_was_active)
        self.layout_decision.update()
        self.ui.connect_resize(self.layout_decision.on_resize)
        # standard quit and window-hide both save; saving twice is harmless
        self.ui.connect_shutdown(self.save_session)

    # ------------------------------------------------------------------
    # Shutdown
    # ------------------------------------------------------------------
    def save_session(self) -> None:
        """Flush state to the store; no acknowledgement, no retry."""
        persist_session(self.store, self.state)
        self.bus.publish(AppEvent.SESSION_SAVED)

    def _advance(self, phase: Phase) -> None:
        self.phase = phase
        self.completed.append(phase)
