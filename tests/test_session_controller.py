from pathlib import Path

import pytest

from codetrack.app.preference_store import MemoryPreferenceStore
from codetrack.app.session import Phase, SessionController
from codetrack.errors import StartupError, StorageUnavailableError
from codetrack.models import CodeTrackCollection
from codetrack.routing import Router
from codetrack.services.event_bus import AppEvent, EventBus
from codetrack.state.application_state import ApplicationState, AppStateName, Layout
from tests.factories import (
    DeferredScheduler,
    FailingCollection,
    FakeUi,
    RecordingRouter,
    make_collection,
    store_with,
)

IDS = ["7", "42", "99"]


def _controller(state, store, tmp_path: Path, *, width=800, collection=None, safe_mode=False):
    ui = FakeUi(width=width, ids=IDS)
    if collection is None:
        collection = make_collection(IDS, base_dir=tmp_path)
    router = RecordingRouter(Router(state))
    bus = EventBus()
    events = []
    for evt in AppEvent:
        bus.subscribe(evt, lambda e: events.append(e.name))
    ctrl = SessionController(state, store, collection, router, bus, ui, safe_mode=safe_mode)
    return ctrl, ui, router, events


def test_phase_order(state: ApplicationState, tmp_path: Path):
    ctrl, ui, router, events = _controller(state, MemoryPreferenceStore(), tmp_path)
    ctrl.start()
    assert ctrl.completed == [
        Phase.PREFERENCES,
        Phase.UI_BUILT,
        Phase.RESTORED,
        Phase.RUNNING,
    ]
    assert events.index("session_restored") < events.index("startup_complete")
    assert router.start_calls == [""]


def test_scenario_wide_window_enters_dual_pane_at_half_split(state: ApplicationState, tmp_path: Path):
    ctrl, ui, router, events = _controller(state, MemoryPreferenceStore(), tmp_path, width=800)
    ctrl.start()
    assert state.current_layout is Layout.DUAL_PANE
    w = ui.pane_host.weights[-1]
    assert (w.secondary_percent, w.primary_percent) == (50, 50)
    # list moved to the secondary pane; primary shows help
    assert ui.pane_host.secondary_content is ctrl.summary.peek()
    assert state.current_state is AppStateName.HELP


def test_scenario_narrow_resize_forces_single_pane(state: ApplicationState, tmp_path: Path):
    ctrl, ui, router, events = _controller(state, MemoryPreferenceStore(), tmp_path, width=800)
    ctrl.start()
    assert state.current_layout is Layout.DUAL_PANE
    ui.resize(500)
    assert state.current_layout is Layout.SINGLE_PANE
    assert ui.pane_host.dual_markers is False


def test_narrow_window_stays_single_pane(state: ApplicationState, tmp_path: Path):
    ctrl, ui, router, events = _controller(state, MemoryPreferenceStore(), tmp_path, width=500)
    ctrl.start()
    assert state.current_layout is Layout.SINGLE_PANE
    assert ui.summaries_created == 0
    ui.resize(900)
    assert state.current_layout is Layout.DUAL_PANE
    assert ui.summaries_created == 1


def test_scenario_active_filter_restored_without_bar_visibility(state: ApplicationState, tmp_path: Path):
    store = store_with(
        {"jsctFilterWasActive": "true", "jsctFilterText": "foo", "jsctShowFilterBar": "false"}
    )
    ctrl, ui, router, events = _controller(state, store, tmp_path)
    ctrl.start()
    assert state.get("filter_is_active") is True
    assert state.get("filter_text") == "foo"
    assert state.get("show_filter_bar") is True  # default, not read in this branch
    assert ui.chrome_builds == [True]


def test_inactive_filter_restores_bar_visibility(state: ApplicationState, tmp_path: Path):
    store = store_with({"jsctFilterWasActive": "false", "jsctFilterText": "foo", "jsctShowFilterBar": "false"})
    ctrl, ui, router, events = _controller(state, store, tmp_path)
    ctrl.start()
    assert state.get("filter_is_active") is False
    assert state.get("filter_text") == ""
    assert state.get("show_filter_bar") is False
    assert ui.chrome_builds == [False]


def test_scenario_browse_edit_restored_once(state: ApplicationState, tmp_path: Path):
    store = store_with({"jsctLastCurrentState": "browseEdit", "jsctLastModelID": "42"})
    ctrl, ui, router, events = _controller(state, store, tmp_path)
    ctrl.start()
    assert router.navigations.count("edit/42") == 1
    assert state.current_state is AppStateName.BROWSE_EDIT
    assert state.last_browsed_model_id == "42"
    # list attached in dual pane carries the highlight
    assert ctrl.summary.peek().highlighted == {"42"}


def test_previous_list_state_is_not_renavigated(state: ApplicationState, tmp_path: Path):
    store = store_with({"jsctLastCurrentState": "add", "jsctLastModelID": "42"})
    ctrl, ui, router, events = _controller(state, store, tmp_path, width=500)
    ctrl.start()
    assert router.navigations == []
    assert state.current_state is AppStateName.LIST


@pytest.mark.parametrize("fragment", ["add", "edit/7", "options"])
def test_scenario_start_fragment_skips_restore(state: ApplicationState, tmp_path: Path, fragment):
    store = store_with(
        {
            "jsctLastCurrentState": "browseEdit",
            "jsctLastModelID": "42",
            "jsctFilterWasActive": "true",
            "jsctFilterText": "foo",
        }
    )
    ctrl, ui, router, events = _controller(state, store, tmp_path)
    ctrl.start(fragment)
    assert "edit/42" not in router.navigations
    assert "session_restored" not in events
    assert state.get("filter_is_active") is False
    assert router.start_calls == [fragment]
    assert ctrl.phase is Phase.RUNNING


def test_preferences_restored_before_ui(state: ApplicationState, tmp_path: Path):
    store = store_with({"jsctUseDualPane": "false", "jsctSplitterLocation": "3"})
    ctrl, ui, router, events = _controller(state, store, tmp_path, width=1200)
    ctrl.start()
    assert state.use_dual_pane is False
    assert state.current_layout is Layout.SINGLE_PANE
    state.set("use_dual_pane", True)
    assert state.current_layout is Layout.DUAL_PANE
    w = ui.pane_host.weights[-1]
    assert (w.secondary, w.primary) == (3, 7)


def test_safe_mode_skips_session_but_keeps_preferences(state: ApplicationState, tmp_path: Path):
    store = store_with(
        {"jsctLastCurrentState": "browseEdit", "jsctLastModelID": "42", "jsctUseDualPane": "false"}
    )
    ctrl, ui, router, events = _controller(state, store, tmp_path, safe_mode=True)
    ctrl.start()
    assert state.use_dual_pane is False
    assert "edit/42" not in router.navigations
    assert Phase.RESTORED in ctrl.completed
    assert ctrl.phase is Phase.RUNNING


def test_unavailable_store_aborts_before_side_effects(state: ApplicationState, tmp_path: Path):
    store = MemoryPreferenceStore({"jsctUseDualPane": "false"}, available=False)
    ctrl, ui, router, events = _controller(state, store, tmp_path)
    with pytest.raises(StorageUnavailableError):
        ctrl.start()
    assert state.use_dual_pane is True
    assert ctrl.phase is Phase.NEW
    assert router.start_calls == []


def test_load_failure_is_fatal(state: ApplicationState, tmp_path: Path):
    ctrl, ui, router, events = _controller(
        state, MemoryPreferenceStore(), tmp_path, collection=FailingCollection()
    )
    ctrl.start()
    assert ctrl.phase is Phase.FAILED
    assert len(ui.alerts) == 1
    assert "startup_failed" in events
    assert ui.chrome_builds == []
    assert router.start_calls == []
    with pytest.raises(StartupError):
        ctrl.raise_if_failed()
    # later phases refuse to run
    ctrl.run_ui_phases()
    assert ui.chrome_builds == []


def test_first_use_seeds_then_resumes(state: ApplicationState):
    scheduler = DeferredScheduler()
    collection = CodeTrackCollection(scheduler=scheduler)
    ctrl, ui, router, events = _controller(state, MemoryPreferenceStore(), None, collection=collection)
    ctrl.start()
    assert ctrl.phase is Phase.LOADING
    scheduler.pending.pop(0)()  # item load finishes: empty
    assert ctrl.phase is Phase.SEEDING
    assert state.first_use is True
    # re-entering before the seed exists does nothing
    ctrl.run_ui_phases()
    assert router.start_calls == []
    scheduler.run_all()
    assert len(collection) == 8
    assert ctrl.phase is Phase.RUNNING
    assert router.start_calls == [""]


def test_ui_phases_are_idempotent(state: ApplicationState, tmp_path: Path):
    ctrl, ui, router, events = _controller(state, MemoryPreferenceStore(), tmp_path)
    ctrl.start()
    ctrl.run_ui_phases()
    ctrl.build_ui()
    ctrl.attach_chrome()
    assert ui.summaries_created == 1
    assert ctrl.summary is ui.summary_holder
    assert ui.chrome_builds == [False]
    assert len(ui.resize_handlers) == 1
    assert len(ui.shutdown_handlers) == 1
    assert state.subscriber_count("current_layout") == 1
    assert ctrl.completed.count(Phase.RUNNING) == 1
    assert events.count("startup_complete") == 1


def test_shutdown_persists_session(state: ApplicationState, tmp_path: Path):
    store = MemoryPreferenceStore()
    ctrl, ui, router, events = _controller(state, store, tmp_path, width=500)
    ctrl.start()
    router.navigate("edit/99")
    state.set("splitter_location", 2)
    ui.shutdown()
    ui.shutdown()  # both unload and hide may fire
    data = store.as_dict()
    assert data["jsctLastCurrentState"] == "browseEdit"
    assert data["jsctLastModelID"] == "99"
    assert data["jsctSplitterLocation"] == "2"
    assert events.count("session_saved") == 2


def test_saved_session_round_trips_into_next_start(state: ApplicationState, tmp_path: Path):
    store = MemoryPreferenceStore()
    ctrl, ui, router, events = _controller(state, store, tmp_path, width=500)
    ctrl.start()
    router.navigate("edit/7")
    state.set("filter_is_active", True)
    state.set("filter_text", "bar")
    ctrl.save_session()

    fresh = ApplicationState()
    ctrl2, ui2, router2, _ = _controller(fresh, store, tmp_path, width=500)
    ctrl2.start()
    assert fresh.current_state is AppStateName.BROWSE_EDIT
    assert fresh.last_browsed_model_id == "7"
    assert fresh.get("filter_text") == "bar"
    assert ui2.chrome_builds == [True]
