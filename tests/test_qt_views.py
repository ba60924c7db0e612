import pytest

pytest.importorskip("PyQt6.QtWidgets")

from codetrack.models import CodeTrackCollection  # noqa: E402
from codetrack.routing import Router  # noqa: E402
from codetrack.services.event_bus import AppEvent, EventBus  # noqa: E402
from codetrack.services.splitter import pane_weights  # noqa: E402
from codetrack.state.application_state import ApplicationState, AppStateName  # noqa: E402
from codetrack.views.main_window import MainWindow  # noqa: E402
from codetrack.views.summary_list_view import SummaryListView  # noqa: E402


def _collection(n=3):
    coll = CodeTrackCollection()
    for i in range(n):
        coll.create(title=f"Item {i}")
    return coll


def test_summary_list_highlight(qtbot):
    coll = _collection()
    opened = []
    view = SummaryListView(coll, on_open=opened.append)
    qtbot.addWidget(view)
    first = next(iter(coll))
    assert view.row_count() == 3
    assert view.row(first.id).objectName() == f"ct-{first.id}"
    view.mark_row(first.id)
    assert view.highlighted_ids() == [first.id]
    view.clear_highlights()
    assert view.highlighted_ids() == []
    view.row(first.id).clicked.emit(first.id)
    assert opened == [first.id]


def test_summary_list_filter_and_removal(qtbot):
    coll = _collection()
    view = SummaryListView(coll, on_open=lambda _id: None)
    qtbot.addWidget(view)
    items = list(coll)
    view.apply_filter({items[0].id})
    assert view.row(items[1].id).isHidden()
    assert view.row_extent(items[1].id) is None
    view.apply_filter(None)
    assert not view.row(items[1].id).isHidden()
    view.remove_item(items[2])
    assert view.row_count() == 2


def _window(qtbot, state):
    coll = _collection()
    bus = EventBus()
    router = Router(state)
    win = MainWindow(state, coll, router, bus)
    qtbot.addWidget(win)
    return win, coll, router, bus


def test_pane_markers_and_weights(qtbot, state: ApplicationState):
    win, *_ = _window(qtbot, state)
    assert win.secondary_pane.property("paneRole") == ""
    win.set_dual_pane_markers(True)
    assert win.secondary_pane.property("paneRole") == "dualPaneLeft"
    assert win.primary_pane.property("paneRole") == "dualPaneRight"
    win.apply_pane_weights(pane_weights(3))
    assert win.secondary_pane.property("widthPercent") == 30
    assert win.primary_pane.property("widthPercent") == 70
    win.set_dual_pane_markers(False)
    assert win.primary_pane.property("widthPercent") == 100


def test_list_route_moves_summary_into_primary(qtbot, state: ApplicationState):
    win, coll, router, bus = _window(qtbot, state)
    attached = []
    bus.subscribe(AppEvent.SUMMARY_ATTACHED, lambda e: attached.append(e.payload))
    router.navigate("list")
    assert win.summary is not None
    assert win.summary.parentWidget() is win.list_slot
    assert attached == [win.summary]
    item = next(iter(coll))
    router.navigate(f"edit/{item.id}")
    assert win.stack.currentWidget() is win.detail_view
    assert win.detail_view.item is item


def test_collection_changes_reach_summary(qtbot, state: ApplicationState):
    win, coll, router, bus = _window(qtbot, state)
    win.summary_holder.get()
    new = coll.create(title="Fresh")
    assert win.summary.row(new.id) is not None
    coll.remove(new.id)
    assert win.summary.row(new.id) is None


def test_chrome_built_once_with_restored_filter(qtbot, state: ApplicationState):
    win, coll, router, bus = _window(qtbot, state)
    state.set("filter_is_active", True)
    state.set("filter_text", "Item 1")
    applied = []
    bus.subscribe(AppEvent.FILTER_APPLIED, lambda e: applied.append(e.payload))
    win.build_chrome(True)
    win.build_chrome(True)
    assert win.filter_bar.text_edit.text() == "Item 1"
    assert len(applied) == 1
    assert len(applied[0]) == 1


def test_options_write_state(qtbot, state: ApplicationState):
    win, *_ = _window(qtbot, state)
    win.options_view.dual_pane_check.setChecked(False)
    assert state.use_dual_pane is False
    win.options_view.splitter_spin.setValue(7)
    assert state.splitter_location == 7


def test_status_message(qtbot, state: ApplicationState):
    win, coll, router, bus = _window(qtbot, state)
    bus.publish(AppEvent.STATUS_MESSAGE, "hello")
    assert win.status_label.text() == "hello"
    router.navigate("options")
    assert state.current_state is AppStateName.GLOBAL_OPTIONS
    assert win.stack.currentWidget() is win.options_view


def test_filter_applied_before_summary_exists_is_kept(qtbot, state: ApplicationState):
    win, coll, router, bus = _window(qtbot, state)
    items = list(coll)
    bus.publish(AppEvent.FILTER_APPLIED, {items[0].id})
    assert win.summary is None
    router.navigate("list")
    assert not win.summary.row(items[0].id).isHidden()
    assert win.summary.row(items[1].id).isHidden()
    bus.publish(AppEvent.FILTER_APPLIED, None)
    assert not win.summary.row(items[1].id).isHidden()


def test_summary_is_built_once_across_panes(qtbot, state: ApplicationState):
    win, coll, router, bus = _window(qtbot, state)
    router.navigate("list")
    first = win.summary
    win.set_dual_pane_markers(True)
    win.attach_summary_to_secondary(win.summary_holder.get())
    assert win.summary is first
    assert first.parentWidget() is win.secondary_pane
    win.set_dual_pane_markers(False)
    router.navigate("list")
    assert win.summary is first
    assert first.parentWidget() is win.list_slot


def test_back_button_returns_to_previous_view(qtbot, state: ApplicationState):
    win, coll, router, bus = _window(qtbot, state)
    win.build_chrome(False)
    router.navigate("list")
    router.navigate("options")
    win.command_bar.back_button.click()
    assert state.current_state is AppStateName.LIST
    assert win.stack.currentWidget() is win.list_slot


def test_session_lifecycle_events_update_status(qtbot, state: ApplicationState):
    win, coll, router, bus = _window(qtbot, state)
    bus.publish(AppEvent.SESSION_RESTORED, None)
    assert win.status_label.text() == ""
    bus.publish(AppEvent.SESSION_RESTORED, AppStateName.BROWSE_EDIT)
    assert win.status_label.text() == "Previous session restored"
    bus.publish(AppEvent.STARTUP_COMPLETE, state.snapshot())
    assert win.status_label.text() == "Ready"
    bus.publish(AppEvent.STARTUP_FAILED, "disk gone")
    assert win.status_label.text() == "Startup failed: disk gone"


def test_window_resolves_collaborators_from_services(qtbot, state: ApplicationState):
    from codetrack.services.service_locator import services

    coll = _collection()
    bus = EventBus()
    router = Router(state)
    with services.override_context(app_state=state, collection=coll, router=router, event_bus=bus):
        win = MainWindow()
    qtbot.addWidget(win)
    router.navigate("list")
    assert win.summary.row_count() == 3
    bus.publish(AppEvent.STATUS_MESSAGE, "via registry")
    assert win.status_label.text() == "via registry"
