import pytest

from codetrack.state import ApplicationState, AppStateName, FieldSpec, Layout, ObservableStore
from codetrack.state.application_state import reset_application_state


def test_defaults(state: ApplicationState):
    assert state.current_state is AppStateName.LIST
    assert state.current_layout is Layout.SINGLE_PANE
    assert state.use_dual_pane is True
    assert state.splitter_location == 5
    assert state.show_diagnostics is False
    assert state.get("show_filter_bar") is True
    assert state.get("filter_is_active") is False
    assert state.last_browsed_model_id == ""
    assert state.first_use is False


def test_set_notifies_only_on_change(state: ApplicationState):
    changes = []
    state.on_change("use_dual_pane", changes.append)
    assert state.set("use_dual_pane", True) is False  # already the default
    assert changes == []
    assert state.set("use_dual_pane", False) is True
    assert len(changes) == 1
    assert changes[0].value is False and changes[0].previous is True
    assert state.set("use_dual_pane", False) is False
    assert len(changes) == 1


def test_enum_fields_accept_raw_values(state: ApplicationState):
    seen = []
    state.on_change("current_state", seen.append)
    state.set("current_state", "browseEdit")
    assert state.current_state is AppStateName.BROWSE_EDIT
    # same value given as the enum member is a no-op
    state.set("current_state", AppStateName.BROWSE_EDIT)
    assert len(seen) == 1


def test_splitter_location_is_clamped(state: ApplicationState):
    state.set("splitter_location", 3)
    assert state.splitter_location == 3
    state.set("splitter_location", 12)
    assert state.splitter_location == 5
    state.set("splitter_location", "7")
    assert state.splitter_location == 7
    state.set("splitter_location", "abc")
    assert state.splitter_location == 5


def test_bool_fields_reject_non_bool(state: ApplicationState):
    with pytest.raises(TypeError):
        state.set("show_diagnostics", "true")


def test_unknown_field_raises(state: ApplicationState):
    with pytest.raises(KeyError):
        state.set("no_such_field", 1)
    with pytest.raises(KeyError):
        state.on_change("no_such_field", lambda c: None)


def test_reentrant_delivery():
    store = ObservableStore([FieldSpec("a", 0, int), FieldSpec("b", 0, int)])
    order = []

    def on_a(change):
        order.append(("a", change.value))
        store.set("b", change.value * 10)

    def on_b(change):
        order.append(("b", change.value))
        # echo back into a with the same value: suppressed no-op
        store.set("a", change.value // 10)

    store.on_change("a", on_a)
    store.on_change("b", on_b)
    store.set("a", 2)
    assert order == [("a", 2), ("b", 20)]
    assert store.snapshot() == {"a": 2, "b": 20}


def test_cancel_during_dispatch():
    store = ObservableStore([FieldSpec("a", 0, int)])
    calls = []
    sub_holder = {}

    def first(change):
        calls.append("first")
        sub_holder["second"].cancel()

    def second(change):
        calls.append("second")

    store.on_change("a", first)
    sub_holder["second"] = store.on_change("a", second)
    store.set("a", 1)
    assert calls == ["first"]
    assert store.subscriber_count("a") == 1


def test_reset_restores_defaults(state: ApplicationState):
    state.set("filter_text", "foo")
    state.set("use_dual_pane", False)
    state.reset()
    assert state.get("filter_text") == ""
    assert state.use_dual_pane is True


def test_watch_subscribes_to_several_fields(state: ApplicationState):
    names = []
    subs = state.watch(("filter_text", "filter_star"), lambda c: names.append(c.name))
    state.set("filter_text", "x")
    state.set("filter_star", True)
    assert names == ["filter_text", "filter_star"]
    assert len(subs) == 2


def test_reset_returns_fresh_defaults():
    first = reset_application_state()
    first.set("filter_text", "x")
    second = reset_application_state()
    assert second is not first
    assert second.get("filter_text") == ""
