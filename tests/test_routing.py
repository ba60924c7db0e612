import pytest

from codetrack.routing import Route, Router, fragment_for, parse_fragment
from codetrack.state.application_state import ApplicationState, AppStateName


@pytest.mark.parametrize(
    "fragment,expected",
    [
        ("", Route(AppStateName.LIST)),
        ("#list", Route(AppStateName.LIST)),
        ("add", Route(AppStateName.ADD)),
        ("options", Route(AppStateName.GLOBAL_OPTIONS)),
        ("help", Route(AppStateName.HELP)),
        ("edit/42", Route(AppStateName.BROWSE_EDIT, "42")),
        ("#edit/a%20b/", Route(AppStateName.BROWSE_EDIT, "a b")),
        ("edit/", Route(AppStateName.HELP)),
        ("nonsense", Route(AppStateName.HELP)),
    ],
)
def test_parse_fragment(fragment, expected):
    assert parse_fragment(fragment) == expected


def test_fragment_for():
    assert fragment_for(AppStateName.BROWSE_EDIT, "9") == "edit/9"
    assert fragment_for(AppStateName.GLOBAL_OPTIONS) == "options"
    assert fragment_for(AppStateName.ADD) == "add"


def test_navigate_sets_id_before_state(state: ApplicationState):
    router = Router(state)
    seen = []
    state.on_change(
        "current_state", lambda c: seen.append((c.value, state.last_browsed_model_id))
    )
    router.navigate("edit/5")
    assert seen == [(AppStateName.BROWSE_EDIT, "5")]


def test_listeners_run_on_every_navigation(state: ApplicationState):
    router = Router(state)
    routes = []
    router.on_route(routes.append)
    router.navigate("list")
    router.navigate("list")
    assert [r.state for r in routes] == [AppStateName.LIST, AppStateName.LIST]


def test_navigate_without_trigger_only_records(state: ApplicationState):
    router = Router(state)
    router.navigate("add", trigger=False)
    assert state.current_state is AppStateName.LIST
    assert router.fragment == "add"


def test_start_runs_once(state: ApplicationState):
    router = Router(state)
    router.start("help")
    router.start("add")
    assert state.current_state is AppStateName.HELP
    assert router.history == ["help"]


def test_back(state: ApplicationState):
    router = Router(state)
    router.navigate("list")
    router.navigate("edit/1")
    router.navigate("options")
    route = router.back()
    assert route == Route(AppStateName.BROWSE_EDIT, "1")
    assert state.current_state is AppStateName.BROWSE_EDIT
    assert router.history == ["list", "edit/1"]
    router.back()
    assert router.back() is None
