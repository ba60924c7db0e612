"""Fragment router.

Maps navigation fragments to application states:

=============  ===============
fragment       current_state
=============  ===============
``list``       list
``edit/<id>``  browseEdit (also sets ``last_browsed_model_id``)
``add``        add
``options``    globalOptions
``help``       help
=============  ===============

An empty fragment means ``list``; anything unrecognized routes to ``help``.
Route listeners run on every triggered navigation, even when the state does
not change, so views can re-attach content (e.g. the summary list returning to
the primary pane).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional
from urllib.parse import unquote

from codetrack.state.application_state import ApplicationState, AppStateName

__all__ = ["Route", "Router", "parse_fragment", "fragment_for"]

_log = logging.getLogger(__name__)

_SIMPLE_ROUTES = {
    "list": AppStateName.LIST,
    "add": AppStateName.ADD,
    "options": AppStateName.GLOBAL_OPTIONS,
    "help": AppStateName.HELP,
}


@dataclass(frozen=True)
class Route:
    state: AppStateName
    model_id: Optional[str] = None


def parse_fragment(fragment: str) -> Route:
    text = unquote(fragment or "").strip().lstrip("#").strip("/")
    if not text:
        return Route(AppStateName.LIST)
    if text in _SIMPLE_ROUTES:
        return Route(_SIMPLE_ROUTES[text])
    head, _, tail = text.partition("/")
    if head == "edit" and tail:
        return Route(AppStateName.BROWSE_EDIT, tail)
    return Route(AppStateName.HELP)


def fragment_for(state: AppStateName, model_id: Optional[str] = None) -> str:
    if state is AppStateName.BROWSE_EDIT:
        return f"edit/{model_id}" if model_id else "list"
    if state is AppStateName.GLOBAL_OPTIONS:
        return "options"
    return state.value


class Router:
    def __init__(self, state: ApplicationState) -> None:
        self._state = state
        self._listeners: List[Callable[[Route], None]] = []
        self._history: List[str] = []
        self.fragment: str = ""
        self.started = False

    @property
    def current_state(self) -> AppStateName:
        return self._state.current_state

    @property
    def history(self) -> list[str]:
        return list(self._history)

    def on_route(self, handler: Callable[[Route], None]) -> None:
        self._listeners.append(handler)

    def start(self, initial_fragment: str = "") -> None:
        """Route the initial fragment once; later calls are ignored."""
        if self.started:
            return
        self.started = True
        self.navigate(initial_fragment)

    def navigate(self, fragment: str, *, trigger: bool = True) -> Route:
        route = parse_fragment(fragment)
        self.fragment = fragment_for(route.state, route.model_id)
        self._history.append(self.fragment)
        if not trigger:
            return route
        _log.debug("navigate -> %s", self.fragment)
        if route.model_id is not None:
            self._state.set("last_browsed_model_id", route.model_id)
        self._state.set("current_state", route.state)
        for handler in list(self._listeners):
            handler(route)
        return route

    def back(self) -> Optional[Route]:
        """Return to the previous fragment, if any."""
        if len(self._history) < 2:
            return None
        self._history.pop()
        previous = self._history.pop()
        return self.navigate(previous)
