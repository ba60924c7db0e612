"""Layout application and pane splitter.

Reacts to ``current_layout`` changes and applies them to the window:

Entering dual-pane
    mark the secondary pane left / primary pane right, make sure the
    persistent summary list exists (created lazily, exactly once) and move it
    into the secondary pane. When the list was the primary pane's content
    (state ``list``) the primary pane would be left empty, so navigate to
    ``help`` and clear the status message. Finally apply the splitter weights.

Entering single-pane
    remove the pane markers. On first use navigate to ``help`` (onboarding);
    otherwise, when in state ``list``, navigate to ``list`` again so the
    primary pane takes back the list the secondary pane was holding.

The splitter weights are re-applied on every dual-pane entry and whenever the
``splitter_location`` preference changes; applying them is idempotent.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Generic, Optional, Protocol, TypeVar

from codetrack.state.application_state import ApplicationState, AppStateName, Layout
from codetrack.state.observable import FieldChange, Subscription
from .event_bus import AppEvent, EventBus
from .splitter import PaneWeights, pane_weights

__all__ = ["PaneHost", "PersistentSummary", "PaneLayoutService"]

_log = logging.getLogger(__name__)

S = TypeVar("S")


class PaneHost(Protocol):
    """Visual tree operations the layout service needs."""

    def set_dual_pane_markers(self, enabled: bool) -> None: ...

    def attach_summary_to_secondary(self, summary: Any) -> None: ...

    def apply_pane_weights(self, weights: PaneWeights) -> None: ...


class PersistentSummary(Generic[S]):
    """Holder for the long-lived summary list view.

    The view is built on first request and then only ever moved between
    panes, never torn down or rebuilt.
    """

    def __init__(self, factory: Callable[[], S]) -> None:
        self._factory = factory
        self._instance: Optional[S] = None

    @property
    def created(self) -> bool:
        return self._instance is not None

    def peek(self) -> Optional[S]:
        return self._instance

    def get(self) -> S:
        if self._instance is None:
            _log.debug("creating persistent summary list view")
            self._instance = self._factory()
        return self._instance


class PaneLayoutService:
    def __init__(
        self,
        state: ApplicationState,
        host: PaneHost,
        summary: PersistentSummary[Any],
        navigate: Callable[[str], None],
        bus: EventBus,
    ) -> None:
        self._state = state
        self._host = host
        self._summary = summary
        self._navigate = navigate
        self._bus = bus
        self._subscriptions: list[Subscription] = []

    def attach(self) -> None:
        """Subscribe to layout and splitter changes (idempotent)."""
        if self._subscriptions:
            return
        self._subscriptions = [
            self._state.on_change("current_layout", self._on_layout),
            self._state.on_change("splitter_location", self._on_splitter),
        ]

    def detach(self) -> None:
        for sub in self._subscriptions:
            sub.cancel()
        self._subscriptions = []

    # Handlers ---------------------------------------------------------
    def _on_layout(self, _change: FieldChange) -> None:
        self.update_main_layout()

    def _on_splitter(self, _change: FieldChange) -> None:
        self.apply_splitter_location()

    # Public API -------------------------------------------------------
    def update_main_layout(self) -> None:
        if self._state.current_layout is Layout.DUAL_PANE:
            self._enter_dual_pane()
        else:
            self._enter_single_pane()

    def apply_splitter_location(self) -> Optional[PaneWeights]:
        """Size both panes from the splitter preference (dual-pane only)."""
        if not self._state.is_dual_pane():
            return None
        weights = pane_weights(self._state.splitter_location)
        self._host.apply_pane_weights(weights)
        return weights

    # Transitions ------------------------------------------------------
    def _enter_dual_pane(self) -> None:
        _log.debug("applying dual-pane layout")
        self._host.set_dual_pane_markers(True)
        view = self._summary.get()
        self._host.attach_summary_to_secondary(view)
        self._bus.publish(AppEvent.SUMMARY_ATTACHED, view)
        if self._state.current_state is AppStateName.LIST:
            # the list just left the primary pane; fill it with help
            self._navigate("help")
            self._bus.publish(AppEvent.STATUS_MESSAGE, "")
        self.apply_splitter_location()

    def _enter_single_pane(self) -> None:
        _log.debug("applying single-pane layout")
        self._host.set_dual_pane_markers(False)
        if self._state.first_use:
            self._navigate("help")
        elif self._state.current_state is AppStateName.LIST:
            self._navigate("list")
