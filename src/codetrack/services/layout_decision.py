"""Layout decision engine.

Chooses between single-pane and dual-pane layout from the available width,
the ``use_dual_pane`` preference and the current layout. Ordered rules, first
match wins:

1. dual-pane while the preference is off -> single-pane (preference beats width)
2. width >= 700, preference on, single-pane -> dual-pane
3. width < 700 while dual-pane -> single-pane (narrow always wins)
4. otherwise no change

``LayoutDecisionService`` re-runs the rule on resize, on preference change and
once at startup. It only writes ``current_layout`` when the decision differs,
so repeated calls with unchanged inputs produce no notifications.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

from codetrack.config import settings
from codetrack.state.application_state import ApplicationState, Layout
from codetrack.state.observable import FieldChange, Subscription

__all__ = ["decide_layout", "LayoutDecisionService"]

_log = logging.getLogger(__name__)


def decide_layout(width: int, use_dual_pane: bool, current: Layout) -> Optional[Layout]:
    """Return the layout to switch to, or None when no change is needed."""
    if current is Layout.DUAL_PANE and not use_dual_pane:
        return Layout.SINGLE_PANE
    if width >= settings.DUAL_PANE_MIN_WIDTH and use_dual_pane and current is Layout.SINGLE_PANE:
        return Layout.DUAL_PANE
    if width < settings.DUAL_PANE_MIN_WIDTH and current is Layout.DUAL_PANE:
        return Layout.SINGLE_PANE
    return None


class LayoutDecisionService:
    """Applies ``decide_layout`` to the application state.

    Parameters
    ----------
    state:
        Application state holder (sole writer of ``current_layout``).
    width_provider:
        Callable returning the current available width in pixels.
    """

    def __init__(self, state: ApplicationState, width_provider: Callable[[], int]) -> None:
        self._state = state
        self._width_provider = width_provider
        self._subscription: Subscription | None = None

    def attach(self) -> None:
        """Re-decide whenever the dual-pane preference changes (idempotent)."""
        if self._subscription is None:
            self._subscription = self._state.on_change("use_dual_pane", self._on_preference)

    def detach(self) -> None:
        if self._subscription is not None:
            self._subscription.cancel()
            self._subscription = None

    def _on_preference(self, _change: FieldChange) -> None:
        self.update()

    def on_resize(self, width: int | None = None) -> None:
        self.update(width)

    def update(self, width: int | None = None) -> bool:
        """Run the decision; return True when the layout changed."""
        current_width = self._width_provider() if width is None else width
        target = decide_layout(current_width, self._state.use_dual_pane, self._state.current_layout)
        if target is None:
            return False
        _log.debug("layout decision: width=%s -> %s", current_width, target.value)
        return self._state.set("current_layout", target)
