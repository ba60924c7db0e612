"""Summary list synchronization.

Two independent behaviors keep the persistent summary list consistent with
the application state, however that state changed (row click, back/forward
navigation, a bookmarked fragment):

``BrowsedItemCue``
    highlights the row of the item open in the detail pane. Runs on
    ``last_browsed_model_id`` and ``current_state`` changes and whenever the
    list is attached to a pane. Nothing is highlighted outside
    ``browseEdit``, even if the remembered id is stale.

``ScrollToActive``
    scrolls the list so the active row is visible, placing it
    ``SCROLL_TOP_OFFSET`` pixels below the top of the window. Runs on
    ``last_browsed_model_id`` changes and on every ``SUMMARY_ATTACHED`` event.
    Does nothing when the list is hidden or the row is already fully visible.

An id that no longer resolves to an item (deleted item, stale history entry)
is silently ignored by both.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional, Protocol, Tuple

from codetrack.config import settings
from codetrack.state.application_state import ApplicationState, AppStateName
from codetrack.state.observable import FieldChange, Subscription
from .event_bus import AppEvent, Event, EventBus

__all__ = ["SummaryListView", "ItemLookup", "BrowsedItemCue", "ScrollToActive", "ListSynchronizer"]

_log = logging.getLogger(__name__)


class SummaryListView(Protocol):
    def is_visible(self) -> bool: ...

    def clear_highlights(self) -> None: ...

    def mark_row(self, item_id: str) -> None: ...

    def row_extent(self, item_id: str) -> Optional[Tuple[int, int]]:
        """(top, height) of the row inside the scrollable content."""
        ...

    def viewport_height(self) -> int: ...

    def scroll_position(self) -> int: ...

    def set_scroll_position(self, position: int) -> None: ...


class ItemLookup(Protocol):
    def get(self, item_id: str) -> Any: ...


ViewProvider = Callable[[], Optional[SummaryListView]]


def _resolve(items: ItemLookup, item_id: str) -> Any:
    if not item_id:
        return None
    return items.get(item_id)


class BrowsedItemCue:
    def __init__(self, state: ApplicationState, items: ItemLookup, view: ViewProvider) -> None:
        self._state = state
        self._items = items
        self._view = view

    def apply(self) -> bool:
        """Refresh the highlight; return True when a row was marked."""
        view = self._view()
        if view is None:
            return False
        view.clear_highlights()
        if self._state.current_state is not AppStateName.BROWSE_EDIT:
            return False
        item = _resolve(self._items, self._state.last_browsed_model_id)
        if item is None:
            return False
        view.mark_row(item.id)
        return True


class ScrollToActive:
    def __init__(
        self,
        state: ApplicationState,
        items: ItemLookup,
        view: ViewProvider,
        top_offset: int = settings.SCROLL_TOP_OFFSET,
    ) -> None:
        self._state = state
        self._items = items
        self._view = view
        self._top_offset = top_offset

    def apply(self) -> bool:
        """Scroll the active row into view; return True when a scroll happened."""
        view = self._view()
        if view is None or not view.is_visible():
            return False
        item = _resolve(self._items, self._state.last_browsed_model_id)
        if item is None:
            return False
        extent = view.row_extent(item.id)
        if extent is None:
            return False
        top, height = extent
        in_window = top - view.scroll_position()
        if in_window >= 0 and view.viewport_height() > in_window + height:
            return False
        target = max(0, int(top - self._top_offset))
        _log.debug("scrolling summary list to %s for item %s", target, item.id)
        view.set_scroll_position(target)
        return True


class ListSynchronizer:
    """Wires the cue and the scroll behavior to their triggers."""

    def __init__(
        self,
        state: ApplicationState,
        items: ItemLookup,
        view: ViewProvider,
        bus: EventBus,
    ) -> None:
        self._state = state
        self._bus = bus
        self.cue = BrowsedItemCue(state, items, view)
        self.scroll = ScrollToActive(state, items, view)
        self._subscriptions: list[Subscription] = []
        self._bus_subscription = None

    @property
    def attached(self) -> bool:
        return bool(self._subscriptions)

    def attach(self) -> None:
        if self._subscriptions:
            return
        self._subscriptions = [
            self._state.on_change("last_browsed_model_id", self._on_cue_trigger),
            self._state.on_change("current_state", self._on_cue_trigger),
            self._state.on_change("last_browsed_model_id", self._on_scroll_trigger),
        ]
        self._bus_subscription = self._bus.subscribe(AppEvent.SUMMARY_ATTACHED, self._on_attached)

    def detach(self) -> None:
        for sub in self._subscriptions:
            sub.cancel()
        self._subscriptions = []
        if self._bus_subscription is not None:
            self._bus.unsubscribe(self._bus_subscription)
            self._bus_subscription = None

    def _on_cue_trigger(self, _change: FieldChange) -> None:
        self.cue.apply()

    def _on_scroll_trigger(self, _change: FieldChange) -> None:
        self.scroll.apply()

    def _on_attached(self, _event: Event) -> None:
        # a freshly attached list may predate the current browse target
        self.cue.apply()
        self.scroll.apply()
