"""Main window: chrome, primary pane and secondary pane.

The window is the Qt side of the session controller. It provides the pane
operations the layout service drives (pane markers, summary placement,
splitter weights) and the hooks the controller needs (available width,
resize and shutdown notifications, blocking alert).

Pane roles are exposed as the ``paneRole`` dynamic property
(``dualPaneLeft`` / ``dualPaneRight``, empty in single-pane layout) and the
splitter share of each pane as ``widthPercent``.

The summary list view is built only through ``summary_holder``; the session
controller shares the same holder, so pane placement, list sync and the
filter always act on one view. Collaborators not passed in are resolved from
the service registry.
"""

from __future__ import annotations

import logging
from typing import Callable, List, Optional, Set

from PyQt6.QtWidgets import (
    QApplication,
    QFrame,
    QHBoxLayout,
    QLabel,
    QMainWindow,
    QMessageBox,
    QStackedWidget,
    QVBoxLayout,
    QWidget,
)

from codetrack.models import CodeTrackCollection
from codetrack.routing import Route, Router
from codetrack.services.event_bus import AppEvent, Event, EventBus
from codetrack.services.pane_layout import PersistentSummary
from codetrack.services.service_locator import services
from codetrack.services.splitter import PaneWeights
from codetrack.state.application_state import ApplicationState, AppStateName
from .command_bar import CommandBar, FilterBar
from .primary_views import AddView, DetailView, HelpView, OptionsView
from .summary_list_view import SummaryListView

__all__ = ["MainWindow", "STYLESHEET"]

_log = logging.getLogger(__name__)

STYLESHEET = """
QFrame[browsed="true"] { background-color: #dbe9ff; }
QFrame[paneRole="dualPaneLeft"] { border-right: 1px solid #c8c8c8; }
QLabel#formError { color: #b00020; }
"""


def _repolish(widget: QWidget) -> None:
    widget.style().unpolish(widget)
    widget.style().polish(widget)


def _settle(container: QWidget, summary: SummaryListView) -> None:
    # row geometry must be current before list sync measures it
    container.layout().activate()
    summary.widget().layout().activate()


class MainWindow(QMainWindow):
    def __init__(
        self,
        state: Optional[ApplicationState] = None,
        collection: Optional[CodeTrackCollection] = None,
        router: Optional[Router] = None,
        bus: Optional[EventBus] = None,
        parent: Optional[QWidget] = None,
    ) -> None:
        super().__init__(parent)
        self.setWindowTitle("CodeTrack")
        self.setStyleSheet(STYLESHEET)
        state = state if state is not None else services.get_typed("app_state", ApplicationState)
        if collection is None:
            collection = services.get_typed("collection", CodeTrackCollection)
        router = router if router is not None else services.get_typed("router", Router)
        bus = bus if bus is not None else services.get_typed("event_bus", EventBus)
        self._state = state
        self._collection = collection
        self._router = router
        self._bus = bus
        self.summary_holder: PersistentSummary[SummaryListView] = PersistentSummary(
            self._build_summary_view
        )
        # last filter result; None shows every row
        self._visible_ids: Optional[Set[str]] = None
        self._resize_handlers: List[Callable[[int], None]] = []
        self._hide_handlers: List[Callable[[], None]] = []
        self.command_bar: Optional[CommandBar] = None
        self.filter_bar: Optional[FilterBar] = None

        central = QWidget(self)
        self._root_layout = QVBoxLayout(central)
        self._root_layout.setContentsMargins(0, 0, 0, 0)
        self._chrome_slot = QVBoxLayout()
        self._root_layout.addLayout(self._chrome_slot)
        self.status_label = QLabel(central)
        self.status_label.setObjectName("statusMessage")
        self._root_layout.addWidget(self.status_label)

        self._panes_layout = QHBoxLayout()
        self.secondary_pane = QFrame(central)
        self.secondary_pane.setObjectName("secondaryPane")
        QVBoxLayout(self.secondary_pane).setContentsMargins(0, 0, 0, 0)
        self.primary_pane = QFrame(central)
        self.primary_pane.setObjectName("primaryPane")
        primary_layout = QVBoxLayout(self.primary_pane)
        primary_layout.setContentsMargins(0, 0, 0, 0)
        self._panes_layout.addWidget(self.secondary_pane)
        self._panes_layout.addWidget(self.primary_pane)
        self._root_layout.addLayout(self._panes_layout, 1)
        self.setCentralWidget(central)

        # primary pane pages
        self.stack = QStackedWidget(self.primary_pane)
        primary_layout.addWidget(self.stack)
        self.list_slot = QWidget()
        QVBoxLayout(self.list_slot).setContentsMargins(0, 0, 0, 0)
        self.help_view = HelpView(state)
        self.detail_view = DetailView(collection, bus, router.navigate)
        self.add_view = AddView(collection, bus, router.navigate)
        self.options_view = OptionsView(state)
        for page in (self.list_slot, self.help_view, self.detail_view, self.add_view, self.options_view):
            self.stack.addWidget(page)

        self.set_dual_pane_markers(False)
        router.on_route(self._on_route)
        bus.subscribe(AppEvent.STATUS_MESSAGE, self._on_status)
        bus.subscribe(AppEvent.FILTER_APPLIED, self._on_filter_applied)
        bus.subscribe(AppEvent.SESSION_RESTORED, self._on_session_restored)
        bus.subscribe(AppEvent.STARTUP_COMPLETE, lambda e: self.status_label.setText("Ready"))
        bus.subscribe(AppEvent.STARTUP_FAILED, self._on_startup_failed)
        collection.on_added(self._on_item_added)
        collection.on_removed(self._on_item_removed)

    # ------------------------------------------------------------------
    # Pane host
    # ------------------------------------------------------------------
    def set_dual_pane_markers(self, enabled: bool) -> None:
        self.secondary_pane.setProperty("paneRole", "dualPaneLeft" if enabled else "")
        self.primary_pane.setProperty("paneRole", "dualPaneRight" if enabled else "")
        self.secondary_pane.setVisible(enabled)
        if not enabled:
            self.secondary_pane.setProperty("widthPercent", 0)
            self.primary_pane.setProperty("widthPercent", 100)
            self._panes_layout.setStretch(0, 0)
            self._panes_layout.setStretch(1, 1)
        _repolish(self.secondary_pane)
        _repolish(self.primary_pane)

    def attach_summary_to_secondary(self, summary: SummaryListView) -> None:
        layout = self.secondary_pane.layout()
        if summary.parentWidget() is not self.secondary_pane:
            layout.addWidget(summary)
        summary.show()
        _settle(self.secondary_pane, summary)

    def apply_pane_weights(self, weights: PaneWeights) -> None:
        self._panes_layout.setStretch(0, weights.secondary)
        self._panes_layout.setStretch(1, weights.primary)
        self.secondary_pane.setProperty("widthPercent", weights.secondary_percent)
        self.primary_pane.setProperty("widthPercent", weights.primary_percent)

    # ------------------------------------------------------------------
    # Session hooks
    # ------------------------------------------------------------------
    @property
    def pane_host(self) -> "MainWindow":
        return self

    @property
    def summary(self) -> Optional[SummaryListView]:
        return self.summary_holder.peek()

    def available_width(self) -> int:
        return self.centralWidget().width()

    def _build_summary_view(self) -> SummaryListView:
        view = SummaryListView(
            self._collection, on_open=lambda item_id: self._router.navigate(f"edit/{item_id}")
        )
        view.apply_filter(self._visible_ids)
        return view

    def build_chrome(self, filter_was_active: bool) -> None:
        if self.command_bar is not None:
            return
        self.command_bar = CommandBar(self._state, self._router.navigate, self, back=self._router.back)
        self.filter_bar = FilterBar(
            self._state, self._collection, self._bus, init_filter=filter_was_active, parent=self
        )
        self._chrome_slot.addWidget(self.command_bar)
        self._chrome_slot.addWidget(self.filter_bar)

    def connect_resize(self, handler: Callable[[int], None]) -> None:
        self._resize_handlers.append(handler)

    def connect_shutdown(self, handler: Callable[[], None]) -> None:
        app = QApplication.instance()
        if app is not None:
            app.aboutToQuit.connect(handler)
        self._hide_handlers.append(handler)

    def alert(self, message: str) -> None:
        QMessageBox.critical(self, "CodeTrack", message)

    # ------------------------------------------------------------------
    # Qt events
    # ------------------------------------------------------------------
    def resizeEvent(self, event):  # noqa: N802 - Qt override
        super().resizeEvent(event)
        width = self.available_width()
        for handler in list(self._resize_handlers):
            handler(width)

    def hideEvent(self, event):  # noqa: N802 - Qt override
        for handler in list(self._hide_handlers):
            handler()
        super().hideEvent(event)

    # ------------------------------------------------------------------
    # Routing / bus handlers
    # ------------------------------------------------------------------
    def _on_route(self, route: Route) -> None:
        state = route.state
        if state is AppStateName.LIST:
            if self._state.is_dual_pane():
                # list already showing in the secondary pane
                self.help_view.refresh()
                self.stack.setCurrentWidget(self.help_view)
            else:
                self._show_summary_in_primary()
        elif state is AppStateName.BROWSE_EDIT:
            self.detail_view.show_item(route.model_id or "")
            self.stack.setCurrentWidget(self.detail_view)
        elif state is AppStateName.ADD:
            self.add_view.reset()
            self.stack.setCurrentWidget(self.add_view)
        elif state is AppStateName.GLOBAL_OPTIONS:
            self.options_view.refresh()
            self.stack.setCurrentWidget(self.options_view)
        else:
            self.help_view.refresh()
            self.stack.setCurrentWidget(self.help_view)

    def _show_summary_in_primary(self) -> None:
        summary = self.summary_holder.get()
        if summary.parentWidget() is not self.list_slot:
            self.list_slot.layout().addWidget(summary)
        summary.show()
        self.stack.setCurrentWidget(self.list_slot)
        _settle(self.list_slot, summary)
        self._bus.publish(AppEvent.SUMMARY_ATTACHED, summary)

    def _on_status(self, event: Event) -> None:
        self.status_label.setText(str(event.payload or ""))

    def _on_session_restored(self, event: Event) -> None:
        if event.payload is not None:
            self.status_label.setText("Previous session restored")

    def _on_startup_failed(self, event: Event) -> None:
        self.status_label.setText(f"Startup failed: {event.payload}")

    def _on_filter_applied(self, event: Event) -> None:
        self._visible_ids = event.payload
        summary = self.summary_holder.peek()
        if summary is not None:
            summary.apply_filter(self._visible_ids)

    def _on_item_added(self, item) -> None:
        summary = self.summary_holder.peek()
        if summary is not None:
            summary.add_item(item)

    def _on_item_removed(self, item) -> None:
        summary = self.summary_holder.peek()
        if summary is not None:
            summary.remove_item(item)
