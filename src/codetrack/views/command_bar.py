"""Command bar and filter bar.

Both are built exactly once per session, after the previous session has been
restored, so the filter bar can pick up the restored criteria at
construction time.
"""

from __future__ import annotations

from typing import Callable, Optional

from PyQt6.QtWidgets import (
    QCheckBox,
    QComboBox,
    QHBoxLayout,
    QLineEdit,
    QPushButton,
    QWidget,
)

from codetrack.models import ITEM_TYPES, CodeTrackCollection
from codetrack.services.event_bus import AppEvent, EventBus
from codetrack.state.application_state import ApplicationState
from codetrack.state.observable import FieldChange

__all__ = ["CommandBar", "FilterBar"]


class CommandBar(QWidget):
    """Top-level navigation buttons."""

    def __init__(
        self,
        state: ApplicationState,
        navigate: Callable[[str], object],
        parent: Optional[QWidget] = None,
        *,
        back: Optional[Callable[[], object]] = None,
    ) -> None:
        super().__init__(parent)
        self.setObjectName("commandBar")
        self._state = state
        layout = QHBoxLayout(self)
        layout.setContentsMargins(4, 4, 4, 4)
        self.buttons: dict[str, QPushButton] = {}
        self.back_button: Optional[QPushButton] = None
        if back is not None:
            self.back_button = QPushButton("Back", self)
            self.back_button.setObjectName("backButton")
            self.back_button.clicked.connect(lambda _checked=False: back())
            layout.addWidget(self.back_button)
        for fragment, text in (
            ("list", "List"),
            ("add", "Add"),
            ("options", "Options"),
            ("help", "Help"),
        ):
            btn = QPushButton(text, self)
            btn.setObjectName(f"{fragment}Button")
            btn.setProperty("class", "commandButton")
            btn.clicked.connect(lambda _checked=False, f=fragment: navigate(f))
            layout.addWidget(btn)
            self.buttons[fragment] = btn
        self.filter_toggle = QPushButton("Filter", self)
        self.filter_toggle.setObjectName("filterToggleButton")
        self.filter_toggle.setCheckable(True)
        self.filter_toggle.setChecked(state.get("show_filter_bar"))
        self.filter_toggle.toggled.connect(lambda on: state.set("show_filter_bar", on))
        layout.addStretch(1)
        layout.addWidget(self.filter_toggle)
        state.on_change("show_filter_bar", self._on_filter_bar)

    def _on_filter_bar(self, change: FieldChange) -> None:
        if self.filter_toggle.isChecked() != change.value:
            self.filter_toggle.setChecked(change.value)


class FilterBar(QWidget):
    """Filter criteria editor (text, type, starred-only)."""

    def __init__(
        self,
        state: ApplicationState,
        collection: CodeTrackCollection,
        bus: EventBus,
        *,
        init_filter: bool = False,
        parent: Optional[QWidget] = None,
    ) -> None:
        super().__init__(parent)
        self.setObjectName("filterBar")
        self._state = state
        self._collection = collection
        self._bus = bus

        layout = QHBoxLayout(self)
        layout.setContentsMargins(4, 0, 4, 4)
        self.text_edit = QLineEdit(self)
        self.text_edit.setPlaceholderText("Filter text")
        self.type_combo = QComboBox(self)
        self.type_combo.addItem("Any type", "")
        for item_type in ITEM_TYPES:
            self.type_combo.addItem(item_type, item_type)
        self.star_check = QCheckBox("Starred only", self)
        self.apply_button = QPushButton("Apply", self)
        self.clear_button = QPushButton("Clear", self)
        for w in (self.text_edit, self.type_combo, self.star_check, self.apply_button, self.clear_button):
            layout.addWidget(w)
        self.apply_button.clicked.connect(self.apply_filter)
        self.clear_button.clicked.connect(self.clear_filter)
        self.text_edit.returnPressed.connect(self.apply_filter)

        self.setVisible(state.get("show_filter_bar"))
        state.on_change("show_filter_bar", lambda c: self.setVisible(c.value))

        if init_filter:
            self.text_edit.setText(state.get("filter_text"))
            idx = self.type_combo.findData(state.get("filter_type"))
            self.type_combo.setCurrentIndex(max(idx, 0))
            self.star_check.setChecked(state.get("filter_star"))
            self.apply_filter()

    def apply_filter(self) -> None:
        text = self.text_edit.text().strip()
        item_type = self.type_combo.currentData() or ""
        starred = self.star_check.isChecked()
        self._state.set("filter_text", text)
        self._state.set("filter_type", item_type)
        self._state.set("filter_star", starred)
        active = bool(text or item_type or starred)
        self._state.set("filter_is_active", active)
        matching = self._collection.satisfying(text, item_type, starred) if active else None
        ids = None if matching is None else {i.id for i in matching}
        self._bus.publish(AppEvent.FILTER_APPLIED, ids)
        count = len(self._collection) if ids is None else len(ids)
        self._bus.publish(AppEvent.STATUS_MESSAGE, f"{count} of {len(self._collection)} items")

    def clear_filter(self) -> None:
        self.text_edit.clear()
        self.type_combo.setCurrentIndex(0)
        self.star_check.setChecked(False)
        self.apply_filter()
