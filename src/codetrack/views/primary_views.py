"""Views hosted by the primary pane: help, browse/edit, add and options."""

from __future__ import annotations

from typing import Callable, Optional

from PyQt6.QtWidgets import (
    QCheckBox,
    QComboBox,
    QFormLayout,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QPlainTextEdit,
    QPushButton,
    QSpinBox,
    QVBoxLayout,
    QWidget,
)

from codetrack.errors import ItemValidationError
from codetrack.models import ITEM_TYPES, CodeTrackCollection, CodeTrackItem
from codetrack.services.event_bus import AppEvent, EventBus
from codetrack.state.application_state import ApplicationState

__all__ = ["HelpView", "ItemForm", "DetailView", "AddView", "OptionsView"]

WELCOME_TEXT = (
    "<h2>Welcome to CodeTrack</h2>"
    "<p>Some sample items were created so you have something to look at. "
    "Select an item in the list to browse or edit it.</p>"
)
HELP_TEXT = (
    "<h2>CodeTrack help</h2>"
    "<p>On wide windows the list stays on the left and the selected item shows "
    "on the right. Turn this off in Options to always use a single pane.</p>"
    "<p>Your layout, filter and last viewed item are restored on the next start.</p>"
)


class HelpView(QWidget):
    def __init__(self, state: ApplicationState, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.setObjectName("helpView")
        self._state = state
        layout = QVBoxLayout(self)
        self.label = QLabel(self)
        self.label.setWordWrap(True)
        layout.addWidget(self.label)
        layout.addStretch(1)
        self.refresh()

    def refresh(self) -> None:
        self.label.setText(WELCOME_TEXT if self._state.first_use else HELP_TEXT)


class ItemForm(QWidget):
    """Title/description/type/url editor shared by detail and add views."""

    def __init__(self, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        form = QFormLayout(self)
        self.title_edit = QLineEdit(self)
        self.descrip_edit = QPlainTextEdit(self)
        self.type_combo = QComboBox(self)
        for item_type in ITEM_TYPES:
            self.type_combo.addItem(item_type, item_type)
        self.url_edit = QLineEdit(self)
        self.error_label = QLabel(self)
        self.error_label.setObjectName("formError")
        form.addRow("Title", self.title_edit)
        form.addRow("Description", self.descrip_edit)
        form.addRow("Type", self.type_combo)
        form.addRow("URL", self.url_edit)
        form.addRow(self.error_label)

    def load(self, item: Optional[CodeTrackItem]) -> None:
        self.error_label.clear()
        self.title_edit.setText(item.title if item else "")
        self.descrip_edit.setPlainText(item.descrip if item else "")
        idx = self.type_combo.findData(item.type) if item else 0
        self.type_combo.setCurrentIndex(max(idx, 0))
        self.url_edit.setText(item.url if item else "")

    def values(self) -> dict[str, str]:
        return {
            "title": self.title_edit.text(),
            "descrip": self.descrip_edit.toPlainText(),
            "type": self.type_combo.currentData() or "tip",
            "url": self.url_edit.text(),
        }

    def show_error(self, exc: ItemValidationError) -> None:
        self.error_label.setText(str(exc))


class DetailView(QWidget):
    """Browse/edit view for one item; shows a notice for unknown ids."""

    def __init__(
        self,
        collection: CodeTrackCollection,
        bus: EventBus,
        navigate: Callable[[str], object],
        parent: Optional[QWidget] = None,
    ) -> None:
        super().__init__(parent)
        self.setObjectName("detailView")
        self._collection = collection
        self._bus = bus
        self._navigate = navigate
        self._item: Optional[CodeTrackItem] = None
        layout = QVBoxLayout(self)
        self.missing_label = QLabel("That item no longer exists.", self)
        self.form = ItemForm(self)
        buttons = QHBoxLayout()
        self.save_button = QPushButton("Save", self)
        self.star_button = QPushButton("Star", self)
        self.delete_button = QPushButton("Delete", self)
        for b in (self.save_button, self.star_button, self.delete_button):
            buttons.addWidget(b)
        layout.addWidget(self.missing_label)
        layout.addWidget(self.form)
        layout.addLayout(buttons)
        layout.addStretch(1)
        self.save_button.clicked.connect(self.save)
        self.star_button.clicked.connect(self.toggle_star)
        self.delete_button.clicked.connect(self.delete)

    @property
    def item(self) -> Optional[CodeTrackItem]:
        return self._item

    def show_item(self, item_id: str) -> None:
        self._item = self._collection.get(item_id)
        found = self._item is not None
        self.missing_label.setVisible(not found)
        self.form.setVisible(found)
        for b in (self.save_button, self.star_button, self.delete_button):
            b.setEnabled(found)
        self.form.load(self._item)

    def save(self) -> None:
        if self._item is None:
            return
        try:
            self._collection.update(self._item.id, **self.form.values())
        except ItemValidationError as exc:
            self.form.show_error(exc)
            return
        self._bus.publish(AppEvent.STATUS_MESSAGE, "Saved")

    def toggle_star(self) -> None:
        if self._item is not None:
            self._collection.toggle_tagged(self._item.id)

    def delete(self) -> None:
        if self._item is None:
            return
        self._collection.remove(self._item.id)
        self._item = None
        self._bus.publish(AppEvent.STATUS_MESSAGE, "Item deleted")
        self._navigate("list")


class AddView(QWidget):
    def __init__(
        self,
        collection: CodeTrackCollection,
        bus: EventBus,
        navigate: Callable[[str], object],
        parent: Optional[QWidget] = None,
    ) -> None:
        super().__init__(parent)
        self.setObjectName("addView")
        self._collection = collection
        self._bus = bus
        self._navigate = navigate
        layout = QVBoxLayout(self)
        self.form = ItemForm(self)
        self.create_button = QPushButton("Create", self)
        layout.addWidget(self.form)
        layout.addWidget(self.create_button)
        layout.addStretch(1)
        self.create_button.clicked.connect(self.create)

    def reset(self) -> None:
        self.form.load(None)

    def create(self) -> Optional[CodeTrackItem]:
        try:
            item = self._collection.create(**self.form.values())
        except ItemValidationError as exc:
            self.form.show_error(exc)
            return None
        self._bus.publish(AppEvent.STATUS_MESSAGE, "Item added")
        self._navigate(f"edit/{item.id}")
        return item


class OptionsView(QWidget):
    """Global options; each control writes straight to the state holder."""

    def __init__(self, state: ApplicationState, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.setObjectName("optionsView")
        self._state = state
        form = QFormLayout(self)
        self.dual_pane_check = QCheckBox("Use dual-pane layout on wide windows", self)
        self.splitter_spin = QSpinBox(self)
        self.splitter_spin.setRange(1, 9)
        self.splitter_spin.setSuffix("0% list width")
        self.diagnostics_check = QCheckBox("Write diagnostics to the log", self)
        form.addRow(self.dual_pane_check)
        form.addRow("Splitter", self.splitter_spin)
        form.addRow(self.diagnostics_check)
        self.refresh()
        self.dual_pane_check.toggled.connect(lambda on: state.set("use_dual_pane", on))
        self.splitter_spin.valueChanged.connect(lambda v: state.set("splitter_location", v))
        self.diagnostics_check.toggled.connect(lambda on: state.set("show_diagnostics", on))

    def refresh(self) -> None:
        self.dual_pane_check.setChecked(self._state.use_dual_pane)
        self.splitter_spin.setValue(self._state.splitter_location)
        self.diagnostics_check.setChecked(self._state.show_diagnostics)
