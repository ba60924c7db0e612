"""Persistent summary list view.

Scrollable list of every tracked item, one row per item. The view is created
once and then only reparented: it sits in the secondary pane in dual-pane
layout and in the primary pane for the ``list`` state in single-pane layout.
Rows are built once from the collection; afterwards only additions and
removals are applied, so no row bookkeeping or teardown is needed.

Rows carry the object name ``ct-<id>`` and a ``browsed`` dynamic property that
the stylesheet uses for the highlight cue.
"""

from __future__ import annotations

from typing import Callable, Dict, Iterable, Optional, Tuple

from PyQt6.QtCore import Qt, pyqtSignal
from PyQt6.QtWidgets import QFrame, QLabel, QScrollArea, QVBoxLayout, QWidget

from codetrack.models import CodeTrackItem

__all__ = ["SummaryRow", "SummaryListView"]


class SummaryRow(QFrame):
    clicked = pyqtSignal(str)

    def __init__(self, item: CodeTrackItem, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.item_id = item.id
        self.setObjectName(f"ct-{item.id}")
        self.setProperty("browsed", False)
        self.setCursor(Qt.CursorShape.PointingHandCursor)
        layout = QVBoxLayout(self)
        layout.setContentsMargins(8, 4, 8, 4)
        self.title_label = QLabel()
        self.title_label.setObjectName("summaryRowTitle")
        layout.addWidget(self.title_label)
        self.refresh(item)

    def refresh(self, item: CodeTrackItem) -> None:
        star = "★ " if item.tagged else ""
        self.title_label.setText(f"{star}{item.title}")
        self.setToolTip(f"{item.type}: {item.descrip}")

    def set_browsed(self, browsed: bool) -> None:
        if self.property("browsed") == browsed:
            return
        self.setProperty("browsed", browsed)
        # re-polish so the stylesheet picks up the property change
        self.style().unpolish(self)
        self.style().polish(self)

    def mousePressEvent(self, event):  # noqa: N802 - Qt override
        if event.button() == Qt.MouseButton.LeftButton:
            self.clicked.emit(self.item_id)
        super().mousePressEvent(event)


class SummaryListView(QScrollArea):
    """Summary list with the scroll/highlight surface used by list sync."""

    def __init__(
        self,
        items: Iterable[CodeTrackItem],
        on_open: Callable[[str], None],
        parent: Optional[QWidget] = None,
    ) -> None:
        super().__init__(parent)
        self.setObjectName("codeTracksList")
        self.setWidgetResizable(True)
        self._on_open = on_open
        self._rows: Dict[str, SummaryRow] = {}
        self._content = QWidget()
        self._layout = QVBoxLayout(self._content)
        self._layout.setContentsMargins(0, 0, 0, 0)
        self._layout.setSpacing(0)
        self._layout.addStretch(1)
        self.setWidget(self._content)
        for item in items:
            self.add_item(item)

    # Rows -------------------------------------------------------------
    def add_item(self, item: CodeTrackItem) -> SummaryRow:
        row = SummaryRow(item, self._content)
        row.clicked.connect(self._on_open)
        # keep the trailing stretch last
        self._layout.insertWidget(self._layout.count() - 1, row)
        self._rows[item.id] = row
        return row

    def remove_item(self, item: CodeTrackItem) -> None:
        row = self._rows.pop(item.id, None)
        if row is not None:
            self._layout.removeWidget(row)
            row.deleteLater()

    def refresh_item(self, item: CodeTrackItem) -> None:
        row = self._rows.get(item.id)
        if row is not None:
            row.refresh(item)

    def apply_filter(self, visible_ids: Optional[set[str]]) -> None:
        """Show only ``visible_ids`` (None shows every row)."""
        for item_id, row in self._rows.items():
            row.setVisible(visible_ids is None or item_id in visible_ids)

    def row(self, item_id: str) -> Optional[SummaryRow]:
        return self._rows.get(item_id)

    def row_count(self) -> int:
        return len(self._rows)

    def highlighted_ids(self) -> list[str]:
        return [i for i, r in self._rows.items() if r.property("browsed")]

    # List sync surface ------------------------------------------------
    def is_visible(self) -> bool:
        return self.isVisible()

    def clear_highlights(self) -> None:
        for row in self._rows.values():
            row.set_browsed(False)

    def mark_row(self, item_id: str) -> None:
        row = self._rows.get(item_id)
        if row is not None:
            row.set_browsed(True)

    def row_extent(self, item_id: str) -> Optional[Tuple[int, int]]:
        row = self._rows.get(item_id)
        if row is None or row.isHidden():
            return None
        return row.y(), row.height()

    def viewport_height(self) -> int:
        return self.viewport().height()

    def scroll_position(self) -> int:
        return self.verticalScrollBar().value()

    def set_scroll_position(self, position: int) -> None:
        self.verticalScrollBar().setValue(position)
