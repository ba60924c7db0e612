"""Application state holder.

Holds the small set of session/layout/filter fields that drive the app. The
router sets ``current_state``, the layout decision engine is the only writer
of ``current_layout``, options and filter widgets write the preference and
filter fields. Bootstrap creates the live instance and registers it as the
``app_state`` service; tests build their own with ``ApplicationState()``.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from codetrack.config import settings
from codetrack.services.splitter import normalize_splitter_location
from .observable import FieldChange, FieldSpec, ObservableStore, Subscription

__all__ = [
    "AppStateName",
    "Layout",
    "ApplicationState",
    "reset_application_state",
    "FieldChange",
]


class AppStateName(str, Enum):
    LIST = "list"
    BROWSE_EDIT = "browseEdit"
    ADD = "add"
    GLOBAL_OPTIONS = "globalOptions"
    HELP = "help"


class Layout(str, Enum):
    SINGLE_PANE = "singlePane"
    DUAL_PANE = "dualPane"


def _as_bool(value: Any) -> bool:
    if not isinstance(value, bool):
        raise TypeError(f"Expected bool, got {type(value).__name__}")
    return value


def _as_text(value: Any) -> str:
    return "" if value is None else str(value)


def _as_state(value: Any) -> AppStateName:
    return value if isinstance(value, AppStateName) else AppStateName(value)


def _as_layout(value: Any) -> Layout:
    return value if isinstance(value, Layout) else Layout(value)


_FIELDS = (
    FieldSpec("current_state", AppStateName.LIST, _as_state),
    FieldSpec("current_layout", Layout.SINGLE_PANE, _as_layout),
    # user preferences, set through the options view
    FieldSpec("use_dual_pane", True, _as_bool),
    FieldSpec("splitter_location", settings.DEFAULT_SPLITTER_LOCATION, normalize_splitter_location),
    FieldSpec("show_diagnostics", False, _as_bool),
    # filter
    FieldSpec("show_filter_bar", True, _as_bool),
    FieldSpec("filter_is_active", False, _as_bool),
    FieldSpec("filter_text", "", _as_text),
    FieldSpec("filter_type", "", _as_text),
    FieldSpec("filter_star", False, _as_bool),
    # session continuity
    FieldSpec("last_browsed_model_id", "", _as_text),
    # not persisted; true only for the session that created the seed data
    FieldSpec("first_use", False, _as_bool),
)


class ApplicationState(ObservableStore):
    """Observable application state record.

    Field values are read with ``get(name)`` or the matching property; writes
    always go through ``set`` so change notification fires.
    """

    def __init__(self) -> None:
        super().__init__(_FIELDS)

    # Convenience accessors ---------------------------------------------
    @property
    def current_state(self) -> AppStateName:
        return self.get("current_state")

    @property
    def current_layout(self) -> Layout:
        return self.get("current_layout")

    @property
    def use_dual_pane(self) -> bool:
        return self.get("use_dual_pane")

    @property
    def splitter_location(self) -> int:
        return self.get("splitter_location")

    @property
    def show_diagnostics(self) -> bool:
        return self.get("show_diagnostics")

    @property
    def last_browsed_model_id(self) -> str:
        return self.get("last_browsed_model_id")

    @property
    def first_use(self) -> bool:
        return self.get("first_use")

    def is_dual_pane(self) -> bool:
        return self.current_layout is Layout.DUAL_PANE

    def watch(self, names: tuple[str, ...], handler) -> list[Subscription]:
        """Subscribe one handler to several fields."""
        return [self.on_change(name, handler) for name in names]


def reset_application_state() -> ApplicationState:
    """Fresh state with every field at its default (bootstrap and tests)."""
    return ApplicationState()
