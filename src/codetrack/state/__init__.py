"""Observable application state."""

from .observable import FieldChange, FieldSpec, ObservableStore, Subscription  # noqa: F401
from .application_state import (  # noqa: F401
    AppStateName,
    ApplicationState,
    Layout,
    reset_application_state,
)

__all__ = [
    "FieldChange",
    "FieldSpec",
    "ObservableStore",
    "Subscription",
    "AppStateName",
    "ApplicationState",
    "Layout",
    "reset_application_state",
]
