"""Application layer: bootstrap, session lifecycle and persisted preferences."""

from .bootstrap import AppContext, create_app, parse_safe_mode  # noqa: F401
from .preference_store import (  # noqa: F401
    JsonPreferenceStore,
    MemoryPreferenceStore,
    PreferenceStore,
)
from .session import Phase, SessionController  # noqa: F401

__all__ = [
    "AppContext",
    "create_app",
    "parse_safe_mode",
    "JsonPreferenceStore",
    "MemoryPreferenceStore",
    "PreferenceStore",
    "Phase",
    "SessionController",
]
