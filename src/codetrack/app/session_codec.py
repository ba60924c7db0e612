"""Encoding of ApplicationState fields into the preference store.

Every persisted field is an independent string entry; nothing is stored as a
single blob, so partial presence (first run: every key absent) is normal.

Decode rules
------------
* Default-true booleans (``use_dual_pane``, ``show_filter_bar``): ``"false"``
  decodes to False, anything else (absent included) to True.
* Default-false booleans (``show_diagnostics``, ``filter_is_active``,
  ``filter_star``): ``"true"`` decodes to True, anything else to False.
* ``splitter_location``: integer parse, then the splitter range clamp
  (non-numeric or out of range gives 5).
* Strings pass through; absent decodes to ``""``.
* ``current_state``: a known state token, else None (nothing to restore).

The asymmetric boolean defaults are long-standing first-run behavior: a fresh
install opens in dual-pane with the filter bar showing and diagnostics off.

Key names carry the historic ``jsct`` prefix so existing stores keep working.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from codetrack.config import settings
from codetrack.services.splitter import normalize_splitter_location
from codetrack.state.application_state import ApplicationState, AppStateName
from .preference_store import PreferenceStore

__all__ = [
    "FieldCodec",
    "FIELD_CODECS",
    "PREFERENCE_FIELDS",
    "encode_field",
    "decode_field",
    "read_field",
    "restore_preferences",
    "persist_session",
    "read_session",
    "clear_session",
]

_log = logging.getLogger(__name__)

P = settings.KEY_PREFIX


def encode_bool(value: bool) -> str:
    return "true" if value else "false"


def decode_default_true(raw: Optional[str]) -> bool:
    return raw != "false"


def decode_default_false(raw: Optional[str]) -> bool:
    return raw == "true"


def encode_text(value: Any) -> str:
    return "" if value is None else str(value)


def decode_text(raw: Optional[str]) -> str:
    return raw if raw is not None else ""


def encode_state(value: Any) -> str:
    return value.value if isinstance(value, AppStateName) else str(value)


def decode_state(raw: Optional[str]) -> Optional[AppStateName]:
    try:
        return AppStateName(raw)
    except ValueError:
        return None


@dataclass(frozen=True)
class FieldCodec:
    key: str
    encode: Callable[[Any], str]
    decode: Callable[[Optional[str]], Any]


FIELD_CODECS: Dict[str, FieldCodec] = {
    "current_state": FieldCodec(f"{P}LastCurrentState", encode_state, decode_state),
    "use_dual_pane": FieldCodec(f"{P}UseDualPane", encode_bool, decode_default_true),
    "last_browsed_model_id": FieldCodec(f"{P}LastModelID", encode_text, decode_text),
    "show_diagnostics": FieldCodec(f"{P}ShowDiagnostics", encode_bool, decode_default_false),
    "splitter_location": FieldCodec(
        f"{P}SplitterLocation", encode_text, normalize_splitter_location
    ),
    "filter_is_active": FieldCodec(f"{P}FilterWasActive", encode_bool, decode_default_false),
    "show_filter_bar": FieldCodec(f"{P}ShowFilterBar", encode_bool, decode_default_true),
    "filter_text": FieldCodec(f"{P}FilterText", encode_text, decode_text),
    "filter_type": FieldCodec(f"{P}FilterType", encode_text, decode_text),
    "filter_star": FieldCodec(f"{P}FilterStar", encode_bool, decode_default_false),
}

# Restored before any UI exists
PREFERENCE_FIELDS = ("use_dual_pane", "splitter_location", "show_diagnostics")


def encode_field(name: str, value: Any) -> str:
    return FIELD_CODECS[name].encode(value)


def decode_field(name: str, raw: Optional[str]) -> Any:
    return FIELD_CODECS[name].decode(raw)


def read_field(store: PreferenceStore, name: str) -> Any:
    codec = FIELD_CODECS[name]
    return codec.decode(store.get_item(codec.key))


def restore_preferences(store: PreferenceStore, state: ApplicationState) -> None:
    """Push the layout/diagnostics preferences from the store into ``state``."""
    for name in PREFERENCE_FIELDS:
        state.set(name, read_field(store, name))
    _log.debug(
        "preferences restored: use_dual_pane=%s splitter_location=%s show_diagnostics=%s",
        state.use_dual_pane,
        state.splitter_location,
        state.show_diagnostics,
    )


def persist_session(store: PreferenceStore, state: ApplicationState) -> None:
    """Write every persisted field's current value, one key at a time."""
    for name, codec in FIELD_CODECS.items():
        store.set_item(codec.key, codec.encode(state.get(name)))
    _log.debug("session state written to preference store")


def read_session(store: PreferenceStore) -> Dict[str, Any]:
    """Decode every persisted field (absent keys give their defaults)."""
    return {name: read_field(store, name) for name in FIELD_CODECS}


def clear_session(store: PreferenceStore) -> int:
    removed = 0
    for codec in FIELD_CODECS.values():
        if store.get_item(codec.key) is not None:
            store.remove_item(codec.key)
            removed += 1
    return removed
