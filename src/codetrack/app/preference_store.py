"""Persisted preference store.

Durable, flat, string-keyed key/value storage. It has no logic of its own: the
session codec decides what the strings mean. Values are always strings; a
missing key reads as ``None``.

``JsonPreferenceStore`` keeps one JSON object in the data directory and
rewrites it atomically (temp file + replace) on every write, so a value is
durable as soon as ``set_item`` returns. A corrupt or unreadable file reads as
an empty store (first run) instead of raising.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Dict, Iterable, Optional, Protocol

from codetrack.config import settings

__all__ = ["PreferenceStore", "JsonPreferenceStore", "MemoryPreferenceStore"]

_log = logging.getLogger(__name__)


class PreferenceStore(Protocol):
    def get_item(self, key: str) -> Optional[str]: ...

    def set_item(self, key: str, value: str) -> None: ...

    def remove_item(self, key: str) -> None: ...

    def keys(self) -> Iterable[str]: ...

    def is_available(self) -> bool: ...


class MemoryPreferenceStore:
    """In-process store; used headless and in tests."""

    def __init__(self, initial: Dict[str, str] | None = None, *, available: bool = True) -> None:
        self._data: Dict[str, str] = dict(initial or {})
        self._available = available

    def get_item(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._data[key] = str(value)

    def remove_item(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> Iterable[str]:
        return list(self._data)

    def is_available(self) -> bool:
        return self._available

    def as_dict(self) -> Dict[str, str]:
        return dict(self._data)


class JsonPreferenceStore:
    def __init__(self, base_dir: str | Path | None = None) -> None:
        base = Path(base_dir) if base_dir else Path(settings.DATA_DIR)
        self.path = base / settings.STORE_FILENAME
        self._data: Dict[str, str] = self._load()

    def _load(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            _log.warning("Unreadable preference store at %s; starting empty", self.path)
            return {}
        if not isinstance(data, dict):
            return {}
        # Only string values are meaningful; anything else is dropped
        return {str(k): v for k, v in data.items() if isinstance(v, str)}

    def _flush(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp.write_text(json.dumps(self._data, indent=2, ensure_ascii=False), encoding="utf-8")
        tmp.replace(self.path)

    def get_item(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._data[key] = str(value)
        self._flush()

    def remove_item(self, key: str) -> None:
        if self._data.pop(key, None) is not None:
            self._flush()

    def keys(self) -> Iterable[str]:
        return list(self._data)

    def is_available(self) -> bool:
        """True when the data directory exists (or can be created) and is writable."""
        directory = self.path.parent
        try:
            directory.mkdir(parents=True, exist_ok=True)
        except OSError:
            return False
        return os.access(directory, os.W_OK)
