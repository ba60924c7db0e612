"""Global configuration and constants for the CodeTrack application."""

from __future__ import annotations

import os
from typing import Final

DATA_DIR: Final = os.environ.get("CODETRACK_DATA_DIR", "data")
START_FRAGMENT: Final = os.environ.get("CODETRACK_START_FRAGMENT", "")

# Persisted files (both live in DATA_DIR)
STORE_FILENAME: Final = "session_store.json"
ITEMS_FILENAME: Final = "codetrack_items.json"

# Every persisted session key carries this prefix; existing stores depend on it
KEY_PREFIX: Final = "jsct"

# Layout constants (not configurable at runtime)
DUAL_PANE_MIN_WIDTH: Final = 700
DEFAULT_SPLITTER_LOCATION: Final = 5
SCROLL_TOP_OFFSET: Final = 40  # px between the top of the list window and the active row

LOCK_NAME: Final = "codetrack.lock"
