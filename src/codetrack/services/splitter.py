"""Splitter sizing for the dual-pane layout.

The splitter location is the width of the secondary (list) pane in tenths of
the available width. Stored values are read by their leading integer, so
``"3.7"``, ``"7px"`` and ``3.0`` read as 3, 7 and 3. Anything outside
``0 < v < 10``, or with no leading integer, collapses to the default of 5.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any

from codetrack.config import settings

__all__ = ["PaneWeights", "normalize_splitter_location", "pane_weights"]

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


@dataclass(frozen=True)
class PaneWeights:
    secondary: int
    primary: int

    @property
    def secondary_percent(self) -> int:
        return self.secondary * 10

    @property
    def primary_percent(self) -> int:
        return self.primary * 10


def normalize_splitter_location(value: Any) -> int:
    if isinstance(value, bool):
        return settings.DEFAULT_SPLITTER_LOCATION
    if isinstance(value, int):
        location = value
    else:
        match = _LEADING_INT.match(str(value)) if value is not None else None
        if match is None:
            return settings.DEFAULT_SPLITTER_LOCATION
        location = int(match.group(1))
    return location if 0 < location < 10 else settings.DEFAULT_SPLITTER_LOCATION


def pane_weights(location: Any) -> PaneWeights:
    secondary = normalize_splitter_location(location)
    return PaneWeights(secondary=secondary, primary=10 - secondary)
