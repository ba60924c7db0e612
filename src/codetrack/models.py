"""Tracked items and their collection.

``CodeTrackCollection`` keeps items ordered by their ``order`` number and
persists them to a JSON file in the data directory. Loading goes through
``fetch(on_success, on_failure)`` so callers treat it as the one asynchronous
boundary of startup; an unreadable file is reported through ``on_failure``.
"""

from __future__ import annotations

import json
import logging
import re
import uuid
from dataclasses import asdict, dataclass, field
from importlib import resources
from pathlib import Path
from typing import Any, Callable, Dict, Iterator, List, Optional

from codetrack.config import settings
from codetrack.errors import ItemValidationError

__all__ = ["ITEM_TYPES", "CodeTrackItem", "CodeTrackCollection", "validate_item"]

_log = logging.getLogger(__name__)

ITEM_TYPES = ("tip", "snippet", "link", "note")

_URL_RE = re.compile(r"^(https?|ftp)://[^\s/?#@]+(:\d+)?(/[^\s]*)?$", re.IGNORECASE)

Scheduler = Callable[[Callable[[], None]], None]


def _run_now(fn: Callable[[], None]) -> None:
    fn()


@dataclass
class CodeTrackItem:
    id: str
    title: str
    descrip: str = ""
    type: str = "tip"
    url: str = ""
    order: int = 1
    tagged: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CodeTrackItem":
        return cls(
            id=str(data["id"]),
            title=str(data.get("title", "")),
            descrip=str(data.get("descrip", "")),
            type=str(data.get("type", "tip")),
            url=str(data.get("url", "")),
            order=int(data.get("order", 1)),
            tagged=bool(data.get("tagged", False)),
        )

    def matches(self, text: str = "", item_type: str = "", starred_only: bool = False) -> bool:
        if starred_only and not self.tagged:
            return False
        if item_type and self.type != item_type:
            return False
        if text:
            needle = text.lower()
            return needle in self.title.lower() or needle in self.descrip.lower()
        return True


def validate_item(title: str, url: str = "") -> None:
    if not title.strip():
        raise ItemValidationError("Title value is required", field="title")
    if url.strip() and not _URL_RE.match(url.strip()):
        raise ItemValidationError("URL value invalid", field="url")


@dataclass
class CodeTrackCollection:
    base_dir: Optional[Path] = None
    scheduler: Scheduler = _run_now
    _items: Dict[str, CodeTrackItem] = field(default_factory=dict)
    _added: List[Callable[[CodeTrackItem], None]] = field(default_factory=list)
    _removed: List[Callable[[CodeTrackItem], None]] = field(default_factory=list)

    @property
    def path(self) -> Optional[Path]:
        if self.base_dir is None:
            return None
        return Path(self.base_dir) / settings.ITEMS_FILENAME

    # Collection protocol ---------------------------------------------
    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[CodeTrackItem]:
        return iter(sorted(self._items.values(), key=lambda i: i.order))

    def get(self, item_id: str) -> Optional[CodeTrackItem]:
        return self._items.get(str(item_id))

    def next_order(self) -> int:
        if not self._items:
            return 1
        return max(i.order for i in self._items.values()) + 1

    def tagged(self) -> List[CodeTrackItem]:
        return [i for i in self if i.tagged]

    def satisfying(
        self, text: str = "", item_type: str = "", starred_only: bool = False
    ) -> List[CodeTrackItem]:
        return [i for i in self if i.matches(text, item_type, starred_only)]

    # Notifications ----------------------------------------------------
    def on_added(self, handler: Callable[[CodeTrackItem], None]) -> None:
        self._added.append(handler)

    def on_removed(self, handler: Callable[[CodeTrackItem], None]) -> None:
        self._removed.append(handler)

    # Mutation ---------------------------------------------------------
    def create(self, **fields: Any) -> CodeTrackItem:
        title = str(fields.get("title", ""))
        url = str(fields.get("url", ""))
        validate_item(title, url)
        item = CodeTrackItem(
            id=uuid.uuid4().hex,
            title=title,
            descrip=str(fields.get("descrip", "")),
            type=str(fields.get("type", "tip")),
            url=url,
            order=self.next_order(),
            tagged=bool(fields.get("tagged", False)),
        )
        self._items[item.id] = item
        self._save()
        for handler in list(self._added):
            handler(item)
        return item

    def update(self, item_id: str, **fields: Any) -> CodeTrackItem:
        item = self._items[str(item_id)]
        title = str(fields.get("title", item.title))
        url = str(fields.get("url", item.url))
        validate_item(title, url)
        item.title = title
        item.url = url
        item.descrip = str(fields.get("descrip", item.descrip))
        item.type = str(fields.get("type", item.type))
        self._save()
        return item

    def toggle_tagged(self, item_id: str) -> bool:
        item = self._items[str(item_id)]
        item.tagged = not item.tagged
        self._save()
        return item.tagged

    def remove(self, item_id: str) -> Optional[CodeTrackItem]:
        item = self._items.pop(str(item_id), None)
        if item is not None:
            self._save()
            for handler in list(self._removed):
                handler(item)
        return item

    # Persistence ------------------------------------------------------
    def fetch(self, on_success: Callable[[], None], on_failure: Callable[[Exception], None]) -> None:
        """Load items, then call exactly one of the callbacks."""

        def _load() -> None:
            try:
                self._items = {i.id: i for i in self._read()}
            except (OSError, ValueError, KeyError, TypeError) as exc:
                _log.error("item load failed: %s", exc)
                on_failure(exc)
                return
            _log.debug("collection loaded with %d items", len(self._items))
            on_success()

        self.scheduler(_load)

    def create_seed_data(self, on_done: Callable[[], None]) -> None:
        """Populate an empty collection with the bundled sample items."""

        def _seed() -> None:
            seed = json.loads(
                resources.files("codetrack").joinpath("seed_data.json").read_text(encoding="utf-8")
            )
            for entry in seed:
                self.create(**entry)
            _log.debug("seed data created (%d items)", len(self._items))
            on_done()

        self.scheduler(_seed)

    def _read(self) -> List[CodeTrackItem]:
        path = self.path
        if path is None or not path.exists():
            return []
        data = json.loads(path.read_text(encoding="utf-8"))
        return [CodeTrackItem.from_dict(d) for d in data.get("items", [])]

    def _save(self) -> None:
        path = self.path
        if path is None:
            return
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp = path.with_suffix(path.suffix + ".tmp")
        payload = {"items": [i.to_dict() for i in self]}
        tmp.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")
        tmp.replace(path)
