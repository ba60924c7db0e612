"""Observable field store.

A typed record with field-level change notification. Each field is declared
up front with a default value and a coercion callable; ``set`` coerces the
incoming value, compares it with the stored one and only stores + notifies on
an actual change. No-op sets never notify, which keeps handlers that call
``set`` from one another free of recompute loops.

Delivery is synchronous and re-entrant: a handler that sets another field
triggers nested notification inside the same call stack. Handlers are invoked
from a snapshot of the subscriber list so they may subscribe or cancel while a
notification is in flight.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Protocol

__all__ = [
    "FieldSpec",
    "FieldChange",
    "ChangeHandler",
    "Subscription",
    "ObservableStore",
]


@dataclass(frozen=True)
class FieldSpec:
    name: str
    default: Any
    coerce: Callable[[Any], Any]


@dataclass(frozen=True)
class FieldChange:
    name: str
    value: Any
    previous: Any


class ChangeHandler(Protocol):  # noqa: D401 - protocol signature docs implicit
    def __call__(self, change: FieldChange) -> None: ...  # pragma: no cover - structural


@dataclass
class Subscription:
    field: str
    handler: ChangeHandler
    active: bool = True

    def cancel(self) -> None:
        self.active = False


class ObservableStore:
    """Record of declared fields with per-field subscriptions."""

    def __init__(self, specs: Iterable[FieldSpec]) -> None:
        self._specs: Dict[str, FieldSpec] = {}
        self._values: Dict[str, Any] = {}
        self._subs: Dict[str, List[Subscription]] = {}
        for spec in specs:
            self._specs[spec.name] = spec
            self._values[spec.name] = spec.coerce(spec.default)

    # ------------------------------------------------------------------
    # Access
    # ------------------------------------------------------------------
    def get(self, name: str) -> Any:
        self._spec(name)
        return self._values[name]

    def set(self, name: str, value: Any) -> bool:
        """Store ``value`` for ``name``; return True when it changed."""
        spec = self._spec(name)
        new = spec.coerce(value)
        previous = self._values[name]
        if new == previous:
            return False
        self._values[name] = new
        self._notify(FieldChange(name=name, value=new, previous=previous))
        return True

    def snapshot(self) -> Dict[str, Any]:
        return dict(self._values)

    def fields(self) -> list[str]:
        return list(self._specs)

    def reset(self) -> None:
        """Restore every field to its default, notifying changed fields."""
        for name, spec in self._specs.items():
            self.set(name, spec.default)

    # ------------------------------------------------------------------
    # Subscriptions
    # ------------------------------------------------------------------
    def on_change(self, name: str, handler: ChangeHandler) -> Subscription:
        self._spec(name)
        sub = Subscription(field=name, handler=handler)
        self._subs.setdefault(name, []).append(sub)
        return sub

    def subscriber_count(self, name: str) -> int:
        return sum(1 for s in self._subs.get(name, ()) if s.active)

    def _notify(self, change: FieldChange) -> None:
        subs = list(self._subs.get(change.name, ()))
        for sub in subs:
            if sub.active:
                sub.handler(change)
        # Drop cancelled subscriptions lazily
        bucket = self._subs.get(change.name)
        if bucket and any(not s.active for s in bucket):
            self._subs[change.name] = [s for s in bucket if s.active]

    def _spec(self, name: str) -> FieldSpec:
        try:
            return self._specs[name]
        except KeyError:
            raise KeyError(f"Unknown state field: {name!r}") from None
