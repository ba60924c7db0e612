"""Service registry for application-wide singletons.

Bootstrap registers the shared objects (application state, event bus,
preference store, item collection, router, diagnostics) under string
keys; views and the CLI look them up instead of importing module globals.

Usage pattern:
    from codetrack.services.service_locator import services
    services.register("event_bus", EventBus())
    bus = services.get("event_bus")

In tests:
    with services.override_context(event_bus=FakeBus()):
        ...
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Dict, Generator, Iterable, Type, TypeVar

T = TypeVar("T")

__all__ = ["ServiceLocator", "services", "ServiceAlreadyRegisteredError", "ServiceNotFoundError"]

_MISSING = object()


class ServiceAlreadyRegisteredError(RuntimeError):
    """Raised when registering an existing key without allow_override."""


class ServiceNotFoundError(KeyError):
    """Raised when a requested service key is not present."""


class ServiceLocator:
    def __init__(self) -> None:
        self._services: Dict[str, Any] = {}

    def register(self, key: str, value: Any, *, allow_override: bool = False) -> None:
        if key in self._services and not allow_override:
            raise ServiceAlreadyRegisteredError(f"Service '{key}' already registered")
        self._services[key] = value

    def get(self, key: str) -> Any:
        try:
            return self._services[key]
        except KeyError:
            raise ServiceNotFoundError(key) from None

    def get_typed(self, key: str, expected_type: Type[T]) -> T:
        """Retrieve a service and check it is an ``expected_type`` instance."""
        value = self.get(key)
        if not isinstance(value, expected_type):
            raise TypeError(
                f"Service '{key}' expected type {expected_type!r} but got {type(value)!r}"
            )
        return value

    def try_get(self, key: str, default: Any = None) -> Any:
        return self._services.get(key, default)

    @contextmanager
    def override_context(self, **overrides: Any) -> Generator[None, None, None]:
        """Temporarily replace services; previous values come back on exit."""
        previous = {key: self._services.get(key, _MISSING) for key in overrides}
        self._services.update(overrides)
        try:
            yield
        finally:
            for key, prior in previous.items():
                if prior is _MISSING:
                    self._services.pop(key, None)
                else:
                    self._services[key] = prior

    def unregister(self, key: str) -> None:
        self._services.pop(key, None)

    def list_keys(self) -> Iterable[str]:
        return list(self._services.keys())

    def clear(self) -> None:
        self._services.clear()


services = ServiceLocator()
