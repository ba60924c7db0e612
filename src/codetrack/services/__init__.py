"""Service layer exports.

Responsibilities:
 - Dependency/service locator (`services`)
 - EventBus publish/subscribe core

Layout, splitter and list synchronization services are imported from their
modules directly; they depend on the state package, which itself imports
``services.splitter``.
"""

from .service_locator import services, ServiceLocator  # noqa: F401
from .event_bus import EventBus, AppEvent  # noqa: F401

__all__ = [
    "services",
    "ServiceLocator",
    "EventBus",
    "AppEvent",
]
