"""Registry event bus - lightweight in-process publish/subscribe.

Usage:

    from i18n_hub.events import EventBus

    bus = EventBus()
    bus.subscribe("locale-changed", lambda locale: print(locale))
    bus.emit("locale-changed", "fr")
"""

from i18n_hub.events.bus import WILDCARD, EventBus, EventCallback
from i18n_hub.events.models import Event

__all__ = [
    "Event",
    "EventBus",
    "EventCallback",
    "WILDCARD",
]
