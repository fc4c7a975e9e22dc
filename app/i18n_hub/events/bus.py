"""In-process publish/subscribe bus.

Each Registry owns one EventBus. Subscribers are kept per event name in
subscription order and called synchronously when an event is emitted. A
subscriber that raises is logged and skipped; the remaining subscribers
still run.
"""

from threading import Lock
from typing import Any, Callable, Dict, List

from i18n_hub.core.logging import get_module_logger
from i18n_hub.events.models import Event

logger = get_module_logger()

EventCallback = Callable[..., Any]

# Subscribers registered for this name receive every event as an Event record.
WILDCARD = "*"


class EventBus:
    """Per-event ordered set of callbacks with isolated delivery."""

    def __init__(self) -> None:
        self._subscribers: Dict[str, List[EventCallback]] = {}
        self._lock = Lock()

    def subscribe(self, event_type: str, callback: EventCallback) -> None:
        """Register a callback for an event type.

        Subscribing the same callback twice is a no-op, matching set
        semantics.

        Args:
            event_type: Event name (e.g., 'locale-changed') or WILDCARD.
            callback: Called with the emitted positional arguments, or with
                an Event record for WILDCARD subscribers.
        """
        with self._lock:
            callbacks = self._subscribers.setdefault(event_type, [])
            if callback in callbacks:
                return
            callbacks.append(callback)
        logger.debug(
            "subscribed_event_callback",
            event_type=event_type,
            callback=getattr(callback, "__name__", "unknown"),
            total_callbacks=len(callbacks),
        )

    def unsubscribe(self, event_type: str, callback: EventCallback) -> None:
        """Remove a callback. Unknown callbacks are ignored.

        Args:
            event_type: Event name the callback was subscribed to.
            callback: The callback to remove.
        """
        with self._lock:
            callbacks = self._subscribers.get(event_type)
            if callbacks and callback in callbacks:
                callbacks.remove(callback)

    def once(self, event_type: str, callback: EventCallback) -> EventCallback:
        """Subscribe a callback that is removed after its first delivery.

        Args:
            event_type: Event name.
            callback: Called once with the emitted arguments.

        Returns:
            The wrapper actually subscribed, usable with unsubscribe().
        """

        def _once(*args: Any) -> Any:
            self.unsubscribe(event_type, _once)
            return callback(*args)

        _once.__name__ = getattr(callback, "__name__", "once")
        self.subscribe(event_type, _once)
        return _once

    def emit(self, event_type: str, *args: Any) -> List[Any]:
        """Deliver an event to every subscriber.

        Args:
            event_type: Event name.
            *args: Positional arguments passed to each callback.

        Returns:
            List of return values from callbacks that did not raise.
        """
        with self._lock:
            callbacks = list(self._subscribers.get(event_type, []))
            wildcard = list(self._subscribers.get(WILDCARD, []))

        results = []
        for callback in callbacks:
            try:
                results.append(callback(*args))
            except Exception as e:
                logger.error(
                    "event_callback_failed",
                    callback=getattr(callback, "__name__", "unknown"),
                    event_type=event_type,
                    error=str(e),
                )

        if wildcard:
            event = Event(event_type=event_type, args=tuple(args))
            for callback in wildcard:
                try:
                    callback(event)
                except Exception as e:
                    logger.error(
                        "event_callback_failed",
                        callback=getattr(callback, "__name__", "unknown"),
                        event_type=event_type,
                        error=str(e),
                        correlation_id=str(event.correlation_id),
                    )

        return results

    def get_subscribers(self, event_type: str) -> List[EventCallback]:
        """Get the callbacks subscribed to an event type.

        Args:
            event_type: Event name.

        Returns:
            Copy of the subscriber list, in subscription order.
        """
        with self._lock:
            return list(self._subscribers.get(event_type, []))

    def get_event_types(self) -> List[str]:
        """Get the event names that have at least one subscriber."""
        with self._lock:
            return [name for name, cbs in self._subscribers.items() if cbs]

    def clear(self) -> None:
        """Remove every subscriber."""
        with self._lock:
            self._subscribers.clear()
        logger.debug("cleared_event_subscribers")
