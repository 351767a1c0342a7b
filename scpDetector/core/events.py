"""Typed publish/subscribe for detector events."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from threading import Lock
from typing import Any, Callable, ClassVar, Dict, List, Union

from scpDetector.core.models import DetectorResults
from scpDetector.errors import ErrorHandler, NullErrorHandler


class EventKind(str, Enum):
    UPDATE = "update"


@dataclass(frozen=True)
class UpdateEvent:
    """Emitted after every successful compute cycle."""

    kind: ClassVar[EventKind] = EventKind.UPDATE
    results: DetectorResults


# New event kinds join this union with their own payload dataclass.
DetectorEvent = Union[UpdateEvent]

Listener = Callable[[Any], None]


def coerce_kind(event: EventKind | str) -> EventKind:
    try:
        return EventKind(event)
    except ValueError:
        raise ValueError(f"Unsupported detector event: {event!r}") from None


class EventBus:
    """Listener registry keyed by :class:`EventKind`.

    Listeners receive the event payload (``DetectorResults`` for ``update``).
    A listener that raises is reported to the error handler and does not stop
    delivery to the remaining listeners.
    """

    def __init__(self, error_handler: ErrorHandler | None = None) -> None:
        self._listeners: Dict[EventKind, List[Listener]] = {}
        self._errors = error_handler or NullErrorHandler()
        self._lock = Lock()

    def on(self, event: EventKind | str, callback: Listener) -> Callable[[], None]:
        kind = coerce_kind(event)
        with self._lock:
            listeners = self._listeners.setdefault(kind, [])
            if callback not in listeners:
                listeners.append(callback)

        def unsubscribe() -> None:
            self.off(kind, callback)

        return unsubscribe

    def off(self, event: EventKind | str, callback: Listener) -> None:
        kind = coerce_kind(event)
        with self._lock:
            listeners = self._listeners.get(kind)
            if listeners and callback in listeners:
                listeners.remove(callback)

    def emit(self, event: DetectorEvent) -> int:
        """Deliver ``event`` and return how many listeners were called."""

        with self._lock:
            listeners = list(self._listeners.get(event.kind, ()))
        for callback in listeners:
            try:
                callback(_payload(event))
            except Exception as exc:
                self._errors.handle_error(exc, {"action": "emit", "event": event.kind.value})
        return len(listeners)

    def listener_count(self, event: EventKind | str | None = None) -> int:
        with self._lock:
            if event is None:
                return sum(len(items) for items in self._listeners.values())
            return len(self._listeners.get(coerce_kind(event), ()))

    def clear(self) -> None:
        with self._lock:
            self._listeners = {}


def _payload(event: DetectorEvent) -> Any:
    if isinstance(event, UpdateEvent):
        return event.results
    return event


__all__ = ["DetectorEvent", "EventBus", "EventKind", "UpdateEvent", "coerce_kind"]
