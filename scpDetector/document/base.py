"""Capability interface between the detector and a hosting document."""

from __future__ import annotations

from dataclasses import dataclass
from threading import Lock
from typing import Any, Callable, Iterable, List, Optional, Protocol

ChangeCallback = Callable[[], None]


@dataclass(frozen=True)
class LinkCandidate:
    """A hyperlink as seen by the link scanner."""

    href: Optional[str]
    text: str
    element: Any = None
    excluded: bool = False


@dataclass(frozen=True)
class TextCandidate:
    """A prose-bearing element as seen by the inline scanner."""

    text: str
    element: Any = None
    excluded: bool = False


class ChangeSubscription(Protocol):
    def disconnect(self) -> None: ...


class DocumentSource(Protocol):
    """What the detector needs from a document.

    ``enumerate_text_candidates`` must be lazy: the scanner stops consuming it
    once its node budget is spent. ``subscribe_to_changes`` returns ``None``
    when the document cannot report changes.
    """

    @property
    def location(self) -> str: ...

    @property
    def base_url(self) -> str: ...

    @property
    def title(self) -> str: ...

    def enumerate_links(self, exclude_selectors: str) -> Iterable[LinkCandidate]: ...

    def enumerate_text_candidates(
        self, include_selectors: str, exclude_selectors: str
    ) -> Iterable[TextCandidate]: ...

    def subscribe_to_changes(self, callback: ChangeCallback) -> Optional[ChangeSubscription]: ...

    def query_text(self, selector: str) -> List[str]: ...


class _Subscription:
    def __init__(self, notifier: "ChangeNotifier", callback: ChangeCallback) -> None:
        self._notifier = notifier
        self._callback = callback
        self.active = True

    def disconnect(self) -> None:
        if self.active:
            self.active = False
            self._notifier._remove(self._callback)


class ChangeNotifier:
    """Fan-out of change notifications to subscribed callbacks."""

    def __init__(self, *, observable: bool = True) -> None:
        self._observable = observable
        self._callbacks: List[ChangeCallback] = []
        self._lock = Lock()

    def subscribe_to_changes(self, callback: ChangeCallback) -> Optional[_Subscription]:
        if not self._observable:
            return None
        with self._lock:
            self._callbacks.append(callback)
        return _Subscription(self, callback)

    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._callbacks)

    def notify_changed(self) -> None:
        with self._lock:
            callbacks = list(self._callbacks)
        for callback in callbacks:
            callback()

    def _remove(self, callback: ChangeCallback) -> None:
        with self._lock:
            if callback in self._callbacks:
                self._callbacks.remove(callback)


__all__ = [
    "ChangeCallback",
    "ChangeNotifier",
    "ChangeSubscription",
    "DocumentSource",
    "LinkCandidate",
    "TextCandidate",
]
