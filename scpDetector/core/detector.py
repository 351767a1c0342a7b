"""Detector controller: owns state, debounces recomputation, notifies listeners."""

from __future__ import annotations

import threading
import time
from enum import Enum
from typing import Any, Callable, List, Mapping, Optional
from urllib.parse import urlsplit

from scpDetector.config import DetectorConfig, merge_config
from scpDetector.core.events import EventBus, EventKind, UpdateEvent
from scpDetector.core.models import DetectorResults, DetectorState, Entity, PageClassification
from scpDetector.core.page_classifier import classify_page
from scpDetector.core.scheduling import ScheduledTask, Scheduler, TimerScheduler
from scpDetector.document.base import ChangeSubscription, DocumentSource
from scpDetector.errors import (
    DocumentUnavailableError,
    ErrorHandler,
    Logger,
    LoggingErrorHandler,
    SubscriptionError,
)
from scpDetector.transforms.dedupe import dedupe_entities
from scpDetector.transforms.mentions import MentionScanner
from scpDetector.utils.log_json import NullLogger

Clock = Callable[[], float]

# Smallest step used to keep last_updated_at strictly increasing.
_TICK = 1e-6


class Lifecycle(str, Enum):
    UNINITIALIZED = "uninitialized"
    ACTIVE = "active"
    DISPOSED = "disposed"


def is_allowed_domain(hostname: str, allowed_domains: Optional[tuple[str, ...]]) -> bool:
    """``None`` allows every host; pages without a hostname are always allowed."""

    if not hostname or allowed_domains is None:
        return True
    return hostname.lower() in allowed_domains


class Detector:
    """Keep the SCP mentions of one document up to date.

    Every compute cycle classifies the page, scans links and prose, merges
    duplicates and swaps in a new :class:`DetectorResults` snapshot before
    notifying ``update`` listeners. Faults are reported to the error handler
    and leave the previous snapshot in place.
    """

    def __init__(
        self,
        document: Optional[DocumentSource],
        config: DetectorConfig | None = None,
        *,
        scheduler: Scheduler | None = None,
        clock: Clock = time.time,
        logger: Logger | None = None,
        error_handler: ErrorHandler | None = None,
    ) -> None:
        self._lifecycle = Lifecycle.UNINITIALIZED
        self._document = document
        self._config = config or DetectorConfig()
        self._scheduler = scheduler or TimerScheduler()
        self._clock = clock
        self._log = logger or NullLogger()
        self._errors = error_handler or LoggingErrorHandler(self._log)
        self._events = EventBus(self._errors)
        self._lock = threading.RLock()
        self._state: DetectorState = DetectorResults()
        self._subscription: Optional[ChangeSubscription] = None
        self._pending: Optional[ScheduledTask] = None
        self._generation = 0
        self._disposed = False

        if self._config.observe:
            self._attach_observer()
        self._lifecycle = Lifecycle.ACTIVE
        if self._config.autostart:
            self._defer(0.0, self._autostart, action="autostart")

    # ------------------------------------------------------------------
    # Public API

    @property
    def config(self) -> DetectorConfig:
        return self._config

    @property
    def lifecycle(self) -> Lifecycle:
        return self._lifecycle

    @property
    def disposed(self) -> bool:
        return self._disposed

    def on(self, event: EventKind | str, callback: Callable[[DetectorResults], None]) -> Callable[[], None]:
        """Register ``callback`` for ``event``; returns an unsubscribe function."""
        return self._events.on(event, callback)

    def off(self, event: EventKind | str, callback: Callable[[DetectorResults], None]) -> None:
        self._events.off(event, callback)

    def get_page_classification(self) -> PageClassification:
        return self._state.page

    def get_entities(self) -> List[Entity]:
        return list(self._state.entities)

    def get_results(self) -> DetectorResults:
        state = self._state
        return DetectorResults(
            page=state.page,
            entities=tuple(state.entities),
            last_updated_at=state.last_updated_at,
        )

    def refresh(self) -> None:
        """Recompute immediately, bypassing the debounce window."""
        self._log.debug("refresh:manual")
        self.compute()

    def configure(self, changes: Mapping[str, Any] | None = None, **options: Any) -> None:
        """Merge options into the live configuration and refresh."""

        merged = dict(changes or {})
        merged.update(options)
        with self._lock:
            if self._disposed:
                return
            previous = self._config
            try:
                self._config, ignored = merge_config(previous, merged)
            except (TypeError, ValueError) as exc:
                self._errors.handle_error(exc, {"action": "configure"})
                return
            if ignored:
                self._log.warning("config:ignored", keys=ignored)
            if self._config.observe and not previous.observe:
                self._attach_observer()
            elif previous.observe and not self._config.observe:
                self._detach_observer()
        self.refresh()

    def dispose(self) -> None:
        """Stop observing, cancel pending work and drop all listeners."""

        with self._lock:
            if self._disposed:
                return
            self._disposed = True
            self._lifecycle = Lifecycle.DISPOSED
            self._generation += 1
            if self._pending is not None:
                self._pending.cancel()
                self._pending = None
            self._detach_observer()
            self._events.clear()

    # ------------------------------------------------------------------
    # Compute cycle

    def compute(self) -> None:
        """Run one full detection cycle; a no-op once disposed."""

        with self._lock:
            if self._disposed:
                return
            try:
                state = self._collect()
            except Exception as exc:
                self._errors.handle_error(exc, {"action": "compute"})
                return
            self._state = state
            self._events.emit(UpdateEvent(self.get_results()))

    def schedule_compute(self) -> None:
        """Trailing-edge debounce: only the last call in a quiet window runs."""

        with self._lock:
            if self._disposed:
                return
            self._generation += 1
            generation = self._generation
            if self._pending is not None:
                self._pending.cancel()
            self._pending = self._defer(
                self._config.debounce_seconds,
                lambda: self._run_scheduled(generation),
                action="schedule",
            )

    def _run_scheduled(self, generation: int) -> None:
        with self._lock:
            if self._disposed or generation != self._generation:
                return
            self._pending = None
        self.compute()

    def _collect(self) -> DetectorState:
        document = self._document
        if document is None:
            raise DocumentUnavailableError("no document attached to detector")
        config = self._config
        location = document.location or ""
        hostname = (urlsplit(location).hostname or "").lower()
        page = classify_page(location, document.title, config.domain_map)

        if not is_allowed_domain(hostname, config.allowed_domains):
            self._log.debug("domain:not-allowed", hostname=hostname)
            return DetectorResults(page=page, entities=(), last_updated_at=self._timestamp())

        scanner = MentionScanner(config)
        links = scanner.scan_links(document, document.base_url or location)
        inline = scanner.scan_inline(document)
        self._log.debug("compute:scan", links=len(links), inline=len(inline))
        entities = dedupe_entities(links + inline)
        self._log.debug("compute:dedupe", before=len(links) + len(inline), after=len(entities))
        return DetectorResults(page=page, entities=tuple(entities), last_updated_at=self._timestamp())

    def _timestamp(self) -> float:
        now = float(self._clock())
        previous = self._state.last_updated_at
        if now <= previous:
            now = previous + _TICK
        return now

    # ------------------------------------------------------------------
    # Internals

    def _autostart(self) -> None:
        self._log.debug("autostart:scheduled")
        self.schedule_compute()

    def _on_document_changed(self) -> None:
        try:
            self.schedule_compute()
        except Exception as exc:
            self._errors.handle_error(exc, {"action": "mutation_observer"})

    def _defer(self, delay: float, callback: Callable[[], None], *, action: str) -> Optional[ScheduledTask]:
        try:
            return self._scheduler.call_later(delay, callback)
        except Exception as exc:
            self._errors.handle_error(exc, {"action": action})
            return None

    def _attach_observer(self) -> None:
        if self._subscription is not None or self._document is None:
            return
        try:
            subscription = self._document.subscribe_to_changes(self._on_document_changed)
        except Exception as exc:
            self._errors.handle_error(
                SubscriptionError(f"change subscription failed: {exc}"), {"action": "observe"}
            )
            self._log.warning("observer:unsupported", reason=type(exc).__name__)
            return
        if subscription is None:
            self._log.warning("observer:unsupported", reason="no change notifications")
            return
        self._subscription = subscription
        self._log.debug("observer:attached")

    def _detach_observer(self) -> None:
        subscription, self._subscription = self._subscription, None
        if subscription is None:
            return
        try:
            subscription.disconnect()
            self._log.debug("observer:disconnected")
        except Exception as exc:
            self._errors.handle_error(exc, {"action": "observe"})


def create_detector(
    document: Optional[DocumentSource],
    config: DetectorConfig | None = None,
    *,
    scheduler: Scheduler | None = None,
    clock: Clock = time.time,
    logger: Logger | None = None,
    error_handler: ErrorHandler | None = None,
    **options: Any,
) -> Detector:
    """Build a :class:`Detector` with ``options`` merged over ``config``."""

    merged, ignored = merge_config(config or DetectorConfig(), options)
    if ignored and logger is not None:
        logger.warning("config:ignored", keys=ignored)
    return Detector(
        document,
        merged,
        scheduler=scheduler,
        clock=clock,
        logger=logger,
        error_handler=error_handler,
    )


__all__ = ["Detector", "Lifecycle", "create_detector", "is_allowed_domain"]
