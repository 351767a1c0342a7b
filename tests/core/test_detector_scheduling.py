from __future__ import annotations

import threading

from scpDetector.core.detector import create_detector
from scpDetector.core.models import PageType
from scpDetector.core.scheduling import TimerScheduler
from scpDetector.document.memory import StaticDocument
from scpDetector.errors import SubscriptionError


def _collect(detector) -> list:
    seen: list = []
    detector.on("update", seen.append)
    return seen


def test_autostart_defers_first_compute(wiki_document, scheduler, clock):
    detector = create_detector(wiki_document, scheduler=scheduler, clock=clock)
    seen = _collect(detector)
    assert seen == []
    assert detector.get_results().entities == ()

    scheduler.advance(0.0)
    assert seen == []
    scheduler.advance(0.1)
    assert seen == []
    scheduler.advance(0.05)
    assert len(seen) == 1
    assert len(seen[0].entities) == 2


def test_mutation_bursts_coalesce_into_one_compute(wiki_document, scheduler, clock):
    detector = create_detector(wiki_document, scheduler=scheduler, clock=clock, autostart=False)
    seen = _collect(detector)

    for n in (1, 2, 3):
        wiki_document.mutate(blocks=[f"Now reading SCP-{n}00"])
        scheduler.advance(0.1)
    assert seen == []

    scheduler.advance(0.1)
    assert len(seen) == 1
    assert [e.id for e in seen[0].entities] == ["scp-173", "scp-300"]


def test_schedule_compute_debounces_direct_calls(wiki_document, scheduler, clock):
    detector = create_detector(
        wiki_document, scheduler=scheduler, clock=clock, autostart=False, debounce_ms=50
    )
    seen = _collect(detector)
    detector.schedule_compute()
    detector.schedule_compute()
    assert scheduler.pending() == 1
    scheduler.advance(0.06)
    assert len(seen) == 1


def test_navigation_updates_page_classification(wiki_document, scheduler, clock):
    detector = create_detector(wiki_document, scheduler=scheduler, clock=clock, autostart=False)
    wiki_document.mutate(location="https://scp-wiki.wikidot.com/scp-173", title="SCP-173")
    scheduler.advance(1.0)
    page = detector.get_page_classification()
    assert page.type is PageType.SCP_ARTICLE
    assert page.confidence == 0.9


def test_dispose_cancels_pending_compute(wiki_document, scheduler, clock):
    detector = create_detector(wiki_document, scheduler=scheduler, clock=clock, autostart=False)
    seen = _collect(detector)
    wiki_document.mutate(blocks=["SCP-999"])
    assert scheduler.pending() == 1

    detector.dispose()
    assert scheduler.pending() == 0
    wiki_document.mutate(blocks=["SCP-682"])
    scheduler.advance(1.0)
    assert seen == []
    assert detector.get_results().last_updated_at == 0.0


def test_dispose_during_autostart_window(wiki_document, scheduler, clock):
    detector = create_detector(wiki_document, scheduler=scheduler, clock=clock)
    seen = _collect(detector)
    detector.dispose()
    scheduler.advance(1.0)
    assert seen == []
    assert scheduler.pending() == 0


def test_dispose_from_listener_stops_later_cycles(wiki_document, scheduler, clock):
    detector = create_detector(wiki_document, scheduler=scheduler, clock=clock, autostart=False)
    detector.on("update", lambda results: detector.dispose())
    detector.refresh()
    assert detector.disposed
    wiki_document.mutate(blocks=["SCP-1"])
    scheduler.advance(1.0)
    assert scheduler.pending() == 0


def test_unobservable_document_falls_back_to_manual_refresh(scheduler, clock, errors, log):
    document = StaticDocument("https://scp-wiki.wikidot.com/x", blocks=["SCP-173"], observable=False)
    detector = create_detector(
        document, scheduler=scheduler, clock=clock, logger=log, error_handler=errors, autostart=False
    )
    assert "observer:unsupported" in log.names()
    assert errors.errors == []

    detector.refresh()
    assert [e.id for e in detector.get_entities()] == ["scp-173"]


class BrokenSubscriptionDocument(StaticDocument):
    def subscribe_to_changes(self, callback):
        raise RuntimeError("no observer support")


def test_subscription_failure_is_reported(scheduler, clock, errors, log):
    document = BrokenSubscriptionDocument("https://scp-wiki.wikidot.com/x", blocks=["SCP-173"])
    detector = create_detector(
        document, scheduler=scheduler, clock=clock, logger=log, error_handler=errors, autostart=False
    )
    assert errors.actions == ["observe"]
    assert isinstance(errors.errors[0][0], SubscriptionError)
    assert "observer:unsupported" in log.names()

    detector.refresh()
    assert len(detector.get_entities()) == 1


class RefusingScheduler:
    def call_later(self, delay, callback):
        raise RuntimeError("scheduler shut down")


def test_scheduler_failure_is_reported(wiki_document, clock, errors):
    detector = create_detector(
        wiki_document, scheduler=RefusingScheduler(), clock=clock, error_handler=errors
    )
    assert errors.actions == ["autostart"]
    detector.schedule_compute()
    assert errors.actions == ["autostart", "schedule"]
    detector.refresh()
    assert len(detector.get_entities()) == 2


def test_timer_scheduler_runs_debounced_compute(wiki_document):
    done = threading.Event()
    detector = create_detector(
        wiki_document, scheduler=TimerScheduler(), autostart=False, debounce_ms=10
    )
    detector.on("update", lambda results: done.set())
    try:
        detector.schedule_compute()
        assert done.wait(5.0)
        assert len(detector.get_entities()) == 2
    finally:
        detector.dispose()
