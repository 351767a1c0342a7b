from __future__ import annotations

from pathlib import Path
from typing import Any, Mapping

import pytest

from scpDetector.core.scheduling import ManualScheduler
from scpDetector.document.memory import StaticDocument, StaticNode

WIKI_URL = "https://scp-wiki.wikidot.com/test"


class RecordingErrorHandler:
    """Collect reported errors instead of logging them."""

    def __init__(self) -> None:
        self.errors: list[tuple[BaseException, dict]] = []

    def handle_error(self, error: BaseException, context: Mapping[str, Any]) -> None:
        self.errors.append((error, dict(context)))

    @property
    def actions(self) -> list[str]:
        return [context.get("action") for _, context in self.errors]


class RecordingLogger:
    def __init__(self) -> None:
        self.events: list[tuple[str, str, dict]] = []

    def _record(self, level: str, event: str, fields: dict) -> None:
        self.events.append((level, event, fields))

    def debug(self, event: str, **fields: Any) -> None:
        self._record("DEBUG", event, fields)

    def info(self, event: str, **fields: Any) -> None:
        self._record("INFO", event, fields)

    def warning(self, event: str, **fields: Any) -> None:
        self._record("WARNING", event, fields)

    def error(self, event: str, **fields: Any) -> None:
        self._record("ERROR", event, fields)

    def names(self) -> list[str]:
        return [event for _, event, _ in self.events]


class StepClock:
    """Clock that advances by ``step`` on every read."""

    def __init__(self, start: float = 1_700_000_000.0, step: float = 1.0) -> None:
        self.value = start
        self.step = step

    def __call__(self) -> float:
        self.value += self.step
        return self.value


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture
def errors() -> RecordingErrorHandler:
    return RecordingErrorHandler()


@pytest.fixture
def log() -> RecordingLogger:
    return RecordingLogger()


@pytest.fixture
def wiki_document() -> StaticDocument:
    """Two links to the same article plus a paragraph with a variant."""

    return StaticDocument(
        WIKI_URL,
        "Test Page",
        links=[
            StaticNode("SCP-173", href="/scp-173"),
            StaticNode("Peanut", href="/scp-173"),
        ],
        blocks=[StaticNode("See also SCP-049-J for more fun.")],
    )


@pytest.fixture
def fixtures_dir() -> Path:
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def clock() -> StepClock:
    return StepClock()
