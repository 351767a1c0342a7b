from __future__ import annotations

import io
import json
import logging

from scpDetector.errors import LoggingErrorHandler
from scpDetector.utils.log_json import JsonLogger


def _make_logger(*, max_details: int = 256, level: int = logging.INFO) -> tuple[JsonLogger, io.StringIO]:
    stream = io.StringIO()
    logger = logging.getLogger("scpdetector.test.json")
    logger.handlers = []
    handler = logging.StreamHandler(stream)
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = False
    return JsonLogger("detector", logger=logger, max_details_bytes=max_details), stream


def test_json_logger_emits_required_fields():
    logger, stream = _make_logger()
    logger.emit(
        "INFO",
        "compute:scan",
        action="compute",
        url="https://scp-wiki.wikidot.com/scp-173?token=abc",
        details={"reporter": "user@example.com", "links": 3},
    )
    payload = json.loads(stream.getvalue())
    assert payload["event"] == "compute:scan"
    assert payload["service"] == "detector"
    assert payload["level"] == "INFO"
    assert payload["action"] == "compute"
    assert payload["url"] == "https://scp-wiki.wikidot.com/scp-173"
    assert payload["details"] == {"reporter": "[redacted]", "links": 3}
    assert "ts" in payload


def test_json_logger_truncates_large_details():
    logger, stream = _make_logger(max_details=32)
    logger.info("large", details={"values": list(range(100))})
    payload = json.loads(stream.getvalue())
    assert payload["event"] == "large"
    assert payload["details"]["note"] == "truncated"
    assert "preview" in payload["details"]


def test_json_logger_respects_level():
    logger, stream = _make_logger()
    assert logger.debug("compute:dedupe", before=3, after=2) is None
    assert stream.getvalue() == ""
    entry = logger.warning("config:ignored", keys=["bogus"])
    assert entry["details"] == {"keys": ["bogus"]}


def test_error_handler_logs_structured_event():
    logger, stream = _make_logger()
    LoggingErrorHandler(logger).handle_error(ValueError("bad href"), {"action": "compute", "node": 4})
    payload = json.loads(stream.getvalue())
    assert payload["level"] == "ERROR"
    assert payload["event"] == "detector:error"
    assert payload["action"] == "compute"
    assert payload["details"]["error"] == "ValueError"
    assert payload["details"]["message"] == "bad href"
    assert payload["details"]["node"] == 4
