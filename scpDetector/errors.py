"""Error types and the injectable error handler used by the detector."""

from __future__ import annotations

from typing import Any, Mapping, Protocol


class DetectorError(RuntimeError):
    """Base class for runtime faults inside the detector."""


class DocumentUnavailableError(DetectorError):
    """Raised when a compute cycle runs without a document to scan."""


class SubscriptionError(DetectorError):
    """Raised when a document change subscription cannot be attached."""


class Logger(Protocol):
    def debug(self, event: str, **fields: Any) -> Any: ...

    def info(self, event: str, **fields: Any) -> Any: ...

    def warning(self, event: str, **fields: Any) -> Any: ...

    def error(self, event: str, **fields: Any) -> Any: ...


class ErrorHandler(Protocol):
    def handle_error(self, error: BaseException, context: Mapping[str, Any]) -> None: ...


class NullErrorHandler:
    """Drop every reported error."""

    def handle_error(self, error: BaseException, context: Mapping[str, Any]) -> None:
        return None


class LoggingErrorHandler:
    """Report errors as structured ``error`` events on ``logger``.

    Failures raised by the logger itself are suppressed.
    """

    def __init__(self, logger: Logger) -> None:
        self._logger = logger

    def handle_error(self, error: BaseException, context: Mapping[str, Any]) -> None:
        details = dict(context or {})
        action = details.pop("action", None)
        try:
            self._logger.error(
                "detector:error",
                action=action,
                error=type(error).__name__,
                message=str(error),
                details=details or None,
            )
        except Exception:  # pragma: no cover - logger misbehaviour
            return None


__all__ = [
    "DetectorError",
    "DocumentUnavailableError",
    "ErrorHandler",
    "Logger",
    "LoggingErrorHandler",
    "NullErrorHandler",
    "SubscriptionError",
]
