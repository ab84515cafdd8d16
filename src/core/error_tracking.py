"""Error tracking hook for failures that exhaust their recovery path."""

from typing import Any, Protocol

import structlog

logger = structlog.get_logger()


class IErrorTracker(Protocol):
    """Receives errors worth surfacing to an external tracker."""

    def capture_error(self, error: BaseException, context: dict[str, Any] | None = None) -> None:
        """Record an error with free-form context."""
        ...


class StructlogErrorTracker:
    """Default tracker: emits a structured ``error_captured`` event."""

    def capture_error(self, error: BaseException, context: dict[str, Any] | None = None) -> None:
        logger.error(
            "error_captured",
            error=str(error),
            error_type=type(error).__name__,
            **(context or {}),
        )


_tracker: IErrorTracker = StructlogErrorTracker()


def get_error_tracker() -> IErrorTracker:
    """Return the process-wide error tracker."""
    return _tracker


def set_error_tracker(tracker: IErrorTracker) -> None:
    """Replace the process-wide error tracker (e.g. with a Sentry adapter)."""
    global _tracker
    _tracker = tracker
