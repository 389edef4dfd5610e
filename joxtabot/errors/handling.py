from __future__ import annotations

from ..logging_config import log_structured_error
from .internal import ConnectionClosedError, InternalError, NetworkError, ParsingError

# Checked in order; the first matching category wins.
_CATEGORIES: tuple[tuple[str, tuple[type[BaseException], ...]], ...] = (
    ("network", (NetworkError, OSError)),
    ("parsing", (ParsingError,)),
    ("closed", (ConnectionClosedError,)),
    ("internal", (InternalError,)),
    ("config", (ValueError,)),
)


def error_category(error: BaseException) -> str:
    for name, types in _CATEGORIES:
        if isinstance(error, types):
            return name
    return "unknown"


def log_error(message: str, error: Exception, context: dict | None = None) -> None:
    """Log an exception under its category and count it in the aggregator.

    Args:
        message: What was being done when the error happened.
        error: The exception instance.
        context: Optional extra fields (channel, url, ...).
    """
    context = {**getattr(error, "data", {}), **(context or {})}
    log_structured_error(
        error_type=error_category(error),
        message=f"{message}: {error}",
        exception=error,
        context=context or None,
    )


__all__ = ["error_category", "log_error"]
