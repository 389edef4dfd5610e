"""Error hierarchy and error logging helpers."""

from .handling import error_category, log_error  # noqa: F401
from .internal import (  # noqa: F401
    ConnectionClosedError,
    InternalError,
    NetworkError,
    ParsingError,
    TagDecodeError,
)

__all__ = [
    "InternalError",
    "NetworkError",
    "ParsingError",
    "TagDecodeError",
    "ConnectionClosedError",
    "error_category",
    "log_error",
]
