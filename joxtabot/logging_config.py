"""
Process logging for the joxtabot chat client.

Console output goes through a colorlog formatter on the root logger. Errors
reported with :func:`log_structured_error` are also counted per category by
the process-wide :data:`error_aggregator`, which prints a summary at exit.
"""

import atexit
import logging
import os
import sys
import threading
import time
from collections import deque
from dataclasses import dataclass, field
from typing import Any

import colorlog

LOG_COLORS = {
    "DEBUG": "cyan",
    "INFO": "green",
    "WARNING": "yellow",
    "ERROR": "red",
    "CRITICAL": "magenta",
}

# Errors of one category per hour before an alert is logged
ALERT_RATE_PER_HOUR = float(os.environ.get("ERROR_ALERT_RATE_PER_HOUR", "10"))
RECENT_WINDOW_SECONDS = 3600
MAX_RECENT_ERRORS = 1000


@dataclass
class _ErrorBucket:
    total: int = 0
    last_message: str = ""
    last_context: dict[str, Any] = field(default_factory=dict)
    recent: deque = field(default_factory=lambda: deque(maxlen=MAX_RECENT_ERRORS))


class ErrorAggregator:
    """Counts errors per category (network, parsing, closed, ...).

    A bot that reconnects for days mostly needs to know which failure keeps
    coming back, so only totals, recent timestamps and the last message of
    each category are kept.
    """

    def __init__(self):
        self._buckets: dict[str, _ErrorBucket] = {}
        self._lock = threading.Lock()
        self.start_time = time.time()

    def record_error(self, error_type: str, message: str, context: dict[str, Any] | None = None) -> None:
        now = time.time()
        with self._lock:
            bucket = self._buckets.setdefault(error_type, _ErrorBucket())
            bucket.total += 1
            bucket.last_message = message
            bucket.last_context = dict(context or {})
            bucket.recent.append(now)

    def get_error_summary(self) -> dict[str, dict[str, Any]]:
        now = time.time()
        hours = max((now - self.start_time) / 3600, 1)
        with self._lock:
            return {
                error_type: {
                    "total_count": bucket.total,
                    "recent_count": sum(1 for t in bucket.recent if now - t < RECENT_WINDOW_SECONDS),
                    "rate_per_hour": bucket.total / hours,
                    "last_message": bucket.last_message,
                    "last_context": bucket.last_context,
                }
                for error_type, bucket in self._buckets.items()
            }

    def should_alert(self, error_type: str, threshold_rate: float = ALERT_RATE_PER_HOUR) -> bool:
        stats = self.get_error_summary().get(error_type)
        return bool(stats) and stats["rate_per_hour"] > threshold_rate

    def log_summary_report(self) -> None:
        summary = self.get_error_summary()
        if not summary:
            logging.info("No errors recorded in current session")
            return
        logging.warning("🚨 ERROR SUMMARY REPORT")
        for error_type, stats in sorted(summary.items(), key=lambda kv: -kv[1]["total_count"]):
            logging.warning(
                f"  {error_type}: {stats['total_count']} total, "
                f"{stats['recent_count']} in last hour, "
                f"{stats['rate_per_hour']:.1f}/hour | last: {stats['last_message']}"
            )

    def clear(self) -> None:
        with self._lock:
            self._buckets.clear()
            self.start_time = time.time()


error_aggregator = ErrorAggregator()


def log_structured_error(
    error_type: str,
    message: str,
    exception: Exception | None = None,
    context: dict[str, Any] | None = None,
    level: int = logging.ERROR,
) -> None:
    """Log ``[TYPE] message | Exception: ... | Context: k=v`` and count it.

    Args:
        error_type: Category of the error (e.g., 'network', 'parsing', 'closed')
        message: Descriptive error message
        exception: The exception that occurred (optional)
        context: Additional context data for debugging
        level: Logging level (default: ERROR)
    """
    parts = [f"[{error_type.upper()}] {message}"]
    if exception is not None:
        parts.append(f"Exception: {type(exception).__name__}: {exception}")
    if context:
        parts.append("Context: " + " | ".join(f"{k}={v}" for k, v in context.items()))
    logging.log(level, " | ".join(parts))

    error_aggregator.record_error(error_type, message, context)
    if error_aggregator.should_alert(error_type):
        rate = error_aggregator.get_error_summary()[error_type]["rate_per_hour"]
        logging.critical(f"🚨 HIGH ERROR RATE ALERT: {error_type} occurring at {rate:.1f}/hour")


def build_color_formatter() -> colorlog.ColoredFormatter:
    return colorlog.ColoredFormatter(
        "%(asctime)s %(log_color)s%(levelname)-8s%(reset)s %(message_log_color)s%(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        log_colors=LOG_COLORS,
        secondary_log_colors={"message": {"ERROR": "red", "CRITICAL": "magenta"}},
        reset=True,
    )


class LoggerConfigurator:
    """Configures the root logger for the bot process.

    ``DEBUG=true|1|yes`` in the environment selects DEBUG level, which also
    switches :class:`joxtabot.logs.BotLogger` to its verbose line format.
    """

    def __init__(self, stream=None):
        self.stream = stream or sys.stderr

    def configure(self) -> int:
        debug_env = os.environ.get("DEBUG", "").lower()
        level = logging.DEBUG if debug_env in ("true", "1", "yes") else logging.INFO

        handler = logging.StreamHandler(self.stream)
        handler.setFormatter(build_color_formatter())
        logging.basicConfig(level=level, handlers=[handler], force=True)

        # Frame-level chatter from the websockets library drowns the chat log
        logging.getLogger("websockets").setLevel(logging.INFO)

        atexit.register(self._log_final_error_summary)
        return level

    @staticmethod
    def _log_final_error_summary() -> None:
        logging.info("📊 Final error summary before shutdown:")
        error_aggregator.log_summary_report()


__all__ = [
    "ErrorAggregator",
    "error_aggregator",
    "log_structured_error",
    "build_color_formatter",
    "LoggerConfigurator",
]
