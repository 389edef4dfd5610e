"""Event logging for the chat client.

``logger`` is the process-wide :class:`BotLogger`; templates come from the
JSON catalog loaded by :mod:`joxtabot.logs.event_catalog`.
"""

from .event_catalog import EVENT_TEMPLATES, reload_event_templates  # noqa: F401
from .logger import BotLogger, logger  # noqa: F401

__all__ = ["BotLogger", "logger", "EVENT_TEMPLATES", "reload_event_templates"]
