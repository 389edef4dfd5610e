"""Event logger used across the chat client.

Every log line is an *event* named ``<domain>_<action>``. Its human text is
rendered from the event template catalog; an event without a template gets a
derived ``"<domain>: <action>"`` text. Console handlers live on the root
logger (see :mod:`joxtabot.logging_config`), so this module only formats.
"""

from __future__ import annotations

import logging
import os

CHAT_EMOJI = "💬"
EVENT_COLUMN_WIDTH = 32
PREFIX_WIDTH = 24

_RESERVED = ("user", "channel")


def _debug_enabled() -> bool:
    return os.environ.get("DEBUG", "false").lower() in ("true", "1", "yes")


def render_event(domain: str, action: str, context: dict[str, object]) -> tuple[str, bool]:
    """Return the human text of an event and whether it was derived."""
    # Imported lazily: the catalog may be reloaded after this module loads.
    from .event_catalog import EVENT_TEMPLATES

    template = EVENT_TEMPLATES.get((domain, action))
    if not template:
        return f"{domain.replace('_', ' ')}: {action.replace('_', ' ')}", True
    try:
        return template.format(**context), False
    except (KeyError, IndexError, ValueError):
        return template, False


class BotLogger:
    """Formats chat client events onto a stdlib logger.

    Concise lines read ``[user#channel] text``. With ``DEBUG`` set in the
    environment the event name is put in a fixed column in front and the
    remaining context is appended as ``(k=v, ...)``.
    """

    def __init__(self, name: str = "joxtabot") -> None:
        self.logger = logging.getLogger(name)

    def log_event(
        self,
        domain: str,
        action: str,
        level: int = logging.INFO,
        human: str | None = None,
        *,
        exc_info: bool = False,
        **context: object,
    ) -> None:
        if human is None:
            human, derived = render_event(domain, action, context)
            if derived:
                context["derived"] = True
        self._emit(level, f"{domain}_{action}".lower(), human, context, exc_info)

    def _emit(
        self,
        level: int,
        event: str,
        human: str,
        context: dict[str, object],
        exc_info: bool = False,
    ) -> None:
        if not self.logger.isEnabledFor(level):
            return
        extra = dict(context)
        user, channel = (extra.pop(key, None) for key in _RESERVED)
        channel = channel if isinstance(channel, str) else None
        prefix = self._prefix(user if isinstance(user, str) else None, channel)
        if event == "irc_privmsg" and human:
            human = self._decorate_chat(human, channel)

        if _debug_enabled():
            line = f"{self._event_column(event)} {prefix}"
            if human:
                line = f"{line} {human}"
            if extra:
                line = f"{line} ({', '.join(f'{k}={v}' for k, v in extra.items())})"
        else:
            line = f"{prefix} {human or event}"
        self.logger.log(level, line, exc_info=exc_info)

    @staticmethod
    def _event_column(event: str) -> str:
        if len(event) <= EVENT_COLUMN_WIDTH:
            return event.ljust(EVENT_COLUMN_WIDTH)
        return event[: EVENT_COLUMN_WIDTH - 1] + "…"

    @staticmethod
    def _prefix(user: str | None, channel: str | None) -> str:
        label = user or "system"
        if channel:
            label = f"{label}#{channel.lstrip('#')}"
        return f"[{label.ljust(PREFIX_WIDTH)[:PREFIX_WIDTH]}]"

    @staticmethod
    def _decorate_chat(text: str, channel: str | None) -> str:
        # 💬 #channel @nick: message
        body = text.removeprefix(CHAT_EMOJI).lstrip()
        if channel:
            return f"{CHAT_EMOJI} #{channel.lstrip('#')} {body}"
        return f"{CHAT_EMOJI} {body}"


logger = BotLogger()
