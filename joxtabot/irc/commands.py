"""Command classification and ``!command`` extraction."""

from __future__ import annotations

import logging

from ..logs.logger import logger
from .models import CHANNEL_COMMANDS, Command, CommandType

_COMMANDS_BY_TOKEN = {c.value: c for c in CommandType}

# Server numerics Twitch sends during login and JOIN; all are dropped.
NUMERIC_REPLIES = frozenset(
    {"001", "002", "003", "004", "353", "366", "372", "375", "376"}
)
UNKNOWN_COMMAND_REPLY = "421"


def classify_command(raw_command: str) -> Command | None:
    """Turn a trimmed command segment into a :class:`Command`.

    Returns None for numeric replies and for any token outside the supported
    set; the caller drops such lines.
    """
    parts = raw_command.split()
    if not parts:
        return None
    token = parts[0]
    command_type = _COMMANDS_BY_TOKEN.get(token)

    if command_type is None:
        _log_unsupported(token, parts)
        return None

    if command_type in CHANNEL_COMMANDS:
        return Command(type=command_type, channel=parts[1] if len(parts) > 1 else None)
    if command_type is CommandType.CAP:
        return Command(
            type=command_type,
            is_cap_request_enabled=len(parts) > 2 and parts[2] == "ACK",
        )
    if command_type is CommandType.RECONNECT:
        logger.log_event("irc", "reconnect_requested", level=logging.WARNING)
    return Command(type=command_type)


def extract_bot_command(raw_parameters: str, command: Command) -> Command:
    """Fill ``bot_command``/``bot_command_params`` from ``!name args...``.

    The command object is updated in place and returned.
    """
    text = raw_parameters.strip()
    if text.startswith("!"):
        text = text[1:].strip()
    parts = text.split(None, 1)
    if not parts:
        return command
    command.bot_command = parts[0]
    params = parts[1].strip() if len(parts) > 1 else ""
    command.bot_command_params = params or None
    return command


def _log_unsupported(token: str, parts: list[str]) -> None:
    if token == UNKNOWN_COMMAND_REPLY:
        logger.log_event(
            "irc",
            "unsupported_command",
            level=logging.DEBUG,
            command=parts[2] if len(parts) > 2 else "",
        )
    elif token in NUMERIC_REPLIES or token.isdigit():
        logger.log_event("irc", "numeric_reply", level=logging.DEBUG, code=token)
    else:
        logger.log_event("irc", "unexpected_command", level=logging.DEBUG, command=token)


__all__ = ["NUMERIC_REPLIES", "classify_command", "extract_bot_command"]
