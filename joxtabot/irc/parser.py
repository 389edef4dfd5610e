"""IRC message parsing.

A line is scanned once, left to right::

    [@tags ][:source ]COMMAND [args] [:parameters]

Only lines whose command is supported produce a :class:`ParsedMessage`;
everything else (numeric replies, unknown commands, malformed prefixes)
yields None and is dropped by the caller.
"""

from __future__ import annotations

import logging

from ..errors.internal import TagDecodeError
from ..logs.logger import logger
from .commands import classify_command, extract_bot_command
from .models import ParsedMessage, Source
from .tags import decode_tags


def parse_message(line: str) -> ParsedMessage | None:
    idx = 0
    raw_tags: str | None = None
    raw_source: str | None = None
    raw_parameters: str | None = None

    if line.startswith("@"):
        end = line.find(" ")
        if end == -1:
            return _malformed(line, "tags without command")
        raw_tags = line[1:end]
        idx = end + 1

    if line.startswith(":", idx):
        end = line.find(" ", idx)
        if end == -1:
            return _malformed(line, "source without command")
        raw_source = line[idx + 1 : end]
        idx = end + 1

    end = line.find(":", idx)
    if end == -1:
        end = len(line)
    else:
        raw_parameters = line[end + 1 :]
    raw_command = line[idx:end].strip()

    command = classify_command(raw_command)
    if command is None:
        return None

    tags = None
    if raw_tags is not None:
        try:
            tags = decode_tags(raw_tags)
        except TagDecodeError as e:
            logger.log_event(
                "irc",
                "tag_decode_failed",
                level=logging.WARNING,
                error=str(e),
                command=command.type.value,
            )

    parameters = raw_parameters.strip() if raw_parameters is not None else None
    if parameters and parameters.startswith("!"):
        extract_bot_command(parameters, command)

    return ParsedMessage(
        tags=tags,
        source=parse_source(raw_source),
        command=command,
        parameters=parameters,
    )


def parse_source(raw_source: str | None) -> Source | None:
    """Split ``nick!user@host``; a bare server host has no nick."""
    if raw_source is None:
        return None
    parts = raw_source.split("!")
    if len(parts) == 2:
        return Source(nick=parts[0], host=parts[1])
    return Source(nick=None, host=raw_source)


def _malformed(line: str, reason: str) -> None:
    logger.log_event("irc", "malformed_line", level=logging.DEBUG, reason=reason, raw=line)
    return None


__all__ = ["parse_message", "parse_source"]
