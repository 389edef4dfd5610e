"""Error hierarchy of the chat client.

Raw websockets and socket exceptions never leave the transport; they are
wrapped into one of these so callers only handle our own categories.

Classes:
  InternalError          – Base; carries a ``data`` mapping of context.
  NetworkError           – Socket open, read or write failed.
  ParsingError           – Part of a protocol line could not be decoded.
  TagDecodeError         – A badge or emote entry in the tag segment is malformed.
  ConnectionClosedError  – A send hit (or was waiting when) the connection closed.
"""

from __future__ import annotations

from collections.abc import Mapping


class InternalError(Exception):
    """Base class for chat client errors.

    Attributes:
        data: Structured context (channel, url, tag name, ...) for logging.
    """

    data: dict[str, object]

    def __init__(
        self, message: str, *, data: Mapping[str, object] | None = None
    ) -> None:
        super().__init__(message)
        self.data = dict(data or {})


class NetworkError(InternalError):
    """The WebSocket could not be opened, or dropped abnormally."""


class ParsingError(InternalError):
    pass


class TagDecodeError(ParsingError):
    """Malformed tag segment; the parser keeps the line with ``tags=None``."""


class ConnectionClosedError(InternalError):
    """Raised to senders once the connection is CLOSED.

    Callers suspended on the ready signal get it as soon as the connection
    closes, so no send waits forever on a dead connection.
    """


__all__ = [
    "InternalError",
    "NetworkError",
    "ParsingError",
    "TagDecodeError",
    "ConnectionClosedError",
]
