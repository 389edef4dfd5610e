"""IRC subsystem package.

Contains the line parser (tags, commands, source), the WebSocket transport
and the connection manager for Twitch chat.
"""

from .commands import classify_command, extract_bot_command  # noqa: F401
from .connection import TwitchChatConnection  # noqa: F401
from .models import (  # noqa: F401
    Command,
    CommandType,
    ConnectionState,
    EmotePosition,
    LifecycleEvent,
    ParsedMessage,
    Source,
    Tags,
)
from .parser import parse_message, parse_source  # noqa: F401
from .tags import decode_tags  # noqa: F401
from .transport import ChatTransport, WebSocketTransport  # noqa: F401

__all__ = [
    "ChatTransport",
    "Command",
    "CommandType",
    "ConnectionState",
    "EmotePosition",
    "LifecycleEvent",
    "ParsedMessage",
    "Source",
    "Tags",
    "TwitchChatConnection",
    "WebSocketTransport",
    "classify_command",
    "decode_tags",
    "extract_bot_command",
    "parse_message",
    "parse_source",
]
