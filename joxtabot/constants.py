"""
Configuration constants for the joxtabot chat client

Tunables below can be overridden by an environment variable of the same
name; a value that does not parse falls back to the default with a warning.
"""

import os
from collections.abc import Callable
from typing import TypeVar

_N = TypeVar("_N", int, float)


def _get_env_number(name: str, default: _N, cast: Callable[[str], _N]) -> _N:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return cast(value)
    except ValueError:
        print(f"Warning: Invalid {cast.__name__} value for {name}='{value}', using default {default}")
        return default


def _get_env_int(name: str, default: int) -> int:
    return _get_env_number(name, default, int)


def _get_env_float(name: str, default: float) -> float:
    return _get_env_number(name, default, float)


# Twitch chat endpoint (IRC over WebSocket)
TWITCH_IRC_WS_URL = os.getenv("TWITCH_IRC_WS_URL", "wss://irc-ws.chat.twitch.tv:443")
TWITCH_SERVER_HOST = "tmi.twitch.tv"

# Capability requests sent during the handshake, in order
CAP_MEMBERSHIP = "twitch.tv/membership"
CAP_TAGS_COMMANDS = "twitch.tv/tags twitch.tv/commands"

# Bot identity and chat defaults
DEFAULT_CHANNEL = "joxtacy"
DEFAULT_NICK = "joxtabot"
DEFAULT_ONLINE_MESSAGE = "I am online, peeps! widepeepoHappy"
DEFAULT_AUTO_REPLIES = ("catJAM", "widepeepoHappy")

# Connection
IRC_CONNECT_TIMEOUT = _get_env_float("IRC_CONNECT_TIMEOUT", 15.0)
IRC_RECONNECT_MAX_ATTEMPTS = max(1, _get_env_int("IRC_RECONNECT_MAX_ATTEMPTS", 3))
IRC_RECONNECT_BACKOFF_MIN = _get_env_float("IRC_RECONNECT_BACKOFF_MIN", 1.0)
IRC_RECONNECT_BACKOFF_MAX = _get_env_float("IRC_RECONNECT_BACKOFF_MAX", 30.0)

# Channel point rewards (seconds)
TIMEOUT_REWARD_SECONDS = _get_env_int("TIMEOUT_REWARD_SECONDS", 180)
EMOTE_ONLY_REWARD_SECONDS = _get_env_int("EMOTE_ONLY_REWARD_SECONDS", 120)
