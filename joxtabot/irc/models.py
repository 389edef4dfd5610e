"""Shared IRC data models."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class CommandType(Enum):
    JOIN = "JOIN"
    PART = "PART"
    NOTICE = "NOTICE"
    CLEARCHAT = "CLEARCHAT"
    HOSTTARGET = "HOSTTARGET"
    PRIVMSG = "PRIVMSG"
    PING = "PING"
    CAP = "CAP"
    GLOBALUSERSTATE = "GLOBALUSERSTATE"
    USERSTATE = "USERSTATE"
    ROOMSTATE = "ROOMSTATE"
    RECONNECT = "RECONNECT"


CHANNEL_COMMANDS = frozenset(
    {
        CommandType.JOIN,
        CommandType.PART,
        CommandType.NOTICE,
        CommandType.CLEARCHAT,
        CommandType.HOSTTARGET,
        CommandType.PRIVMSG,
        CommandType.USERSTATE,
        CommandType.ROOMSTATE,
    }
)


@dataclass(frozen=True, slots=True)
class EmotePosition:
    """Character range of one emote occurrence, as sent in the ``emotes`` tag."""

    start: int
    end: int


# badges / badge-info -> {name: version}; emotes -> {id: [positions]};
# emote-sets -> [ids]; everything else -> raw string or None when empty.
TagValue = str | dict[str, str] | dict[str, list[EmotePosition]] | list[str] | None
Tags = dict[str, TagValue]


@dataclass(slots=True)
class Source:
    """Sender of a message. ``nick`` is None for server-originated lines."""

    nick: str | None
    host: str


@dataclass(slots=True)
class Command:
    """Classified command of a line.

    Only the fields meaningful to ``type`` are set: ``channel`` for the
    channel-bearing commands, ``is_cap_request_enabled`` for CAP. The bot
    command fields are filled when the parameters start with ``!``.
    """

    type: CommandType
    channel: str | None = None
    is_cap_request_enabled: bool | None = None
    bot_command: str | None = None
    bot_command_params: str | None = None


@dataclass(slots=True)
class ParsedMessage:
    tags: Tags | None
    source: Source | None
    command: Command | None
    parameters: str | None

    @property
    def nick(self) -> str | None:
        return self.source.nick if self.source else None

    @property
    def channel(self) -> str | None:
        return self.command.channel if self.command else None

    def tag(self, name: str) -> TagValue:
        if not self.tags:
            return None
        return self.tags.get(name)


class ConnectionState(Enum):
    CONNECTING = "connecting"
    AUTHENTICATING = "authenticating"
    READY = "ready"
    RECONNECTING = "reconnecting"
    CLOSED = "closed"


@dataclass(frozen=True, slots=True)
class LifecycleEvent:
    """State transition notification for the owning process."""

    state: ConnectionState
    previous: ConnectionState
    error: BaseException | None = None
