from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, field_validator

from ..constants import (
    DEFAULT_AUTO_REPLIES,
    DEFAULT_CHANNEL,
    DEFAULT_NICK,
    DEFAULT_ONLINE_MESSAGE,
    TWITCH_IRC_WS_URL,
)


class BotConfig(BaseModel):
    """Configuration of the chat bot process.

    Attributes:
        channel: Channel to join, stored without the leading ``#``.
        nick: Bot account login.
        oauth_token: Chat token, always stored with the ``oauth:`` prefix.
        url: Chat WebSocket endpoint.
        online_message: Announcement sent once the handshake is done; empty
            disables it.
        auto_replies: Emotes the bot echoes back when seen in chat.
    """

    channel: str = Field(default=DEFAULT_CHANNEL, min_length=1)
    nick: str = Field(default=DEFAULT_NICK, min_length=3, max_length=25)
    oauth_token: str = Field(min_length=1)
    url: str = TWITCH_IRC_WS_URL
    online_message: str = DEFAULT_ONLINE_MESSAGE
    auto_replies: list[str] = Field(default_factory=lambda: list(DEFAULT_AUTO_REPLIES))

    @field_validator("channel", mode="before")
    @classmethod
    def normalize_channel(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip().lstrip("#").lower()
        return v

    @field_validator("nick", mode="before")
    @classmethod
    def normalize_nick(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @field_validator("oauth_token", mode="before")
    @classmethod
    def normalize_token(cls, v: Any) -> Any:
        if isinstance(v, str):
            v = v.strip()
            if v and not v.startswith("oauth:"):
                return f"oauth:{v}"
        return v

    @field_validator("url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        if not v.startswith(("ws://", "wss://")):
            raise ValueError(f"Chat URL must be a ws:// or wss:// URL, got {v!r}")
        return v

    @field_validator("auto_replies", mode="before")
    @classmethod
    def split_auto_replies(cls, v: Any) -> Any:
        if isinstance(v, str):
            return [item for item in (p.strip() for p in v.split(",")) if item]
        return v
