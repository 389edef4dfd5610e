"""Process configuration loaded from the environment."""

from __future__ import annotations

import os
from collections.abc import Mapping

from pydantic import ValidationError

from .model import BotConfig

# Environment variable -> BotConfig field
ENV_FIELDS = {
    "TWITCH_CHANNEL": "channel",
    "TWITCH_BOT_NICK": "nick",
    "TWITCH_IRC_BOT_OAUTH": "oauth_token",
    "TWITCH_IRC_WS_URL": "url",
    "TWITCH_ONLINE_MESSAGE": "online_message",
    "TWITCH_AUTO_REPLIES": "auto_replies",
}


def get_configuration(env: Mapping[str, str] | None = None) -> BotConfig:
    """Build the bot configuration from environment variables.

    Raises:
        ValueError: If the token is missing or a value is invalid.
    """
    env = os.environ if env is None else env
    values = {field: env[name] for name, field in ENV_FIELDS.items() if name in env}
    if not values.get("oauth_token"):
        raise ValueError(
            "TWITCH_IRC_BOT_OAUTH is not set. Generate a chat token for the bot "
            "account and export it before starting the bot."
        )
    try:
        return BotConfig(**values)
    except ValidationError as e:
        raise ValueError(f"Invalid bot configuration: {e}") from e


__all__ = ["BotConfig", "ENV_FIELDS", "get_configuration"]
