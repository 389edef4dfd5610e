"""Channel point reward redemptions that act on chat.

Redemptions arrive already verified from the webhook receiver; this module
only maps a reward title to a moderation action on the connection.
"""

from __future__ import annotations

import logging
import secrets
from typing import TYPE_CHECKING

from ..constants import EMOTE_ONLY_REWARD_SECONDS, TIMEOUT_REWARD_SECONDS
from ..logs.logger import logger

if TYPE_CHECKING:
    from ..irc.connection import TwitchChatConnection

TIMEOUT_REWARD = "Timeout"
EMOTE_ONLY_REWARD = "Emote-only Chat"

TIMEOUT_REASONS = (
    "Someone spent their channel points on you",
    "Bonk! Go sit in the corner",
    "The chat has spoken",
    "Take a short break and hydrate",
    "Timed out by popular demand",
)


def random_timeout_reason() -> str:
    return secrets.choice(TIMEOUT_REASONS)


class RewardHandler:
    def __init__(
        self,
        connection: TwitchChatConnection,
        timeout_seconds: int = TIMEOUT_REWARD_SECONDS,
        emote_only_seconds: int = EMOTE_ONLY_REWARD_SECONDS,
    ) -> None:
        self.connection = connection
        self.timeout_seconds = timeout_seconds
        self.emote_only_seconds = emote_only_seconds

    async def handle_redemption(self, reward_title: str, user_login: str) -> bool:
        """Apply the chat action for a redeemed reward.

        Returns:
            True if the reward maps to a chat action, False otherwise.
        """
        if reward_title == TIMEOUT_REWARD:
            logger.log_event("reward", "timeout", user=self.connection.nick, target=user_login)
            await self.connection.timeout(user_login, self.timeout_seconds, random_timeout_reason())
            return True
        if reward_title == EMOTE_ONLY_REWARD:
            logger.log_event("reward", "emote_only", user=self.connection.nick, target=user_login)
            await self.connection.emote_only(self.emote_only_seconds)
            return True
        logger.log_event(
            "reward", "unsupported", level=logging.WARNING, title=reward_title
        )
        return False


__all__ = [
    "EMOTE_ONLY_REWARD",
    "TIMEOUT_REASONS",
    "TIMEOUT_REWARD",
    "RewardHandler",
    "random_timeout_reason",
]
