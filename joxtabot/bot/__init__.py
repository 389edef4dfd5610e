"""Bot behaviour built on top of the chat connection."""

from .behavior import ChatBehavior  # noqa: F401
from .rewards import RewardHandler, random_timeout_reason  # noqa: F401

__all__ = ["ChatBehavior", "RewardHandler", "random_timeout_reason"]
