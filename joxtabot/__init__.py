"""Twitch chat bot for the joxtacy channel."""

__version__ = "0.1.0"
