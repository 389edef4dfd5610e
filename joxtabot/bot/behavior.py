"""ChatBehavior - reacts to parsed chat messages (auto-replies, !commands)."""

from __future__ import annotations

import inspect
import logging
from collections.abc import Awaitable, Callable, Iterable
from typing import TYPE_CHECKING, Any

from ..irc.models import Command, CommandType, ParsedMessage
from ..logs.logger import logger

if TYPE_CHECKING:
    from ..irc.connection import TwitchChatConnection

CommandHandler = Callable[[ParsedMessage, str | None], Awaitable[Any] | Any]


class ChatBehavior:
    """Message listener that drives the bot in chat.

    Register it with ``connection.on_message(behavior.handle_message)``.
    """

    def __init__(
        self,
        connection: TwitchChatConnection,
        auto_replies: Iterable[str] = (),
    ) -> None:
        self.connection = connection
        self.auto_replies = list(auto_replies)
        self._commands: dict[str, CommandHandler] = {}

    def register_command(self, name: str, handler: CommandHandler) -> None:
        """Register a handler for ``!name``; names are case-insensitive."""
        self._commands[name.lower().lstrip("!")] = handler

    async def handle_message(self, message: ParsedMessage) -> None:
        command = message.command
        if command is None:
            return
        if command.type is CommandType.JOIN:
            self._log_membership("join", message)
        elif command.type is CommandType.PART:
            self._log_membership("part", message)
        elif command.type is CommandType.PRIVMSG:
            await self._handle_privmsg(message)

    async def _handle_privmsg(self, message: ParsedMessage) -> None:
        text = message.parameters or ""
        author = message.nick or ""
        display_name = message.tag("display-name")
        name = display_name if isinstance(display_name, str) else author
        logger.log_event(
            "irc",
            "privmsg",
            level=logging.INFO,
            human=f"@{name}: {text}",
            user=self.connection.nick,
            channel=message.channel,
            author=author,
        )
        if author and author.lower() == self.connection.nick:
            return
        command = message.command
        if command is not None and command.bot_command:
            await self._dispatch_bot_command(message, command)
            return
        await self._maybe_auto_reply(text)

    async def _maybe_auto_reply(self, text: str) -> bool:
        for emote in self.auto_replies:
            if emote in text:
                await self.connection.send_privmsg(emote)
                logger.log_event(
                    "bot", "auto_reply", user=self.connection.nick, channel=self.connection.channel, emote=emote
                )
                return True
        return False

    async def _dispatch_bot_command(self, message: ParsedMessage, command: Command) -> None:
        name = (command.bot_command or "").lower()
        handler = self._commands.get(name)
        if handler is None:
            logger.log_event("bot", "unknown_command", level=logging.DEBUG, command=name)
            return
        logger.log_event(
            "bot", "command", level=logging.DEBUG, command=name, author=message.nick or ""
        )
        result = handler(message, command.bot_command_params)
        if inspect.isawaitable(result):
            await result

    def _log_membership(self, action: str, message: ParsedMessage) -> None:
        if not message.nick:
            return
        logger.log_event(
            "bot",
            action,
            level=logging.DEBUG,
            user=self.connection.nick,
            channel=message.channel,
            nick=message.nick,
        )


__all__ = ["ChatBehavior", "CommandHandler"]
