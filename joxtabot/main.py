#!/usr/bin/env python3
"""
Main entry point for the joxtabot chat bot
"""

from __future__ import annotations

import asyncio
import logging
import signal
import sys
from collections.abc import Callable

from .bot.behavior import ChatBehavior
from .config import BotConfig, get_configuration
from .errors.handling import log_error
from .errors.internal import ConnectionClosedError, InternalError, NetworkError
from .irc.connection import TwitchChatConnection
from .irc.models import LifecycleEvent
from .irc.transport import ChatTransport
from .logging_config import LoggerConfigurator
from .logs.logger import logger


def _install_signal_handlers(connection: TwitchChatConnection) -> set[asyncio.Task[None]]:
    """Close the connection on SIGINT/SIGTERM.

    Returns the set holding the pending close tasks so they stay referenced
    until done.
    """
    loop = asyncio.get_running_loop()
    pending: set[asyncio.Task[None]] = set()

    def handler(signum: int) -> None:
        if connection.is_closed:
            return
        logger.log_event("app", "signal", level=logging.WARNING, signal=signum)
        task = loop.create_task(connection.close())
        pending.add(task)
        task.add_done_callback(pending.discard)

    for signum in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(signum, handler, signum)
        except (NotImplementedError, RuntimeError):
            # Windows event loops do not support signal handlers
            pass
    return pending


async def run_bot(
    config: BotConfig,
    *,
    transport_factory: Callable[[str], ChatTransport] | None = None,
    install_signal_handlers: bool = True,
) -> int:
    """Run the bot until its connection closes.

    Returns:
        0 when the connection was closed on request, 1 when it closed because
        of an error (the supervisor is expected to restart the process).
    """
    kwargs = {"transport_factory": transport_factory} if transport_factory else {}
    connection = TwitchChatConnection.from_config(config, **kwargs)
    behavior = ChatBehavior(connection, auto_replies=config.auto_replies)
    connection.on_message(behavior.handle_message)

    def on_lifecycle(event: LifecycleEvent) -> None:
        logger.log_event(
            "app",
            "connection_state",
            level=logging.DEBUG,
            state=event.state.name,
            previous=event.previous.name,
        )

    connection.on_lifecycle(on_lifecycle)

    if install_signal_handlers:
        _install_signal_handlers(connection)

    try:
        await connection.start()
    except NetworkError:
        return 1
    except ConnectionClosedError:
        # Shutdown was requested while connecting
        return 0

    if config.online_message:
        try:
            await connection.send_privmsg(config.online_message)
        except InternalError as e:
            log_error("Failed to send online message", e)

    await connection.run()
    stats = connection.get_connection_stats()
    logger.log_event("app", "stats", **stats)
    return 1 if connection.close_error else 0


async def main() -> int:
    try:
        logger.log_event("app", "start")
        config = get_configuration()
        return await run_bot(config)
    except ValueError as e:
        log_error("Configuration error", e)
        return 1
    finally:
        logging.info("✅ Application shutdown complete")


def run() -> None:
    """Synchronous entry point for the application."""
    LoggerConfigurator().configure()
    try:
        sys.exit(asyncio.run(main()))
    except KeyboardInterrupt:
        sys.exit(0)


if __name__ == "__main__":
    run()
