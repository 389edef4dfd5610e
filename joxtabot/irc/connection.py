"""Twitch chat connection: handshake, keepalive, reconnect and dispatch."""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Any

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    stop_when_event_set,
    wait_exponential,
)

from ..constants import (
    CAP_MEMBERSHIP,
    CAP_TAGS_COMMANDS,
    IRC_RECONNECT_BACKOFF_MAX,
    IRC_RECONNECT_BACKOFF_MIN,
    IRC_RECONNECT_MAX_ATTEMPTS,
    TWITCH_IRC_WS_URL,
    TWITCH_SERVER_HOST,
)
from ..errors.handling import log_error
from ..errors.internal import ConnectionClosedError, InternalError, NetworkError
from ..logs.logger import logger
from .models import CommandType, ConnectionState, LifecycleEvent, ParsedMessage
from .parser import parse_message
from .transport import ChatTransport, WebSocketTransport

if TYPE_CHECKING:  # pragma: no cover
    from ..config.model import BotConfig

MessageListener = Callable[[ParsedMessage], Any]
LifecycleListener = Callable[[LifecycleEvent], Any]


class TwitchChatConnection:  # pylint: disable=too-many-instance-attributes
    """Single chat connection to one channel.

    The connection owns the transport. ``start()`` opens it and sends the
    handshake, ``run()`` is the single reader that answers PINGs, replays the
    handshake after a RECONNECT and dispatches every parsed message to the
    registered listeners in registration and arrival order. Outbound sends
    wait for the ready signal and are serialized on one lock.
    """

    def __init__(
        self,
        channel: str,
        nick: str,
        token: str,
        url: str = TWITCH_IRC_WS_URL,
        *,
        transport_factory: Callable[[str], ChatTransport] = WebSocketTransport,
        reconnect_attempts: int = IRC_RECONNECT_MAX_ATTEMPTS,
        reconnect_wait: Any = None,
    ) -> None:
        self.channel = channel.lower().lstrip("#")
        self.nick = nick.lower()
        self.token = token if token.startswith("oauth:") else f"oauth:{token}"
        self.url = url
        self.state = ConnectionState.CONNECTING
        self.close_error: BaseException | None = None

        self._transport_factory = transport_factory
        self._transport: ChatTransport | None = None
        self._reconnect_attempts = max(1, reconnect_attempts)
        self._reconnect_wait = reconnect_wait or wait_exponential(
            multiplier=IRC_RECONNECT_BACKOFF_MIN,
            min=IRC_RECONNECT_BACKOFF_MIN,
            max=IRC_RECONNECT_BACKOFF_MAX,
        )

        self._ready = asyncio.Event()
        self._closed = asyncio.Event()
        self._send_lock = asyncio.Lock()
        self._listeners: list[MessageListener] = []
        self._pending_listeners: list[MessageListener] = []
        self._lifecycle_listeners: list[LifecycleListener] = []
        self._dispatching = False
        self._running = False
        self._reconnect_requested = False
        self._close_requested = False
        self._background_tasks: set[asyncio.Task[Any]] = set()

        self.messages_received = 0
        self.messages_dropped = 0
        self.pongs_sent = 0
        self.reconnects = 0

    @classmethod
    def from_config(cls, config: BotConfig, **kwargs: Any) -> TwitchChatConnection:
        return cls(config.channel, config.nick, config.oauth_token, config.url, **kwargs)

    async def __aenter__(self) -> TwitchChatConnection:
        await self.start()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    @property
    def channel_name(self) -> str:
        return f"#{self.channel}"

    @property
    def is_ready(self) -> bool:
        return self.state is ConnectionState.READY

    @property
    def is_closed(self) -> bool:
        return self.state is ConnectionState.CLOSED

    # ------------------------------------------------------------------ #
    # Registration
    # ------------------------------------------------------------------ #
    def on_message(self, listener: MessageListener) -> MessageListener:
        """Register a listener for every successfully parsed message.

        Listeners may be plain or coroutine functions. A listener registered
        while a message is being dispatched starts with the next message.
        """
        if self._dispatching:
            self._pending_listeners.append(listener)
        else:
            self._listeners.append(listener)
        return listener

    def on_lifecycle(self, listener: LifecycleListener) -> LifecycleListener:
        self._lifecycle_listeners.append(listener)
        return listener

    # ------------------------------------------------------------------ #
    # Lifecycle
    # ------------------------------------------------------------------ #
    async def start(self) -> None:
        """Open the transport and send the handshake.

        Raises:
            ConnectionClosedError: If the connection was already closed.
            NetworkError: If the socket cannot be opened; the connection is
                CLOSED afterwards.
        """
        if self.is_closed:
            raise ConnectionClosedError("Connection already closed")
        try:
            await self._open_and_authenticate()
        except NetworkError as e:
            log_error("Chat connection failed", e, context={"url": self.url})
            await self._finish(e)
            raise

    async def run(self) -> None:
        """Read and dispatch lines until the connection is CLOSED."""
        if self._running:
            raise RuntimeError("Connection already has a reader")
        if self._transport is None and not self.is_closed:
            await self.start()
        self._running = True
        error: BaseException | None = None
        try:
            while not self.is_closed and self._transport is not None:
                frame = await self._transport.receive()
                if frame is None:
                    if not self._close_requested:
                        logger.log_event("irc", "socket_closed_by_peer", level=logging.WARNING, user=self.nick)
                        error = ConnectionClosedError(
                            "Connection closed by server", data={"channel": self.channel_name}
                        )
                    break
                await self._process_frame(frame)
                if self._reconnect_requested:
                    self._reconnect_requested = False
                    await self._reconnect()
        except InternalError as e:
            if not self._close_requested:
                error = e
                log_error("Chat connection lost", e, context={"channel": self.channel_name})
        finally:
            self._running = False
            await self._finish(error)

    async def close(self) -> None:
        """Close the connection. Pending and future sends fail fast."""
        if self.is_closed:
            return
        self._close_requested = True
        logger.log_event("irc", "close_requested", user=self.nick)
        await self._finish(None)

    async def wait_until_ready(self) -> None:
        """Suspend until the handshake has been sent.

        Raises:
            ConnectionClosedError: If the connection is (or becomes) CLOSED.
        """
        while True:
            if self.is_closed:
                raise ConnectionClosedError(
                    "Connection closed", data={"channel": self.channel_name}
                )
            if self._ready.is_set():
                return
            await self._ready.wait()

    # ------------------------------------------------------------------ #
    # Outbound
    # ------------------------------------------------------------------ #
    async def send_privmsg(self, text: str) -> None:
        await self.wait_until_ready()
        await self._write(f"PRIVMSG {self.channel_name} :{text}")
        logger.log_event(
            "irc",
            "privmsg_sent",
            level=logging.DEBUG,
            user=self.nick,
            channel=self.channel,
            chat_message=text,
        )

    async def timeout(self, user: str, seconds: int, reason: str | None = None) -> None:
        command = f"/timeout {user} {seconds}"
        if reason:
            command = f"{command} {reason}"
        await self.send_privmsg(command)
        logger.log_event(
            "irc", "timeout_sent", user=self.nick, channel=self.channel, target=user, seconds=seconds
        )

    async def emote_only(self, seconds: float) -> asyncio.Task[None]:
        """Enable emote-only chat and schedule ``/emoteonlyoff``.

        The follow-up is not cancellable and is skipped (logged) when the
        connection is closed by the time it fires.
        """
        await self.send_privmsg("/emoteonly")
        logger.log_event(
            "irc", "emote_only_on", user=self.nick, channel=self.channel, seconds=seconds
        )
        task = asyncio.create_task(self._emote_only_off_later(seconds))
        self._background_tasks.add(task)
        task.add_done_callback(self._background_tasks.discard)
        return task

    async def _emote_only_off_later(self, seconds: float) -> None:
        await asyncio.sleep(seconds)
        try:
            await self.send_privmsg("/emoteonlyoff")
        except (ConnectionClosedError, NetworkError) as e:
            logger.log_event(
                "irc",
                "emote_only_off_skipped",
                level=logging.WARNING,
                user=self.nick,
                channel=self.channel,
                error=str(e),
            )
            return
        logger.log_event("irc", "emote_only_off", user=self.nick, channel=self.channel)

    async def _write(self, line: str) -> None:
        async with self._send_lock:
            transport = self._transport
            if transport is None or self.is_closed:
                raise ConnectionClosedError(
                    "Connection closed", data={"channel": self.channel_name}
                )
            await transport.send(line)

    def _handshake_lines(self) -> list[str]:
        return [
            f"PASS {self.token}",
            f"NICK {self.nick}",
            f"JOIN {self.channel_name}",
            f"CAP REQ :{CAP_MEMBERSHIP}",
            f"CAP REQ :{CAP_TAGS_COMMANDS}",
        ]

    async def _open_and_authenticate(self) -> None:
        if self._close_requested:
            raise ConnectionClosedError("Connection closed during connect")
        self._set_state(ConnectionState.CONNECTING)
        logger.log_event("irc", "connect_start", user=self.nick, url=self.url)
        transport = self._transport_factory(self.url)
        await transport.connect()
        if self._close_requested:
            await transport.close()
            raise ConnectionClosedError("Connection closed during connect")
        self._transport = transport
        self._set_state(ConnectionState.AUTHENTICATING)
        try:
            for line in self._handshake_lines():
                await self._write(line)
        except InternalError:
            self._transport = None
            await transport.close()
            raise
        # Not gated on the server's acknowledgement.
        self._set_state(ConnectionState.READY)
        self._ready.set()
        logger.log_event("irc", "auth_sent", user=self.nick, channel=self.channel)

    async def _reconnect(self) -> None:
        self._ready.clear()
        self._set_state(ConnectionState.RECONNECTING)
        old, self._transport = self._transport, None
        if old is not None:
            await old.close()
        self.reconnects += 1

        def before_sleep(retry_state: RetryCallState) -> None:
            outcome = retry_state.outcome
            logger.log_event(
                "irc",
                "reconnect_retry",
                level=logging.WARNING,
                user=self.nick,
                attempt=retry_state.attempt_number,
                error=str(outcome.exception()) if outcome else "",
            )

        try:
            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(self._reconnect_attempts) | stop_when_event_set(self._closed),
                wait=self._reconnect_wait,
                sleep=self._backoff_sleep,
                retry=retry_if_exception_type(NetworkError),
                before_sleep=before_sleep,
                reraise=True,
            ):
                with attempt:
                    logger.log_event(
                        "irc",
                        "reconnect_attempt",
                        user=self.nick,
                        attempt=attempt.retry_state.attempt_number,
                    )
                    await self._open_and_authenticate()
        except NetworkError:
            logger.log_event(
                "irc",
                "reconnect_failed",
                level=logging.ERROR,
                user=self.nick,
                attempts=self._reconnect_attempts,
            )
            raise
        logger.log_event("irc", "reconnect_success", user=self.nick, channel=self.channel)

    async def _backoff_sleep(self, seconds: float) -> None:
        """Reconnect backoff that ends early once the connection is closed."""
        try:
            await asyncio.wait_for(self._closed.wait(), timeout=seconds)
        except asyncio.TimeoutError:
            pass

    async def _finish(self, error: BaseException | None) -> None:
        if self.is_closed:
            return
        transport, self._transport = self._transport, None
        self.close_error = error
        self._set_state(ConnectionState.CLOSED, error)
        # Wake callers suspended on the ready signal; they observe CLOSED.
        self._closed.set()
        self._ready.set()
        if transport is not None:
            await transport.close()
        logger.log_event(
            "irc",
            "disconnected",
            level=logging.WARNING if error else logging.INFO,
            user=self.nick,
            error=str(error) if error else "",
        )

    def _set_state(self, new_state: ConnectionState, error: BaseException | None = None) -> None:
        if self.state is new_state:
            return
        previous = self.state
        self.state = new_state
        logger.log_event(
            "irc",
            "state_change",
            level=logging.DEBUG,
            user=self.nick,
            old_state=previous.name,
            new_state=new_state.name,
        )
        event = LifecycleEvent(state=new_state, previous=previous, error=error)
        for listener in list(self._lifecycle_listeners):
            try:
                result = listener(event)
                if inspect.isawaitable(result):
                    self._track(result)
            except Exception as e:  # noqa: BLE001
                logger.log_event(
                    "irc",
                    "lifecycle_listener_error",
                    level=logging.ERROR,
                    user=self.nick,
                    error=str(e),
                    error_type=type(e).__name__,
                )

    def _track(self, awaitable: Awaitable[Any]) -> None:
        task = asyncio.ensure_future(awaitable)
        self._background_tasks.add(task)
        task.add_done_callback(self._background_tasks.discard)

    # ------------------------------------------------------------------ #
    # Inbound
    # ------------------------------------------------------------------ #
    async def _process_frame(self, frame: str) -> None:
        # One WebSocket frame may carry several CRLF terminated lines.
        for line in frame.replace("\r\n", "\n").split("\n"):
            if line.strip():
                await self._process_line(line)
            if self.is_closed:
                return

    async def _process_line(self, line: str) -> None:
        self.messages_received += 1
        if not line.startswith("PING"):
            logger.log_event("irc", "raw", level=logging.DEBUG, user=self.nick, raw=line)
        message = parse_message(line)
        if message is None or message.command is None:
            self.messages_dropped += 1
            return

        command_type = message.command.type
        if command_type is CommandType.PING:
            await self._send_pong(message.parameters)
        elif command_type is CommandType.RECONNECT:
            self._reconnect_requested = True

        await self._dispatch(message)

    async def _send_pong(self, host: str | None) -> None:
        await self._write(f"PONG :{host or TWITCH_SERVER_HOST}")
        self.pongs_sent += 1
        logger.log_event("irc", "pong_sent", level=logging.DEBUG, user=self.nick)

    async def _dispatch(self, message: ParsedMessage) -> None:
        self._dispatching = True
        try:
            for listener in list(self._listeners):
                await self._invoke(listener, message)
        finally:
            self._dispatching = False
            if self._pending_listeners:
                self._listeners.extend(self._pending_listeners)
                self._pending_listeners.clear()

    async def _invoke(self, listener: MessageListener, message: ParsedMessage) -> None:
        try:
            result = listener(message)
            if inspect.isawaitable(result):
                await result
        except Exception as e:  # noqa: BLE001
            logger.log_event(
                "irc",
                "listener_error",
                level=logging.ERROR,
                user=self.nick,
                error=str(e),
                error_type=type(e).__name__,
            )

    def get_connection_stats(self) -> dict[str, Any]:
        return {
            "state": self.state.name,
            "channel": self.channel_name,
            "messages_received": self.messages_received,
            "messages_dropped": self.messages_dropped,
            "pongs_sent": self.pongs_sent,
            "reconnects": self.reconnects,
            "listeners": len(self._listeners),
        }


__all__ = ["TwitchChatConnection", "MessageListener", "LifecycleListener"]
