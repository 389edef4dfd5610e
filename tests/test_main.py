from __future__ import annotations

import asyncio
import signal
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from joxtabot.config.model import BotConfig
from joxtabot.irc.connection import TwitchChatConnection
from joxtabot.main import _install_signal_handlers, main, run, run_bot
from tests.fixtures.fake_transport import TransportFactory, wait_for

ONLINE = "PRIVMSG #joxtacy :I am online, peeps! widepeepoHappy"


def _config(**kwargs) -> BotConfig:  # type: ignore[no-untyped-def]
    return BotConfig(oauth_token="secret", **kwargs)


def _start_bot(config: BotConfig, factory: TransportFactory, created: list) -> asyncio.Task:
    original = TwitchChatConnection.from_config

    def capture(cfg, **kwargs):  # type: ignore[no-untyped-def]
        conn = original(cfg, **kwargs)
        created.append(conn)
        return conn

    patcher = patch("joxtabot.main.TwitchChatConnection.from_config", side_effect=capture)
    patcher.start()
    task = asyncio.create_task(
        run_bot(config, transport_factory=factory, install_signal_handlers=False)
    )
    task.add_done_callback(lambda _: patcher.stop())
    return task


@pytest.mark.asyncio
async def test_run_bot_announces_and_replies_then_exits_cleanly(transport_factory):
    created: list[TwitchChatConnection] = []
    bot = _start_bot(_config(), transport_factory, created)

    await wait_for(lambda: bool(transport_factory.created) and ONLINE in transport_factory.last.sent)
    transport = transport_factory.last
    transport.feed(":viewer!viewer@viewer.tmi.twitch.tv PRIVMSG #joxtacy :catJAM catJAM")
    await wait_for(lambda: transport.sent[-1] == "PRIVMSG #joxtacy :catJAM")

    await created[0].close()
    assert await asyncio.wait_for(bot, 1) == 0


@pytest.mark.asyncio
async def test_run_bot_skips_empty_online_message(transport_factory):
    created: list[TwitchChatConnection] = []
    bot = _start_bot(_config(online_message=""), transport_factory, created)

    await wait_for(lambda: bool(created) and created[0].is_ready)
    await created[0].close()
    assert await asyncio.wait_for(bot, 1) == 0
    assert not any(line.startswith("PRIVMSG") for line in transport_factory.last.sent)


@pytest.mark.asyncio
async def test_run_bot_exit_code_on_server_close(transport_factory):
    bot = asyncio.create_task(
        run_bot(_config(), transport_factory=transport_factory, install_signal_handlers=False)
    )
    await wait_for(lambda: bool(transport_factory.created) and ONLINE in transport_factory.last.sent)
    transport_factory.last.feed_close()
    assert await asyncio.wait_for(bot, 1) == 1


@pytest.mark.asyncio
async def test_run_bot_exit_code_on_connect_failure():
    factory = TransportFactory(failures=1)
    code = await run_bot(_config(), transport_factory=factory, install_signal_handlers=False)
    assert code == 1


@pytest.mark.asyncio
async def test_main_reports_configuration_error():
    with patch("joxtabot.main.get_configuration", side_effect=ValueError("TWITCH_IRC_BOT_OAUTH is not set")), \
         patch("joxtabot.main.log_error") as mock_log_error, \
         patch("joxtabot.main.run_bot", new_callable=AsyncMock) as mock_run_bot:
        assert await main() == 1
    mock_log_error.assert_called_once()
    mock_run_bot.assert_not_awaited()


@pytest.mark.asyncio
async def test_main_runs_bot_with_loaded_config():
    config = _config()
    with patch("joxtabot.main.get_configuration", return_value=config), \
         patch("joxtabot.main.run_bot", new_callable=AsyncMock, return_value=0) as mock_run_bot:
        assert await main() == 0
    mock_run_bot.assert_awaited_once_with(config)


def test_run_exits_with_main_result():
    with patch("joxtabot.main.LoggerConfigurator") as mock_configurator, \
         patch("joxtabot.main.main", new=MagicMock()), \
         patch("joxtabot.main.asyncio.run", return_value=1):
        with pytest.raises(SystemExit) as excinfo:
            run()
    assert excinfo.value.code == 1
    mock_configurator.return_value.configure.assert_called_once()


def test_run_treats_keyboard_interrupt_as_clean_exit():
    with patch("joxtabot.main.LoggerConfigurator"), \
         patch("joxtabot.main.main", new=MagicMock()), \
         patch("joxtabot.main.asyncio.run", side_effect=KeyboardInterrupt):
        with pytest.raises(SystemExit) as excinfo:
            run()
    assert excinfo.value.code == 0


@pytest.mark.asyncio
async def test_signal_handler_keeps_close_task_until_done(transport_factory):
    conn = TwitchChatConnection("joxtacy", "joxtabot", "secret", transport_factory=transport_factory)
    await conn.start()
    loop = asyncio.get_running_loop()

    with patch.object(loop, "add_signal_handler") as add_handler:
        pending = _install_signal_handlers(conn)
    assert add_handler.call_count == 2
    _, handler, signum = add_handler.call_args_list[-1].args
    assert signum == signal.SIGTERM

    handler(signum)
    assert len(pending) == 1
    task = next(iter(pending))
    await asyncio.wait_for(task, 1)
    await asyncio.sleep(0)
    assert conn.is_closed
    assert not pending

    handler(signum)
    assert not pending
