from __future__ import annotations

import logging
from unittest.mock import AsyncMock, MagicMock

import pytest

from joxtabot.bot.behavior import ChatBehavior
from joxtabot.irc.models import Command, CommandType, ParsedMessage, Source
from joxtabot.irc.parser import parse_message
from tests.fixtures.chat_lines import JOIN, PART, PING, PRIVMSG_WITH_TAGS


def _connection() -> MagicMock:
    conn = MagicMock()
    conn.nick = "joxtabot"
    conn.channel = "joxtacy"
    conn.send_privmsg = AsyncMock()
    return conn


def _privmsg(text: str, nick: str = "viewer") -> object:
    return parse_message(f":{nick}!{nick}@{nick}.tmi.twitch.tv PRIVMSG #joxtacy :{text}")


@pytest.mark.asyncio
async def test_auto_reply_echoes_first_matching_emote():
    conn = _connection()
    behavior = ChatBehavior(conn, auto_replies=["catJAM", "widepeepoHappy"])
    await behavior.handle_message(_privmsg("widepeepoHappy catJAM"))
    conn.send_privmsg.assert_awaited_once_with("catJAM")


@pytest.mark.asyncio
async def test_no_reply_without_emote():
    conn = _connection()
    behavior = ChatBehavior(conn, auto_replies=["catJAM"])
    await behavior.handle_message(_privmsg("just chatting"))
    conn.send_privmsg.assert_not_awaited()


@pytest.mark.asyncio
async def test_bot_ignores_itself():
    conn = _connection()
    behavior = ChatBehavior(conn, auto_replies=["catJAM"])
    await behavior.handle_message(_privmsg("catJAM", nick="JoxtaBot"))
    conn.send_privmsg.assert_not_awaited()


@pytest.mark.asyncio
async def test_registered_command_receives_params():
    conn = _connection()
    behavior = ChatBehavior(conn, auto_replies=["catJAM"])
    handler = AsyncMock()
    behavior.register_command("!SO", handler)

    message = _privmsg("!so catJAM_enjoyer")
    await behavior.handle_message(message)
    handler.assert_awaited_once_with(message, "catJAM_enjoyer")
    conn.send_privmsg.assert_not_awaited()


@pytest.mark.asyncio
async def test_sync_command_handler_is_supported():
    conn = _connection()
    behavior = ChatBehavior(conn)
    calls = []
    behavior.register_command("dilly", lambda message, params: calls.append(params))
    await behavior.handle_message(_privmsg("!DILLY"))
    assert calls == [None]


@pytest.mark.asyncio
async def test_unknown_command_is_ignored(caplog):
    caplog.set_level(logging.DEBUG)
    conn = _connection()
    behavior = ChatBehavior(conn, auto_replies=["catJAM"])
    await behavior.handle_message(_privmsg("!nothing catJAM"))
    conn.send_privmsg.assert_not_awaited()
    assert any("Unknown bot command !nothing" in r.message for r in caplog.records)


@pytest.mark.asyncio
async def test_privmsg_is_logged_with_display_name(caplog):
    caplog.set_level(logging.INFO)
    behavior = ChatBehavior(_connection())
    await behavior.handle_message(parse_message(PRIVMSG_WITH_TAGS))
    assert any("💬 #lovingt3s @lovingt3s: bleedPurple" in r.message for r in caplog.records)


@pytest.mark.asyncio
async def test_membership_is_logged(caplog):
    caplog.set_level(logging.DEBUG)
    behavior = ChatBehavior(_connection())
    await behavior.handle_message(parse_message(JOIN))
    await behavior.handle_message(parse_message(PART))
    msgs = [r.message for r in caplog.records]
    assert any("joxtabot joined" in m for m in msgs)
    assert any("someone left" in m for m in msgs)


@pytest.mark.asyncio
async def test_other_commands_are_ignored():
    conn = _connection()
    behavior = ChatBehavior(conn, auto_replies=["tmi"])
    await behavior.handle_message(parse_message(PING))
    conn.send_privmsg.assert_not_awaited()


@pytest.mark.asyncio
async def test_built_message_with_bot_command_reaches_handler():
    conn = _connection()
    behavior = ChatBehavior(conn, auto_replies=["catJAM"])
    handler = AsyncMock()
    behavior.register_command("hug", handler)

    message = ParsedMessage(
        tags=None,
        source=Source(nick="viewer", host="viewer@viewer.tmi.twitch.tv"),
        command=Command(
            type=CommandType.PRIVMSG,
            channel="#joxtacy",
            bot_command="HUG",
            bot_command_params="catJAM",
        ),
        parameters="!HUG catJAM",
    )
    await behavior.handle_message(message)
    handler.assert_awaited_once_with(message, "catJAM")
    conn.send_privmsg.assert_not_awaited()
