from __future__ import annotations

import pytest
from pydantic import ValidationError

from joxtabot.config import ENV_FIELDS, get_configuration
from joxtabot.config.model import BotConfig
from joxtabot.constants import TWITCH_IRC_WS_URL


def test_defaults_from_minimal_env():
    config = get_configuration({"TWITCH_IRC_BOT_OAUTH": "abc123"})
    assert config.channel == "joxtacy"
    assert config.nick == "joxtabot"
    assert config.oauth_token == "oauth:abc123"
    assert config.url == TWITCH_IRC_WS_URL
    assert config.online_message == "I am online, peeps! widepeepoHappy"
    assert config.auto_replies == ["catJAM", "widepeepoHappy"]


def test_values_are_normalized():
    config = get_configuration(
        {
            "TWITCH_IRC_BOT_OAUTH": " oauth:abc123 ",
            "TWITCH_CHANNEL": "#SomeChannel",
            "TWITCH_BOT_NICK": " SomeBot ",
            "TWITCH_IRC_WS_URL": "ws://localhost:8080",
            "TWITCH_ONLINE_MESSAGE": "",
            "TWITCH_AUTO_REPLIES": "catJAM, ,PogChamp,",
        }
    )
    assert config.oauth_token == "oauth:abc123"
    assert config.channel == "somechannel"
    assert config.nick == "somebot"
    assert config.url == "ws://localhost:8080"
    assert config.online_message == ""
    assert config.auto_replies == ["catJAM", "PogChamp"]


@pytest.mark.parametrize("env", [{}, {"TWITCH_IRC_BOT_OAUTH": ""}])
def test_missing_token_is_reported(env):
    with pytest.raises(ValueError, match="TWITCH_IRC_BOT_OAUTH"):
        get_configuration(env)


@pytest.mark.parametrize(
    "name,value",
    [
        ("TWITCH_IRC_WS_URL", "https://irc-ws.chat.twitch.tv"),
        ("TWITCH_BOT_NICK", "ab"),
        ("TWITCH_CHANNEL", "#"),
    ],
)
def test_invalid_values_raise_value_error(name, value):
    with pytest.raises(ValueError, match="Invalid bot configuration"):
        get_configuration({"TWITCH_IRC_BOT_OAUTH": "abc", name: value})


def test_model_requires_token():
    with pytest.raises(ValidationError):
        BotConfig()


def test_reads_process_environment(monkeypatch):
    for name in ENV_FIELDS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("TWITCH_IRC_BOT_OAUTH", "fromenv")
    monkeypatch.setenv("TWITCH_CHANNEL", "OtherChannel")
    config = get_configuration()
    assert config.oauth_token == "oauth:fromenv"
    assert config.channel == "otherchannel"
