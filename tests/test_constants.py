from __future__ import annotations

from joxtabot import constants


def test_env_override(monkeypatch):
    monkeypatch.setenv("SOME_INT", "42")
    monkeypatch.setenv("SOME_FLOAT", "2.5")
    assert constants._get_env_int("SOME_INT", 1) == 42
    assert constants._get_env_float("SOME_FLOAT", 1.0) == 2.5


def test_invalid_value_falls_back(monkeypatch, capsys):
    monkeypatch.setenv("SOME_INT", "many")
    assert constants._get_env_int("SOME_INT", 3) == 3
    assert "Invalid int value for SOME_INT='many'" in capsys.readouterr().out


def test_unset_uses_default(monkeypatch):
    monkeypatch.delenv("SOME_FLOAT", raising=False)
    assert constants._get_env_float("SOME_FLOAT", 1.5) == 1.5


def test_reconnect_attempts_has_floor():
    assert constants.IRC_RECONNECT_MAX_ATTEMPTS >= 1
