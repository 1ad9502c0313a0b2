import logging

import pytest

from roster_bot.config import load_settings
from roster_bot.logging_config import setup_logging


def test_load_settings(monkeypatch):
    monkeypatch.setenv("DISCORD_BOT_TOKEN", "abc123")
    for name in (
        "ROSTER_DATA_PATH",
        "GEMINI_API_KEY",
        "GEMINI_MODEL",
        "ROBLOX_MEMBER_PAGE_SIZE",
        "ROSTER_AUTO_SYNC_MINUTES",
    ):
        monkeypatch.delenv(name, raising=False)
    s = load_settings()
    assert s.token == "abc123"
    assert s.data_path == "roster_data.json"
    assert s.gemini_api_key == ""
    assert s.gemini_model == "gemini-2.5-flash"
    assert s.member_page_size == 25
    assert s.auto_sync_minutes == 0

    # empty token environment
    monkeypatch.setenv("DISCORD_BOT_TOKEN", "")
    s2 = load_settings()
    assert s2.token == ""


def test_load_settings_overrides(monkeypatch):
    monkeypatch.setenv("ROSTER_DATA_PATH", "/tmp/roster.json")
    monkeypatch.setenv("GEMINI_API_KEY", "key")
    monkeypatch.setenv("ROBLOX_MEMBER_PAGE_SIZE", "100")
    monkeypatch.setenv("ROSTER_AUTO_SYNC_MINUTES", "15")
    s = load_settings()
    assert s.data_path == "/tmp/roster.json"
    assert s.gemini_api_key == "key"
    assert s.member_page_size == 100
    assert s.auto_sync_minutes == 15


def test_load_settings_rejects_page_size(monkeypatch):
    monkeypatch.setenv("ROBLOX_MEMBER_PAGE_SIZE", "30")
    with pytest.raises(ValueError):
        load_settings()


def test_setup_logging_idempotent():
    logger1 = setup_logging(logging.DEBUG)
    logger2 = setup_logging(logging.DEBUG)
    assert logger1 is logger2
    assert logger1.name == "roster"
    assert logger1.handlers  # at least one handler installed
