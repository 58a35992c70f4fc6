"""Tests for configuration loading."""

from __future__ import annotations

import pytest

from groupbot import config


class TestLoadBotToken:
    def test_returns_token(self, monkeypatch):
        monkeypatch.setenv("SLACK_BOT_TOKEN", "xoxb-123")
        assert config.load_bot_token() == "xoxb-123"

    def test_strips_bearer_prefix(self, monkeypatch):
        monkeypatch.setenv("SLACK_BOT_TOKEN", "Bearer xoxb-123 ")
        assert config.load_bot_token() == "xoxb-123"

    def test_missing_token_raises(self, monkeypatch):
        monkeypatch.delenv("SLACK_BOT_TOKEN", raising=False)
        with pytest.raises(ValueError):
            config.load_bot_token()

    def test_empty_token_raises(self, monkeypatch):
        monkeypatch.setenv("SLACK_BOT_TOKEN", "   ")
        with pytest.raises(ValueError):
            config.load_bot_token()


def test_size_bounds_consistent():
    assert config.GROUP_SIZE_MIN <= config.DEFAULT_GROUP_SIZE <= config.GROUP_SIZE_MAX
