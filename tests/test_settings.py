"""Tests for configuration helpers."""

import pytest

from src import settings


@pytest.mark.parametrize("value,expected", [
    ("", ""),
    ("0", ""),
    ("   ", ""),
    ("1", "1"),
    (" 42 ", "42"),
])
def test_get_channel_id(monkeypatch, value, expected):
    monkeypatch.setenv("CHANNEL_ID", value)

    assert settings.get_channel_id() == expected


def test_get_channel_id_unset(monkeypatch):
    monkeypatch.delenv("CHANNEL_ID", raising=False)

    assert settings.get_channel_id() == ""


def test_validate_config_passes(monkeypatch, tmp_path):
    monkeypatch.setattr(settings, "STATE_DIR", tmp_path / "state")

    settings.validate_config()

    assert (tmp_path / "state").is_dir()


def test_validate_config_collects_errors(monkeypatch, tmp_path):
    monkeypatch.setattr(settings, "STATE_DIR", tmp_path)
    monkeypatch.setattr(settings, "DATABASE_URL", None)
    monkeypatch.setattr(settings, "QUEUE_BATCH_SIZE", 0)

    with pytest.raises(ValueError) as excinfo:
        settings.validate_config()

    message = str(excinfo.value)
    assert "DATABASE_URL is required" in message
    assert "QUEUE_BATCH_SIZE must be positive" in message
