"""Tests for SettingsManager persistence and environment overrides."""

import json

from autoanki.config import SettingsManager


def test_defaults_written_on_first_load(settings) -> None:
    assert settings.get("AI_MODEL") == "gpt-4o-mini"
    assert settings.get("RETRIES") == 2
    assert settings.settings_file.exists()


def test_set_persists(settings) -> None:
    settings.set("AI_MODEL", "gpt-4o")

    raw = json.loads(settings.settings_file.read_text(encoding="utf-8"))
    assert raw["AI_MODEL"] == "gpt-4o"


def test_set_without_persist(settings) -> None:
    settings.set("AI_MODEL", "local-model", persist=False)

    raw = json.loads(settings.settings_file.read_text(encoding="utf-8"))
    assert raw["AI_MODEL"] == "gpt-4o-mini"
    assert settings.get("AI_MODEL") == "local-model"


def test_environment_overrides_file(settings, monkeypatch) -> None:
    settings.set("RETRIES", 7)
    monkeypatch.setenv("RETRIES", "5")
    monkeypatch.setenv("CHAT_TEMPERATURE", "0.3")

    settings.reload()

    assert settings.get("RETRIES") == 5
    assert settings.get("CHAT_TEMPERATURE") == 0.3


def test_invalid_env_value_falls_back_to_default(settings, monkeypatch) -> None:
    monkeypatch.setenv("TIMEOUT", "soon")

    settings.reload()

    assert settings.get("TIMEOUT") == 30


def test_reset(settings) -> None:
    settings.set("AI_MODEL", "other")
    settings.reset("AI_MODEL")

    assert settings.get("AI_MODEL") == "gpt-4o-mini"


def test_corrupt_file_uses_defaults(tmp_path, monkeypatch) -> None:
    path = tmp_path / "settings.json"
    path.write_text("{broken", encoding="utf-8")
    monkeypatch.delenv("AI_MODEL", raising=False)
    SettingsManager.reset_instance()
    try:
        manager = SettingsManager(str(path))
        assert manager.get("AI_MODEL") == "gpt-4o-mini"
    finally:
        SettingsManager.reset_instance()


def test_singleton(settings) -> None:
    assert SettingsManager() is settings
