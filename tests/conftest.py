"""Pytest configuration and fixtures for the test suite."""

import pytest

from autoanki.config import SettingsManager
from autoanki.models import Card, Deck
from autoanki.services import AIConfig, CompletionClient, DeckStore


@pytest.fixture
def store(tmp_path):
    """Provide an empty deck store backed by a temp file."""
    return DeckStore(str(tmp_path / "decks.json"))


@pytest.fixture
def math_deck(store):
    """Provide a deck with two cards, already saved."""
    deck = store.create_deck("Linear Algebra")
    store.append_cards(deck.id, [
        ("What is det(I)?", "$1$"),
        ("When is $A$ invertible?", "When $\\det A \\neq 0$"),
    ])
    return store.get_deck(deck.id)


@pytest.fixture
def ai_config():
    """Provide a client config with a key and no retry delays."""
    return AIConfig(
        api_key="test-api-key",
        base_url="https://mock.openai.test/v1",
        chat_retry_delay=0,
        integration_retry_delay=0,
    )


@pytest.fixture
def client(ai_config):
    """Provide a completion client whose transport is patched per test."""
    return CompletionClient(ai_config)


@pytest.fixture
def sample_card():
    return Card(front="What is $e^{i\\pi}$?", back="$-1$")


@pytest.fixture
def settings(tmp_path, monkeypatch):
    """Provide a fresh SettingsManager writing to a temp file."""
    for key in SettingsManager.DEFAULTS:
        monkeypatch.delenv(key, raising=False)
    SettingsManager.reset_instance()
    manager = SettingsManager(str(tmp_path / "settings.json"))
    yield manager
    SettingsManager.reset_instance()
