"""AutoAnki - flashcard decks with an AI study assistant"""

__version__ = "1.0.0"
__author__ = "AutoAnki Team"

from .config import Config, SettingsManager
from .models import Card, Deck, Message
from .services import (
    CompletionClient,
    DeckStore,
    IntegrationOrchestrator,
)

__all__ = [
    'Config',
    'SettingsManager',
    'Card',
    'Deck',
    'Message',
    'CompletionClient',
    'DeckStore',
    'IntegrationOrchestrator',
]
