"""UI components for AutoAnki."""

from .feedback import close_dialog, header, open_dialog, show_snackbar
from .decks import DeckListView
from .deck_detail import DeckDetailView
from .generation import GenerationView
from .study import StudyView, create_message_bubble
from .settings import SettingsView, create_settings_view

__all__ = [
    'close_dialog',
    'header',
    'open_dialog',
    'show_snackbar',
    'DeckListView',
    'DeckDetailView',
    'GenerationView',
    'StudyView',
    'create_message_bubble',
    'SettingsView',
    'create_settings_view',
]
