"""Services layer for business logic separation."""

from .errors import (
    AutoAnkiError,
    MissingCredentialError,
    NetworkError,
    NotFoundError,
    ParseError,
    PersistenceError,
    ResponseError,
)
from .deck_store import DeckStore
from .ai_service import AIConfig, CompletionClient, create_completion_client
from .prompts import CARD_EXTRACTION_FUNCTION, PromptComposer
from .chat_service import ChatSession, find_prior_user_query
from .card_generator import CardGenerator
from .integration import (
    IntegrationOrchestrator,
    IntegrationRequest,
    IntegrationResult,
    IntegrationState,
)
from .study_session import Grade, StudySession
from .export_service import DeckExporter

__all__ = [
    "AutoAnkiError",
    "MissingCredentialError",
    "NetworkError",
    "NotFoundError",
    "ParseError",
    "PersistenceError",
    "ResponseError",
    "DeckStore",
    "AIConfig",
    "CompletionClient",
    "create_completion_client",
    "CARD_EXTRACTION_FUNCTION",
    "PromptComposer",
    "ChatSession",
    "find_prior_user_query",
    "CardGenerator",
    "IntegrationOrchestrator",
    "IntegrationRequest",
    "IntegrationResult",
    "IntegrationState",
    "Grade",
    "StudySession",
    "DeckExporter",
]
