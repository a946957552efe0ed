"""
Integration Orchestrator - merge an assistant answer into a card.

Per request:
    IDLE -> COMPOSING -> AWAITING_RESPONSE -> PARSING -> APPLYING
         -> SUCCEEDED | FAILED
A request dismissed by the user before its response arrives ends in
DISCARDED; the in-flight HTTP call is not cancelled, its result is dropped.

The store is only touched in APPLYING, so every failure before that point
leaves it exactly as it was.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, Optional

from ..models import Card, Message
from ..utils.parsing import CardRevision, TextParser
from .ai_service import CompletionClient
from .chat_service import find_prior_user_query
from .deck_store import DeckStore
from .errors import AutoAnkiError, PersistenceError
from .prompts import PromptComposer

logger = logging.getLogger(__name__)


class IntegrationState(Enum):
    """Lifecycle of one integration request."""
    IDLE = "idle"
    COMPOSING = "composing"
    AWAITING_RESPONSE = "awaiting_response"
    PARSING = "parsing"
    APPLYING = "applying"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    DISCARDED = "discarded"

    @property
    def is_terminal(self) -> bool:
        return self in (IntegrationState.SUCCEEDED, IntegrationState.FAILED, IntegrationState.DISCARDED)


@dataclass
class IntegrationRequest:
    """
    Everything needed to integrate one assistant message.

    Attributes:
        card: Snapshot of the card being edited
        conversation: Transcript containing the assistant message
        assistant_message: The selected assistant message
        instructions: Optional user instructions ("" for the default)
    """
    card: Card
    conversation: List[Message]
    assistant_message: Message
    instructions: str = ""
    state: IntegrationState = IntegrationState.IDLE
    dismissed: bool = field(default=False, init=False)

    def dismiss(self) -> None:
        """The request surface was closed; drop any late response."""
        self.dismissed = True


@dataclass
class IntegrationResult:
    """
    Outcome of an integration request.

    Attributes:
        state: SUCCEEDED, FAILED or DISCARDED
        card: The updated card on success, otherwise the original snapshot
        revision: Parsed revision when parsing was reached
        error: The failure, if any
        persisted: False when the update is in memory but the save failed
    """
    state: IntegrationState
    card: Card
    revision: Optional[CardRevision] = None
    error: Optional[Exception] = None
    persisted: bool = True

    @property
    def succeeded(self) -> bool:
        return self.state == IntegrationState.SUCCEEDED

    @property
    def message(self) -> str:
        """User-facing summary."""
        if self.state == IntegrationState.SUCCEEDED:
            return "Saved" if self.persisted else "Card updated but not saved"
        if self.state == IntegrationState.DISCARDED:
            return "Integration discarded"
        return f"Integration failed: {self.error}"


class IntegrationOrchestrator:
    """
    Coordinates prompt composition, the completion call, parsing and the
    store update for card integration.

    Usage:
        orchestrator = IntegrationOrchestrator(store, client)
        request = IntegrationRequest(card, session.messages, answer, "make it shorter")
        result = await orchestrator.integrate(request)
    """

    def __init__(
        self,
        store: DeckStore,
        client: CompletionClient,
        on_state_change: Optional[Callable[[IntegrationRequest], None]] = None,
    ):
        """
        Args:
            store: Owner of the deck state
            client: Completion client
            on_state_change: Default callback invoked on every transition
        """
        self.store = store
        self.client = client
        self.on_state_change = on_state_change

    def _transition(
        self,
        request: IntegrationRequest,
        state: IntegrationState,
        listener: Optional[Callable[[IntegrationRequest], None]],
    ) -> None:
        logger.debug("Integration for card %s: %s -> %s", request.card.id, request.state.value, state.value)
        request.state = state
        if listener:
            try:
                listener(request)
            except Exception:
                logger.exception("Integration state listener failed")

    def compose(self, request: IntegrationRequest) -> str:
        """Build the integration prompt for a request."""
        user_query = find_prior_user_query(request.conversation, request.assistant_message.id)
        return PromptComposer.integration_prompt(
            front=request.card.front,
            back=request.card.back,
            user_query=user_query,
            assistant_response=request.assistant_message.content,
            user_instructions=TextParser.clean_input(request.instructions),
        )

    async def integrate(
        self,
        request: IntegrationRequest,
        on_state_change: Optional[Callable[[IntegrationRequest], None]] = None,
    ) -> IntegrationResult:
        """
        Run one integration request to a terminal state.

        Never raises for expected failures; they are reported in the result.

        Args:
            request: The integration request (its state is updated in place)
            on_state_change: Callback for this request only; overrides the
                orchestrator's default

        Returns:
            IntegrationResult
        """
        original = request.card.copy()
        listener = on_state_change or self.on_state_change

        self._transition(request, IntegrationState.COMPOSING, listener)
        prompt = self.compose(request)

        self._transition(request, IntegrationState.AWAITING_RESPONSE, listener)
        try:
            content = await self.client.chat(
                PromptComposer.integration_messages(prompt),
                temperature=self.client.config.integration_temperature,
                integration=True,
            )
        except AutoAnkiError as e:
            return self._fail(request, original, e, listener=listener)

        if request.dismissed:
            logger.info("Integration for card %s dismissed, dropping response", original.id)
            self._transition(request, IntegrationState.DISCARDED, listener)
            return IntegrationResult(state=IntegrationState.DISCARDED, card=original)

        self._transition(request, IntegrationState.PARSING, listener)
        revision = TextParser.parse_card_block(content, original.front, original.back)
        if not revision.changed_anything:
            logger.warning("Integration response for card %s had no card block", original.id)

        self._transition(request, IntegrationState.APPLYING, listener)
        try:
            deck = self.store.find_deck_for_card(original.id)
        except AutoAnkiError as e:
            return self._fail(request, original, e, revision, listener)

        persisted = True
        try:
            updated = self.store.update_card(deck.id, original.id, revision.front, revision.back)
        except PersistenceError as e:
            # The in-memory update already happened
            logger.warning("Card %s updated in memory but not saved: %s", original.id, e)
            updated = Card(id=original.id, front=revision.front, back=revision.back)
            persisted = False
        except AutoAnkiError as e:
            return self._fail(request, original, e, revision, listener)

        self._transition(request, IntegrationState.SUCCEEDED, listener)
        logger.info("Integrated assistant response into card %s", original.id)
        return IntegrationResult(
            state=IntegrationState.SUCCEEDED,
            card=updated,
            revision=revision,
            persisted=persisted,
        )

    def _fail(
        self,
        request: IntegrationRequest,
        original: Card,
        error: Exception,
        revision: Optional[CardRevision] = None,
        listener: Optional[Callable[[IntegrationRequest], None]] = None,
    ) -> IntegrationResult:
        logger.error("Integration for card %s failed: %s", original.id, error)
        self._transition(request, IntegrationState.FAILED, listener)
        return IntegrationResult(
            state=IntegrationState.FAILED,
            card=original,
            revision=revision,
            error=error,
        )
