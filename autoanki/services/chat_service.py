"""
Chat Service - assistant conversation about the card being studied.

The transcript is append-only. It starts with exactly one system message
describing the card; user questions are stored bare while the outbound
request carries them wrapped with the card's front and back.
"""

import logging
from typing import List, Optional

from ..models import Card, Message, Role
from ..utils.parsing import TextParser
from .ai_service import CompletionClient
from .prompts import PromptComposer

logger = logging.getLogger(__name__)


def find_prior_user_query(messages: List[Message], assistant_message_id: str) -> str:
    """
    Find the user message preceding an assistant message.

    Scans backward from the assistant message.

    Args:
        messages: Transcript in order
        assistant_message_id: Id of the selected assistant message

    Returns:
        Content of the nearest earlier user message, or "" if there is none
        or the message id is not in the transcript
    """
    index = next((i for i, m in enumerate(messages) if m.id == assistant_message_id), None)
    if index is None:
        return ""

    for i in range(index - 1, -1, -1):
        if messages[i].role == Role.USER:
            return messages[i].content
    return ""


class ChatSession:
    """
    One conversation about one card.

    Usage:
        session = ChatSession(card, client)
        answer = await session.ask("Why is the determinant multiplicative?")
    """

    def __init__(self, card: Card, client: CompletionClient):
        """
        Initialize the session and insert the system message.

        Args:
            card: Snapshot of the card in context
            client: Completion client used for answers
        """
        self.card = card.copy()
        self.client = client
        self._messages: List[Message] = []
        self._ensure_system_message()

    @property
    def messages(self) -> List[Message]:
        """Full transcript, system message first."""
        return list(self._messages)

    @property
    def visible_messages(self) -> List[Message]:
        """Transcript without the system message, as shown in the chat."""
        return [m for m in self._messages if m.role != Role.SYSTEM]

    def _ensure_system_message(self) -> None:
        """Insert the system message once, at the front."""
        if any(m.role == Role.SYSTEM for m in self._messages):
            return
        system = Message(role=Role.SYSTEM, content=PromptComposer.chat_system_prompt(self.card))
        self._messages.insert(0, system)

    def get_message(self, message_id: str) -> Optional[Message]:
        for message in self._messages:
            if message.id == message_id:
                return message
        return None

    def prior_user_query(self, assistant_message_id: str) -> str:
        return find_prior_user_query(self._messages, assistant_message_id)

    def build_request(self, question: str) -> List[Message]:
        """
        Messages for the outbound request.

        Earlier turns are sent as they appear in the transcript; the new
        question is wrapped with the card context.
        """
        history = [m for m in self._messages if m.role != Role.SYSTEM]
        system = [m for m in self._messages if m.role == Role.SYSTEM]
        enriched = Message(role=Role.USER, content=PromptComposer.chat_user_prompt(self.card, question))
        return system + history + [enriched]

    async def ask(self, question: str) -> Message:
        """
        Send a question and append the answer to the transcript.

        The bare question is appended before the request is sent, so it
        stays visible even if the request fails.

        Args:
            question: Text typed by the user

        Returns:
            The appended assistant message

        Raises:
            ValueError: if the question is blank
            AutoAnkiError: any client failure, after the client's own retries
        """
        question = TextParser.clean_input(question)
        if not question:
            raise ValueError("Question is empty")

        request = self.build_request(question)
        self._messages.append(Message(role=Role.USER, content=question))

        content = await self.client.chat(request)

        answer = Message(role=Role.ASSISTANT, content=content)
        self._messages.append(answer)
        return answer

    def update_card(self, card: Card) -> None:
        """
        Refresh the card snapshot after an integration.

        The existing system message is kept; later questions carry the new
        card through the enriched user prompt.
        """
        self.card = card.copy()
