"""
Card Generator - flashcards from raw notes via function calling.

Generated cards are candidates only; the caller previews them and hands
the accepted batch to DeckStore.append_cards.
"""

import logging
from pathlib import Path
from typing import Any, List

import aiofiles

from ..models import Card
from ..utils.parsing import TextParser
from .ai_service import CompletionClient
from .errors import ParseError
from .prompts import CARD_EXTRACTION_FUNCTION, PromptComposer

logger = logging.getLogger(__name__)


class CardGenerator:
    """Generates candidate cards from text."""

    # Plain-text sources that can be read directly
    SUPPORTED_SUFFIXES = (".txt", ".md", ".markdown", ".tex")

    def __init__(self, client: CompletionClient):
        self.client = client

    async def generate_cards(self, text: str) -> List[Card]:
        """
        Generate cards from raw text.

        Args:
            text: Study notes or text extracted from a document

        Returns:
            Candidate cards (may be empty if the model returned none)

        Raises:
            ValueError: if the text is blank
            AutoAnkiError: any client failure
        """
        text = TextParser.clean_input(text)
        if not text:
            raise ValueError("No text to generate cards from")

        result = await self.client.call_function(
            PromptComposer.generation_messages(text),
            CARD_EXTRACTION_FUNCTION,
        )
        cards = self._cards_from(result)
        logger.info("Generated %d candidate cards from %d characters", len(cards), len(text))
        return cards

    async def load_source_text(self, path: str) -> str:
        """
        Read a plain-text source file.

        Args:
            path: Path to a .txt/.md file

        Returns:
            File contents

        Raises:
            ValueError: unsupported file type
            OSError: file cannot be read
        """
        source = Path(path)
        if source.suffix.lower() not in self.SUPPORTED_SUFFIXES:
            raise ValueError(f"Unsupported file type: {source.suffix or source.name}")

        async with aiofiles.open(source, "r", encoding="utf-8", errors="replace") as f:
            return await f.read()

    @staticmethod
    def _cards_from(result: Any) -> List[Card]:
        """
        Convert function-call output into cards.

        Accepts {"cards": [...]} (function arguments) or a bare list (text
        fallback). Items missing front or back are skipped.
        """
        if isinstance(result, dict):
            items = result.get("cards")
        else:
            items = result

        if not isinstance(items, list):
            raise ParseError("Generated output did not contain a card list")

        cards: List[Card] = []
        for item in items:
            if not isinstance(item, dict):
                continue
            front, back = item.get("front"), item.get("back")
            if not isinstance(front, str) or not isinstance(back, str):
                continue
            front, back = TextParser.clean_input(front), TextParser.clean_input(back)
            if front and back:
                cards.append(Card(front=front, back=back))
        return cards
