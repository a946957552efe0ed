"""
Deck Store - owner of all decks and cards.

Single writer of persisted state. Readers receive copies and request
mutations through this API; every mutation is applied in memory first
and then persisted to one JSON file.
"""

import json
import logging
import os
import uuid
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Tuple

from ..config import Config
from ..models import Card, Deck
from .errors import NotFoundError, PersistenceError

logger = logging.getLogger(__name__)


class DeckStore:
    """
    In-memory collection of decks with JSON file persistence.

    A failed save never rolls back the mutation that triggered it; the
    store stays dirty until the next successful save so the UI can show
    a "not saved" indicator. Names and card fields are stored exactly as
    given; trimming and normalization belong to the input surfaces.

    Usage:
        store = DeckStore("data/decks.json")
        store.load_all()
        deck = store.create_deck("Linear Algebra")
        store.append_card(deck.id, "det(I)", "$1$")
    """

    def __init__(self, file_path: Optional[str] = None):
        """
        Initialize the store.

        Args:
            file_path: Path to the JSON file (defaults to Config.DECKS_FILE)
        """
        self.file_path = Path(file_path or Config.DECKS_FILE)
        self._decks: List[Deck] = []
        self._dirty: bool = False
        self._change_callbacks: List[Callable[[], None]] = []

    # =========================================================================
    # READ ACCESS
    # =========================================================================

    @property
    def decks(self) -> List[Deck]:
        """Copies of all decks in insertion order."""
        return [deck.copy() for deck in self._decks]

    @property
    def has_unsaved_changes(self) -> bool:
        """True when the last save attempt failed."""
        return self._dirty

    def get_deck(self, deck_id: str) -> Deck:
        """
        Get a copy of a deck.

        Raises:
            NotFoundError: if the deck id is unknown
        """
        return self._require_deck(deck_id).copy()

    def find_deck_for_card(self, card_id: str) -> Deck:
        """
        Get a copy of the deck containing the card.

        Raises:
            NotFoundError: if no deck contains the card
        """
        for deck in self._decks:
            if deck.find_card(card_id) is not None:
                return deck.copy()
        raise NotFoundError(f"Card {card_id} is not in any deck", {"card_id": card_id})

    def on_change(self, callback: Callable[[], None]) -> None:
        """
        Register a callback for data changes.

        Args:
            callback: Function to call after every mutation or reload
        """
        self._change_callbacks.append(callback)

    def remove_listener(self, callback: Callable[[], None]) -> None:
        if callback in self._change_callbacks:
            self._change_callbacks.remove(callback)

    # =========================================================================
    # MUTATIONS
    # =========================================================================

    def create_deck(self, name: str) -> Deck:
        """
        Append a new empty deck and persist.

        Raises:
            PersistenceError: if saving fails (the deck stays in memory)
        """
        deck = Deck(name=name)
        self._decks.append(deck)
        logger.info("Created deck %r (%s)", deck.name, deck.id)
        self._commit()
        return deck.copy()

    def append_card(self, deck_id: str, front: str, back: str) -> Card:
        """
        Append a single card to a deck and persist.

        Raises:
            NotFoundError: if the deck id is unknown
            PersistenceError: if saving fails
        """
        deck = self._require_deck(deck_id)
        card = Card(front=front, back=back)
        deck.cards.append(card)
        self._commit()
        return card.copy()

    def append_cards(self, deck_id: str, cards: Iterable[Tuple[str, str]]) -> List[Card]:
        """
        Append a batch of cards to a deck and persist.

        All new cards are built before the deck is touched, then added in
        one extend, so either every card is appended or none is. An empty
        batch still triggers a save.

        Args:
            deck_id: Target deck
            cards: (front, back) pairs or Card objects; Card ids are not reused

        Raises:
            NotFoundError: if the deck id is unknown
            PersistenceError: if saving fails
        """
        deck = self._require_deck(deck_id)

        new_cards: List[Card] = []
        for item in cards:
            if isinstance(item, Card):
                front, back = item.front, item.back
            else:
                front, back = item
            new_cards.append(Card(front=front, back=back))

        deck.cards.extend(new_cards)
        logger.info("Appended %d cards to deck %s", len(new_cards), deck_id)
        self._commit()
        return [card.copy() for card in new_cards]

    def update_card(self, deck_id: str, card_id: str, new_front: str, new_back: str) -> Card:
        """
        Replace both fields of a card and persist.

        Raises:
            NotFoundError: if the deck or the card is unknown (nothing changes)
            PersistenceError: if saving fails (the update stays in memory)
        """
        deck = self._require_deck(deck_id)
        card = deck.find_card(card_id)
        if card is None:
            raise NotFoundError(
                f"Card {card_id} not found in deck {deck_id}",
                {"deck_id": deck_id, "card_id": card_id},
            )

        card.front = new_front
        card.back = new_back
        self._commit()
        return card.copy()

    # =========================================================================
    # PERSISTENCE
    # =========================================================================

    def load_all(self) -> List[Deck]:
        """
        Replace in-memory state with the contents of the deck file.

        A missing file is a first run and leaves the store empty. On a read
        or decode failure the previous state is kept.

        Returns:
            Copies of the loaded decks

        Raises:
            PersistenceError: if the file cannot be read or decoded
        """
        if not self.file_path.exists():
            logger.info("No saved decks at %s", self.file_path)
            return self.decks

        try:
            with open(self.file_path, "r", encoding="utf-8") as f:
                raw = json.load(f)
            decks = [Deck.from_dict(item) for item in raw]
        except (OSError, ValueError, KeyError, TypeError) as e:
            logger.error("Failed to load decks from %s: %s", self.file_path, e)
            raise PersistenceError(
                f"Failed to load decks: {e}", {"path": str(self.file_path)}
            ) from e

        self._check_unique_ids(decks)

        self._decks = decks
        self._dirty = False
        logger.info("Loaded %d decks from %s", len(decks), self.file_path)
        self._notify_change()
        return self.decks

    def persist(self) -> None:
        """
        Write the full state to disk (atomic write: temp file + rename).

        Raises:
            PersistenceError: if the write fails
        """
        temp_file = self.file_path.with_name(f"{self.file_path.name}.{uuid.uuid4().hex[:8]}.tmp")
        try:
            self.file_path.parent.mkdir(parents=True, exist_ok=True)
            with open(temp_file, "w", encoding="utf-8") as f:
                json.dump([deck.to_dict() for deck in self._decks], f, indent=2, ensure_ascii=False)
            os.replace(temp_file, self.file_path)
        except (OSError, TypeError, ValueError) as e:
            self._dirty = True
            if temp_file.exists():
                try:
                    temp_file.unlink()
                except OSError:
                    logger.debug("Could not remove temp file %s", temp_file)
            logger.error("Failed to save decks to %s: %s", self.file_path, e)
            raise PersistenceError(
                f"Failed to save decks: {e}", {"path": str(self.file_path)}
            ) from e

        self._dirty = False

    # =========================================================================
    # INTERNALS
    # =========================================================================

    def _require_deck(self, deck_id: str) -> Deck:
        for deck in self._decks:
            if deck.id == deck_id:
                return deck
        raise NotFoundError(f"Deck {deck_id} not found", {"deck_id": deck_id})

    def _commit(self) -> None:
        """Persist, then notify listeners. Listeners run even if the save fails."""
        try:
            self.persist()
        finally:
            self._notify_change()

    def _notify_change(self) -> None:
        for callback in list(self._change_callbacks):
            try:
                callback()
            except Exception:
                logger.exception("Deck change listener failed")

    @staticmethod
    def _check_unique_ids(decks: List[Deck]) -> None:
        seen = set()
        for deck in decks:
            for card in deck.cards:
                if card.id in seen:
                    raise PersistenceError(
                        f"Duplicate card id {card.id} in deck file", {"card_id": card.id}
                    )
                seen.add(card.id)
