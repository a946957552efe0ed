"""Study session navigation state."""

from enum import Enum
from typing import Optional

from ..models import Card, Deck


class Grade(Enum):
    """Review grades. Delays are displayed only; nothing is scheduled."""
    AGAIN = ("Again", 60)
    HARD = ("Hard", 360)
    GOOD = ("Good", 600)
    EASY = ("Easy", 86400)

    def __init__(self, title: str, delay_seconds: int):
        self.title = title
        self.delay_seconds = delay_seconds


class StudySession:
    """
    Walks through a deck one card at a time.

    The deck is a snapshot; call refresh() after the store changes so an
    integrated card shows its new content.
    """

    def __init__(self, deck: Deck):
        self.deck = deck
        self.current_index: int = 0
        self.showing_front: bool = True
        self.complete: bool = False

    @property
    def current_card(self) -> Optional[Card]:
        if not self.deck.cards:
            return None
        return self.deck.cards[self.current_index]

    @property
    def current_text(self) -> str:
        card = self.current_card
        if card is None:
            return ""
        return card.front if self.showing_front else card.back

    @property
    def progress_text(self) -> str:
        total = len(self.deck.cards)
        position = self.current_index + 1 if total else 0
        return f"{self.deck.name}   {position} / {total}"

    def flip(self) -> None:
        self.showing_front = not self.showing_front

    def next_card(self) -> bool:
        """
        Advance to the next card.

        Returns:
            False when already on the last card (the session is complete)
        """
        if self.current_index >= len(self.deck.cards) - 1:
            self.complete = True
            return False
        self.current_index += 1
        self.showing_front = True
        return True

    def prev_card(self) -> bool:
        if self.current_index <= 0:
            return False
        self.current_index -= 1
        self.showing_front = True
        return True

    def grade(self, grade: Grade) -> bool:
        """Record a grade. Scheduling is not implemented; this only advances."""
        return self.next_card()

    def refresh(self, deck: Deck) -> None:
        """Swap in a newer snapshot of the same deck, keeping the position."""
        self.deck = deck
        if self.current_index >= len(deck.cards):
            self.current_index = max(len(deck.cards) - 1, 0)
