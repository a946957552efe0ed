"""Data models for AutoAnki."""

import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


def new_id() -> str:
    """Generate an opaque unique identifier."""
    return uuid.uuid4().hex


@dataclass
class Card:
    """A front/back pair, the atomic unit of study."""

    front: str
    back: str
    id: str = field(default_factory=new_id)

    def to_dict(self) -> Dict[str, str]:
        return {"id": self.id, "front": self.front, "back": self.back}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Card":
        return cls(id=str(data["id"]), front=str(data["front"]), back=str(data["back"]))

    def copy(self) -> "Card":
        return Card(id=self.id, front=self.front, back=self.back)


@dataclass
class Deck:
    """A named, ordered collection of cards."""

    name: str
    cards: List[Card] = field(default_factory=list)
    id: str = field(default_factory=new_id)

    def find_card(self, card_id: str) -> Optional[Card]:
        """Return the card with the given id, or None."""
        for card in self.cards:
            if card.id == card_id:
                return card
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "cards": [card.to_dict() for card in self.cards],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Deck":
        return cls(
            id=str(data["id"]),
            name=str(data["name"]),
            cards=[Card.from_dict(c) for c in data.get("cards", [])],
        )

    def copy(self) -> "Deck":
        """Deep copy; callers outside the store only ever see copies."""
        return Deck(id=self.id, name=self.name, cards=[c.copy() for c in self.cards])


class Role:
    """Chat message roles."""
    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


@dataclass
class Message:
    """One entry of a chat transcript."""

    role: str
    content: str
    id: str = field(default_factory=new_id)

    def to_api(self) -> Dict[str, str]:
        """Shape used in the chat completion request body."""
        return {"role": self.role, "content": self.content}
