"""Shared test helpers."""

from typing import Any, Dict, Optional

from autoanki.models import Card, Deck


def completion(content: Optional[str] = None, function_arguments: Optional[str] = None) -> Dict[str, Any]:
    """Build an OpenAI-style chat completion body."""
    message: Dict[str, Any] = {"role": "assistant", "content": content}
    if function_arguments is not None:
        message["function_call"] = {"name": "extract_cards_from_text", "arguments": function_arguments}
    return {
        "id": "mock-response",
        "choices": [{"index": 0, "message": message, "finish_reason": "stop"}],
    }


def deck_with(*pairs) -> Deck:
    """Build an in-memory deck from (front, back) pairs."""
    return Deck(name="Test", cards=[Card(front=f, back=b) for f, b in pairs])
