"""Data models."""

from .card import Card, Deck, Message, Role, new_id

__all__ = ['Card', 'Deck', 'Message', 'Role', 'new_id']
