"""
Exception hierarchy for AutoAnki.

    AutoAnkiError (base)
     MissingCredentialError - no API key configured, request never sent
     NetworkError - transport failure after retries (retryable)
     ResponseError - error reported by the completion endpoint
     ParseError - malformed body or missing fields
     NotFoundError - unknown deck or card id
     PersistenceError - deck file read/write failure
"""

from typing import Any, Dict, Optional


class AutoAnkiError(Exception):
    """
    Base exception for all AutoAnki errors.

    Attributes:
        message: Human-readable error message
        context: Additional context for debugging (ids, paths, status codes)
    """

    retryable: bool = False

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def __str__(self) -> str:
        return self.message


class MissingCredentialError(AutoAnkiError):
    """No API key is configured."""


class NetworkError(AutoAnkiError):
    """Transport-level failure (connection error, timeout)."""

    retryable = True


class ResponseError(AutoAnkiError):
    """The endpoint answered with an error payload."""


class ParseError(AutoAnkiError):
    """The response body was not the expected JSON shape."""


class NotFoundError(AutoAnkiError):
    """A deck or card id is unknown to the store."""


class PersistenceError(AutoAnkiError):
    """Reading or writing the deck file failed."""
