"""Utility functions."""

from pathlib import Path


def ensure_dir(path: str) -> None:
    """Ensure directory exists."""
    Path(path).mkdir(parents=True, exist_ok=True)


def truncate_text(text: str, max_length: int = 60) -> str:
    """Shorten text for list rows, adding an ellipsis when cut."""
    text = " ".join(str(text or "").split())
    if len(text) <= max_length:
        return text
    return text[: max_length - 1].rstrip() + "…"
