"""Utils module."""

from .helpers import ensure_dir, truncate_text
from .parsing import CardRevision, TextParser
from .logger import setup_logger

__all__ = [
    'ensure_dir',
    'truncate_text',
    'CardRevision',
    'TextParser',
    'setup_logger',
]
