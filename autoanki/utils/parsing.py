"""Text parsing utilities for model responses and user input."""

import re
import unicodedata
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class CardRevision:
    """
    Result of extracting a card from a tagged-block response.

    `front_replaced` / `back_replaced` tell whether the field came from the
    response or fell back to the original value.
    """

    front: str
    back: str
    front_replaced: bool = False
    back_replaced: bool = False

    @property
    def changed_anything(self) -> bool:
        return self.front_replaced or self.back_replaced


class TextParser:
    """
    Centralized text parsing utilities.

    The card block contract is:
        <CARD><FRONT>...</FRONT><BACK>...</BACK></CARD>
    Extraction is best effort: text outside the block is ignored and a
    missing or empty sub-block keeps the original field.
    """

    # Non-greedy, content may span lines
    FRONT_PATTERN = re.compile(r'<FRONT>(.*?)</FRONT>', re.DOTALL)
    BACK_PATTERN = re.compile(r'<BACK>(.*?)</BACK>', re.DOTALL)

    # Math delimiters that call for LaTeX rendering
    MATH_MARKERS = ("$", "\\[", "\\(", "\\begin{")

    @classmethod
    def normalize_unicode(cls, text: str) -> str:
        """
        Normalize text to NFC form for consistent Unicode handling.

        Args:
            text: Input text

        Returns:
            NFC-normalized text
        """
        if not text:
            return ""
        return unicodedata.normalize('NFC', str(text))

    @classmethod
    def extract_block(cls, pattern: "re.Pattern[str]", text: str) -> Optional[str]:
        """
        Return the stripped content of the first match, or None.

        An all-whitespace match counts as absent.
        """
        if not text:
            return None
        match = pattern.search(text)
        if match is None:
            return None
        content = match.group(1).strip()
        return content or None

    @classmethod
    def parse_card_block(cls, text: str, original_front: str, original_back: str) -> CardRevision:
        """
        Extract front and back from an integration response.

        Args:
            text: Raw model output
            original_front: Value kept when <FRONT> is missing or empty
            original_back: Value kept when <BACK> is missing or empty

        Returns:
            CardRevision with the resulting pair
        """
        front = cls.extract_block(cls.FRONT_PATTERN, text)
        back = cls.extract_block(cls.BACK_PATTERN, text)

        return CardRevision(
            front=cls.normalize_unicode(front) if front is not None else original_front,
            back=cls.normalize_unicode(back) if back is not None else original_back,
            front_replaced=front is not None,
            back_replaced=back is not None,
        )

    @classmethod
    def clean_input(cls, text: str) -> str:
        """Trim and normalize text typed or pasted by the user."""
        return cls.normalize_unicode(text).strip()

    @classmethod
    def contains_math(cls, text: str) -> bool:
        """Check for LaTeX delimiters in text."""
        if not text:
            return False
        return any(marker in text for marker in cls.MATH_MARKERS)
