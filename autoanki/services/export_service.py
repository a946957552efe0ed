"""
Deck Exporter - write a deck to an Anki .apkg package.

Card text uses $...$ / $$...$$ math; Anki's MathJax expects \\(...\\) and
\\[...\\], so math delimiters are converted and the rest is HTML-escaped.
"""

import hashlib
import html
import logging
import os
import re
from datetime import datetime
from pathlib import Path
from typing import List, Optional

import genanki

from ..config import Config
from ..models import Deck
from ..utils.helpers import ensure_dir

logger = logging.getLogger(__name__)


class DeckExporter:
    """Builds genanki packages from decks."""

    # Stable base id for the Front/Back note type
    MODEL_ID: int = 1607392319

    DISPLAY_MATH = re.compile(r'\$\$(.+?)\$\$', re.DOTALL)
    INLINE_MATH = re.compile(r'(?<!\\)\$(.+?)(?<!\\)\$', re.DOTALL)

    CSS = """.card {
 font-family: -apple-system, Roboto, "Segoe UI", sans-serif;
 font-size: 20px;
 text-align: center;
 color: #212529;
 background-color: #ffffff;
}
"""

    def __init__(self, output_dir: Optional[str] = None, keep_backups: int = 3):
        """
        Args:
            output_dir: Directory for .apkg files (defaults to Config.OUTPUT_DIR)
            keep_backups: Number of timestamped backups to keep per deck
        """
        self.output_dir = output_dir or Config.OUTPUT_DIR
        self.keep_backups = keep_backups
        self.model = genanki.Model(
            self.MODEL_ID,
            "AutoAnki Basic",
            fields=[{"name": "Front"}, {"name": "Back"}, {"name": "CardId"}],
            templates=[{
                "name": "Card 1",
                "qfmt": "{{Front}}",
                "afmt": "{{FrontSide}}<hr id=answer>{{Back}}",
            }],
            css=self.CSS,
        )

    @staticmethod
    def deck_id_for(deck: Deck) -> int:
        """
        Deterministic Anki deck id derived from the deck's uuid.

        Re-exporting the same deck updates it in Anki instead of duplicating it.
        """
        digest = hashlib.md5(deck.id.encode()).hexdigest()
        # genanki ids must fit in a signed 64-bit integer
        return int(digest[:15], 16)

    @classmethod
    def to_anki_html(cls, text: str) -> str:
        """Escape text for an Anki field and convert math delimiters."""
        placeholders: List[str] = []

        def stash(replacement: str) -> str:
            placeholders.append(replacement)
            return f"\x00{len(placeholders) - 1}\x00"

        text = cls.DISPLAY_MATH.sub(lambda m: stash(f"\\[{html.escape(m.group(1))}\\]"), text)
        text = cls.INLINE_MATH.sub(lambda m: stash(f"\\({html.escape(m.group(1))}\\)"), text)

        escaped = html.escape(text).replace("\n", "<br>")
        return re.sub(r"\x00(\d+)\x00", lambda m: placeholders[int(m.group(1))], escaped)

    def build_package(self, deck: Deck) -> genanki.Package:
        anki_deck = genanki.Deck(self.deck_id_for(deck), deck.name or "AutoAnki")
        for card in deck.cards:
            note = genanki.Note(
                model=self.model,
                fields=[self.to_anki_html(card.front), self.to_anki_html(card.back), card.id],
                guid=genanki.guid_for(card.id),
            )
            anki_deck.add_note(note)
        return genanki.Package(anki_deck)

    def default_path(self, deck: Deck) -> str:
        slug = re.sub(r"[^A-Za-z0-9_-]+", "_", deck.name).strip("_").lower() or "deck"
        return os.path.join(self.output_dir, f"{slug}.apkg")

    def export(self, deck: Deck, output_file: Optional[str] = None) -> str:
        """
        Export a deck to an APKG file.

        An existing file is kept as a timestamped backup.

        Args:
            deck: Deck to export
            output_file: Output path (defaults to <output_dir>/<deck name>.apkg)

        Returns:
            Path of the written file
        """
        output_file = output_file or self.default_path(deck)
        ensure_dir(os.path.dirname(output_file) or ".")

        if os.path.exists(output_file):
            timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
            root, ext = os.path.splitext(output_file)
            backup_file = f"{root}_{timestamp}{ext}"
            os.replace(output_file, backup_file)
            logger.info("Backup created: %s", backup_file)

        self.build_package(deck).write_to_file(output_file)
        logger.info("Exported %d cards of %r to %s", len(deck.cards), deck.name, output_file)

        self._cleanup_old_backups(output_file)
        return output_file

    def _cleanup_old_backups(self, current_file: str) -> None:
        """Remove backups beyond keep_backups, newest kept."""
        path = Path(current_file)
        backups = sorted(
            path.parent.glob(f"{path.stem}_[0-9]*_[0-9]*{path.suffix}"),
            key=os.path.getmtime,
            reverse=True,
        )
        for old_backup in backups[self.keep_backups:]:
            try:
                old_backup.unlink()
            except OSError as e:
                logger.warning("Could not remove old backup %s: %s", old_backup, e)
