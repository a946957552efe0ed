"""
AutoAnki: Deck Exporter
-----------------------

Exports saved decks to Anki .apkg packages without starting the GUI.

    python export_deck.py                 # list decks
    python export_deck.py "Linear Algebra"
    python export_deck.py --all -o exports/
"""

import argparse
import logging
import os
import sys
from typing import List, Optional

from autoanki.config import Config
from autoanki.models import Deck
from autoanki.services import DeckExporter, DeckStore, PersistenceError
from autoanki.utils.logger import setup_logger

logger = logging.getLogger("autoanki.export")


def find_decks(decks: List[Deck], query: str) -> List[Deck]:
    """Match a deck by exact id, then by case-insensitive name."""
    by_id = [deck for deck in decks if deck.id == query]
    if by_id:
        return by_id
    return [deck for deck in decks if deck.name.lower() == query.lower()]


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Export AutoAnki decks to .apkg files")
    parser.add_argument("deck", nargs="?", help="Deck name or id (omit to list decks)")
    parser.add_argument("--all", action="store_true", help="Export every deck")
    parser.add_argument("-f", "--file", default=Config.DECKS_FILE, help="Deck file to read")
    parser.add_argument("-o", "--output-dir", default=Config.OUTPUT_DIR, help="Directory for .apkg files")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> bool:
    """Main entry point."""
    args = parse_args(argv)
    setup_logger(level=logging.DEBUG if args.verbose else logging.INFO)

    store = DeckStore(args.file)
    try:
        decks = store.load_all()
    except PersistenceError as e:
        print(f"[ERROR] {e}")
        return False

    if not decks:
        print(f"No decks in {args.file}")
        return False

    if args.all:
        selected = decks
    elif args.deck:
        selected = find_decks(decks, args.deck)
        if not selected:
            print(f"[ERROR] No deck named {args.deck!r}")
            return False
    else:
        for deck in decks:
            print(f"{deck.id}  {deck.name}  ({len(deck.cards)} cards)")
        return True

    exporter = DeckExporter(output_dir=args.output_dir)
    exported = 0
    for deck in selected:
        if not deck.cards:
            logger.warning("Skipping empty deck %r", deck.name)
            continue
        try:
            path = exporter.export(deck)
        except OSError as e:
            logger.error("Export of %r failed: %s", deck.name, e)
            continue
        print(f"{deck.name}: {len(deck.cards)} cards -> {os.path.abspath(path)}")
        exported += 1

    return exported > 0


if __name__ == "__main__":
    try:
        success = main()
        sys.exit(0 if success else 1)
    except KeyboardInterrupt:
        print("\n[!] Aborted by user.")
        sys.exit(1)
