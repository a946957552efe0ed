"""Tests for .apkg export."""

import os
import zipfile

from autoanki.models import Deck
from autoanki.services import DeckExporter
from tests.fixtures import deck_with


def test_inline_and_display_math_are_converted() -> None:
    html = DeckExporter.to_anki_html("Area $\\pi r^2$ and $$\\int_0^1 x\\,dx$$")

    assert html == "Area \\(\\pi r^2\\) and \\[\\int_0^1 x\\,dx\\]"


def test_html_is_escaped_and_newlines_kept() -> None:
    html = DeckExporter.to_anki_html("a < b\nb > c")

    assert html == "a &lt; b<br>b &gt; c"


def test_math_content_is_escaped() -> None:
    assert DeckExporter.to_anki_html("$a<b$") == "\\(a&lt;b\\)"


def test_deck_id_is_stable() -> None:
    deck = Deck(name="Stable", id="fixed-id")

    assert DeckExporter.deck_id_for(deck) == DeckExporter.deck_id_for(Deck(name="Renamed", id="fixed-id"))
    assert 0 < DeckExporter.deck_id_for(deck) < 2 ** 63


def test_export_writes_package(tmp_path) -> None:
    exporter = DeckExporter(output_dir=str(tmp_path))
    deck = deck_with(("What is $1+1$?", "$2$"), ("Capital of France?", "Paris"))
    deck.name = "Math & Geo"

    path = exporter.export(deck)

    assert path == os.path.join(str(tmp_path), "math_geo.apkg")
    assert zipfile.is_zipfile(path)


def test_existing_export_is_backed_up(tmp_path) -> None:
    exporter = DeckExporter(output_dir=str(tmp_path), keep_backups=1)
    deck = deck_with(("Q", "A"))
    target = str(tmp_path / "deck.apkg")

    exporter.export(deck, target)
    exporter.export(deck, target)

    backups = list(tmp_path.glob("deck_*_*.apkg"))
    assert os.path.exists(target)
    assert len(backups) == 1
