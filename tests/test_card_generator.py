"""Tests for card generation from notes."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from autoanki.services import CardGenerator, ParseError
from autoanki.services.prompts import CARD_EXTRACTION_FUNCTION


def _generator(result):
    client = MagicMock()
    client.call_function = AsyncMock(return_value=result)
    return CardGenerator(client), client


@pytest.mark.asyncio
async def test_generates_cards_from_function_arguments() -> None:
    generator, client = _generator({"cards": [
        {"front": "What do mitochondria make?", "back": "ATP"},
        {"front": " Powerhouse of the cell? ", "back": " Mitochondria "},
    ]})

    cards = await generator.generate_cards("Mitochondria make ATP.")

    assert [(c.front, c.back) for c in cards] == [
        ("What do mitochondria make?", "ATP"),
        ("Powerhouse of the cell?", "Mitochondria"),
    ]
    assert client.call_function.call_args.args[1] is CARD_EXTRACTION_FUNCTION


@pytest.mark.asyncio
async def test_accepts_bare_list() -> None:
    generator, _ = _generator([{"front": "Q", "back": "A"}])

    cards = await generator.generate_cards("notes")

    assert len(cards) == 1


@pytest.mark.asyncio
async def test_skips_malformed_items() -> None:
    generator, _ = _generator({"cards": [
        {"front": "Q"},
        "not a card",
        {"front": "", "back": "A"},
        {"front": "Q2", "back": 3},
        {"front": "Q3", "back": "A3"},
    ]})

    cards = await generator.generate_cards("notes")

    assert [c.front for c in cards] == ["Q3"]


@pytest.mark.asyncio
async def test_missing_card_list_is_parse_error() -> None:
    generator, _ = _generator({"flashcards": []})

    with pytest.raises(ParseError):
        await generator.generate_cards("notes")


@pytest.mark.asyncio
async def test_blank_text_never_calls_client() -> None:
    generator, client = _generator([])

    with pytest.raises(ValueError):
        await generator.generate_cards("  \n ")

    client.call_function.assert_not_called()


@pytest.mark.asyncio
async def test_load_source_text(tmp_path) -> None:
    notes = tmp_path / "notes.md"
    notes.write_text("# Cells\nMitochondria make ATP.\n", encoding="utf-8")
    generator, _ = _generator([])

    assert await generator.load_source_text(str(notes)) == "# Cells\nMitochondria make ATP.\n"


@pytest.mark.asyncio
async def test_load_source_text_rejects_binary_formats(tmp_path) -> None:
    generator, _ = _generator([])

    with pytest.raises(ValueError):
        await generator.load_source_text(str(tmp_path / "slides.pdf"))
