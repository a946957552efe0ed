"""Tests for tagged card block extraction and input cleanup."""

from autoanki.utils import TextParser, truncate_text


def test_both_blocks_replace_fields() -> None:
    text = "<CARD>\n<FRONT>\nNew front\n</FRONT>\n<BACK>\nNew back\n</BACK>\n</CARD>"

    revision = TextParser.parse_card_block(text, "old front", "old back")

    assert (revision.front, revision.back) == ("New front", "New back")
    assert revision.front_replaced and revision.back_replaced


def test_missing_back_keeps_original() -> None:
    revision = TextParser.parse_card_block("<FRONT>Only front</FRONT>", "F", "B")

    assert revision.front == "Only front"
    assert revision.back == "B"
    assert revision.back_replaced is False


def test_empty_block_counts_as_missing() -> None:
    revision = TextParser.parse_card_block("<FRONT>  \n </FRONT><BACK>kept?</BACK>", "F", "B")

    assert revision.front == "F"
    assert revision.back == "kept?"


def test_no_blocks_changes_nothing() -> None:
    revision = TextParser.parse_card_block("Sorry, I cannot help with that.", "F", "B")

    assert (revision.front, revision.back) == ("F", "B")
    assert revision.changed_anything is False


def test_surrounding_text_is_ignored() -> None:
    text = "Here is the refined card:\n<CARD><FRONT>Q</FRONT><BACK>A</BACK></CARD>\nHope this helps!"

    revision = TextParser.parse_card_block(text, "F", "B")

    assert (revision.front, revision.back) == ("Q", "A")


def test_multiline_math_content_is_preserved() -> None:
    back = "The determinant:\n$$\\det(AB) = \\det A \\det B$$\n- holds for square $A$, $B$"
    text = f"<FRONT>det(AB)?</FRONT>\n<BACK>\n{back}\n</BACK>"

    revision = TextParser.parse_card_block(text, "F", "B")

    assert revision.back == back


def test_first_match_wins_and_is_non_greedy() -> None:
    text = "<FRONT>one</FRONT> <FRONT>two</FRONT><BACK>b</BACK>"

    assert TextParser.parse_card_block(text, "F", "B").front == "one"


def test_clean_input_trims_and_normalizes() -> None:
    assert TextParser.clean_input("  Café \n") == "Café"
    assert TextParser.clean_input("") == ""


def test_contains_math() -> None:
    assert TextParser.contains_math("area is $\\pi r^2$")
    assert TextParser.contains_math("\\[x\\]")
    assert not TextParser.contains_math("plain text")


def test_truncate_text() -> None:
    assert truncate_text("short") == "short"
    assert truncate_text("a  b\nc") == "a b c"
    assert truncate_text("x" * 100, 10) == "x" * 9 + "…"
