"""Tests for study session navigation."""

from autoanki.services import Grade, StudySession
from tests.fixtures import deck_with


def test_flip_and_navigation() -> None:
    session = StudySession(deck_with(("Q1", "A1"), ("Q2", "A2")))

    assert session.current_text == "Q1"
    session.flip()
    assert session.current_text == "A1"

    assert session.next_card() is True
    assert session.current_text == "Q2"
    assert session.progress_text == "Test   2 / 2"

    assert session.prev_card() is True
    assert session.prev_card() is False
    assert session.current_index == 0


def test_next_on_last_card_completes() -> None:
    session = StudySession(deck_with(("Q1", "A1")))

    assert session.next_card() is False
    assert session.complete is True


def test_grade_advances() -> None:
    session = StudySession(deck_with(("Q1", "A1"), ("Q2", "A2")))
    session.flip()

    session.grade(Grade.GOOD)

    assert session.current_index == 1
    assert session.showing_front is True


def test_grade_delays() -> None:
    assert [g.title for g in Grade] == ["Again", "Hard", "Good", "Easy"]
    assert Grade.AGAIN.delay_seconds == 60
    assert Grade.EASY.delay_seconds == 86400


def test_empty_deck() -> None:
    session = StudySession(deck_with())

    assert session.current_card is None
    assert session.current_text == ""
    assert session.progress_text == "Test   0 / 0"


def test_refresh_keeps_position_and_picks_up_edits() -> None:
    deck = deck_with(("Q1", "A1"), ("Q2", "A2"))
    session = StudySession(deck)
    session.next_card()

    edited = deck.copy()
    edited.cards[1].back = "A2, revised"
    session.refresh(edited)
    session.flip()

    assert session.current_text == "A2, revised"


def test_refresh_clamps_index() -> None:
    deck = deck_with(("Q1", "A1"), ("Q2", "A2"))
    session = StudySession(deck)
    session.next_card()

    session.refresh(deck_with(("Q1", "A1")))

    assert session.current_index == 0
