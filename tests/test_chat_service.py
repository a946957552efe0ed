"""Tests for the card chat transcript."""

from unittest.mock import AsyncMock

import pytest

from autoanki.models import Card, Message, Role
from autoanki.services import ChatSession, NetworkError, find_prior_user_query


def _transcript():
    return [
        Message(role=Role.SYSTEM, content="sys"),
        Message(role=Role.USER, content="Q1"),
        Message(role=Role.ASSISTANT, content="A1"),
        Message(role=Role.USER, content="Q2"),
        Message(role=Role.ASSISTANT, content="A2"),
    ]


def test_prior_user_query_scans_backward() -> None:
    messages = _transcript()

    assert find_prior_user_query(messages, messages[4].id) == "Q2"
    assert find_prior_user_query(messages, messages[2].id) == "Q1"


def test_prior_user_query_without_user_message() -> None:
    messages = [Message(role=Role.SYSTEM, content="sys"), Message(role=Role.ASSISTANT, content="hi")]

    assert find_prior_user_query(messages, messages[1].id) == ""
    assert find_prior_user_query(messages, "unknown") == ""


def _session(sample_card, answer="Because."):
    client = AsyncMock()
    client.chat = AsyncMock(return_value=answer)
    return ChatSession(sample_card, client), client


def test_session_starts_with_one_system_message(sample_card) -> None:
    session, _ = _session(sample_card)

    assert [m.role for m in session.messages] == [Role.SYSTEM]
    assert sample_card.front in session.messages[0].content
    assert session.visible_messages == []


@pytest.mark.asyncio
async def test_ask_appends_bare_question_and_answer(sample_card) -> None:
    session, client = _session(sample_card)

    answer = await session.ask("  Why?  ")

    assert [m.role for m in session.messages] == [Role.SYSTEM, Role.USER, Role.ASSISTANT]
    assert session.messages[1].content == "Why?"
    assert answer.content == "Because."
    assert session.prior_user_query(answer.id) == "Why?"

    sent = client.chat.call_args.args[0]
    assert sent[0].role == Role.SYSTEM
    assert sent[-1].role == Role.USER
    assert "Question: Why?" in sent[-1].content
    assert sample_card.back in sent[-1].content


@pytest.mark.asyncio
async def test_history_is_sent_bare(sample_card) -> None:
    session, client = _session(sample_card)
    await session.ask("First?")
    await session.ask("Second?")

    sent = client.chat.call_args.args[0]

    assert [m.content for m in sent[1:3]] == ["First?", "Because."]
    assert "Question: Second?" in sent[3].content
    assert sum(1 for m in session.messages if m.role == Role.SYSTEM) == 1


@pytest.mark.asyncio
async def test_failed_request_keeps_question_only(sample_card) -> None:
    session, client = _session(sample_card)
    client.chat.side_effect = NetworkError("offline")

    with pytest.raises(NetworkError):
        await session.ask("Anyone there?")

    assert [m.content for m in session.visible_messages] == ["Anyone there?"]


@pytest.mark.asyncio
async def test_blank_question_rejected(sample_card) -> None:
    session, client = _session(sample_card)

    with pytest.raises(ValueError):
        await session.ask("   ")

    client.chat.assert_not_called()


@pytest.mark.asyncio
async def test_update_card_changes_later_requests(sample_card) -> None:
    session, client = _session(sample_card)
    session.update_card(Card(id=sample_card.id, front="new front", back="new back"))

    await session.ask("Still true?")

    assert "new back" in client.chat.call_args.args[0][-1].content
    assert sum(1 for m in session.messages if m.role == Role.SYSTEM) == 1
