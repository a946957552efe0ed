"""Tests for the integration state machine against a real store."""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest
from aioresponses import aioresponses

from autoanki.models import Card, Message, Role
from autoanki.services import (
    AIConfig,
    CompletionClient,
    IntegrationOrchestrator,
    IntegrationRequest,
    IntegrationState,
    MissingCredentialError,
    NetworkError,
    NotFoundError,
    ParseError,
)

REFINED = "<CARD><FRONT>What is det(I)?</FRONT><BACK>$1$ for every $n$</BACK></CARD>"


def _client(response=REFINED):
    client = MagicMock()
    client.config = AIConfig(api_key="k")
    client.chat = AsyncMock(return_value=response)
    return client


def _request(card, instructions=""):
    conversation = [
        Message(role=Role.SYSTEM, content="sys"),
        Message(role=Role.USER, content="Does size matter?"),
        Message(role=Role.ASSISTANT, content="No, det(I) is 1 for every n."),
    ]
    return IntegrationRequest(
        card=card,
        conversation=conversation,
        assistant_message=conversation[2],
        instructions=instructions,
    )


@pytest.mark.asyncio
async def test_success_updates_store_in_place(store, math_deck) -> None:
    card = math_deck.cards[0]
    orchestrator = IntegrationOrchestrator(store, _client())

    result = await orchestrator.integrate(_request(card))

    assert result.state == IntegrationState.SUCCEEDED
    assert result.persisted is True
    assert result.message == "Saved"
    cards = store.get_deck(math_deck.id).cards
    assert cards[0].id == card.id
    assert cards[0].back == "$1$ for every $n$"
    assert cards[1].to_dict() == math_deck.cards[1].to_dict()


@pytest.mark.asyncio
async def test_prompt_includes_prior_question_and_instructions(store, math_deck) -> None:
    client = _client()
    orchestrator = IntegrationOrchestrator(store, client)

    await orchestrator.integrate(_request(math_deck.cards[0], instructions="keep it short"))

    messages = client.chat.call_args.args[0]
    assert "User question: Does size matter?" in messages[1].content
    assert "User's specific instructions: keep it short" in messages[1].content
    assert client.chat.call_args.kwargs["integration"] is True
    assert client.chat.call_args.kwargs["temperature"] == client.config.integration_temperature


@pytest.mark.asyncio
async def test_state_transitions(store, math_deck) -> None:
    seen = []
    orchestrator = IntegrationOrchestrator(store, _client(), on_state_change=lambda r: seen.append(r.state))

    await orchestrator.integrate(_request(math_deck.cards[0]))

    assert seen == [
        IntegrationState.COMPOSING,
        IntegrationState.AWAITING_RESPONSE,
        IntegrationState.PARSING,
        IntegrationState.APPLYING,
        IntegrationState.SUCCEEDED,
    ]


@pytest.mark.asyncio
@pytest.mark.parametrize("error", [NetworkError("offline"), MissingCredentialError("Missing API key")])
async def test_client_failure_leaves_store_untouched(store, math_deck, error) -> None:
    client = _client()
    client.chat.side_effect = error
    before = store.get_deck(math_deck.id).to_dict()

    result = await IntegrationOrchestrator(store, client).integrate(_request(math_deck.cards[0]))

    assert result.state == IntegrationState.FAILED
    assert result.error is error
    assert result.message.startswith("Integration failed: ")
    assert store.get_deck(math_deck.id).to_dict() == before


@pytest.mark.asyncio
async def test_card_in_no_deck_fails(store, math_deck) -> None:
    orphan = Card(front="orphan", back="card")

    result = await IntegrationOrchestrator(store, _client()).integrate(_request(orphan))

    assert result.state == IntegrationState.FAILED
    assert isinstance(result.error, NotFoundError)


@pytest.mark.asyncio
async def test_dismissed_request_is_discarded(store, math_deck) -> None:
    request = _request(math_deck.cards[0])
    client = _client()

    async def dismiss_then_answer(*args, **kwargs):
        request.dismiss()
        return REFINED

    client.chat.side_effect = dismiss_then_answer
    before = store.get_deck(math_deck.id).to_dict()

    result = await IntegrationOrchestrator(store, client).integrate(request)

    assert result.state == IntegrationState.DISCARDED
    assert request.state == IntegrationState.DISCARDED
    assert store.get_deck(math_deck.id).to_dict() == before


@pytest.mark.asyncio
async def test_response_without_block_keeps_fields(store, math_deck) -> None:
    card = math_deck.cards[0]

    result = await IntegrationOrchestrator(store, _client("I could not do that.")).integrate(_request(card))

    assert result.succeeded
    assert result.revision.changed_anything is False
    assert store.get_deck(math_deck.id).cards[0].front == card.front


@pytest.mark.asyncio
async def test_persistence_failure_reports_unsaved(store, math_deck, monkeypatch) -> None:
    def fail(*args, **kwargs):
        raise OSError("read-only")

    monkeypatch.setattr("autoanki.services.deck_store.os.replace", fail)

    result = await IntegrationOrchestrator(store, _client()).integrate(_request(math_deck.cards[0]))

    assert result.state == IntegrationState.SUCCEEDED
    assert result.persisted is False
    assert result.message == "Card updated but not saved"
    assert store.has_unsaved_changes
    assert store.get_deck(math_deck.id).cards[0].back == "$1$ for every $n$"


def test_terminal_states() -> None:
    assert IntegrationState.SUCCEEDED.is_terminal
    assert IntegrationState.DISCARDED.is_terminal
    assert not IntegrationState.APPLYING.is_terminal


@pytest.mark.asyncio
async def test_undecodable_response_body_fails_cleanly(store, math_deck, ai_config) -> None:
    client = CompletionClient(ai_config)
    seen = []
    before = store.get_deck(math_deck.id).to_dict()

    with aioresponses() as mocked:
        mocked.post(client.endpoint, body=b'{"choices":[{"message":{"content":"\xff"}}]}')
        async with client:
            result = await IntegrationOrchestrator(store, client).integrate(
                _request(math_deck.cards[0]),
                on_state_change=lambda r: seen.append(r.state),
            )

    assert result.state == IntegrationState.FAILED
    assert isinstance(result.error, ParseError)
    assert seen[-1] == IntegrationState.FAILED
    assert store.get_deck(math_deck.id).to_dict() == before


@pytest.mark.asyncio
async def test_per_call_listeners_stay_with_their_request(store, math_deck) -> None:
    default_seen = []
    first_seen, second_seen = [], []
    client = _client()
    release_first = asyncio.Event()

    async def answer(*args, **kwargs):
        if client.chat.await_count == 1:
            await release_first.wait()
        return REFINED

    client.chat.side_effect = answer
    orchestrator = IntegrationOrchestrator(store, client, on_state_change=lambda r: default_seen.append(r.state))
    first = _request(math_deck.cards[0])
    second = _request(math_deck.cards[1])

    first_task = asyncio.create_task(orchestrator.integrate(first, on_state_change=lambda r: first_seen.append(r)))
    await asyncio.sleep(0)
    first.dismiss()
    second_result = await orchestrator.integrate(second, on_state_change=lambda r: second_seen.append(r))
    release_first.set()
    first_result = await first_task

    assert first_result.state == IntegrationState.DISCARDED
    assert second_result.state == IntegrationState.SUCCEEDED
    assert all(r is first for r in first_seen)
    assert all(r is second for r in second_seen)
    assert second_seen[-1].state == IntegrationState.SUCCEEDED
    assert default_seen == []
