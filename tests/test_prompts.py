"""Tests for prompt composition."""

from autoanki.models import Card, Role
from autoanki.services import CARD_EXTRACTION_FUNCTION, PromptComposer


def test_integration_prompt_contains_card_and_context() -> None:
    prompt = PromptComposer.integration_prompt(
        front="What is $e^{i\\pi}$?",
        back="$-1$",
        user_query="Why?",
        assistant_response="Euler's formula gives $\\cos\\pi + i\\sin\\pi$.",
    )

    assert "Front: What is $e^{i\\pi}$?" in prompt
    assert "Back: $-1$" in prompt
    assert "User question: Why?" in prompt
    assert "Assistant response: Euler's formula" in prompt
    assert PromptComposer.DEFAULT_INTEGRATION_INSTRUCTION in prompt
    assert prompt.rstrip().endswith("</CARD>")


def test_user_instructions_replace_default() -> None:
    prompt = PromptComposer.integration_prompt("F", "B", "Q", "A", user_instructions="  make it shorter ")

    assert "- User's specific instructions: make it shorter" in prompt
    assert PromptComposer.DEFAULT_INTEGRATION_INSTRUCTION not in prompt


def test_blank_user_instructions_use_default() -> None:
    prompt = PromptComposer.integration_prompt("F", "B", "Q", "A", user_instructions="   ")

    assert PromptComposer.DEFAULT_INTEGRATION_INSTRUCTION in prompt


def test_empty_user_query_is_allowed() -> None:
    prompt = PromptComposer.integration_prompt("F", "B", "", "A")

    assert "User question: \n" in prompt


def test_integration_messages() -> None:
    messages = PromptComposer.integration_messages("prompt text")

    assert [m.role for m in messages] == [Role.SYSTEM, Role.USER]
    assert messages[1].content == "prompt text"


def test_chat_prompts_carry_the_card() -> None:
    card = Card(front="2+2", back="4")

    system = PromptComposer.chat_system_prompt(card)
    user = PromptComposer.chat_user_prompt(card, "Why four?")

    assert "Front: 2+2" in system and "Back: 4" in system
    assert "Question: Why four?" in user
    assert "Front: 2+2" in user


def test_generation_messages_and_schema() -> None:
    messages = PromptComposer.generation_messages("Mitochondria make ATP.")

    assert messages[0].role == Role.SYSTEM
    assert messages[1].content.endswith("Mitochondria make ATP.")
    assert CARD_EXTRACTION_FUNCTION["name"] == "extract_cards_from_text"
    assert CARD_EXTRACTION_FUNCTION["parameters"]["required"] == ["cards"]
