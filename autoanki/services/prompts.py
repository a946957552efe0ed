"""
Prompt templates for chat, card integration and card generation.

All builders are pure functions of their inputs.
"""

from typing import Any, Dict, List

from ..models import Card, Message, Role


# Function schema for structured card extraction
CARD_EXTRACTION_FUNCTION: Dict[str, Any] = {
    "name": "extract_cards_from_text",
    "description": "Generate Anki flashcards from raw input text.",
    "parameters": {
        "type": "object",
        "properties": {
            "cards": {
                "type": "array",
                "items": {
                    "type": "object",
                    "properties": {
                        "front": {"type": "string"},
                        "back": {"type": "string"},
                    },
                    "required": ["front", "back"],
                },
            },
        },
        "required": ["cards"],
    },
}


class PromptComposer:
    """Builds every prompt the application sends to the model."""

    SYSTEM_PROMPTS = {
        "integration": "You are an expert flashcard creator, specializing in precise, effective learning materials.",

        "generation": "You are an expert flashcard generator. Follow Anki best-practices. "
                      "Return JSON matching the function schema when invoked.",
    }

    MATH_REMINDER = """Remember to format any mathematical expressions using LaTeX syntax:
- Use $...$ for inline math
- Use $$...$$ for display math
- Escape special characters properly"""

    DEFAULT_INTEGRATION_INSTRUCTION = (
        "- Simply integrate the assistant's response with the existing card content in a natural way"
    )

    OUTPUT_FORMAT = """# OUTPUT FORMAT
Return the refined card in this exact format:
<CARD>
<FRONT>
(Front side content)
</FRONT>
<BACK>
(Back side content)
</BACK>
</CARD>"""

    # =========================================================================
    # CHAT
    # =========================================================================

    @classmethod
    def chat_system_prompt(cls, card: Card) -> str:
        """System message for a chat about one card."""
        return f"""You are a helpful study assistant. The flashcard in context is:

Front: {card.front}
Back: {card.back}

Provide clear, concise answers.
When explaining mathematical concepts or formulas, use LaTeX notation enclosed in $ symbols for inline math or $$ for block display.
Examples: Use $x^2$ for squared variables or $$\\frac{{a}}{{b}}$$ for fractions on their own line.
Format mathematical equations using LaTeX syntax and enclose them in $ for inline or $$ for display mode."""

    @classmethod
    def chat_user_prompt(cls, card: Card, question: str) -> str:
        """
        Outbound version of a user question, wrapped with the card.

        The transcript keeps the bare question; only the request carries this.
        """
        return f"""Front: {card.front}
Back: {card.back}

Question: {question}

{cls.MATH_REMINDER}"""

    # =========================================================================
    # INTEGRATION
    # =========================================================================

    @classmethod
    def integration_prompt(
        cls,
        front: str,
        back: str,
        user_query: str,
        assistant_response: str,
        user_instructions: str = "",
    ) -> str:
        """
        Prompt asking the model to merge an assistant answer into a card.

        Args:
            front: Current front of the card
            back: Current back of the card
            user_query: The user question that preceded the answer ("" if none)
            assistant_response: The answer to integrate
            user_instructions: Optional free text replacing the default
                               "integrate naturally" instruction

        Returns:
            Prompt text
        """
        base_prompt = f"""Your task is to refine a flashcard by integrating new information.

# ORIGINAL FLASHCARD
Front: {front}
Back: {back}

# CONTEXT
User question: {user_query}
Assistant response: {assistant_response}

# INSTRUCTIONS
- By default, only ADD information to the card (do not remove existing information)
- Preserve all existing information in both sides of the card
- Ensure all mathematical notation is properly formatted with LaTeX ($...$ for inline, $$...$$ for display)
- Maintain a clean, organized structure"""

        instructions = user_instructions.strip()
        custom = (
            f"- User's specific instructions: {instructions}"
            if instructions
            else cls.DEFAULT_INTEGRATION_INSTRUCTION
        )

        return f"{base_prompt}\n{custom}\n\n{cls.OUTPUT_FORMAT}"

    @classmethod
    def integration_messages(cls, prompt: str) -> List[Message]:
        return [
            Message(role=Role.SYSTEM, content=cls.SYSTEM_PROMPTS["integration"]),
            Message(role=Role.USER, content=prompt),
        ]

    # =========================================================================
    # GENERATION
    # =========================================================================

    @classmethod
    def generation_messages(cls, text: str) -> List[Message]:
        """Messages for extracting cards from raw notes."""
        return [
            Message(role=Role.SYSTEM, content=cls.SYSTEM_PROMPTS["generation"]),
            Message(
                role=Role.USER,
                content="Generate high-quality flashcards from the following text:\n\n" + text,
            ),
        ]
