"""Convert between conversation messages and Anthropic API message format."""

from __future__ import annotations

import json
from typing import Any

from pydantic import TypeAdapter, ValidationError

from personal_assistant.core.models import Conversation, Message, TextBlock
from personal_assistant.core.types import Role
from personal_assistant.errors import InvalidConversation

_conversation_adapter = TypeAdapter(list[Message])


def parse_conversation(raw: str | list[dict[str, Any]]) -> Conversation:
    """Parse a conversation sent by a client, either as a JSON string or a list.

    Accepts ``[{"role": "user", "content": [{"text": "..."}]}, ...]``.
    """
    try:
        if isinstance(raw, str):
            return _conversation_adapter.validate_json(raw)
        return _conversation_adapter.validate_python(raw)
    except ValidationError as e:
        raise InvalidConversation(f"Malformed conversation: {e.error_count()} error(s)") from e


def question_of(conversation: Conversation) -> str:
    """Return the text of the final user message, the question a turn answers."""
    if not conversation:
        raise InvalidConversation("Conversation must contain at least one message")
    last = conversation[-1]
    if last.role != Role.USER:
        raise InvalidConversation("The last message must come from the user")
    question = last.text
    if not question:
        raise InvalidConversation("The last user message has no text")
    return question


def build_messages(conversation: Conversation) -> list[dict[str, Any]]:
    """Convert messages into Anthropic API messages format.

    Empty text blocks are dropped since the API rejects them.
    """
    return [
        {
            "role": msg.role.value,
            "content": [
                {"type": "text", "text": block.text}
                for block in msg.content
                if block.text
            ],
        }
        for msg in conversation
    ]


def message_from_blocks(blocks: list[Any]) -> Message | None:
    """Build an assistant message from API response content blocks.

    Blocks may be SDK objects or plain dicts. Returns None when the response
    carries no text at all.
    """
    texts: list[TextBlock] = []
    for block in blocks or []:
        if isinstance(block, dict):
            block_type, text = block.get("type", "text"), block.get("text")
        else:
            block_type, text = getattr(block, "type", None), getattr(block, "text", None)
        if block_type == "text" and text and text.strip():
            texts.append(TextBlock(text=text))
    if not texts:
        return None
    return Message(role=Role.ASSISTANT, content=tuple(texts))


def dump_message(message: Message) -> str:
    """Serialize a message the way clients expect it back: ``{"role", "content": [{"text"}]}``."""
    return json.dumps(message.model_dump(mode="json"))
