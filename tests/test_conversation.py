from __future__ import annotations

import json
from types import SimpleNamespace

import pytest

from personal_assistant.ai.conversation import (
    build_messages,
    dump_message,
    message_from_blocks,
    parse_conversation,
    question_of,
)
from personal_assistant.core.models import Message, TextBlock
from personal_assistant.core.types import Role
from personal_assistant.errors import InvalidConversation


def test_parse_conversation_accepts_json_string() -> None:
    raw = json.dumps([{"role": "user", "content": [{"text": "Write an API test"}]}])

    conversation = parse_conversation(raw)

    assert conversation == [Message.user("Write an API test")]


def test_parse_conversation_rejects_unknown_role() -> None:
    with pytest.raises(InvalidConversation):
        parse_conversation([{"role": "system", "content": [{"text": "x"}]}])


def test_question_of_uses_last_message() -> None:
    conversation = [Message.user("first"), Message.assistant("reply"), Message.user("  second  ")]

    assert question_of(conversation) == "second"


def test_build_messages_drops_empty_blocks() -> None:
    msg = Message(role=Role.USER, content=(TextBlock(text="hi"), TextBlock(text="")))

    assert build_messages([msg]) == [{"role": "user", "content": [{"type": "text", "text": "hi"}]}]


def test_message_from_blocks_reads_sdk_objects_and_dicts() -> None:
    blocks = [
        SimpleNamespace(type="text", text="Here is"),
        {"type": "text", "text": "a test case"},
        SimpleNamespace(type="tool_use", text=None),
    ]

    message = message_from_blocks(blocks)

    assert message.role == Role.ASSISTANT
    assert message.text == "Here is\na test case"


@pytest.mark.parametrize("blocks", [[], None, [{"type": "text", "text": "  "}]])
def test_message_from_blocks_without_text_is_none(blocks) -> None:
    assert message_from_blocks(blocks) is None


def test_dump_message_matches_client_shape() -> None:
    assert json.loads(dump_message(Message.assistant("ok"))) == {
        "role": "assistant",
        "content": [{"text": "ok"}],
    }
