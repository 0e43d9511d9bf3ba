from __future__ import annotations

import re

import pytest
from pydantic import ValidationError

from personal_assistant.ai.use_cases import UseCaseCatalog
from personal_assistant.core.models import Message, TurnRecord, new_turn_id
from personal_assistant.errors import InvalidUseCase


def test_new_turn_id_format() -> None:
    assert re.fullmatch(r"chat_\d{13}_[a-z0-9]{9}", new_turn_id())
    assert new_turn_id() != new_turn_id()


def test_turn_record_create_sets_equal_timestamps() -> None:
    record = TurnRecord.create(
        owner="alice",
        use_case="use-case-2",
        question="Write an API test",
        response=Message.assistant("Here is a test case..."),
    )

    assert record.timestamp == record.created_at == record.updated_at
    assert record.timestamp.endswith("Z")
    assert record.id.startswith("chat_")


def test_turn_record_fills_audit_timestamps_from_timestamp() -> None:
    direct = TurnRecord(owner="alice", use_case="use-case-1", question="q", response=Message.assistant("a"))
    legacy = TurnRecord.model_validate(
        {
            "owner": "alice",
            "useCase": "use-case-1",
            "question": "q",
            "response": {"role": "assistant", "content": [{"text": "a"}]},
            "timestamp": "2024-05-01T10:00:00.000Z",
            "createdAt": "",
        }
    )

    assert direct.timestamp
    assert direct.created_at == direct.updated_at == direct.timestamp
    assert legacy.created_at == legacy.updated_at == "2024-05-01T10:00:00.000Z"


def test_turn_record_wire_format_uses_camel_case() -> None:
    record = TurnRecord.create(
        owner="alice",
        use_case="use-case-2",
        question="Write an API test",
        response=Message.assistant("Here is a test case..."),
    )

    wire = record.to_wire()

    assert wire["useCase"] == "use-case-2"
    assert wire["createdAt"] == record.created_at
    assert wire["response"] == {"role": "assistant", "content": [{"text": "Here is a test case..."}]}
    assert TurnRecord.model_validate(wire) == record


def test_turn_record_requires_question() -> None:
    with pytest.raises(ValidationError):
        TurnRecord.create(owner="alice", use_case="use-case-1", question="", response=Message.assistant("x"))


def test_messages_are_immutable() -> None:
    message = Message.user("hi")

    with pytest.raises(ValidationError):
        message.role = "assistant"


def test_as_conversation_rebuilds_question_and_answer() -> None:
    record = TurnRecord.create(
        owner="alice", use_case="use-case-1", question="q", response=Message.assistant("a")
    )

    assert record.as_conversation() == [Message.user("q"), Message.assistant("a")]


def test_catalog_lists_default_use_cases() -> None:
    catalog = UseCaseCatalog()

    assert [uc.id for uc in catalog] == ["use-case-1", "use-case-2", "use-case-3", "use-case-4"]
    assert catalog.describe("use-case-2") == "Generate API test cases and automate them"
    assert catalog.describe("legacy-selector") == "legacy-selector"


def test_catalog_get_unknown_raises() -> None:
    with pytest.raises(InvalidUseCase) as excinfo:
        UseCaseCatalog().get("nope")

    assert excinfo.value.use_case == "nope"


def test_every_use_case_renders_its_objective_into_the_prompt() -> None:
    for use_case in UseCaseCatalog():
        prompt = use_case.system_prompt()
        assert use_case.title in prompt
        assert use_case.objective[1:] in prompt
        assert "greet users warmly" in prompt
