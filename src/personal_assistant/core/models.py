"""Conversation and turn record models."""

from __future__ import annotations

import random
import string
import time
from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

from personal_assistant.core.types import Role

_ID_ALPHABET = string.ascii_lowercase + string.digits


class TextBlock(BaseModel):
    model_config = ConfigDict(frozen=True)

    text: str


class Message(BaseModel):
    model_config = ConfigDict(frozen=True)

    role: Role
    content: tuple[TextBlock, ...] = ()

    @classmethod
    def user(cls, text: str) -> Message:
        return cls(role=Role.USER, content=(TextBlock(text=text),))

    @classmethod
    def assistant(cls, text: str) -> Message:
        return cls(role=Role.ASSISTANT, content=(TextBlock(text=text),))

    @property
    def text(self) -> str:
        """All text blocks joined by newlines, stripped."""
        return "\n".join(block.text for block in self.content).strip()


Conversation = list[Message]


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def new_turn_id() -> str:
    """Generate an id like ``chat_1718000000000_k3j9x0a2b``."""
    suffix = "".join(random.choices(_ID_ALPHABET, k=9))
    return f"chat_{int(time.time() * 1000)}_{suffix}"


class TurnRecord(BaseModel):
    """One persisted question/answer exchange owned by a single identity."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(default_factory=new_turn_id)
    owner: str
    use_case: str = Field(alias="useCase")
    question: str = Field(min_length=1)
    response: Message
    timestamp: str = Field(default_factory=utc_now_iso)
    created_at: str = Field(default="", alias="createdAt")
    updated_at: str = Field(default="", alias="updatedAt")

    @model_validator(mode="before")
    @classmethod
    def _fill_audit_timestamps(cls, data: Any) -> Any:
        """createdAt and updatedAt default to the turn timestamp when absent or empty."""
        if not isinstance(data, dict):
            return data
        data = dict(data)
        timestamp = data.get("timestamp") or utc_now_iso()
        data["timestamp"] = timestamp
        for field, alias in (("created_at", "createdAt"), ("updated_at", "updatedAt")):
            if not (data.get(field) or data.get(alias)):
                data.pop(alias, None)
                data[field] = timestamp
        return data

    @classmethod
    def create(cls, owner: str, use_case: str, question: str, response: Message) -> TurnRecord:
        """Build a new record with all three timestamps set to the same instant."""
        return cls(owner=owner, use_case=use_case, question=question, response=response)

    def as_conversation(self) -> Conversation:
        """The two-message conversation this turn represents."""
        return [Message.user(self.question), self.response]

    def to_wire(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)
