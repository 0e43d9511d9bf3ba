from __future__ import annotations

from typing import Any

import pytest
import pytest_asyncio

from personal_assistant.ai.client import InferenceClient, InferenceResponse
from personal_assistant.ai.handler import TurnHandler
from personal_assistant.core.models import Message, TurnRecord
from personal_assistant.errors import InferenceServiceError, StorageUnavailable
from personal_assistant.storage.conversation_store import ConversationStore, SqliteConversationStore
from personal_assistant.storage.database import Database


class FakeInferenceClient(InferenceClient):
    """Returns a canned reply and records every call."""

    def __init__(self, reply: Message | None = None, error: Exception | None = None):
        self.reply = reply
        self.error = error
        self.calls: list[dict[str, Any]] = []

    async def chat(
        self,
        system: str,
        messages: list[dict[str, Any]],
        model: str,
        max_tokens: int = 1000,
        temperature: float = 0.5,
    ) -> InferenceResponse:
        self.calls.append(
            {
                "system": system,
                "messages": messages,
                "model": model,
                "max_tokens": max_tokens,
                "temperature": temperature,
            }
        )
        if self.error is not None:
            raise self.error
        return InferenceResponse(message=self.reply, input_tokens=10, output_tokens=20)


class FailingStore(ConversationStore):
    def __init__(self) -> None:
        self.put_attempts = 0

    async def put(self, record: TurnRecord) -> None:
        self.put_attempts += 1
        raise StorageUnavailable("table is unreachable")

    async def query_by_owner(self, owner: str) -> list[TurnRecord]:
        raise StorageUnavailable("table is unreachable")

    async def get(self, turn_id: str) -> TurnRecord | None:
        raise StorageUnavailable("table is unreachable")


@pytest.fixture
def assistant_reply() -> Message:
    return Message.assistant("Here is a test case...")


@pytest.fixture
def inference(assistant_reply: Message) -> FakeInferenceClient:
    return FakeInferenceClient(reply=assistant_reply)


@pytest.fixture
def failing_inference() -> FakeInferenceClient:
    return FakeInferenceClient(error=InferenceServiceError("service unavailable"))


@pytest_asyncio.fixture
async def database(tmp_path):
    db = Database(str(tmp_path / "data" / "chat_history.db"))
    await db.initialize()
    yield db
    await db.close()


@pytest.fixture
def store(database: Database) -> SqliteConversationStore:
    return SqliteConversationStore(database)


@pytest.fixture
def turn_handler(inference: FakeInferenceClient, store: SqliteConversationStore) -> TurnHandler:
    return TurnHandler(inference_client=inference, store=store, model="claude-test")


def make_record(owner: str, timestamp: str, question: str = "Write an API test", **kwargs: Any) -> TurnRecord:
    return TurnRecord(
        owner=owner,
        use_case=kwargs.pop("use_case", "use-case-2"),
        question=question,
        response=kwargs.pop("response", Message.assistant(f"answer to {question}")),
        timestamp=timestamp,
        created_at=timestamp,
        updated_at=timestamp,
        **kwargs,
    )


@pytest.fixture(autouse=True)
def keep_default_logging(monkeypatch: pytest.MonkeyPatch) -> None:
    # setup_logging caches loggers bound to the stderr of the test that configured them
    monkeypatch.setattr("personal_assistant.__main__.setup_logging", lambda *a, **k: None)
    monkeypatch.setattr("personal_assistant.lambda_handler.setup_logging", lambda *a, **k: None)
