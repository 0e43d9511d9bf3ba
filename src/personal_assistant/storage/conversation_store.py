"""Conversation store: insert-only turn records, queryable by owner."""

from __future__ import annotations

from abc import ABC, abstractmethod

import aiosqlite

from personal_assistant.core.models import Message, TurnRecord
from personal_assistant.errors import StorageUnavailable
from personal_assistant.log import get_logger
from personal_assistant.storage.database import Database

logger = get_logger(__name__)


class ConversationStore(ABC):
    """Key-value table of TurnRecords keyed by id."""

    @abstractmethod
    async def put(self, record: TurnRecord) -> None:
        """Write a new record. Raises StorageUnavailable on failure."""
        ...

    @abstractmethod
    async def query_by_owner(self, owner: str) -> list[TurnRecord]:
        """All records owned by *owner*, in storage order. Callers sort."""
        ...

    @abstractmethod
    async def get(self, turn_id: str) -> TurnRecord | None:
        ...


class SqliteConversationStore(ConversationStore):
    """ConversationStore on top of the SQLite ``chat_history`` table."""

    def __init__(self, db: Database):
        self._db = db

    def _conn(self) -> aiosqlite.Connection:
        try:
            return self._db.conn
        except RuntimeError as e:
            raise StorageUnavailable(str(e)) from e

    async def put(self, record: TurnRecord) -> None:
        conn = self._conn()
        try:
            await conn.execute(
                """INSERT INTO chat_history
                   (id, owner, use_case, question, response_json,
                    timestamp, created_at, updated_at)
                   VALUES (?, ?, ?, ?, ?, ?, ?, ?)""",
                (
                    record.id,
                    record.owner,
                    record.use_case,
                    record.question,
                    record.response.model_dump_json(),
                    record.timestamp,
                    record.created_at,
                    record.updated_at,
                ),
            )
            await conn.commit()
        except aiosqlite.Error as e:
            raise StorageUnavailable(f"Could not save turn {record.id}: {e}") from e

    async def query_by_owner(self, owner: str) -> list[TurnRecord]:
        conn = self._conn()
        try:
            cursor = await conn.execute(
                "SELECT * FROM chat_history WHERE owner = ? ORDER BY rowid ASC",
                (owner,),
            )
            rows = await cursor.fetchall()
        except aiosqlite.Error as e:
            raise StorageUnavailable(f"Could not read chat history: {e}") from e
        return [self._row_to_record(row) for row in rows]

    async def get(self, turn_id: str) -> TurnRecord | None:
        conn = self._conn()
        try:
            cursor = await conn.execute("SELECT * FROM chat_history WHERE id = ?", (turn_id,))
            row = await cursor.fetchone()
        except aiosqlite.Error as e:
            raise StorageUnavailable(f"Could not read turn {turn_id}: {e}") from e
        return self._row_to_record(row) if row is not None else None

    @staticmethod
    def _row_to_record(row) -> TurnRecord:
        return TurnRecord(
            id=row["id"],
            owner=row["owner"],
            use_case=row["use_case"],
            question=row["question"],
            response=Message.model_validate_json(row["response_json"]),
            timestamp=row["timestamp"],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )
