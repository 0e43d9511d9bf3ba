"""History reader: an identity's past turns, newest first."""

from __future__ import annotations

from personal_assistant.core.models import TurnRecord
from personal_assistant.log import get_logger
from personal_assistant.storage.conversation_store import ConversationStore

logger = get_logger(__name__)


class HistoryReader:
    def __init__(self, store: ConversationStore):
        self._store = store

    async def list_history(self, identity: str) -> list[TurnRecord]:
        """Return every turn owned by *identity*, sorted by timestamp descending.

        The sort is stable, so records sharing a timestamp keep storage order.
        An identity with no turns gets an empty list.
        """
        records = await self._store.query_by_owner(identity)
        # Guard against stores whose query is not an exact owner match.
        owned = [r for r in records if r.owner == identity]
        owned.sort(key=lambda r: r.timestamp, reverse=True)
        logger.debug("history_listed", owner=identity, count=len(owned))
        return owned

    async def get_turn(self, identity: str, turn_id: str) -> TurnRecord | None:
        """Fetch one of *identity*'s turns; other owners' turns read as missing."""
        record = await self._store.get(turn_id)
        if record is None or record.owner != identity:
            return None
        return record
