"""Turn handler: conversation in, system prompt + model call, turn persisted, reply out."""

from __future__ import annotations

from personal_assistant.ai.client import InferenceClient
from personal_assistant.ai.conversation import build_messages, question_of
from personal_assistant.ai.use_cases import UseCaseCatalog
from personal_assistant.config import AIConfig
from personal_assistant.core.models import Conversation, Message, TurnRecord
from personal_assistant.core.types import PersistencePolicy
from personal_assistant.errors import EmptyInferenceResult, InvalidConversation, StorageUnavailable
from personal_assistant.log import get_logger
from personal_assistant.storage.conversation_store import ConversationStore

logger = get_logger(__name__)


class TurnHandler:
    """Handles one conversational turn end-to-end.

    Stateless between calls: every collaborator is injected, so concurrent
    turns only share the client and store objects, never per-turn data.
    """

    def __init__(
        self,
        inference_client: InferenceClient,
        store: ConversationStore,
        model: str,
        generation: AIConfig | None = None,
        persistence: PersistencePolicy = PersistencePolicy.BEST_EFFORT,
        use_cases: UseCaseCatalog | None = None,
    ):
        self._inference_client = inference_client
        self._store = store
        self._model = model
        self._generation = generation or AIConfig()
        self._persistence = persistence
        self._use_cases = use_cases or UseCaseCatalog()

    @property
    def use_cases(self) -> UseCaseCatalog:
        return self._use_cases

    async def handle_turn(self, conversation: Conversation, use_case: str, identity: str) -> Message:
        """Answer the last user message of *conversation* and persist the exchange.

        Raises InvalidConversation or InvalidUseCase before any external
        call, InferenceServiceError when the model call fails and
        EmptyInferenceResult when it returns no text. Storage failures
        follow the configured persistence policy.
        """
        question = question_of(conversation)
        if not identity:
            raise InvalidConversation("A turn needs the identity of its owner")
        system_prompt = self._use_cases.get(use_case).system_prompt()

        logger.info("turn_started", owner=identity, use_case=use_case, message_count=len(conversation))
        response = await self._inference_client.chat(
            system=system_prompt,
            messages=build_messages(conversation),
            model=self._model,
            max_tokens=self._generation.max_tokens,
            temperature=self._generation.temperature,
        )
        if response.message is None:
            logger.warning("inference_empty", owner=identity, use_case=use_case, stop_reason=response.stop_reason)
            raise EmptyInferenceResult()

        record = TurnRecord.create(
            owner=identity,
            use_case=use_case,
            question=question,
            response=response.message,
        )
        await self._persist(record)
        return response.message

    async def _persist(self, record: TurnRecord) -> None:
        try:
            await self._store.put(record)
        except StorageUnavailable as e:
            if self._persistence == PersistencePolicy.STRICT:
                logger.error("turn_persist_failed", turn_id=record.id, owner=record.owner, error=str(e))
                raise
            # best-effort: the reply still reaches the user
            logger.warning("turn_persist_failed", turn_id=record.id, owner=record.owner, error=str(e))
            return
        logger.info("turn_persisted", turn_id=record.id, owner=record.owner, use_case=record.use_case)
