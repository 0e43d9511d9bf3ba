"""Application orchestrator - wires all components and manages lifecycle."""

from __future__ import annotations

from personal_assistant.ai.client import AnthropicClient, BedrockClient, InferenceClient
from personal_assistant.ai.handler import TurnHandler
from personal_assistant.ai.use_cases import UseCase, UseCaseCatalog
from personal_assistant.client.session import DEFAULT_USE_CASE, ChatSession
from personal_assistant.config import AppConfig
from personal_assistant.core.identity import IdentityProvider, static_identity
from personal_assistant.log import get_logger
from personal_assistant.storage.conversation_store import ConversationStore, SqliteConversationStore
from personal_assistant.storage.database import Database
from personal_assistant.storage.history import HistoryReader

logger = get_logger(__name__)


class AssistantApp:
    """Top-level application orchestrator."""

    def __init__(
        self,
        config: AppConfig,
        inference_client: InferenceClient | None = None,
        store: ConversationStore | None = None,
    ):
        self.config = config
        self.db = Database(config.storage.db_path)
        self.store = store or SqliteConversationStore(self.db)
        self.use_cases = UseCaseCatalog()
        self.use_cases.extend(
            UseCase(id=uc.id, title=uc.title, objective=uc.objective) for uc in config.use_cases
        )
        self._inference_client = inference_client
        self._turn_handler: TurnHandler | None = None
        self.history_reader = HistoryReader(self.store)

    @property
    def turn_handler(self) -> TurnHandler:
        """The turn handler, built on first use so history-only callers need no model credentials."""
        if self._turn_handler is None:
            client = self._inference_client or self._create_inference_client()
            self._turn_handler = TurnHandler(
                inference_client=client,
                store=self.store,
                model=self.config.model_name,
                generation=self.config.ai,
                persistence=self.config.storage.persistence,
                use_cases=self.use_cases,
            )
        return self._turn_handler

    async def start(self) -> None:
        """Initialize storage."""
        await self.db.initialize()
        logger.info(
            "assistant_started",
            backend=self.config.ai.backend,
            model=self.config.model_name,
            persistence=self.config.storage.persistence.value,
            use_cases=len(self.use_cases),
        )

    async def stop(self) -> None:
        await self.db.close()
        logger.info("assistant_stopped")

    async def __aenter__(self) -> AssistantApp:
        await self.start()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.stop()

    def open_session(
        self,
        identity_provider: IdentityProvider | None = None,
        use_case: str = DEFAULT_USE_CASE,
    ) -> ChatSession:
        provider = identity_provider or static_identity(self.config.identity)
        return ChatSession.open(self.turn_handler, self.history_reader, provider, use_case=use_case)

    def _create_inference_client(self) -> InferenceClient:
        """Create an inference client based on the configured backend."""
        match self.config.ai.backend:
            case "anthropic":
                if not self.config.anthropic:
                    raise ValueError(
                        "AI backend is 'anthropic' but no 'anthropic' section "
                        "(with api_key) in config"
                    )
                return AnthropicClient(self.config.anthropic)
            case "bedrock":
                return BedrockClient(self.config.bedrock)
            case _:
                raise ValueError(f"Unknown AI backend: {self.config.ai.backend}")
