"""Client-side chat session: the conversation a user sees and its submit state machine."""

from __future__ import annotations

from personal_assistant.ai.handler import TurnHandler
from personal_assistant.core.identity import IdentityProvider
from personal_assistant.core.models import Conversation, Message, TurnRecord
from personal_assistant.core.types import SessionState
from personal_assistant.errors import AuthenticationUnavailable, SubmissionInProgress
from personal_assistant.log import get_logger
from personal_assistant.storage.history import HistoryReader

logger = get_logger(__name__)

DEFAULT_USE_CASE = "use-case-2"


class ChatSession:
    """One user's active conversation.

    ``idle -> submitting -> idle`` on success, ``idle -> submitting -> error``
    on failure. A failed turn keeps every message already shown; the next
    submit (or ``dismiss_error``) goes back to ``idle``. Only one submission
    may be in flight at a time.
    """

    def __init__(
        self,
        turn_handler: TurnHandler,
        history_reader: HistoryReader,
        identity: str | None,
        use_case: str = DEFAULT_USE_CASE,
        banner: str | None = None,
    ):
        self._turn_handler = turn_handler
        self._history_reader = history_reader
        self._identity = identity
        self._use_case = use_case
        self._conversation: Conversation = []
        self._history: list[TurnRecord] = []
        self.state = SessionState.IDLE
        self.error: str | None = None
        self.banner = banner

    @classmethod
    def open(
        cls,
        turn_handler: TurnHandler,
        history_reader: HistoryReader,
        identity_provider: IdentityProvider,
        use_case: str = DEFAULT_USE_CASE,
    ) -> ChatSession:
        """Create a session, downgrading a failed identity lookup to a banner."""
        try:
            identity: str | None = identity_provider()
            banner = None
        except AuthenticationUnavailable as e:
            logger.warning("identity_unavailable", error=str(e))
            identity, banner = None, str(e)
        return cls(turn_handler, history_reader, identity, use_case=use_case, banner=banner)

    @property
    def identity(self) -> str | None:
        return self._identity

    @property
    def use_case(self) -> str:
        return self._use_case

    @property
    def conversation(self) -> tuple[Message, ...]:
        return tuple(self._conversation)

    @property
    def history(self) -> tuple[TurnRecord, ...]:
        return tuple(self._history)

    @property
    def busy(self) -> bool:
        return self.state == SessionState.SUBMITTING

    def select_use_case(self, selector: str) -> None:
        # Validated here so a bad selection never reaches a submit
        self._turn_handler.use_cases.get(selector)
        self._use_case = selector

    def dismiss_error(self) -> None:
        if self.state == SessionState.ERROR:
            self.state = SessionState.IDLE
            self.error = None

    async def submit(self, text: str) -> Message | None:
        """Send *text* as the next user message and return the assistant's reply.

        Blank input is ignored. Errors from the turn are recorded on the
        session and re-raised.
        """
        if not text.strip():
            return None
        if self.busy:
            raise SubmissionInProgress()
        if not self._identity:
            raise AuthenticationUnavailable(self.banner or "Sign in to send messages")

        self.dismiss_error()
        self._conversation.append(Message.user(text))
        self.state = SessionState.SUBMITTING
        try:
            reply = await self._turn_handler.handle_turn(
                list(self._conversation), self._use_case, self._identity
            )
        except Exception as e:
            self.state = SessionState.ERROR
            self.error = str(e)
            logger.error("submit_failed", owner=self._identity, error=str(e))
            raise
        self._conversation.append(reply)
        self.state = SessionState.IDLE
        return reply

    async def refresh_history(self) -> tuple[TurnRecord, ...]:
        """Reload this user's past turns, newest first."""
        if not self._identity:
            raise AuthenticationUnavailable(self.banner or "Sign in to see your history")
        self._history = await self._history_reader.list_history(self._identity)
        return self.history

    def reseed(self, record: TurnRecord) -> None:
        """Replace the active conversation with a past turn's question and answer."""
        if self.busy:
            raise SubmissionInProgress()
        self._conversation = record.as_conversation()
        if record.use_case in self._turn_handler.use_cases:
            self._use_case = record.use_case
        self.state = SessionState.IDLE
        self.error = None

    def reset(self) -> None:
        if self.busy:
            raise SubmissionInProgress()
        self._conversation = []
        self.state = SessionState.IDLE
        self.error = None
