"""Error taxonomy shared by the turn handler, history reader and clients."""

from __future__ import annotations


class AssistantError(Exception):
    """Base class for errors surfaced to the caller of a turn or history read."""


class InvalidConversation(AssistantError, ValueError):
    """The submitted conversation cannot produce a turn."""


class InvalidUseCase(AssistantError, ValueError):
    def __init__(self, use_case: str):
        super().__init__(f"Unknown use case: {use_case!r}")
        self.use_case = use_case


class EmptyInferenceResult(AssistantError):
    def __init__(self, message: str = "No message in the response output"):
        super().__init__(message)


class InferenceServiceError(AssistantError):
    """Transport or service failure from the model API. Never retried."""


class StorageUnavailable(AssistantError):
    """The conversation store could not be read or written."""


class AuthenticationUnavailable(AssistantError):
    """No identity could be resolved for the current user."""


class SubmissionInProgress(AssistantError):
    def __init__(self) -> None:
        super().__init__("A message is already being sent. Wait for the reply.")
