"""Shared types and enumerations."""

from __future__ import annotations

from enum import StrEnum


class Role(StrEnum):
    USER = "user"
    ASSISTANT = "assistant"


class PersistencePolicy(StrEnum):
    """What a storage failure means for the turn that produced it."""

    BEST_EFFORT = "best-effort"  # log and still return the reply
    STRICT = "strict"  # fail the turn with StorageUnavailable


class SessionState(StrEnum):
    IDLE = "idle"
    SUBMITTING = "submitting"
    ERROR = "error"
