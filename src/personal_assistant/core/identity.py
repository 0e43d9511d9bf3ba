"""Resolve the identity of the current user from the outside world.

Identity is produced by an external authentication layer. These helpers only
read it from where that layer leaves it; nothing here authenticates anyone.
"""

from __future__ import annotations

from typing import Any, Callable, Optional

from personal_assistant.errors import AuthenticationUnavailable

IdentityProvider = Callable[[], str]


def identity_from_event(event: dict[str, Any]) -> str:
    """Read the caller identity from a serverless GraphQL resolver event.

    Prefers the authenticated ``identity.username`` (or ``identity.sub``) and
    falls back to an explicit ``arguments.username``.
    """
    identity = event.get("identity") or {}
    for key in ("username", "sub"):
        value = identity.get(key)
        if value:
            return str(value)
    username = (event.get("arguments") or {}).get("username")
    if username:
        return str(username)
    raise AuthenticationUnavailable("No authenticated user on the request")


def static_identity(value: Optional[str]) -> IdentityProvider:
    """Provider for an identity fixed by configuration or a CLI flag."""

    def _provide() -> str:
        if not value:
            raise AuthenticationUnavailable("No user configured; history is read-only")
        return value

    return _provide

