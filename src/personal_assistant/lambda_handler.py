"""Serverless entry points for the chat and history resolvers.

Events follow the GraphQL resolver shape: ``{"arguments": {...}, "identity": {...}}``.
"""

from __future__ import annotations

import asyncio
import os
from typing import Any

from personal_assistant.ai.conversation import dump_message, parse_conversation
from personal_assistant.app import AssistantApp
from personal_assistant.config import load_config
from personal_assistant.core.identity import identity_from_event
from personal_assistant.log import get_logger, setup_logging

logger = get_logger(__name__)


def _load_app() -> AssistantApp:
    config = load_config(
        os.environ.get("ASSISTANT_CONFIG", "config.yaml"),
        os.environ.get("ASSISTANT_ENV", ".env"),
    )
    setup_logging(config.log_level, json_output=config.log_json)
    return AssistantApp(config)


async def handle_chat_event(app: AssistantApp, event: dict[str, Any]) -> str:
    """Run one turn for the event and return the assistant message as JSON."""
    arguments = event.get("arguments") or {}
    identity = identity_from_event(event)
    conversation = parse_conversation(arguments.get("conversation") or [])
    use_case = arguments.get("useCase") or ""

    reply = await app.turn_handler.handle_turn(conversation, use_case, identity)
    return dump_message(reply)


async def handle_history_event(app: AssistantApp, event: dict[str, Any]) -> list[dict[str, Any]]:
    identity = identity_from_event(event)
    records = await app.history_reader.list_history(identity)
    return [record.to_wire() for record in records]


def chat_handler(event: dict[str, Any], context: Any = None) -> str:
    async def _run() -> str:
        async with _load_app() as app:
            return await handle_chat_event(app, event)

    try:
        return asyncio.run(_run())
    except Exception as e:
        logger.error("chat_handler_failed", error=str(e), error_type=type(e).__name__)
        raise


def history_handler(event: dict[str, Any], context: Any = None) -> list[dict[str, Any]]:
    async def _run() -> list[dict[str, Any]]:
        async with _load_app() as app:
            return await handle_history_event(app, event)

    try:
        return asyncio.run(_run())
    except Exception as e:
        logger.error("history_handler_failed", error=str(e), error_type=type(e).__name__)
        raise
