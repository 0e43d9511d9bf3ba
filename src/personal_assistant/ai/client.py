"""Inference client abstraction with Anthropic API and AWS Bedrock backends."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

import anthropic

from personal_assistant.ai.conversation import message_from_blocks
from personal_assistant.config import AnthropicConfig, BedrockConfig
from personal_assistant.core.models import Message
from personal_assistant.errors import InferenceServiceError
from personal_assistant.log import get_logger

logger = get_logger(__name__)


@dataclass
class InferenceResponse:
    """Unified response from any inference backend."""

    message: Message | None
    input_tokens: int = 0
    output_tokens: int = 0
    stop_reason: str | None = None
    raw: Any = None  # Backend-specific raw response


class InferenceClient(ABC):
    """Abstract base class for inference backends."""

    @abstractmethod
    async def chat(
        self,
        system: str,
        messages: list[dict[str, Any]],
        model: str,
        max_tokens: int = 1000,
        temperature: float = 0.5,
    ) -> InferenceResponse:
        """Send a conversation to the model and return its single reply.

        Exactly one request is made; failures raise InferenceServiceError.
        """
        ...


class _MessagesAPIClient(InferenceClient):
    """Shared Messages API call for SDK clients exposing ``messages.create``."""

    _client: Any
    backend: str = ""

    async def chat(
        self,
        system: str,
        messages: list[dict[str, Any]],
        model: str,
        max_tokens: int = 1000,
        temperature: float = 0.5,
    ) -> InferenceResponse:
        logger.debug("inference_request", backend=self.backend, model=model, message_count=len(messages))
        try:
            response = await self._client.messages.create(
                model=model,
                max_tokens=max_tokens,
                system=system,
                messages=messages,
                temperature=temperature,
            )
        except anthropic.APIError as e:
            logger.error("inference_failed", backend=self.backend, model=model, error=str(e))
            raise InferenceServiceError(f"Inference request failed: {e}") from e
        except Exception as e:
            # SDK-side failures before the request is sent, e.g. unresolvable AWS credentials
            logger.error("inference_client_error", backend=self.backend, model=model, error=str(e))
            raise InferenceServiceError(f"Inference client failed: {e}") from e

        logger.debug(
            "inference_response",
            backend=self.backend,
            model=model,
            input_tokens=response.usage.input_tokens,
            output_tokens=response.usage.output_tokens,
            stop_reason=response.stop_reason,
        )
        return InferenceResponse(
            message=message_from_blocks(response.content),
            input_tokens=response.usage.input_tokens,
            output_tokens=response.usage.output_tokens,
            stop_reason=response.stop_reason,
            raw=response,
        )


class AnthropicClient(_MessagesAPIClient):
    """Anthropic API backend using the official SDK."""

    backend = "anthropic"

    def __init__(self, config: AnthropicConfig):
        self._client = anthropic.AsyncAnthropic(
            api_key=config.api_key,
            base_url=config.base_url,
            max_retries=0,
            timeout=config.timeout,
        )


class BedrockClient(_MessagesAPIClient):
    """Anthropic models hosted on AWS Bedrock. Credentials come from the AWS environment."""

    backend = "bedrock"

    def __init__(self, config: BedrockConfig):
        self._client = anthropic.AsyncAnthropicBedrock(
            aws_region=config.aws_region,
            max_retries=0,
            timeout=config.timeout,
        )
