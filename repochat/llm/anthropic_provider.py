"""
Anthropic API Provider

Uses the Anthropic SDK for direct API access.
Requires ANTHROPIC_API_KEY environment variable.
"""

import os
import time
from typing import Iterator, Optional, Sequence

import anthropic
from anthropic import Anthropic

from repochat.configs.logging import get_logger
from repochat.exceptions import LLMConnectionError, LLMResponseError, LLMTimeoutError

from .provider import ChatMessage, LLMConfig, LLMProvider, LLMResponse

logger = get_logger("llm.anthropic")

DEFAULT_MAX_TOKENS = 4096


def split_system(messages: Sequence[ChatMessage]) -> tuple[str, list[dict[str, str]]]:
    """Anthropic takes system text separately from the turn list."""
    system_parts = [m.content for m in messages if m.role == "system"]
    turns = [m.to_dict() for m in messages if m.role != "system"]
    return "\n\n".join(system_parts), turns


class AnthropicProvider(LLMProvider):
    """
    LLM provider using the Anthropic API directly.

    Configuration:
        model: Model to use (default: claude-3-5-haiku-latest)

    Environment:
        ANTHROPIC_API_KEY: Required API key
    """

    def __init__(self, config: Optional[dict] = None, client: Optional[Anthropic] = None):
        self._config = config or {}
        self._client = client

    @property
    def name(self) -> str:
        return "anthropic"

    @property
    def default_model(self) -> str:
        return self._config.get("model", "claude-3-5-haiku-latest")

    def is_available(self) -> bool:
        """Check if API key is set and client can be created."""
        if self._client is not None:
            return True
        api_key = os.environ.get("ANTHROPIC_API_KEY")
        if not api_key:
            return False
        self._client = Anthropic(api_key=api_key)
        return True

    def _get_client(self) -> Anthropic:
        if not self.is_available():
            raise LLMConnectionError("Anthropic API key not configured")
        return self._client

    def _request_kwargs(self, messages: Sequence[ChatMessage], config: LLMConfig) -> dict:
        system, turns = split_system(messages)
        kwargs = {
            "model": config.model or self.default_model,
            "max_tokens": config.max_tokens or DEFAULT_MAX_TOKENS,
            "temperature": config.temperature,
            "messages": turns,
            "timeout": config.timeout,
        }
        if system:
            kwargs["system"] = system
        return kwargs

    def complete(self, messages: Sequence[ChatMessage], config: Optional[LLMConfig] = None) -> LLMResponse:
        """Generate completion using Anthropic API."""
        config = config or LLMConfig()
        client = self._get_client()
        kwargs = self._request_kwargs(messages, config)
        start_time = time.time()

        try:
            response = client.messages.create(**kwargs)
        except anthropic.APITimeoutError as e:
            raise LLMTimeoutError(f"Anthropic request timed out: {e}") from e
        except anthropic.APIConnectionError as e:
            raise LLMConnectionError(f"Anthropic connection failed: {e}") from e
        except anthropic.AnthropicError as e:
            logger.error(f"Anthropic API error: {e}")
            raise LLMResponseError(f"Anthropic API error: {e}") from e

        # Extract token usage
        tokens_used = 0
        if hasattr(response, "usage"):
            tokens_used = getattr(response.usage, "input_tokens", 0) + getattr(
                response.usage, "output_tokens", 0
            )

        text = "".join(block.text for block in response.content if getattr(block, "type", "") == "text")
        return LLMResponse(
            text=text,
            model=kwargs["model"],
            tokens_used=tokens_used,
            latency_ms=(time.time() - start_time) * 1000,
            provider=self.name,
        )

    def stream(self, messages: Sequence[ChatMessage], config: Optional[LLMConfig] = None) -> Iterator[str]:
        config = config or LLMConfig()
        client = self._get_client()
        kwargs = self._request_kwargs(messages, config)

        try:
            with client.messages.stream(**kwargs) as stream:
                for text in stream.text_stream:
                    if text:
                        yield text
        except anthropic.APITimeoutError as e:
            raise LLMTimeoutError(f"Anthropic request timed out: {e}") from e
        except anthropic.APIConnectionError as e:
            raise LLMConnectionError(f"Anthropic connection failed: {e}") from e
        except anthropic.AnthropicError as e:
            logger.error(f"Anthropic API error: {e}")
            raise LLMResponseError(f"Anthropic API error: {e}") from e
