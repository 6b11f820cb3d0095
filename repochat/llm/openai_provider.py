"""
OpenAI Provider

Uses the OpenAI SDK chat completions API.
Requires OPENAI_API_KEY environment variable.
"""

import os
import time
from typing import Iterator, Optional, Sequence

import openai
from openai import OpenAI

from repochat.configs.logging import get_logger
from repochat.exceptions import LLMConnectionError, LLMResponseError, LLMTimeoutError

from .provider import ChatMessage, LLMConfig, LLMProvider, LLMResponse

logger = get_logger("llm.openai")


class OpenAIProvider(LLMProvider):
    """
    LLM provider using the OpenAI API.

    Configuration:
        model: Model to use (default: gpt-4.1-mini-2025-04-14)

    Environment:
        OPENAI_API_KEY: Required API key
    """

    def __init__(self, config: Optional[dict] = None, client: Optional[OpenAI] = None):
        self._config = config or {}
        self._client = client

    @property
    def name(self) -> str:
        return "openai"

    @property
    def default_model(self) -> str:
        return self._config.get("model", "gpt-4.1-mini-2025-04-14")

    def is_available(self) -> bool:
        if self._client is not None:
            return True
        api_key = os.environ.get("OPENAI_API_KEY")
        if not api_key:
            logger.debug("OPENAI_API_KEY not set")
            return False
        self._client = OpenAI(api_key=api_key)
        return True

    def _get_client(self) -> OpenAI:
        if not self.is_available():
            raise LLMConnectionError("OpenAI API key not configured")
        return self._client

    def _request_kwargs(self, messages: Sequence[ChatMessage], config: LLMConfig) -> dict:
        kwargs = {
            "model": config.model or self.default_model,
            "messages": [m.to_dict() for m in messages],
            "temperature": config.temperature,
            "timeout": config.timeout,
        }
        if config.max_tokens:
            kwargs["max_tokens"] = config.max_tokens
        return kwargs

    def complete(self, messages: Sequence[ChatMessage], config: Optional[LLMConfig] = None) -> LLMResponse:
        config = config or LLMConfig()
        client = self._get_client()
        kwargs = self._request_kwargs(messages, config)
        start_time = time.time()

        try:
            response = client.chat.completions.create(**kwargs)
        except openai.APITimeoutError as e:
            raise LLMTimeoutError(f"OpenAI request timed out: {e}") from e
        except openai.APIConnectionError as e:
            raise LLMConnectionError(f"OpenAI connection failed: {e}") from e
        except openai.OpenAIError as e:
            logger.error(f"OpenAI API error: {e}")
            raise LLMResponseError(f"OpenAI API error: {e}") from e

        if not response.choices:
            raise LLMResponseError("OpenAI returned no choices")

        tokens_used = response.usage.total_tokens if response.usage else 0
        return LLMResponse(
            text=response.choices[0].message.content or "",
            model=response.model or kwargs["model"],
            tokens_used=tokens_used,
            latency_ms=(time.time() - start_time) * 1000,
            provider=self.name,
        )

    def stream(self, messages: Sequence[ChatMessage], config: Optional[LLMConfig] = None) -> Iterator[str]:
        config = config or LLMConfig()
        client = self._get_client()
        kwargs = self._request_kwargs(messages, config)

        try:
            stream = client.chat.completions.create(stream=True, **kwargs)
            try:
                for chunk in stream:
                    if not chunk.choices:
                        continue
                    content = chunk.choices[0].delta.content
                    if content:
                        yield content
            finally:
                stream.close()
        except openai.APITimeoutError as e:
            raise LLMTimeoutError(f"OpenAI request timed out: {e}") from e
        except openai.APIConnectionError as e:
            raise LLMConnectionError(f"OpenAI connection failed: {e}") from e
        except openai.OpenAIError as e:
            logger.error(f"OpenAI API error: {e}")
            raise LLMResponseError(f"OpenAI API error: {e}") from e
