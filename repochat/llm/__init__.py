"""
LLM Provider Abstraction

Unified chat-completion interface over the supported providers.
"""

from typing import Optional

from repochat.configs.logging import get_logger

from .anthropic_provider import AnthropicProvider
from .openai_provider import OpenAIProvider
from .provider import ChatMessage, LLMConfig, LLMProvider, LLMResponse

logger = get_logger("llm")

__all__ = [
    "ChatMessage",
    "LLMConfig",
    "LLMProvider",
    "LLMResponse",
    "AnthropicProvider",
    "OpenAIProvider",
    "get_provider",
]


def get_provider(name: str = "openai", config: Optional[dict] = None) -> LLMProvider:
    """
    Create a provider by name.

    The provider is returned even when its API key is missing; requests
    then fail with LLMConnectionError, which the chat stream reports.

    Raises:
        ValueError: If the provider name is unknown
    """
    config = config or {}
    if name == "openai":
        provider: LLMProvider = OpenAIProvider(config.get("openai", {}))
    elif name == "anthropic":
        provider = AnthropicProvider(config.get("anthropic", {}))
    else:
        raise ValueError(f"Unknown provider: {name}")

    if not provider.is_available():
        logger.warning(f"LLM provider {name} is not configured; chat requests will fail")
    return provider
