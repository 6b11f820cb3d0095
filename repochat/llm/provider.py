"""
Base LLM Provider Interface

Defines the abstract base class for chat-completion providers.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Iterator, Optional, Sequence

from repochat.configs.constants import get_timeout


@dataclass(frozen=True)
class ChatMessage:
    """One role-tagged message of a conversation."""

    role: str  # system, user or assistant
    content: str

    def to_dict(self) -> dict[str, str]:
        return {"role": self.role, "content": self.content}


@dataclass
class LLMConfig:
    """Configuration for an LLM generation request."""

    model: Optional[str] = None  # Use provider default if None
    max_tokens: Optional[int] = None
    temperature: float = 0.2
    timeout: float = get_timeout("llm_request")


@dataclass
class LLMResponse:
    """Response from an LLM provider."""

    text: str
    model: str
    tokens_used: int = 0
    latency_ms: float = 0.0
    provider: str = ""


class LLMProvider(ABC):
    """
    Abstract base class for LLM providers.

    Providers implement a blocking completion and a streaming completion
    that yields text fragments in order.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Provider name for logging and identification."""
        pass

    @property
    @abstractmethod
    def default_model(self) -> str:
        """Default model to use if none specified."""
        pass

    @abstractmethod
    def is_available(self) -> bool:
        """
        Check if provider is configured.

        Returns:
            True if the provider can be used, False otherwise.
        """
        pass

    @abstractmethod
    def complete(self, messages: Sequence[ChatMessage], config: Optional[LLMConfig] = None) -> LLMResponse:
        """
        Generate a full completion for the conversation.

        Raises:
            LLMError: If generation fails
        """
        pass

    @abstractmethod
    def stream(self, messages: Sequence[ChatMessage], config: Optional[LLMConfig] = None) -> Iterator[str]:
        """
        Stream a completion as non-empty text fragments.

        Raises:
            LLMError: If the request fails before or during streaming
        """
        pass
