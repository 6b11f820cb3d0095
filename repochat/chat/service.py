"""
Chat Service

Answers questions about a project by injecting its cached context as the
system message and streaming the provider's reply as ordered events.
"""

from dataclasses import dataclass
from typing import Any, Callable, Iterator, Optional, Sequence

from repochat.chat.prompts import ERROR_CHECK_STEPS, build_error_report_prompt, build_system_prompt
from repochat.configs.logging import get_logger
from repochat.exceptions import LLMError
from repochat.llm import ChatMessage, LLMConfig, LLMProvider
from repochat.projects.cache import ContextCache
from repochat.projects.models import ProjectDescriptor

logger = get_logger("chat")

ANALYSIS_MAX_TOKENS = 1000


@dataclass(frozen=True)
class ChatEvent:
    """One item of a chat stream: status, content, error or done."""

    type: str
    data: Any = None

    def to_payload(self) -> Optional[dict[str, Any]]:
        """JSON body for the SSE data line; None marks the end of stream."""
        if self.type == "done":
            return None
        return {self.type: self.data}


def history_messages(history: Sequence[dict]) -> list[ChatMessage]:
    """Convert prior turns, dropping anything without a usable role."""
    messages = []
    for turn in history:
        role = turn.get("role")
        content = turn.get("content")
        if role in ("user", "assistant") and isinstance(content, str):
            messages.append(ChatMessage(role=role, content=content))
    return messages


class ChatService:
    """
    Args:
        cache: Project context cache
        get_project: Looks up a ProjectDescriptor (raises ProjectNotFoundError)
        provider: Text-generation provider
        temperature: Sampling temperature for answers
    """

    def __init__(
        self,
        cache: ContextCache,
        get_project: Callable[[str], ProjectDescriptor],
        provider: LLMProvider,
        temperature: float = 0.2,
    ):
        self._cache = cache
        self._get_project = get_project
        self._provider = provider
        self._temperature = temperature

    def stream_reply(
        self,
        project_id: str,
        message: str,
        history: Sequence[dict] = (),
    ) -> Iterator[ChatEvent]:
        """
        Stream an answer to message.

        Project lookup and context loading happen before the first event,
        so unknown projects raise instead of producing a stream. Provider
        failures end the stream with a single error event.
        """
        project = self._get_project(project_id)
        bundle = self._cache.get(project_id)

        messages = [
            ChatMessage("system", build_system_prompt(project, bundle)),
            *history_messages(history),
            ChatMessage("user", message),
        ]
        config = LLMConfig(model=project.model, temperature=self._temperature)
        return self._forward(messages, config)

    def stream_error_check(
        self,
        project_id: str,
        code: str,
        history: Sequence[dict] = (),
    ) -> Iterator[ChatEvent]:
        """Run the four analysis passes, then stream a combined error report."""
        project = self._get_project(project_id)
        bundle = self._cache.get(project_id)
        return self._error_check(project, bundle.context, code, history)

    def _error_check(
        self,
        project: ProjectDescriptor,
        context: str,
        code: str,
        history: Sequence[dict],
    ) -> Iterator[ChatEvent]:
        yield ChatEvent("status", "Analyzing code structure...")

        analysis_config = LLMConfig(model=project.model, temperature=0.1, max_tokens=ANALYSIS_MAX_TOKENS)
        results: list[tuple[str, str]] = []
        for step, template in ERROR_CHECK_STEPS:
            prompt = template.format(code=code, context=context)
            try:
                response = self._provider.complete([ChatMessage("system", prompt)], analysis_config)
            except LLMError as e:
                logger.error(f"Error check step '{step}' failed: {e}")
                yield ChatEvent("error", str(e))
                return
            results.append((step, response.text))
            yield ChatEvent("status", f"{step} complete...")

        messages = [
            ChatMessage("system", build_error_report_prompt(code, context, results)),
            *history_messages(history),
        ]
        yield from self._forward(messages, LLMConfig(model=project.model, temperature=self._temperature))

    def _forward(self, messages: list[ChatMessage], config: LLMConfig) -> Iterator[ChatEvent]:
        try:
            for fragment in self._provider.stream(messages, config):
                yield ChatEvent("content", fragment)
        except LLMError as e:
            logger.error(f"Chat error: {e}")
            yield ChatEvent("error", str(e))
            return
        yield ChatEvent("done")
