"""
Chat

Grounded question answering over a project's context.
"""

from repochat.chat.prompts import build_system_prompt
from repochat.chat.service import ChatEvent, ChatService, history_messages

__all__ = ["ChatEvent", "ChatService", "build_system_prompt", "history_messages"]
