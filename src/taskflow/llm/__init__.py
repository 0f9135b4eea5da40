"""Completion provider used by the assistant agent."""

from src.taskflow.llm.provider import (
    DEFAULT_MODEL,
    DEFAULT_SYSTEM_PROMPT,
    ChatCompletionProvider,
    CompletionProvider,
)

__all__ = [
    "ChatCompletionProvider",
    "CompletionProvider",
    "DEFAULT_MODEL",
    "DEFAULT_SYSTEM_PROMPT",
]
