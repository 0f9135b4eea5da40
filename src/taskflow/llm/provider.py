"""Completion provider adapter.

Wraps a single chat-completion call behind ``complete(prompt) -> text``.
The adapter uses LangChain's ChatOpenAI client against any
OpenAI-compatible endpoint, with a fixed system message and model taken
from configuration. There is no retry and no streaming; any failure or an
empty response becomes a ProviderError.
"""

import logging
from typing import Optional, Protocol, runtime_checkable

from langchain_core.messages import HumanMessage, SystemMessage
from langchain_openai import ChatOpenAI

from src.taskflow.errors import ProviderError


logger = logging.getLogger(__name__)


DEFAULT_SYSTEM_PROMPT = "You are a helpful executive assistant."
DEFAULT_MODEL = "gpt-3.5-turbo"


@runtime_checkable
class CompletionProvider(Protocol):
    """Single-shot text generation capability."""

    async def complete(self, prompt: str) -> str:
        """Generate a response for the prompt.

        Raises:
            ProviderError: On transport failure, provider rejection, or an
                empty response.
        """
        ...


class ChatCompletionProvider:
    """Completion provider backed by an OpenAI-compatible chat endpoint.

    Attributes:
        model_name: Model identifier sent with every request.
        system_prompt: System message prepended to every request.
        base_url: Optional endpoint override (OpenAI when None).
        timeout: Optional request timeout in seconds.
        temperature: Optional sampling temperature.

    Example:
        >>> provider = ChatCompletionProvider(api_key="sk-...")
        >>> text = await provider.complete("Draft an email to the team")
    """

    def __init__(
        self,
        model_name: str = DEFAULT_MODEL,
        system_prompt: str = DEFAULT_SYSTEM_PROMPT,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        temperature: Optional[float] = None,
    ):
        self.model_name = model_name
        self.system_prompt = system_prompt
        self.api_key = api_key
        self.base_url = base_url
        self.timeout = timeout
        self.temperature = temperature
        self._llm: Optional[ChatOpenAI] = None

    @property
    def llm(self) -> ChatOpenAI:
        """Get the LLM client, creating it if necessary."""
        if self._llm is None:
            kwargs = {"model": self.model_name}
            if self.api_key:
                kwargs["api_key"] = self.api_key
            if self.base_url:
                kwargs["base_url"] = self.base_url
            if self.timeout is not None:
                kwargs["timeout"] = self.timeout
            if self.temperature is not None:
                kwargs["temperature"] = self.temperature
            self._llm = ChatOpenAI(**kwargs)
        return self._llm

    async def complete(self, prompt: str) -> str:
        """Send the prompt to the chat endpoint and return the reply text.

        Args:
            prompt: The user prompt, sent verbatim.

        Returns:
            The generated text.

        Raises:
            ProviderError: If the call fails or the reply has no text.
        """
        messages = [
            SystemMessage(content=self.system_prompt),
            HumanMessage(content=prompt),
        ]

        try:
            response = await self.llm.ainvoke(messages)
        except Exception as e:
            logger.error(
                "Completion request failed",
                extra={
                    "model": self.model_name,
                    "error": str(e),
                    "error_type": type(e).__name__,
                },
            )
            raise ProviderError(f"Completion request failed: {e}", cause=e) from e

        content = getattr(response, "content", None)
        if not isinstance(content, str):
            raise ProviderError(
                f"Unexpected response type: {type(content).__name__}"
            )
        if not content.strip():
            raise ProviderError("Completion provider returned an empty response")

        logger.debug(
            "Completion received",
            extra={"model": self.model_name, "response_length": len(content)},
        )
        return content
