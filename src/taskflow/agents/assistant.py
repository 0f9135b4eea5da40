"""General-purpose assistant agent delegating to the completion provider."""

import logging

from src.taskflow.agents.base import Agent
from src.taskflow.llm.provider import CompletionProvider


logger = logging.getLogger(__name__)


class AssistantAgent(Agent):
    """Forwards the prompt to the completion provider.

    Provider failures propagate unchanged as ProviderError; the orchestrator
    decides how to record them.

    Attributes:
        provider: The completion provider to delegate to.
    """

    name = "assistant"

    def __init__(self, provider: CompletionProvider):
        self.provider = provider

    async def handle(self, prompt: str) -> str:
        logger.info(
            "Delegating prompt to completion provider",
            extra={"prompt_length": len(prompt)},
        )
        return await self.provider.complete(prompt)
