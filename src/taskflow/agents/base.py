"""Agent interface.

An agent is a named, stateless prompt-to-text handler. Agents never see
task records; the orchestrator owns persistence.
"""

from abc import ABC, abstractmethod


class Agent(ABC):
    """Abstract base class for task-handling agents.

    Attributes:
        name: Stable identifier used in logs, events, and stored records.
    """

    name: str = "agent"

    @abstractmethod
    async def handle(self, prompt: str) -> str:
        """Produce a response for the prompt."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"
