"""Agent registry and prompt classification.

The registry holds an ordered list of routes, each pairing a predicate with
an agent, plus a default agent. Selection is a pure function of the prompt:
the first registered route whose predicate matches wins, otherwise the
default agent is returned. Selection never returns "no agent".

The baseline predicate is a case-insensitive substring match against a set
of trigger phrases, built with keyword_predicate().
"""

import logging
from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional, Sequence

from src.taskflow.agents.assistant import AssistantAgent
from src.taskflow.agents.base import Agent
from src.taskflow.agents.meeting import MeetingAgent
from src.taskflow.llm.provider import CompletionProvider


logger = logging.getLogger(__name__)


DEFAULT_MEETING_TRIGGERS = ("schedule a meeting", "meeting with")

PromptPredicate = Callable[[str], bool]


def keyword_predicate(phrases: Iterable[str]) -> PromptPredicate:
    """Build a case-insensitive substring predicate.

    Args:
        phrases: Trigger phrases; blank phrases are ignored.

    Returns:
        A predicate that is true when any phrase occurs in the prompt.

    Raises:
        ValueError: If no non-blank phrase is given.

    Example:
        >>> matches = keyword_predicate(["meeting with"])
        >>> matches("Set up a Meeting With Jane")
        True
    """
    lowered = tuple(p.strip().lower() for p in phrases if p and p.strip())
    if not lowered:
        raise ValueError("at least one trigger phrase is required")

    def matches(prompt: str) -> bool:
        text = prompt.lower()
        return any(phrase in text for phrase in lowered)

    return matches


@dataclass(frozen=True)
class Route:
    """A predicate and the agent selected when it matches.

    Attributes:
        name: Route identifier used in logs.
        predicate: Pure function of the prompt text.
        agent: Agent selected when the predicate matches.
    """

    name: str
    predicate: PromptPredicate
    agent: Agent


class AgentRegistry:
    """Ordered collection of routes with a default agent.

    Attributes:
        default_agent: Agent selected when no route matches.

    Example:
        >>> registry = AgentRegistry(default_agent=AssistantAgent(provider))
        >>> registry.register(
        ...     MeetingAgent(), keyword_predicate(["meeting with"])
        ... )
        >>> registry.select("Lunch meeting with Jane").name
        'meeting'
    """

    def __init__(
        self,
        default_agent: Agent,
        routes: Optional[Sequence[Route]] = None,
    ):
        self.default_agent = default_agent
        self._routes: List[Route] = list(routes or [])

    @property
    def routes(self) -> List[Route]:
        """Registered routes in selection order (read-only copy)."""
        return list(self._routes)

    def register(
        self,
        agent: Agent,
        predicate: PromptPredicate,
        name: Optional[str] = None,
    ) -> Route:
        """Append a route; earlier routes take precedence on ties."""
        route = Route(name=name or agent.name, predicate=predicate, agent=agent)
        self._routes.append(route)
        return route

    def register_keywords(
        self,
        agent: Agent,
        phrases: Iterable[str],
        name: Optional[str] = None,
    ) -> Route:
        """Append a route matching any of the trigger phrases."""
        return self.register(agent, keyword_predicate(phrases), name=name)

    def match(self, prompt: str) -> Optional[Route]:
        """Return the first route whose predicate matches, if any."""
        for route in self._routes:
            if route.predicate(prompt):
                return route
        return None

    def select(self, prompt: str) -> Agent:
        """Select exactly one agent for the prompt."""
        route = self.match(prompt)
        agent = route.agent if route is not None else self.default_agent
        logger.info(
            "Agent selected",
            extra={
                "agent": agent.name,
                "route": route.name if route is not None else "default",
            },
        )
        return agent


def build_default_registry(
    provider: CompletionProvider,
    meeting_triggers: Iterable[str] = DEFAULT_MEETING_TRIGGERS,
) -> AgentRegistry:
    """Wire the meeting route in front of the assistant default.

    Args:
        provider: Completion provider for the assistant agent.
        meeting_triggers: Phrases that route a prompt to the meeting agent.

    Returns:
        The configured AgentRegistry.
    """
    registry = AgentRegistry(default_agent=AssistantAgent(provider))
    registry.register_keywords(MeetingAgent(), meeting_triggers)
    return registry
