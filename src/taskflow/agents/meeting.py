"""Deterministic meeting-scheduling agent."""

from src.taskflow.agents.base import Agent


MEETING_TEMPLATE = (
    'Meeting scheduling initiated for: "{prompt}". '
    "A calendar invitation will be prepared for your review."
)


class MeetingAgent(Agent):
    """Acknowledges meeting requests without calling any external service.

    The response is a fixed template embedding the prompt, so the agent
    cannot fail and is safe to invoke for any input.
    """

    name = "meeting"

    def __init__(self, template: str = MEETING_TEMPLATE):
        self.template = template

    async def handle(self, prompt: str) -> str:
        return self.template.format(prompt=prompt)
