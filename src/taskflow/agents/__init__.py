"""Task-handling agents.

- Agent: Abstract prompt-to-text handler
- MeetingAgent: Deterministic acknowledgement for meeting requests
- AssistantAgent: Delegates to the completion provider
"""

from src.taskflow.agents.assistant import AssistantAgent
from src.taskflow.agents.base import Agent
from src.taskflow.agents.meeting import MEETING_TEMPLATE, MeetingAgent

__all__ = [
    "Agent",
    "AssistantAgent",
    "MEETING_TEMPLATE",
    "MeetingAgent",
]
