"""Task event models for observability.

Events are emitted at each step of a submission so that logs and metrics
can follow a task from intake to its terminal status.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


class EventType(str, Enum):
    """Types of events emitted by the orchestrator.

    Attributes:
        STATE_TRANSITION: A submission moved to its next stage.
        ERROR: A step failed after the task was recorded.
        COMPLETION: The task completed and its result was stored.
    """

    STATE_TRANSITION = "state_transition"
    ERROR = "error"
    COMPLETION = "completion"


class TaskEvent(BaseModel):
    """Structured event emitted by the orchestrator.

    Details Field Conventions:
        For STATE_TRANSITION events:
            - from_stage / to_stage: SubmissionStage values

        For ERROR events:
            - stage: Step where the failure occurred
            - error_message: Human-readable description
            - error_type: Exception class name
            - compensated: Whether the task was marked failed

        For COMPLETION events:
            - duration_seconds: Time from intake to stored result
    """

    event_type: EventType = Field(
        ...,
        description="The category of event being emitted",
    )

    task_id: str = Field(
        ...,
        min_length=1,
        description="Identifier of the task the event belongs to",
    )

    agent: Optional[str] = Field(
        default=None,
        description="Name of the selected agent, once known",
    )

    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the event occurred (UTC timezone)",
    )

    details: Dict[str, Any] = Field(
        default_factory=dict,
        description="Additional context specific to the event type",
    )

    def to_log_dict(self) -> Dict[str, Any]:
        """Flatten the event for structured logging."""
        return {
            "event_type": self.event_type.value,
            "task_id": self.task_id,
            "agent": self.agent,
            "timestamp": self.timestamp.isoformat(),
            **self.details,
        }
