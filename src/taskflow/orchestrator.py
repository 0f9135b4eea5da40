"""Task orchestrator driving a prompt through the pipeline.

Each submission runs through:
    received → recorded → routed → executed → persisted

- received: the prompt is validated; nothing is stored for invalid input
- recorded: the task store creates a pending task
- routed: the agent registry selects exactly one agent
- executed: the selected agent produces a result
- persisted: the result is stored and the task completes

Once a task id exists, every failure path makes a best-effort attempt to
mark the task failed before the original error is raised. A failure of
that compensating write is attached to the original error and never
replaces it.

Source:
- src/taskflow/state/store.py (TaskStore)
- src/taskflow/routing/registry.py (AgentRegistry)
- src/taskflow/events/emitter.py (EventEmitter)
"""

import logging
import time
from typing import Any, Optional

from pydantic import BaseModel, Field

from src.taskflow.agents.base import Agent
from src.taskflow.errors import (
    AgentExecutionError,
    CompensationError,
    PersistenceError,
    ResultNotRecordedError,
    RoutingError,
    TaskflowError,
    ValidationError,
)
from src.taskflow.events.emitter import EventEmitter, NullEventEmitter
from src.taskflow.events.models import EventType, TaskEvent
from src.taskflow.routing.registry import AgentRegistry
from src.taskflow.state.models import SubmissionStage
from src.taskflow.state.store import TaskStore

logger = logging.getLogger(__name__)


PROMPT_REQUIRED_MESSAGE = "Prompt is required"
RESULT_NOT_RECORDED_MESSAGE = "Agent result produced, but failed to record it."


class TaskSubmission(BaseModel):
    """Outcome of a successful submission.

    Attributes:
        task_id: Identifier of the completed task.
        response: Text produced by the selected agent.
        agent: Name of the agent that produced the response.
    """

    task_id: str = Field(..., min_length=1)
    response: str
    agent: str


class TaskOrchestrator:
    """Runs the intake → classify → dispatch → execute → persist pipeline.

    All collaborators are injected so each can be replaced with a fake.

    Attributes:
        store: Task persistence.
        registry: Agent selection.
        event_emitter: Receives a TaskEvent for every step.
    """

    def __init__(
        self,
        store: TaskStore,
        registry: AgentRegistry,
        event_emitter: Optional[EventEmitter] = None,
    ):
        self.store = store
        self.registry = registry
        self.event_emitter = event_emitter or NullEventEmitter()

    async def submit(self, prompt: Any) -> TaskSubmission:
        """Run a prompt through the full pipeline.

        Args:
            prompt: The submitted prompt; must be a non-empty string.

        Returns:
            The stored task id and the agent's response.

        Raises:
            ValidationError: If the prompt is missing or blank. No task is
                recorded.
            PersistenceError: If the task could not be recorded. No
                compensating write is attempted.
            RoutingError: If agent selection raised.
            AgentExecutionError: If the selected agent failed.
            ResultNotRecordedError: If the agent succeeded but the result
                could not be stored.
        """
        self._validate(prompt)
        started = time.monotonic()

        task_id = await self._record(prompt)
        await self._emit_transition(
            task_id, None, SubmissionStage.RECEIVED, SubmissionStage.RECORDED
        )

        agent = await self._route(task_id, prompt)
        await self._emit_transition(
            task_id, agent.name, SubmissionStage.RECORDED, SubmissionStage.ROUTED
        )

        result = await self._execute(task_id, agent, prompt)
        await self._emit_transition(
            task_id, agent.name, SubmissionStage.ROUTED, SubmissionStage.EXECUTED
        )

        await self._persist_result(task_id, agent, result)
        await self._emit_transition(
            task_id, agent.name, SubmissionStage.EXECUTED, SubmissionStage.PERSISTED
        )

        duration = time.monotonic() - started
        await self._safe_emit(
            TaskEvent(
                event_type=EventType.COMPLETION,
                task_id=task_id,
                agent=agent.name,
                details={"duration_seconds": duration},
            )
        )
        logger.info(
            "Task completed",
            extra={"task_id": task_id, "agent": agent.name, "duration": duration},
        )

        return TaskSubmission(task_id=task_id, response=result, agent=agent.name)

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    def _validate(self, prompt: Any) -> None:
        if not isinstance(prompt, str) or prompt == "":
            logger.info("Rejected submission without prompt")
            raise ValidationError(PROMPT_REQUIRED_MESSAGE)

    async def _record(self, prompt: str) -> str:
        """Create the pending task; failures propagate with nothing to undo."""
        try:
            task_id = await self.store.create(prompt)
        except PersistenceError:
            logger.exception("Failed to record task")
            raise
        except Exception as exc:
            logger.exception("Failed to record task")
            raise PersistenceError(
                "Failed to log task to database.", original_error=exc
            ) from exc

        logger.info("Task recorded", extra={"task_id": task_id})
        return task_id

    async def _route(self, task_id: str, prompt: str) -> Agent:
        try:
            return self.registry.select(prompt)
        except Exception as exc:
            error = RoutingError(
                f"Agent selection failed: {exc}", task_id=task_id, cause=exc
            )
            await self._fail(task_id, SubmissionStage.ROUTED, error)
            raise error from exc

    async def _execute(self, task_id: str, agent: Agent, prompt: str) -> str:
        try:
            result = await agent.handle(prompt)
            if not isinstance(result, str):
                raise TypeError(
                    f"Agent {agent.name} returned {type(result).__name__}, "
                    "expected text"
                )
        except Exception as exc:
            error = AgentExecutionError(
                str(exc) or type(exc).__name__,
                agent=agent.name,
                task_id=task_id,
                cause=exc,
            )
            await self._fail(task_id, SubmissionStage.EXECUTED, error, agent.name)
            raise error from exc

        return result

    async def _persist_result(self, task_id: str, agent: Agent, result: str) -> None:
        try:
            await self.store.mark_completed(task_id, result, agent=agent.name)
        except Exception as exc:
            error = ResultNotRecordedError(
                RESULT_NOT_RECORDED_MESSAGE, task_id=task_id, original_error=exc
            )
            await self._fail(task_id, SubmissionStage.PERSISTED, error, agent.name)
            raise error from exc

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _fail(
        self,
        task_id: str,
        stage: SubmissionStage,
        error: TaskflowError,
        agent_name: Optional[str] = None,
    ) -> None:
        """Mark the task failed, attaching any write failure to ``error``.

        Called from inside the except block that caught the step's failure.
        """
        logger.exception(
            "Task failed",
            extra={
                "task_id": task_id,
                "stage": stage.value,
                "error_type": type(error).__name__,
            },
        )

        compensated = True
        try:
            await self.store.mark_failed(task_id, error.message, agent=agent_name)
        except Exception as exc:
            compensated = False
            error.compensation_error = CompensationError(
                f"Failed to mark task {task_id} as failed: {exc}",
                task_id=task_id,
                original_error=exc,
            )
            logger.exception(
                "Failed to mark task as failed",
                extra={"task_id": task_id, "stage": stage.value},
            )

        await self._safe_emit(
            TaskEvent(
                event_type=EventType.ERROR,
                task_id=task_id,
                agent=agent_name,
                details={
                    "stage": stage.value,
                    "error_message": error.message,
                    "error_type": type(error).__name__,
                    "compensated": compensated,
                },
            )
        )

    async def _emit_transition(
        self,
        task_id: str,
        agent_name: Optional[str],
        from_stage: SubmissionStage,
        to_stage: SubmissionStage,
    ) -> None:
        await self._safe_emit(
            TaskEvent(
                event_type=EventType.STATE_TRANSITION,
                task_id=task_id,
                agent=agent_name,
                details={"from_stage": from_stage.value, "to_stage": to_stage.value},
            )
        )

    async def _safe_emit(self, event: TaskEvent) -> None:
        """Emit an event, logging failures so they never disrupt a task."""
        try:
            await self.event_emitter.emit(event)
        except Exception:
            logger.exception(
                "Failed to emit task event",
                extra={
                    "event_type": event.event_type.value,
                    "task_id": event.task_id,
                },
            )
