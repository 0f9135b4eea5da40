"""Task store interface and in-memory implementation.

The TaskStore protocol is the only persistence contract the orchestrator
depends on. It supports append-only creation and a single terminal update
per task:

- create(prompt) -> task_id
- mark_completed(task_id, result)
- mark_failed(task_id, error_message)

``get`` exists for tests and readiness checks; the pipeline never reads
records back.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Dict, Optional, Protocol, runtime_checkable

from src.taskflow.errors import PersistenceError, TaskNotFoundError
from src.taskflow.state.models import Task, TaskStatus, is_valid_transition


logger = logging.getLogger(__name__)


@runtime_checkable
class TaskStore(Protocol):
    """Protocol defining the interface for task persistence."""

    async def create(self, prompt: str) -> str:
        """Record a new pending task and return its identifier.

        Raises:
            PersistenceError: If the write cannot be committed.
        """
        ...

    async def mark_completed(
        self, task_id: str, result: str, agent: Optional[str] = None
    ) -> None:
        """Move a pending task to completed with its result.

        Raises:
            PersistenceError: If the task cannot be located or written.
        """
        ...

    async def mark_failed(
        self, task_id: str, error_message: str, agent: Optional[str] = None
    ) -> None:
        """Move a pending task to failed with a diagnostic.

        Raises:
            PersistenceError: If the task cannot be located or written.
        """
        ...

    async def get(self, task_id: str) -> Optional[Task]:
        """Get a task by identifier, or None if it does not exist."""
        ...


class InMemoryTaskStore:
    """Dict-backed task store for local development and tests.

    Enforces the same transition rules as the PostgreSQL store: only
    pending tasks may be moved to a terminal status.
    """

    def __init__(self) -> None:
        self._tasks: Dict[str, Task] = {}

    def __len__(self) -> int:
        return len(self._tasks)

    @property
    def tasks(self) -> Dict[str, Task]:
        return dict(self._tasks)

    async def create(self, prompt: str) -> str:
        task_id = str(uuid.uuid4())
        self._tasks[task_id] = Task(id=task_id, prompt=prompt)
        logger.debug("Created task", extra={"task_id": task_id})
        return task_id

    async def mark_completed(
        self, task_id: str, result: str, agent: Optional[str] = None
    ) -> None:
        self._transition(
            task_id, TaskStatus.COMPLETED, agent, result=result
        )

    async def mark_failed(
        self, task_id: str, error_message: str, agent: Optional[str] = None
    ) -> None:
        self._transition(
            task_id, TaskStatus.FAILED, agent, error_message=error_message
        )

    async def get(self, task_id: str) -> Optional[Task]:
        return self._tasks.get(task_id)

    async def health_check(self) -> bool:
        return True

    def _transition(
        self,
        task_id: str,
        to_status: TaskStatus,
        agent: Optional[str],
        result: Optional[str] = None,
        error_message: Optional[str] = None,
    ) -> None:
        task = self._tasks.get(task_id)
        if task is None:
            raise TaskNotFoundError(task_id)

        if not is_valid_transition(task.status, to_status):
            raise PersistenceError(
                f"Task {task_id} is already {task.status.value}",
                task_id=task_id,
            )

        self._tasks[task_id] = Task(
            id=task.id,
            prompt=task.prompt,
            status=to_status,
            result=result,
            error_message=error_message,
            agent=agent or task.agent,
            created_at=task.created_at,
            updated_at=datetime.now(timezone.utc),
        )
