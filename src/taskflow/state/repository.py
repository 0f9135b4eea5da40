"""PostgreSQL task store.

This module implements the TaskStore protocol using asyncpg for async
PostgreSQL access. It provides:
- Connection pooling for production use
- Schema bootstrap for the ``tasks`` table
- Terminal updates guarded on the stored status, so a finished task is
  never overwritten

Stored status values follow the ``tasks`` table used by the web client:
pending tasks are written as ``pending`` (older rows may say
``processing``), completed as ``completed`` and failed as ``error``. The
agent result is stored as JSON ``{"result": ...}`` in the ``response``
column.
"""

import json
import logging
from datetime import timezone
from typing import Any, Dict, Optional

import asyncpg

from src.taskflow.errors import PersistenceError
from src.taskflow.state.models import Task, TaskStatus


logger = logging.getLogger(__name__)


TASKS_SCHEMA = """
CREATE TABLE IF NOT EXISTS tasks (
    id uuid PRIMARY KEY DEFAULT gen_random_uuid(),
    prompt text NOT NULL,
    status text NOT NULL DEFAULT 'pending'
        CHECK (status IN ('pending', 'processing', 'completed', 'error')),
    response jsonb,
    error_message text,
    agent text,
    created_at timestamptz NOT NULL DEFAULT now(),
    updated_at timestamptz NOT NULL DEFAULT now()
)
"""

STATUS_TO_COLUMN: Dict[TaskStatus, str] = {
    TaskStatus.PENDING: "pending",
    TaskStatus.COMPLETED: "completed",
    TaskStatus.FAILED: "error",
}

COLUMN_TO_STATUS: Dict[str, TaskStatus] = {
    "pending": TaskStatus.PENDING,
    "processing": TaskStatus.PENDING,
    "completed": TaskStatus.COMPLETED,
    "error": TaskStatus.FAILED,
}

OPEN_COLUMN_STATUSES = ["pending", "processing"]


class PostgresTaskStore:
    """PostgreSQL implementation of the TaskStore protocol.

    Attributes:
        connection_string: PostgreSQL connection URL.
        min_pool_size: Minimum connections in pool.
        max_pool_size: Maximum connections in pool.

    Example:
        >>> async with PostgresTaskStore("postgresql://...") as store:
        ...     task_id = await store.create("Draft an email to the team")
        ...     await store.mark_completed(task_id, "Here is a draft...")
    """

    def __init__(
        self,
        connection_string: str,
        min_pool_size: int = 1,
        max_pool_size: int = 10,
    ):
        self.connection_string = connection_string
        self.min_pool_size = min_pool_size
        self.max_pool_size = max_pool_size
        self._pool: Optional[asyncpg.Pool] = None

    @property
    def pool(self) -> asyncpg.Pool:
        """Get the connection pool, raising if not connected.

        Raises:
            PersistenceError: If the pool is not initialized.
        """
        if self._pool is None:
            raise PersistenceError(
                "Database pool not initialized. Call connect() first."
            )
        return self._pool

    async def connect(self) -> None:
        """Initialize the connection pool.

        Raises:
            PersistenceError: If connection fails.
        """
        if self._pool is not None:
            logger.warning("Connection pool already initialized")
            return

        try:
            logger.info(
                "Connecting to PostgreSQL",
                extra={
                    "min_pool_size": self.min_pool_size,
                    "max_pool_size": self.max_pool_size,
                },
            )
            self._pool = await asyncpg.create_pool(
                self.connection_string,
                min_size=self.min_pool_size,
                max_size=self.max_pool_size,
            )
            logger.info("PostgreSQL connection pool established")
        except Exception as e:
            logger.error(
                "Failed to connect to PostgreSQL",
                extra={"error": str(e)},
            )
            raise PersistenceError(
                f"Failed to connect to PostgreSQL: {e}",
                original_error=e,
            ) from e

    async def disconnect(self) -> None:
        """Close the connection pool."""
        if self._pool is not None:
            logger.info("Closing PostgreSQL connection pool")
            await self._pool.close()
            self._pool = None

    async def __aenter__(self) -> "PostgresTaskStore":
        await self.connect()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.disconnect()

    async def ensure_schema(self) -> None:
        """Create the ``tasks`` table if it does not exist.

        Raises:
            PersistenceError: If the DDL cannot be applied.
        """
        try:
            async with self.pool.acquire() as conn:
                await conn.execute(TASKS_SCHEMA)
        except PersistenceError:
            raise
        except Exception as e:
            raise PersistenceError(
                f"Failed to create tasks table: {e}",
                original_error=e,
            ) from e

    async def create(self, prompt: str) -> str:
        """Insert a pending task and return its generated id.

        Raises:
            PersistenceError: If the insert fails or returns no id.
        """
        try:
            async with self.pool.acquire() as conn:
                task_id = await conn.fetchval(
                    """
                    INSERT INTO tasks (prompt, status)
                    VALUES ($1, $2)
                    RETURNING id
                    """,
                    prompt,
                    STATUS_TO_COLUMN[TaskStatus.PENDING],
                )
        except PersistenceError:
            raise
        except Exception as e:
            logger.error(
                "Failed to insert task",
                extra={"error": str(e)},
            )
            raise PersistenceError(
                "Failed to log task to database.",
                original_error=e,
            ) from e

        if task_id is None:
            raise PersistenceError("Failed to log task to database.")

        task_id = str(task_id)
        logger.info("Task logged", extra={"task_id": task_id})
        return task_id

    async def mark_completed(
        self, task_id: str, result: str, agent: Optional[str] = None
    ) -> None:
        """Store the agent result and move the task to completed.

        Raises:
            PersistenceError: If the task is missing, already terminal, or
                the update fails.
        """
        await self._finish(
            task_id,
            TaskStatus.COMPLETED,
            response=json.dumps({"result": result}),
            error_message=None,
            agent=agent,
        )

    async def mark_failed(
        self, task_id: str, error_message: str, agent: Optional[str] = None
    ) -> None:
        """Store the diagnostic and move the task to failed.

        Raises:
            PersistenceError: If the task is missing, already terminal, or
                the update fails.
        """
        await self._finish(
            task_id,
            TaskStatus.FAILED,
            response=None,
            error_message=error_message,
            agent=agent,
        )

    async def get(self, task_id: str) -> Optional[Task]:
        """Get a task by id.

        Raises:
            PersistenceError: If the query fails.
        """
        try:
            async with self.pool.acquire() as conn:
                row = await conn.fetchrow(
                    """
                    SELECT id, prompt, status, response, error_message,
                           agent, created_at, updated_at
                    FROM tasks
                    WHERE id = $1::uuid
                    """,
                    task_id,
                )
        except PersistenceError:
            raise
        except Exception as e:
            raise PersistenceError(
                f"Failed to get task: {e}",
                task_id=task_id,
                original_error=e,
            ) from e

        if row is None:
            return None
        return _row_to_task(row)

    async def health_check(self) -> bool:
        """Check if the database connection is healthy."""
        try:
            async with self.pool.acquire() as conn:
                await conn.fetchval("SELECT 1")
                return True
        except Exception as e:
            logger.warning(
                "Database health check failed",
                extra={"error": str(e)},
            )
            return False

    async def _finish(
        self,
        task_id: str,
        to_status: TaskStatus,
        response: Optional[str],
        error_message: Optional[str],
        agent: Optional[str],
    ) -> None:
        try:
            async with self.pool.acquire() as conn:
                result = await conn.execute(
                    """
                    UPDATE tasks
                    SET status = $2,
                        response = $3::jsonb,
                        error_message = $4,
                        agent = COALESCE($5, agent),
                        updated_at = now()
                    WHERE id = $1::uuid AND status = ANY($6::text[])
                    """,
                    task_id,
                    STATUS_TO_COLUMN[to_status],
                    response,
                    error_message,
                    agent,
                    OPEN_COLUMN_STATUSES,
                )
        except PersistenceError:
            raise
        except Exception as e:
            logger.error(
                "Failed to update task",
                extra={
                    "task_id": task_id,
                    "status": to_status.value,
                    "error": str(e),
                },
            )
            raise PersistenceError(
                f"Failed to update task: {e}",
                task_id=task_id,
                original_error=e,
            ) from e

        rows_affected = int(result.split()[-1])
        if rows_affected == 0:
            raise PersistenceError(
                f"Task {task_id} not found or already finished",
                task_id=task_id,
            )

        logger.info(
            "Updated task",
            extra={"task_id": task_id, "status": to_status.value},
        )


def _row_to_task(row: Any) -> Task:
    status = COLUMN_TO_STATUS[row["status"]]

    response = row["response"]
    if isinstance(response, str):
        response = json.loads(response)
    result = response.get("result") if response else None

    created_at = row["created_at"]
    if created_at.tzinfo is None:
        created_at = created_at.replace(tzinfo=timezone.utc)
    updated_at = row["updated_at"]
    if updated_at.tzinfo is None:
        updated_at = updated_at.replace(tzinfo=timezone.utc)

    return Task(
        id=str(row["id"]),
        prompt=row["prompt"],
        status=status,
        result=result if status == TaskStatus.COMPLETED else None,
        error_message=row["error_message"] if status == TaskStatus.FAILED else None,
        agent=row["agent"],
        created_at=created_at,
        updated_at=updated_at,
    )
