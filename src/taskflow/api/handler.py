"""Submission handler mapping request payloads to orchestrator calls.

Request payload structure:
{
  "prompt": "Schedule a meeting with Jane at 3pm"
}

Responses:
- 200: {"success": true, "taskId": "...", "response": "..."}
- 400: {"error": "Prompt is required"}
- 500: {"error": "An internal server error occurred.", "details": "..."}
"""

import logging
from typing import Any

from src.taskflow.api.models import (
    InternalFailure,
    SubmissionResponse,
    SubmissionSuccess,
    ValidationFailure,
)
from src.taskflow.errors import TaskflowError, ValidationError
from src.taskflow.orchestrator import TaskOrchestrator

logger = logging.getLogger(__name__)


class SubmissionHandler:
    """Translates submission payloads into orchestrator calls and responses.

    Attributes:
        orchestrator: The pipeline that executes each prompt.
    """

    def __init__(self, orchestrator: TaskOrchestrator) -> None:
        self.orchestrator = orchestrator

    def extract_prompt(self, payload: Any) -> Any:
        """Return the ``prompt`` field, or None if the payload has none."""
        if not isinstance(payload, dict):
            logger.warning("Invalid payload: expected dict, got %s", type(payload))
            return None
        return payload.get("prompt")

    async def handle(self, payload: Any) -> SubmissionResponse:
        """Run one submission and build the HTTP response for it.

        Args:
            payload: The decoded JSON request body, or None if the body
                could not be decoded.

        Returns:
            The status code and body to send.
        """
        prompt = self.extract_prompt(payload)

        try:
            submission = await self.orchestrator.submit(prompt)
        except ValidationError as exc:
            return SubmissionResponse(
                status_code=400,
                body=ValidationFailure(error=exc.message).model_dump(),
            )
        except TaskflowError as exc:
            return self._internal_failure(
                exc.message,
                exc.compensation_error.message if exc.compensation_error else None,
            )
        except Exception as exc:
            logger.exception("Unexpected error while handling submission")
            return self._internal_failure(str(exc) or type(exc).__name__)

        body = SubmissionSuccess(
            task_id=submission.task_id, response=submission.response
        )
        return SubmissionResponse(
            status_code=200, body=body.model_dump(by_alias=True)
        )

    def _internal_failure(
        self, details: str, compensation_error: Any = None
    ) -> SubmissionResponse:
        body = InternalFailure(details=details, compensation_error=compensation_error)
        return SubmissionResponse(
            status_code=500,
            body=body.model_dump(by_alias=True, exclude_none=True),
        )
