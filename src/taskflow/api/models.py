"""Response bodies for the task submission endpoint.

Field names follow the JSON contract consumed by the web client
(``taskId``, ``compensationError``); Python code uses snake_case through
pydantic aliases.
"""

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


INTERNAL_ERROR_MESSAGE = "An internal server error occurred."


class SubmissionSuccess(BaseModel):
    """Body returned with HTTP 200."""

    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    task_id: str = Field(..., alias="taskId")
    response: str


class ValidationFailure(BaseModel):
    """Body returned with HTTP 400."""

    error: str


class InternalFailure(BaseModel):
    """Body returned with HTTP 500.

    ``details`` always carries the original failure. ``compensation_error``
    is present only when marking the task failed also went wrong.
    """

    model_config = ConfigDict(populate_by_name=True)

    error: str = INTERNAL_ERROR_MESSAGE
    details: str
    compensation_error: Optional[str] = Field(
        default=None, alias="compensationError"
    )


class SubmissionResponse(BaseModel):
    """HTTP status code and JSON body for one submission."""

    status_code: int
    body: Dict[str, Any]
