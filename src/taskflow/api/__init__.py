"""Task submission request and response handling."""

from .handler import SubmissionHandler
from .models import (
    INTERNAL_ERROR_MESSAGE,
    InternalFailure,
    SubmissionResponse,
    SubmissionSuccess,
    ValidationFailure,
)

__all__ = [
    "INTERNAL_ERROR_MESSAGE",
    "InternalFailure",
    "SubmissionHandler",
    "SubmissionResponse",
    "SubmissionSuccess",
    "ValidationFailure",
]
