"""Submission-related Pydantic models."""
from typing import Any

from pydantic import BaseModel


class SubmissionCreate(BaseModel):
    """Model for submitting a finished exam session.

    Both fields are optional here so that missing fields are reported by the
    grading preconditions, after the role check.
    """

    testId: str | None = None
    answers: dict[str, Any] | None = None
