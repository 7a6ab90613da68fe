"""Pydantic models."""
from api.models.auth import (
    MessageResponse,
    TokenResponse,
    UserLogin,
    UserRegister,
    UserResponse,
)
from api.models.submissions import SubmissionCreate
from api.models.tests import QuestionIn, SectionIn, SectionTimings, TestCreate

__all__ = [
    "MessageResponse",
    "QuestionIn",
    "SectionIn",
    "SectionTimings",
    "SubmissionCreate",
    "TestCreate",
    "TokenResponse",
    "UserLogin",
    "UserRegister",
    "UserResponse",
]
