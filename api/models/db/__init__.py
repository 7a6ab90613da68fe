"""Database models."""
from api.models.db.user import User, Session, UserRole
from api.models.db.exam import Exam
from api.models.db.submission import Submission

__all__ = [
    "User",
    "Session",
    "UserRole",
    "Exam",
    "Submission",
]
