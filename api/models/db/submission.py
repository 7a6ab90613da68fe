"""
Submission database model: one graded attempt per (test group, student).
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

import sqlalchemy as sa
from sqlalchemy import ForeignKey, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from api.database import Base

if TYPE_CHECKING:
    from api.models.db.user import User


class Submission(Base):
    """
    Graded submission record.
    Written once at submission time and never updated.
    """

    __tablename__ = "submissions"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, index=True)

    # Root test id of the logical test that was graded
    test_group_id: Mapped[str] = mapped_column(String(64), index=True, nullable=False)
    student_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )

    answers_json: Mapped[str] = mapped_column(Text, nullable=False)
    section_results_json: Mapped[str] = mapped_column(Text, nullable=False)

    total_score: Mapped[int] = mapped_column(nullable=False)
    total_max_score: Mapped[int] = mapped_column(nullable=False)
    percentage: Mapped[int] = mapped_column(nullable=False)

    submitted_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    # Constraints
    __table_args__ = (
        UniqueConstraint("test_group_id", "student_id", name="uq_submission_group_student"),
    )

    # Relationships
    student: Mapped["User"] = relationship("User", back_populates="submissions")

    @property
    def answers(self) -> dict[str, Any]:
        """Parse answers from JSON."""
        try:
            return json.loads(self.answers_json)
        except (json.JSONDecodeError, TypeError):
            return {}

    @answers.setter
    def answers(self, value: dict[str, Any]) -> None:
        """Serialize answers to JSON."""
        self.answers_json = json.dumps(value)

    @property
    def section_results(self) -> list[dict[str, Any]]:
        """Parse per-section results from JSON."""
        try:
            return json.loads(self.section_results_json)
        except (json.JSONDecodeError, TypeError):
            return []

    @section_results.setter
    def section_results(self, value: list[dict[str, Any]]) -> None:
        """Serialize per-section results to JSON."""
        self.section_results_json = json.dumps(value, ensure_ascii=False)

    def __repr__(self) -> str:
        return (
            f"<Submission(id='{self.id}', test_group_id='{self.test_group_id}', "
            f"student_id={self.student_id})>"
        )
