"""
Exam (stored test document) database model.

A logical test may be stored as several rows: the root row plus chunk rows
whose ``parent_test_id`` points at the root.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

import sqlalchemy as sa
from sqlalchemy import ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from api.database import Base
from models import (
    DEFAULT_CUSTOM_MINUTES,
    DEFAULT_PHASE_MINUTES,
    ChunkRef,
    ExamContent,
    Stream,
    TestKind,
)
from serialization import sections_from_payload

if TYPE_CHECKING:
    from api.models.db.user import User


class Exam(Base):
    """One stored test document (a whole test or one chunk of it)."""

    __tablename__ = "tests"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, index=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    course: Mapped[str] = mapped_column(String(64), index=True, nullable=False)
    teacher_id: Mapped[int | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True
    )

    test_type: Mapped[str] = mapped_column(
        String(20), default=TestKind.CUSTOM.value, nullable=False
    )
    stream: Mapped[str | None] = mapped_column(String(10), nullable=True)
    sections_json: Mapped[str] = mapped_column(Text, nullable=False, default="[]")

    # Timing in minutes
    phase1_minutes: Mapped[int] = mapped_column(default=DEFAULT_PHASE_MINUTES, nullable=False)
    phase2_minutes: Mapped[int] = mapped_column(default=DEFAULT_PHASE_MINUTES, nullable=False)
    custom_duration: Mapped[int] = mapped_column(default=DEFAULT_CUSTOM_MINUTES, nullable=False)

    show_answer_key: Mapped[bool] = mapped_column(default=False, nullable=False)
    approved: Mapped[bool] = mapped_column(default=False, nullable=False)
    active: Mapped[bool] = mapped_column(default=False, nullable=False)

    # Chunking: no foreign key, a dangling parent falls back to self as root
    parent_test_id: Mapped[str | None] = mapped_column(String(64), nullable=True, index=True)
    chunk_index: Mapped[int | None] = mapped_column(nullable=True)
    chunk_total: Mapped[int | None] = mapped_column(nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    # Relationships
    teacher: Mapped["User | None"] = relationship("User", foreign_keys=[teacher_id])

    @property
    def sections(self) -> list[dict[str, Any]]:
        """Parse sections from JSON."""
        if not self.sections_json:
            return []
        try:
            return json.loads(self.sections_json)
        except (json.JSONDecodeError, TypeError):
            return []

    @sections.setter
    def sections(self, value: list[dict[str, Any]] | None) -> None:
        """Serialize sections to JSON."""
        self.sections_json = json.dumps(value or [], ensure_ascii=False)

    @property
    def chunk_ref(self) -> ChunkRef:
        return ChunkRef(root_id=self.parent_test_id or self.id, position=self.chunk_index)

    def to_content(self) -> ExamContent:
        return ExamContent(
            id=self.id,
            title=self.title,
            kind=TestKind(self.test_type),
            sections=sections_from_payload(self.sections),
            stream=Stream(self.stream) if self.stream else None,
            phase1_minutes=self.phase1_minutes,
            phase2_minutes=self.phase2_minutes,
            duration_minutes=self.custom_duration,
            show_answer_key=self.show_answer_key,
        )

    def __repr__(self) -> str:
        return f"<Exam(id='{self.id}', title='{self.title}', chunk={self.chunk_index})>"
