"""
Chunk resolution: turn a stored test document into the logical test it belongs to.

Large tests are stored as a root document plus chunk documents that name the
root as ``parent_test_id``. Grading and exam sessions always work on the
merged logical test, keyed by the root id.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Iterable

from sqlalchemy.orm import Session as DbSession

from api.errors import NotFoundError
from api.models.db.exam import Exam
from api.services import test_service
from models import PHASE1_SUBJECTS, PHASE2_SUBJECTS, ExamContent, Section, TestKind

logger = logging.getLogger(__name__)

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


@dataclass
class LogicalTest:
    """A root document merged with all of its chunks."""

    group_id: str
    content: ExamContent
    root: Exam
    fragment_ids: list[str] = field(default_factory=list)


def _created_key(exam: Exam) -> datetime:
    created = exam.created_at
    if created is None:
        return _EPOCH
    if created.tzinfo is None:
        return created.replace(tzinfo=timezone.utc)
    return created


def _fragment_key(exam: Exam) -> tuple:
    position = exam.chunk_ref.position
    if position is None:
        return (1, 0, _created_key(exam), exam.id)
    return (0, position, _created_key(exam), exam.id)


def order_fragments(fragments: Iterable[Exam]) -> list[Exam]:
    """Order fragments by chunk position, then creation time, then id.

    Fragments without a position follow all positioned ones.
    """
    unique: dict[str, Exam] = {}
    for fragment in fragments:
        unique.setdefault(fragment.id, fragment)
    return sorted(unique.values(), key=_fragment_key)


def merge_sections(fragments: Iterable[ExamContent]) -> list[Section]:
    """Concatenate per-subject questions in fragment order.

    The first fragment that defines a subject fixes the section's marks.
    """
    merged: dict[str, Section] = {}
    for content in fragments:
        for section in content.sections:
            target = merged.get(section.subject.value)
            if target is None:
                merged[section.subject.value] = Section(
                    subject=section.subject,
                    questions=list(section.questions),
                    marks_per_question=section.marks_per_question,
                )
            else:
                target.questions.extend(section.questions)
    return list(merged.values())


def _find_root(db: DbSession, exam: Exam) -> Exam:
    if exam.parent_test_id is None:
        return exam
    root = test_service.get_test_by_id(db, exam.parent_test_id)
    if root is None:
        logger.warning(
            "Test %s references missing parent %s; treating it as its own root",
            exam.id,
            exam.parent_test_id,
        )
        return exam
    return root


def _check_mock_group(content: ExamContent, group_id: str) -> None:
    subjects = content.subjects
    phase2 = [subject for subject in subjects if subject in PHASE2_SUBJECTS]
    if not all(subject in subjects for subject in PHASE1_SUBJECTS) or len(phase2) != 1:
        logger.warning(
            "Mock test %s is incomplete after merging: subjects %s",
            group_id,
            [subject.value for subject in subjects],
        )


def resolve_exam(db: DbSession, exam: Exam) -> LogicalTest:
    """Resolve an already loaded document to its logical test.

    A document without a parent is a root whether or not it carries chunk
    metadata; its group is itself plus every document naming it as parent.
    """
    root = _find_root(db, exam)
    children = test_service.find_tests_by_group(db, root.id)
    if not children:
        return LogicalTest(
            group_id=root.id,
            content=root.to_content(),
            root=root,
            fragment_ids=[root.id],
        )

    fragments = order_fragments([root, *children])
    content = replace(
        root.to_content(),
        sections=merge_sections(fragment.to_content() for fragment in fragments),
    )
    if content.kind == TestKind.MOCK:
        _check_mock_group(content, root.id)
    logger.debug(
        "Resolved test %s to group %s (%d fragments)",
        exam.id,
        root.id,
        len(fragments),
    )
    return LogicalTest(
        group_id=root.id,
        content=content,
        root=root,
        fragment_ids=[fragment.id for fragment in fragments],
    )


def resolve_logical_test(db: DbSession, test_id: str) -> LogicalTest:
    """Load ``test_id`` and resolve it to the logical test it belongs to.

    Raises:
        NotFoundError: no document with that id exists.
    """
    exam = test_service.get_test_by_id(db, test_id)
    if exam is None:
        raise NotFoundError("Test not found")
    return resolve_exam(db, exam)


def group_fragments(exams: Iterable[Exam]) -> list[list[Exam]]:
    """Group a flat listing into ordered fragment lists, one per logical test.

    Groups keep the order in which their first fragment appears.
    """
    groups: dict[str, list[Exam]] = {}
    for exam in exams:
        groups.setdefault(exam.chunk_ref.root_id, []).append(exam)
    return [order_fragments(fragments) for fragments in groups.values()]
