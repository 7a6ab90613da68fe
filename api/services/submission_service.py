"""Service layer for graded submissions."""
import logging
import uuid
from typing import Any, Mapping

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session as DbSession

from api import config
from api.errors import AuthorizationError, ConflictError, NotFoundError, ValidationError
from api.models.db.exam import Exam
from api.models.db.submission import Submission
from api.models.db.user import User, UserRole
from api.services import test_service
from api.services.chunk_resolver import resolve_exam, resolve_logical_test
from api.services.grading_service import grade
from api.utils.retry import with_retry
from api.utils.time_utils import isoformat
from api.utils.validation import validate_answers, validate_id

logger = logging.getLogger(__name__)


def find_submission(db: DbSession, group_id: str, student_id: int) -> Submission | None:
    """Get the submission of ``student_id`` for a logical test, if any."""
    stmt = select(Submission).where(
        Submission.test_group_id == group_id,
        Submission.student_id == student_id,
    )
    return db.execute(stmt).scalars().first()


def create_submission(db: DbSession, record: Submission) -> Submission:
    """Insert a submission in a single transaction.

    Raises:
        ConflictError: the (test group, student) pair already has a submission.
    """
    db.add(record)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        logger.info(
            "Rejected duplicate submission for test %s by student %s",
            record.test_group_id,
            record.student_id,
        )
        raise ConflictError() from exc
    db.refresh(record)
    return record


def serialize_submission(
    submission: Submission, *, include_answers: bool = True
) -> dict[str, Any]:
    """Serialize a stored submission as its full (unshaped) payload."""
    payload: dict[str, Any] = {
        "id": submission.id,
        "testId": submission.test_group_id,
        "studentId": submission.student_id,
        "sectionResults": submission.section_results,
        "totalScore": submission.total_score,
        "totalMaxScore": submission.total_max_score,
        "percentage": submission.percentage,
        "submittedAt": isoformat(submission.submitted_at),
    }
    if include_answers:
        payload["answers"] = submission.answers
    return payload


def shape_submission(payload: Mapping[str, Any], show_answer_key: bool) -> dict[str, Any]:
    """Apply answer-key visibility to a submission payload.

    With the key hidden, per-question detail is dropped and only the
    per-section aggregates remain.
    """
    shaped = dict(payload)
    shaped["canViewAnswerKey"] = show_answer_key
    if not show_answer_key:
        shaped["sectionResults"] = [
            {**section, "questions": []} for section in payload.get("sectionResults") or []
        ]
    return shaped


def _answer_key_visible(db: DbSession, group_id: str) -> bool:
    root = test_service.get_test_by_id(db, group_id)
    return bool(root and root.show_answer_key)


def submit_answers(
    db: DbSession, user: User, test_id: object, answers: object
) -> dict[str, Any]:
    """Grade and store a candidate's answers for a logical test.

    Raises:
        AuthorizationError: the user is not a student.
        ValidationError: ``test_id`` or ``answers`` is missing or malformed.
        NotFoundError: the test does not exist.
        ConflictError: the student already submitted this logical test.
    """
    if not user.is_student:
        raise AuthorizationError("Only students can submit tests")
    if not test_id or not answers:
        raise ValidationError("testId and answers are required")
    test_id = validate_id("testId", test_id)
    cleaned = validate_answers(answers)

    logical = with_retry(db, lambda: resolve_logical_test(db, test_id))
    group_id = logical.group_id

    existing = with_retry(db, lambda: find_submission(db, group_id, user.id))
    if existing is not None:
        logger.info("Student %s already submitted test %s", user.id, group_id)
        raise ConflictError()

    report = grade(logical.content, cleaned)

    def _insert() -> Submission:
        record = Submission(
            id=uuid.uuid4().hex,
            test_group_id=group_id,
            student_id=user.id,
            total_score=report.total_score,
            total_max_score=report.total_max_score,
            percentage=report.percentage,
        )
        record.answers = cleaned
        record.section_results = [section.to_payload() for section in report.sections]
        return create_submission(db, record)

    submission = with_retry(db, _insert)
    logger.info(
        "Student %s submitted test %s: %d/%d (%d%%)",
        user.id,
        group_id,
        submission.total_score,
        submission.total_max_score,
        submission.percentage,
    )
    return shape_submission(
        serialize_submission(submission, include_answers=False),
        logical.root.show_answer_key,
    )


def _group_id_for(db: DbSession, test_id: str) -> str:
    exam = test_service.get_test_by_id(db, test_id)
    if exam is None:
        return test_id
    return resolve_exam(db, exam).group_id


def list_submissions(
    db: DbSession,
    user: User,
    *,
    test_id: str | None = None,
    student_id: int | None = None,
    limit: int | None = None,
) -> list[dict[str, Any]]:
    """List submissions visible to ``user``, newest first.

    Students get their own submissions shaped by answer-key visibility,
    teachers get submissions for their tests, admins get everything and may
    filter by student.
    """
    stmt = select(Submission)
    if user.role == UserRole.STUDENT.value:
        stmt = stmt.where(Submission.student_id == user.id)
    elif user.role == UserRole.TEACHER.value:
        owned = select(Exam.id).where(Exam.teacher_id == user.id)
        stmt = stmt.where(Submission.test_group_id.in_(owned))
    if test_id:
        group_id = _group_id_for(db, validate_id("testId", test_id))
        stmt = stmt.where(Submission.test_group_id == group_id)
    if student_id is not None and user.is_admin:
        stmt = stmt.where(Submission.student_id == student_id)

    max_results = limit if limit and limit > 0 else config.SUBMISSIONS_LIST_LIMIT
    stmt = stmt.order_by(Submission.submitted_at.desc()).limit(max_results)
    submissions = with_retry(db, lambda: list(db.execute(stmt).scalars()))

    if not user.is_student:
        return [serialize_submission(submission) for submission in submissions]

    visibility: dict[str, bool] = {}
    results = []
    for submission in submissions:
        group_id = submission.test_group_id
        if group_id not in visibility:
            visibility[group_id] = _answer_key_visible(db, group_id)
        results.append(shape_submission(serialize_submission(submission), visibility[group_id]))
    return results


def get_submission_for_user(db: DbSession, user: User, submission_id: str) -> dict[str, Any]:
    """Read one submission.

    Raises:
        NotFoundError: no such submission.
        AuthorizationError: the submission belongs to another student, or to
            a test the requesting teacher does not own.
    """
    submission_id = validate_id("submissionId", submission_id)
    submission = with_retry(db, lambda: db.get(Submission, submission_id))
    if submission is None:
        raise NotFoundError("Submission not found")

    if user.is_student:
        if submission.student_id != user.id:
            raise AuthorizationError("Access denied")
        return shape_submission(
            serialize_submission(submission),
            _answer_key_visible(db, submission.test_group_id),
        )

    if user.role == UserRole.TEACHER.value:
        root = test_service.get_test_by_id(db, submission.test_group_id)
        if root is None or root.teacher_id != user.id:
            raise AuthorizationError("Access denied")
    return serialize_submission(submission)
