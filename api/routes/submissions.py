"""Submission endpoints."""
from typing import Annotated

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session as DbSession

from api.database import get_db
from api.dependencies.auth import get_current_user
from api.models.db.user import User
from api.models.submissions import SubmissionCreate
from api.services import submission_service

router = APIRouter(prefix="/api/submissions", tags=["submissions"])


@router.post("", status_code=status.HTTP_201_CREATED)
def submit_test(
    data: SubmissionCreate,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[DbSession, Depends(get_db)],
) -> dict[str, object]:
    """Grade and store the current student's answers."""
    return submission_service.submit_answers(db, current_user, data.testId, data.answers)


@router.get("")
def list_submissions(
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[DbSession, Depends(get_db)],
    test_id: Annotated[str | None, Query(alias="testId")] = None,
    student_id: Annotated[int | None, Query(alias="studentId")] = None,
    limit: Annotated[int | None, Query(ge=1)] = None,
) -> list[dict[str, object]]:
    """List submissions visible to the current user."""
    return submission_service.list_submissions(
        db,
        current_user,
        test_id=test_id,
        student_id=student_id,
        limit=limit,
    )


@router.get("/{submission_id}")
def get_submission(
    submission_id: str,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[DbSession, Depends(get_db)],
) -> dict[str, object]:
    """Get one submission."""
    return submission_service.get_submission_for_user(db, current_user, submission_id)
