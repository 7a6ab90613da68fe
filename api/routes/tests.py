"""Test read endpoints."""
from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session as DbSession

from api.database import get_db
from api.dependencies.auth import get_current_user
from api.models.db.user import User
from api.services import test_service
from api.services.chunk_resolver import group_fragments, resolve_exam
from serialization import serialize_exam_content, serialize_metadata

router = APIRouter(prefix="/api/tests", tags=["tests"])


@router.get("")
def list_tests(
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[DbSession, Depends(get_db)],
) -> list[dict[str, object]]:
    """List tests visible to the current user.

    Students see one entry per logical test; teachers and admins see every
    stored document, chunks included.
    """
    exams = test_service.list_visible_tests(db, current_user)

    if not current_user.is_student:
        tests = []
        for exam in exams:
            payload = test_service.serialize_exam(exam)
            metadata = serialize_metadata(payload)
            for key in ("course", "approved", "active", "parentTestId", "chunkIndex", "totalChunks"):
                metadata[key] = payload[key]
            tests.append(metadata)
        return tests

    tests = []
    for fragments in group_fragments(exams):
        logical = resolve_exam(db, fragments[0])
        metadata = serialize_metadata(serialize_exam_content(logical.content))
        metadata["id"] = logical.group_id
        metadata["fragmentIds"] = logical.fragment_ids
        tests.append(metadata)
    return tests


@router.get("/{test_id}")
def get_test(
    test_id: str,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[DbSession, Depends(get_db)],
) -> dict[str, object]:
    """Get one stored test document."""
    exam = test_service.get_visible_test(db, test_id, current_user)
    return test_service.serialize_exam(exam)


@router.get("/{test_id}/session")
def get_session_content(
    test_id: str,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[DbSession, Depends(get_db)],
) -> dict[str, object]:
    """Get the merged logical test an exam session starts from."""
    exam = test_service.get_visible_test(db, test_id, current_user)
    logical = resolve_exam(db, exam)
    payload = serialize_exam_content(logical.content)
    payload["groupId"] = logical.group_id
    payload["fragmentIds"] = logical.fragment_ids
    return payload
