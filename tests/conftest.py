import os
import tempfile
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Callable, Iterator

import pytest

# Point the app at a throwaway SQLite file before api.config is imported.
_DB_DIR = Path(tempfile.mkdtemp(prefix="exam-engine-tests-"))
os.environ["DB_DIR"] = str(_DB_DIR)
os.environ["DATABASE_URL"] = f"sqlite:///{_DB_DIR / 'test.db'}"
os.environ["STORAGE_RETRY_WAIT_SECONDS"] = "0"
os.environ["SESSION_CLEANUP_INTERVAL_SECONDS"] = "0"

from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy.orm import Session as DbSession  # noqa: E402

import api.models.db  # noqa: E402,F401
from api.app import app  # noqa: E402
from api.config import ACCESS_TOKEN_EXPIRE_MINUTES  # noqa: E402
from api.database import Base, SessionLocal, engine  # noqa: E402
from api.models.db.exam import Exam  # noqa: E402
from api.models.db.user import User, UserRole  # noqa: E402
from api.models.tests import TestCreate  # noqa: E402
from api.services import auth_service, test_service  # noqa: E402


def make_questions(count: int, correct: int = 0, prefix: str = "Q") -> list[dict[str, object]]:
    return [
        {
            "question": f"{prefix}{index + 1}",
            "options": ["A", "B", "C", "D"],
            "correct": correct,
            "explanation": f"Because {prefix}{index + 1}",
        }
        for index in range(count)
    ]


def make_document(sections: dict[str, int], **fields: object) -> dict[str, object]:
    """Test document with ``count`` questions per subject, option 0 correct."""
    document: dict[str, object] = {
        "title": "Sample test",
        "course": "JEE",
        "testType": "custom",
        "sections": [
            {"subject": subject, "questions": make_questions(count, prefix=subject[:3])}
            for subject, count in sections.items()
        ],
    }
    document.update(fields)
    return document


@pytest.fixture
def db() -> Iterator[DbSession]:
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(db: DbSession) -> TestClient:
    return TestClient(app)


@pytest.fixture
def make_user(db: DbSession) -> Callable[..., User]:
    counter = iter(range(1, 10_000))

    def _make_user(role: UserRole = UserRole.STUDENT, course: str | None = "JEE") -> User:
        number = next(counter)
        return auth_service.create_user(
            db,
            f"{role.value}{number}",
            f"{role.value}{number}@example.com",
            "secret123",
            role=role,
            course=course,
            approved=True,
        )

    return _make_user


@pytest.fixture
def store_test(db: DbSession) -> Callable[..., Exam]:
    def _store_test(
        document: dict[str, object],
        *,
        teacher: User | None = None,
        approved: bool = True,
        active: bool = True,
        test_id: str | None = None,
    ) -> Exam:
        return test_service.create_test(
            db,
            TestCreate.model_validate(document),
            teacher_id=teacher.id if teacher else None,
            approved=approved,
            active=active,
            test_id=test_id,
        )

    return _store_test


@pytest.fixture
def auth_headers(db: DbSession) -> Callable[[User], dict[str, str]]:
    def _auth_headers(user: User) -> dict[str, str]:
        token, jti = auth_service.create_access_token(user.id)
        expires_at = datetime.now(timezone.utc) + timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)
        auth_service.create_session(db, user.id, jti, expires_at)
        return {"Authorization": f"Bearer {token}"}

    return _auth_headers
