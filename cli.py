import argparse
import sys
from pathlib import Path

from pydantic import ValidationError as PayloadError

from api.database import SessionLocal, init_db
from api.errors import ExamEngineError
from api.models.tests import TestCreate
from api.services import test_service
from api.services.auth_service import approve_user, get_user_by_username
from api.services.chunk_resolver import resolve_logical_test
from api.services.grading_service import grade
from api.utils.json_utils import json_dump, read_json_file
from api.utils.validation import validate_answers, validate_id
from core.logging_setup import setup_console_logging


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Manage exam tests and grade answers offline")
    commands = parser.add_subparsers(dest="command", required=True)

    importer = commands.add_parser("import", help="Store a JSON test document")
    importer.add_argument("file", type=Path, help="Path to the test document (.json)")
    importer.add_argument("--id", dest="test_id", help="Explicit test id")
    importer.add_argument("--teacher", help="Username of the owning teacher")
    importer.add_argument("--parent", help="Root test id when importing a chunk")
    importer.add_argument("--chunk-index", type=int, help="Zero-based chunk position")
    importer.add_argument("--total-chunks", type=int, help="Number of chunks in the group")
    importer.add_argument("--approve", action="store_true", help="Mark the test approved")
    importer.add_argument("--activate", action="store_true", help="Mark the test active")

    approver = commands.add_parser("approve", help="Approve a pending user account")
    approver.add_argument("username", help="Username to approve")

    grader = commands.add_parser("grade", help="Grade an answers file without storing it")
    grader.add_argument("test_id", help="Any test id of the logical test")
    grader.add_argument("answers", type=Path, help="JSON file with {subject}_{index} answers")
    grader.add_argument(
        "--summary",
        action="store_true",
        help="Print per-section aggregates only",
    )
    return parser.parse_args(argv)


def _read_document(path: Path) -> object:
    if not path.is_file():
        raise ExamEngineError(f"File not found: {path}")
    try:
        return read_json_file(path, None)
    except ValueError as exc:
        raise ExamEngineError(f"{path} is not valid JSON: {exc}") from exc


def import_test(args: argparse.Namespace) -> str:
    document = _read_document(args.file)
    if not isinstance(document, dict):
        raise ExamEngineError(f"{args.file} does not contain a test document")
    if args.parent:
        document["parentTestId"] = args.parent
    if args.chunk_index is not None:
        document["chunkIndex"] = args.chunk_index
    if args.total_chunks is not None:
        document["totalChunks"] = args.total_chunks
    data = TestCreate.model_validate(document)

    db = SessionLocal()
    try:
        teacher_id = None
        if args.teacher:
            teacher = get_user_by_username(db, args.teacher)
            if teacher is None:
                raise ExamEngineError(f"Unknown teacher: {args.teacher}")
            teacher_id = teacher.id
        exam = test_service.create_test(
            db,
            data,
            teacher_id=teacher_id,
            approved=args.approve,
            active=args.activate,
            test_id=validate_id("testId", args.test_id) if args.test_id else None,
        )
        return exam.id
    finally:
        db.close()


def approve_account(args: argparse.Namespace) -> str:
    db = SessionLocal()
    try:
        user = get_user_by_username(db, args.username)
        if user is None:
            raise ExamEngineError(f"Unknown user: {args.username}")
        return approve_user(db, user).username
    finally:
        db.close()


def grade_answers(args: argparse.Namespace) -> dict[str, object]:
    answers = validate_answers(_read_document(args.answers))
    db = SessionLocal()
    try:
        logical = resolve_logical_test(db, validate_id("testId", args.test_id))
    finally:
        db.close()

    payload = grade(logical.content, answers).to_payload()
    payload["testId"] = logical.group_id
    if args.summary:
        for section in payload["sectionResults"]:
            section.pop("questions")
    return payload


def main(argv: list[str] | None = None) -> int:
    setup_console_logging()
    args = parse_args(argv)
    init_db()
    try:
        if args.command == "import":
            print(f"Saved test {import_test(args)}")
        elif args.command == "approve":
            print(f"Approved {approve_account(args)}")
        else:
            print(json_dump(grade_answers(args)))
    except PayloadError as exc:
        print(f"Invalid test document:\n{exc}", file=sys.stderr)
        return 2
    except ExamEngineError as exc:
        print(f"Error: {exc.message}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
