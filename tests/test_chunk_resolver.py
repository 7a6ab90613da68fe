import logging
from datetime import datetime, timedelta, timezone

import pytest

import models
from api.errors import NotFoundError
from api.models.db.exam import Exam
from api.models.db.user import UserRole
from api.services import chunk_resolver, test_service
from api.services.grading_service import grade
from conftest import make_document, make_questions

ROOT_ID = "root0001"


def _chunk(sections: list[tuple[str, int, str]], **fields: object) -> dict[str, object]:
    document: dict[str, object] = {
        "title": fields.pop("title", "Chunk"),
        "course": "JEE",
        "testType": "mock",
        "stream": "PCM",
        "totalChunks": 3,
        "sections": [
            {"subject": subject, "questions": make_questions(count, prefix=prefix)}
            for subject, count, prefix in sections
        ],
    }
    document.update(fields)
    return document


@pytest.fixture
def chunked(store_test) -> dict[str, Exam]:
    # stored out of order on purpose
    child2 = store_test(_chunk([("maths", 3, "c2-")], parentTestId=ROOT_ID, chunkIndex=2))
    root = store_test(
        _chunk([("physics", 2, "root-")], title="Full mock", chunkIndex=0),
        test_id=ROOT_ID,
    )
    child1 = store_test(
        _chunk(
            [("physics", 1, "c1-"), ("chemistry", 2, "c1-")],
            parentTestId=ROOT_ID,
            chunkIndex=1,
        )
    )
    return {"root": root, "child1": child1, "child2": child2}


def test_merge_is_deterministic_from_any_fragment(db, chunked) -> None:
    expected_ids = [chunked["root"].id, chunked["child1"].id, chunked["child2"].id]

    for fragment in chunked.values():
        logical = chunk_resolver.resolve_logical_test(db, fragment.id)
        content = logical.content

        assert logical.group_id == ROOT_ID
        assert logical.fragment_ids == expected_ids
        assert content.title == "Full mock"
        assert content.kind == models.TestKind.MOCK
        assert content.subjects == [
            models.Subject.PHYSICS,
            models.Subject.CHEMISTRY,
            models.Subject.MATHS,
        ]
        assert content.question_count("physics") == 3
        assert content.question_count("chemistry") == 2
        assert content.question_count("maths") == 3
        physics = [q.text for q in content.section("physics").questions]
        assert physics == ["root-1", "root-2", "c1-1"]


def test_positionless_fragments_follow_positioned_ones(db, store_test, chunked) -> None:
    loose = store_test(_chunk([("physics", 1, "loose-")], parentTestId=ROOT_ID))

    logical = chunk_resolver.resolve_logical_test(db, ROOT_ID)

    assert logical.fragment_ids[-1] == loose.id
    physics = [q.text for q in logical.content.section("physics").questions]
    assert physics == ["root-1", "root-2", "c1-1", "loose-1"]


def test_first_fragment_fixes_section_marks(db, store_test) -> None:
    root_doc = _chunk([("physics", 1, "r-")], chunkIndex=0, totalChunks=2)
    root_doc["sections"][0]["marksPerQuestion"] = 3
    root = store_test(root_doc)
    child_doc = _chunk([("physics", 1, "c-")], parentTestId=root.id, chunkIndex=1, totalChunks=2)
    child_doc["sections"][0]["marksPerQuestion"] = 5
    store_test(child_doc)

    logical = chunk_resolver.resolve_logical_test(db, root.id)

    assert logical.content.section("physics").marks == 3


def test_unchunked_test_is_its_own_group(db, store_test) -> None:
    exam = store_test(make_document({"physics": 2}))

    logical = chunk_resolver.resolve_logical_test(db, exam.id)

    assert logical.group_id == exam.id
    assert logical.fragment_ids == [exam.id]
    assert logical.root.id == exam.id


def test_root_without_chunk_metadata_still_merges_children(db, store_test) -> None:
    root = store_test(make_document({"physics": 2}, title="Plain root"))
    child = store_test(make_document({"chemistry": 2}, parentTestId=root.id))
    answers = {"physics_0": 0, "physics_1": 0, "chemistry_0": 0, "chemistry_1": 0}

    via_root = chunk_resolver.resolve_logical_test(db, root.id)
    via_child = chunk_resolver.resolve_logical_test(db, child.id)

    assert via_root.content == via_child.content
    for logical in (via_root, via_child):
        assert logical.group_id == root.id
        assert sorted(logical.fragment_ids) == sorted([root.id, child.id])
        assert logical.content.title == "Plain root"
        assert set(logical.content.subjects) == {models.Subject.PHYSICS, models.Subject.CHEMISTRY}
    assert grade(via_root.content, answers).total_score == 4
    assert grade(via_child.content, answers).total_score == 4


def test_incomplete_mock_group_is_logged(db, store_test, caplog) -> None:
    root = store_test(_chunk([("physics", 1, "r-")], chunkIndex=0, totalChunks=2))
    store_test(_chunk([("maths", 1, "c-")], parentTestId=root.id, chunkIndex=1, totalChunks=2))

    with caplog.at_level(logging.WARNING, logger="api.services.chunk_resolver"):
        logical = chunk_resolver.resolve_logical_test(db, root.id)

    assert logical.content.subjects == [models.Subject.PHYSICS, models.Subject.MATHS]
    assert "incomplete" in caplog.text


def test_dangling_parent_falls_back_to_self(db, store_test, caplog) -> None:
    orphan = store_test(_chunk([("chemistry", 2, "o-")], parentTestId="ghost", chunkIndex=1))

    with caplog.at_level(logging.WARNING, logger="api.services.chunk_resolver"):
        logical = chunk_resolver.resolve_logical_test(db, orphan.id)

    assert logical.group_id == orphan.id
    assert logical.fragment_ids == [orphan.id]
    assert logical.content.question_count("chemistry") == 2
    assert "ghost" in caplog.text


def test_missing_test_raises_not_found(db) -> None:
    with pytest.raises(NotFoundError):
        chunk_resolver.resolve_logical_test(db, "nope")


def test_order_fragments_breaks_ties_by_creation_then_id() -> None:
    base = datetime(2026, 1, 1, tzinfo=timezone.utc)
    fragments = [
        Exam(id="d", chunk_index=None, created_at=base),
        Exam(id="c", chunk_index=1, created_at=base + timedelta(seconds=5)),
        Exam(id="b", chunk_index=1, created_at=base),
        Exam(id="a", chunk_index=None, created_at=base),
        Exam(id="e", chunk_index=0, created_at=base + timedelta(days=1)),
    ]

    ordered = chunk_resolver.order_fragments(fragments)

    assert [exam.id for exam in ordered] == ["e", "b", "c", "a", "d"]


def test_group_fragments_groups_by_root(db, store_test, make_user, chunked) -> None:
    single = store_test(make_document({"biology": 1}))
    admin = make_user(UserRole.ADMIN)

    groups = chunk_resolver.group_fragments(test_service.list_visible_tests(db, admin))

    by_root = {group[0].chunk_ref.root_id: [exam.id for exam in group] for group in groups}
    assert by_root[ROOT_ID] == [chunked["root"].id, chunked["child1"].id, chunked["child2"].id]
    assert by_root[single.id] == [single.id]