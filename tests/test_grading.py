import models
from api.services import grading_service


def _content(*sections: models.Section) -> models.ExamContent:
    return models.ExamContent(
        id="t1",
        title="Grading",
        kind=models.TestKind.CUSTOM,
        sections=list(sections),
    )


def _section(subject: models.Subject, correct: list[int], marks: int | None = None) -> models.Section:
    return models.Section(
        subject=subject,
        marks_per_question=marks,
        questions=[
            models.Question(options=["A", "B", "C", "D"], correct=answer, text=f"Q{i}")
            for i, answer in enumerate(correct)
        ],
    )


def test_wrong_and_unanswered_score_zero() -> None:
    content = _content(_section(models.Subject.PHYSICS, [0, 1, 2, 3, 0]))
    answers = {
        "physics_0": 0,  # correct
        "physics_1": 2,  # wrong
        "physics_2": 2,  # correct
        "physics_4": 3,  # wrong
    }

    report = grading_service.grade(content, answers)
    section = report.sections[0]

    assert section.score == 2
    assert section.max_score == 5
    assert (section.correct, section.incorrect, section.unanswered) == (2, 2, 1)
    assert report.total_score == 2
    assert report.percentage == 40
    assert [q.marks_awarded for q in section.questions] == [1, 0, 1, 0, 0]
    assert section.questions[3].student_answer is None


def test_null_answer_counts_as_unanswered() -> None:
    content = _content(_section(models.Subject.CHEMISTRY, [1]))
    report = grading_service.grade(content, {"chemistry_0": None})
    assert report.sections[0].unanswered == 1
    assert report.sections[0].score == 0


def test_percentage_rounds_half_up() -> None:
    assert grading_service.percentage(7, 9) == 78
    assert grading_service.percentage(1, 8) == 13
    assert grading_service.percentage(1, 3) == 33
    assert grading_service.percentage(2, 3) == 67
    assert grading_service.percentage(5, 5) == 100
    assert grading_service.percentage(0, 0) == 0


def test_empty_test_has_zero_percentage() -> None:
    report = grading_service.grade(_content(), {"physics_0": 1})
    assert report.total_max_score == 0
    assert report.percentage == 0


def test_maths_defaults_to_two_marks_and_override_wins() -> None:
    content = _content(
        _section(models.Subject.MATHS, [0, 0]),
        _section(models.Subject.BIOLOGY, [0, 0], marks=4),
    )
    report = grading_service.grade(content, {"maths_0": 0, "biology_1": 0})

    maths, biology = report.sections
    assert (maths.score, maths.max_score, maths.marks_per_question) == (2, 4, 2)
    assert (biology.score, biology.max_score, biology.marks_per_question) == (4, 8, 4)
    assert report.total_score == 6
    assert report.total_max_score == 12
    assert report.percentage == 50


def test_report_payload_keys() -> None:
    content = _content(_section(models.Subject.PHYSICS, [2]))
    payload = grading_service.grade(content, {"physics_0": 2}).to_payload()

    section = payload["sectionResults"][0]
    assert section["correctCount"] == 1
    assert section["marksPerQuestion"] == 1
    question = section["questions"][0]
    assert question["questionIndex"] == 0
    assert question["correctAnswer"] == 2
    assert question["studentAnswer"] == 2
    assert question["isCorrect"] is True
    assert payload["percentage"] == 100
