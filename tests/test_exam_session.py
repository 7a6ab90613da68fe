import pytest

import models
from exam_session import ExamSession, Phase, QuestionStatus, SubjectAccess

PHYSICS = models.Subject.PHYSICS
CHEMISTRY = models.Subject.CHEMISTRY
MATHS = models.Subject.MATHS
BIOLOGY = models.Subject.BIOLOGY


def _section(subject: models.Subject, count: int) -> models.Section:
    return models.Section(
        subject=subject,
        questions=[models.Question(options=["A", "B"], correct=0) for _ in range(count)],
    )


def _mock(stream: models.Stream | None = None, minutes: int = 1) -> models.ExamContent:
    return models.ExamContent(
        id="mock",
        title="Mock",
        kind=models.TestKind.MOCK,
        sections=[
            _section(PHYSICS, 2),
            _section(CHEMISTRY, 2),
            _section(MATHS, 2),
            _section(BIOLOGY, 2),
        ],
        stream=stream,
        phase1_minutes=minutes,
        phase2_minutes=minutes,
    )


def _custom(minutes: int = 1) -> models.ExamContent:
    return models.ExamContent(
        id="custom",
        title="Custom",
        kind=models.TestKind.CUSTOM,
        sections=[_section(CHEMISTRY, 2), _section(BIOLOGY, 1)],
        duration_minutes=minutes,
    )


def test_phase_one_hides_phase_two_subject() -> None:
    session = ExamSession(_mock())

    assert session.phase == Phase.PHASE1_ACTIVE
    assert session.access(PHYSICS) == SubjectAccess.EDITABLE
    assert session.access(MATHS) == SubjectAccess.HIDDEN
    assert session.set_answer(PHYSICS, 0, 1) is True
    assert session.set_answer(MATHS, 0, 1) is False
    assert session.navigate(MATHS, 0) is False
    assert session.set_answer(PHYSICS, 5, 1) is False
    assert session.answers == {"physics_0": 1}


def test_phases_are_irreversible() -> None:
    session = ExamSession(_mock())
    session.set_answer(PHYSICS, 0, 1)

    assert session.end_phase1() is True
    assert session.phase == Phase.TRANSITION
    assert session.access(PHYSICS) == SubjectAccess.READ_ONLY
    assert session.access(MATHS) == SubjectAccess.HIDDEN
    assert session.navigable_subjects() == []
    assert session.set_answer(PHYSICS, 0, 0) is False
    assert session.submit() is False

    assert session.start_phase2() is True
    assert session.phase == Phase.PHASE2_ACTIVE
    assert (session.active_subject, session.active_index) == (MATHS, 0)
    assert session.phase2_timer.running is True
    assert session.end_phase1() is False
    assert session.start_phase2() is False
    assert session.set_answer(PHYSICS, 0, 0) is False
    assert session.clear_answer(CHEMISTRY, 0) is False
    assert session.toggle_review(PHYSICS, 1) is False
    assert session.set_answer(MATHS, 1, 1) is True
    assert session.answers == {"physics_0": 1, "maths_1": 1}


def test_phase_one_timer_stops_at_current_value() -> None:
    session = ExamSession(_mock(minutes=2))
    for _ in range(30):
        session.tick()

    session.end_phase1()
    session.tick()

    assert session.phase1_timer.remaining == 90
    assert session.phase1_timer.running is False


def test_expiry_forces_transition_and_submission() -> None:
    submitted: list[dict[str, int]] = []
    session = ExamSession(_mock(), on_submit=submitted.append)

    for _ in range(60):
        session.tick()
    assert session.phase == Phase.TRANSITION
    assert session.phase1_timer.remaining == 0

    session.start_phase2()
    session.set_answer(MATHS, 0, 0)
    for _ in range(59):
        session.tick()
    assert session.phase == Phase.PHASE2_ACTIVE

    session.tick()
    assert session.phase == Phase.SUBMITTED
    assert submitted == [{"maths_0": 0}]
    assert all(session.access(s) == SubjectAccess.READ_ONLY for s in session.content.subjects)


def test_reentrant_submit_is_noop() -> None:
    calls: list[dict[str, int]] = []

    def on_submit(answers: dict[str, int]) -> None:
        calls.append(answers)
        assert session.phase == Phase.SUBMITTED
        assert session.submit() is False

    session = ExamSession(_custom(), on_submit=on_submit)
    assert session.submit() is True
    assert session.submit() is False
    session.tick()
    assert len(calls) == 1


def test_submitted_state_survives_callback_failure() -> None:
    def on_submit(answers: dict[str, int]) -> None:
        raise RuntimeError("network down")

    session = ExamSession(_custom(), on_submit=on_submit)
    with pytest.raises(RuntimeError):
        session.submit()
    assert session.phase == Phase.SUBMITTED
    assert session.set_answer(CHEMISTRY, 0, 1) is False


def test_pcb_stream_uses_biology_in_phase_two() -> None:
    session = ExamSession(_mock(stream=models.Stream.PCB))
    session.end_phase1()
    session.start_phase2()

    assert session.active_subject == BIOLOGY
    assert session.access(BIOLOGY) == SubjectAccess.EDITABLE
    assert session.timer_label() == "Biology"


@pytest.mark.parametrize("option", [-1, 2, True])
def test_out_of_range_option_is_ignored(option: int) -> None:
    session = ExamSession(_custom())
    session.set_answer(CHEMISTRY, 0, 1)

    assert session.set_answer(CHEMISTRY, 0, option) is False
    assert session.answers == {"chemistry_0": 1}


def test_review_wins_over_answered() -> None:
    session = ExamSession(_custom())
    session.set_answer(CHEMISTRY, 0, 1)
    session.toggle_review(CHEMISTRY, 0)

    assert session.question_status(CHEMISTRY, 0) == QuestionStatus.REVIEW
    assert session.question_status(CHEMISTRY, 1) == QuestionStatus.UNANSWERED
    stats = session.subject_stats(CHEMISTRY)
    assert (stats.total, stats.answered, stats.review, stats.unanswered) == (2, 1, 1, 1)

    session.toggle_review(CHEMISTRY, 0)
    assert session.question_status(CHEMISTRY, 0) == QuestionStatus.ANSWERED
    session.clear_answer(CHEMISTRY, 0)
    assert session.question_status(CHEMISTRY, 0) == QuestionStatus.UNANSWERED


def test_navigation_walks_across_subjects() -> None:
    session = ExamSession(_custom())

    assert session.active_subject == CHEMISTRY
    assert session.next_question() is True
    assert session.next_question() is True
    assert (session.active_subject, session.active_index) == (BIOLOGY, 0)
    assert session.is_last_question() is True
    assert session.next_question() is False
    assert session.previous_question() is True
    assert (session.active_subject, session.active_index) == (CHEMISTRY, 1)


def test_prompts_report_unanswered_counts() -> None:
    mock = ExamSession(_mock())
    mock.set_answer(PHYSICS, 0, 0)
    prompt = mock.end_phase1_prompt()
    assert "3 unanswered" in prompt
    assert "Mathematics" in prompt

    custom = ExamSession(_custom())
    assert "3 unanswered" in custom.submit_prompt()
    for subject, index in ((CHEMISTRY, 0), (CHEMISTRY, 1), (BIOLOGY, 0)):
        custom.set_answer(subject, index, 0)
    assert custom.submit_prompt() == "Are you sure you want to submit the test?"


def test_timer_display_and_warning() -> None:
    session = ExamSession(_custom(minutes=10))
    assert session.time_display() == "10:00"
    assert session.timer_label() == "Time Left"
    assert session.time_warning is False

    for _ in range(301):
        session.tick()
    assert session.time_left == 299
    assert session.time_warning is True
