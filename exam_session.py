"""
In-memory exam session owned by the candidate's UI.

The session is never persisted: it is created from a start-session document,
mutated by user input and the clock, and handed to ``on_submit`` exactly once.
Operations on subjects that are not editable are ignored and return False.
"""
from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Callable

from exam_timer import Countdown, format_seconds
from models import PHASE1_SUBJECTS, ExamContent, Subject, TestKind, answer_key

log = logging.getLogger(__name__)

SubmitCallback = Callable[[dict[str, int]], None]

SUBJECT_LABELS = {
    Subject.PHYSICS: "Physics",
    Subject.CHEMISTRY: "Chemistry",
    Subject.MATHS: "Mathematics",
    Subject.BIOLOGY: "Biology",
}


class Phase(str, enum.Enum):
    PHASE1_ACTIVE = "phase1_active"
    TRANSITION = "transition"
    PHASE2_ACTIVE = "phase2_active"
    ACTIVE = "active"
    SUBMITTED = "submitted"


class SubjectAccess(str, enum.Enum):
    EDITABLE = "editable"
    READ_ONLY = "read_only"
    HIDDEN = "hidden"


class QuestionStatus(str, enum.Enum):
    ANSWERED = "answered"
    REVIEW = "review"
    UNANSWERED = "unanswered"


@dataclass(frozen=True)
class SubjectStats:
    total: int
    answered: int
    review: int

    @property
    def unanswered(self) -> int:
        return self.total - self.answered


class ExamSession:
    def __init__(self, content: ExamContent, on_submit: SubmitCallback | None = None):
        self.content = content
        self.on_submit = on_submit
        self.answers: dict[str, int] = {}
        self.review: set[str] = set()
        self.active_index = 0
        self._submitting = False

        if content.kind == TestKind.MOCK:
            self.phase = Phase.PHASE1_ACTIVE
            self.phase1_timer = Countdown(content.phase1_minutes * 60)
            self.phase2_timer = Countdown(content.phase2_minutes * 60)
            self.phase1_timer.start()
            self.active_subject = PHASE1_SUBJECTS[0]
        else:
            self.phase = Phase.ACTIVE
            self.timer = Countdown(content.duration_minutes * 60)
            self.timer.start()
            self.active_subject = (
                content.sections[0].subject if content.sections else Subject.PHYSICS
            )

    # ------------------------------------------------------------------
    # Access
    # ------------------------------------------------------------------

    @property
    def is_mock(self) -> bool:
        return self.content.kind == TestKind.MOCK

    @property
    def is_submitted(self) -> bool:
        return self.phase == Phase.SUBMITTED

    @property
    def phase2_subject(self) -> Subject:
        return self.content.phase2_subject

    def access(self, subject: Subject | str) -> SubjectAccess:
        subject = Subject(subject)
        if self.phase == Phase.SUBMITTED:
            return SubjectAccess.READ_ONLY
        if self.phase == Phase.ACTIVE:
            return SubjectAccess.EDITABLE
        if subject in PHASE1_SUBJECTS:
            if self.phase == Phase.PHASE1_ACTIVE:
                return SubjectAccess.EDITABLE
            return SubjectAccess.READ_ONLY
        if self.phase == Phase.PHASE2_ACTIVE:
            return SubjectAccess.EDITABLE
        return SubjectAccess.HIDDEN

    def navigable_subjects(self) -> list[Subject]:
        if self.phase in (Phase.TRANSITION, Phase.SUBMITTED):
            return []
        return [
            subject
            for subject in self.content.subjects
            if self.access(subject) != SubjectAccess.HIDDEN
        ]

    def _editable(self, subject: Subject | str, index: int) -> bool:
        subject = Subject(subject)
        if self.access(subject) != SubjectAccess.EDITABLE:
            return False
        return 0 <= index < self.content.question_count(subject)

    # ------------------------------------------------------------------
    # Per-question operations
    # ------------------------------------------------------------------

    def set_answer(self, subject: Subject | str, index: int, option: int) -> bool:
        if not self._editable(subject, index):
            return False
        question = self.content.section(subject).questions[index]
        if isinstance(option, bool) or not 0 <= option < len(question.options):
            return False
        self.answers[answer_key(subject, index)] = option
        return True

    def clear_answer(self, subject: Subject | str, index: int) -> bool:
        if not self._editable(subject, index):
            return False
        self.answers.pop(answer_key(subject, index), None)
        return True

    def toggle_review(self, subject: Subject | str, index: int) -> bool:
        if not self._editable(subject, index):
            return False
        key = answer_key(subject, index)
        if key in self.review:
            self.review.discard(key)
        else:
            self.review.add(key)
        return True

    def navigate(self, subject: Subject | str, index: int = 0) -> bool:
        subject = Subject(subject)
        if subject not in self.navigable_subjects():
            return False
        if not 0 <= index < max(1, self.content.question_count(subject)):
            return False
        self.active_subject = subject
        self.active_index = index
        return True

    def next_question(self) -> bool:
        if self.active_index < self.content.question_count(self.active_subject) - 1:
            return self.navigate(self.active_subject, self.active_index + 1)
        subjects = self.navigable_subjects()
        if self.active_subject not in subjects:
            return False
        position = subjects.index(self.active_subject)
        if position < len(subjects) - 1:
            return self.navigate(subjects[position + 1], 0)
        return False

    def previous_question(self) -> bool:
        if self.active_index > 0:
            return self.navigate(self.active_subject, self.active_index - 1)
        subjects = self.navigable_subjects()
        if self.active_subject not in subjects:
            return False
        position = subjects.index(self.active_subject)
        if position > 0:
            previous = subjects[position - 1]
            last = max(0, self.content.question_count(previous) - 1)
            return self.navigate(previous, last)
        return False

    # ------------------------------------------------------------------
    # Phase transitions
    # ------------------------------------------------------------------

    def end_phase1(self) -> bool:
        """Leave phase 1 for the intermission screen. One-way."""
        if self.phase != Phase.PHASE1_ACTIVE:
            return False
        self.phase1_timer.stop()
        self.phase = Phase.TRANSITION
        log.info(
            "Phase 1 of test %s closed with %ss left",
            self.content.id,
            self.phase1_timer.remaining,
        )
        return True

    def start_phase2(self) -> bool:
        if self.phase != Phase.TRANSITION:
            return False
        self.phase = Phase.PHASE2_ACTIVE
        self.active_subject = self.phase2_subject
        self.active_index = 0
        self.phase2_timer.start()
        return True

    def submit(self) -> bool:
        """
        Final submission. Ignored outside phase 2 / the custom phase and on
        every call after the first. The state is ``submitted`` before the
        callback runs and stays so if the callback fails.
        """
        if self._submitting:
            return False
        if self.phase not in (Phase.PHASE2_ACTIVE, Phase.ACTIVE):
            return False
        self._submitting = True
        for timer in self._timers():
            timer.stop()
        self.phase = Phase.SUBMITTED
        log.info(
            "Submitting test %s with %d answers",
            self.content.id,
            len(self.answers),
        )
        if self.on_submit is not None:
            self.on_submit(dict(self.answers))
        return True

    def tick(self) -> None:
        """One second of wall-clock time for the current phase."""
        if self.phase == Phase.PHASE1_ACTIVE:
            if self.phase1_timer.tick():
                log.info("Phase 1 time is up for test %s", self.content.id)
                self.end_phase1()
        elif self.phase == Phase.PHASE2_ACTIVE:
            if self.phase2_timer.tick():
                log.info("Time is up for test %s, forcing submission", self.content.id)
                self.submit()
        elif self.phase == Phase.ACTIVE:
            if self.timer.tick():
                log.info("Time is up for test %s, forcing submission", self.content.id)
                self.submit()

    def _timers(self) -> list[Countdown]:
        if self.is_mock:
            return [self.phase1_timer, self.phase2_timer]
        return [self.timer]

    # ------------------------------------------------------------------
    # Derived views
    # ------------------------------------------------------------------

    def question_status(self, subject: Subject | str, index: int) -> QuestionStatus:
        key = answer_key(subject, index)
        if key in self.review:
            return QuestionStatus.REVIEW
        if key in self.answers:
            return QuestionStatus.ANSWERED
        return QuestionStatus.UNANSWERED

    def subject_stats(self, subject: Subject | str) -> SubjectStats:
        total = self.content.question_count(subject)
        keys = [answer_key(subject, index) for index in range(total)]
        return SubjectStats(
            total=total,
            answered=sum(1 for key in keys if key in self.answers),
            review=sum(1 for key in keys if key in self.review),
        )

    def reachable_subjects(self) -> list[Subject]:
        return [
            subject
            for subject in self.content.subjects
            if self.access(subject) != SubjectAccess.HIDDEN
        ]

    def totals(self, subjects: list[Subject] | None = None) -> SubjectStats:
        if subjects is None:
            subjects = self.reachable_subjects()
        stats = [self.subject_stats(subject) for subject in subjects]
        return SubjectStats(
            total=sum(s.total for s in stats),
            answered=sum(s.answered for s in stats),
            review=sum(s.review for s in stats),
        )

    def is_last_question(self) -> bool:
        subjects = self.navigable_subjects()
        if not subjects or subjects[-1] != self.active_subject:
            return False
        return self.active_index == self.content.question_count(self.active_subject) - 1

    @property
    def current_timer(self) -> Countdown | None:
        if not self.is_mock:
            return self.timer
        if self.phase == Phase.PHASE1_ACTIVE:
            return self.phase1_timer
        if self.phase == Phase.PHASE2_ACTIVE:
            return self.phase2_timer
        return None

    @property
    def time_left(self) -> int:
        timer = self.current_timer
        return timer.remaining if timer else 0

    @property
    def time_warning(self) -> bool:
        timer = self.current_timer
        return timer.warning if timer else False

    def timer_label(self) -> str:
        if not self.is_mock:
            return "Time Left"
        if self.phase == Phase.PHASE1_ACTIVE:
            return "Phy + Chem"
        if self.phase == Phase.PHASE2_ACTIVE:
            return SUBJECT_LABELS[self.phase2_subject]
        return "Time"

    def time_display(self) -> str:
        return format_seconds(self.time_left)

    # ------------------------------------------------------------------
    # Confirmation prompts
    # ------------------------------------------------------------------

    def end_phase1_prompt(self) -> str:
        unanswered = self.totals(list(PHASE1_SUBJECTS)).unanswered
        phase2_label = SUBJECT_LABELS[self.phase2_subject]
        lines = ["Are you sure you want to submit Physics & Chemistry?"]
        if unanswered > 0:
            lines.append(
                f"You have {unanswered} unanswered question(s) in Physics & Chemistry."
            )
        lines.append("Once submitted, you CANNOT go back to Physics & Chemistry.")
        lines.append(f"You will then start the {phase2_label} section.")
        return "\n\n".join(lines)

    def submit_prompt(self) -> str:
        unanswered = self.totals(self.content.subjects).unanswered
        if unanswered > 0:
            return (
                f"You have {unanswered} unanswered question(s). "
                "Are you sure you want to submit?"
            )
        return "Are you sure you want to submit the test?"

    def __repr__(self) -> str:
        return (
            f"<ExamSession(test_id='{self.content.id}', phase='{self.phase.value}', "
            f"answers={len(self.answers)})>"
        )
