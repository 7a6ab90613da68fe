from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import List


class Subject(str, enum.Enum):
    PHYSICS = "physics"
    CHEMISTRY = "chemistry"
    MATHS = "maths"
    BIOLOGY = "biology"


class TestKind(str, enum.Enum):
    MOCK = "mock"  # phase 1 (physics + chemistry), then phase 2 (maths or biology)
    CUSTOM = "custom"  # any subjects under a single timer


class Stream(str, enum.Enum):
    PCM = "PCM"
    PCB = "PCB"


PHASE1_SUBJECTS = (Subject.PHYSICS, Subject.CHEMISTRY)
PHASE2_SUBJECTS = (Subject.MATHS, Subject.BIOLOGY)
HEAVY_SUBJECT = Subject.MATHS

DEFAULT_PHASE_MINUTES = 90
DEFAULT_CUSTOM_MINUTES = 60
MIN_CUSTOM_MINUTES = 1
MAX_CUSTOM_MINUTES = 600


def default_marks(subject: Subject | str) -> int:
    return 2 if Subject(subject) == HEAVY_SUBJECT else 1


def answer_key(subject: Subject | str, index: int) -> str:
    """Key of a question in the candidate's answer map, e.g. ``maths_3``."""
    return f"{Subject(subject).value}_{index}"


@dataclass
class Question:
    options: List[str]
    correct: int
    text: str = ""
    image: str = ""
    option_images: List[str] = field(default_factory=list)
    explanation: str = ""
    explanation_image: str = ""


@dataclass
class Section:
    subject: Subject
    questions: List[Question] = field(default_factory=list)
    marks_per_question: int | None = None

    @property
    def marks(self) -> int:
        if self.marks_per_question:
            return self.marks_per_question
        return default_marks(self.subject)


@dataclass(frozen=True)
class ChunkRef:
    """Position of one stored fragment inside its logical test."""

    root_id: str
    position: int | None = None


@dataclass
class ExamContent:
    id: str
    title: str
    kind: TestKind
    sections: List[Section]
    stream: Stream | None = None
    phase1_minutes: int = DEFAULT_PHASE_MINUTES
    phase2_minutes: int = DEFAULT_PHASE_MINUTES
    duration_minutes: int = DEFAULT_CUSTOM_MINUTES
    show_answer_key: bool = False

    @property
    def subjects(self) -> list[Subject]:
        return [section.subject for section in self.sections]

    def section(self, subject: Subject | str) -> Section | None:
        subject = Subject(subject)
        for section in self.sections:
            if section.subject == subject:
                return section
        return None

    def question_count(self, subject: Subject | str) -> int:
        section = self.section(subject)
        return len(section.questions) if section else 0

    @property
    def phase2_subject(self) -> Subject:
        if self.stream == Stream.PCB:
            return Subject.BIOLOGY
        if Subject.MATHS in self.subjects:
            return Subject.MATHS
        if Subject.BIOLOGY in self.subjects:
            return Subject.BIOLOGY
        return Subject.MATHS
