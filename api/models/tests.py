"""Test-document Pydantic models."""
from pydantic import BaseModel, Field, field_validator, model_validator

from models import (
    DEFAULT_CUSTOM_MINUTES,
    DEFAULT_PHASE_MINUTES,
    MAX_CUSTOM_MINUTES,
    MIN_CUSTOM_MINUTES,
    PHASE1_SUBJECTS,
    PHASE2_SUBJECTS,
    Stream,
    Subject,
    TestKind,
    default_marks,
)


class QuestionIn(BaseModel):
    """One multiple-choice question."""

    question: str = ""
    questionImage: str = ""
    options: list[str]
    optionImages: list[str] = Field(default_factory=list)
    correct: int
    explanation: str = ""
    explanationImage: str = ""

    @field_validator("options")
    @classmethod
    def validate_options_length(cls, v: list[str]) -> list[str]:
        if len(v) < 2:
            raise ValueError("must have at least 2 options")
        return v

    @model_validator(mode="after")
    def validate_content(self) -> "QuestionIn":
        if not self.question.strip() and not self.questionImage.strip():
            raise ValueError("needs question text or image")
        for index, text in enumerate(self.options):
            image = self.optionImages[index] if index < len(self.optionImages) else ""
            if not (text or "").strip() and not (image or "").strip():
                raise ValueError(f"option {index + 1} needs text or image")
        if not 0 <= self.correct < len(self.options):
            raise ValueError("has invalid correct answer index")
        return self


class SectionIn(BaseModel):
    """Questions of one subject."""

    subject: Subject
    marksPerQuestion: int | None = Field(None, ge=1)
    questions: list[QuestionIn] = Field(..., min_length=1)

    @field_validator("subject", mode="before")
    @classmethod
    def normalize_subject(cls, v: object) -> object:
        return v.lower() if isinstance(v, str) else v


class SectionTimings(BaseModel):
    """Mock test phase durations in minutes."""

    physicsChemistry: int = Field(DEFAULT_PHASE_MINUTES, ge=1)
    mathsOrBiology: int = Field(DEFAULT_PHASE_MINUTES, ge=1)


class TestCreate(BaseModel):
    """Model for storing a test document (whole test or one chunk)."""

    title: str = Field(..., min_length=1)
    course: str = Field(..., min_length=1)
    testType: TestKind = TestKind.CUSTOM
    stream: Stream | None = None
    sections: list[SectionIn] = Field(..., min_length=1)
    sectionTimings: SectionTimings = Field(default_factory=SectionTimings)
    customDuration: int = Field(
        DEFAULT_CUSTOM_MINUTES, ge=MIN_CUSTOM_MINUTES, le=MAX_CUSTOM_MINUTES
    )
    showAnswerKey: bool = False
    parentTestId: str | None = None
    chunkIndex: int | None = Field(None, ge=0)
    totalChunks: int | None = Field(None, ge=1)

    @model_validator(mode="after")
    def validate_sections(self) -> "TestCreate":
        subjects = [section.subject for section in self.sections]
        for subject in subjects:
            if subjects.count(subject) > 1:
                raise ValueError(
                    f"Duplicate section: {subject.value}. Each subject can only appear once."
                )
        # Chunks carry a slice of the questions; merged mock groups are checked on resolve.
        is_chunk = self.parentTestId is not None or (self.totalChunks or 0) > 1
        if self.testType == TestKind.MOCK and not is_chunk:
            if not all(subject in subjects for subject in PHASE1_SUBJECTS):
                raise ValueError("Mock test requires both Physics and Chemistry sections")
            phase2 = [subject for subject in subjects if subject in PHASE2_SUBJECTS]
            if len(phase2) != 1:
                raise ValueError(
                    "Mock test requires exactly one of Mathematics or Biology"
                )
        return self

    def resolved_stream(self) -> Stream | None:
        if self.testType != TestKind.MOCK:
            return None
        if self.stream:
            return self.stream
        subjects = {section.subject for section in self.sections}
        if Subject.BIOLOGY in subjects and Subject.MATHS not in subjects:
            return Stream.PCB
        return Stream.PCM

    def sections_payload(self) -> list[dict[str, object]]:
        return [
            {
                "subject": section.subject.value,
                "marksPerQuestion": section.marksPerQuestion
                or default_marks(section.subject),
                "questions": [
                    {
                        **question.model_dump(),
                        "optionImages": question.optionImages
                        if any(question.optionImages)
                        else [],
                    }
                    for question in section.questions
                ],
            }
            for section in self.sections
        ]
