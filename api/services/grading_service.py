"""
Grading: score a candidate's answer map against a logical test.

Pure functions only; persistence lives in ``submission_service``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping

from models import ExamContent, Section, answer_key


def percentage(score: int, max_score: int) -> int:
    """Percentage of ``max_score`` rounded to the nearest integer, halves up."""
    if max_score <= 0:
        return 0
    return (200 * score + max_score) // (2 * max_score)


@dataclass
class QuestionResult:
    question_index: int
    question: str
    question_image: str
    options: list[str]
    option_images: list[str]
    correct_answer: int
    student_answer: int | None
    is_correct: bool
    explanation: str
    explanation_image: str
    marks_awarded: int
    marks_per_question: int

    def to_payload(self) -> dict[str, Any]:
        return {
            "questionIndex": self.question_index,
            "question": self.question,
            "questionImage": self.question_image,
            "options": self.options,
            "optionImages": self.option_images,
            "correctAnswer": self.correct_answer,
            "studentAnswer": self.student_answer,
            "isCorrect": self.is_correct,
            "explanation": self.explanation,
            "explanationImage": self.explanation_image,
            "marksAwarded": self.marks_awarded,
            "marksPerQuestion": self.marks_per_question,
        }


@dataclass
class SectionResult:
    subject: str
    marks_per_question: int
    score: int = 0
    max_score: int = 0
    correct: int = 0
    incorrect: int = 0
    unanswered: int = 0
    questions: list[QuestionResult] = field(default_factory=list)

    def to_payload(self) -> dict[str, Any]:
        return {
            "subject": self.subject,
            "score": self.score,
            "maxScore": self.max_score,
            "marksPerQuestion": self.marks_per_question,
            "correctCount": self.correct,
            "incorrectCount": self.incorrect,
            "unansweredCount": self.unanswered,
            "questions": [question.to_payload() for question in self.questions],
        }


@dataclass
class GradeReport:
    sections: list[SectionResult]

    @property
    def total_score(self) -> int:
        return sum(section.score for section in self.sections)

    @property
    def total_max_score(self) -> int:
        return sum(section.max_score for section in self.sections)

    @property
    def percentage(self) -> int:
        return percentage(self.total_score, self.total_max_score)

    def to_payload(self) -> dict[str, Any]:
        return {
            "sectionResults": [section.to_payload() for section in self.sections],
            "totalScore": self.total_score,
            "totalMaxScore": self.total_max_score,
            "percentage": self.percentage,
        }


def grade_section(section: Section, answers: Mapping[str, int | None]) -> SectionResult:
    marks = section.marks
    result = SectionResult(subject=section.subject.value, marks_per_question=marks)
    for index, question in enumerate(section.questions):
        chosen = answers.get(answer_key(section.subject, index))
        is_correct = chosen is not None and chosen == question.correct
        if chosen is None:
            result.unanswered += 1
        elif is_correct:
            result.correct += 1
        else:
            result.incorrect += 1
        awarded = marks if is_correct else 0
        result.score += awarded
        result.max_score += marks
        result.questions.append(
            QuestionResult(
                question_index=index,
                question=question.text,
                question_image=question.image,
                options=list(question.options),
                option_images=list(question.option_images),
                correct_answer=question.correct,
                student_answer=chosen,
                is_correct=is_correct,
                explanation=question.explanation,
                explanation_image=question.explanation_image,
                marks_awarded=awarded,
                marks_per_question=marks,
            )
        )
    return result


def grade(content: ExamContent, answers: Mapping[str, int | None]) -> GradeReport:
    """Grade ``answers`` against every section of ``content``.

    Unanswered and wrong answers both score zero; there is no negative marking.
    """
    return GradeReport(sections=[grade_section(section, answers) for section in content.sections])
