from __future__ import annotations

from typing import Any, Iterable

from models import (
    DEFAULT_CUSTOM_MINUTES,
    DEFAULT_PHASE_MINUTES,
    ExamContent,
    Question,
    Section,
    Stream,
    Subject,
    TestKind,
)


def question_from_payload(data: dict[str, Any]) -> Question:
    return Question(
        text=data.get("question") or "",
        image=data.get("questionImage") or "",
        options=list(data.get("options") or []),
        option_images=list(data.get("optionImages") or []),
        correct=int(data["correct"]),
        explanation=data.get("explanation") or "",
        explanation_image=data.get("explanationImage") or "",
    )


def section_from_payload(data: dict[str, Any]) -> Section:
    return Section(
        subject=Subject(str(data["subject"]).lower()),
        marks_per_question=data.get("marksPerQuestion") or None,
        questions=[question_from_payload(item) for item in data.get("questions") or []],
    )


def sections_from_payload(items: Iterable[dict[str, Any]]) -> list[Section]:
    return [section_from_payload(item) for item in items]


def question_to_payload(question: Question) -> dict[str, Any]:
    return {
        "question": question.text,
        "questionImage": question.image,
        "options": list(question.options),
        # stored only when at least one option carries an image
        "optionImages": list(question.option_images)
        if any(question.option_images)
        else [],
        "correct": question.correct,
        "explanation": question.explanation,
        "explanationImage": question.explanation_image,
    }


def section_to_payload(section: Section) -> dict[str, Any]:
    return {
        "subject": section.subject.value,
        "marksPerQuestion": section.marks,
        "questions": [question_to_payload(q) for q in section.questions],
    }


def sections_to_payload(sections: Iterable[Section]) -> list[dict[str, Any]]:
    return [section_to_payload(section) for section in sections]


def serialize_exam_content(content: ExamContent) -> dict[str, Any]:
    """Test document in the shape a client starts an exam session from."""
    payload: dict[str, Any] = {
        "id": content.id,
        "title": content.title,
        "testType": content.kind.value,
        "sections": sections_to_payload(content.sections),
        "showAnswerKey": content.show_answer_key,
    }
    if content.kind == TestKind.MOCK:
        payload["stream"] = content.stream.value if content.stream else None
        payload["phase2Subject"] = content.phase2_subject.value
        payload["sectionTimings"] = {
            "physicsChemistry": content.phase1_minutes,
            "mathsOrBiology": content.phase2_minutes,
        }
    else:
        payload["customDuration"] = content.duration_minutes
        payload["customSubjects"] = [s.value for s in content.subjects]
    return payload


def exam_content_from_payload(payload: dict[str, Any]) -> ExamContent:
    timings = payload.get("sectionTimings") or {}
    stream = payload.get("stream")
    return ExamContent(
        id=str(payload.get("id") or payload.get("_id") or ""),
        title=payload.get("title") or "",
        kind=TestKind(payload.get("testType") or TestKind.CUSTOM.value),
        sections=sections_from_payload(payload.get("sections") or []),
        stream=Stream(stream) if stream else None,
        phase1_minutes=timings.get("physicsChemistry") or DEFAULT_PHASE_MINUTES,
        phase2_minutes=timings.get("mathsOrBiology") or DEFAULT_PHASE_MINUTES,
        duration_minutes=payload.get("customDuration") or DEFAULT_CUSTOM_MINUTES,
        show_answer_key=bool(payload.get("showAnswerKey", False)),
    )


def serialize_metadata(payload: dict[str, Any]) -> dict[str, Any]:
    sections = payload.get("sections", [])
    return {
        "id": payload.get("id"),
        "title": payload.get("title"),
        "testType": payload.get("testType"),
        "subjects": [section.get("subject") for section in sections],
        "questionCount": sum(len(section.get("questions", [])) for section in sections),
    }
