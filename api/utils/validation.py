"""Validation utilities."""
import re
from typing import Any

from api.errors import ValidationError
from models import Subject

ANSWER_KEY_RE = re.compile(
    r"^(?P<subject>" + "|".join(s.value for s in Subject) + r")_(?P<index>\d+)$"
)


def validate_id(name: str, value: object) -> str:
    """Validate ID string (no path separators or whitespace)."""
    if not isinstance(value, str):
        raise ValidationError(f"{name} is required")
    cleaned = value.strip()
    if not cleaned:
        raise ValidationError(f"{name} is required")
    if len(cleaned) > 64 or not re.fullmatch(r"[A-Za-z0-9_-]+", cleaned):
        raise ValidationError(f"Invalid {name}")
    return cleaned


def validate_answers(answers: object) -> dict[str, int | None]:
    """Validate a candidate answer map keyed by ``{subject}_{index}``."""
    if not isinstance(answers, dict) or not answers:
        raise ValidationError("testId and answers are required")

    cleaned: dict[str, int | None] = {}
    for key, value in answers.items():
        if not isinstance(key, str) or not ANSWER_KEY_RE.match(key):
            raise ValidationError(f"Malformed answer key: {key!r}")
        cleaned[key] = _option_index(key, value)
    return cleaned


def _option_index(key: str, value: Any) -> int | None:
    if value is None:
        return None
    if isinstance(value, bool):
        raise ValidationError(f"Malformed answer for {key}")
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().lstrip("-").isdigit():
        return int(value.strip())
    raise ValidationError(f"Malformed answer for {key}")
