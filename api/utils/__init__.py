"""Utility modules."""
from api.utils.json_utils import json_dump, json_load, read_json_file
from api.utils.retry import with_retry
from api.utils.time_utils import isoformat
from api.utils.validation import validate_answers, validate_id

__all__ = [
    "json_dump",
    "json_load",
    "read_json_file",
    "with_retry",
    "isoformat",
    "validate_answers",
    "validate_id",
]
