"""Time utilities."""
from datetime import datetime, timezone


def isoformat(value: datetime | None) -> str | None:
    """Serialize datetime as ISO string, assuming UTC for naive values.

    SQLite hands back naive datetimes even for timezone-aware columns.
    """
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.isoformat()
