import logging
from datetime import datetime, timezone

logger = logging.getLogger("parkrun-helper")


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def ensure_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def to_iso(value: datetime) -> str:
    """Render a datetime as ISO-8601 with millisecond precision and a Z suffix."""
    return ensure_utc(value).isoformat(timespec="milliseconds").replace("+00:00", "Z")
