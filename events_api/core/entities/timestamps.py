from datetime import datetime, timedelta, timezone
from typing import Annotated, Any

from pydantic import BeforeValidator, PlainSerializer

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def to_millis(value: datetime) -> int:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return (value - EPOCH) // timedelta(milliseconds=1)


def from_millis(raw: Any) -> datetime:
    """Accepts a datetime as stored, or integer milliseconds as emitted on the wire."""
    if isinstance(raw, datetime):
        return raw if raw.tzinfo else raw.replace(tzinfo=timezone.utc)
    if isinstance(raw, int) and not isinstance(raw, bool):
        return EPOCH + timedelta(milliseconds=raw)
    raise ValueError(f"Expected datetime or integer milliseconds, got {type(raw).__name__}")


# Application-level event time (e.g. donated_at), unrelated to block time
MillisTimestamp = Annotated[
    datetime,
    BeforeValidator(from_millis),
    PlainSerializer(to_millis, return_type=int),
]
