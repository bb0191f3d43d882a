"""Canonical date resolution for invoice records.

Invoice dates reach the ledger in three wire shapes:

- native ``datetime`` / ``date`` values (manual entry, extraction drafts)
- timestamp structures carrying ``seconds`` and ``nanoseconds`` (document store reads)
- date strings (REST payloads, AI extraction output, CSV imports)

``resolve_date`` folds all of them into one canonical instant, a timezone-aware
``datetime`` in UTC. Input that cannot be resolved yields ``INVALID_DATE`` rather
than raising or falling back to the epoch, so callers can render "Invalid Date".
"""

import re
from collections.abc import Mapping
from datetime import UTC, date, datetime, timedelta
from email.utils import parsedate_to_datetime
from enum import Enum
from typing import Any, TypeGuard

from pydantic import BaseModel, Field, ValidationError


class InvalidDate(Enum):
    """Sentinel for a date value that could not be resolved."""

    INVALID = "Invalid Date"

    def __bool__(self) -> bool:
        return False


INVALID_DATE = InvalidDate.INVALID

ResolvedDate = datetime | InvalidDate


class TimestampValue(BaseModel):
    """Serialized timestamp: whole seconds since the epoch plus a sub-second remainder."""

    seconds: int
    nanoseconds: int = Field(default=0, ge=0, lt=1_000_000_000)


# Formats tried after ISO-8601, in order
FALLBACK_FORMATS = (
    "%Y-%m-%d",
    "%m/%d/%Y",
    "%m/%d/%y",
    "%Y/%m/%d",
    "%d.%m.%Y",
    "%B %d, %Y",
    "%b %d, %Y",
    "%d %B %Y",
    "%d %b %Y",
)

# fromisoformat keeps at most microseconds; store timestamps carry nanoseconds
_FRACTION_RE = re.compile(r"(\.\d{6})\d+")


def is_valid_date(value: Any) -> TypeGuard[datetime]:
    """Return True when ``value`` is a resolved instant rather than the sentinel."""
    return isinstance(value, datetime)


def resolve_date(raw: Any) -> ResolvedDate:
    """Resolve any supported raw date value to a canonical UTC instant.

    Never raises. Resolving an already canonical instant returns it unchanged.

    Args:
        raw: datetime, date, timestamp structure, date string, or anything else

    Returns:
        Timezone-aware UTC datetime, or INVALID_DATE
    """
    if isinstance(raw, InvalidDate):
        return raw
    if isinstance(raw, datetime):
        return _to_utc(raw)
    if isinstance(raw, date):
        return datetime(raw.year, raw.month, raw.day, tzinfo=UTC)
    if isinstance(raw, str):
        return _parse_string(raw)

    seconds_parts = _seconds_parts(raw)
    if seconds_parts is not None:
        return _from_seconds(*seconds_parts)

    return INVALID_DATE


def _to_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    if value.tzinfo is UTC:
        return value
    return value.astimezone(UTC)


def _seconds_parts(raw: Any) -> tuple[Any, Any] | None:
    """Pull (seconds, nanoseconds) out of a timestamp structure, if ``raw`` is one."""
    if isinstance(raw, Mapping):
        if "seconds" in raw:
            return raw["seconds"], raw.get("nanoseconds", 0)
        # JSON-serialized admin SDK timestamps
        if "_seconds" in raw:
            return raw["_seconds"], raw.get("_nanoseconds", 0)
        return None
    if hasattr(raw, "seconds") and not isinstance(raw, timedelta):
        return raw.seconds, getattr(raw, "nanoseconds", 0)
    return None


def _from_seconds(seconds: Any, nanoseconds: Any) -> ResolvedDate:
    # bool is an int subclass, never a timestamp
    if isinstance(seconds, bool) or isinstance(nanoseconds, bool):
        return INVALID_DATE
    try:
        stamp = TimestampValue(seconds=seconds, nanoseconds=nanoseconds or 0)
        instant = datetime.fromtimestamp(stamp.seconds, UTC)
    except (ValidationError, ValueError, OverflowError, OSError):
        return INVALID_DATE
    return instant + timedelta(microseconds=stamp.nanoseconds // 1000)


def _parse_string(raw: str) -> ResolvedDate:
    text = raw.strip()
    if not text:
        return INVALID_DATE

    try:
        return _to_utc(datetime.fromisoformat(_FRACTION_RE.sub(r"\1", text)))
    except ValueError:
        pass

    # RFC 2822, as written by HTTP headers and JavaScript's toUTCString()
    try:
        return _to_utc(parsedate_to_datetime(text))
    except (TypeError, ValueError, IndexError):
        pass

    for fmt in FALLBACK_FORMATS:
        try:
            return datetime.strptime(text, fmt).replace(tzinfo=UTC)
        except ValueError:
            continue

    return INVALID_DATE
