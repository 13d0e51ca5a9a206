"""
Utility functions shared by the resume and job helpers.
"""

import uuid
from datetime import datetime, timezone
from typing import Callable, Optional

Clock = Callable[[], datetime]
IdFactory = Callable[[], str]


def utc_now() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def new_id() -> str:
    """Generate a new UUID string."""
    return str(uuid.uuid4())


def iso_timestamp(clock: Optional[Clock] = None) -> str:
    """ISO-8601 instant with millisecond precision, e.g. 2024-05-01T12:00:00.000Z.

    Naive datetimes returned by ``clock`` are taken to be UTC already.
    """
    now = (clock or utc_now)()
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    now = now.astimezone(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def byte_length(text: str) -> int:
    """Size of ``text`` in UTF-8 bytes. Lone surrogates count as 3 bytes."""
    return len(text.encode("utf-8", "surrogatepass"))
