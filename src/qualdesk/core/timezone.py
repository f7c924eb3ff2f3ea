"""Timezone utilities for the operator's local (Chilean) time."""

from datetime import datetime

import pytz

LOCAL_TZ = pytz.timezone("America/Santiago")


def now_local() -> datetime:
    """Return current time in the local timezone."""
    return datetime.now(LOCAL_TZ)


def to_local(dt: datetime) -> datetime:
    """Convert a datetime to the local timezone."""
    if dt.tzinfo is None:
        # Assume naive datetime is already local
        return LOCAL_TZ.localize(dt)
    return dt.astimezone(LOCAL_TZ)
