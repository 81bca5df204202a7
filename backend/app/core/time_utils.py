from datetime import datetime
from typing import Optional
import pytz

UTC = pytz.utc

def get_utc_now() -> datetime:
    """Get current time in UTC."""
    return datetime.now(UTC)

def to_utc(dt: datetime) -> datetime:
    """Normalize a datetime to aware UTC. Naive values are assumed to be UTC."""
    if dt.tzinfo is None:
        return UTC.localize(dt)
    return dt.astimezone(UTC)

def bump(previous: Optional[datetime]) -> datetime:
    """
    Next value for an updated_at field.
    Never goes backwards, even if the wall clock does.
    """
    now = get_utc_now()
    if previous is not None and to_utc(previous) > now:
        return to_utc(previous)
    return now
