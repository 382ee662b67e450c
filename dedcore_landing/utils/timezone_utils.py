"""
Timezone utilities for consistent datetime handling across the application.
"""
from datetime import datetime, timezone
from typing import Optional
import pytz

def to_utc(dt) -> Optional[datetime]:
    """
    Return a timezone-aware UTC datetime (or None). Accepts str or datetime.

    Supabase returns timestamps as ISO strings, sometimes with a trailing 'Z'
    and sometimes with microseconds; naive values are taken as UTC.
    """
    if dt is None:
        return None
    if isinstance(dt, str):
        s = dt.strip()
        if not s:
            return None
        if s.endswith("Z"):
            s = s[:-1] + "+00:00"
        try:
            dt = datetime.fromisoformat(s)
        except ValueError:
            return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)

def now_utc() -> datetime:
    """Get current UTC time as timezone-aware datetime."""
    return datetime.now(timezone.utc)

def get_timezone(name: Optional[str]):
    """Resolve an IANA name, falling back to UTC for unknown or empty names."""
    try:
        return pytz.timezone(name or "UTC")
    except pytz.UnknownTimeZoneError:
        return pytz.UTC

def to_local(dt: datetime, tz) -> datetime:
    """Wall-clock view of an aware datetime in the given pytz timezone."""
    return to_utc(dt).astimezone(tz)
