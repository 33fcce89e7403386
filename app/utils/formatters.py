"""
Display helpers shared by the suggestion rankers.
"""
import math
from datetime import datetime, timezone
from typing import Optional

SECONDS_PER_DAY = 24 * 60 * 60


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """
    Normalize a timestamp to an aware UTC datetime.

    SQLite hands back naive datetimes for timezone-aware columns; those are
    stored in UTC, so a naive value is read as UTC.
    """
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def whole_days_since(then: datetime, now: datetime) -> int:
    """Completed days between two timestamps (floor)."""
    return math.floor((as_utc(now) - as_utc(then)).total_seconds() / SECONDS_PER_DAY)


def days_until_ceil(then: datetime, now: datetime) -> int:
    """Days remaining until a future timestamp, partial days rounded up."""
    return math.ceil((as_utc(then) - as_utc(now)).total_seconds() / SECONDS_PER_DAY)


def plural_days(count: int) -> str:
    """
    Examples:
        plural_days(1) -> "1 day"
        plural_days(3) -> "3 days"
    """
    return f"{count} day{'' if count == 1 else 's'}"


def initials(first_name: Optional[str], last_name: Optional[str]) -> str:
    """Upper-cased first letter of each name part ("ada lovelace" -> "AL")."""
    return f"{(first_name or '')[:1]}{(last_name or '')[:1]}".upper()
