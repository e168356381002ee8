"""Calendar helpers for UTC days and ISO weeks.

The UTC calendar date is the unit for both rotation and streak
bookkeeping; weeks start on Monday (ISO 8601).
"""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone


def utc_now(now: datetime | None = None) -> datetime:
    """Return now as an aware UTC datetime (naive input is taken as UTC)."""
    if now is None:
        return datetime.now(timezone.utc)
    if now.tzinfo is None:
        return now.replace(tzinfo=timezone.utc)
    return now.astimezone(timezone.utc)


def utc_today(now: datetime | None = None) -> date:
    """Today's calendar date in UTC."""
    return utc_now(now).date()


def utc_yesterday(now: datetime | None = None) -> date:
    return utc_today(now) - timedelta(days=1)


def get_monday(dt: datetime | date) -> date:
    """Get the Monday of the ISO week containing dt."""
    d = dt.date() if isinstance(dt, datetime) else dt
    return d - timedelta(days=d.weekday())


def current_week_start(now: datetime | None = None) -> date:
    """Monday of the current ISO week in UTC."""
    return get_monday(utc_today(now))


def is_streak_alive(last_active: date | None, now: datetime | None = None) -> bool:
    """A streak survives while the last active day is today or yesterday."""
    if last_active is None:
        return False
    return last_active in (utc_today(now), utc_yesterday(now))
