"""
Domain time utilities (pure).

Centralized timestamp and validity-window helpers.

Behavior and error messages must remain consistent across the domain model.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone


def require_utc_timestamp(name: str, value: datetime) -> None:
    """
    Enforces the requirement that stored timestamps are UTC.

    Invariants:
    - Timestamps must be timezone-aware.
    - Timestamps must have UTC offset 0.
    """

    if value.tzinfo is None or value.utcoffset() is None:
        raise ValueError(f"{name} must be timezone-aware (UTC)")
    if value.utcoffset() != timedelta(0):
        raise ValueError(f"{name} must be a UTC timestamp (offset 0)")


def require_date_window(start_date: date, end_date: date) -> None:
    """Validity windows must satisfy start_date <= end_date."""

    if start_date > end_date:
        raise ValueError("start_date must be on or before end_date")


def in_window(start_date: date, end_date: date, as_of: date) -> bool:
    """
    Inclusive calendar-date window check.

    start_date <= as_of <= end_date, no time-of-day component.
    """

    return start_date <= as_of <= end_date


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def utc_today() -> date:
    return utc_now().date()
