"""
Domain time utilities (pure).

Centralized timestamp validation and civil-date helpers.

All sell-date decisions are made against the civil calendar of the business
zone (fixed UTC+9). The caller's local zone is never consulted, so the same
instant always yields the same civil date.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone

# Fixed offset, not an IANA zone: the business calendar has no DST.
BUSINESS_TZ = timezone(timedelta(hours=9), name="KST")


def require_aware_timestamp(name: str, value: datetime) -> None:
    """
    Enforces the contract requirement that instants are timezone-aware.

    Any offset is accepted; conversion to the business zone happens in
    `civil_date`.
    """

    if value.tzinfo is None or value.utcoffset() is None:
        raise ValueError(f"{name} must be timezone-aware")


def civil_date(now: datetime) -> date:
    """Return the calendar date of `now` in the business zone."""

    require_aware_timestamp("now", now)
    return now.astimezone(BUSINESS_TZ).date()
