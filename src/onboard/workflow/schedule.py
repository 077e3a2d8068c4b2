"""Milestone due-date policy."""

from __future__ import annotations

from datetime import datetime, timedelta

ONBOARDING_DAYS = 21
FRIDAY = 4


def milestone_due_date(start: datetime | None = None) -> datetime:
    """Compute the onboarding milestone deadline.

    Three weeks from the start, rounded up to the following Friday. A Friday
    start gets exactly 21 days, a Monday start 25.

    Args:
        start: Reference time. Defaults to now, in local time.

    Returns:
        The due date, keeping the time of day and timezone of ``start``.
    """
    if start is None:
        start = datetime.now().astimezone()
    until_friday = (FRIDAY - start.weekday()) % 7
    return start + timedelta(days=ONBOARDING_DAYS + until_friday)
