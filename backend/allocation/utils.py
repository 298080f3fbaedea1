"""Shared utility helpers used across services."""
from datetime import datetime, timezone

from dateutil.relativedelta import relativedelta


def utcnow() -> datetime:
    """Return timezone-aware UTC now. Replaces deprecated datetime.utcnow()."""
    return datetime.now(timezone.utc)


def months_before(moment: datetime, months: int) -> datetime:
    """Calendar-month subtraction (Jan 31 - 1 month = Dec 31, Mar 31 - 1 month = Feb 28/29)."""
    return moment - relativedelta(months=months)
