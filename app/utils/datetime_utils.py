"""
UTC helpers for timestamps and the ledger's reference date.

Timestamps (created_at, decided_at, audit rows) are stored in UTC; SQLite hands
them back naive, so serialization treats naive values as UTC.
"""
from datetime import date, datetime, timezone
from typing import Optional

UTC = timezone.utc


def now_utc() -> datetime:
    return datetime.now(UTC)


def today_utc() -> date:
    """Reference date for backdating and lead-time rules"""
    return now_utc().date()


def ensure_utc(dt: Optional[datetime]) -> Optional[datetime]:
    if dt is None:
        return None
    return dt.replace(tzinfo=UTC) if dt.tzinfo is None else dt.astimezone(UTC)


def iso_8601_utc(dt: Optional[datetime]) -> Optional[str]:
    """'2026-03-02T09:30:00Z' style output for API responses"""
    if dt is None:
        return None
    return ensure_utc(dt).isoformat().replace("+00:00", "Z")
