"""Time helpers."""

from datetime import date, datetime, time, timedelta, timezone


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def day_bounds(start: date | None, end: date | None) -> tuple[datetime | None, datetime | None]:
    """Inclusive date range -> half-open UTC datetime range [lower, upper)."""
    lower = datetime.combine(start, time.min, tzinfo=timezone.utc) if start else None
    upper = datetime.combine(end + timedelta(days=1), time.min, tzinfo=timezone.utc) if end else None
    return lower, upper
