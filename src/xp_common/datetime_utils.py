"""UTC datetime utilities."""

from datetime import datetime, timezone


def utc_now() -> datetime:
    """Return timezone-aware UTC now."""
    return datetime.now(timezone.utc)


def month_start(moment: datetime) -> datetime:
    """First instant of the UTC calendar month containing `moment`."""
    moment = ensure_utc(moment)
    return moment.replace(day=1, hour=0, minute=0, second=0, microsecond=0)


def ensure_utc(moment: datetime) -> datetime:
    """Treat naive datetimes as UTC; convert aware ones to UTC."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)
