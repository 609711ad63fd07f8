from datetime import datetime, timezone


def parse_iso(value: str) -> datetime:
    """Parse an ISO-8601 date or datetime; naive values are taken as UTC."""
    parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def to_iso(dt: datetime) -> str:
    """UTC timestamp with millisecond precision and a trailing Z, e.g. 2024-06-01T00:00:00.000Z.

    Stored test dates use this exact shape so string range queries order correctly.
    """
    dt = dt.astimezone(timezone.utc)
    return dt.strftime("%Y-%m-%dT%H:%M:%S.") + f"{dt.microsecond // 1000:03d}Z"


def utc_day_bounds(value: str) -> tuple[str, str]:
    """Start (00:00:00.000) and end (23:59:59.999) of the UTC day containing `value`."""
    day = parse_iso(value)
    start = day.replace(hour=0, minute=0, second=0, microsecond=0)
    end = day.replace(hour=23, minute=59, second=59, microsecond=999000)
    return to_iso(start), to_iso(end)


def now_iso() -> str:
    return to_iso(datetime.now(timezone.utc))
