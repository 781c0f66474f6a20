"""UTC datetime and calendar-day utilities."""

from datetime import date, datetime, time, timezone

from src.rl_common.errors import ValidationError


def utc_now() -> datetime:
    """Return timezone-aware UTC now."""
    return datetime.now(timezone.utc)


def parse_day(value: object, field: str = "date") -> date:
    """Parse a calendar day from a date or an ISO 'YYYY-MM-DD' string."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value.strip())
        except ValueError:
            raise ValidationError(f"{field} is not a valid calendar date: {value!r}") from None
    raise ValidationError(f"{field} must be an ISO date, got {type(value).__name__}")


def parse_timestamp(value: object, field: str = "date") -> datetime:
    """Parse a timestamp; naive values and bare dates are taken as UTC."""
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime.combine(value, time.min)
    elif isinstance(value, str):
        raw = value.strip()
        if raw.endswith("Z"):
            raw = raw[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(raw)
        except ValueError:
            raise ValidationError(f"{field} is not a valid timestamp: {value!r}") from None
    else:
        raise ValidationError(f"{field} must be an ISO timestamp, got {type(value).__name__}")

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed
