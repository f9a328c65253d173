"""
Date utility functions for the application.

Every scheduling value is date-only. Datetimes are interpreted in UTC so the
local timezone of the server never shifts which calendar day a value means.
"""
from datetime import date, datetime, timedelta, timezone
from typing import Optional, Union

from talentflow.errors import InvalidDate

ONE_DAY = timedelta(days=1)
YMD_FORMAT = "%Y-%m-%d"

DateLike = Union[date, datetime, str]


def to_date_only(value: DateLike, field: str = "date") -> date:
    """
    Normalize a date, datetime or 'YYYY-MM-DD' string to a date.

    Aware datetimes are converted to UTC first; naive datetimes are assumed
    to already be UTC. ISO strings with a time part ('2025-03-03T10:00:00Z')
    are accepted and reduced to their UTC date.

    Raises:
        InvalidDate: If the value cannot be parsed
    """
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value.date()

    if isinstance(value, date):
        return value

    if isinstance(value, str):
        text = value.strip()
        try:
            if len(text) == 10:
                return datetime.strptime(text, YMD_FORMAT).date()
            return to_date_only(datetime.fromisoformat(text.replace("Z", "+00:00")), field)
        except ValueError:
            pass

    raise InvalidDate(
        f"Invalid {field}. Use the YYYY-MM-DD format.",
        details={"field": field, "value": str(value)},
    )


def to_ymd(value: Optional[DateLike]) -> Optional[str]:
    """Format a date-like value as 'YYYY-MM-DD' (None stays None)."""
    if value is None:
        return None
    return to_date_only(value).strftime(YMD_FORMAT)


def utc_today() -> date:
    """Today's date in UTC."""
    return datetime.now(timezone.utc).date()
