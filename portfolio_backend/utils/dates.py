from __future__ import annotations

import calendar
from datetime import date, datetime


def months_before(day: date, months: int) -> date:
    """
    Same day-of-month `months` calendar months earlier, clamped to the month's last day.
    """

    total = day.year * 12 + (day.month - 1) - months
    year, month_index = divmod(total, 12)
    month = month_index + 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(day.day, last_day))


def parse_iso_date(value: str | None) -> date | None:
    """Parse `YYYY-MM-DD` (or a full ISO timestamp); blank or invalid input yields None."""
    raw = (value or "").strip()
    if not raw:
        return None
    try:
        return date.fromisoformat(raw[:10])
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(raw).date()
    except ValueError:
        return None
