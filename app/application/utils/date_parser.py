from __future__ import annotations

import re
from datetime import date, datetime

_ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def parse_event_date(value: object) -> date | None:
    """Parse a calendar date. Returns date or None if the value is not a valid date."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None

    normalized = value.strip()
    if not normalized:
        return None

    if _ISO_DATE_RE.match(normalized):
        try:
            return date.fromisoformat(normalized)
        except ValueError:
            return None

    # Full ISO timestamps from date pickers ("2024-06-15T00:00:00Z"); time part is dropped
    try:
        return datetime.fromisoformat(normalized.replace("Z", "+00:00")).date()
    except ValueError:
        return None
