from __future__ import annotations

import re

from app.domain.entities.slot import Slot


SLOT_CATALOG: tuple[Slot, ...] = (
    Slot(id="morning-1", time="09:00 AM", base_price=150),
    Slot(id="morning-2", time="10:00 AM", base_price=150),
    Slot(id="morning-3", time="11:00 AM", base_price=150),
    Slot(id="afternoon-1", time="12:00 PM", base_price=175),
    Slot(id="afternoon-2", time="01:00 PM", base_price=175),
    Slot(id="afternoon-3", time="02:00 PM", base_price=175),
    Slot(id="afternoon-4", time="03:00 PM", base_price=175),
    Slot(id="evening-1", time="04:00 PM", base_price=200),
    Slot(id="evening-2", time="05:00 PM", base_price=200),
    Slot(id="evening-3", time="06:00 PM", base_price=200),
)

_BY_TIME: dict[str, Slot] = {slot.time: slot for slot in SLOT_CATALOG}

_TIME_RE = re.compile(r"^\s*(\d{1,2})(?::(\d{2}))?\s*([ap])?\.?\s*m?\.?\s*$", re.IGNORECASE)


def list_slots() -> tuple[Slot, ...]:
    return SLOT_CATALOG


def normalize_slot_time(value: str | None) -> str | None:
    """
    Map a loosely formatted time to its catalog label.
    Accepts "10:00 AM", "10am", "10 AM" and 24h "14:00".
    Returns None when the time is not a catalog slot.
    """
    if not value:
        return None
    match = _TIME_RE.match(value)
    if not match:
        return None

    hour = int(match.group(1))
    minute = int(match.group(2) or 0)
    meridiem = (match.group(3) or "").lower()

    if meridiem:
        if not 1 <= hour <= 12:
            return None
        if meridiem == "p" and hour != 12:
            hour += 12
        if meridiem == "a" and hour == 12:
            hour = 0
    elif hour > 23:
        return None

    if minute > 59:
        return None

    label_hour = hour % 12 or 12
    label = f"{label_hour:02d}:{minute:02d} {'PM' if hour >= 12 else 'AM'}"
    return label if label in _BY_TIME else None
