from __future__ import annotations

import logging
from datetime import date

from app.application.exceptions import ValidationError
from app.application.ports.booking_store import BookingStorePort
from app.application.utils.date_parser import parse_event_date
from app.domain.entities.booking import BookingStatus
from app.domain.entities.slot import AvailabilityView, SlotAvailability
from app.domain.slot_catalog import list_slots


class AvailabilityCalculator:
    def __init__(self, store: BookingStorePort) -> None:
        self._store = store
        self._logger = logging.getLogger(__name__)

    def compute(self, photographer_id: str, event_date: date | str) -> AvailabilityView:
        """
        Project the slot catalog onto the photographer's confirmed bookings for a date.
        Pending requests never block a slot. Store failures propagate.
        """
        errors: dict[str, str] = {}
        if not photographer_id or not str(photographer_id).strip():
            errors["photographer_id"] = "is required"
        parsed_date = parse_event_date(event_date)
        if parsed_date is None:
            errors["date"] = "must be a valid date"
        if errors:
            raise ValidationError(errors)

        confirmed = self._store.list_by_photographer_and_date(
            photographer_id, parsed_date, status=BookingStatus.confirmed
        )
        occupied = {booking.event_time for booking in confirmed if booking.event_time}

        slots = tuple(
            SlotAvailability(
                id=slot.id,
                time=slot.time,
                base_price=slot.base_price,
                available=slot.time not in occupied,
            )
            for slot in list_slots()
        )
        view = AvailabilityView(photographer_id=photographer_id, date=parsed_date, slots=slots)

        self._logger.debug(
            "Availability computed",
            extra={
                "photographer_id": photographer_id,
                "event_date": parsed_date.isoformat(),
                "available_slots": view.available_slots,
            },
        )
        return view
