from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from app.domain.entities.booking import Booking, BookingStatus
from app.domain.entities.slot import AvailabilityView


class BookingSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    client_id: str
    photographer_id: str
    event_type: str
    event_date: date
    event_time: str | None = None
    event_location: str
    duration_hint: str | None = None
    total_amount: Decimal
    deposit_amount: Decimal
    status: BookingStatus
    service_id: str | None = None
    guest_count: int | None = None
    special_requests: str | None = None
    client_name: str | None = None
    client_email: str | None = None
    client_phone: str | None = None
    notes: str | None = None
    photographer_notes: str | None = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_entity(cls, booking: Booking) -> "BookingSchema":
        return cls.model_validate(booking)


class BookingResponseSchema(BaseModel):
    booking: BookingSchema
    message: str | None = None


class PaginationSchema(BaseModel):
    limit: int
    offset: int
    total: int


class BookingListResponseSchema(BaseModel):
    bookings: list[BookingSchema]
    pagination: PaginationSchema


class UpdateBookingRequestSchema(BaseModel):
    status: str
    notes: str | None = None


class SlotAvailabilitySchema(BaseModel):
    id: str
    time: str
    price: int
    available: bool


class AvailabilityResponseSchema(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    event_date: date = Field(alias="date")
    photographer_id: str = Field(alias="photographerId")
    availability: list[SlotAvailabilitySchema]
    total_slots: int = Field(alias="totalSlots")
    available_slots: int = Field(alias="availableSlots")

    @classmethod
    def from_view(cls, view: AvailabilityView) -> "AvailabilityResponseSchema":
        return cls(
            event_date=view.date,
            photographer_id=view.photographer_id,
            availability=[
                SlotAvailabilitySchema(id=s.id, time=s.time, price=s.base_price, available=s.available)
                for s in view.slots
            ],
            total_slots=view.total_slots,
            available_slots=view.available_slots,
        )


class MessageResponseSchema(BaseModel):
    message: str
