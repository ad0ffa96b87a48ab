from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Body, Depends, Header, HTTPException, Query, Response

from app.api.v1.schemas import (
    AvailabilityResponseSchema,
    BookingListResponseSchema,
    BookingResponseSchema,
    BookingSchema,
    MessageResponseSchema,
    PaginationSchema,
    UpdateBookingRequestSchema,
)
from app.application.exceptions import (
    InvalidTransition,
    NotFound,
    PermissionDenied,
    ReservationError,
    SlotAlreadyBooked,
    StoreUnavailable,
    ValidationError,
)
from app.application.use_cases.reservations import ReservationService
from app.domain.entities.booking import Actor, ActorRole
from app.wiring.dependencies import get_reservation_service

router = APIRouter()
logger = logging.getLogger(__name__)


def get_actor(
    x_actor_id: str | None = Header(None),
    x_actor_role: str | None = Header(None),
) -> Actor:
    if not x_actor_id or not x_actor_role:
        raise HTTPException(status_code=401, detail="Missing actor headers")
    try:
        role = ActorRole(x_actor_role.strip().lower())
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Unknown actor role: {x_actor_role}")
    return Actor(id=x_actor_id, role=role)


def _to_http_error(e: ReservationError) -> HTTPException:
    if isinstance(e, ValidationError):
        return HTTPException(status_code=400, detail={"error": "Validation failed", "details": e.errors})
    if isinstance(e, NotFound):
        return HTTPException(status_code=404, detail="Booking not found")
    if isinstance(e, PermissionDenied):
        return HTTPException(status_code=403, detail=str(e))
    if isinstance(e, InvalidTransition):
        return HTTPException(
            status_code=409,
            detail={"error": str(e), "current": e.current, "requested": e.requested},
        )
    if isinstance(e, SlotAlreadyBooked):
        return HTTPException(status_code=409, detail="This time slot is already booked")
    if isinstance(e, StoreUnavailable):
        logger.error("Booking store unavailable", extra={"error": str(e)})
        return HTTPException(status_code=503, detail="Booking store unavailable", headers={"Retry-After": "1"})
    logger.exception("Unhandled reservation error", extra={"error": str(e)})
    return HTTPException(status_code=500, detail="Internal server error")


@router.post("/bookings", response_model=BookingResponseSchema, status_code=201)
def create_booking(
    payload: dict[str, Any] = Body(...),
    service: ReservationService = Depends(get_reservation_service),
):
    try:
        booking = service.create_booking(payload)
    except ReservationError as e:
        raise _to_http_error(e) from e
    return BookingResponseSchema(booking=BookingSchema.from_entity(booking), message="Booking created successfully")


@router.get("/bookings", response_model=BookingListResponseSchema)
def list_bookings(
    photographer_id: str | None = Query(None, alias="photographerId"),
    user_id: str | None = Query(None, alias="userId"),
    status: str | None = Query(None),
    limit: int = Query(20),
    offset: int = Query(0),
    service: ReservationService = Depends(get_reservation_service),
):
    try:
        bookings = service.list_bookings(
            photographer_id=photographer_id,
            client_id=user_id,
            status=status,
            limit=limit,
            offset=offset,
        )
    except ReservationError as e:
        raise _to_http_error(e) from e
    return BookingListResponseSchema(
        bookings=[BookingSchema.from_entity(b) for b in bookings],
        pagination=PaginationSchema(limit=limit, offset=offset, total=len(bookings)),
    )


@router.get("/bookings/availability", response_model=AvailabilityResponseSchema, response_model_by_alias=True)
def get_availability(
    photographer_id: str | None = Query(None, alias="photographerId"),
    date: str | None = Query(None),
    service: ReservationService = Depends(get_reservation_service),
):
    if not photographer_id or not date:
        raise HTTPException(
            status_code=400,
            detail="Missing required parameters: photographerId and date",
        )
    try:
        view = service.get_availability(photographer_id, date)
    except ReservationError as e:
        raise _to_http_error(e) from e
    return AvailabilityResponseSchema.from_view(view)


@router.get("/bookings/{booking_id}", response_model=BookingResponseSchema)
def get_booking(
    booking_id: str,
    service: ReservationService = Depends(get_reservation_service),
):
    try:
        booking = service.get_booking(booking_id)
    except ReservationError as e:
        raise _to_http_error(e) from e
    return BookingResponseSchema(booking=BookingSchema.from_entity(booking))


@router.patch("/bookings/{booking_id}", response_model=BookingResponseSchema)
def update_booking_status(
    booking_id: str,
    req: UpdateBookingRequestSchema,
    actor: Actor = Depends(get_actor),
    service: ReservationService = Depends(get_reservation_service),
):
    try:
        booking = service.transition_booking(booking_id, req.status, actor, notes=req.notes)
    except ReservationError as e:
        raise _to_http_error(e) from e
    return BookingResponseSchema(
        booking=BookingSchema.from_entity(booking),
        message=f"Booking {booking.status.value} successfully",
    )


@router.post("/bookings/{booking_id}/cancel", status_code=204)
def cancel_booking(
    booking_id: str,
    actor: Actor = Depends(get_actor),
    service: ReservationService = Depends(get_reservation_service),
) -> Response:
    try:
        service.cancel_booking(booking_id, actor)
    except ReservationError as e:
        raise _to_http_error(e) from e
    return Response(status_code=204)


@router.delete("/bookings/{booking_id}", response_model=MessageResponseSchema)
def delete_booking(
    booking_id: str,
    actor: Actor = Depends(get_actor),
    service: ReservationService = Depends(get_reservation_service),
):
    try:
        service.delete_booking(booking_id, actor)
    except ReservationError as e:
        raise _to_http_error(e) from e
    return MessageResponseSchema(message="Booking deleted successfully")
