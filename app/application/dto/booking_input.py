from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Any, Mapping

from pydantic import AliasChoices, BaseModel, ConfigDict, EmailStr, Field, ValidationInfo, field_validator
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from app.application.exceptions import ValidationError
from app.application.utils.date_parser import parse_event_date
from app.domain.slot_catalog import normalize_slot_time

_REQUIRED_ERROR_TYPES = {"missing", "string_too_short"}
_FIELD_MESSAGES = {"client_email": "must be a valid email address"}


class CreateBookingInput(BaseModel):
    """Client booking request. Accepts camelCase keys as sent by the booking form, or snake_case."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
        extra="ignore",
    )

    client_id: str = Field(min_length=1)
    photographer_id: str = Field(min_length=1)
    event_type: str = Field(min_length=1)
    event_date: date
    event_location: str = Field(min_length=1)
    total_amount: Decimal = Field(gt=0)
    deposit_amount: Decimal = Field(default=Decimal("0"), ge=0)
    event_time: str | None = None
    duration_hint: str | None = Field(
        default=None,
        validation_alias=AliasChoices("durationHint", "duration_hint", "duration"),
    )
    service_id: str | None = None
    guest_count: int | None = Field(default=None, ge=0)
    special_requests: str | None = None
    client_name: str | None = None
    client_email: EmailStr | None = None
    client_phone: str | None = None
    notes: str | None = None

    @field_validator("event_date", mode="before")
    @classmethod
    def _parse_event_date(cls, value: Any) -> date:
        parsed = parse_event_date(value)
        if parsed is None:
            raise ValueError("must be a valid date")
        return parsed

    @field_validator("event_time", mode="before")
    @classmethod
    def _normalize_event_time(cls, value: Any) -> str | None:
        if value is None or (isinstance(value, str) and not value.strip()):
            return None
        label = normalize_slot_time(str(value))
        if label is None:
            raise ValueError("must match an available time slot")
        return label

    @field_validator("duration_hint", "service_id", mode="before")
    @classmethod
    def _stringify(cls, value: Any) -> str | None:
        if value is None:
            return None
        return str(value)

    @field_validator("deposit_amount", mode="before")
    @classmethod
    def _default_deposit(cls, value: Any) -> Any:
        return Decimal("0") if value in (None, "") else value

    @field_validator("deposit_amount")
    @classmethod
    def _deposit_within_total(cls, value: Decimal, info: ValidationInfo) -> Decimal:
        total = info.data.get("total_amount")
        if total is not None and value > total:
            raise ValueError("must not exceed total_amount")
        return value

    @field_validator("client_email", mode="before")
    @classmethod
    def _blank_email(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value


def parse_booking_input(payload: Mapping[str, Any] | CreateBookingInput) -> CreateBookingInput:
    """Validate a raw payload. Raises ValidationError with one message per offending field."""
    if isinstance(payload, CreateBookingInput):
        return payload
    try:
        return CreateBookingInput.model_validate(dict(payload))
    except PydanticValidationError as e:
        raise ValidationError(_field_errors(e)) from e


def _field_errors(error: PydanticValidationError) -> dict[str, str]:
    names_by_alias = {
        (info.alias or name): name for name, info in CreateBookingInput.model_fields.items()
    }
    errors: dict[str, str] = {}
    for item in error.errors():
        loc = item.get("loc") or ("payload",)
        field = names_by_alias.get(str(loc[0]), str(loc[0]))
        if item.get("type") in _REQUIRED_ERROR_TYPES:
            message = "is required"
        elif field in _FIELD_MESSAGES:
            message = _FIELD_MESSAGES[field]
        else:
            message = str(item.get("msg", "is invalid")).removeprefix("Value error, ")
        errors.setdefault(field, message)
    return errors
