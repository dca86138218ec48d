from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Literal, TypeAlias

from app.domain.errors import ValidationError

DataType = Literal["bulk-assessment", "live-event", "user-signup"]
Scalar: TypeAlias = str | int | float | bool | None

DATA_TYPES: tuple[DataType, ...] = ("bulk-assessment", "live-event", "user-signup")

REQUIRED_FIELDS: Mapping[str, tuple[str, ...]] = {
    "bulk-assessment": ("name", "email", "phoneNumber", "numberOfAssessments"),
    "live-event": ("name", "email", "phoneNumber", "estimatedAttendees"),
    "user-signup": ("email",),
}


@dataclass(frozen=True)
class BulkAssessmentPayload:
    name: str
    email: str
    phone_number: str
    number_of_assessments: Scalar


@dataclass(frozen=True)
class EventDateRange:
    start_date: str
    end_date: str


@dataclass(frozen=True)
class LocationInfo:
    type: str
    city: str | None = None
    state: str | None = None
    location_name: str | None = None


@dataclass(frozen=True)
class SpecialEventInfo:
    type: str | None = None
    event_types: tuple[str, ...] = ()
    user_defined_event_type: str | None = None


@dataclass(frozen=True)
class ReferralInfo:
    source: str | None = None
    more_info: str | None = None


@dataclass(frozen=True)
class LiveEventPayload:
    name: str
    email: str
    phone_number: str
    estimated_attendees: Scalar
    job_title: str | None = None
    organization_name: str | None = None
    website_url: str | None = None
    desired_content_type: str | None = None
    desired_duration: str | None = None
    desired_formats: tuple[str, ...] = ()
    special_event_info: SpecialEventInfo | None = None
    location_info: LocationInfo | None = None
    budget: Scalar = None
    event_date: str | EventDateRange | None = None
    interested_in_bulk_assessments: bool = False
    referral_info: ReferralInfo | None = None


@dataclass(frozen=True)
class UserSignupPayload:
    email: str
    first_name: str = ""
    last_name: str = ""
    created_date: str = ""


DataPayload: TypeAlias = BulkAssessmentPayload | LiveEventPayload | UserSignupPayload


def is_missing(value: object) -> bool:
    if value is None:
        return True
    return isinstance(value, str) and not value.strip()


def missing_required_fields(data_type: str, data: Mapping[str, object]) -> list[str]:
    return [name for name in REQUIRED_FIELDS.get(data_type, ()) if is_missing(data.get(name))]


def parse_payload(data: Mapping[str, object]) -> DataPayload:
    """Select the variant named by ``dataType`` and build it from raw JSON data."""
    data_type = data.get("dataType")
    if not isinstance(data_type, str) or data_type not in DATA_TYPES:
        raise ValidationError("Unknown data type", details={"dataType": data_type})

    missing = missing_required_fields(data_type, data)
    if missing:
        raise ValidationError(
            f"Missing required fields: {', '.join(missing)}",
            details={"dataType": data_type, "missingFields": missing},
        )

    if data_type == "bulk-assessment":
        return BulkAssessmentPayload(
            name=_text(data, "name"),
            email=_text(data, "email"),
            phone_number=_text(data, "phoneNumber"),
            number_of_assessments=_scalar(data, "numberOfAssessments"),
        )
    if data_type == "live-event":
        return _parse_live_event(data)
    return UserSignupPayload(
        email=_text(data, "email"),
        first_name=_optional_text(data, "firstName") or "",
        last_name=_optional_text(data, "lastName") or "",
        created_date=_optional_text(data, "createdDate") or "",
    )


def _parse_live_event(data: Mapping[str, object]) -> LiveEventPayload:
    return LiveEventPayload(
        name=_text(data, "name"),
        email=_text(data, "email"),
        phone_number=_text(data, "phoneNumber"),
        estimated_attendees=_scalar(data, "estimatedAttendees"),
        job_title=_optional_text(data, "jobTitle"),
        organization_name=_optional_text(data, "organizationName"),
        website_url=_optional_text(data, "websiteUrl"),
        desired_content_type=_optional_text(data, "desiredContentType"),
        desired_duration=_optional_text(data, "desiredDuration"),
        desired_formats=_text_list(data, "desiredFormats"),
        special_event_info=_parse_special_event_info(data.get("specialEventInfo")),
        location_info=_parse_location_info(data.get("locationInfo")),
        budget=_scalar(data, "budget"),
        event_date=_parse_event_date(data.get("eventDate")),
        interested_in_bulk_assessments=data.get("interestedInBulkAssessments") is True,
        referral_info=_parse_referral_info(data.get("referralInfo")),
    )


def _parse_special_event_info(value: object) -> SpecialEventInfo | None:
    if value is None:
        return None
    info = _nested(value, "specialEventInfo")
    return SpecialEventInfo(
        type=_optional_text(info, "type"),
        event_types=_text_list(info, "eventTypes"),
        user_defined_event_type=_optional_text(info, "userDefinedEventType"),
    )


def _parse_location_info(value: object) -> LocationInfo | None:
    if value is None:
        return None
    info = _nested(value, "locationInfo")
    location_type = _optional_text(info, "type") or ""
    # Virtual locations carry only their type.
    if location_type == "virtual":
        return LocationInfo(type=location_type)
    return LocationInfo(
        type=location_type,
        city=_optional_text(info, "city"),
        state=_optional_text(info, "state"),
        location_name=_optional_text(info, "locationName"),
    )


def _parse_referral_info(value: object) -> ReferralInfo | None:
    if value is None:
        return None
    info = _nested(value, "referralInfo")
    return ReferralInfo(
        source=_optional_text(info, "source"),
        more_info=_optional_text(info, "moreInfo"),
    )


def _parse_event_date(value: object) -> str | EventDateRange | None:
    if value is None or isinstance(value, str):
        return value
    info = _nested(value, "eventDate")
    return EventDateRange(
        start_date=_optional_text(info, "startDate") or "",
        end_date=_optional_text(info, "endDate") or "",
    )


def _nested(value: object, field_name: str) -> Mapping[str, object]:
    if not isinstance(value, Mapping):
        raise ValidationError(f"Invalid field type: {field_name} must be an object")
    return value


def _text(data: Mapping[str, object], key: str) -> str:
    value = _scalar(data, key)
    return "" if value is None else str(value)


def _optional_text(data: Mapping[str, object], key: str) -> str | None:
    value = _scalar(data, key)
    return None if value is None else str(value)


def _scalar(data: Mapping[str, object], key: str) -> Scalar:
    value = data.get(key)
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    raise ValidationError(f"Invalid field type: {key} must be a scalar value")


def _text_list(data: Mapping[str, object], key: str) -> tuple[str, ...]:
    value = data.get(key)
    if value is None:
        return ()
    if isinstance(value, str):
        return (value,)
    if not isinstance(value, list):
        raise ValidationError(f"Invalid field type: {key} must be a list")
    return tuple(str(item) for item in value if item is not None)
