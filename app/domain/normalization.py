from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from datetime import UTC, datetime

from app.domain.errors import ValidationError
from app.domain.payloads import (
    BulkAssessmentPayload,
    DataPayload,
    EventDateRange,
    LiveEventPayload,
    Scalar,
    UserSignupPayload,
    parse_payload,
)

RowRecord = dict[str, Scalar]

BULK_ASSESSMENT_TAB = "Bulk Assessments"
LIVE_EVENT_TAB = "Live Events"
USER_SIGNUP_TAB = "User Signups"

BULK_ASSESSMENT_HEADERS: tuple[str, ...] = (
    "Name",
    "Email",
    "Phone Number",
    "Number of Assessments",
    "Submission Date",
)

LIVE_EVENT_HEADERS: tuple[str, ...] = (
    "Name",
    "Email",
    "Phone Number",
    "Job Title",
    "Organization Name",
    "Website URL",
    "Estimated Attendees",
    "Desired Content Type",
    "Desired Duration",
    "Desired Formats",
    "Event Group Type",
    "Event Types",
    "Custom Event Type",
    "Location Type",
    "City",
    "State",
    "Location Name",
    "Budget",
    "Event Date",
    "Interested in Bulk Assessments",
    "Referral Source",
    "Referral Info",
    "Submission Date",
)

USER_SIGNUP_HEADERS: tuple[str, ...] = (
    "Email",
    "First Name",
    "Last Name",
    "Created Date",
    "Signup Date",
)

HEADERS_BY_DATA_TYPE: Mapping[str, tuple[str, ...]] = {
    "bulk-assessment": BULK_ASSESSMENT_HEADERS,
    "live-event": LIVE_EVENT_HEADERS,
    "user-signup": USER_SIGNUP_HEADERS,
}

TAB_BY_DATA_TYPE: Mapping[str, str] = {
    "bulk-assessment": BULK_ASSESSMENT_TAB,
    "live-event": LIVE_EVENT_TAB,
    "user-signup": USER_SIGNUP_TAB,
}

LIST_SEPARATOR = ", "


@dataclass(frozen=True)
class NormalizedSubmission:
    sheet_id: str
    data_type: str
    tab_name: str
    headers: tuple[str, ...]
    row: RowRecord


def normalize(
    body: Mapping[str, object],
    *,
    default_sheet_id: str | None,
    now: datetime | None = None,
) -> NormalizedSubmission:
    """Turn a tagged request body into the row and tab it should be written to."""
    if "data" not in body:
        raise ValidationError(
            "Missing required parameter: data",
            details={"receivedParams": sorted(body.keys())},
        )
    data = body["data"]
    if not isinstance(data, Mapping):
        raise ValidationError("Invalid parameter: data must be an object")

    payload = parse_payload(data)
    sheet_id = resolve_sheet_id(body.get("sheetId"), default_sheet_id=default_sheet_id)
    submitted_at = (now or datetime.now(UTC)).isoformat()
    data_type = str(data["dataType"])

    return NormalizedSubmission(
        sheet_id=sheet_id,
        data_type=data_type,
        tab_name=TAB_BY_DATA_TYPE[data_type],
        headers=HEADERS_BY_DATA_TYPE[data_type],
        row=build_row(payload, submitted_at=submitted_at),
    )


def resolve_sheet_id(requested: object, *, default_sheet_id: str | None) -> str:
    if isinstance(requested, str) and requested.strip():
        return requested.strip()
    if default_sheet_id:
        return default_sheet_id
    raise ValidationError("No sheet ID provided and no default sheet ID configured")


def build_row(payload: DataPayload, *, submitted_at: str) -> RowRecord:
    if isinstance(payload, BulkAssessmentPayload):
        return {
            "Name": payload.name,
            "Email": payload.email,
            "Phone Number": payload.phone_number,
            "Number of Assessments": payload.number_of_assessments,
            "Submission Date": submitted_at,
        }
    if isinstance(payload, LiveEventPayload):
        return _live_event_row(payload, submitted_at=submitted_at)
    if isinstance(payload, UserSignupPayload):
        return {
            "Email": payload.email,
            "First Name": payload.first_name,
            "Last Name": payload.last_name,
            "Created Date": payload.created_date,
            "Signup Date": submitted_at,
        }
    raise TypeError(f"unsupported payload type: {type(payload).__name__}")


def format_event_date(value: str | EventDateRange | None) -> str:
    if value is None:
        return ""
    if isinstance(value, EventDateRange):
        return f"{value.start_date} - {value.end_date}"
    return value


def _live_event_row(payload: LiveEventPayload, *, submitted_at: str) -> RowRecord:
    special = payload.special_event_info
    location = payload.location_info
    referral = payload.referral_info
    return {
        "Name": payload.name,
        "Email": payload.email,
        "Phone Number": payload.phone_number,
        "Job Title": payload.job_title or "",
        "Organization Name": payload.organization_name or "",
        "Website URL": payload.website_url or "",
        "Estimated Attendees": payload.estimated_attendees,
        "Desired Content Type": payload.desired_content_type or "",
        "Desired Duration": payload.desired_duration or "",
        "Desired Formats": LIST_SEPARATOR.join(payload.desired_formats),
        "Event Group Type": (special.type or "") if special else "",
        "Event Types": LIST_SEPARATOR.join(special.event_types) if special else "",
        "Custom Event Type": (special.user_defined_event_type or "") if special else "",
        "Location Type": location.type if location else "",
        "City": (location.city or "") if location else "",
        "State": (location.state or "") if location else "",
        "Location Name": (location.location_name or "") if location else "",
        "Budget": "" if payload.budget is None else payload.budget,
        "Event Date": format_event_date(payload.event_date),
        "Interested in Bulk Assessments": "Yes" if payload.interested_in_bulk_assessments else "No",
        "Referral Source": (referral.source or "") if referral else "",
        "Referral Info": (referral.more_info or "") if referral else "",
        "Submission Date": submitted_at,
    }


def row_values(row: Mapping[str, Scalar], header_row: Sequence[str]) -> list[Scalar]:
    """Order a row record by the sheet's header row; unknown columns are blank."""
    values: list[Scalar] = []
    for header in header_row:
        value = row.get(header)
        values.append("" if value is None else value)
    return values
