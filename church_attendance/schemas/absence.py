"""Absentee check-in schemas."""
from datetime import date
from typing import Optional

from pydantic import Field, field_validator

from church_attendance.core.sanitization import (
    MAX_NAME_LENGTH,
    MAX_PRAYER_REQUEST_LENGTH,
    sanitize_multiline,
    sanitize_phone,
    sanitize_text,
    validate_reason,
)
from church_attendance.core.utils import normalize_date
from church_attendance.schemas.common import CamelModel


def _optional_date(v):
    if v is None or v == "":
        return None
    return normalize_date(v)


def _optional_prayer_request(v: Optional[str]) -> Optional[str]:
    if v is None:
        return None
    return sanitize_multiline(v, max_length=MAX_PRAYER_REQUEST_LENGTH) or None


class AbsenceSubmitRequest(CamelModel):
    name: str
    phone: str
    reason: str
    prayer_request: Optional[str] = None
    service_date: Optional[date] = None

    @field_validator('name')
    @classmethod
    def sanitize_name_field(cls, v: str) -> str:
        sanitized = sanitize_text(v, max_length=MAX_NAME_LENGTH)
        if not sanitized:
            raise ValueError("Name is required")
        return sanitized

    @field_validator('phone')
    @classmethod
    def sanitize_phone_field(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("Phone number is required for receiving live stream link")
        return sanitize_phone(v)

    @field_validator('reason')
    @classmethod
    def validate_reason_field(cls, v: str) -> str:
        return validate_reason(v)

    @field_validator('prayer_request')
    @classmethod
    def sanitize_prayer_request_field(cls, v: Optional[str]) -> Optional[str]:
        return _optional_prayer_request(v)

    @field_validator('service_date', mode='before')
    @classmethod
    def normalize_service_date_field(cls, v):
        return _optional_date(v)


class ManualAbsenceRequest(CamelModel):
    """Staff-entered absence; the phone is not checked against the directory."""
    member_id: Optional[str] = None
    member_name: str
    member_phone: Optional[str] = None
    reason: str
    service_date: date
    service_type: Optional[str] = None
    send_link: bool = False
    prayer_request: Optional[str] = None

    @field_validator('member_name')
    @classmethod
    def sanitize_name_field(cls, v: str) -> str:
        sanitized = sanitize_text(v, max_length=MAX_NAME_LENGTH)
        if not sanitized:
            raise ValueError("Member name is required")
        return sanitized

    @field_validator('reason')
    @classmethod
    def validate_reason_field(cls, v: str) -> str:
        return validate_reason(v)

    @field_validator('prayer_request')
    @classmethod
    def sanitize_prayer_request_field(cls, v: Optional[str]) -> Optional[str]:
        return _optional_prayer_request(v)

    @field_validator('service_date', mode='before')
    @classmethod
    def normalize_service_date_field(cls, v):
        if v is None or v == "":
            raise ValueError("Service date is required")
        return normalize_date(v)


class AbsenteeReportRequest(CamelModel):
    from_date: Optional[date] = None
    to_date: Optional[date] = None
    email: Optional[str] = Field(None, max_length=255)

    @field_validator('from_date', 'to_date', mode='before')
    @classmethod
    def normalize_date_fields(cls, v):
        return _optional_date(v)
