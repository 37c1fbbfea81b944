"""Attendance schemas."""
from datetime import date
from typing import List

from pydantic import Field, field_validator

from church_attendance.core.sanitization import sanitize_service_type
from church_attendance.core.utils import normalize_date
from church_attendance.schemas.common import CamelModel


class AttendanceRecordRequest(CamelModel):
    date: date
    service_type: str = Field(..., min_length=1)
    attendee_ids: List[str]

    @field_validator('date', mode='before')
    @classmethod
    def normalize_date_field(cls, v):
        """Accept full ISO timestamps; only the calendar date is kept."""
        return normalize_date(v)

    @field_validator('service_type')
    @classmethod
    def sanitize_service_type_field(cls, v: str) -> str:
        return sanitize_service_type(v)


class AttendanceRecordResponse(CamelModel):
    message: str
    date: str
    service_type: str
    count: int
    deleted_previous: int
