"""Broadcast and notification schemas."""
from datetime import date
from typing import List, Optional

from pydantic import Field, field_validator

from church_attendance.core.constants import NOTIFY_METHODS
from church_attendance.core.sanitization import MAX_MESSAGE_LENGTH, sanitize_multiline, sanitize_service_type
from church_attendance.core.utils import normalize_date
from church_attendance.schemas.common import CamelModel


def _validate_method(v: str) -> str:
    if v not in NOTIFY_METHODS:
        raise ValueError("Invalid method. Use: email, sms, or both")
    return v


class BroadcastRequest(CamelModel):
    message: str = Field(..., min_length=1)
    method: str
    subject: Optional[str] = Field(None, max_length=200)
    member_ids: Optional[List[str]] = None
    from_email: Optional[str] = Field(None, max_length=255)

    @field_validator('message')
    @classmethod
    def sanitize_message_field(cls, v: str) -> str:
        sanitized = sanitize_multiline(v, max_length=MAX_MESSAGE_LENGTH)
        if not sanitized:
            raise ValueError("Missing required fields: message, method")
        return sanitized

    @field_validator('method')
    @classmethod
    def validate_method_field(cls, v: str) -> str:
        return _validate_method(v)


class NotifyAbsenteesRequest(CamelModel):
    date: date
    service_type: str = Field(..., min_length=1)
    method: str
    message: Optional[str] = Field(None, max_length=MAX_MESSAGE_LENGTH)
    member_ids: Optional[List[str]] = None

    @field_validator('date', mode='before')
    @classmethod
    def normalize_date_field(cls, v):
        return normalize_date(v)

    @field_validator('service_type')
    @classmethod
    def sanitize_service_type_field(cls, v: str) -> str:
        return sanitize_service_type(v)

    @field_validator('method')
    @classmethod
    def validate_method_field(cls, v: str) -> str:
        return _validate_method(v)


class SendReportRequest(CamelModel):
    date: date
    service_type: str = Field(..., min_length=1)
    recipient_email: Optional[str] = Field(None, max_length=255)

    @field_validator('date', mode='before')
    @classmethod
    def normalize_date_field(cls, v):
        return normalize_date(v)
