"""Livestream password and rotation schedule schemas."""
from datetime import datetime, time
from typing import Optional

from pydantic import Field, field_validator

from church_attendance.core.constants import ROTATION_TYPES
from church_attendance.schemas.common import CamelModel


class PasswordRotateRequest(CamelModel):
    password: Optional[str] = Field(None, min_length=4, max_length=64)
    video_id: Optional[str] = Field(None, max_length=64)
    video_url: Optional[str] = Field(None, max_length=500)
    rotation_type: Optional[str] = None

    @field_validator('rotation_type')
    @classmethod
    def validate_rotation_type_field(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and v not in ROTATION_TYPES:
            raise ValueError("rotationType must be manual or scheduled")
        return v


class PasswordUpdateRequest(CamelModel):
    video_url: Optional[str] = Field(None, max_length=500)
    expires_at: Optional[datetime] = None


class ScheduleUpdateRequest(CamelModel):
    day_of_week: Optional[int] = None
    time_of_day: Optional[time] = None
    enabled: Optional[bool] = None
