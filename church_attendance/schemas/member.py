"""Member schemas."""
from datetime import date
from typing import List, Optional
from pydantic import BaseModel, Field, field_validator

from church_attendance.core.sanitization import MAX_NAME_LENGTH, sanitize_text


class MemberBase(BaseModel):
    email: Optional[str] = Field(None, max_length=255)
    phone: Optional[str] = Field(None, max_length=30)
    birthdate: Optional[date] = None
    anniversary: Optional[date] = None
    address_line1: Optional[str] = Field(None, max_length=255)
    address_line2: Optional[str] = Field(None, max_length=255)
    city: Optional[str] = Field(None, max_length=100)
    state: Optional[str] = Field(None, max_length=50)
    postal_code: Optional[str] = Field(None, max_length=20)


class MemberCreate(MemberBase):
    id: Optional[str] = Field(None, max_length=64)
    person_id: Optional[str] = Field(None, max_length=64)
    first_name: str = Field(..., min_length=1, max_length=MAX_NAME_LENGTH)
    last_name: str = Field(..., min_length=1, max_length=MAX_NAME_LENGTH)
    status: Optional[str] = Field(None, max_length=50)

    @field_validator('first_name', 'last_name')
    @classmethod
    def sanitize_name_field(cls, v: str) -> str:
        sanitized = sanitize_text(v, max_length=MAX_NAME_LENGTH)
        if not sanitized:
            raise ValueError("first_name and last_name required")
        return sanitized


class MemberUpdate(MemberBase):
    first_name: Optional[str] = Field(None, min_length=1, max_length=MAX_NAME_LENGTH)
    last_name: Optional[str] = Field(None, min_length=1, max_length=MAX_NAME_LENGTH)
    status: Optional[str] = Field(None, max_length=50)

    @field_validator('first_name', 'last_name')
    @classmethod
    def sanitize_name_field(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        return sanitize_text(v, max_length=MAX_NAME_LENGTH)


class MemberImportRequest(BaseModel):
    """Rows exported from the church management system. Each row is loosely typed."""
    members: List[dict] = Field(..., min_length=1)
