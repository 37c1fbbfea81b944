"""Authentication and staff user schemas."""
from typing import Optional

from pydantic import BaseModel, Field

from church_attendance.schemas.common import CamelModel


class AuthRequest(CamelModel):
    """Body of ``POST /auth``; which fields matter depends on ``action``."""
    action: Optional[str] = None
    username: Optional[str] = Field(None, max_length=100)
    password: Optional[str] = Field(None, max_length=255)
    new_password: Optional[str] = Field(None, max_length=255)
    display_name: Optional[str] = Field(None, max_length=255)


class VerifyPasswordRequest(BaseModel):
    password: Optional[str] = None


class UserCreate(CamelModel):
    username: str = Field(..., max_length=100)
    password: str = Field(..., max_length=255)
    display_name: Optional[str] = Field(None, max_length=255)
    is_admin: bool = False


class UserUpdate(CamelModel):
    user_id: int
    username: Optional[str] = Field(None, max_length=100)
    display_name: Optional[str] = Field(None, max_length=255)
    is_admin: Optional[bool] = None
    new_password: Optional[str] = Field(None, max_length=255)
    current_password: Optional[str] = Field(None, max_length=255)


class UserDelete(CamelModel):
    user_id: int
