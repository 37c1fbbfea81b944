"""Pydantic schemas for request/response validation."""
from church_attendance.schemas.common import CamelModel, SuccessResponse, ErrorResponse
from church_attendance.schemas.member import (
    MemberCreate,
    MemberUpdate,
    MemberImportRequest,
)
from church_attendance.schemas.attendance import AttendanceRecordRequest, AttendanceRecordResponse
from church_attendance.schemas.absence import (
    AbsenceSubmitRequest,
    ManualAbsenceRequest,
    AbsenteeReportRequest,
)
from church_attendance.schemas.stream import StreamCodeVerifyRequest
from church_attendance.schemas.livestream import (
    PasswordRotateRequest,
    PasswordUpdateRequest,
    ScheduleUpdateRequest,
)
from church_attendance.schemas.notification import (
    BroadcastRequest,
    NotifyAbsenteesRequest,
    SendReportRequest,
)
from church_attendance.schemas.auth import (
    AuthRequest,
    VerifyPasswordRequest,
    UserCreate,
    UserUpdate,
    UserDelete,
)

__all__ = [
    "CamelModel",
    "SuccessResponse",
    "ErrorResponse",
    "MemberCreate",
    "MemberUpdate",
    "MemberImportRequest",
    "AttendanceRecordRequest",
    "AttendanceRecordResponse",
    "AbsenceSubmitRequest",
    "ManualAbsenceRequest",
    "AbsenteeReportRequest",
    "StreamCodeVerifyRequest",
    "PasswordRotateRequest",
    "PasswordUpdateRequest",
    "ScheduleUpdateRequest",
    "BroadcastRequest",
    "NotifyAbsenteesRequest",
    "SendReportRequest",
    "AuthRequest",
    "VerifyPasswordRequest",
    "UserCreate",
    "UserUpdate",
    "UserDelete",
]
