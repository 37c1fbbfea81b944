"""Database models."""
from church_attendance.db.models.member import Member
from church_attendance.db.models.attendance import Attendance, AttendanceSummary
from church_attendance.db.models.absentee_checkin import AbsenteeCheckin
from church_attendance.db.models.vimeo_password import VimeoPassword
from church_attendance.db.models.rotation_schedule import PasswordRotationSchedule
from church_attendance.db.models.stream_access_code import StreamAccessCode
from church_attendance.db.models.user import User

__all__ = [
    "Member",
    "Attendance",
    "AttendanceSummary",
    "AbsenteeCheckin",
    "VimeoPassword",
    "PasswordRotationSchedule",
    "StreamAccessCode",
    "User",
]
