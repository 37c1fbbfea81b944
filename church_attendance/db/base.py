"""Database base class and model imports."""
from sqlalchemy.orm import declarative_base

Base = declarative_base()

# Import all models here for Alembic to detect them
from church_attendance.db.models.member import Member  # noqa: F401, E402
from church_attendance.db.models.attendance import Attendance, AttendanceSummary  # noqa: F401, E402
from church_attendance.db.models.absentee_checkin import AbsenteeCheckin  # noqa: F401, E402
from church_attendance.db.models.vimeo_password import VimeoPassword  # noqa: F401, E402
from church_attendance.db.models.rotation_schedule import PasswordRotationSchedule  # noqa: F401, E402
from church_attendance.db.models.stream_access_code import StreamAccessCode  # noqa: F401, E402
from church_attendance.db.models.user import User  # noqa: F401, E402
