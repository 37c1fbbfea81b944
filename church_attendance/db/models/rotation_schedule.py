"""Password rotation schedule model."""
from datetime import datetime, timezone as tz
from sqlalchemy import Boolean, Column, DateTime, Integer, Time

from church_attendance.core.constants import DEFAULT_ROTATION_DAY, DEFAULT_ROTATION_TIME, SCHEDULE_ROW_ID
from church_attendance.db.base import Base


class PasswordRotationSchedule(Base):
    """Singleton row (id = 1) holding the weekly rotation slot."""

    __tablename__ = "password_rotation_schedule"

    id = Column(Integer, primary_key=True, default=SCHEDULE_ROW_ID)
    day_of_week = Column(Integer, nullable=False, default=DEFAULT_ROTATION_DAY)  # 0 = Sunday
    time_of_day = Column(Time, nullable=False, default=DEFAULT_ROTATION_TIME)
    enabled = Column(Boolean, nullable=False, default=False)
    last_run = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(tz.utc))
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(tz.utc),
        onupdate=lambda: datetime.now(tz.utc),
    )
