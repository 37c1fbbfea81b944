"""Absentee check-in model."""
from datetime import datetime, timezone as tz
from sqlalchemy import Boolean, Column, Date, DateTime, Index, Integer, String, Text

from church_attendance.db.base import Base


class AbsenteeCheckin(Base):
    """A self-reported absence submitted from the public check-in form."""

    __tablename__ = "absentee_checkins"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    phone = Column(String(30), nullable=True)
    reason = Column(String(50), nullable=False)
    prayer_request = Column(Text, nullable=True)
    service_date = Column(Date, nullable=False)
    livestream_sent = Column(Boolean, nullable=False, default=False)
    livestream_sent_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(tz.utc))
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(tz.utc),
        onupdate=lambda: datetime.now(tz.utc),
    )

    __table_args__ = (
        Index("idx_absentee_service_date", "service_date"),
        Index("idx_absentee_reason", "reason"),
        Index("idx_absentee_phone", "phone"),
    )
