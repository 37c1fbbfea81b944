"""Attendance models."""
from datetime import datetime, timezone as tz
from sqlalchemy import Boolean, Column, Date, DateTime, ForeignKey, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship

from church_attendance.db.base import Base


class Attendance(Base):
    """One member's presence at one service occurrence (date, service type)."""

    __tablename__ = "attendance"

    id = Column(Integer, primary_key=True, autoincrement=True)
    date = Column(Date, nullable=False)
    service_type = Column(String(100), nullable=False)
    member_id = Column(String(64), ForeignKey("members.id", ondelete="CASCADE"), nullable=False)
    present = Column(Boolean, nullable=False, default=True)
    checked_in_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(tz.utc))
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(tz.utc),
        onupdate=lambda: datetime.now(tz.utc),
    )

    # Relationships
    member = relationship("Member", back_populates="attendance")

    __table_args__ = (
        UniqueConstraint("date", "service_type", "member_id", name="uq_attendance_occurrence_member"),
        Index("idx_attendance_date", "date"),
        Index("idx_attendance_service_type", "service_type"),
        Index("idx_attendance_member", "member_id"),
        Index("idx_attendance_date_service", "date", "service_type"),
    )


class AttendanceSummary(Base):
    """Derived present/absent counts per occurrence, refreshed by the recorder."""

    __tablename__ = "attendance_summary"

    id = Column(Integer, primary_key=True, autoincrement=True)
    date = Column(Date, nullable=False)
    service_type = Column(String(100), nullable=False)
    total_present = Column(Integer, nullable=False, default=0)
    total_absent = Column(Integer, nullable=False, default=0)
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(tz.utc),
        onupdate=lambda: datetime.now(tz.utc),
    )

    __table_args__ = (
        UniqueConstraint("date", "service_type", name="uq_attendance_summary_occurrence"),
    )
