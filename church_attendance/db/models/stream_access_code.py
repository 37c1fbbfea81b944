"""Stream access code model."""
from datetime import datetime, timezone as tz
from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Index, Integer, String, Text

from church_attendance.db.base import Base


class StreamAccessCode(Base):
    """Short-lived code that unlocks the livestream gate for one absentee."""

    __tablename__ = "stream_access_codes"

    id = Column(Integer, primary_key=True, autoincrement=True)
    code = Column(String(16), unique=True, nullable=False)
    member_name = Column(String(255), nullable=True)
    phone = Column(String(30), nullable=True)
    absentee_checkin_id = Column(
        Integer, ForeignKey("absentee_checkins.id", ondelete="SET NULL"), nullable=True
    )
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(tz.utc))
    expires_at = Column(DateTime(timezone=True), nullable=False)
    first_used_at = Column(DateTime(timezone=True), nullable=True)
    last_used_at = Column(DateTime(timezone=True), nullable=True)
    use_count = Column(Integer, nullable=False, default=0)
    revoked = Column(Boolean, nullable=False, default=False)
    revoked_at = Column(DateTime(timezone=True), nullable=True)
    notes = Column(Text, nullable=True)

    __table_args__ = (
        Index("idx_stream_codes_expires", "expires_at"),
        Index("idx_stream_codes_checkin", "absentee_checkin_id"),
    )
