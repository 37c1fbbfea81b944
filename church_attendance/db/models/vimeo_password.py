"""Livestream password model."""
from datetime import datetime, timezone as tz
from sqlalchemy import Boolean, Column, DateTime, Index, Integer, String

from church_attendance.core.constants import ROTATION_MANUAL
from church_attendance.db.base import Base


class VimeoPassword(Base):
    __tablename__ = "vimeo_passwords"

    id = Column(Integer, primary_key=True, autoincrement=True)
    video_id = Column(String(64), nullable=False)
    password = Column(String(64), nullable=False)
    video_url = Column(String(500), nullable=True)
    active = Column(Boolean, nullable=False, default=True)
    rotation_type = Column(String(20), nullable=False, default=ROTATION_MANUAL)
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(tz.utc))
    expires_at = Column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        Index("idx_vimeo_passwords_active", "active"),
    )
