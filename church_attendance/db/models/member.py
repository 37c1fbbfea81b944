"""Member model."""
from datetime import datetime, timezone as tz
from sqlalchemy import Column, String, Date, DateTime, Index
from sqlalchemy.orm import relationship

from church_attendance.core.constants import MEMBER_STATUS_ACTIVE
from church_attendance.db.base import Base


class Member(Base):
    __tablename__ = "members"

    id = Column(String(64), primary_key=True)
    person_id = Column(String(64), nullable=True)
    first_name = Column(String(255), nullable=False)
    last_name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=True)
    phone = Column(String(30), nullable=True)
    birthdate = Column(Date, nullable=True)
    anniversary = Column(Date, nullable=True)
    address_line1 = Column(String(255), nullable=True)
    address_line2 = Column(String(255), nullable=True)
    city = Column(String(100), nullable=True)
    state = Column(String(50), nullable=True)
    postal_code = Column(String(20), nullable=True)
    status = Column(String(50), nullable=False, default=MEMBER_STATUS_ACTIVE)
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(tz.utc))
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(tz.utc),
        onupdate=lambda: datetime.now(tz.utc),
    )

    # Relationships
    attendance = relationship("Attendance", back_populates="member", cascade="all, delete-orphan", passive_deletes=True)

    __table_args__ = (
        Index("idx_members_name", "last_name", "first_name"),
        Index("idx_members_email", "email"),
        Index("idx_members_phone", "phone"),
        Index("idx_members_status", "status"),
        Index("idx_members_person_id", "person_id"),
    )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()
