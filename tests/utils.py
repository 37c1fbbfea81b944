from datetime import date, datetime, timezone
from typing import Optional

from sqlalchemy.orm import Session

from church_attendance.db.models import AbsenteeCheckin, Member, VimeoPassword


def make_member(
    session: Session,
    member_id: str,
    first_name: str,
    last_name: str,
    phone: Optional[str] = None,
    email: Optional[str] = None,
    status: str = "Active",
) -> Member:
    member = Member(
        id=member_id,
        first_name=first_name,
        last_name=last_name,
        phone=phone,
        email=email,
        status=status,
    )
    session.add(member)
    session.commit()
    return member


def make_stream_password(
    session: Session,
    video_id: str = "123456",
    password: str = "Hq7mT2xa",
    video_url: Optional[str] = "https://vimeo.com/event/123456",
) -> VimeoPassword:
    row = VimeoPassword(video_id=video_id, password=password, video_url=video_url, active=True)
    session.add(row)
    session.commit()
    return row


def make_checkin(
    session: Session,
    name: str,
    phone: Optional[str],
    service_date: date,
    reason: str = "sick",
    prayer_request: Optional[str] = None,
    created_at: Optional[datetime] = None,
) -> AbsenteeCheckin:
    checkin = AbsenteeCheckin(
        name=name,
        phone=phone,
        reason=reason,
        prayer_request=prayer_request,
        service_date=service_date,
        created_at=created_at or datetime.now(timezone.utc),
    )
    session.add(checkin)
    session.commit()
    return checkin
