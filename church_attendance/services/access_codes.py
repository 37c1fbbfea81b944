"""
Livestream access codes.

An absentee receives a six-character code by SMS. Entering it on the stream
page reveals the current livestream credentials. A code works for
``ACCESS_CODE_TTL_HOURS`` after issue, any number of times, until revoked.

Validation checks, in order: the code exists, is not revoked, has not
expired, and a livestream password is active. Every successful validation
bumps ``use_count`` and ``last_used_at``; ``first_used_at`` is set once.
"""
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from church_attendance.core import config
from church_attendance.core.exceptions import (
    AccessCodeExpired,
    AccessCodeNotFound,
    AccessCodeRevoked,
    InternalError,
    NoActiveStreamError,
)
from church_attendance.core.logging_config import get_logger
from church_attendance.core.retry import BoundedRetry
from church_attendance.core.security import generate_access_code
from church_attendance.core.utils import isoformat_or_none, to_utc, utcnow
from church_attendance.db.models import StreamAccessCode
from church_attendance.services.livestream import get_active_password

logger = get_logger(__name__)


def serialize_access_code(row: StreamAccessCode) -> Dict[str, Any]:
    return {
        "id": row.id,
        "code": row.code,
        "memberName": row.member_name,
        "phone": row.phone,
        "absenteeCheckinId": row.absentee_checkin_id,
        "createdAt": isoformat_or_none(row.created_at),
        "expiresAt": isoformat_or_none(row.expires_at),
        "firstUsedAt": isoformat_or_none(row.first_used_at),
        "lastUsedAt": isoformat_or_none(row.last_used_at),
        "useCount": row.use_count,
        "revoked": row.revoked,
        "revokedAt": isoformat_or_none(row.revoked_at),
        "notes": row.notes,
    }


def issue_access_code(
    db: Session,
    member_name: Optional[str],
    phone: Optional[str],
    checkin_id: Optional[int] = None,
    now: Optional[datetime] = None,
    code_factory=generate_access_code,
) -> StreamAccessCode:
    """
    Create a fresh access code for an absentee.

    A colliding code violates the unique constraint; each retry draws a new
    code, up to ``ACCESS_CODE_MAX_ATTEMPTS`` times.

    Raises:
        NoActiveStreamError: If no livestream password is active
        InternalError: If every attempt collided
    """
    if get_active_password(db) is None:
        raise NoActiveStreamError("No active live stream password configured")

    issued_at = now or utcnow()
    expires_at = issued_at + timedelta(hours=config.settings.ACCESS_CODE_TTL_HOURS)

    def attempt(number: int) -> StreamAccessCode:
        row = StreamAccessCode(
            code=code_factory(),
            member_name=member_name,
            phone=phone,
            absentee_checkin_id=checkin_id,
            created_at=issued_at,
            expires_at=expires_at,
        )
        db.add(row)
        db.commit()
        return row

    outcome = BoundedRetry(
        config.settings.ACCESS_CODE_MAX_ATTEMPTS,
        retry_on=(IntegrityError,),
        on_retry=db.rollback,
    ).run(attempt)

    if not outcome.succeeded:
        logger.error("access_code_issue_failed", attempts=outcome.attempts)
        raise InternalError("Failed to generate a unique access code")

    row = outcome.value
    db.refresh(row)
    logger.info("access_code_issued", code_id=row.id, checkin_id=checkin_id, attempts=outcome.attempts)
    return row


def _find(db: Session, code: str) -> Optional[StreamAccessCode]:
    return db.query(StreamAccessCode).filter(StreamAccessCode.code == code.strip().upper()).first()


def validate_access_code(db: Session, code: str, now: Optional[datetime] = None) -> Dict[str, Any]:
    """
    Exchange an access code for the livestream credentials.

    Raises:
        AccessCodeNotFound: Unknown code
        AccessCodeRevoked: Code was revoked by staff
        AccessCodeExpired: Code is past its ``expires_at``
        NoActiveStreamError: No livestream password is active
    """
    current_time = now or utcnow()
    access_code = _find(db, code)

    if access_code is None:
        raise AccessCodeNotFound()

    if access_code.revoked:
        raise AccessCodeRevoked()

    if current_time > to_utc(access_code.expires_at):
        raise AccessCodeExpired()

    stream = get_active_password(db)
    if stream is None:
        raise NoActiveStreamError(details={"valid": False})

    first_use = access_code.first_used_at is None
    if first_use:
        access_code.first_used_at = current_time
    access_code.last_used_at = current_time
    access_code.use_count = StreamAccessCode.use_count + 1
    db.commit()
    db.refresh(access_code)

    logger.info(
        "stream_access",
        code_id=access_code.id,
        first_use=first_use,
        use_count=access_code.use_count,
    )

    return {
        "valid": True,
        "memberName": access_code.member_name,
        "videoId": stream.video_id,
        "videoUrl": stream.video_url,
        "password": stream.password,
        "expiresAt": isoformat_or_none(access_code.expires_at),
    }


def revoke_access_code(db: Session, code: str, notes: Optional[str] = None) -> StreamAccessCode:
    """Revoke a code; validating it afterwards fails even before expiry."""
    access_code = _find(db, code)
    if access_code is None:
        raise AccessCodeNotFound()

    if not access_code.revoked:
        access_code.revoked = True
        access_code.revoked_at = utcnow()
    if notes:
        access_code.notes = notes
    db.commit()
    db.refresh(access_code)
    logger.info("access_code_revoked", code_id=access_code.id)
    return access_code


def list_access_codes(db: Session, active_only: bool = False, now: Optional[datetime] = None) -> List[StreamAccessCode]:
    """Codes newest first; ``active_only`` drops revoked and expired ones."""
    query = db.query(StreamAccessCode)
    if active_only:
        query = query.filter(
            StreamAccessCode.revoked.is_(False),
            StreamAccessCode.expires_at > (now or utcnow()),
        )
    return query.order_by(StreamAccessCode.created_at.desc(), StreamAccessCode.id.desc()).all()
