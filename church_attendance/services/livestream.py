"""Livestream password rotation."""
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from church_attendance.core import config
from church_attendance.core.constants import ROTATION_MANUAL
from church_attendance.core.exceptions import NotFoundError, ProviderError, ValidationError
from church_attendance.core.logging_config import get_logger
from church_attendance.core.security import generate_stream_password
from church_attendance.core.utils import isoformat_or_none
from church_attendance.db.models import VimeoPassword
from church_attendance.integrations.vimeo import VimeoClient

logger = get_logger(__name__)


def default_video_url(video_id: str) -> str:
    return f"https://vimeo.com/{video_id}"


def serialize_password(row: VimeoPassword) -> Dict[str, Any]:
    return {
        "videoId": row.video_id,
        "password": row.password,
        "videoUrl": row.video_url or default_video_url(row.video_id),
        "rotationType": row.rotation_type,
        "createdAt": isoformat_or_none(row.created_at),
        "expiresAt": isoformat_or_none(row.expires_at),
    }


def get_active_password(db: Session) -> Optional[VimeoPassword]:
    """The single active livestream password row, if any."""
    return (
        db.query(VimeoPassword)
        .filter(VimeoPassword.active.is_(True))
        .order_by(VimeoPassword.created_at.desc(), VimeoPassword.id.desc())
        .first()
    )


def rotate_password(
    db: Session,
    vimeo: VimeoClient,
    video_id: Optional[str] = None,
    video_url: Optional[str] = None,
    password: Optional[str] = None,
    rotation_type: str = ROTATION_MANUAL,
) -> Dict[str, Any]:
    """
    Make a new livestream password the active one.

    The password is pushed to Vimeo first, best effort: a provider failure is
    reported as ``vimeoError`` and the password is still saved locally. The
    old rows are then deactivated and the new row inserted in one
    transaction, so exactly one row is active afterwards.

    Raises:
        ValidationError: If no video id is given or configured
    """
    effective_video_id = video_id or config.settings.VIMEO_VIDEO_ID
    if not effective_video_id:
        raise ValidationError(
            "Video ID is required. Either provide it or set VIMEO_VIDEO_ID environment variable."
        )

    new_password = password or generate_stream_password()

    vimeo_updated = False
    vimeo_error = None
    if vimeo.configured:
        try:
            vimeo.set_video_password(effective_video_id, new_password)
            vimeo_updated = True
        except ProviderError as e:
            vimeo_error = e.message
            logger.error("vimeo_update_failed", video_id=effective_video_id, error=e.message)
    else:
        vimeo_error = "VIMEO_ACCESS_TOKEN not configured - password saved locally only"

    effective_url = video_url or (
        f"https://vimeo.com/event/{effective_video_id}" if config.settings.VIMEO_VIDEO_ID else None
    )

    try:
        db.query(VimeoPassword).filter(VimeoPassword.active.is_(True)).update(
            {VimeoPassword.active: False}, synchronize_session=False
        )
        saved = VimeoPassword(
            video_id=effective_video_id,
            password=new_password,
            video_url=effective_url,
            active=True,
            rotation_type=rotation_type,
        )
        db.add(saved)
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(saved)

    logger.info(
        "password_rotated",
        video_id=effective_video_id,
        rotation_type=rotation_type,
        vimeo_updated=vimeo_updated,
    )

    return {
        "success": True,
        "message": (
            "Password changed successfully on Vimeo and saved"
            if vimeo_updated
            else "Password saved locally (Vimeo update pending)"
        ),
        "password": serialize_password(saved),
        "vimeoUpdated": vimeo_updated,
        "vimeoError": vimeo_error,
    }


def update_active_password(
    db: Session,
    fields: Dict[str, Any],
) -> VimeoPassword:
    """
    Change the URL or expiry of the active password.

    ``fields`` holds only the keys the caller supplied (``video_url``,
    ``expires_at``); a key set to None clears that column.
    """
    updates = {key: fields[key] for key in ("video_url", "expires_at") if key in fields}
    if not updates:
        raise ValidationError("No updates provided")

    current = get_active_password(db)
    if current is None:
        raise NotFoundError("No active password found to update")

    for key, value in updates.items():
        setattr(current, key, value)
    db.commit()
    db.refresh(current)
    logger.info("password_settings_updated", fields=sorted(updates))
    return current
