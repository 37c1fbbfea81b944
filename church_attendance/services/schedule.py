"""Weekly livestream password rotation schedule."""
from datetime import datetime, time
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from church_attendance.core import config
from church_attendance.core.constants import (
    DAY_NAMES,
    DEFAULT_ROTATION_DAY,
    DEFAULT_ROTATION_TIME,
    ROTATION_SCHEDULED,
    SCHEDULE_ROW_ID,
)
from church_attendance.core.exceptions import ValidationError
from church_attendance.core.logging_config import get_logger
from church_attendance.core.utils import isoformat_or_none, utcnow
from church_attendance.db.models import PasswordRotationSchedule
from church_attendance.integrations.vimeo import VimeoClient
from church_attendance.services.livestream import get_active_password, rotate_password

logger = get_logger(__name__)


def serialize_schedule(schedule: PasswordRotationSchedule) -> Dict[str, Any]:
    formatted_time = schedule.time_of_day.strftime("%H:%M:%S") if schedule.time_of_day else None
    return {
        "id": schedule.id,
        "day_of_week": schedule.day_of_week,
        "time_of_day": formatted_time,
        "enabled": schedule.enabled,
        "last_run": isoformat_or_none(schedule.last_run),
        "created_at": isoformat_or_none(schedule.created_at),
        "updated_at": isoformat_or_none(schedule.updated_at),
        "dayName": DAY_NAMES[schedule.day_of_week],
        "formattedTime": formatted_time,
    }


def get_schedule(db: Session) -> PasswordRotationSchedule:
    """The singleton schedule row, created disabled (Sunday 08:00) on first read."""
    schedule = db.get(PasswordRotationSchedule, SCHEDULE_ROW_ID)
    if schedule is None:
        schedule = PasswordRotationSchedule(
            id=SCHEDULE_ROW_ID,
            day_of_week=DEFAULT_ROTATION_DAY,
            time_of_day=DEFAULT_ROTATION_TIME,
            enabled=False,
        )
        db.add(schedule)
        db.commit()
        db.refresh(schedule)
        logger.info("rotation_schedule_created")
    return schedule


def update_schedule(
    db: Session,
    day_of_week: Optional[int] = None,
    time_of_day: Optional[time] = None,
    enabled: Optional[bool] = None,
) -> PasswordRotationSchedule:
    """
    Change the rotation slot. Omitted values keep their current setting.

    Raises:
        ValidationError: If ``day_of_week`` is outside 0..6 or nothing is given
    """
    if day_of_week is not None and not 0 <= day_of_week <= 6:
        raise ValidationError("dayOfWeek must be 0-6 (Sunday-Saturday)")

    if day_of_week is None and time_of_day is None and enabled is None:
        raise ValidationError("No updates provided")

    schedule = get_schedule(db)
    if day_of_week is not None:
        schedule.day_of_week = day_of_week
    if time_of_day is not None:
        schedule.time_of_day = time_of_day
    if enabled is not None:
        schedule.enabled = enabled
    db.commit()
    db.refresh(schedule)

    logger.info(
        "rotation_schedule_updated",
        day_of_week=schedule.day_of_week,
        time_of_day=schedule.time_of_day.isoformat(),
        enabled=schedule.enabled,
    )
    return schedule


def run_scheduled_rotation(
    db: Session,
    vimeo: VimeoClient,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    """
    Rotate the livestream password if the schedule is enabled.

    Meant to be triggered by cron at the scheduled slot. Reuses the video of
    the current active password, falling back to ``VIMEO_VIDEO_ID``.

    Raises:
        ValidationError: If no video id is known
    """
    run_at = now or utcnow()
    schedule = get_schedule(db)
    if not schedule.enabled:
        logger.info("scheduled_rotation_disabled")
        return {"success": True, "rotated": False, "message": "Scheduled rotation is disabled"}

    current = get_active_password(db)
    video_id = current.video_id if current else config.settings.VIMEO_VIDEO_ID
    video_url = current.video_url if current else None
    if not video_id:
        raise ValidationError("No video ID configured")

    result = rotate_password(
        db,
        vimeo,
        video_id=video_id,
        video_url=video_url,
        rotation_type=ROTATION_SCHEDULED,
    )

    schedule.last_run = run_at
    db.commit()
    logger.info("scheduled_rotation_completed", video_id=video_id, vimeo_updated=result["vimeoUpdated"])

    return {
        "success": True,
        "rotated": True,
        "message": "Password rotated successfully",
        "vimeoUpdated": result["vimeoUpdated"],
        "vimeoError": result["vimeoError"],
        "timestamp": run_at.isoformat(),
    }
