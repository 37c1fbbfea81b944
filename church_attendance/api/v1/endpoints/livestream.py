"""Livestream password and rotation schedule endpoints (staff only)."""
from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from church_attendance.api.deps import get_db, get_vimeo_client, verify_staff_token
from church_attendance.core.constants import ROTATION_MANUAL
from church_attendance.core.rate_limit import limiter, RATE_LIMITS
from church_attendance.integrations import VimeoClient
from church_attendance.schemas import PasswordRotateRequest, PasswordUpdateRequest, ScheduleUpdateRequest
from church_attendance.services import livestream as livestream_service
from church_attendance.services import schedule as schedule_service

router = APIRouter(dependencies=[Depends(verify_staff_token)])


@router.get("/vimeo-password")
@limiter.limit(RATE_LIMITS["staff_read"])
async def get_vimeo_password_endpoint(request: Request, db: Session = Depends(get_db)):
    """The active livestream password, if any."""
    current = livestream_service.get_active_password(db)
    if current is None:
        return {"success": True, "hasPassword": False}
    return {
        "success": True,
        "hasPassword": True,
        "current": livestream_service.serialize_password(current),
    }


@router.post("/vimeo-password")
@limiter.limit(RATE_LIMITS["staff_write"])
def rotate_vimeo_password_endpoint(
    request: Request,
    body: PasswordRotateRequest,
    db: Session = Depends(get_db),
    vimeo: VimeoClient = Depends(get_vimeo_client),
):
    """
    Rotate the livestream password.

    A random password is generated unless one is supplied. Vimeo is updated
    first, best effort; the new password becomes the only active one even
    when Vimeo could not be reached.

    Example:
        Request:
            POST /api/v1/vimeo-password
            {"videoId": "123456"}

        Response (200):
            {
                "success": true,
                "message": "Password changed successfully on Vimeo and saved",
                "password": {"videoId": "123456", "password": "Hq7mT2xa", "rotationType": "manual", ...},
                "vimeoUpdated": true,
                "vimeoError": null
            }
    """
    return livestream_service.rotate_password(
        db,
        vimeo,
        video_id=body.video_id,
        video_url=body.video_url,
        password=body.password,
        rotation_type=body.rotation_type or ROTATION_MANUAL,
    )


@router.put("/vimeo-password")
@limiter.limit(RATE_LIMITS["staff_write"])
async def update_vimeo_password_endpoint(
    request: Request,
    body: PasswordUpdateRequest,
    db: Session = Depends(get_db),
):
    """Change the video URL or expiry of the active password."""
    updated = livestream_service.update_active_password(db, body.model_dump(exclude_unset=True))
    return {
        "success": True,
        "message": "Password settings updated",
        "password": livestream_service.serialize_password(updated),
    }


@router.get("/rotation-schedule")
@limiter.limit(RATE_LIMITS["staff_read"])
async def get_rotation_schedule_endpoint(request: Request, db: Session = Depends(get_db)):
    """The weekly rotation slot. Created as Sunday 08:00, disabled, on first read."""
    schedule = schedule_service.get_schedule(db)
    return {"success": True, "schedule": schedule_service.serialize_schedule(schedule)}


@router.put("/rotation-schedule")
@limiter.limit(RATE_LIMITS["staff_write"])
async def update_rotation_schedule_endpoint(
    request: Request,
    body: ScheduleUpdateRequest,
    db: Session = Depends(get_db),
):
    """
    Change the weekly rotation slot.

    Example:
        Request:
            PUT /api/v1/rotation-schedule
            {"dayOfWeek": 0, "timeOfDay": "07:30", "enabled": true}

        Response (200):
            {
                "success": true,
                "message": "Schedule updated",
                "schedule": {"day_of_week": 0, "dayName": "Sunday", "formattedTime": "07:30:00", "enabled": true, ...}
            }
    """
    schedule = schedule_service.update_schedule(
        db,
        day_of_week=body.day_of_week,
        time_of_day=body.time_of_day,
        enabled=body.enabled,
    )
    return {
        "success": True,
        "message": "Schedule updated",
        "schedule": schedule_service.serialize_schedule(schedule),
    }


@router.post("/rotation-schedule/run")
@limiter.limit(RATE_LIMITS["staff_write"])
def run_rotation_endpoint(
    request: Request,
    db: Session = Depends(get_db),
    vimeo: VimeoClient = Depends(get_vimeo_client),
):
    """Run the scheduled rotation now. Does nothing while the schedule is disabled."""
    return schedule_service.run_scheduled_rotation(db, vimeo)
