"""Attendance endpoints (staff only)."""
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from church_attendance.api.deps import get_db, verify_staff_token
from church_attendance.core.exceptions import ValidationError
from church_attendance.core.rate_limit import limiter, RATE_LIMITS
from church_attendance.schemas import AttendanceRecordRequest, AttendanceRecordResponse
from church_attendance.services import attendance as attendance_service

router = APIRouter(dependencies=[Depends(verify_staff_token)])


@router.post("/attendance", response_model=AttendanceRecordResponse)
@limiter.limit(RATE_LIMITS["staff_write"])
async def record_attendance_endpoint(
    request: Request,
    body: AttendanceRecordRequest,
    db: Session = Depends(get_db),
):
    """
    Record who was present at one service occurrence.

    Replaces whatever was recorded before for the same (date, service type):
    members missing from ``attendeeIds`` lose their present mark. An empty
    list marks everyone absent. Resubmitting the same list is harmless.

    Example:
        Request:
            POST /api/v1/attendance
            {"date": "2024-05-05", "serviceType": "Sunday Morning", "attendeeIds": ["m1", "m2"]}

        Response (200):
            {
                "message": "Recorded attendance for 2 members on 2024-05-05 for Sunday Morning",
                "date": "2024-05-05",
                "serviceType": "Sunday Morning",
                "count": 2,
                "deletedPrevious": 0
            }
    """
    result = attendance_service.record_attendance(db, body.date, body.service_type, body.attendee_ids)
    return AttendanceRecordResponse(
        message=result.message,
        date=result.date.isoformat(),
        service_type=result.service_type,
        count=result.inserted_count,
        deleted_previous=result.deleted_previous,
    )


@router.get("/attendance")
@limiter.limit(RATE_LIMITS["staff_read"])
async def get_attendance_endpoint(
    request: Request,
    from_date: Optional[str] = Query(None, alias="fromDate"),
    to_date: Optional[str] = Query(None, alias="toDate"),
    service_type: Optional[str] = Query(None, alias="serviceType"),
    db: Session = Depends(get_db),
):
    """
    Attendance per service occurrence, newest first.

    Each record has ``present`` (with check-in times) and ``absent`` (every
    active member not present).
    """
    try:
        return attendance_service.get_attendance(db, from_date, to_date, service_type)
    except ValueError as e:
        raise ValidationError(str(e))


@router.get("/attendance-members")
async def get_attendance_members_endpoint(
    date: Optional[str] = None,
    service_type: Optional[str] = Query(None, alias="serviceType"),
    db: Session = Depends(get_db),
):
    """Ids of members already marked present, so the roll call can be re-opened."""
    if not date or not service_type:
        raise ValidationError("date and serviceType required")
    try:
        return attendance_service.get_attendance_members(db, date, service_type)
    except ValueError as e:
        raise ValidationError(str(e))
