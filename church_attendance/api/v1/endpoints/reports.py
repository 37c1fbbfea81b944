"""Absence reporting endpoints (staff only)."""
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from church_attendance.api.deps import TIMEZONE, get_db, get_email_sender, verify_staff_token
from church_attendance.core import config
from church_attendance.core.exceptions import ValidationError
from church_attendance.core.rate_limit import limiter, RATE_LIMITS
from church_attendance.core.utils import resolve_date_range
from church_attendance.integrations import EmailSender
from church_attendance.schemas import AbsenteeReportRequest
from church_attendance.services import notifications as notification_service
from church_attendance.services import reports as report_service

router = APIRouter(dependencies=[Depends(verify_staff_token)])


def _date_range(from_date, to_date):
    try:
        return resolve_date_range(from_date, to_date, TIMEZONE)
    except ValueError as e:
        raise ValidationError(str(e))


@router.get("/member-absence-report")
@limiter.limit(RATE_LIMITS["staff_read"])
async def member_absence_report_endpoint(
    request: Request,
    member_id: Optional[str] = Query(None, alias="memberId"),
    from_date: Optional[str] = Query(None, alias="fromDate"),
    to_date: Optional[str] = Query(None, alias="toDate"),
    db: Session = Depends(get_db),
):
    """
    Absence history of one member.

    A service counts as occurred when anyone's attendance was recorded for
    it; the member is absent from every occurred service they were not
    marked present at. Absences on a date the member checked in carry the
    reason and prayer request they gave.

    Example:
        Request:
            GET /api/v1/member-absence-report?memberId=m1&fromDate=2024-05-01&toDate=2024-05-31

        Response (200):
            {
                "member": {"id": "m1", "name": "Ruth Moab", "phone": "5551234567"},
                "summary": {"totalServicesInPeriod": 4, "totalAttended": 3, "totalAbsences": 1, ...},
                "absences": [{"date": "2024-05-12", "serviceType": "Sunday Morning", ...}],
                ...
            }
    """
    return report_service.compute_member_absences(db, member_id, from_date, to_date)


@router.get("/absentee-dashboard")
@limiter.limit(RATE_LIMITS["staff_read"])
async def absentee_dashboard_endpoint(
    request: Request,
    from_date: Optional[str] = Query(None, alias="fromDate"),
    to_date: Optional[str] = Query(None, alias="toDate"),
    reason: Optional[str] = None,
    db: Session = Depends(get_db),
):
    """Check-ins for a range (default: this Sunday-Saturday week) grouped by reason."""
    start, end = _date_range(from_date, to_date)
    return report_service.absentee_dashboard(db, start, end, reason)


@router.get("/absentee-report")
@limiter.limit(RATE_LIMITS["staff_read"])
async def absentee_report_endpoint(
    request: Request,
    from_date: Optional[str] = Query(None, alias="fromDate"),
    to_date: Optional[str] = Query(None, alias="toDate"),
    db: Session = Depends(get_db),
):
    """Weekly absentee report: check-ins grouped by reason plus prayer requests."""
    start, end = _date_range(from_date, to_date)
    return report_service.build_absentee_report(db, start, end)


@router.post("/absentee-report")
@limiter.limit(RATE_LIMITS["staff_write"])
def email_absentee_report_endpoint(
    request: Request,
    body: AbsenteeReportRequest,
    db: Session = Depends(get_db),
    email: EmailSender = Depends(get_email_sender),
):
    """
    Build the absentee report and email it.

    The recipient defaults to PASTOR_EMAIL. Responds 503 when email is not
    configured.
    """
    start, end = _date_range(body.from_date, body.to_date)
    report = report_service.build_absentee_report(db, start, end)
    recipient = body.email or config.settings.PASTOR_EMAIL
    notification_service.email_absentee_report(email, report, recipient)
    return {"success": True, "message": f"Report sent to {recipient}", "total": report["total"]}
