"""Absence check-in endpoints."""
from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from church_attendance.api.deps import TIMEZONE, get_db, get_sms_sender, verify_staff_token
from church_attendance.core.rate_limit import limiter, RATE_LIMITS
from church_attendance.integrations import SmsSender
from church_attendance.schemas import AbsenceSubmitRequest, ManualAbsenceRequest
from church_attendance.services import absences as absence_service

router = APIRouter()


@router.post("/absence")
@limiter.limit(RATE_LIMITS["absence"])
def submit_absence_endpoint(
    request: Request,
    body: AbsenceSubmitRequest,
    db: Session = Depends(get_db),
    sms: SmsSender = Depends(get_sms_sender),
):
    """
    Public absence check-in.

    The phone number must belong to a member (compared on its last ten
    digits). The check-in is stored and, when SMS and a stream password are
    configured, a livestream access code is texted back. Failing to text does
    not fail the check-in.

    Example:
        Request:
            POST /api/v1/absence
            {"name": "Ruth Moab", "phone": "(555) 123-4567", "reason": "sick", "prayerRequest": "..."}

        Response (200):
            {
                "success": true,
                "message": "Check-in recorded! Live stream link sent to your phone.",
                "checkin": {"id": 12, "name": "Ruth Moab", "reason": "sick", ...},
                "smsError": null,
                "accessCode": "K7P2QX"
            }

        Response (403):
            {"error": "Phone number not found in member directory. ...", "notMember": true}
    """
    return absence_service.submit_absence(
        db,
        sms,
        name=body.name,
        phone=body.phone,
        reason=body.reason,
        prayer_request=body.prayer_request,
        service_date=body.service_date,
        tz=TIMEZONE,
    )


@router.post("/manual-absence", dependencies=[Depends(verify_staff_token)])
@limiter.limit(RATE_LIMITS["staff_write"])
def manual_absence_endpoint(
    request: Request,
    body: ManualAbsenceRequest,
    db: Session = Depends(get_db),
    sms: SmsSender = Depends(get_sms_sender),
):
    """Staff-entered absence, optionally texting the member a livestream link."""
    return absence_service.record_manual_absence(
        db,
        sms,
        member_name=body.member_name,
        reason=body.reason,
        service_date=body.service_date,
        member_phone=body.member_phone,
        prayer_request=body.prayer_request,
        send_link=body.send_link,
    )


@router.delete("/absentee", dependencies=[Depends(verify_staff_token)])
@limiter.limit(RATE_LIMITS["staff_write"])
async def delete_absentee_endpoint(request: Request, id: int, db: Session = Depends(get_db)):
    """Delete one absence check-in by id."""
    return absence_service.delete_absentee(db, id)
