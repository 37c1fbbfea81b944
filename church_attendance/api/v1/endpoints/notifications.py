"""Member messaging endpoints (staff only)."""
from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from church_attendance.api.deps import get_db, get_email_sender, get_sms_sender, verify_staff_token
from church_attendance.core.rate_limit import limiter, RATE_LIMITS
from church_attendance.integrations import EmailSender, SmsSender
from church_attendance.schemas import BroadcastRequest, NotifyAbsenteesRequest, SendReportRequest
from church_attendance.services import notifications as notification_service

router = APIRouter(dependencies=[Depends(verify_staff_token)])


@router.post("/broadcast")
@limiter.limit(RATE_LIMITS["staff_write"])
def broadcast_endpoint(
    request: Request,
    body: BroadcastRequest,
    db: Session = Depends(get_db),
    sms: SmsSender = Depends(get_sms_sender),
    email: EmailSender = Depends(get_email_sender),
):
    """
    Send a message to every active member, or to ``memberIds``.

    A failed delivery to one member is counted and the batch continues.

    Example:
        Request:
            POST /api/v1/broadcast
            {"message": "Service is cancelled due to snow.", "method": "both"}

        Response (200):
            {
                "message": "Broadcast sent to 80 members",
                "totalMembers": 80,
                "emailSent": 61,
                "emailFailed": 0,
                "smsSent": 74,
                "smsFailed": 1,
                "skipped": 5
            }
    """
    return notification_service.broadcast(
        db,
        sms,
        email,
        message=body.message,
        method=body.method,
        subject=body.subject,
        member_ids=body.member_ids,
        from_email=body.from_email,
    )


@router.post("/notify-absentees")
@limiter.limit(RATE_LIMITS["staff_write"])
def notify_absentees_endpoint(
    request: Request,
    body: NotifyAbsenteesRequest,
    db: Session = Depends(get_db),
    sms: SmsSender = Depends(get_sms_sender),
    email: EmailSender = Depends(get_email_sender),
):
    """Send a "we missed you" message to members not marked present at a service."""
    return notification_service.notify_absentees(
        db,
        sms,
        email,
        service_date=body.date,
        service_type=body.service_type,
        method=body.method,
        message=body.message,
        member_ids=body.member_ids,
    )


@router.post("/send-report")
@limiter.limit(RATE_LIMITS["staff_write"])
def send_report_endpoint(
    request: Request,
    body: SendReportRequest,
    db: Session = Depends(get_db),
    email: EmailSender = Depends(get_email_sender),
):
    """Email the present and absent lists of one service to the pastor or ``recipientEmail``."""
    return notification_service.send_service_report(
        db,
        email,
        service_date=body.date,
        service_type=body.service_type,
        recipient=body.recipient_email,
    )
