"""Absentee check-ins and delivery of the livestream link."""
from datetime import date
from typing import Any, Dict, Optional
from zoneinfo import ZoneInfo

from sqlalchemy.orm import Session

from church_attendance.core import config
from church_attendance.core.exceptions import AppError, NotAMemberError, NotFoundError
from church_attendance.core.logging_config import get_logger
from church_attendance.core.sanitization import last_ten_digits
from church_attendance.core.utils import first_name, isoformat_or_none, today_in, utcnow
from church_attendance.db.models import AbsenteeCheckin
from church_attendance.integrations.sms import SmsSender
from church_attendance.services.access_codes import issue_access_code
from church_attendance.services.members import find_member_by_phone

logger = get_logger(__name__)


def stream_link(code: str) -> str:
    return f"{config.settings.SITE_URL.rstrip('/')}/stream?code={code}"


def stream_access_message(name: str, code: str) -> str:
    return (
        f"{config.settings.CHURCH_NAME} Live Stream Access\n\n"
        f"Hi {first_name(name)}! Watch the service here:\n\n"
        f"{stream_link(code)}\n\n"
        f"Access code: {code}\n\n"
        "We're praying for you!"
    )


def _checkin_summary(checkin: AbsenteeCheckin, sms_sent: bool) -> Dict[str, Any]:
    return {
        "id": checkin.id,
        "name": checkin.name,
        "reason": checkin.reason,
        "serviceDate": isoformat_or_none(checkin.service_date),
        "smsSent": sms_sent,
    }


def send_stream_access(
    db: Session,
    sms: SmsSender,
    checkin: AbsenteeCheckin,
    phone: str,
) -> Dict[str, Any]:
    """
    Issue an access code for a stored check-in and text it to ``phone``.

    Best effort: the check-in is already committed, so any failure comes
    back as ``smsError`` instead of propagating.
    """
    if not sms.configured:
        logger.info("stream_access_sms_skipped", checkin_id=checkin.id, reason="sms not configured")
        return {"smsSent": False, "smsError": "SMS service not configured", "accessCode": None}

    try:
        access_code = issue_access_code(db, checkin.name, phone, checkin.id)
        sms.send(phone, stream_access_message(checkin.name, access_code.code))
    except AppError as e:
        db.rollback()
        logger.warning("stream_access_not_sent", checkin_id=checkin.id, error=e.message)
        return {"smsSent": False, "smsError": e.message, "accessCode": None}

    checkin.livestream_sent = True
    checkin.livestream_sent_at = utcnow()
    db.commit()
    logger.info("stream_access_sent", checkin_id=checkin.id, code_id=access_code.id)
    return {"smsSent": True, "smsError": None, "accessCode": access_code.code}


def submit_absence(
    db: Session,
    sms: SmsSender,
    name: str,
    phone: str,
    reason: str,
    prayer_request: Optional[str] = None,
    service_date: Optional[date] = None,
    tz: Optional[ZoneInfo] = None,
) -> Dict[str, Any]:
    """
    Record a member's self-reported absence and send them the livestream link.

    Only phone numbers in the member directory may check in. The service date
    defaults to today in the church's timezone.

    Raises:
        NotAMemberError: If the phone number matches no member
    """
    member = find_member_by_phone(db, phone)
    if member is None:
        logger.info("absence_rejected_not_member")
        raise NotAMemberError()

    effective_date = service_date or today_in(tz or ZoneInfo(config.settings.TIMEZONE))
    checkin = AbsenteeCheckin(
        name=name,
        phone=phone,
        reason=reason,
        prayer_request=prayer_request,
        service_date=effective_date,
    )
    db.add(checkin)
    db.commit()
    db.refresh(checkin)
    logger.info("absence_submitted", checkin_id=checkin.id, member_id=member.id, reason=reason)

    delivery = send_stream_access(db, sms, checkin, phone)
    sms_sent = delivery["smsSent"]

    result = {
        "success": True,
        "message": (
            "Check-in recorded! Live stream link sent to your phone."
            if sms_sent
            else "Check-in recorded! Live stream link will be sent separately."
        ),
        "checkin": _checkin_summary(checkin, sms_sent),
        "smsError": delivery["smsError"],
    }
    if delivery["accessCode"]:
        result["accessCode"] = delivery["accessCode"]
    return result


def record_manual_absence(
    db: Session,
    sms: SmsSender,
    member_name: str,
    reason: str,
    service_date: date,
    member_phone: Optional[str] = None,
    prayer_request: Optional[str] = None,
    send_link: bool = False,
) -> Dict[str, Any]:
    """Staff-entered absence. The phone is stored as its last ten digits."""
    normalized_phone = last_ten_digits(member_phone) or None

    checkin = AbsenteeCheckin(
        name=member_name,
        phone=normalized_phone,
        reason=reason,
        prayer_request=prayer_request,
        service_date=service_date,
    )
    db.add(checkin)
    db.commit()
    db.refresh(checkin)
    logger.info("manual_absence_recorded", checkin_id=checkin.id, reason=reason)

    delivery = {"smsSent": False, "smsError": None, "accessCode": None}
    if send_link:
        if normalized_phone and len(normalized_phone) == 10:
            delivery = send_stream_access(db, sms, checkin, normalized_phone)
        else:
            delivery["smsError"] = "Invalid phone number format"

    sms_sent = delivery["smsSent"]
    result = {
        "success": True,
        "message": "Absence recorded and livestream link sent!" if sms_sent else "Absence recorded successfully.",
        "checkin": _checkin_summary(checkin, sms_sent),
        "smsSent": sms_sent,
        "smsError": delivery["smsError"],
    }
    if delivery["accessCode"]:
        result["accessCode"] = delivery["accessCode"]
    return result


def delete_absentee(db: Session, checkin_id: int) -> Dict[str, Any]:
    checkin = db.get(AbsenteeCheckin, checkin_id)
    if checkin is None:
        raise NotFoundError("Check-in not found")

    deleted = {"id": checkin.id, "name": checkin.name}
    db.delete(checkin)
    db.commit()
    logger.info("absentee_deleted", checkin_id=checkin_id)
    return {
        "success": True,
        "message": f"Deleted check-in for {deleted['name']}",
        "deleted": deleted,
    }
