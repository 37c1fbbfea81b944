"""Outbound messages to members and the pastor: broadcasts, absentee follow-ups and reports."""
from dataclasses import dataclass
from datetime import date
from html import escape
from typing import Any, Dict, List, Optional
from zoneinfo import ZoneInfo

from sqlalchemy.orm import Session

from church_attendance.core import config
from church_attendance.core.constants import MEMBER_STATUS_ACTIVE
from church_attendance.core.exceptions import ProviderError, ProviderNotConfigured
from church_attendance.core.logging_config import get_logger
from church_attendance.core.sanitization import mask_phone
from church_attendance.core.utils import format_service_date, utcnow
from church_attendance.db.models import Member
from church_attendance.integrations.email import EmailSender
from church_attendance.integrations.sms import SmsSender, format_phone
from church_attendance.services.attendance import get_absent_members, get_present_member_ids

logger = get_logger(__name__)


@dataclass
class DeliveryTally:
    """Per-channel counts for a batch send. A failed recipient never stops the batch."""

    email_sent: int = 0
    email_failed: int = 0
    sms_sent: int = 0
    sms_failed: int = 0
    skipped: int = 0

    def to_dict(self) -> Dict[str, int]:
        return {
            "emailSent": self.email_sent,
            "emailFailed": self.email_failed,
            "smsSent": self.sms_sent,
            "smsFailed": self.sms_failed,
            "skipped": self.skipped,
        }


def _card(title: str, body_html: str) -> str:
    return (
        '<div style="font-family: -apple-system, BlinkMacSystemFont, \'Segoe UI\', Roboto, sans-serif; '
        'max-width: 600px; margin: 0 auto;">'
        '<div style="background: #02a2bc; padding: 20px; border-radius: 8px 8px 0 0; text-align: center;">'
        f'<h2 style="color: white; margin: 0;">{escape(title)}</h2></div>'
        '<div style="background: #f8f9fa; padding: 20px; border: 1px solid #e0e0e0; border-top: none; '
        'border-radius: 0 0 8px 8px;">'
        f"{body_html}"
        f'<p style="font-size: 14px; color: #666; margin-top: 20px;">{escape(config.settings.EMAIL_FROM_NAME)}</p>'
        "</div></div>"
    )


def _paragraph(text: str) -> str:
    return f'<p style="font-size: 16px; line-height: 1.6; color: #333; white-space: pre-wrap;">{escape(text)}</p>'


def _active_members(db: Session, member_ids: Optional[List[str]] = None) -> List[Member]:
    query = db.query(Member).filter(Member.status == MEMBER_STATUS_ACTIVE)
    if member_ids:
        query = query.filter(Member.id.in_(member_ids))
    return query.order_by(Member.last_name, Member.first_name).all()


def _deliver(
    members: List[Member],
    method: str,
    sms: SmsSender,
    email: EmailSender,
    email_subject: str,
    email_html,
    sms_body,
    from_email: Optional[str] = None,
) -> DeliveryTally:
    """Send to every member on the requested channels and tally the outcomes."""
    tally = DeliveryTally()
    use_email = method in ("email", "both")
    use_sms = method in ("sms", "both")

    for member in members:
        if use_email and member.email and email.configured:
            try:
                email.send(member.email, email_subject, email_html(member), from_email=from_email)
                tally.email_sent += 1
            except ProviderError as e:
                tally.email_failed += 1
                logger.warning("member_email_failed", member_id=member.id, error=e.message)

        if use_sms and member.phone and sms.configured:
            phone_number = format_phone(member.phone)
            if phone_number and len(phone_number) >= 11:
                try:
                    sms.send(phone_number, sms_body(member))
                    tally.sms_sent += 1
                except ProviderError as e:
                    tally.sms_failed += 1
                    logger.warning(
                        "member_sms_failed", member_id=member.id, to=mask_phone(phone_number), error=e.message
                    )
            else:
                tally.skipped += 1

        if not member.email and not member.phone:
            tally.skipped += 1

    return tally


def broadcast(
    db: Session,
    sms: SmsSender,
    email: EmailSender,
    message: str,
    method: str,
    subject: Optional[str] = None,
    member_ids: Optional[List[str]] = None,
    from_email: Optional[str] = None,
) -> Dict[str, Any]:
    """Send a message to the given active members, or to all of them."""
    members = _active_members(db, member_ids)
    email_subject = subject or f"Message from {config.settings.EMAIL_FROM_NAME}"

    tally = _deliver(
        members,
        method,
        sms,
        email,
        email_subject,
        email_html=lambda m: _card(email_subject, _paragraph(f"Hi {m.first_name},") + _paragraph(message)),
        sms_body=lambda m: f"{subject}\n\n{message}" if subject else message,
        from_email=from_email,
    )
    logger.info("broadcast_sent", method=method, members=len(members), **tally.to_dict())

    return {
        "message": f"Broadcast sent to {len(members)} members",
        "totalMembers": len(members),
        **tally.to_dict(),
    }


def notify_absentees(
    db: Session,
    sms: SmsSender,
    email: EmailSender,
    service_date: date,
    service_type: str,
    method: str,
    message: Optional[str] = None,
    member_ids: Optional[List[str]] = None,
) -> Dict[str, Any]:
    """
    "We missed you" follow-up for one service occurrence.

    Recipients are the explicit ``member_ids`` when given, otherwise every
    active member without a present row for the occurrence.
    """
    if member_ids:
        absentees = _active_members(db, member_ids)
    else:
        absentees = get_absent_members(db, service_date, service_type)

    text = message or (
        f"We missed you at {service_type} on {format_service_date(service_date)}. "
        "Hope to see you next time!"
    )

    tally = _deliver(
        absentees,
        method,
        sms,
        email,
        f"We Missed You at {service_type}!",
        email_html=lambda m: _card("We Missed You!", _paragraph(f"Hi {m.first_name},") + _paragraph(text)),
        sms_body=lambda m: f"Hi {m.first_name}, {text}",
    )
    logger.info(
        "absentees_notified",
        date=service_date.isoformat(),
        service_type=service_type,
        method=method,
        absentees=len(absentees),
        **tally.to_dict(),
    )

    return {
        "message": f"Notifications sent to {len(absentees)} absentees",
        "totalAbsentees": len(absentees),
        **tally.to_dict(),
    }


def _name_list(members: List[Member], empty: str) -> str:
    if not members:
        return f'<li style="padding: 8px 0; color: #666; font-style: italic;">{escape(empty)}</li>'
    return "".join(
        f'<li style="padding: 8px 0; border-bottom: 1px solid #e0e0e0;">{escape(m.full_name)}</li>'
        for m in members
    )


def send_service_report(
    db: Session,
    email: EmailSender,
    service_date: date,
    service_type: str,
    recipient: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Email the present and absent lists of one occurrence.

    Raises:
        ProviderNotConfigured: If email is not configured
        ProviderError: If the provider rejects the message
    """
    if not email.configured:
        raise ProviderNotConfigured("Email service not configured", provider=email.provider)

    to_email = recipient or config.settings.PASTOR_EMAIL
    present_ids = set(get_present_member_ids(db, service_date, service_type))
    present = (
        db.query(Member)
        .filter(Member.id.in_(present_ids))
        .order_by(Member.last_name, Member.first_name)
        .all()
        if present_ids
        else []
    )
    absent = [m for m in _active_members(db) if m.id not in present_ids]

    long_date = format_service_date(service_date, with_year=True)
    generated = utcnow().astimezone(ZoneInfo(config.settings.TIMEZONE))
    body = (
        _paragraph(f"{service_type} - {long_date}")
        + f'<h3 style="color: #28a745;">Present ({len(present)})</h3>'
        + f'<ul style="list-style: none; padding: 0;">{_name_list(present, "No attendees recorded")}</ul>'
        + f'<h3 style="color: #dc3545;">Absent ({len(absent)})</h3>'
        + f'<ul style="list-style: none; padding: 0;">{_name_list(absent, "Everyone was present!")}</ul>'
        + _paragraph(f"Generated {generated.strftime('%Y-%m-%d %H:%M')}")
    )

    email.send(to_email, f"Attendance Report: {service_type} - {long_date}", _card("Attendance Report", body))
    logger.info("service_report_sent", to=to_email, present=len(present), absent=len(absent))

    return {
        "message": f"Report sent to {to_email}",
        "present": len(present),
        "absent": len(absent),
    }


def email_absentee_report(
    email: EmailSender,
    report: Dict[str, Any],
    recipient: str,
) -> None:
    """Email a report built by ``build_absentee_report``."""
    if not email.configured:
        raise ProviderNotConfigured("Email service not configured", provider=email.provider)

    from_date = date.fromisoformat(report["dateRange"]["from"])
    to_date = date.fromisoformat(report["dateRange"]["to"])
    period = f"{format_service_date(from_date, with_year=True)} - {format_service_date(to_date, with_year=True)}"

    sections = [_paragraph(period), _paragraph(f"Total check-ins: {report['total']}")]
    for group in report["byReason"]:
        rows = "".join(
            f"<tr><td>{escape(item['name'])}</td><td>{escape(item['serviceDate'] or '')}</td>"
            f"<td>{'Yes' if item['livestreamSent'] else 'No'}</td></tr>"
            for item in group["items"]
        )
        sections.append(
            f"<h3>{escape(group['reason'])} ({group['count']})</h3>"
            f'<table style="width: 100%;"><tr><th>Name</th><th>Date</th><th>Livestream</th></tr>{rows}</table>'
        )
    if report["prayerRequests"]:
        sections.append("<h3>Prayer Requests</h3>")
        sections.extend(
            _paragraph(f"{pr['name']}: {pr['request']}") for pr in report["prayerRequests"]
        )

    email.send(recipient, f"Weekly Absentee Report: {period}", _card("Absentee Report", "".join(sections)))
    logger.info("absentee_report_sent", to=recipient, total=report["total"])
