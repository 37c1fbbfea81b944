"""Absence reports: per-member absence history and absentee summaries."""
from collections import defaultdict
from datetime import date
from typing import Any, Dict, List, Optional, Tuple, Union

from sqlalchemy import and_
from sqlalchemy.orm import Session

from church_attendance.core.constants import ABSENCE_REASONS
from church_attendance.core.exceptions import ValidationError
from church_attendance.core.logging_config import get_logger
from church_attendance.core.sanitization import last_ten_digits
from church_attendance.core.utils import format_reason, isoformat_or_none, normalize_date
from church_attendance.db.models import AbsenteeCheckin, Attendance
from church_attendance.services.members import get_member

logger = get_logger(__name__)

ServiceKey = Tuple[date, str]


def serialize_checkin(checkin: AbsenteeCheckin) -> Dict[str, Any]:
    return {
        "id": checkin.id,
        "name": checkin.name,
        "phone": checkin.phone,
        "reason": checkin.reason,
        "prayer_request": checkin.prayer_request,
        "service_date": isoformat_or_none(checkin.service_date),
        "livestream_sent": checkin.livestream_sent,
        "livestream_sent_at": isoformat_or_none(checkin.livestream_sent_at),
        "created_at": isoformat_or_none(checkin.created_at),
    }


def _occurred_services(db: Session, from_date: date, to_date: date) -> List[ServiceKey]:
    """Distinct (date, service type) pairs with at least one attendance row."""
    rows = (
        db.query(Attendance.date, Attendance.service_type)
        .filter(and_(Attendance.date >= from_date, Attendance.date <= to_date))
        .distinct()
        .order_by(Attendance.date.desc(), Attendance.service_type)
        .all()
    )
    return [(row_date, service_type) for row_date, service_type in rows]


def _attended_services(db: Session, member_id: str, from_date: date, to_date: date) -> set:
    rows = db.query(Attendance.date, Attendance.service_type).filter(
        Attendance.member_id == member_id,
        Attendance.date >= from_date,
        Attendance.date <= to_date,
        Attendance.present.is_(True),
    )
    return {(row_date, service_type) for row_date, service_type in rows}


def _checkins_by_date(db: Session, phone: Optional[str], from_date: date, to_date: date) -> Dict[date, List[AbsenteeCheckin]]:
    """
    Self-reported absences for a phone number, keyed by service date.

    Numbers are compared on their last ten digits, so "+1 (555) 123-4567"
    matches "5551234567". A member phone with fewer than ten digits matches
    nothing.
    """
    target = last_ten_digits(phone)
    if len(target) != 10:
        return {}

    candidates = (
        db.query(AbsenteeCheckin)
        .filter(AbsenteeCheckin.service_date >= from_date, AbsenteeCheckin.service_date <= to_date)
        .order_by(AbsenteeCheckin.service_date.desc(), AbsenteeCheckin.created_at.desc())
        .all()
    )

    by_date: Dict[date, List[AbsenteeCheckin]] = defaultdict(list)
    for checkin in candidates:
        if last_ten_digits(checkin.phone) == target:
            by_date[checkin.service_date].append(checkin)
    return by_date


def _submission(checkin: AbsenteeCheckin) -> Dict[str, Any]:
    return {
        "reason": checkin.reason,
        "reasonLabel": format_reason(checkin.reason),
        "prayerRequest": checkin.prayer_request,
        "livestreamSent": checkin.livestream_sent,
        "livestreamSentAt": isoformat_or_none(checkin.livestream_sent_at),
        "submittedAt": isoformat_or_none(checkin.created_at),
    }


def compute_member_absences(
    db: Session,
    member_id: str,
    from_date: Union[str, date],
    to_date: Union[str, date],
) -> Dict[str, Any]:
    """
    Absence history of one member over a date range.

    A service "occurred" when it has any attendance row in the range; the
    member's absences are the occurred services without a present row for
    them. Each absence carries the member's self-reported check-in for that
    date, when there is one.

    Raises:
        ValidationError: If a parameter is missing
        NotFoundError: If the member does not exist
    """
    if not member_id:
        raise ValidationError("memberId is required")
    if not from_date or not to_date:
        raise ValidationError("fromDate and toDate are required")

    try:
        start = normalize_date(from_date)
        end = normalize_date(to_date)
    except ValueError as e:
        raise ValidationError(str(e))

    member = get_member(db, member_id)

    occurred = _occurred_services(db, start, end)
    attended = _attended_services(db, member_id, start, end)
    absences = [service for service in occurred if service not in attended]
    checkins = _checkins_by_date(db, member.phone, start, end)

    detailed = []
    tallies: Dict[str, Dict[str, int]] = {}
    for service_date, service_type in absences:
        submissions = checkins.get(service_date, [])
        detailed.append({
            "date": service_date.isoformat(),
            "serviceType": service_type,
            "absenteeSubmission": _submission(submissions[0]) if submissions else None,
        })

        tally = tallies.setdefault(service_type, {"total": 0, "withAbsenteeSubmission": 0})
        tally["total"] += 1
        if submissions:
            tally["withAbsenteeSubmission"] += 1

    total_services = len(occurred)
    total_absences = len(absences)
    total_attended = total_services - total_absences
    with_submission = sum(1 for a in detailed if a["absenteeSubmission"])
    # Percentage rounded half-up, so 1 of 8 reads as 13
    rate = (200 * total_attended + total_services) // (2 * total_services) if total_services else 0

    logger.info(
        "member_absence_report",
        member_id=member_id,
        services=total_services,
        absences=total_absences,
    )

    return {
        "member": {
            "id": member.id,
            "name": member.full_name,
            "phone": member.phone,
        },
        "dateRange": {"from": start.isoformat(), "to": end.isoformat()},
        "summary": {
            "totalServicesInPeriod": total_services,
            "totalAttended": total_attended,
            "totalAbsences": total_absences,
            "attendanceRate": rate,
            "absencesWithSubmission": with_submission,
            "absencesWithoutSubmission": total_absences - with_submission,
        },
        "serviceTypeTallies": tallies,
        "absences": detailed,
    }


def _checkins_in_range(db: Session, from_date: date, to_date: date, reason: Optional[str] = None):
    query = db.query(AbsenteeCheckin).filter(
        AbsenteeCheckin.service_date >= from_date,
        AbsenteeCheckin.service_date <= to_date,
    )
    if reason and reason != "all":
        query = query.filter(AbsenteeCheckin.reason == reason)
    return query


def absentee_dashboard(
    db: Session,
    from_date: date,
    to_date: date,
    reason: Optional[str] = None,
) -> Dict[str, Any]:
    """Check-ins for the range bucketed by reason, newest first."""
    checkins = (
        _checkins_in_range(db, from_date, to_date, reason)
        .order_by(AbsenteeCheckin.created_at.desc(), AbsenteeCheckin.id.desc())
        .all()
    )

    grouped: Dict[str, List[Dict[str, Any]]] = {key: [] for key in ABSENCE_REASONS}
    rows = []
    for checkin in checkins:
        row = serialize_checkin(checkin)
        rows.append(row)
        bucket = checkin.reason if checkin.reason in grouped else "other"
        grouped[bucket].append(row)

    summary = {"total": len(rows)}
    summary.update({key: len(items) for key, items in grouped.items()})
    summary["prayerRequests"] = sum(1 for c in checkins if c.prayer_request)
    summary["livestreamSent"] = sum(1 for c in checkins if c.livestream_sent)

    return {
        "success": True,
        "dateRange": {"from": from_date.isoformat(), "to": to_date.isoformat()},
        "summary": summary,
        "grouped": grouped,
        "checkins": rows,
    }


def build_absentee_report(db: Session, from_date: date, to_date: date) -> Dict[str, Any]:
    """Check-ins grouped by reason plus the prayer requests, for the pastor's weekly report."""
    checkins = (
        _checkins_in_range(db, from_date, to_date)
        .order_by(AbsenteeCheckin.reason, AbsenteeCheckin.name)
        .all()
    )

    grouped: Dict[str, List[AbsenteeCheckin]] = {}
    for checkin in checkins:
        grouped.setdefault(checkin.reason or "other", []).append(checkin)

    return {
        "dateRange": {"from": from_date.isoformat(), "to": to_date.isoformat()},
        "total": len(checkins),
        "byReason": [
            {
                "reason": format_reason(reason),
                "count": len(items),
                "items": [
                    {
                        "name": item.name,
                        "phone": item.phone,
                        "prayerRequest": item.prayer_request,
                        "serviceDate": isoformat_or_none(item.service_date),
                        "livestreamSent": item.livestream_sent,
                    }
                    for item in items
                ],
            }
            for reason, items in grouped.items()
        ],
        "prayerRequests": [
            {
                "name": c.name,
                "request": c.prayer_request,
                "date": isoformat_or_none(c.service_date),
            }
            for c in checkins
            if c.prayer_request
        ],
    }
