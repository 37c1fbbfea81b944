"""Attendance recording and lookup."""
from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, Iterable, List, Optional, Union

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from church_attendance.core.constants import MEMBER_STATUS_ACTIVE
from church_attendance.core.logging_config import get_logger
from church_attendance.core.retry import BoundedRetry
from church_attendance.core.utils import isoformat_or_none, normalize_date, utcnow
from church_attendance.db.models import Attendance, AttendanceSummary, Member

logger = get_logger(__name__)

# A concurrent submission for the same occurrence can slip a row in between
# our delete and insert; one more full pass settles it.
RECORD_MAX_ATTEMPTS = 2


@dataclass
class RecordResult:
    inserted_count: int
    deleted_previous: int
    date: date
    service_type: str

    @property
    def message(self) -> str:
        return (
            f"Recorded attendance for {self.inserted_count} members on "
            f"{self.date.isoformat()} for {self.service_type}"
        )


def _refresh_summary(db: Session, service_date: date, service_type: str) -> AttendanceSummary:
    """Recount present/absent for one occurrence, inside the caller's transaction."""
    present_ids = {
        member_id
        for (member_id,) in db.query(Attendance.member_id).filter(
            Attendance.date == service_date,
            Attendance.service_type == service_type,
            Attendance.present.is_(True),
        )
    }
    active_ids = {
        member_id
        for (member_id,) in db.query(Member.id).filter(Member.status == MEMBER_STATUS_ACTIVE)
    }

    summary = (
        db.query(AttendanceSummary)
        .filter(AttendanceSummary.date == service_date, AttendanceSummary.service_type == service_type)
        .first()
    )
    if summary is None:
        summary = AttendanceSummary(date=service_date, service_type=service_type)
        db.add(summary)

    summary.total_present = len(present_ids)
    summary.total_absent = len(active_ids - present_ids)
    summary.updated_at = utcnow()
    return summary


def record_attendance(
    db: Session,
    service_date: Union[str, date],
    service_type: str,
    present_member_ids: Iterable[str],
) -> RecordResult:
    """
    Replace the attendance of one service occurrence with ``present_member_ids``.

    Every existing row for (date, service type) is deleted and one present
    row per distinct member id is inserted, all in a single transaction.
    Unchecked members therefore lose their row. An empty list records
    everyone as absent, and submitting the same list twice gives the same
    rows.

    Any failure rolls the whole transaction back and propagates.
    """
    normalized_date = normalize_date(service_date)
    member_ids = list(dict.fromkeys(str(member_id) for member_id in present_member_ids))

    def attempt(number: int) -> RecordResult:
        deleted = (
            db.query(Attendance)
            .filter(Attendance.date == normalized_date, Attendance.service_type == service_type)
            .delete(synchronize_session="fetch")
        )

        checked_in_at = utcnow()
        db.add_all(
            [
                Attendance(
                    date=normalized_date,
                    service_type=service_type,
                    member_id=member_id,
                    present=True,
                    checked_in_at=checked_in_at,
                )
                for member_id in member_ids
            ]
        )
        db.flush()
        _refresh_summary(db, normalized_date, service_type)
        db.commit()
        return RecordResult(
            inserted_count=len(member_ids),
            deleted_previous=deleted,
            date=normalized_date,
            service_type=service_type,
        )

    try:
        outcome = BoundedRetry(
            RECORD_MAX_ATTEMPTS, retry_on=(IntegrityError,), on_retry=db.rollback
        ).run(attempt)
    except Exception:
        db.rollback()
        raise

    if not outcome.succeeded:
        raise outcome.errors[-1]

    result = outcome.value
    logger.info(
        "attendance_recorded",
        date=result.date.isoformat(),
        service_type=service_type,
        count=result.inserted_count,
        deleted_previous=result.deleted_previous,
    )
    return result


def _member_entry(member: Member, checked_in_at=None, include_check_in: bool = False) -> Dict[str, Any]:
    entry = {
        "id": member.id,
        "first_name": member.first_name,
        "last_name": member.last_name,
        "email": member.email,
        "phone": member.phone,
    }
    if include_check_in:
        entry["checked_in_at"] = isoformat_or_none(checked_in_at)
    return entry


def get_attendance(
    db: Session,
    from_date: Optional[Union[str, date]] = None,
    to_date: Optional[Union[str, date]] = None,
    service_type: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Attendance grouped per service occurrence, newest first.

    Each record lists the members present and, as ``absent``, every active
    member without a present row for that occurrence.
    """
    query = db.query(Attendance, Member).join(Member, Attendance.member_id == Member.id)
    if from_date:
        query = query.filter(Attendance.date >= normalize_date(from_date))
    if to_date:
        query = query.filter(Attendance.date <= normalize_date(to_date))
    if service_type:
        query = query.filter(Attendance.service_type == service_type)

    rows = query.order_by(
        Attendance.date.desc(),
        Attendance.service_type.asc(),
        Member.last_name.asc(),
        Member.first_name.asc(),
    ).all()

    by_service: Dict[tuple, Dict[str, Any]] = {}
    for attendance, member in rows:
        key = (attendance.date, attendance.service_type)
        if key not in by_service:
            by_service[key] = {
                "date": attendance.date.isoformat(),
                "service_type": attendance.service_type,
                "present": [],
                "absent": [],
            }
        if attendance.present:
            by_service[key]["present"].append(
                _member_entry(member, attendance.checked_in_at, include_check_in=True)
            )

    all_members = (
        db.query(Member)
        .filter(Member.status == MEMBER_STATUS_ACTIVE)
        .order_by(Member.last_name, Member.first_name)
        .all()
    )

    for record in by_service.values():
        present_ids = {m["id"] for m in record["present"]}
        record["absent"] = [_member_entry(m) for m in all_members if m.id not in present_ids]

    return {
        "records": list(by_service.values()),
        "summary": {
            "total_services": len(by_service),
            "total_members": len(all_members),
        },
    }


def get_present_member_ids(db: Session, service_date: Union[str, date], service_type: str) -> List[str]:
    """Ids of the members marked present at one occurrence."""
    normalized_date = normalize_date(service_date)
    return [
        member_id
        for (member_id,) in db.query(Attendance.member_id)
        .filter(
            Attendance.date == normalized_date,
            Attendance.service_type == service_type,
            Attendance.present.is_(True),
        )
        .order_by(Attendance.member_id)
    ]


def get_attendance_members(db: Session, service_date: Union[str, date], service_type: str) -> Dict[str, Any]:
    """Present member ids for one occurrence, used to pre-check the roll call."""
    normalized_date = normalize_date(service_date)
    member_ids = get_present_member_ids(db, normalized_date, service_type)
    return {
        "date": normalized_date.isoformat(),
        "serviceType": service_type,
        "memberIds": member_ids,
        "count": len(member_ids),
    }


def get_absent_members(db: Session, service_date: Union[str, date], service_type: str) -> List[Member]:
    """Active members without a present row for the occurrence."""
    present_ids = set(get_present_member_ids(db, service_date, service_type))
    return [
        member
        for member in db.query(Member)
        .filter(Member.status == MEMBER_STATUS_ACTIVE)
        .order_by(Member.last_name, Member.first_name)
        if member.id not in present_ids
    ]
