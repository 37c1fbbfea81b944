"""Member directory business logic."""
import time
from datetime import date
from typing import Any, Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from church_attendance.core.constants import MEMBER_STATUS_ACTIVE
from church_attendance.core.exceptions import NotFoundError, ValidationError
from church_attendance.core.logging_config import get_logger
from church_attendance.core.sanitization import digits_only, phone_match_candidates
from church_attendance.core.utils import isoformat_or_none, normalize_date
from church_attendance.db.models import Member

logger = get_logger(__name__)

MEMBER_FIELDS = (
    "email",
    "phone",
    "birthdate",
    "anniversary",
    "address_line1",
    "address_line2",
    "city",
    "state",
    "postal_code",
)

IMPORT_ERROR_LIMIT = 5


def serialize_member(member: Member) -> Dict[str, Any]:
    return {
        "id": member.id,
        "person_id": member.person_id,
        "first_name": member.first_name,
        "last_name": member.last_name,
        "email": member.email,
        "phone": member.phone,
        "birthdate": isoformat_or_none(member.birthdate),
        "anniversary": isoformat_or_none(member.anniversary),
        "address_line1": member.address_line1,
        "address_line2": member.address_line2,
        "city": member.city,
        "state": member.state,
        "postal_code": member.postal_code,
        "status": member.status,
        "created_at": isoformat_or_none(member.created_at),
        "updated_at": isoformat_or_none(member.updated_at),
    }


def list_members(db: Session, active_only: bool = True) -> List[Member]:
    """Members ordered by first then last name."""
    query = db.query(Member)
    if active_only:
        query = query.filter(Member.status == MEMBER_STATUS_ACTIVE)
    return query.order_by(Member.first_name, Member.last_name).all()


def get_member(db: Session, member_id: str) -> Member:
    member = db.query(Member).filter(Member.id == member_id).first()
    if not member:
        raise NotFoundError("Member not found")
    return member


def create_member(db: Session, data: Dict[str, Any]) -> Member:
    """Create a member; the id defaults to ``member_<epoch ms>``."""
    if not data.get("first_name") or not data.get("last_name"):
        raise ValidationError("first_name and last_name required")

    member = Member(
        id=data.get("id") or f"member_{int(time.time() * 1000)}",
        person_id=data.get("person_id"),
        first_name=data["first_name"],
        last_name=data["last_name"],
        status=data.get("status") or MEMBER_STATUS_ACTIVE,
        **{field: data.get(field) for field in MEMBER_FIELDS},
    )
    db.add(member)
    db.commit()
    db.refresh(member)
    logger.info("member_created", member_id=member.id)
    return member


def update_member(db: Session, member_id: str, data: Dict[str, Any]) -> Member:
    """Apply the supplied fields; fields absent from ``data`` are left untouched."""
    member = get_member(db, member_id)
    for field in ("first_name", "last_name", "status", *MEMBER_FIELDS):
        if field in data:
            setattr(member, field, data[field])
    db.commit()
    db.refresh(member)
    logger.info("member_updated", member_id=member.id)
    return member


def delete_member(db: Session, member_id: str) -> Member:
    """Hard delete. Attendance rows go with the member."""
    member = get_member(db, member_id)
    db.delete(member)
    db.commit()
    logger.info("member_deleted", member_id=member_id)
    return member


def _optional_date(value: Any) -> Optional[date]:
    if not value:
        return None
    return normalize_date(value)


def _text(value: Any) -> Optional[str]:
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def import_members(db: Session, rows: List[Dict[str, Any]]) -> Dict[str, Any]:
    """
    Bulk upsert keyed on member id.

    Rows without an id are keyed ``pc_<person_id>``. A row missing either
    name is skipped and reported; a row that fails to parse is reported and
    does not stop the import.

    Returns:
        dict with ``imported``, ``total`` and at most five ``errors``
    """
    imported = 0
    errors = []

    for row in rows:
        row_id = row.get("id") or f"pc_{row.get('person_id') or int(time.time() * 1000)}"
        first_name = _text(row.get("first_name"))
        last_name = _text(row.get("last_name"))

        if not first_name or not last_name:
            logger.warning("member_import_skipped", member_id=row_id, reason="missing name")
            errors.append({"id": row_id, "reason": "Missing first or last name"})
            continue

        try:
            values = {
                "first_name": first_name,
                "last_name": last_name,
                "email": _text(row.get("email")),
                "phone": _text(row.get("phone")),
                "birthdate": _optional_date(row.get("birthdate")),
                "anniversary": _optional_date(row.get("anniversary")),
                "address_line1": _text(row.get("address_line1")),
                "address_line2": _text(row.get("address_line2")),
                "city": _text(row.get("city")),
                "state": _text(row.get("state")),
                "postal_code": _text(row.get("postal_code")),
            }
        except ValueError as e:
            errors.append({"id": row_id, "reason": str(e)})
            continue

        member = db.get(Member, str(row_id))
        if member is None:
            member = Member(
                id=str(row_id),
                person_id=_text(row.get("person_id")),
                status=_text(row.get("status")) or MEMBER_STATUS_ACTIVE,
                **values,
            )
            db.add(member)
            db.flush()
        else:
            for field, value in values.items():
                setattr(member, field, value)
        imported += 1

    db.commit()
    logger.info("members_imported", imported=imported, total=len(rows), error_count=len(errors))

    result = {
        "success": True,
        "imported": imported,
        "total": len(rows),
        "message": f"Imported {imported} of {len(rows)} members",
    }
    if errors:
        result["errors"] = errors[:IMPORT_ERROR_LIMIT]
    return result


def _phone_digits_expr():
    """SQL expression stripping the usual phone punctuation from members.phone."""
    expr = Member.phone
    for char in ("(", ")", "-", " ", ".", "+"):
        expr = func.replace(expr, char, "")
    return expr


def find_member_by_phone(db: Session, phone: str) -> Optional[Member]:
    """
    Find a member whose stored phone has the same digits as ``phone``.

    A stored number may carry a leading ``1`` country code the caller did not
    type, so both forms match.
    """
    candidates = phone_match_candidates(phone)
    if not candidates:
        return None

    member = (
        db.query(Member)
        .filter(_phone_digits_expr().in_(candidates))
        .order_by(Member.id)
        .first()
    )
    if member:
        logger.info("member_phone_matched", member_id=member.id)
    else:
        logger.info("member_phone_not_found", digits=len(digits_only(phone)))
    return member
