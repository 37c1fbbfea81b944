"""Member directory endpoints (staff only)."""
from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from church_attendance.api.deps import get_db, verify_staff_token
from church_attendance.core.rate_limit import limiter, RATE_LIMITS
from church_attendance.schemas import MemberCreate, MemberImportRequest, MemberUpdate
from church_attendance.services import members as member_service

router = APIRouter(dependencies=[Depends(verify_staff_token)])


@router.get("/members")
@limiter.limit(RATE_LIMITS["staff_read"])
async def list_members_endpoint(request: Request, all: bool = False, db: Session = Depends(get_db)):
    """
    List members ordered by first and last name.

    Only Active members are returned unless ``?all=true``.

    Example:
        Response (200):
            {"members": [{"id": "pc_1001", "first_name": "Ruth", ...}]}
    """
    members = member_service.list_members(db, active_only=not all)
    return {"members": [member_service.serialize_member(m) for m in members]}


@router.get("/members/{member_id}")
async def get_member_endpoint(member_id: str, db: Session = Depends(get_db)):
    """Get one member. 404 when the id is unknown."""
    return member_service.serialize_member(member_service.get_member(db, member_id))


@router.post("/members", status_code=201)
@limiter.limit(RATE_LIMITS["staff_write"])
async def create_member_endpoint(request: Request, member: MemberCreate, db: Session = Depends(get_db)):
    """
    Create a member.

    The id defaults to ``member_<epoch ms>`` when not supplied, and the
    status to Active.

    Example:
        Request:
            POST /api/v1/members
            {"first_name": "Ruth", "last_name": "Moab", "phone": "555-123-4567"}

        Response (201):
            {"id": "member_1714910400000", "first_name": "Ruth", ...}
    """
    created = member_service.create_member(db, member.model_dump())
    return member_service.serialize_member(created)


@router.put("/members/{member_id}")
@limiter.limit(RATE_LIMITS["staff_write"])
async def update_member_endpoint(
    request: Request,
    member_id: str,
    member: MemberUpdate,
    db: Session = Depends(get_db),
):
    """Update the fields present in the body; others keep their value."""
    updated = member_service.update_member(db, member_id, member.model_dump(exclude_unset=True))
    return member_service.serialize_member(updated)


@router.delete("/members/{member_id}")
@limiter.limit(RATE_LIMITS["staff_write"])
async def delete_member_endpoint(request: Request, member_id: str, db: Session = Depends(get_db)):
    """Delete a member together with their attendance history."""
    deleted = member_service.delete_member(db, member_id)
    return {"success": True, "message": f"Deleted {deleted.full_name}"}


@router.post("/import-members")
@limiter.limit(RATE_LIMITS["staff_write"])
async def import_members_endpoint(request: Request, body: MemberImportRequest, db: Session = Depends(get_db)):
    """
    Bulk upsert members exported from the church management system.

    Rows missing a first or last name are skipped; the first five problems
    come back in ``errors``.

    Example:
        Response (200):
            {
                "success": true,
                "imported": 41,
                "total": 42,
                "errors": [{"id": "pc_77", "reason": "Missing first or last name"}],
                "message": "Imported 41 of 42 members"
            }
    """
    return member_service.import_members(db, body.members)
