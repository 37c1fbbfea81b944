"""Staff account management endpoints (staff only)."""
from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from church_attendance.api.deps import get_db, verify_staff_token
from church_attendance.core.rate_limit import limiter, RATE_LIMITS
from church_attendance.schemas import UserCreate, UserDelete, UserUpdate
from church_attendance.services import users as user_service

router = APIRouter(dependencies=[Depends(verify_staff_token)])


@router.get("/users")
@limiter.limit(RATE_LIMITS["staff_read"])
async def list_users_endpoint(request: Request, db: Session = Depends(get_db)):
    """Staff accounts, newest first. Password hashes are never returned."""
    return {"users": [user_service.serialize_user(u) for u in user_service.list_users(db)]}


@router.post("/users", status_code=201)
@limiter.limit(RATE_LIMITS["staff_write"])
async def create_user_endpoint(request: Request, body: UserCreate, db: Session = Depends(get_db)):
    """Create a staff account. Usernames are stored lower-case and must be unique."""
    user = user_service.create_user(
        db,
        username=body.username,
        password=body.password,
        display_name=body.display_name,
        is_admin=body.is_admin,
    )
    return {"success": True, "user": user_service.serialize_user(user)}


@router.put("/users")
@limiter.limit(RATE_LIMITS["staff_write"])
async def update_user_endpoint(request: Request, body: UserUpdate, db: Session = Depends(get_db)):
    """
    Update a staff account.

    Changing the password requires ``currentPassword``.

    Example:
        Request:
            PUT /api/v1/users
            {"userId": 2, "newPassword": "s3cret!", "currentPassword": "old-one"}

        Response (200):
            {"success": true, "user": {"id": 2, "username": "usher", ...}}
    """
    changes = body.model_dump(exclude_unset=True, exclude={"user_id"})
    user = user_service.update_user(db, body.user_id, changes)
    return {"success": True, "user": user_service.serialize_user(user)}


@router.delete("/users")
@limiter.limit(RATE_LIMITS["staff_write"])
async def delete_user_endpoint(request: Request, body: UserDelete, db: Session = Depends(get_db)):
    """Delete a staff account. The last admin cannot be deleted."""
    user_service.delete_user(db, body.user_id)
    return {"success": True, "message": "User deleted"}
