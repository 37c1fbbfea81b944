"""Authentication endpoints."""
from fastapi import APIRouter, Depends, Request, Response
from sqlalchemy.orm import Session

from church_attendance.api.deps import get_db
from church_attendance.core import config
from church_attendance.core.constants import STAFF_COOKIE_NAME
from church_attendance.core.exceptions import AuthError, InternalError, ValidationError
from church_attendance.core.rate_limit import limiter, RATE_LIMITS
from church_attendance.core.security import create_access_token, verify_app_password
from church_attendance.schemas import AuthRequest, SuccessResponse, VerifyPasswordRequest
from church_attendance.services import users as user_service

router = APIRouter()


def _set_staff_cookie(response: Response, user) -> None:
    access_token = create_access_token(
        data={"sub": user.username, "user_id": user.id, "is_admin": user.is_admin}
    )
    response.set_cookie(
        key=STAFF_COOKIE_NAME,
        value=access_token,
        httponly=True,
        secure=config.settings.ENVIRONMENT == "production",
        samesite="lax",
        max_age=config.settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
    )


@router.post("/auth")
@limiter.limit(RATE_LIMITS["auth"])
async def auth_endpoint(
    request: Request,
    body: AuthRequest,
    response: Response,
    db: Session = Depends(get_db),
):
    """
    Staff account entry point, dispatched on ``action``.

    - ``check``: whether the first admin still needs to be created.
    - ``setup``: create the first admin. Requires the app-wide setup password
      and is refused once any user exists.
    - ``login``: verify a username and password and set the staff session
      cookie.

    Example:
        Request:
            POST /api/v1/auth
            {"action": "login", "username": "pastor", "password": "..."}

        Response (200):
            {
                "success": true,
                "user": {"id": 1, "username": "pastor", "displayName": "Pastor John", "isAdmin": true}
            }

    Security:
        - Token stored in httpOnly cookie (XSS protection)
        - SameSite=Lax (CSRF protection)
        - Secure flag enabled in production (HTTPS only)
    """
    if body.action == "check":
        return user_service.check_setup(db)

    if body.action == "setup":
        user = user_service.setup_first_admin(
            db,
            setup_password=body.password,
            username=body.username,
            new_password=body.new_password,
            display_name=body.display_name,
        )
        response.status_code = 201
        return {
            "success": True,
            "message": "Admin user created successfully",
            "user": user_service.serialize_user(user),
        }

    if body.action == "login":
        if user_service.count_users(db) == 0:
            return {
                "success": False,
                "needsSetup": True,
                "message": "No users configured. Please set up the first admin account.",
            }
        user = user_service.authenticate(db, body.username, body.password)
        _set_staff_cookie(response, user)
        return {"success": True, "user": user_service.serialize_user(user)}

    raise ValidationError("Invalid action. Use: login, setup, or check")


@router.post("/auth/logout", response_model=SuccessResponse)
async def logout(response: Response) -> SuccessResponse:
    """
    Clear the staff session cookie.

    Can be called even when not logged in.
    """
    response.delete_cookie(key=STAFF_COOKIE_NAME)
    return SuccessResponse(success=True, message="Logged out successfully")


@router.post("/verify-password")
@limiter.limit(RATE_LIMITS["auth"])
async def verify_password_endpoint(request: Request, body: VerifyPasswordRequest):
    """
    Check the app-wide password.

    ``APP_PASSWORD`` may hold the plaintext or an Argon2 hash (see
    ``hash_password.py``).
    """
    if not config.settings.APP_PASSWORD:
        raise InternalError("Server configuration error")
    if not body.password:
        raise ValidationError("Password required")
    if not verify_app_password(body.password):
        raise AuthError("Invalid password", details={"success": False})
    return {"success": True}
