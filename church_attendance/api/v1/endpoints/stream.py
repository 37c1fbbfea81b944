"""Livestream access code endpoints."""
from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from church_attendance.api.deps import get_db, verify_staff_token
from church_attendance.core.exceptions import ValidationError
from church_attendance.core.rate_limit import limiter, RATE_LIMITS
from church_attendance.core.sanitization import sanitize_access_code
from church_attendance.schemas import StreamCodeVerifyRequest
from church_attendance.services import access_codes as access_code_service

router = APIRouter()


@router.post("/verify-stream-code")
@limiter.limit(RATE_LIMITS["verify_code"])
async def verify_stream_code_endpoint(
    request: Request,
    body: StreamCodeVerifyRequest,
    db: Session = Depends(get_db),
):
    """
    Exchange an access code for the current livestream.

    Every successful verification bumps the code's use count. Codes are
    case-insensitive.

    Example:
        Request:
            POST /api/v1/verify-stream-code
            {"code": "k7p2qx"}

        Response (200):
            {
                "valid": true,
                "memberName": "Ruth Moab",
                "videoUrl": "https://vimeo.com/123456",
                "videoId": "123456",
                "password": "Hq7mT2xa",
                "expiresAt": "2024-05-06T14:00:00+00:00"
            }

        Response (403):
            {"error": "This access code has expired", "valid": false, "expired": true}
    """
    if not body.code:
        raise ValidationError("Access code is required", details={"valid": False})
    try:
        code = sanitize_access_code(body.code)
    except ValueError as e:
        raise ValidationError(str(e), details={"valid": False})

    return access_code_service.validate_access_code(db, code)


@router.get("/stream-codes", dependencies=[Depends(verify_staff_token)])
@limiter.limit(RATE_LIMITS["staff_read"])
async def list_stream_codes_endpoint(request: Request, active: bool = False, db: Session = Depends(get_db)):
    """Issued access codes, newest first. ``?active=true`` hides revoked and expired codes."""
    codes = access_code_service.list_access_codes(db, active_only=active)
    return {"codes": [access_code_service.serialize_access_code(c) for c in codes]}


@router.post("/stream-codes/{code}/revoke", dependencies=[Depends(verify_staff_token)])
@limiter.limit(RATE_LIMITS["staff_write"])
async def revoke_stream_code_endpoint(request: Request, code: str, db: Session = Depends(get_db)):
    """Revoke an access code so it can no longer be exchanged."""
    try:
        normalized = sanitize_access_code(code)
    except ValueError as e:
        raise ValidationError(str(e))
    revoked = access_code_service.revoke_access_code(db, normalized)
    return {"success": True, "code": access_code_service.serialize_access_code(revoked)}
