"""
Application exception hierarchy.

Services raise these; the handlers registered in ``main.py`` turn them into
JSON bodies of the form ``{"error": message, **details}`` with the matching
HTTP status.
"""
from typing import Optional


class AppError(Exception):
    """Base application error."""

    status_code = 500

    def __init__(self, message: str, details: Optional[dict] = None, status_code: Optional[int] = None):
        self.message = message
        self.details = details or {}
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"error": self.message, **self.details}


class ValidationError(AppError):
    """Missing or malformed required field."""

    status_code = 400


class NotFoundError(AppError):
    """Requested entity does not exist."""

    status_code = 404


class ConflictError(AppError):
    """Duplicate username, deleting the last admin, setup already done."""

    status_code = 400


class AuthError(AppError):
    """Invalid credentials or missing staff session."""

    status_code = 401


class ForbiddenError(AuthError):
    status_code = 403


class NotAMemberError(ForbiddenError):
    """Phone number is not in the member directory."""

    def __init__(self, message: str = (
        "Phone number not found in member directory. "
        "Please contact the church office if you believe this is an error."
    )):
        super().__init__(message, details={"notMember": True})


class AccessCodeNotFound(NotFoundError):
    def __init__(self):
        super().__init__("Access code not found", details={"valid": False})


class AccessCodeRevoked(ForbiddenError):
    def __init__(self):
        super().__init__("This access code has been revoked", details={"valid": False, "revoked": True})


class AccessCodeExpired(ForbiddenError):
    def __init__(self):
        super().__init__("This access code has expired", details={"valid": False, "expired": True})


class ServiceUnavailable(AppError):
    """Store or required provider not configured."""

    status_code = 503


class NoActiveStreamError(ServiceUnavailable):
    """No livestream password row is active."""

    def __init__(self, message: str = "No active stream configured", details: Optional[dict] = None):
        super().__init__(message, details=details)


class InternalError(AppError):
    status_code = 500


class ProviderError(AppError):
    """An external provider (Twilio, MailerSend, Vimeo) call failed."""

    status_code = 502

    def __init__(self, message: str, provider: str, details: Optional[dict] = None):
        self.provider = provider
        super().__init__(message, details={"provider": provider, **(details or {})})


class ProviderNotConfigured(ProviderError):
    """Provider credentials are absent; the dependent feature is disabled."""

    status_code = 503
