"""Security and authentication utilities."""
import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional
import argon2
import jwt
from fastapi import HTTPException, Request

from church_attendance.core import config
from church_attendance.core.constants import (
    ACCESS_CODE_ALPHABET,
    ACCESS_CODE_LENGTH,
    STREAM_PASSWORD_ALPHABET,
    STREAM_PASSWORD_LENGTH,
    STAFF_COOKIE_NAME,
)

# Argon2 hasher for staff passwords
ph = argon2.PasswordHasher(
    time_cost=2,
    memory_cost=65536,
    parallelism=1,
    hash_len=32,
    salt_len=16
)


def _random_string(alphabet: str, length: int) -> str:
    return "".join(secrets.choice(alphabet) for _ in range(length))


def generate_access_code(length: int = ACCESS_CODE_LENGTH) -> str:
    """Generate a livestream access code.

    Drawn from an alphabet without look-alike characters so a code read
    aloud or typed from an SMS is hard to get wrong.
    """
    return _random_string(ACCESS_CODE_ALPHABET, length)


def generate_stream_password(length: int = STREAM_PASSWORD_LENGTH) -> str:
    """Generate a new livestream (Vimeo) password."""
    return _random_string(STREAM_PASSWORD_ALPHABET, length)


def get_password_hash(password: str) -> str:
    """Hash a password using Argon2."""
    return ph.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    """Verify a password against its Argon2 hash."""
    try:
        ph.verify(password_hash, password)
        return True
    except (argon2.exceptions.VerifyMismatchError, argon2.exceptions.InvalidHashError):
        return False


def verify_app_password(password: str) -> bool:
    """Verify the app-wide static password.

    Supports both hashed values (starting with $argon2) and plaintext.
    Returns False when APP_PASSWORD is not configured.
    """
    stored_password = config.settings.APP_PASSWORD
    if not stored_password:
        return False

    if stored_password.startswith("$argon2"):
        return verify_password(password, stored_password)
    return secrets.compare_digest(password.encode(), stored_password.encode())


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Create a JWT access token."""
    to_encode = data.copy()
    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(minutes=config.settings.ACCESS_TOKEN_EXPIRE_MINUTES)

    to_encode.update({"exp": expire})
    encoded_jwt = jwt.encode(to_encode, config.settings.SECRET_KEY, algorithm=config.settings.ALGORITHM)
    return encoded_jwt


def verify_staff_token(request: Request) -> dict:
    """Verify the staff JWT from its cookie and return the payload."""
    token = request.cookies.get(STAFF_COOKIE_NAME)

    if not token:
        raise HTTPException(status_code=401, detail="Not authenticated")

    try:
        payload = jwt.decode(token, config.settings.SECRET_KEY, algorithms=[config.settings.ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise HTTPException(status_code=401, detail="Token expired")
    except jwt.PyJWTError:
        raise HTTPException(status_code=401, detail="Invalid token")

    if not payload.get("sub"):
        raise HTTPException(status_code=401, detail="Invalid token")
    return payload
