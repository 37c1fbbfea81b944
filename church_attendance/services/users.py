"""Staff accounts and sign-in."""
from typing import Any, Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from church_attendance.core import config
from church_attendance.core.constants import MIN_PASSWORD_LENGTH, MIN_USERNAME_LENGTH
from church_attendance.core.exceptions import (
    AuthError,
    ConflictError,
    InternalError,
    NotFoundError,
    ValidationError,
)
from church_attendance.core.logging_config import get_logger
from church_attendance.core.security import get_password_hash, verify_app_password, verify_password
from church_attendance.core.utils import isoformat_or_none
from church_attendance.db.models import User

logger = get_logger(__name__)


def serialize_user(user: User) -> Dict[str, Any]:
    return {
        "id": user.id,
        "username": user.username,
        "displayName": user.display_name,
        "isAdmin": user.is_admin,
        "createdAt": isoformat_or_none(user.created_at),
    }


def _validate_username(username: Optional[str]) -> str:
    if not username or len(username.strip()) < MIN_USERNAME_LENGTH:
        raise ValidationError(f"Username must be at least {MIN_USERNAME_LENGTH} characters")
    return username.strip().lower()


def _validate_password(password: Optional[str], label: str = "Password") -> str:
    if not password or len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"{label} must be at least {MIN_PASSWORD_LENGTH} characters")
    return password


def count_users(db: Session) -> int:
    return db.query(func.count(User.id)).scalar() or 0


def check_setup(db: Session) -> Dict[str, bool]:
    has_users = count_users(db) > 0
    return {"hasUsers": has_users, "needsSetup": not has_users}


def setup_first_admin(
    db: Session,
    setup_password: Optional[str],
    username: Optional[str],
    new_password: Optional[str],
    display_name: Optional[str] = None,
) -> User:
    """
    Create the first admin account.

    Allowed only while no user exists, and only with the app-wide setup
    password (``APP_PASSWORD``).
    """
    if count_users(db) > 0:
        raise ConflictError("Setup already complete. Users exist.")

    if not config.settings.APP_PASSWORD:
        raise InternalError("APP_PASSWORD not configured")

    if not setup_password or not verify_app_password(setup_password):
        raise AuthError("Invalid setup password")

    normalized = _validate_username(username)
    _validate_password(new_password)

    user = User(
        username=normalized,
        password_hash=get_password_hash(new_password),
        display_name=display_name or username,
        is_admin=True,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("admin_setup_completed", user_id=user.id)
    return user


def authenticate(db: Session, username: Optional[str], password: Optional[str]) -> User:
    if not username or not password:
        raise ValidationError("Username and password required")

    user = db.query(User).filter(User.username == username.strip().lower()).first()
    if user is None or not verify_password(password, user.password_hash):
        logger.warning("login_failed")
        raise AuthError("Invalid username or password", details={"success": False})

    logger.info("login_succeeded", user_id=user.id)
    return user


def list_users(db: Session) -> List[User]:
    return db.query(User).order_by(User.created_at.desc(), User.id.desc()).all()


def _ensure_username_free(db: Session, username: str, exclude_id: Optional[int] = None, message: str = "Username already exists") -> None:
    query = db.query(User.id).filter(User.username == username)
    if exclude_id is not None:
        query = query.filter(User.id != exclude_id)
    if query.first() is not None:
        raise ConflictError(message)


def create_user(
    db: Session,
    username: str,
    password: str,
    display_name: Optional[str] = None,
    is_admin: bool = False,
) -> User:
    normalized = _validate_username(username)
    _validate_password(password)
    _ensure_username_free(db, normalized)

    user = User(
        username=normalized,
        password_hash=get_password_hash(password),
        display_name=display_name or username,
        is_admin=is_admin,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("user_created", user_id=user.id, is_admin=is_admin)
    return user


def update_user(db: Session, user_id: int, changes: Dict[str, Any]) -> User:
    """
    Update a staff account.

    ``changes`` holds only the supplied keys. Changing the password needs
    ``current_password`` to match.
    """
    user = db.get(User, user_id)
    if user is None:
        raise NotFoundError("User not found")

    new_password = changes.get("new_password")
    if new_password:
        current_password = changes.get("current_password")
        if not current_password:
            raise ValidationError("Current password required to change password")
        if not verify_password(current_password, user.password_hash):
            raise AuthError("Current password is incorrect")
        _validate_password(new_password, label="New password")
        user.password_hash = get_password_hash(new_password)

    if "display_name" in changes:
        user.display_name = changes["display_name"]
    if changes.get("is_admin") is not None:
        user.is_admin = changes["is_admin"]
    if changes.get("username") is not None:
        normalized = _validate_username(changes["username"])
        _ensure_username_free(db, normalized, exclude_id=user.id, message="Username already taken")
        user.username = normalized

    db.commit()
    db.refresh(user)
    logger.info("user_updated", user_id=user.id, password_changed=bool(new_password))
    return user


def delete_user(db: Session, user_id: int) -> None:
    """Delete a staff account. The last admin cannot be deleted."""
    user = db.get(User, user_id)
    if user is None:
        raise NotFoundError("User not found")

    if user.is_admin:
        admin_count = db.query(func.count(User.id)).filter(User.is_admin.is_(True)).scalar()
        if admin_count <= 1:
            raise ConflictError("Cannot delete the last admin user")

    db.delete(user)
    db.commit()
    logger.info("user_deleted", user_id=user_id)
