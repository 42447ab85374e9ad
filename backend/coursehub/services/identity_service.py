"""Identity service — registration, credential checks, roles and bans."""

import logging
import re
from typing import Optional

from sqlalchemy.orm import Session

from coursehub.config import settings
from coursehub.errors import AuthorizationError, ConflictError, NotFoundError, ValidationError
from coursehub.middleware.auth import hash_password, verify_password
from coursehub.models.user import User, UserRole
from coursehub.services import audit
from coursehub.services.result import OperationResult, service_operation

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
ROLE_VALUES = [r.value for r in UserRole]


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def get_user(db: Session, user_id: str) -> Optional[User]:
    return db.query(User).filter(User.id == user_id).first()


def get_user_by_email(db: Session, email: str) -> Optional[User]:
    return db.query(User).filter(User.email == normalize_email(email)).first()


def _require_user(db: Session, user_id: str) -> User:
    user = get_user(db, user_id)
    if not user:
        raise NotFoundError("User not found.")
    return user


def _check_password(password: str) -> None:
    if not password or len(password) < settings.MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password must be at least {settings.MIN_PASSWORD_LENGTH} characters.")


@service_operation
def register(
    db: Session,
    email: str,
    password: str,
    first_name: str,
    last_name: str,
    role: str = UserRole.student.value,
) -> OperationResult:
    """Register a new Student or Instructor account."""
    email = normalize_email(email)
    if not EMAIL_PATTERN.match(email):
        raise ValidationError("Invalid email format.")
    if get_user_by_email(db, email):
        raise ConflictError("An account with this email already exists.")
    _check_password(password)
    role = role or UserRole.student.value
    if role not in ROLE_VALUES:
        raise ValidationError(f"Role must be one of: {', '.join(ROLE_VALUES)}.")
    if role == UserRole.admin.value:
        raise AuthorizationError("Admin accounts can only be created by existing admins.")

    user = User(
        email=email,
        password_hash=hash_password(password),
        first_name=first_name or "",
        last_name=last_name or "",
        role=role,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("Registered %s as %s", user.id, user.role)
    return OperationResult.ok("Registration successful!", user=user)


@service_operation
def authenticate(db: Session, email: str, password: str) -> OperationResult:
    """Verify credentials; banned accounts cannot log in."""
    user = get_user_by_email(db, email)
    if not user:
        raise NotFoundError("No account found with that email.")
    if user.is_banned:
        raise AuthorizationError("This account has been banned. Contact support.")
    if not verify_password(password, user.password_hash):
        raise AuthorizationError("Incorrect password.")
    return OperationResult.ok(f"Welcome back, {user.full_name}!", user=user)


def resolve_session_role(user: User, chosen_role: Optional[str] = None) -> str:
    """Role a user acts under for one session.

    Instructors may choose to act as students (browse, enroll, review) without
    their stored role changing. Any other choice falls back to the stored role.
    """
    if user.role == UserRole.instructor.value and chosen_role == UserRole.student.value:
        return UserRole.student.value
    return user.role


def list_users(db: Session, role: Optional[str] = None) -> list[dict]:
    query = db.query(User)
    if role:
        query = query.filter(User.role == role)
    return [u.to_safe_dict() for u in query.order_by(User.created_at.asc()).all()]


@service_operation
def change_role(db: Session, user_id: str, new_role: str, actor_id: Optional[str] = None) -> OperationResult:
    """Admin: move a user to another role."""
    if new_role not in ROLE_VALUES:
        raise ValidationError(f"Role must be one of: {', '.join(ROLE_VALUES)}.")
    user = _require_user(db, user_id)
    old_role = user.role
    user.role = new_role
    audit.record(db, "user", user.id, "role_changed", actor_id,
                 old_data={"role": old_role}, new_data={"role": new_role})
    db.commit()
    logger.info("User %s role %s -> %s", user.id, old_role, new_role)
    return OperationResult.ok(f"{user.full_name} is now a {new_role}.", user=user)


@service_operation
def toggle_ban(db: Session, user_id: str, actor_id: Optional[str] = None) -> OperationResult:
    """Admin: ban or unban a user. Admins cannot be banned."""
    user = _require_user(db, user_id)
    if user.role == UserRole.admin.value:
        raise AuthorizationError("Cannot ban an admin.")
    user.is_banned = not user.is_banned
    action = "banned" if user.is_banned else "unbanned"
    audit.record(db, "user", user.id, action, actor_id, new_data={"is_banned": user.is_banned})
    db.commit()
    logger.info("User %s %s", user.id, action)
    return OperationResult.ok(f"{user.full_name} has been {action}.", user=user)


@service_operation
def reset_password(db: Session, user_id: str, new_password: str, actor_id: Optional[str] = None) -> OperationResult:
    """Admin: replace a user's password."""
    user = _require_user(db, user_id)
    _check_password(new_password)
    user.password_hash = hash_password(new_password)
    audit.record(db, "user", user.id, "password_reset", actor_id)
    db.commit()
    return OperationResult.ok(f"Password reset for {user.full_name}.")


def ensure_default_admin(db: Session) -> User:
    """Seed the configured admin account if it does not exist yet."""
    user = get_user_by_email(db, settings.DEFAULT_ADMIN_EMAIL)
    if not user:
        user = User(
            email=normalize_email(settings.DEFAULT_ADMIN_EMAIL),
            password_hash=hash_password(settings.DEFAULT_ADMIN_PASSWORD),
            first_name="Platform",
            last_name="Admin",
            role=UserRole.admin.value,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        logger.info("Seeded default admin account %s", user.email)
    return user
