"""Identity service.

Registration and credential checks for student accounts. Session handling
lives in ``core.security``; this module only deals with stored users.
"""
from typing import Optional
import logging
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from scholarship_advisor.core.errors import (
    AuthError,
    ConflictError,
    StorageError,
    ValidationError,
    INVALID_CREDENTIALS,
)
from scholarship_advisor.core.security import get_password_hash, verify_password
from scholarship_advisor.db.sessions import write_guard
from scholarship_advisor.models.user import User

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6


def normalize_email(email: str) -> str:
    return email.strip().lower()


def normalize_phone(phone: Optional[str]) -> Optional[str]:
    if phone is None:
        return None
    phone = phone.strip()
    return phone or None


def _is_blank(value: Optional[str]) -> bool:
    return value is None or not str(value).strip()


def register_user(
    db: Session,
    name: Optional[str],
    email: Optional[str],
    password: Optional[str],
    phone: Optional[str] = None,
) -> User:
    """Create a user with the next integer id.

    Raises ValidationError for missing fields or a short password and
    ConflictError when the email or phone is already taken.
    """
    if _is_blank(name) or _is_blank(email) or not password:
        raise ValidationError("Name, email, and password are required")
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")

    email_normalized = normalize_email(email)
    phone_normalized = normalize_phone(phone)
    password_hash = get_password_hash(password)

    with write_guard():
        try:
            if db.query(User.id).filter(User.email == email_normalized).first():
                raise ConflictError("User with this email already exists")
            if phone_normalized and db.query(User.id).filter(User.phone == phone_normalized).first():
                raise ConflictError("User with this phone already exists")

            max_id = db.query(func.max(User.id)).scalar()
            user = User(
                id=(max_id or 0) + 1,
                name=name.strip(),
                email=email_normalized,
                phone=phone_normalized,
                password_hash=password_hash,
            )
            db.add(user)
            db.commit()
        except IntegrityError as exc:
            # Another process won the race on a unique column
            db.rollback()
            logger.warning("Registration conflict for %s: %s", email_normalized, exc.orig)
            raise ConflictError("User with this email or phone already exists") from exc
        except SQLAlchemyError as exc:
            db.rollback()
            logger.exception("Failed to store new user")
            raise StorageError("Server error during registration") from exc

    db.refresh(user)
    logger.info("Registered user %s (id=%s)", user.email, user.id)
    return user


def authenticate_user(db: Session, email: Optional[str], password: Optional[str]) -> User:
    """Return the user for valid credentials.

    An unknown email and a wrong password fail identically so the response
    does not reveal which emails are registered.
    """
    if _is_blank(email) or not password:
        raise ValidationError("Email and password are required")

    try:
        user = db.query(User).filter(User.email == normalize_email(email)).first()
    except SQLAlchemyError as exc:
        logger.exception("Failed to look up user for login")
        raise StorageError("Server error during login") from exc

    if user is None or not verify_password(password, user.password_hash):
        logger.info("Failed login attempt")
        raise AuthError(INVALID_CREDENTIALS)
    return user


def resolve_current_user(db: Session, user_id: Optional[int]) -> Optional[User]:
    """Look up the user bound to a session, None if absent."""
    if user_id is None:
        return None
    try:
        return db.query(User).filter(User.id == user_id).first()
    except SQLAlchemyError as exc:
        logger.exception("Failed to resolve user %s", user_id)
        raise StorageError("Server error resolving user") from exc
