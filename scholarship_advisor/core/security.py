"""Security utilities for password hashing and login sessions."""
import logging
import secrets
from datetime import datetime, timedelta, timezone
from threading import Lock
from typing import Dict, Optional, Tuple
from jose import JWTError, jwt
from passlib.context import CryptContext
from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from scholarship_advisor.core.config import settings
from scholarship_advisor.core.errors import AuthError, AUTH_REQUIRED
from scholarship_advisor.db.sessions import get_db
from scholarship_advisor.models.user import User

logger = logging.getLogger(__name__)

# Password hashing context
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

# Bearer scheme that tolerates a missing header so the cookie can be used instead
security = HTTPBearer(auto_error=False)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a plain password against a hashed password."""
    try:
        return pwd_context.verify(_truncate_for_bcrypt(plain_password), hashed_password)
    except (ValueError, TypeError):
        # Unknown or corrupt hash format counts as a mismatch
        logger.warning("Stored password hash could not be verified")
        return False


def get_password_hash(password: str) -> str:
    """Hash a password."""
    return pwd_context.hash(_truncate_for_bcrypt(password))


def _truncate_for_bcrypt(password: str) -> str:
    """Truncate password to bcrypt's 72-byte limit.

    Truncation happens on the UTF-8 bytes and decodes with 'ignore' so a
    multi-byte character is never split.
    """
    if not isinstance(password, str):
        return password
    b = password.encode("utf-8")[:72]
    return b.decode("utf-8", "ignore")


class SessionStore:
    """In-process registry of live login sessions.

    A session id maps to (user_id, expires_at). Sessions are never written
    to durable storage; restarting the process logs everybody out.
    """

    def __init__(self, lifetime: timedelta):
        self.lifetime = lifetime
        self._sessions: Dict[str, Tuple[int, datetime]] = {}
        self._lock = Lock()

    def open(self, user_id: int) -> Tuple[str, datetime]:
        session_id = secrets.token_urlsafe(32)
        expires_at = datetime.now(timezone.utc) + self.lifetime
        with self._lock:
            self._purge_expired()
            self._sessions[session_id] = (user_id, expires_at)
        return session_id, expires_at

    def resolve(self, session_id: str) -> Optional[int]:
        with self._lock:
            entry = self._sessions.get(session_id)
            if entry is None:
                return None
            user_id, expires_at = entry
            if expires_at <= datetime.now(timezone.utc):
                del self._sessions[session_id]
                return None
            return user_id

    def revoke(self, session_id: Optional[str]) -> None:
        """Forget a session; unknown ids are ignored."""
        if not session_id:
            return
        with self._lock:
            self._sessions.pop(session_id, None)

    def clear(self) -> None:
        with self._lock:
            self._sessions.clear()

    def _purge_expired(self) -> None:
        now = datetime.now(timezone.utc)
        for sid in [sid for sid, (_, exp) in self._sessions.items() if exp <= now]:
            del self._sessions[sid]


session_store = SessionStore(timedelta(minutes=settings.SESSION_EXPIRE_MINUTES))


def create_session_token(user_id: int) -> str:
    """Open a session for the user and wrap its id in a signed token."""
    session_id, expire = session_store.open(user_id)
    to_encode = {"sub": str(user_id), "sid": session_id, "exp": expire}
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_session_token(token: str) -> Optional[dict]:
    """Decode a session token, returning None when it is invalid or expired."""
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        return None


def revoke_session_token(token: Optional[str]) -> None:
    if not token:
        return
    payload = decode_session_token(token)
    if payload:
        session_store.revoke(payload.get("sid"))


def get_session_token(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> Optional[str]:
    """Session token from the Bearer header, falling back to the session cookie."""
    if credentials is not None:
        return credentials.credentials
    return request.cookies.get(settings.SESSION_COOKIE_NAME)


def get_current_user_id(token: Optional[str] = Depends(get_session_token)) -> int:
    """
    Dependency resolving the live session to a user id.

    Usage:
        @router.get("/protected")
        def protected_route(user_id: int = Depends(get_current_user_id)):
            return {"user_id": user_id}
    """
    if not token:
        raise AuthError(AUTH_REQUIRED)
    payload = decode_session_token(token)
    if payload is None:
        raise AuthError(AUTH_REQUIRED)

    user_id = session_store.resolve(payload.get("sid", ""))
    if user_id is None or str(user_id) != payload.get("sub"):
        raise AuthError(AUTH_REQUIRED)
    return user_id


def get_current_user(
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> Optional[User]:
    """The user bound to the session, or None if that user no longer exists."""
    return db.query(User).filter(User.id == user_id).first()
