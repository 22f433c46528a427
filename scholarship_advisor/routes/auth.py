"""Authentication routes."""
import logging
from typing import Optional
from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session
from pydantic import BaseModel

from scholarship_advisor.db.sessions import get_db
from scholarship_advisor.models.user import User, isoformat_utc
from scholarship_advisor.core.errors import NotFoundError, USER_NOT_FOUND
from scholarship_advisor.core.security import (
    create_session_token,
    get_current_user,
    get_session_token,
    revoke_session_token,
)
from scholarship_advisor.core.config import settings
from scholarship_advisor.services.identity import authenticate_user, register_user


logger = logging.getLogger(__name__)

router = APIRouter(tags=["Authentication"])


# Request/Response schemas
class RegisterRequest(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    password: Optional[str] = None


class LoginRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


class SessionResponse(BaseModel):
    success: bool = True
    message: str
    access_token: str
    token_type: str = "bearer"


class UserResponse(BaseModel):
    id: int
    name: str
    email: str
    phone: Optional[str]
    created_at: str


def _start_session(response: Response, user_id: int) -> str:
    token = create_session_token(user_id)
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=token,
        max_age=settings.SESSION_EXPIRE_MINUTES * 60,
        httponly=True,
        secure=settings.COOKIE_SECURE,
        samesite="lax",
    )
    return token


@router.post("/register", response_model=SessionResponse, status_code=status.HTTP_201_CREATED)
def register(request: RegisterRequest, response: Response, db: Session = Depends(get_db)):
    """
    Register a new student account.

    - Creates user account with hashed password
    - Opens a session for the new user
    """
    user = register_user(
        db,
        name=request.name,
        email=request.email,
        password=request.password,
        phone=request.phone,
    )
    token = _start_session(response, user.id)
    return SessionResponse(message="Registration successful", access_token=token)


@router.post("/login", response_model=SessionResponse)
def login(request: LoginRequest, response: Response, db: Session = Depends(get_db)):
    """
    Login with email and password.

    - Validates credentials
    - Opens a session
    """
    user = authenticate_user(db, request.email, request.password)
    token = _start_session(response, user.id)
    logger.info("User %s logged in", user.id)
    return SessionResponse(message="Login successful", access_token=token)


@router.api_route("/logout", methods=["GET", "POST"])
def logout(response: Response, token: Optional[str] = Depends(get_session_token)):
    """End the current session. Safe to call without one."""
    revoke_session_token(token)
    response.delete_cookie(settings.SESSION_COOKIE_NAME)
    return {"success": True, "message": "Logged out"}


@router.get("/me")
def get_me(current_user: Optional[User] = Depends(get_current_user)):
    """
    Get current authenticated user information.

    Protected endpoint - requires a live session.
    """
    if current_user is None:
        raise NotFoundError(USER_NOT_FOUND)
    profile = UserResponse(
        id=current_user.id,
        name=current_user.name,
        email=current_user.email,
        phone=current_user.phone,
        created_at=isoformat_utc(current_user.created_at),
    )
    return {"success": True, "data": profile}
