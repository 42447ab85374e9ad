"""Auth router — registration, login, and user info."""

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from coursehub.config import settings
from coursehub.database import get_db
from coursehub.middleware.auth import create_access_token, get_current_user
from coursehub.middleware.rate_limit import limiter
from coursehub.models.user import User
from coursehub.routers.responses import raise_for_result, user_to_response
from coursehub.schemas.auth import RegisterRequest, LoginRequest, TokenResponse, UserResponse
from coursehub.services import identity_service

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/register", response_model=UserResponse, status_code=201)
def register(req: RegisterRequest, db: Session = Depends(get_db)):
    """Register a new Student or Instructor."""
    result = raise_for_result(identity_service.register(
        db,
        email=req.email,
        password=req.password,
        first_name=req.first_name,
        last_name=req.last_name,
        role=req.role,
    ))
    return user_to_response(result.get("user"))


@router.post("/login", response_model=TokenResponse)
@limiter.limit(settings.LOGIN_RATE_LIMIT)
def login(request: Request, req: LoginRequest, db: Session = Depends(get_db)):
    """Login and get a JWT carrying the role chosen for this session."""
    result = raise_for_result(identity_service.authenticate(db, req.email, req.password))
    user = result.get("user")
    acting_role = identity_service.resolve_session_role(user, req.acting_role)
    token = create_access_token({"sub": user.id, "role": user.role, "acting_role": acting_role})
    return TokenResponse(access_token=token, acting_role=acting_role)


@router.get("/me", response_model=UserResponse)
def get_me(current_user: User = Depends(get_current_user)):
    """Get current user info."""
    return user_to_response(current_user)
