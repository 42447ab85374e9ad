"""Auth request/response schemas."""

from typing import Optional

from pydantic import BaseModel


class RegisterRequest(BaseModel):
    email: str
    password: str
    first_name: str
    last_name: str = ""
    role: str = "Student"  # Student | Instructor


class LoginRequest(BaseModel):
    email: str
    password: str
    acting_role: Optional[str] = None  # an Instructor may pick "Student" for this session


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    acting_role: str


class UserResponse(BaseModel):
    id: str
    email: str
    first_name: str
    last_name: str
    full_name: str
    role: str
    is_banned: bool
    created_at: Optional[str]

    class Config:
        from_attributes = True
