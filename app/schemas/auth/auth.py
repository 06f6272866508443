# app/schemas/auth/auth.py
from pydantic import BaseModel, Field
from typing import Optional

from ..users.user import UserResponse


class LoginRequest(BaseModel):
    email: str = Field(..., min_length=3, max_length=255)
    password: str = Field(..., min_length=1)


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserResponse


class SessionResponse(BaseModel):
    user: Optional[UserResponse] = None
    role: Optional[str] = None
