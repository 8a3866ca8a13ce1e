"""
User Pydantic schemas for request/response validation
"""
from pydantic import BaseModel, field_validator
from typing import Optional

from cinegrok.app.core.config import EMAIL_PATTERN


class UserSignup(BaseModel):
    """Schema for user signup"""
    email: str
    password: str
    full_name: Optional[str] = None

    @field_validator("email")
    @classmethod
    def _email_shape(cls, value: str) -> str:
        value = value.strip().lower()
        if not EMAIL_PATTERN.match(value):
            raise ValueError("Invalid email address")
        return value

    @field_validator("password")
    @classmethod
    def _password_length(cls, value: str) -> str:
        if len(value) < 6:
            raise ValueError("Password must be at least 6 characters")
        return value


class UserLogin(BaseModel):
    """Schema for user login"""
    email: str
    password: str


class UserResponse(BaseModel):
    """Schema for user response"""
    id: Optional[int] = None
    email: str
    full_name: Optional[str] = None

    class Config:
        from_attributes = True


class SessionUser(UserResponse):
    """User as reported by /api/auth/me"""
    hasProfile: bool = False
    filmmakerId: Optional[str] = None


class TokenResponse(BaseModel):
    """Schema for token response"""
    access_token: str
    token_type: str = "bearer"
    user: UserResponse
    message: Optional[str] = None  # e.g. "User registered successfully" or "Login successful"


class SessionResponse(BaseModel):
    user: Optional[SessionUser] = None
