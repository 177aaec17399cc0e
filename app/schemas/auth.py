"""Authentication schemas."""

from pydantic import BaseModel, EmailStr, Field

from app.schemas.users import UserResponse


class LoginRequest(BaseModel):
    """Email and password login request."""

    email: EmailStr
    password: str = Field(..., min_length=1)


class Token(BaseModel):
    """JWT token response schema."""

    access_token: str
    token_type: str = "bearer"


class LoginResponse(Token):
    """Login response with token and user info."""

    user: UserResponse
