"""User schemas for request/response validation."""

from datetime import date, datetime
from enum import Enum
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field, field_validator


class UserRole(str, Enum):
    """User role enumeration."""

    PATIENT = "Patient"
    DOCTOR = "Doctor"
    ADMIN = "Admin"


class UserBase(BaseModel):
    """Base user schema with common fields."""

    name: str = Field(..., min_length=1, max_length=200)
    email: EmailStr
    phone: str | None = Field(None, max_length=20)
    address: str | None = None
    gender: str | None = Field(None, max_length=20)
    dob: date | None = None


class UserCreate(UserBase):
    """Schema for creating a new user."""

    password: str = Field(..., min_length=6, max_length=72)
    role: UserRole = UserRole.PATIENT


class UserRegister(UserCreate):
    """Schema for public self-registration. Admin accounts are granted, not claimed."""

    @field_validator("role")
    @classmethod
    def reject_admin(cls, value: UserRole) -> UserRole:
        if value == UserRole.ADMIN:
            raise ValueError("Admin accounts cannot be self-registered")
        return value


class UserUpdate(BaseModel):
    """Schema for updating user profile."""

    name: str | None = Field(None, min_length=1, max_length=200)
    phone: str | None = Field(None, max_length=20)
    address: str | None = None
    gender: str | None = Field(None, max_length=20)
    dob: date | None = None


class UserResponse(UserBase):
    """User schema for API responses."""

    id: UUID
    role: UserRole
    created_at: datetime | None = None

    model_config = {"from_attributes": True}


class UserMessageResponse(BaseModel):
    """User payload with a status message."""

    message: str
    user: UserResponse


class UserListResponse(BaseModel):
    """Response schema for user listing."""

    users: list[UserResponse]
    total: int
