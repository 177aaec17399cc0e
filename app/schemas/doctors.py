"""Doctor schemas for request/response validation."""

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field, field_serializer


class DoctorBase(BaseModel):
    """Base schema for doctor."""

    specialization: str | None = Field(None, max_length=200)
    qualification: str | None = None
    experience: int | None = Field(None, ge=0)
    fees: Decimal = Field(Decimal("0"), ge=0, decimal_places=2)
    profile_pic: str | None = None


class DoctorCreate(DoctorBase):
    """Schema for creating the caller's doctor profile."""


class DoctorUpdate(BaseModel):
    """Schema for updating a doctor profile and the linked user contact fields."""

    specialization: str | None = Field(None, max_length=200)
    qualification: str | None = None
    experience: int | None = Field(None, ge=0)
    fees: Decimal | None = Field(None, ge=0, decimal_places=2)
    profile_pic: str | None = None
    # User fields
    name: str | None = Field(None, min_length=1, max_length=200)
    email: EmailStr | None = None
    phone: str | None = Field(None, max_length=20)
    address: str | None = None


class DoctorResponse(DoctorBase):
    """Doctor response schema."""

    id: UUID
    user_id: UUID
    created_at: datetime | None = None

    model_config = {"from_attributes": True}

    @field_serializer("fees", when_used="json")
    def serialize_decimal(self, value: Decimal) -> float:
        """Serialize Decimal to float for JSON."""
        return float(value)


class DoctorMessageResponse(BaseModel):
    """Doctor payload with a status message."""

    message: str
    doctor: DoctorResponse


class DoctorListItem(DoctorResponse):
    """Doctor schema for list responses."""

    name: str = "Unknown"
    email: str = ""
    phone: str | None = None
    address: str | None = None


class DoctorListResponse(BaseModel):
    """Doctor listing."""

    doctors: list[DoctorListItem]
    total: int


class DoctorProfileResponse(BaseModel):
    """Updated doctor profile with contact details."""

    message: str
    doctor: DoctorListItem
