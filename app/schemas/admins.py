"""Admin account schemas for request/response validation."""

from datetime import datetime
from enum import Enum
from uuid import UUID

from pydantic import BaseModel


class AdminPermission(str, Enum):
    """Permission names stored on an admin record."""

    VIEW_APPOINTMENTS = "view_appointments"
    MANAGE_APPOINTMENTS = "manage_appointments"
    VIEW_USERS = "view_users"
    MANAGE_USERS = "manage_users"
    VIEW_DOCTORS = "view_doctors"
    MANAGE_ADMINS = "manage_admins"


DEFAULT_ADMIN_PERMISSIONS = [
    AdminPermission.VIEW_APPOINTMENTS,
    AdminPermission.MANAGE_APPOINTMENTS,
    AdminPermission.VIEW_USERS,
    AdminPermission.VIEW_DOCTORS,
]


class AdminCreate(BaseModel):
    """Schema for promoting an existing user to admin."""

    user_id: UUID
    permissions: list[AdminPermission] | None = None


class AdminPermissionsUpdate(BaseModel):
    """Schema for replacing an admin's permissions."""

    permissions: list[AdminPermission]


class AdminRecord(BaseModel):
    """Admin record as returned after promotion."""

    id: UUID
    user_id: UUID
    permissions: list[AdminPermission]


class AdminListItem(BaseModel):
    """Admin record joined with the account's contact details."""

    id: UUID
    user_id: UUID
    name: str = "Unknown"
    email: str = "Unknown"
    phone: str | None = None
    role: str = "Admin"
    permissions: list[AdminPermission]
    created_at: datetime | None = None


class AdminMessageResponse(BaseModel):
    """Admin payload with a status message."""

    message: str
    admin: AdminRecord


class AdminDetailResponse(BaseModel):
    """Admin list item with a status message."""

    message: str
    admin: AdminListItem


class AdminListResponse(BaseModel):
    """Response schema for admin listing."""

    admins: list[AdminListItem]
    total: int
