"""Dashboard statistics schemas."""

from datetime import date
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, field_serializer

from app.schemas.admins import AdminPermission
from app.schemas.appointments import AppointmentStatus
from app.schemas.doctors import DoctorListItem
from app.schemas.users import UserResponse


class DoctorStats(BaseModel):
    """Counters shown on the doctor dashboard."""

    today_appointments: int
    total_patients: int
    upcoming_appointments: int
    earnings: Decimal

    @field_serializer("earnings", when_used="json")
    def serialize_earnings(self, value: Decimal) -> float:
        """Serialize Decimal to float for JSON."""
        return float(value)


class DoctorDashboardResponse(BaseModel):
    """Doctor dashboard payload."""

    doctor: DoctorListItem
    stats: DoctorStats


class PatientStats(BaseModel):
    """Counters shown on the patient dashboard."""

    total_visits: int
    upcoming_appointments: int
    total_bills: Decimal

    @field_serializer("total_bills", when_used="json")
    def serialize_bills(self, value: Decimal) -> float:
        """Serialize Decimal to float for JSON."""
        return float(value)


class RecentAppointment(BaseModel):
    """Compact appointment row for dashboards."""

    id: UUID
    date: date
    time: str
    status: AppointmentStatus
    patient: str = "Unknown"
    doctor: str = "Unknown"
    specialization: str = "Unknown"


class PatientDashboardResponse(BaseModel):
    """Patient dashboard payload."""

    user: UserResponse
    stats: PatientStats
    recent_appointments: list[RecentAppointment]


class AdminProfile(UserResponse):
    """Admin account with its granted permissions."""

    permissions: list[AdminPermission] = []


class AdminStats(BaseModel):
    """Global counters shown on the admin dashboard."""

    total_users: int
    total_doctors: int
    total_appointments: int
    pending_appointments: int
    confirmed_appointments: int
    completed_appointments: int
    cancelled_appointments: int
    rejected_appointments: int
    expired_appointments: int


class AdminDashboardResponse(BaseModel):
    """Admin dashboard payload."""

    admin: AdminProfile
    stats: AdminStats
    recent_appointments: list[RecentAppointment]
