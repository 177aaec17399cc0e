"""Appointment schemas for request/response validation."""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from uuid import UUID

from pydantic import BaseModel, Field, field_serializer


class AppointmentStatus(str, Enum):
    """Appointment status enumeration."""

    PENDING = "Pending"
    CONFIRMED = "Confirmed"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"
    REJECTED = "Rejected"
    EXPIRED = "Expired"


# Statuses that block a new booking for the same slot
ACTIVE_HOLD_STATUSES = (AppointmentStatus.PENDING.value, AppointmentStatus.CONFIRMED.value)

# Statuses the expiry sweep never touches
TERMINAL_STATUSES = (
    AppointmentStatus.COMPLETED.value,
    AppointmentStatus.CANCELLED.value,
    AppointmentStatus.EXPIRED.value,
)

# Statuses counted as a completed visit (legacy labels included)
COMPLETED_STATUSES = (AppointmentStatus.COMPLETED.value, "Done", "Approved")


class BookingBase(BaseModel):
    """Fields shared by patient and admin bookings."""

    doctor_id: UUID
    date: date
    time: str = Field(..., min_length=1, max_length=20)
    symptoms: str = Field("", max_length=2000)
    notes: str = Field("", max_length=2000)

    model_config = {"str_strip_whitespace": True}


class AppointmentBook(BookingBase):
    """Schema for a patient booking request."""


class AdminAppointmentCreate(BookingBase):
    """Schema for an admin booking on behalf of a user."""

    user_id: UUID
    status: AppointmentStatus = AppointmentStatus.CONFIRMED


class AppointmentStatusUpdate(BaseModel):
    """Schema for updating appointment status."""

    status: AppointmentStatus


class AppointmentSummary(BaseModel):
    """Minimal appointment view returned after a booking."""

    id: UUID
    doctor_id: UUID
    date: date
    time: str
    status: AppointmentStatus

    model_config = {"from_attributes": True}


class BookingResponse(BaseModel):
    """Response for a successful patient booking."""

    message: str
    appointment: AppointmentSummary


class PartySummary(BaseModel):
    """Patient or doctor contact block embedded in appointment views."""

    id: UUID | None = None
    name: str = "Unknown"
    email: str = "Unknown"
    phone: str = "Unknown"


class DoctorPartySummary(PartySummary):
    """Doctor contact block with practice details."""

    specialization: str = "Unknown"
    fees: Decimal = Decimal("0")

    @field_serializer("fees", when_used="json")
    def serialize_fees(self, value: Decimal) -> float:
        """Serialize Decimal to float for JSON."""
        return float(value)


class AppointmentDetail(BaseModel):
    """Appointment with patient and doctor details (admin views)."""

    id: UUID
    date: date
    time: str
    status: AppointmentStatus
    symptoms: str = ""
    notes: str = ""
    patient: PartySummary
    doctor: DoctorPartySummary
    created_at: datetime | None = None


class AdminAppointmentResponse(BaseModel):
    """Response wrapping a single admin-visible appointment."""

    message: str
    appointment: AppointmentDetail


class AdminAppointmentListResponse(BaseModel):
    """Response schema for admin appointment listing."""

    appointments: list[AppointmentDetail]
    total: int


class DoctorAppointmentItem(BaseModel):
    """Appointment as seen by the treating doctor."""

    id: UUID
    patient: str
    patient_email: str = ""
    patient_phone: str = ""
    date: date
    time: str
    status: AppointmentStatus
    symptoms: str = ""
    notes: str = ""
    created_at: datetime | None = None


class DoctorAppointmentListResponse(BaseModel):
    """List of a doctor's appointments."""

    appointments: list[DoctorAppointmentItem]
    total: int


class PatientAppointmentItem(BaseModel):
    """Appointment as seen by the patient who booked it."""

    id: UUID
    doctor_id: UUID
    doctor_name: str = "Unknown"
    date: date
    time: str
    status: AppointmentStatus
    symptoms: str = ""
    notes: str = ""
    specialization: str = "Unknown"
    fees: Decimal = Decimal("0")
    created_at: datetime | None = None

    @field_serializer("fees", when_used="json")
    def serialize_fees(self, value: Decimal) -> float:
        """Serialize Decimal to float for JSON."""
        return float(value)


class PatientAppointmentListResponse(BaseModel):
    """List of a patient's appointments."""

    appointments: list[PatientAppointmentItem]
    total: int


class ExpirySweepResponse(BaseModel):
    """Result of an explicit expiry sweep."""

    message: str
    modified_count: int


def appointment_detail_from_row(row: dict) -> AppointmentDetail:
    """Shape a joined appointment row for admin views."""
    return AppointmentDetail(
        id=row["id"],
        date=row["date"],
        time=row["time"],
        status=row["status"],
        symptoms=row["symptoms"] or "",
        notes=row["notes"] or "",
        patient=PartySummary(
            id=row["patient_id"],
            name=row["patient_name"] or "Unknown",
            email=row["patient_email"] or "Unknown",
            phone=row["patient_phone"] or "Unknown",
        ),
        doctor=DoctorPartySummary(
            id=row["doctor_id"],
            name=row["doctor_name"] or "Unknown",
            email=row["doctor_email"] or "Unknown",
            phone=row["doctor_phone"] or "Unknown",
            specialization=row["specialization"] or "Unknown",
            fees=row["fees"] or 0,
        ),
        created_at=row["created_at"],
    )


def doctor_appointment_from_row(row: dict) -> DoctorAppointmentItem:
    """Shape a joined appointment row for the treating doctor."""
    return DoctorAppointmentItem(
        id=row["id"],
        patient=row["patient_name"] or "Unknown Patient",
        patient_email=row["patient_email"] or "",
        patient_phone=row["patient_phone"] or "",
        date=row["date"],
        time=row["time"],
        status=row["status"],
        symptoms=row["symptoms"] or "",
        notes=row["notes"] or "",
        created_at=row["created_at"],
    )


def patient_appointment_from_row(row: dict) -> PatientAppointmentItem:
    """Shape a joined appointment row for the booking patient."""
    return PatientAppointmentItem(
        id=row["id"],
        doctor_id=row["doctor_id"],
        doctor_name=row["doctor_name"] or "Unknown",
        date=row["date"],
        time=row["time"],
        status=row["status"],
        symptoms=row["symptoms"] or "",
        notes=row["notes"] or "",
        specialization=row["specialization"] or "Unknown",
        fees=row["fees"] or 0,
        created_at=row["created_at"],
    )
