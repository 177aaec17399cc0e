"""Patient booking endpoint."""

from fastapi import APIRouter, status

from app.dependencies import DatabaseSession, DoctorServiceDep, PatientUser
from app.schemas.appointments import AppointmentBook, AppointmentSummary, BookingResponse
from app.services.appointment_service import AppointmentService

router = APIRouter()


@router.post(
    "/book-appointment",
    response_model=BookingResponse,
    status_code=status.HTTP_201_CREATED,
    tags=["Appointments"],
    summary="Book an appointment",
)
async def book_appointment(
    data: AppointmentBook,
    current_user: PatientUser,
    db: DatabaseSession,
    doctor_service: DoctorServiceDep,
) -> BookingResponse:
    """
    Book a doctor's time slot for the authenticated patient.

    The appointment starts out Pending. A slot already held by a Pending or
    Confirmed appointment is rejected.

    Args:
        data: Doctor, date and time of the requested slot
        current_user: Authenticated patient
        db: Database session
        doctor_service: Doctor lookups

    Returns:
        Created appointment
    """
    service = AppointmentService(db, doctor_service)
    appointment = await service.book_appointment(current_user["id"], data)

    return BookingResponse(
        message="Appointment booked successfully",
        appointment=AppointmentSummary.model_validate(appointment),
    )
