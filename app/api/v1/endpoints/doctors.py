"""Doctor endpoints."""

from fastapi import APIRouter, Query, status

from app.dependencies import DatabaseSession, DoctorServiceDep, DoctorUser
from app.schemas.appointments import DoctorAppointmentListResponse, doctor_appointment_from_row
from app.schemas.dashboard import DoctorDashboardResponse
from app.schemas.doctors import (
    DoctorCreate,
    DoctorListItem,
    DoctorListResponse,
    DoctorMessageResponse,
    DoctorProfileResponse,
    DoctorResponse,
    DoctorUpdate,
)
from app.services.appointment_service import AppointmentService
from app.services.dashboard_service import DashboardService

router = APIRouter(prefix="/doctor", tags=["Doctors"])


@router.post("/details", response_model=DoctorMessageResponse, status_code=status.HTTP_201_CREATED)
async def create_doctor_details(
    doctor_data: DoctorCreate,
    current_user: DoctorUser,
    db: DatabaseSession,
    doctor_service: DoctorServiceDep,
):
    """Create the caller's doctor profile."""
    doctor = await doctor_service.create_doctor(db, current_user["id"], doctor_data)
    return DoctorMessageResponse(
        message="Doctor details saved successfully",
        doctor=DoctorResponse.model_validate(doctor),
    )


@router.put("/profile", response_model=DoctorProfileResponse)
async def update_doctor_profile(
    doctor_data: DoctorUpdate,
    current_user: DoctorUser,
    db: DatabaseSession,
    doctor_service: DoctorServiceDep,
):
    """
    Update the caller's doctor profile.

    A new ``fees`` value applies to every dashboard read from now on,
    including earnings of past completed appointments.
    """
    doctor = await doctor_service.update_profile(db, current_user["id"], doctor_data)
    return DoctorProfileResponse(
        message="Profile updated successfully",
        doctor=DoctorListItem.model_validate(doctor),
    )


@router.get("/all", response_model=DoctorListResponse)
async def list_doctors(
    db: DatabaseSession,
    doctor_service: DoctorServiceDep,
    specialization: str | None = Query(None, description="Filter by specialization"),
    search: str | None = Query(None, description="Search by name, specialization or qualification"),
):
    """List doctors. Public."""
    doctor_list = await doctor_service.list_doctors(db, specialization, search)
    return DoctorListResponse(
        doctors=[DoctorListItem.model_validate(d) for d in doctor_list],
        total=len(doctor_list),
    )


@router.get("/dashboard", response_model=DoctorDashboardResponse)
async def get_doctor_dashboard(current_user: DoctorUser, db: DatabaseSession):
    """Counters for the caller's practice."""
    stats = await DashboardService(db).doctor_stats(current_user["id"])
    return DoctorDashboardResponse.model_validate(stats)


@router.get("/appointments", response_model=DoctorAppointmentListResponse)
async def get_doctor_appointments(
    current_user: DoctorUser,
    db: DatabaseSession,
    doctor_service: DoctorServiceDep,
):
    """List the appointments booked with the caller."""
    rows = await AppointmentService(db, doctor_service).list_doctor_appointments(current_user["id"])
    return DoctorAppointmentListResponse(
        appointments=[doctor_appointment_from_row(row) for row in rows],
        total=len(rows),
    )
