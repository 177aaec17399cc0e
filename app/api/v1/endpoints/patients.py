"""Patient endpoints."""

from fastapi import APIRouter

from app.dependencies import DatabaseSession, PatientUser
from app.schemas.appointments import PatientAppointmentListResponse, patient_appointment_from_row
from app.schemas.dashboard import PatientDashboardResponse
from app.schemas.users import UserMessageResponse, UserResponse, UserUpdate
from app.services.appointment_service import AppointmentService
from app.services.dashboard_service import DashboardService
from app.services.user_service import UserService

router = APIRouter(prefix="/patient", tags=["Patients"])


@router.get("/dashboard", response_model=PatientDashboardResponse)
async def get_patient_dashboard(current_user: PatientUser, db: DatabaseSession):
    """Visit counters, bills and the latest appointments of the caller."""
    stats = await DashboardService(db).patient_stats(current_user["id"])
    return PatientDashboardResponse.model_validate(stats)


@router.get("/appointments", response_model=PatientAppointmentListResponse)
async def get_patient_appointments(current_user: PatientUser, db: DatabaseSession):
    """List the caller's appointments."""
    rows = await AppointmentService(db).list_patient_appointments(current_user["id"])
    return PatientAppointmentListResponse(
        appointments=[patient_appointment_from_row(row) for row in rows],
        total=len(rows),
    )


@router.get("/profile", response_model=UserResponse)
async def get_patient_profile(current_user: PatientUser):
    """Get the caller's profile."""
    return UserResponse.model_validate(current_user)


@router.put("/profile", response_model=UserMessageResponse)
async def update_patient_profile(
    user_data: UserUpdate,
    current_user: PatientUser,
    db: DatabaseSession,
):
    """Update the caller's profile."""
    user = await UserService.update_user(db, current_user["id"], user_data)
    return UserMessageResponse(
        message="Profile updated successfully",
        user=UserResponse.model_validate(user),
    )
