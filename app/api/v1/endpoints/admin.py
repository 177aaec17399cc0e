"""Admin-only endpoints for system management."""

from uuid import UUID

from fastapi import APIRouter, Query, status

from app.dependencies import AdminUser, DatabaseSession, DoctorServiceDep
from app.schemas.admins import (
    AdminCreate,
    AdminDetailResponse,
    AdminListItem,
    AdminListResponse,
    AdminMessageResponse,
    AdminPermissionsUpdate,
    AdminRecord,
)
from app.schemas.appointments import (
    AdminAppointmentCreate,
    AdminAppointmentListResponse,
    AdminAppointmentResponse,
    AppointmentStatus,
    AppointmentStatusUpdate,
    ExpirySweepResponse,
    appointment_detail_from_row,
)
from app.schemas.dashboard import AdminDashboardResponse
from app.schemas.doctors import DoctorListItem, DoctorListResponse
from app.schemas.users import (
    UserCreate,
    UserListResponse,
    UserMessageResponse,
    UserResponse,
    UserRole,
)
from app.services.admin_service import AdminService
from app.services.appointment_service import AppointmentService
from app.services.dashboard_service import DashboardService
from app.services.user_service import UserService

router = APIRouter(prefix="/admin", tags=["Admin"])


@router.get(
    "/appointments",
    response_model=AdminAppointmentListResponse,
    summary="List all appointments (admin only)",
)
async def list_all_appointments(
    db: DatabaseSession,
    admin_user: AdminUser,
    status_filter: AppointmentStatus | None = Query(None, alias="status"),
) -> AdminAppointmentListResponse:
    """
    List every appointment, newest slot first.

    Stale appointments are swept to Expired before the read, so the listing
    never shows a past Pending or Confirmed slot.

    Args:
        db: Database session
        admin_user: Authenticated admin user
        status_filter: Optional status filter

    Returns:
        Appointments with patient and doctor details
    """
    rows = await AppointmentService(db).list_all_appointments(status=status_filter)
    return AdminAppointmentListResponse(
        appointments=[appointment_detail_from_row(row) for row in rows],
        total=len(rows),
    )


@router.post(
    "/appointments",
    response_model=AdminAppointmentResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Book an appointment for a user (admin only)",
)
async def create_appointment(
    data: AdminAppointmentCreate,
    db: DatabaseSession,
    admin_user: AdminUser,
    doctor_service: DoctorServiceDep,
) -> AdminAppointmentResponse:
    """
    Book a slot on behalf of any user.

    Status defaults to Confirmed. The same slot conflict rule as patient
    booking applies.
    """
    row = await AppointmentService(db, doctor_service).admin_create_appointment(data)
    return AdminAppointmentResponse(
        message="Appointment booked successfully",
        appointment=appointment_detail_from_row(row),
    )


@router.put(
    "/appointments/{appointment_id}/status",
    response_model=AdminAppointmentResponse,
    summary="Update appointment status (admin only)",
)
async def update_appointment_status(
    appointment_id: UUID,
    data: AppointmentStatusUpdate,
    db: DatabaseSession,
    admin_user: AdminUser,
) -> AdminAppointmentResponse:
    """Set an appointment's status to any of the allowed values."""
    row = await AppointmentService(db).update_status(appointment_id, data.status)
    return AdminAppointmentResponse(
        message="Appointment status updated successfully",
        appointment=appointment_detail_from_row(row),
    )


@router.delete(
    "/appointments/{appointment_id}",
    summary="Delete an appointment (admin only)",
)
async def delete_appointment(
    appointment_id: UUID,
    db: DatabaseSession,
    admin_user: AdminUser,
) -> dict[str, str]:
    """Permanently delete an appointment."""
    await AppointmentService(db).delete_appointment(appointment_id)
    return {"message": "Appointment deleted successfully"}


@router.post(
    "/mark-expired",
    response_model=ExpirySweepResponse,
    summary="Expire past appointments (admin only)",
)
async def mark_expired(db: DatabaseSession, admin_user: AdminUser) -> ExpirySweepResponse:
    """Run the expiry sweep now."""
    modified = await AppointmentService(db).mark_expired()
    return ExpirySweepResponse(
        message=f"{modified} appointments marked as expired",
        modified_count=modified,
    )


@router.get(
    "/dashboard",
    response_model=AdminDashboardResponse,
    summary="System-wide statistics (admin only)",
)
async def get_admin_dashboard(db: DatabaseSession, admin_user: AdminUser) -> AdminDashboardResponse:
    """Totals, per-status counts and the most recently created appointments."""
    stats = await DashboardService(db).admin_stats(admin_user["id"])
    return AdminDashboardResponse.model_validate(stats)


@router.get(
    "/users",
    response_model=UserListResponse,
    summary="List patients (admin only)",
)
async def list_users(db: DatabaseSession, admin_user: AdminUser) -> UserListResponse:
    """List patient accounts, newest first."""
    user_list = await UserService.list_users(db, UserRole.PATIENT)
    return UserListResponse(
        users=[UserResponse.model_validate(u) for u in user_list],
        total=len(user_list),
    )


@router.post(
    "/users",
    response_model=UserMessageResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a patient (admin only)",
)
async def create_user(
    user_data: UserCreate,
    db: DatabaseSession,
    admin_user: AdminUser,
) -> UserMessageResponse:
    """Create a patient account. Any requested role is replaced by Patient."""
    user = await UserService.create_user(
        db, user_data.model_copy(update={"role": UserRole.PATIENT})
    )
    return UserMessageResponse(
        message="User created successfully",
        user=UserResponse.model_validate(user),
    )


@router.delete(
    "/users/{user_id}",
    summary="Delete a user (admin only)",
)
async def delete_user(
    user_id: UUID,
    db: DatabaseSession,
    admin_user: AdminUser,
    doctor_service: DoctorServiceDep,
) -> dict[str, str]:
    """Delete a user and every appointment attached to them."""
    await UserService.delete_user(db, user_id, doctor_service)
    return {"message": "User deleted successfully"}


@router.get(
    "/doctors",
    response_model=DoctorListResponse,
    summary="List doctors (admin only)",
)
async def list_doctors(
    db: DatabaseSession,
    admin_user: AdminUser,
    doctor_service: DoctorServiceDep,
) -> DoctorListResponse:
    """List every doctor profile with contact details."""
    doctor_list = await doctor_service.list_doctors(db)
    return DoctorListResponse(
        doctors=[DoctorListItem.model_validate(d) for d in doctor_list],
        total=len(doctor_list),
    )


@router.post(
    "/create",
    response_model=AdminMessageResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Promote a user to admin (admin only)",
)
async def create_admin(
    data: AdminCreate,
    db: DatabaseSession,
    admin_user: AdminUser,
) -> AdminMessageResponse:
    """
    Grant admin rights to an existing user.

    The account's role becomes Admin. Permissions default to the standard
    viewing and appointment-management set.
    """
    admin = await AdminService.create_admin(db, data.user_id, data.permissions)
    return AdminMessageResponse(
        message="Admin created successfully",
        admin=AdminRecord.model_validate(admin),
    )


@router.get(
    "/list",
    response_model=AdminListResponse,
    summary="List admins (admin only)",
)
async def list_admins(db: DatabaseSession, admin_user: AdminUser) -> AdminListResponse:
    """List admin records with contact details, newest first."""
    admin_list = await AdminService.list_admins(db)
    return AdminListResponse(
        admins=[AdminListItem.model_validate(a) for a in admin_list],
        total=len(admin_list),
    )


@router.put(
    "/permissions/{admin_id}",
    response_model=AdminDetailResponse,
    summary="Replace admin permissions (admin only)",
)
async def update_admin_permissions(
    admin_id: UUID,
    data: AdminPermissionsUpdate,
    db: DatabaseSession,
    admin_user: AdminUser,
) -> AdminDetailResponse:
    """Replace the permission list of an admin record."""
    admin = await AdminService.update_permissions(db, admin_id, data.permissions)
    return AdminDetailResponse(
        message="Admin permissions updated successfully",
        admin=AdminListItem.model_validate(admin),
    )


@router.delete(
    "/{admin_id}",
    summary="Remove an admin (admin only)",
)
async def delete_admin(
    admin_id: UUID,
    db: DatabaseSession,
    admin_user: AdminUser,
) -> dict[str, str]:
    """Delete an admin record and demote the account to Patient."""
    await AdminService.delete_admin(db, admin_id, admin_user["id"])
    return {"message": "Admin removed successfully"}
