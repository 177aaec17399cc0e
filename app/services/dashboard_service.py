"""Read-side aggregation for role dashboards."""

from datetime import date
from decimal import Decimal
from uuid import UUID

from sqlalchemy import distinct, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import NotFoundException
from app.models.appointments import appointments
from app.models.doctors import doctors
from app.schemas.appointments import (
    ACTIVE_HOLD_STATUSES,
    COMPLETED_STATUSES,
    AppointmentStatus,
)
from app.schemas.users import UserRole
from app.services.admin_service import AdminService
from app.services.appointment_service import detail_query, utc_today
from app.services.doctor_service import DoctorService
from app.services.user_service import UserService

RECENT_APPOINTMENTS_LIMIT = 5


class DashboardService:
    """Computes dashboard counters. Never writes."""

    def __init__(self, db: AsyncSession):
        """Initialize service with database session."""
        self.db = db

    async def _count(self, *conditions) -> int:
        stmt = select(func.count()).select_from(appointments)
        if conditions:
            stmt = stmt.where(*conditions)
        result = await self.db.execute(stmt)
        return result.scalar_one()

    async def doctor_stats(self, user_id: UUID, today: date | None = None) -> dict:
        """
        Counters for the doctor profile owned by ``user_id``.

        Earnings are ``completed appointments x current fees``: there is no
        per-appointment fee snapshot, so changing the fee rewrites history.

        Raises:
            NotFoundException: If the user has no doctor profile
        """
        today = today or utc_today()
        doctor = await DoctorService().get_doctor_with_user(self.db, user_id)
        doctor_id = doctor["id"]

        today_count = await self._count(
            appointments.c.doctor_id == doctor_id,
            appointments.c.date == today,
            appointments.c.status != AppointmentStatus.CANCELLED.value,
        )

        patients_result = await self.db.execute(
            select(func.count(distinct(appointments.c.patient_id))).where(
                appointments.c.doctor_id == doctor_id
            )
        )
        total_patients = patients_result.scalar_one()

        upcoming = await self._count(
            appointments.c.doctor_id == doctor_id,
            appointments.c.date >= today,
            appointments.c.status.in_(ACTIVE_HOLD_STATUSES),
        )

        completed = await self._count(
            appointments.c.doctor_id == doctor_id,
            appointments.c.status.in_(COMPLETED_STATUSES),
        )
        fees = Decimal(str(doctor["fees"] or 0))

        return {
            "doctor": doctor,
            "stats": {
                "today_appointments": today_count,
                "total_patients": total_patients,
                "upcoming_appointments": upcoming,
                "earnings": completed * fees,
            },
        }

    async def patient_stats(self, patient_id: UUID, today: date | None = None) -> dict:
        """
        Counters and recent history for a patient.

        ``total_bills`` sums the current fees of the doctor of every booking.

        Raises:
            NotFoundException: If the user does not exist
        """
        today = today or utc_today()
        user = await UserService.get_user_by_id(self.db, patient_id)
        if not user:
            raise NotFoundException("User not found")

        total_visits = await self._count(
            appointments.c.patient_id == patient_id,
            appointments.c.status.in_(COMPLETED_STATUSES),
        )

        upcoming = await self._count(
            appointments.c.patient_id == patient_id,
            appointments.c.date >= today,
            appointments.c.status.in_(ACTIVE_HOLD_STATUSES),
        )

        bills_result = await self.db.execute(
            select(func.coalesce(func.sum(doctors.c.fees), 0))
            .select_from(appointments)
            .join(doctors, appointments.c.doctor_id == doctors.c.id)
            .where(appointments.c.patient_id == patient_id)
        )
        total_bills = Decimal(str(bills_result.scalar_one()))

        recent = await self.db.execute(
            detail_query()
            .where(appointments.c.patient_id == patient_id)
            .order_by(appointments.c.date.desc())
            .limit(RECENT_APPOINTMENTS_LIMIT)
        )

        return {
            "user": user,
            "stats": {
                "total_visits": total_visits,
                "upcoming_appointments": upcoming,
                "total_bills": total_bills,
            },
            "recent_appointments": [recent_from_row(row) for row in recent.mappings().all()],
        }

    async def admin_stats(self, admin_id: UUID) -> dict:
        """
        Global counters and the most recently created appointments.

        The admin block carries the caller's stored permissions, empty when
        the account has no admin record.
        """
        admin = await UserService.get_user_by_id(self.db, admin_id)
        if not admin:
            raise NotFoundException("User not found")

        admin_record = await AdminService.get_admin_by_user_id(self.db, admin_id)
        admin["permissions"] = admin_record["permissions"] if admin_record else []

        status_result = await self.db.execute(
            select(appointments.c.status, func.count()).group_by(appointments.c.status)
        )
        by_status = {status: count for status, count in status_result.all()}

        total_appointments = await self._count()

        recent = await self.db.execute(
            detail_query()
            .order_by(appointments.c.created_at.desc())
            .limit(RECENT_APPOINTMENTS_LIMIT)
        )

        stats = {
            "total_users": await UserService.count_users(self.db, UserRole.PATIENT),
            "total_doctors": await UserService.count_users(self.db, UserRole.DOCTOR),
            "total_appointments": total_appointments,
        }
        for status in AppointmentStatus:
            stats[f"{status.value.lower()}_appointments"] = by_status.get(status.value, 0)

        return {
            "admin": admin,
            "stats": stats,
            "recent_appointments": [recent_from_row(row) for row in recent.mappings().all()],
        }


def recent_from_row(row: dict) -> dict:
    """Shape a joined appointment row for the dashboard recent list."""
    return {
        "id": row["id"],
        "date": row["date"],
        "time": row["time"],
        "status": row["status"],
        "patient": row["patient_name"] or "Unknown",
        "doctor": row["doctor_name"] or "Unknown",
        "specialization": row["specialization"] or "Unknown",
    }

