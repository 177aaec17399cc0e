"""Appointment lifecycle: booking, status transitions and expiry."""

from datetime import UTC, date, datetime
from uuid import UUID

import structlog
from sqlalchemy import and_, delete, insert, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import ConflictException, ForbiddenException, NotFoundException
from app.models.appointments import appointments
from app.models.doctors import doctors
from app.models.users import users
from app.schemas.appointments import (
    ACTIVE_HOLD_STATUSES,
    TERMINAL_STATUSES,
    AdminAppointmentCreate,
    AppointmentBook,
    AppointmentStatus,
    BookingBase,
)
from app.services.doctor_service import DoctorService
from app.services.user_service import UserService

logger = structlog.get_logger()

SLOT_TAKEN_MESSAGE = "This time slot is already booked"

SLOT_INDEX_NAME = "uq_appointments_active_slot"
# SQLite reports the indexed columns instead of the index name
SQLITE_SLOT_COLUMNS = "appointments.doctor_id, appointments.date, appointments.time"

patient_user = users.alias("patient_user")
doctor_user = users.alias("doctor_user")


def utc_today() -> date:
    """Current calendar date in UTC."""
    return datetime.now(UTC).date()


def is_slot_violation(exc: IntegrityError) -> bool:
    """Whether ``exc`` was raised by the active-slot unique index."""
    message = str(exc.orig)
    return SLOT_INDEX_NAME in message or SQLITE_SLOT_COLUMNS in message


def detail_query():
    """Appointments joined with patient and doctor contact details."""
    return (
        select(
            appointments,
            patient_user.c.name.label("patient_name"),
            patient_user.c.email.label("patient_email"),
            patient_user.c.phone.label("patient_phone"),
            doctors.c.specialization,
            doctors.c.fees,
            doctor_user.c.name.label("doctor_name"),
            doctor_user.c.email.label("doctor_email"),
            doctor_user.c.phone.label("doctor_phone"),
        )
        .select_from(appointments)
        .outerjoin(patient_user, appointments.c.patient_id == patient_user.c.id)
        .outerjoin(doctors, appointments.c.doctor_id == doctors.c.id)
        .outerjoin(doctor_user, doctors.c.user_id == doctor_user.c.id)
    )


class AppointmentService:
    """Service owning the appointment store."""

    def __init__(self, db: AsyncSession, doctor_service: DoctorService | None = None):
        """Initialize service with database session."""
        self.db = db
        self.doctors = doctor_service or DoctorService()

    async def _require_doctor(self, doctor_id: UUID) -> dict:
        doctor = await self.doctors.get_doctor_by_id(self.db, doctor_id)
        if not doctor:
            raise NotFoundException("Doctor not found")
        return doctor

    async def _ensure_slot_free(self, doctor_id: UUID, slot_date: date, slot_time: str) -> None:
        """
        Reject the booking if another appointment already holds the slot.

        Raises:
            ConflictException: If a Pending or Confirmed appointment exists
        """
        stmt = (
            select(appointments.c.id)
            .where(
                and_(
                    appointments.c.doctor_id == doctor_id,
                    appointments.c.date == slot_date,
                    appointments.c.time == slot_time,
                    appointments.c.status.in_(ACTIVE_HOLD_STATUSES),
                )
            )
            .limit(1)
        )
        result = await self.db.execute(stmt)
        if result.first() is not None:
            raise ConflictException(SLOT_TAKEN_MESSAGE)

    async def _insert(
        self,
        patient_id: UUID,
        data: BookingBase,
        status: AppointmentStatus,
    ) -> dict:
        """Insert an appointment, mapping a slot-index violation to a conflict."""
        stmt = (
            insert(appointments)
            .values(
                patient_id=patient_id,
                doctor_id=data.doctor_id,
                date=data.date,
                time=data.time,
                symptoms=data.symptoms,
                notes=data.notes,
                status=status.value,
            )
            .returning(appointments)
        )

        try:
            result = await self.db.execute(stmt)
            row = result.mappings().first()
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            if not is_slot_violation(e):
                raise
            # Lost the race against a concurrent booking of the same slot
            raise ConflictException(SLOT_TAKEN_MESSAGE) from e

        return dict(row)

    async def book_appointment(self, patient_id: UUID, data: AppointmentBook) -> dict:
        """
        Book a slot on behalf of the calling patient.

        Args:
            patient_id: ID of the patient creating the appointment
            data: Requested doctor, date and time slot

        Returns:
            Created appointment row with status Pending

        Raises:
            NotFoundException: If the doctor does not exist
            ForbiddenException: If the caller owns the doctor profile
            ConflictException: If the slot is already held
        """
        doctor = await self._require_doctor(data.doctor_id)

        if str(doctor["user_id"]) == str(patient_id):
            raise ForbiddenException("Doctors cannot book appointments with themselves")

        await self._ensure_slot_free(data.doctor_id, data.date, data.time)
        appointment = await self._insert(patient_id, data, AppointmentStatus.PENDING)

        logger.info(
            "appointment_booked",
            appointment_id=str(appointment["id"]),
            doctor_id=str(data.doctor_id),
            date=data.date.isoformat(),
            time=data.time,
        )
        return appointment

    async def admin_create_appointment(self, data: AdminAppointmentCreate) -> dict:
        """
        Book a slot for any user with an explicit status.

        Returns:
            Appointment joined with patient and doctor details

        Raises:
            NotFoundException: If the user or the doctor does not exist
            ConflictException: If the slot is already held
        """
        if not await UserService.get_user_by_id(self.db, data.user_id):
            raise NotFoundException("User not found")

        await self._require_doctor(data.doctor_id)
        await self._ensure_slot_free(data.doctor_id, data.date, data.time)
        appointment = await self._insert(data.user_id, data, data.status)

        logger.info(
            "appointment_booked_by_admin",
            appointment_id=str(appointment["id"]),
            patient_id=str(data.user_id),
            doctor_id=str(data.doctor_id),
            status=data.status.value,
        )
        return await self.get_appointment_detail(appointment["id"])

    async def get_appointment_detail(self, appointment_id: UUID) -> dict:
        """
        Get an appointment with patient and doctor details.

        Raises:
            NotFoundException: If appointment not found
        """
        result = await self.db.execute(detail_query().where(appointments.c.id == appointment_id))
        row = result.mappings().first()

        if not row:
            raise NotFoundException("Appointment not found")

        return dict(row)

    async def update_status(self, appointment_id: UUID, status: AppointmentStatus) -> dict:
        """
        Apply a new status. Any status may move to any other.

        Raises:
            NotFoundException: If appointment not found
            ConflictException: If the new status would double-hold the slot
        """
        stmt = (
            update(appointments)
            .where(appointments.c.id == appointment_id)
            .values(status=status.value)
            .returning(appointments.c.id)
        )

        try:
            result = await self.db.execute(stmt)
            updated = result.first()
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            if not is_slot_violation(e):
                raise
            raise ConflictException(SLOT_TAKEN_MESSAGE) from e

        if updated is None:
            raise NotFoundException("Appointment not found")

        logger.info(
            "appointment_status_updated",
            appointment_id=str(appointment_id),
            status=status.value,
        )
        return await self.get_appointment_detail(appointment_id)

    async def delete_appointment(self, appointment_id: UUID) -> None:
        """
        Permanently delete an appointment.

        Raises:
            NotFoundException: If appointment not found
        """
        result = await self.db.execute(
            delete(appointments).where(appointments.c.id == appointment_id).returning(appointments.c.id)
        )
        deleted = result.first()
        await self.db.commit()

        if deleted is None:
            raise NotFoundException("Appointment not found")

        logger.info("appointment_deleted", appointment_id=str(appointment_id))

    async def mark_expired(self, today: date | None = None) -> int:
        """
        Reclassify every stale, non-terminal appointment as Expired.

        An appointment is stale once its date is before ``today`` (UTC by
        default). Running the sweep again without new writes changes nothing.

        Returns:
            Number of appointments modified
        """
        today = today or utc_today()

        stmt = (
            update(appointments)
            .where(
                and_(
                    appointments.c.date < today,
                    appointments.c.status.notin_(TERMINAL_STATUSES),
                )
            )
            .values(status=AppointmentStatus.EXPIRED.value)
        )
        result = await self.db.execute(stmt)
        await self.db.commit()

        modified = result.rowcount or 0
        if modified:
            logger.info("appointments_expired", count=modified, before=today.isoformat())
        return modified

    async def list_all_appointments(
        self,
        status: AppointmentStatus | None = None,
        today: date | None = None,
    ) -> list[dict]:
        """
        List every appointment, newest slot first, after an expiry sweep.

        Args:
            status: Optional status filter
            today: Reference date for the sweep

        Returns:
            Appointment rows joined with patient and doctor details
        """
        await self.mark_expired(today)

        stmt = detail_query()
        if status:
            stmt = stmt.where(appointments.c.status == status.value)

        stmt = stmt.order_by(appointments.c.date.desc(), appointments.c.time.desc())
        result = await self.db.execute(stmt)
        return [dict(row) for row in result.mappings().all()]

    async def list_doctor_appointments(self, user_id: UUID) -> list[dict]:
        """
        List the appointments of the doctor profile owned by ``user_id``.

        Raises:
            NotFoundException: If the user has no doctor profile
        """
        doctor = await self.doctors.get_doctor_by_user_id(self.db, user_id)
        if not doctor:
            raise NotFoundException("Doctor profile not found")

        stmt = (
            detail_query()
            .where(appointments.c.doctor_id == doctor["id"])
            .order_by(appointments.c.date.asc(), appointments.c.time.asc())
        )
        result = await self.db.execute(stmt)
        return [dict(row) for row in result.mappings().all()]

    async def list_patient_appointments(self, patient_id: UUID) -> list[dict]:
        """List the appointments booked by a patient, earliest slot first."""
        stmt = (
            detail_query()
            .where(appointments.c.patient_id == patient_id)
            .order_by(appointments.c.date.asc(), appointments.c.time.asc())
        )
        result = await self.db.execute(stmt)
        return [dict(row) for row in result.mappings().all()]
