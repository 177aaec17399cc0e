"""User service for business logic."""

from uuid import UUID

import structlog
from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import BadRequestException, NotFoundException
from app.core.security import get_password_hash
from app.models.admins import admins
from app.models.appointments import appointments
from app.models.doctors import doctors
from app.models.users import users
from app.schemas.users import UserCreate, UserRole, UserUpdate
from app.services.doctor_service import DoctorService

logger = structlog.get_logger()


class UserService:
    """Service for user operations."""

    @staticmethod
    async def create_user(db: AsyncSession, user_data: UserCreate) -> dict:
        """
        Create a new user with a hashed password.

        Raises:
            BadRequestException: If the email is already registered
        """
        if await UserService.get_user_by_email(db, user_data.email):
            raise BadRequestException("Email already registered")

        query = (
            users.insert()
            .values(
                name=user_data.name,
                email=user_data.email,
                password_hash=get_password_hash(user_data.password),
                role=user_data.role.value,
                phone=user_data.phone,
                address=user_data.address,
                gender=user_data.gender,
                dob=user_data.dob,
            )
            .returning(users)
        )

        try:
            result = await db.execute(query)
            user = result.mappings().first()
            await db.commit()
        except IntegrityError as e:
            await db.rollback()
            raise BadRequestException("Email already registered") from e

        if not user:
            raise ValueError("Failed to create user")

        logger.info("user_created", user_id=str(user["id"]), role=user["role"])
        return dict(user)

    @staticmethod
    async def get_user_by_id(db: AsyncSession, user_id: UUID) -> dict | None:
        """Get user by ID."""
        result = await db.execute(select(users).where(users.c.id == user_id))
        user = result.mappings().first()
        return dict(user) if user else None

    @staticmethod
    async def get_user_by_email(db: AsyncSession, email: str) -> dict | None:
        """Get user by email."""
        result = await db.execute(select(users).where(users.c.email == email))
        user = result.mappings().first()
        return dict(user) if user else None

    @staticmethod
    async def update_user(db: AsyncSession, user_id: UUID, user_data: UserUpdate) -> dict:
        """
        Update user profile fields that were explicitly provided.

        Raises:
            NotFoundException: If the user does not exist
        """
        values = user_data.model_dump(exclude_unset=True)

        if not values:
            user = await UserService.get_user_by_id(db, user_id)
            if not user:
                raise NotFoundException("User not found")
            return user

        query = update(users).where(users.c.id == user_id).values(**values).returning(users)
        try:
            result = await db.execute(query)
            user = result.mappings().first()
            await db.commit()
        except IntegrityError as e:
            await db.rollback()
            raise BadRequestException("Email already registered") from e

        if not user:
            raise NotFoundException("User not found")

        return dict(user)

    @staticmethod
    async def list_users(db: AsyncSession, role: UserRole = UserRole.PATIENT) -> list[dict]:
        """List users with the given role, newest first."""
        query = select(users).where(users.c.role == role.value).order_by(users.c.created_at.desc())
        result = await db.execute(query)
        return [dict(row) for row in result.mappings().all()]

    @staticmethod
    async def count_users(db: AsyncSession, role: UserRole) -> int:
        """Count users with the given role."""
        result = await db.execute(
            select(func.count()).select_from(users).where(users.c.role == role.value)
        )
        return result.scalar_one()

    @staticmethod
    async def delete_user(
        db: AsyncSession,
        user_id: UUID,
        doctor_service: DoctorService | None = None,
    ) -> None:
        """
        Delete a user together with the appointments they booked.

        A doctor account also loses its profile and every appointment booked
        with it. The cached profile is dropped so it can no longer be booked.

        Raises:
            NotFoundException: If the user does not exist
        """
        if not await UserService.get_user_by_id(db, user_id):
            raise NotFoundException("User not found")

        doctor_result = await db.execute(select(doctors.c.id).where(doctors.c.user_id == user_id))
        doctor_ids = list(doctor_result.scalars().all())

        removed = await db.execute(delete(appointments).where(appointments.c.patient_id == user_id))
        if doctor_ids:
            await db.execute(delete(appointments).where(appointments.c.doctor_id.in_(doctor_ids)))
            await db.execute(delete(doctors).where(doctors.c.id.in_(doctor_ids)))
        await db.execute(delete(admins).where(admins.c.user_id == user_id))
        await db.execute(delete(users).where(users.c.id == user_id))
        await db.commit()

        doctor_service = doctor_service or DoctorService()
        for doctor_id in doctor_ids:
            doctor_service.invalidate(doctor_id)

        logger.info(
            "user_deleted",
            user_id=str(user_id),
            appointments_removed=removed.rowcount,
            doctor_profiles_removed=len(doctor_ids),
        )
