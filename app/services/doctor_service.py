"""Doctor service for business logic."""

from uuid import UUID

import structlog
from sqlalchemy import or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import BadRequestException, NotFoundException
from app.core.redis_client import CacheManager
from app.models.doctors import doctors
from app.models.users import users
from app.schemas.doctors import DoctorCreate, DoctorUpdate

logger = structlog.get_logger()

USER_FIELDS = ("name", "email", "phone", "address")


class DoctorService:
    """Service for doctor operations."""

    # Cache TTL in seconds
    DOCTOR_CACHE_TTL = 900  # 15 minutes for individual doctors
    DOCTOR_LIST_CACHE_TTL = 300  # 5 minutes for lists

    def __init__(self, cache_manager: CacheManager | None = None):
        """Initialize service with optional cache manager."""
        self.cache = cache_manager

    @staticmethod
    def _get_doctor_cache_key(doctor_id: UUID | str) -> str:
        """Generate cache key for doctor."""
        return f"doctor:{doctor_id}"

    def invalidate(self, doctor_id: UUID | str) -> None:
        """Drop the cached profile and every cached doctor list."""
        if self.cache:
            self.cache.delete(self._get_doctor_cache_key(doctor_id))
            self.cache.delete_pattern("doctor:list:*")

    async def create_doctor(self, db: AsyncSession, user_id: UUID, doctor_data: DoctorCreate) -> dict:
        """
        Create the doctor profile owned by ``user_id``.

        Raises:
            BadRequestException: If the user already has a profile
        """
        query = (
            doctors.insert()
            .values(user_id=user_id, **doctor_data.model_dump())
            .returning(doctors)
        )

        try:
            result = await db.execute(query)
            doctor = result.mappings().first()
            await db.commit()
        except IntegrityError as e:
            await db.rollback()
            raise BadRequestException("Doctor profile already exists") from e

        if not doctor:
            raise ValueError("Failed to create doctor")

        self.invalidate(doctor["id"])
        logger.info("doctor_profile_created", doctor_id=str(doctor["id"]), user_id=str(user_id))
        return dict(doctor)

    async def get_doctor_by_id(self, db: AsyncSession, doctor_id: UUID) -> dict | None:
        """Get doctor by ID with caching."""
        # Try cache first
        if self.cache:
            cached = self.cache.get_json(self._get_doctor_cache_key(doctor_id))
            if cached:
                return cached

        # Query database
        result = await db.execute(select(doctors).where(doctors.c.id == doctor_id))
        doctor = result.mappings().first()

        if not doctor:
            return None

        doctor_dict = dict(doctor)

        # Cache result
        if self.cache:
            self.cache.set_json(
                self._get_doctor_cache_key(doctor_id), doctor_dict, ttl=self.DOCTOR_CACHE_TTL
            )

        return doctor_dict

    async def get_doctor_by_user_id(self, db: AsyncSession, user_id: UUID) -> dict | None:
        """Get doctor by user ID."""
        result = await db.execute(select(doctors).where(doctors.c.user_id == user_id))
        doctor = result.mappings().first()
        return dict(doctor) if doctor else None

    async def get_doctor_with_user(self, db: AsyncSession, user_id: UUID) -> dict:
        """
        Get the caller's doctor profile joined with their user record.

        Raises:
            NotFoundException: If the user has no doctor profile
        """
        query = (
            select(doctors, users.c.name, users.c.email, users.c.phone, users.c.address)
            .join(users, doctors.c.user_id == users.c.id)
            .where(doctors.c.user_id == user_id)
        )
        result = await db.execute(query)
        doctor = result.mappings().first()

        if not doctor:
            raise NotFoundException("Doctor profile not found")

        return dict(doctor)

    async def update_profile(self, db: AsyncSession, user_id: UUID, doctor_data: DoctorUpdate) -> dict:
        """
        Update the caller's doctor profile and, optionally, their user contact fields.

        Raises:
            NotFoundException: If the user has no doctor profile
        """
        current = await self.get_doctor_by_user_id(db, user_id)
        if not current:
            raise NotFoundException("Doctor profile not found")

        changes = doctor_data.model_dump(exclude_unset=True)
        user_changes = {k: changes.pop(k) for k in USER_FIELDS if k in changes}
        doctor_changes = {k: v for k, v in changes.items() if v is not None}

        if doctor_changes:
            await db.execute(
                update(doctors).where(doctors.c.id == current["id"]).values(**doctor_changes)
            )
            await db.commit()

        if user_changes:
            try:
                await db.execute(update(users).where(users.c.id == user_id).values(**user_changes))
                await db.commit()
            except IntegrityError as e:
                await db.rollback()
                raise BadRequestException("Email already registered") from e

        self.invalidate(current["id"])
        logger.info(
            "doctor_profile_updated",
            doctor_id=str(current["id"]),
            fields=sorted(doctor_changes) + sorted(user_changes),
        )
        return await self.get_doctor_with_user(db, user_id)

    async def list_doctors(
        self,
        db: AsyncSession,
        specialization: str | None = None,
        search: str | None = None,
    ) -> list[dict]:
        """List doctors joined with their names, newest first."""
        cache_key = f"doctor:list:{specialization or 'all'}:{search or ''}"
        if self.cache:
            cached = self.cache.get_json(cache_key)
            if cached is not None:
                return cached

        conditions: list = []

        if specialization and specialization != "all":
            conditions.append(doctors.c.specialization.ilike(f"%{specialization}%"))

        if search:
            pattern = f"%{search}%"
            conditions.append(
                or_(
                    users.c.name.ilike(pattern),
                    doctors.c.specialization.ilike(pattern),
                    doctors.c.qualification.ilike(pattern),
                )
            )

        query = (
            select(doctors, users.c.name, users.c.email, users.c.phone)
            .join(users, doctors.c.user_id == users.c.id)
            .order_by(doctors.c.created_at.desc())
        )
        if conditions:
            query = query.where(*conditions)

        result = await db.execute(query)
        doctor_list = [dict(row) for row in result.mappings().all()]

        if self.cache:
            self.cache.set_json(cache_key, doctor_list, ttl=self.DOCTOR_LIST_CACHE_TTL)

        return doctor_list
