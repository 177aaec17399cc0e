"""Admin account management: promotion, permissions and demotion."""

from uuid import UUID

import structlog
from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import BadRequestException, NotFoundException
from app.models.admins import admins
from app.models.users import users
from app.schemas.admins import DEFAULT_ADMIN_PERMISSIONS, AdminPermission
from app.schemas.users import UserRole
from app.services.user_service import UserService

logger = structlog.get_logger()


def _admin_with_user_query():
    return (
        select(
            admins,
            users.c.name,
            users.c.email,
            users.c.phone,
            users.c.role,
        )
        .select_from(admins)
        .join(users, admins.c.user_id == users.c.id)
    )


class AdminService:
    """Service for admin records."""

    @staticmethod
    async def create_admin(
        db: AsyncSession,
        user_id: UUID,
        permissions: list[AdminPermission] | None = None,
    ) -> dict:
        """
        Promote an existing user to admin.

        Args:
            db: Database session
            user_id: User to promote
            permissions: Granted permissions, or the default set when omitted

        Returns:
            Created admin record

        Raises:
            NotFoundException: If the user does not exist
            BadRequestException: If the user is already an admin
        """
        if not await UserService.get_user_by_id(db, user_id):
            raise NotFoundException("User not found")

        if await AdminService.get_admin_by_user_id(db, user_id):
            raise BadRequestException("User is already an admin")

        granted = permissions if permissions is not None else DEFAULT_ADMIN_PERMISSIONS

        try:
            result = await db.execute(
                admins.insert()
                .values(user_id=user_id, permissions=[p.value for p in granted])
                .returning(admins)
            )
            admin = result.mappings().first()
            await db.execute(
                update(users).where(users.c.id == user_id).values(role=UserRole.ADMIN.value)
            )
            await db.commit()
        except IntegrityError as e:
            await db.rollback()
            raise BadRequestException("User is already an admin") from e

        if not admin:
            raise ValueError("Failed to create admin")

        logger.info("admin_created", admin_id=str(admin["id"]), user_id=str(user_id))
        return dict(admin)

    @staticmethod
    async def get_admin_by_user_id(db: AsyncSession, user_id: UUID) -> dict | None:
        """Get the admin record of a user."""
        result = await db.execute(select(admins).where(admins.c.user_id == user_id))
        admin = result.mappings().first()
        return dict(admin) if admin else None

    @staticmethod
    async def get_admin_detail(db: AsyncSession, admin_id: UUID) -> dict:
        """
        Get an admin record joined with the account's contact details.

        Raises:
            NotFoundException: If the admin record does not exist
        """
        result = await db.execute(_admin_with_user_query().where(admins.c.id == admin_id))
        admin = result.mappings().first()

        if not admin:
            raise NotFoundException("Admin not found")

        return dict(admin)

    @staticmethod
    async def list_admins(db: AsyncSession) -> list[dict]:
        """List admin records, newest first."""
        result = await db.execute(_admin_with_user_query().order_by(admins.c.created_at.desc()))
        return [dict(row) for row in result.mappings().all()]

    @staticmethod
    async def update_permissions(
        db: AsyncSession,
        admin_id: UUID,
        permissions: list[AdminPermission],
    ) -> dict:
        """
        Replace the permissions of an admin record.

        Raises:
            NotFoundException: If the admin record does not exist
        """
        result = await db.execute(
            update(admins)
            .where(admins.c.id == admin_id)
            .values(permissions=[p.value for p in permissions])
            .returning(admins.c.id)
        )
        updated = result.first()
        await db.commit()

        if updated is None:
            raise NotFoundException("Admin not found")

        logger.info(
            "admin_permissions_updated",
            admin_id=str(admin_id),
            permissions=[p.value for p in permissions],
        )
        return await AdminService.get_admin_detail(db, admin_id)

    @staticmethod
    async def delete_admin(db: AsyncSession, admin_id: UUID, acting_user_id: UUID) -> None:
        """
        Remove an admin record and demote the account to Patient.

        Raises:
            NotFoundException: If the admin record does not exist
            BadRequestException: If an admin tries to remove their own record
        """
        result = await db.execute(select(admins).where(admins.c.id == admin_id))
        admin = result.mappings().first()

        if not admin:
            raise NotFoundException("Admin not found")

        if str(admin["user_id"]) == str(acting_user_id):
            raise BadRequestException("Admins cannot remove themselves")

        await db.execute(delete(admins).where(admins.c.id == admin_id))
        await db.execute(
            update(users).where(users.c.id == admin["user_id"]).values(role=UserRole.PATIENT.value)
        )
        await db.commit()

        logger.info("admin_removed", admin_id=str(admin_id), user_id=str(admin["user_id"]))
