"""FastAPI dependencies."""

from collections.abc import Callable, Coroutine
from typing import Annotated, Any
from uuid import UUID

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.redis_client import CacheManager, get_redis_client
from app.core.security import decode_access_token
from app.database import get_db
from app.schemas.users import UserRole
from app.services.doctor_service import DoctorService
from app.services.user_service import UserService

# Security
security = HTTPBearer()


async def get_current_user_id(
    credentials: Annotated[HTTPAuthorizationCredentials, Depends(security)],
) -> UUID:
    """
    Extract and validate user ID from JWT token.

    Args:
        credentials: Bearer token credentials

    Returns:
        User ID from token

    Raises:
        HTTPException: If token is invalid or expired
    """
    token = credentials.credentials
    payload = decode_access_token(token)

    if payload is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    user_id_str = payload.get("sub")
    if user_id_str is None or not isinstance(user_id_str, str):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        return UUID(user_id_str)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid user ID format",
            headers={"WWW-Authenticate": "Bearer"},
        )


async def get_current_user(
    user_id: Annotated[UUID, Depends(get_current_user_id)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> dict:
    """
    Get current user from database.

    The role is always read from the stored account, never from the token.

    Raises:
        HTTPException: If the user no longer exists
    """
    user = await UserService.get_user_by_id(db, user_id)

    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return user


def require_role(
    role: UserRole, detail: str
) -> Callable[..., Coroutine[Any, Any, dict]]:
    """
    Build a dependency that admits only users holding ``role``.

    Args:
        role: Required role
        detail: Error message for other roles

    Returns:
        Dependency returning the authenticated user
    """

    async def dependency(current_user: Annotated[dict, Depends(get_current_user)]) -> dict:
        if current_user.get("role") != role.value:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=detail,
            )
        return current_user

    return dependency


require_admin = require_role(UserRole.ADMIN, "Only admins can access this endpoint")
require_doctor = require_role(UserRole.DOCTOR, "Only doctors can access this endpoint")
require_patient = require_role(UserRole.PATIENT, "Only patients can access this endpoint")


def get_cache_manager() -> CacheManager | None:
    """Cache manager backed by the shared Redis client."""
    return CacheManager(get_redis_client())


def get_doctor_service(
    cache_manager: Annotated[CacheManager | None, Depends(get_cache_manager)],
) -> DoctorService:
    """Doctor service sharing the request's cache manager."""
    return DoctorService(cache_manager)


# Type aliases for dependency injection
DatabaseSession = Annotated[AsyncSession, Depends(get_db)]
CurrentUserId = Annotated[UUID, Depends(get_current_user_id)]
CurrentUser = Annotated[dict, Depends(get_current_user)]
AdminUser = Annotated[dict, Depends(require_admin)]
DoctorUser = Annotated[dict, Depends(require_doctor)]
PatientUser = Annotated[dict, Depends(require_patient)]
CacheManagerDep = Annotated[CacheManager | None, Depends(get_cache_manager)]
DoctorServiceDep = Annotated[DoctorService, Depends(get_doctor_service)]
