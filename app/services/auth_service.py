"""Authentication service for password login and JWT issuance."""

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import UnauthorizedException
from app.core.security import create_access_token, verify_password
from app.schemas.auth import LoginRequest
from app.schemas.users import UserRegister
from app.services.user_service import UserService

logger = structlog.get_logger()


class AuthService:
    """Authentication service for registration and login."""

    @staticmethod
    def issue_token(user: dict) -> str:
        """Create an access token carrying the user's id and role."""
        return create_access_token({"sub": str(user["id"]), "role": user["role"]})

    @staticmethod
    async def register(db: AsyncSession, user_data: UserRegister) -> dict:
        """
        Register a new account.

        Args:
            db: Database session
            user_data: Registration payload (Patient or Doctor)

        Returns:
            Created user

        Raises:
            BadRequestException: If the email is already registered
        """
        return await UserService.create_user(db, user_data)

    @staticmethod
    async def login(db: AsyncSession, credentials: LoginRequest) -> tuple[dict, str]:
        """
        Verify email and password.

        Returns:
            Tuple of (user dict, access token)

        Raises:
            UnauthorizedException: If the credentials do not match
        """
        user = await UserService.get_user_by_email(db, credentials.email)

        if not user or not verify_password(credentials.password, user["password_hash"]):
            logger.warning("login_failed", email=credentials.email)
            raise UnauthorizedException("Invalid email or password")

        logger.info("login_succeeded", user_id=str(user["id"]))
        return user, AuthService.issue_token(user)
