"""Authentication endpoints."""

from fastapi import APIRouter, status

from app.dependencies import DatabaseSession
from app.schemas.auth import LoginRequest, LoginResponse
from app.schemas.users import UserMessageResponse, UserRegister, UserResponse
from app.services.auth_service import AuthService

router = APIRouter()


@router.post(
    "/register",
    response_model=UserMessageResponse,
    status_code=status.HTTP_201_CREATED,
    tags=["Authentication"],
    summary="Register a new account",
)
async def register(user_data: UserRegister, db: DatabaseSession) -> UserMessageResponse:
    """
    Create a Patient or Doctor account. The role defaults to Patient.

    Args:
        user_data: Registration payload
        db: Database session

    Returns:
        Created user
    """
    user = await AuthService.register(db, user_data)
    return UserMessageResponse(
        message="User registered successfully",
        user=UserResponse.model_validate(user),
    )


@router.post(
    "/login",
    response_model=LoginResponse,
    status_code=status.HTTP_200_OK,
    tags=["Authentication"],
    summary="Email and password login",
)
async def login(credentials: LoginRequest, db: DatabaseSession) -> LoginResponse:
    """
    Verify credentials and issue an access token.

    Args:
        credentials: Email and password
        db: Database session

    Returns:
        Access token and user information
    """
    user, access_token = await AuthService.login(db, credentials)
    return LoginResponse(
        access_token=access_token,
        user=UserResponse.model_validate(user),
    )
