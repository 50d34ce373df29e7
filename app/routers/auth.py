"""
Authentication API endpoints for signup, login, logout and the current user.
Session tokens are returned in the body and set as an http-only cookie.
"""

from fastapi import APIRouter, BackgroundTasks, Depends, Response, status
from app.config import Settings
from app.services.auth import AuthService
from app.services.notifications import NotificationService
from app.schemas.auth import (
    SignupRequest,
    LoginRequest,
    AuthResponse,
    MeResponse,
    MessageResponse
)
from app.schemas.user import UserResponse, CurrentUserResponse
from app.schemas.error import error_responses
from app.utils.context import Authenticated
from app.utils.dependencies import (
    get_app_settings,
    get_auth_service,
    get_notification_service,
    require_auth
)
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Authentication"])


def set_session_cookie(response: Response, token: str, settings: Settings) -> None:
    response.set_cookie(
        key=settings.cookie_name,
        value=token,
        max_age=settings.access_token_expire_days * 24 * 60 * 60,
        httponly=True,
        samesite="strict",
        secure=settings.cookie_secure,
    )


@router.post(
    "/signup",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a new account",
    description="Create an Agent or Buyer account, start a session and send a welcome email",
    responses=error_responses(400)
)
async def signup(
    signup_data: SignupRequest,
    response: Response,
    background_tasks: BackgroundTasks,
    auth_service: AuthService = Depends(get_auth_service),
    notifier: NotificationService = Depends(get_notification_service),
    settings: Settings = Depends(get_app_settings)
) -> AuthResponse:
    """
    Register a user.

    The welcome email is sent after the response; delivery failures are
    logged and never affect the signup result.

    Raises:
        ValidationError: If a field is missing or invalid
        DuplicateEmailError: If the email is already registered
    """
    user, token = await auth_service.signup(signup_data.model_dump())

    set_session_cookie(response, token, settings)
    background_tasks.add_task(notifier.send_welcome_email, user.email, user.full_name, user.role)

    return AuthResponse(
        message="User registered successfully",
        user=UserResponse.model_validate(user),
        redirect_url=user.dashboard_url,
        token=token
    )


@router.post(
    "/login",
    response_model=AuthResponse,
    status_code=status.HTTP_200_OK,
    summary="User login",
    description="Authenticate with email and password and start a session",
    responses=error_responses(400, 401)
)
async def login(
    login_data: LoginRequest,
    response: Response,
    auth_service: AuthService = Depends(get_auth_service),
    settings: Settings = Depends(get_app_settings)
) -> AuthResponse:
    """
    Authenticate user and start a session.

    Raises:
        InvalidCredentialsError: If credentials are invalid
    """
    user, token = await auth_service.login(login_data.email or "", login_data.password or "")

    set_session_cookie(response, token, settings)

    return AuthResponse(
        message="Login successful",
        user=UserResponse.model_validate(user),
        redirect_url=user.dashboard_url,
        token=token
    )


@router.get(
    "/me",
    response_model=MeResponse,
    status_code=status.HTTP_200_OK,
    summary="Get current user",
    responses=error_responses(401)
)
async def get_current_user_info(
    caller: Authenticated = Depends(require_auth),
    auth_service: AuthService = Depends(get_auth_service)
) -> MeResponse:
    """Return the authenticated user and the ids of the listings they own."""
    user, listing_ids = await auth_service.get_current_user(caller)

    user_response = CurrentUserResponse.model_validate(user)
    user_response.listings = listing_ids
    return MeResponse(user=user_response)


@router.post(
    "/logout",
    response_model=MessageResponse,
    status_code=status.HTTP_200_OK,
    summary="User logout",
    description="Clear the session cookie. Tokens are stateless, so a copied token stays valid until it expires.",
    responses=error_responses(401)
)
async def logout(
    response: Response,
    caller: Authenticated = Depends(require_auth),
    settings: Settings = Depends(get_app_settings)
) -> MessageResponse:
    response.delete_cookie(
        key=settings.cookie_name,
        httponly=True,
        samesite="strict",
        secure=settings.cookie_secure,
    )
    logger.info(f"User logged out: {caller.user_id}")
    return MessageResponse(message="Logged out successfully")
