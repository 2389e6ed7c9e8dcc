"""
Auth API endpoints.

Registration, login, token refresh and account management. Errors are
raised as module exceptions and rendered by the API error handler.
"""

from fastapi import APIRouter, Depends

from api.dependencies import get_auth_service
from api.middleware.auth import get_current_user
from api.middleware.ratelimit import limit_auth_attempts
from shared.models import User

from .interfaces import IAuthService
from .models import (
    AuthResponse,
    ChangePasswordRequest,
    DeleteAccountRequest,
    DeviceTokenRequest,
    LoginRequest,
    LogoutRequest,
    MeResponse,
    MessageResponse,
    RefreshTokenRequest,
    RegisterRequest,
    RemoveDeviceTokenRequest,
    TokenPair,
    UpdateProfileRequest,
    UserResponse,
)

router = APIRouter()


@router.post(
    "/register",
    response_model=AuthResponse,
    status_code=201,
    dependencies=[Depends(limit_auth_attempts)],
)
async def register(
    request: RegisterRequest,
    service: IAuthService = Depends(get_auth_service),
) -> AuthResponse:
    """
    Create an account and sign in.

    Returns 400 EMAIL_EXISTS if the email is already registered.
    """
    return await service.register(request)


@router.post("/login", response_model=AuthResponse, dependencies=[Depends(limit_auth_attempts)])
async def login(
    request: LoginRequest,
    service: IAuthService = Depends(get_auth_service),
) -> AuthResponse:
    """
    Sign in with email and password.

    Returns 401 INVALID_CREDENTIALS or ACCOUNT_DEACTIVATED on failure, and
    429 AUTH_RATE_LIMIT_EXCEEDED after repeated failures.
    """
    return await service.login(request)


@router.post("/refresh-token", response_model=TokenPair)
async def refresh_token(
    request: RefreshTokenRequest,
    service: IAuthService = Depends(get_auth_service),
) -> TokenPair:
    """
    Exchange a refresh token for a new token pair.

    The presented refresh token is revoked; reusing it fails with 401 REVOKED.
    """
    return await service.refresh(request.refresh_token)


@router.post("/logout", response_model=MessageResponse)
async def logout(
    request: LogoutRequest,
    user: User = Depends(get_current_user),
    service: IAuthService = Depends(get_auth_service),
) -> MessageResponse:
    """End the session of the given refresh token, or every session if omitted."""
    await service.logout(user, request.refresh_token)
    return MessageResponse(message="Logged out successfully")


@router.get("/me", response_model=MeResponse)
async def get_me(
    user: User = Depends(get_current_user),
    service: IAuthService = Depends(get_auth_service),
) -> MeResponse:
    """Current user's profile and AI usage."""
    return await service.get_me(user)


@router.patch("/profile", response_model=UserResponse)
async def update_profile(
    request: UpdateProfileRequest,
    user: User = Depends(get_current_user),
    service: IAuthService = Depends(get_auth_service),
) -> UserResponse:
    return await service.update_profile(user, request)


@router.patch("/change-password", response_model=TokenPair)
async def change_password(
    request: ChangePasswordRequest,
    user: User = Depends(get_current_user),
    service: IAuthService = Depends(get_auth_service),
) -> TokenPair:
    """
    Change the password.

    Every existing session is ended; the returned pair is the only one left.
    """
    return await service.change_password(user, request)


@router.post("/device-token", response_model=MessageResponse)
async def register_device_token(
    request: DeviceTokenRequest,
    user: User = Depends(get_current_user),
    service: IAuthService = Depends(get_auth_service),
) -> MessageResponse:
    await service.register_device_token(user, request)
    return MessageResponse(message="Device token registered")


@router.delete("/device-token", response_model=MessageResponse)
async def remove_device_token(
    request: RemoveDeviceTokenRequest,
    user: User = Depends(get_current_user),
    service: IAuthService = Depends(get_auth_service),
) -> MessageResponse:
    await service.remove_device_token(user, request.token)
    return MessageResponse(message="Device token removed")


@router.delete("/account", response_model=MessageResponse)
async def delete_account(
    request: DeleteAccountRequest,
    user: User = Depends(get_current_user),
    service: IAuthService = Depends(get_auth_service),
) -> MessageResponse:
    """Deactivate the account after confirming the password."""
    await service.delete_account(user, request.password)
    return MessageResponse(message="Account deleted successfully")
