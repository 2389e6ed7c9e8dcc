"""
Authentication module interface.

Routes and other modules depend on IAuthService, not the concrete
implementation.
"""

from typing import Optional, Protocol, runtime_checkable

from shared.models import User

from .models import (
    AuthResponse,
    ChangePasswordRequest,
    DeviceTokenRequest,
    LoginRequest,
    MeResponse,
    RegisterRequest,
    TokenPair,
    UpdateProfileRequest,
    UserResponse,
)


@runtime_checkable
class IAuthService(Protocol):
    """
    Interface for account and session operations.

    Every method that takes a `user` expects one already resolved from an
    access token by SessionManager.authenticate().
    """

    async def authenticate(self, token: Optional[str]) -> User:
        """
        Resolve a bearer access token to its user.

        Raises:
            AuthenticationError: If the token or its user is not acceptable
        """
        ...

    async def register(self, request: RegisterRequest) -> AuthResponse:
        """
        Create an account and start its first session.

        Raises:
            EmailAlreadyExistsError: If the email is taken
        """
        ...

    async def login(self, request: LoginRequest) -> AuthResponse:
        """
        Check credentials and start a session.

        Raises:
            InvalidCredentialsError: Unknown email or wrong password
            AccountDeactivatedError: Account is deactivated
        """
        ...

    async def refresh(self, refresh_token: str) -> TokenPair:
        """
        Rotate a refresh token into a new pair.

        Raises:
            AuthenticationError: Any Session Manager failure kind
        """
        ...

    async def logout(self, user: User, refresh_token: Optional[str] = None) -> None:
        """End one session, or all sessions when no token is given."""
        ...

    async def get_me(self, user: User) -> MeResponse:
        """Profile plus current usage snapshot."""
        ...

    async def update_profile(self, user: User, request: UpdateProfileRequest) -> UserResponse:
        """Update names, avatar and merge preferences."""
        ...

    async def change_password(self, user: User, request: ChangePasswordRequest) -> TokenPair:
        """
        Change the password and invalidate every other session.

        Raises:
            InvalidPasswordError: Current password is wrong
        """
        ...

    async def register_device_token(self, user: User, request: DeviceTokenRequest) -> None:
        ...

    async def remove_device_token(self, user: User, token: str) -> None:
        ...

    async def delete_account(self, user: User, password: str) -> None:
        """
        Soft-delete the account after confirming the password.

        Raises:
            InvalidPasswordError: Password is wrong
        """
        ...
