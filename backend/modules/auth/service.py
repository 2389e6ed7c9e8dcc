"""
Authentication service implementation.

Account lifecycle (register, login, profile, password change, soft delete)
on top of the Session Manager, which owns the tokens themselves.
"""

import logging
import uuid
from datetime import datetime
from typing import Callable, Optional

from shared.models import User, utc_now
from modules.users.interfaces import IUserRepository
from modules.users.repository import normalize_email, update_user
from modules.usage.interfaces import IUsageGate
from modules.analytics.interfaces import IAnalyticsService
from modules.analytics.models import EventType

from .exceptions import (
    AccountDeactivatedError,
    InvalidCredentialsError,
    InvalidPasswordError,
    UserNotFoundError,
)
from .interfaces import IAuthService
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
from .passwords import PasswordHasher
from .sessions import SessionManager


logger = logging.getLogger(__name__)


class AuthService(IAuthService):
    """
    Implementation of the authentication service.

    Args:
        users: User storage
        sessions: Session Manager for token issue/rotation/revocation
        hasher: bcrypt password hasher
        usage: Usage gate, for the snapshot returned by /auth/me
        analytics: Optional event tracker; failures never reach callers
    """

    def __init__(
        self,
        users: IUserRepository,
        sessions: SessionManager,
        hasher: PasswordHasher,
        usage: IUsageGate,
        analytics: Optional[IAnalyticsService] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self._users = users
        self._sessions = sessions
        self._hasher = hasher
        self._usage = usage
        self._analytics = analytics
        self._clock = clock or utc_now

    async def authenticate(self, token: Optional[str]) -> User:
        return await self._sessions.authenticate(token)

    # -------------------------------------------------------------------------
    # Sign-up / sign-in
    # -------------------------------------------------------------------------

    async def register(self, request: RegisterRequest) -> AuthResponse:
        now = self._clock()
        user = User(
            id=str(uuid.uuid4()),
            email=normalize_email(request.email),
            password_hash=self._hasher.hash(request.password),
            first_name=request.first_name,
            last_name=request.last_name,
            created_at=now,
            updated_at=now,
        )
        created = self._users.create(user)

        pair = await self._sessions.start_session(
            created.id,
            mutate=lambda u: setattr(u, "last_login_at", now),
        )
        logger.info("Registered user %s", created.id)
        await self._track(created.id, EventType.USER_REGISTERED)

        return AuthResponse(
            access_token=pair.access_token,
            refresh_token=pair.refresh_token,
            user=UserResponse.from_user(self._reload(created.id)),
        )

    async def login(self, request: LoginRequest) -> AuthResponse:
        user = self._users.get_by_email(request.email)
        if user is None or not self._hasher.verify(request.password, user.password_hash):
            raise InvalidCredentialsError()
        if not user.is_active:
            raise AccountDeactivatedError()

        now = self._clock()
        pair = await self._sessions.start_session(
            user.id,
            mutate=lambda u: setattr(u, "last_login_at", now),
        )
        logger.info("User %s logged in", user.id)
        await self._track(user.id, EventType.USER_LOGIN)

        return AuthResponse(
            access_token=pair.access_token,
            refresh_token=pair.refresh_token,
            user=UserResponse.from_user(self._reload(user.id)),
        )

    async def refresh(self, refresh_token: str) -> TokenPair:
        return await self._sessions.refresh(refresh_token)

    async def logout(self, user: User, refresh_token: Optional[str] = None) -> None:
        if refresh_token:
            await self._sessions.revoke_refresh_token(user.id, refresh_token)
        else:
            await self._sessions.revoke_all(user.id)
        await self._track(user.id, EventType.USER_LOGOUT)

    # -------------------------------------------------------------------------
    # Profile
    # -------------------------------------------------------------------------

    async def get_me(self, user: User) -> MeResponse:
        current = self._reload(user.id)
        snapshot = await self._usage.check(current, self._clock())
        return MeResponse(user=UserResponse.from_user(current), usage=snapshot)

    async def update_profile(self, user: User, request: UpdateProfileRequest) -> UserResponse:
        def apply(target: User) -> None:
            if request.first_name is not None:
                target.first_name = request.first_name.strip()
            if request.last_name is not None:
                target.last_name = request.last_name.strip()
            if request.avatar is not None:
                target.avatar = request.avatar
            if request.preferences is not None:
                target.preferences = request.preferences.merge_into(target.preferences)

        updated = update_user(self._users, user.id, apply)
        return UserResponse.from_user(updated)

    async def change_password(self, user: User, request: ChangePasswordRequest) -> TokenPair:
        current = self._reload(user.id)
        if not self._hasher.verify(request.current_password, current.password_hash):
            raise InvalidPasswordError()

        new_hash = self._hasher.hash(request.new_password)
        changed_at = self._clock()

        def apply(target: User) -> None:
            target.password_hash = new_hash
            target.password_changed_at = changed_at

        pair = await self._sessions.start_session(user.id, replace_existing=True, mutate=apply)
        logger.info("Password changed for user %s", user.id)
        await self._track(user.id, EventType.PASSWORD_CHANGED)
        return pair

    # -------------------------------------------------------------------------
    # Devices
    # -------------------------------------------------------------------------

    async def register_device_token(self, user: User, request: DeviceTokenRequest) -> None:
        await self._sessions.register_device_token(user.id, request.token, request.platform)

    async def remove_device_token(self, user: User, token: str) -> None:
        await self._sessions.remove_device_token(user.id, token)

    # -------------------------------------------------------------------------
    # Account deletion
    # -------------------------------------------------------------------------

    async def delete_account(self, user: User, password: str) -> None:
        current = self._reload(user.id)
        if not self._hasher.verify(password, current.password_hash):
            raise InvalidPasswordError("Password is incorrect")

        stamp = int(self._clock().timestamp() * 1000)

        def deactivate(target: User) -> None:
            target.is_active = False
            target.email = f"deleted_{stamp}_{target.email}"
            target.refresh_tokens = []
            target.device_tokens = []

        update_user(self._users, user.id, deactivate)
        logger.info("Deleted account of user %s", user.id)
        await self._track(user.id, EventType.ACCOUNT_DELETED)

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _reload(self, user_id: str) -> User:
        user = self._users.get_by_id(user_id)
        if user is None:
            raise UserNotFoundError(user_id)
        return user

    async def _track(self, user_id: str, event: EventType) -> None:
        if self._analytics is not None:
            await self._analytics.track(user_id, event)
