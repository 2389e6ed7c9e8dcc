"""
Session Manager.

Owns the token lifecycle of a user: issuing access/refresh pairs, checking
access tokens against the user record, rotating and revoking refresh
tokens, and the bounded device token list.

Every mutation of a user's token lists runs under the per-user lock and is
persisted with a compare-and-swap on the user's version, so concurrent
rotations of the same token cannot both succeed.
"""

import logging
from datetime import datetime
from typing import Callable, Optional

from shared.fifo import append_bounded, remove_where
from shared.locks import KeyedLock
from shared.models import DeviceToken, Platform, RefreshTokenEntry, User, utc_now
from modules.users.interfaces import IUserRepository
from modules.users.repository import update_user

from .exceptions import (
    AccountDeactivatedError,
    MissingTokenError,
    RevokedTokenError,
    StaleTokenError,
    UserNotFoundError,
)
from .models import IssuedToken, RefreshTokenClaims, TokenPair
from .tokens import TokenSigner, epoch_ms


logger = logging.getLogger(__name__)

UserMutator = Callable[[User], None]


def password_changed_after(user: User, issued_at_ms: int) -> bool:
    """True if the password was changed after a token issued at `issued_at_ms` (epoch milliseconds)."""
    if user.password_changed_at is None:
        return False
    return issued_at_ms < epoch_ms(user.password_changed_at)


class SessionManager:
    """
    Issues, verifies, rotates and revokes user sessions.

    Args:
        users: User storage
        signer: JWT signer for both token kinds
        locks: Per-user locks; pass the same instance to every service
            that writes user records
        max_refresh_tokens: Cap on live refresh tokens per user
        max_device_tokens: Cap on registered device tokens per user
    """

    def __init__(
        self,
        users: IUserRepository,
        signer: TokenSigner,
        locks: Optional[KeyedLock] = None,
        max_refresh_tokens: int = 5,
        max_device_tokens: int = 5,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self._users = users
        self._signer = signer
        self._locks = locks or KeyedLock()
        self._max_refresh_tokens = max_refresh_tokens
        self._max_device_tokens = max_device_tokens
        self._clock = clock or utc_now

    @property
    def signer(self) -> TokenSigner:
        return self._signer

    # -------------------------------------------------------------------------
    # Verification
    # -------------------------------------------------------------------------

    async def authenticate(self, token: Optional[str]) -> User:
        """
        Resolve an access token to its active user.

        Raises:
            MissingTokenError: No token supplied
            InvalidTokenError / ExpiredTokenError: Token fails verification
            UserNotFoundError: The user no longer exists
            AccountDeactivatedError: The account is deactivated
            StaleTokenError: The token predates the last password change
        """
        if not token:
            raise MissingTokenError()

        claims = self._signer.verify_access_token(token)
        user = self._users.get_by_id(claims.user_id)
        if user is None:
            raise UserNotFoundError(claims.user_id)
        if not user.is_active:
            raise AccountDeactivatedError()
        if password_changed_after(user, claims.issued_at_ms):
            raise StaleTokenError()
        return user

    async def verify_refresh_token(self, token: str) -> RefreshTokenClaims:
        """
        Verify a refresh token and that its owner still honors it.

        Raises:
            InvalidTokenError / ExpiredTokenError / WrongTokenTypeError
            UserNotFoundError / AccountDeactivatedError
            RevokedTokenError: Not present in the owner's token list
        """
        claims = self._signer.verify_refresh_token(token)
        user = self._users.get_by_id(claims.user_id)
        if user is None:
            raise UserNotFoundError(claims.user_id)
        if not user.is_active:
            raise AccountDeactivatedError()
        if not user.has_refresh_token(token):
            raise RevokedTokenError()
        return claims

    # -------------------------------------------------------------------------
    # Refresh tokens
    # -------------------------------------------------------------------------

    async def start_session(
        self,
        user_id: str,
        *,
        replace_existing: bool = False,
        mutate: Optional[UserMutator] = None,
    ) -> TokenPair:
        """
        Issue a new token pair and store the refresh token.

        With `replace_existing`, every other refresh token of the user is
        dropped (password change). `mutate` applies further edits to the
        user record in the same write.
        """
        issued = self._signer.issue_refresh_token(user_id)
        access_token = self._signer.issue_access_token(user_id)

        def add_token(user: User) -> None:
            existing = [] if replace_existing else user.refresh_tokens
            user.refresh_tokens = self._push_refresh_token(existing, issued)
            if mutate is not None:
                mutate(user)

        async with self._locks.hold(user_id):
            update_user(self._users, user_id, add_token)

        return TokenPair(access_token=access_token, refresh_token=issued.token)

    async def rotate_refresh_token(self, user_id: str, old_token: str) -> str:
        """
        Replace `old_token` with a freshly issued refresh token.

        Removal and insertion happen in one write. If `old_token` is no
        longer in the list at rotation time the list is left untouched.

        Raises:
            RevokedTokenError: `old_token` was already rotated or revoked
        """
        issued = self._signer.issue_refresh_token(user_id)

        def swap(user: User) -> None:
            if not user.has_refresh_token(old_token):
                raise RevokedTokenError()
            remaining = remove_where(user.refresh_tokens, lambda e: e.token == old_token)
            user.refresh_tokens = self._push_refresh_token(remaining, issued)

        async with self._locks.hold(user_id):
            update_user(self._users, user_id, swap)

        logger.debug("Rotated refresh token for user %s", user_id)
        return issued.token

    async def refresh(self, refresh_token: str) -> TokenPair:
        """Verify a refresh token and exchange it for a new pair."""
        claims = await self.verify_refresh_token(refresh_token)
        new_refresh = await self.rotate_refresh_token(claims.user_id, refresh_token)
        access_token = self._signer.issue_access_token(claims.user_id)
        return TokenPair(access_token=access_token, refresh_token=new_refresh)

    async def revoke_refresh_token(self, user_id: str, token: str) -> None:
        """Remove one refresh token; a no-op if it is not present."""

        def drop(user: User) -> None:
            user.refresh_tokens = remove_where(user.refresh_tokens, lambda e: e.token == token)

        async with self._locks.hold(user_id):
            update_user(self._users, user_id, drop)

    async def revoke_all(self, user_id: str) -> None:
        """End every session of the user."""

        def clear(user: User) -> None:
            user.refresh_tokens = []

        async with self._locks.hold(user_id):
            update_user(self._users, user_id, clear)

    # -------------------------------------------------------------------------
    # Device tokens
    # -------------------------------------------------------------------------

    async def register_device_token(self, user_id: str, token: str, platform: Platform) -> User:
        """Add a device token; registering a known token changes nothing."""

        def add(user: User) -> None:
            if any(d.token == token for d in user.device_tokens):
                return
            entry = DeviceToken(token=token, platform=platform, created_at=self._clock())
            user.device_tokens = append_bounded(
                user.device_tokens, entry, self._max_device_tokens
            )

        async with self._locks.hold(user_id):
            return update_user(self._users, user_id, add)

    async def remove_device_token(self, user_id: str, token: str) -> User:
        """Remove a device token; a no-op if it is not present."""

        def drop(user: User) -> None:
            user.device_tokens = remove_where(user.device_tokens, lambda d: d.token == token)

        async with self._locks.hold(user_id):
            return update_user(self._users, user_id, drop)

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _push_refresh_token(
        self,
        entries: list[RefreshTokenEntry],
        issued: IssuedToken,
    ) -> list[RefreshTokenEntry]:
        now = self._clock()
        live = [e for e in entries if e.expires_at > now]
        entry = RefreshTokenEntry(
            token=issued.token,
            issued_at=issued.issued_at,
            expires_at=issued.expires_at,
        )
        return append_bounded(live, entry, self._max_refresh_tokens)
