"""
JWT signing and verification.

Access and refresh tokens are HS256 JWTs signed with separate secrets and
tagged with a `type` claim. Verification here is purely cryptographic;
checks against the user record live in sessions.py.
"""

import uuid
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

import jwt
from pydantic import ValidationError as PydanticValidationError

from shared.models import utc_now

from .exceptions import ExpiredTokenError, InvalidTokenError, WrongTokenTypeError
from .models import (
    AccessTokenClaims,
    IssuedToken,
    JWTPayload,
    RefreshTokenClaims,
    TokenType,
)


Clock = Callable[[], datetime]


def epoch_ms(moment: datetime) -> int:
    return int(moment.timestamp() * 1000)


class TokenSigner:
    """
    Issues and verifies access/refresh JWTs.

    Issuing is a pure function of the secret, the lifetime and the clock.
    """

    def __init__(
        self,
        secret: str,
        refresh_secret: str,
        access_ttl: timedelta = timedelta(days=7),
        refresh_ttl: timedelta = timedelta(days=30),
        algorithm: str = "HS256",
        clock: Optional[Clock] = None,
    ):
        self._secret = secret
        self._refresh_secret = refresh_secret
        self._access_ttl = access_ttl
        self._refresh_ttl = refresh_ttl
        self._algorithm = algorithm
        self._clock = clock or utc_now

    @property
    def refresh_ttl(self) -> timedelta:
        return self._refresh_ttl

    def issue_access_token(self, user_id: str) -> str:
        return self._issue(user_id, "access").token

    def issue_refresh_token(self, user_id: str) -> IssuedToken:
        return self._issue(user_id, "refresh")

    def verify_access_token(self, token: str) -> AccessTokenClaims:
        """
        Verify signature, expiry and kind of an access token.

        Raises:
            ExpiredTokenError: Past its expiry
            InvalidTokenError: Bad signature or structure, or not an access token
        """
        payload = self._decode(token, self._secret)
        if payload.type != "access":
            raise InvalidTokenError()
        return AccessTokenClaims(
            user_id=payload.sub,
            issued_at=payload.iat,
            issued_at_ms=payload.issued_at_ms,
        )

    def verify_refresh_token(self, token: str) -> RefreshTokenClaims:
        """
        Verify signature, expiry and kind of a refresh token.

        Raises:
            ExpiredTokenError: Past its expiry
            InvalidTokenError: Bad signature or structure
            WrongTokenTypeError: The `type` claim is not "refresh"
        """
        try:
            payload = self._decode(token, self._refresh_secret)
        except InvalidTokenError:
            # An access token fails the refresh signature; report it by kind
            if self._secret != self._refresh_secret and self._signed_with(token, self._secret):
                raise WrongTokenTypeError()
            raise
        if payload.type != "refresh":
            raise WrongTokenTypeError()
        return RefreshTokenClaims(user_id=payload.sub, issued_at=payload.iat)

    def _issue(self, user_id: str, token_type: TokenType) -> IssuedToken:
        now = self._clock().astimezone(timezone.utc)
        ttl = self._access_ttl if token_type == "access" else self._refresh_ttl
        expires_at = now + ttl
        payload = {
            "sub": user_id,
            "iat": int(now.timestamp()),
            "exp": int(expires_at.timestamp()),
            "type": token_type,
            "jti": uuid.uuid4().hex,
            "iat_ms": epoch_ms(now),
        }
        secret = self._secret if token_type == "access" else self._refresh_secret
        token = jwt.encode(payload, secret, algorithm=self._algorithm)
        return IssuedToken(token=token, issued_at=now, expires_at=expires_at)

    def _signed_with(self, token: str, secret: str) -> bool:
        try:
            jwt.decode(
                token,
                secret,
                algorithms=[self._algorithm],
                options={"verify_exp": False, "verify_iat": False},
            )
        except jwt.InvalidTokenError:
            return False
        return True

    def _decode(self, token: str, secret: str) -> JWTPayload:
        if not token:
            raise InvalidTokenError()
        try:
            # Expiry is checked against the injected clock, not wall time
            raw = jwt.decode(
                token,
                secret,
                algorithms=[self._algorithm],
                options={
                    "verify_exp": False,
                    "verify_iat": False,
                    "require": ["sub", "iat", "exp"],
                },
            )
            payload = JWTPayload(**raw)
        except jwt.InvalidTokenError as e:
            raise InvalidTokenError(f"Invalid token: {e}")
        except PydanticValidationError:
            raise InvalidTokenError()

        if payload.exp <= int(self._clock().timestamp()):
            raise ExpiredTokenError()
        return payload
