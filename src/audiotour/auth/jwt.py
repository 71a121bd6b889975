"""
HS256 JWT identity tokens.

Tokens are stateless: the server keeps no session, and ``verify`` rebuilds the
caller's identity from the signed claims. Verification failures are split three
ways because clients react differently to each: an expired token means log in
again, an invalid one should be discarded, anything else may be retried.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import Any

import jwt
import structlog
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from audiotour.config import Settings, get_settings
from audiotour.errors import TokenExpiredError, TokenInvalidError, TokenVerificationError

logger = structlog.get_logger()

# Used only outside production when AUDIOTOUR_JWT_SECRET is unset.
INSECURE_DEV_SECRET = "audiotour-insecure-development-secret-change-me"

_REQUIRED_CLAIMS = ["exp", "iat"]


class TokenClaims(BaseModel):
    """Identity asserted by a token."""

    id: int
    email: str
    is_premium: bool = False
    subscription_type: str = "free"
    role: str = "user"


class TokenService:
    """Issues and verifies signed, expiring identity tokens."""

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        expire_days: int = 7,
        leeway_seconds: int = 30,
    ) -> None:
        if not secret:
            msg = "TokenService requires a non-empty secret"
            raise ValueError(msg)
        self._secret = secret
        self.algorithm = algorithm
        self.expire_days = expire_days
        self.leeway = timedelta(seconds=leeway_seconds)

    @classmethod
    def from_settings(cls, settings: Settings) -> TokenService:
        """
        Build a token service from settings.

        An unset secret is fatal in production. Elsewhere the insecure development
        secret is used and a warning is logged.
        """
        secret = settings.jwt_secret
        if not secret:
            if settings.is_production:
                msg = "AUDIOTOUR_JWT_SECRET must be set in production"
                raise RuntimeError(msg)
            logger.warning("jwt_secret_fallback_in_use", environment=settings.environment)
            secret = INSECURE_DEV_SECRET
        return cls(
            secret,
            algorithm=settings.jwt_algorithm,
            expire_days=settings.jwt_expire_days,
            leeway_seconds=settings.jwt_leeway_seconds,
        )

    def issue(self, claims: TokenClaims, now: datetime | None = None) -> str:
        """
        Sign ``claims`` with an expiry of ``expire_days`` from ``now``.

        Args:
            claims: Identity to embed.
            now: Issuance time; defaults to the current UTC time.

        Returns:
            Encoded JWT string.
        """
        now = now or datetime.now(timezone.utc)
        payload: dict[str, Any] = {
            **claims.model_dump(),
            "iat": now,
            "exp": now + timedelta(days=self.expire_days),
        }
        return jwt.encode(payload, self._secret, algorithm=self.algorithm)

    def verify(self, token: str) -> TokenClaims:
        """
        Verify and decode a token.

        Args:
            token: The encoded JWT string.

        Returns:
            The claims the token was issued with.

        Raises:
            TokenExpiredError: Signature is valid but the token has expired.
            TokenInvalidError: Token is malformed or the signature does not match.
            TokenVerificationError: Any other verification failure.
        """
        payload = self._decode(token)

        try:
            return TokenClaims.model_validate(payload)
        except PydanticValidationError as e:
            raise TokenVerificationError(message="Token claims are incomplete") from e

    def _decode(self, token: str) -> dict[str, Any]:
        try:
            return jwt.decode(
                token,
                self._secret,
                algorithms=[self.algorithm],
                options={"require": _REQUIRED_CLAIMS},
                leeway=self.leeway,
            )
        except jwt.ExpiredSignatureError as e:
            raise TokenExpiredError from e
        except jwt.DecodeError as e:
            # Also covers InvalidSignatureError
            raise TokenInvalidError from e
        except jwt.InvalidTokenError as e:
            raise TokenVerificationError from e


@lru_cache
def get_token_service() -> TokenService:
    """Get the process-wide token service (FastAPI dependency)."""
    return TokenService.from_settings(get_settings())
