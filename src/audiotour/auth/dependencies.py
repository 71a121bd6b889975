"""FastAPI authentication dependencies.

``get_current_identity`` rejects requests without a valid token,
``get_optional_identity`` never rejects, and ``get_admin_identity`` adds the
role check used by catalogue writes.
"""

from __future__ import annotations

import structlog
from fastapi import Depends, Request, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from audiotour.auth.jwt import TokenClaims, TokenService, get_token_service
from audiotour.config import Settings, get_settings
from audiotour.errors import AuthRequiredError, ForbiddenError, TokenError

logger = structlog.get_logger()

ADMIN_ROLE = "admin"

# auto_error=False so a missing header reaches us and gets the envelope response
_bearer = HTTPBearer(auto_error=False)


def _bearer_token(credentials: HTTPAuthorizationCredentials | None) -> str | None:
    if credentials is None:
        return None
    token = credentials.credentials.strip()
    return token or None


async def get_current_identity(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Security(_bearer),
    tokens: TokenService = Depends(get_token_service),
) -> TokenClaims:
    """
    Extract and verify the bearer token, return its claims.

    Raises AuthRequiredError when no token is sent, and the matching TokenError
    subclass (expired / invalid / other) when verification fails.
    """
    token = _bearer_token(credentials)
    if token is None:
        raise AuthRequiredError

    try:
        identity = tokens.verify(token)
    except TokenError as e:
        logger.info("token_rejected", reason=e.error, path=request.url.path)
        raise

    request.state.identity = identity
    structlog.contextvars.bind_contextvars(user_id=identity.id)
    return identity


async def get_optional_identity(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Security(_bearer),
    tokens: TokenService = Depends(get_token_service),
) -> TokenClaims | None:
    """Same as get_current_identity, but any failure yields None instead of an error."""
    identity: TokenClaims | None = None
    token = _bearer_token(credentials)
    if token is not None:
        try:
            identity = tokens.verify(token)
        except TokenError:
            identity = None

    request.state.identity = identity
    if identity is not None:
        structlog.contextvars.bind_contextvars(user_id=identity.id)
    return identity


async def get_admin_identity(
    identity: TokenClaims = Depends(get_current_identity),
    settings: Settings = Depends(get_settings),
) -> TokenClaims:
    """
    Identity allowed to modify the catalogue.

    With ``admin_role_required`` off (the default) every authenticated identity
    qualifies; with it on, the token's role must be ``admin``.
    """
    if settings.admin_role_required and identity.role != ADMIN_ROLE:
        raise ForbiddenError
    return identity
