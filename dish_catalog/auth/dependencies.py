from __future__ import annotations

import logging

from fastapi import Depends, HTTPException, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from ..catalog.engine import QueryEngine
from ..errors import InvalidTokenError
from .credentials import CredentialService
from .models import Role, TokenClaims
from .users import UserService

logger = logging.getLogger(__name__)

_bearer = HTTPBearer(auto_error=False)
_CHALLENGE = {"WWW-Authenticate": "Bearer"}


def get_engine(request: Request) -> QueryEngine:
    return request.app.state.engine


def get_credentials(request: Request) -> CredentialService:
    return request.app.state.credentials


def get_users(request: Request) -> UserService:
    return request.app.state.users


def require_user(
    bearer: HTTPAuthorizationCredentials | None = Depends(_bearer),
    credentials: CredentialService = Depends(get_credentials),
) -> TokenClaims:
    """Raise 401 unless the request carries a valid bearer token."""
    if bearer is None:
        raise HTTPException(status_code=401, detail="Authentication required", headers=_CHALLENGE)
    try:
        return credentials.verify_token(bearer.credentials)
    except InvalidTokenError as exc:
        logger.info("Rejected bearer token: %s", exc)
        raise HTTPException(
            status_code=401, detail="Invalid or expired token", headers=_CHALLENGE,
        ) from exc


def require_admin(claims: TokenClaims = Depends(require_user)) -> TokenClaims:
    """Raise 401 if not authenticated, 403 if not admin."""
    if claims.role is not Role.admin:
        raise HTTPException(status_code=403, detail="Insufficient permissions")
    return claims
