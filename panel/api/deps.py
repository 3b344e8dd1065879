"""Shared FastAPI dependencies: services per request and the session principal."""

import logging
from typing import Annotated

import jwt
from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from panel.core.config import get_settings
from panel.core.database import get_db
from panel.core.security import PasswordHasher, decode_session_token
from panel.repositories import RoleStore
from panel.schemas.auth import Principal
from panel.services.authentication import AuthenticationBridge
from panel.services.directory import AccountDirectory

logger = logging.getLogger(__name__)


def get_password_hasher() -> PasswordHasher:
    """Dependency: bcrypt hasher at the configured cost."""
    return PasswordHasher(rounds=get_settings().BCRYPT_ROUNDS)


def get_directory(
    db: Annotated[Session, Depends(get_db)],
    hasher: Annotated[PasswordHasher, Depends(get_password_hasher)],
) -> AccountDirectory:
    return AccountDirectory(db, hasher)


def get_role_store(db: Annotated[Session, Depends(get_db)]) -> RoleStore:
    return RoleStore(db)


def get_authentication_bridge(
    directory: Annotated[AccountDirectory, Depends(get_directory)],
    hasher: Annotated[PasswordHasher, Depends(get_password_hasher)],
) -> AuthenticationBridge:
    return AuthenticationBridge(directory, hasher)


def session_token_from_request(request: Request) -> str | None:
    """Session cookie first, then an Authorization: Bearer header for API clients."""
    token = request.cookies.get(get_settings().SESSION_COOKIE_NAME)
    if token:
        return token
    header = request.headers.get("Authorization", "")
    scheme, _, credentials = header.partition(" ")
    if scheme.lower() == "bearer" and credentials.strip():
        return credentials.strip()
    return None


def principal_from_token(token: str | None) -> Principal | None:
    """Rebuild the principal cached in the session token; None for a missing or invalid token."""
    if not token:
        return None
    try:
        payload = decode_session_token(token)
    except jwt.PyJWTError:
        logger.debug("Ignoring invalid or expired session token")
        return None
    try:
        user_id = int(payload.get("sub"))
    except (TypeError, ValueError):
        return None
    email = payload.get("email")
    authorities = payload.get("authorities")
    if not isinstance(email, str) or not isinstance(authorities, list):
        return None
    return Principal(id=user_id, email=email, authorities=frozenset(authorities))


def get_current_principal(request: Request) -> Principal:
    """Dependency: the principal resolved by the access policy middleware. Raises 401 if anonymous."""
    principal = getattr(request.state, "principal", None)
    if principal is None:
        principal = principal_from_token(session_token_from_request(request))
    if principal is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return principal
