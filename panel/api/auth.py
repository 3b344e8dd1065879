"""Login and logout: issue and clear the session cookie."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Response, status

from panel.api.deps import get_authentication_bridge
from panel.core.config import get_settings
from panel.core.exceptions import InvalidCredentials
from panel.core.security import create_session_token
from panel.schemas.auth import LoginRequest, LoginResponse, LogoutResponse
from panel.services.authentication import AuthenticationBridge
from panel.services.routing import route

router = APIRouter()


@router.post("/login", response_model=LoginResponse)
def login(
    body: LoginRequest,
    response: Response,
    bridge: Annotated[AuthenticationBridge, Depends(get_authentication_bridge)],
) -> LoginResponse:
    """
    Authenticate with email and password.

    Sets the session cookie and returns the same token for API clients, together with the
    landing page for the principal (admin area, user area or the public page).
    """
    try:
        principal = bridge.authenticate(body.email, body.password)
    except InvalidCredentials as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=e.message,
        ) from e

    settings = get_settings()
    token = create_session_token(
        sub=principal.id,
        email=principal.email,
        authorities=principal.authorities,
    )
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=token,
        max_age=settings.JWT_EXPIRE_MINUTES * 60,
        httponly=True,
        secure=settings.SESSION_COOKIE_SECURE,
        samesite="lax",
    )
    destination = route(
        principal.authorities,
        admin_landing=settings.ADMIN_AREA,
        user_landing=settings.USER_AREA,
        public_landing=settings.PUBLIC_LANDING,
    )
    return LoginResponse(access_token=token, token_type="bearer", redirect_to=destination)


@router.post("/logout", response_model=LogoutResponse)
def logout(response: Response) -> LogoutResponse:
    """Drop the session cookie."""
    response.delete_cookie(get_settings().SESSION_COOKIE_NAME)
    return LogoutResponse()
