"""Pydantic request/response schemas."""

from panel.schemas.accounts import (
    AccountCreateRequest,
    AccountDraft,
    AccountPatch,
    AccountRead,
    AccountsListResponse,
    AccountUpdateRequest,
    AdminPanelResponse,
    RoleIds,
    RoleNames,
    RoleRead,
    RoleSelector,
    RolesListResponse,
)
from panel.schemas.auth import (
    LoginRequest,
    LoginResponse,
    LogoutResponse,
    Principal,
    PrincipalCredentials,
)
from panel.schemas.health import HealthResponse

__all__ = [
    "AccountCreateRequest",
    "AccountDraft",
    "AccountPatch",
    "AccountRead",
    "AccountsListResponse",
    "AccountUpdateRequest",
    "AdminPanelResponse",
    "HealthResponse",
    "LoginRequest",
    "LoginResponse",
    "LogoutResponse",
    "Principal",
    "PrincipalCredentials",
    "RoleIds",
    "RoleNames",
    "RoleRead",
    "RoleSelector",
    "RolesListResponse",
]
