"""Admin area: account management and role listings. Access is gated by the policy middleware."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status

from panel.api.deps import get_current_principal, get_directory, get_role_store
from panel.api.errors import EXPECTED_ERRORS, to_http_exception
from panel.models.role import ROLE_ADMIN
from panel.repositories import RoleStore
from panel.schemas.accounts import (
    AccountCreateRequest,
    AccountDraft,
    AccountPatch,
    AccountRead,
    AccountsListResponse,
    AccountUpdateRequest,
    AdminPanelResponse,
    RoleRead,
    RolesListResponse,
)
from panel.schemas.auth import Principal
from panel.services.directory import AccountDirectory


def require_admin(
    principal: Annotated[Principal, Depends(get_current_principal)],
) -> Principal:
    """Dependency: require ROLE_ADMIN. Raises 403 for other principals."""
    if not principal.has_authority(ROLE_ADMIN):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required",
        )
    return principal


router = APIRouter(dependencies=[Depends(require_admin)])


@router.get("", response_model=AdminPanelResponse)
def get_admin_panel(
    directory: Annotated[AccountDirectory, Depends(get_directory)],
    roles: Annotated[RoleStore, Depends(get_role_store)],
) -> AdminPanelResponse:
    """Every account with its roles, plus every assignable role."""
    return AdminPanelResponse(
        users=[AccountRead.model_validate(u) for u in directory.find_all()],
        roles=[RoleRead.model_validate(r) for r in roles.find_all()],
    )


@router.get("/roles", response_model=RolesListResponse)
def list_roles(roles: Annotated[RoleStore, Depends(get_role_store)]) -> RolesListResponse:
    return RolesListResponse(roles=[RoleRead.model_validate(r) for r in roles.find_all()])


@router.get("/roles/{role_name}/users", response_model=AccountsListResponse)
def list_role_members(
    role_name: str,
    directory: Annotated[AccountDirectory, Depends(get_directory)],
    roles: Annotated[RoleStore, Depends(get_role_store)],
) -> AccountsListResponse:
    """Accounts holding role_name. 404 when the role does not exist."""
    if roles.find_by_name(role_name) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Role not found")
    return AccountsListResponse(
        users=[AccountRead.model_validate(u) for u in directory.find_all_by_role(role_name)]
    )


@router.post("/users", response_model=AccountRead, status_code=status.HTTP_201_CREATED)
def create_user(
    body: AccountCreateRequest,
    directory: Annotated[AccountDirectory, Depends(get_directory)],
) -> AccountRead:
    """
    Create an account. Every invalid field is reported at once (422); a taken username or
    email is a 409. At least one existing role must be selected, by name or by id.
    """
    draft = AccountDraft.model_validate(body.model_dump(exclude={"roles"}))
    try:
        user = directory.create(draft, body.roles)
    except EXPECTED_ERRORS as e:
        raise to_http_exception(e) from e
    return AccountRead.model_validate(user)


@router.get("/users/{user_id}", response_model=AccountRead)
def get_user(
    user_id: int,
    directory: Annotated[AccountDirectory, Depends(get_directory)],
) -> AccountRead:
    try:
        user = directory.find_by_id(user_id)
    except EXPECTED_ERRORS as e:
        raise to_http_exception(e) from e
    return AccountRead.model_validate(user)


@router.put("/users/{user_id}", response_model=AccountRead)
def update_user(
    user_id: int,
    body: AccountUpdateRequest,
    directory: Annotated[AccountDirectory, Depends(get_directory)],
) -> AccountRead:
    """Update supplied fields; an empty password keeps the current one, omitted roles stay as they are."""
    patch = AccountPatch.model_validate(body.model_dump(exclude={"roles"}))
    try:
        user = directory.update(user_id, patch, body.roles)
    except EXPECTED_ERRORS as e:
        raise to_http_exception(e) from e
    return AccountRead.model_validate(user)


@router.delete("/users/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_user(
    user_id: int,
    directory: Annotated[AccountDirectory, Depends(get_directory)],
) -> None:
    try:
        directory.delete(user_id)
    except EXPECTED_ERRORS as e:
        raise to_http_exception(e) from e
