"""Request/response schemas for account and role management."""

from typing import Annotated, Literal

from pydantic import BaseModel, Field, field_validator


class RoleNames(BaseModel):
    """Select roles by name (e.g. ["ROLE_USER"])."""

    kind: Literal["names"] = "names"
    names: list[str] = Field(default_factory=list, description="Role names")

    def is_empty(self) -> bool:
        return not any(n and n.strip() for n in self.names)


class RoleIds(BaseModel):
    """Select roles by id."""

    kind: Literal["ids"] = "ids"
    ids: list[int] = Field(default_factory=list, description="Role ids")

    def is_empty(self) -> bool:
        return not self.ids


RoleSelector = Annotated[RoleNames | RoleIds, Field(discriminator="kind")]


class AccountDraft(BaseModel):
    """
    Fields for a new account. Constraints are checked by the account directory so that
    every violation is reported in one response.
    """

    username: str = ""
    email: str = ""
    password: str = ""
    first_name: str = ""
    last_name: str = ""
    age: int = 0


class AccountPatch(BaseModel):
    """Partial update; None leaves a field unchanged. An empty password keeps the stored hash."""

    username: str | None = None
    email: str | None = None
    password: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    age: int | None = None


class AccountCreateRequest(AccountDraft):
    """POST /admin/users body: draft fields plus the mandatory role selector."""

    roles: RoleSelector | None = Field(default=None, description="Roles to assign (required)")


class AccountUpdateRequest(AccountPatch):
    """PUT /admin/users/{id} body: patch fields plus an optional role selector."""

    roles: RoleSelector | None = Field(
        default=None, description="Replacement roles; omit to keep the current ones"
    )


class RoleRead(BaseModel):
    """Role entry (id, name)."""

    id: int
    name: str

    class Config:
        from_attributes = True


class AccountRead(BaseModel):
    """Account as returned by the API (no password hash)."""

    id: int
    username: str
    email: str
    first_name: str
    last_name: str
    age: int
    roles: list[RoleRead]

    class Config:
        from_attributes = True

    @field_validator("roles", mode="before")
    @classmethod
    def roles_as_list(cls, v: object) -> object:
        # ORM collection is a set
        if isinstance(v, (set, frozenset)):
            return list(v)
        return v

    @field_validator("roles")
    @classmethod
    def sort_roles(cls, v: list[RoleRead]) -> list[RoleRead]:
        return sorted(v, key=lambda r: r.name)


class AccountsListResponse(BaseModel):
    """Response for role membership queries."""

    users: list[AccountRead]


class RolesListResponse(BaseModel):
    """Response for GET /admin/roles."""

    roles: list[RoleRead]


class AdminPanelResponse(BaseModel):
    """Response for GET /admin: every account and every assignable role."""

    users: list[AccountRead]
    roles: list[RoleRead]
