"""Request/response schemas for login and the authenticated principal."""

from pydantic import BaseModel, Field


class LoginRequest(BaseModel):
    """Credentials for login. Email is the login key, not the username."""

    email: str = Field(..., description="Account email")
    password: str = Field(..., description="Password")


class LoginResponse(BaseModel):
    """Session token returned after successful login, plus the landing page for the principal."""

    access_token: str = Field(..., description="Signed session token (also set as a cookie)")
    token_type: str = Field(default="bearer", description="Token type")
    redirect_to: str = Field(..., description="Landing page chosen from the principal's authorities")


class LogoutResponse(BaseModel):
    """Response for POST /logout."""

    redirect_to: str = Field(default="/login?logout", description="Where the client should go next")


class PrincipalCredentials(BaseModel):
    """What the authentication layer needs to verify a login: the stored hash and authorities."""

    id: int
    email: str
    password_hash: str
    authorities: frozenset[str]


class Principal(BaseModel):
    """Authenticated identity carried by the session (id, email, authorities)."""

    id: int
    email: str
    authorities: frozenset[str] = frozenset()

    def has_authority(self, authority: str) -> bool:
        return authority in self.authorities
