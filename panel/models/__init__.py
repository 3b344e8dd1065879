"""SQLAlchemy ORM models."""

from panel.models.base import Base
from panel.models.role import DEFAULT_ROLE_NAMES, ROLE_ADMIN, ROLE_USER, Role, users_roles
from panel.models.user import User

__all__ = [
    "Base",
    "DEFAULT_ROLE_NAMES",
    "ROLE_ADMIN",
    "ROLE_USER",
    "Role",
    "User",
    "users_roles",
]
