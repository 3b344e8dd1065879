"""ORM model for roles and the users_roles association table."""

from sqlalchemy import Column, ForeignKey, Integer, String, Table

from panel.models.base import Base

ROLE_ADMIN = "ROLE_ADMIN"
ROLE_USER = "ROLE_USER"
DEFAULT_ROLE_NAMES = (ROLE_ADMIN, ROLE_USER)

# Owned by User.roles. Role has no collection of users; membership is queried through this table.
users_roles = Table(
    "users_roles",
    Base.metadata,
    Column(
        "user_id",
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column(
        "role_id",
        Integer,
        ForeignKey("roles.id", ondelete="RESTRICT"),
        primary_key=True,
        index=True,
    ),
)


class Role(Base):
    """
    Named authorization grant. The name is used verbatim as the authority string.

    Seeded out of band (migration or create_user script); never deleted at runtime.
    """

    __tablename__ = "roles"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(64), nullable=False, unique=True, index=True)

    def __repr__(self) -> str:
        return f"<Role(id={self.id}, name={self.name})>"
