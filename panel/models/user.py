"""ORM model for panel accounts (credentials, profile and roles)."""

from sqlalchemy import CheckConstraint, Column, Integer, String
from sqlalchemy.orm import relationship

from panel.models.base import Base
from panel.models.role import Role, users_roles


class User(Base):
    """
    Account for session authentication and role-based access control.

    email is the login key; username is a separate unique display handle.
    roles is always loaded with the account so authorities never need a second round trip.
    """

    __tablename__ = "users"
    __table_args__ = (CheckConstraint("age >= 0", name="age_non_negative"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(50), nullable=False, unique=True, index=True)
    email = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    first_name = Column(String(255), nullable=False)
    last_name = Column(String(255), nullable=False)
    age = Column(Integer, nullable=False, default=0)

    roles = relationship(
        Role,
        secondary=users_roles,
        collection_class=set,
        lazy="selectin",
    )

    def __repr__(self) -> str:
        # No password hash in reprs; they end up in logs.
        return f"<User(id={self.id}, username={self.username}, email={self.email})>"
