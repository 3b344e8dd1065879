"""Role lookups and seeding over the roles table."""

import logging
from collections.abc import Iterable

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from panel.core.exceptions import ConflictError
from panel.models import Role

logger = logging.getLogger(__name__)


class RoleStore:
    """Read-mostly access to roles. Unknown ids/names are dropped from bulk lookups."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def find_all(self) -> list[Role]:
        return self.db.query(Role).order_by(Role.id).all()

    def find_by_id(self, role_id: int) -> Role | None:
        return self.db.query(Role).filter(Role.id == role_id).first()

    def find_by_name(self, name: str) -> Role | None:
        return self.db.query(Role).filter(Role.name == name).first()

    def find_all_by_ids(self, ids: Iterable[int]) -> set[Role]:
        wanted = {i for i in ids if i is not None}
        if not wanted:
            return set()
        return set(self.db.query(Role).filter(Role.id.in_(wanted)).all())

    def find_all_by_names(self, names: Iterable[str]) -> set[Role]:
        wanted = {n.strip() for n in names if n and n.strip()}
        if not wanted:
            return set()
        return set(self.db.query(Role).filter(Role.name.in_(wanted)).all())

    def save(self, role: Role) -> Role:
        """Add or update a role; a duplicate name raises ConflictError."""
        q = self.db.query(Role.id).filter(Role.name == role.name)
        if role.id is not None:
            q = q.filter(Role.id != role.id)
        if q.first() is not None:
            raise ConflictError(f"Role '{role.name}' already exists.", field="name")
        self.db.add(role)
        try:
            self.db.flush()
        except IntegrityError as e:
            raise ConflictError(f"Role '{role.name}' already exists.", field="name") from e
        return role

    def ensure(self, name: str) -> Role:
        """Return the role with this name, creating it if missing (seeding)."""
        role = self.find_by_name(name)
        if role is not None:
            return role
        logger.info("Seeding role %s", name)
        return self.save(Role(name=name))
