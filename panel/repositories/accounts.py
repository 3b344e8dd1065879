"""Account persistence over the users table, with username/email uniqueness checks."""

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from panel.core.exceptions import ConflictError, NotFoundError
from panel.models import Role, User


class AccountStore:
    """CRUD and lookups for accounts. Roles are loaded eagerly with every account."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def find_all(self) -> list[User]:
        return self.db.query(User).order_by(User.id).all()

    def find_by_id(self, user_id: int) -> User | None:
        return self.db.query(User).filter(User.id == user_id).first()

    def find_by_username(self, username: str) -> User | None:
        return self.db.query(User).filter(User.username == username).first()

    def find_by_email(self, email: str) -> User | None:
        return self.db.query(User).filter(User.email == email).first()

    def find_all_by_role(self, role_name: str) -> list[User]:
        """Accounts holding the named role, derived from users_roles rather than a back-reference."""
        return (
            self.db.query(User)
            .join(User.roles)
            .filter(Role.name == role_name)
            .order_by(User.id)
            .all()
        )

    def exists_by_username(self, username: str) -> bool:
        return self.db.query(User.id).filter(User.username == username).first() is not None

    def exists_by_email(self, email: str) -> bool:
        return self.db.query(User.id).filter(User.email == email).first() is not None

    def ensure_unique(
        self,
        username: str | None,
        email: str | None,
        exclude_id: int | None = None,
    ) -> None:
        """Raise ConflictError if another account (not exclude_id) already uses username or email."""
        if username:
            q = self.db.query(User.id).filter(User.username == username)
            if exclude_id is not None:
                q = q.filter(User.id != exclude_id)
            if q.first() is not None:
                raise ConflictError("Username already exists.", field="username")
        if email:
            q = self.db.query(User.id).filter(User.email == email)
            if exclude_id is not None:
                q = q.filter(User.id != exclude_id)
            if q.first() is not None:
                raise ConflictError("Email already exists.", field="email")

    def save(self, user: User) -> User:
        """Insert or update; the id is assigned on flush. Collisions raise ConflictError."""
        self.ensure_unique(user.username, user.email, exclude_id=user.id)
        self.db.add(user)
        try:
            self.db.flush()
        except IntegrityError as e:
            raise ConflictError("Username or email already exists.") from e
        return user

    def delete_by_id(self, user_id: int) -> None:
        """Detach every role association, then remove the row."""
        user = self.find_by_id(user_id)
        if user is None:
            raise NotFoundError(f"User with id {user_id} not found")
        user.roles.clear()
        self.db.flush()
        self.db.delete(user)
        self.db.flush()
