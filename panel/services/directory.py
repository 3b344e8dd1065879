"""Account directory: validated, role-aware create/update/delete of panel accounts.

Every mutation runs inside one transaction so the uniqueness reads, the password hash and the
write are committed together. Roles are resolved from a typed selector (by name or by id) and
an account may never end up with an empty role set.
"""

import logging

from email_validator import EmailNotValidError, validate_email
from sqlalchemy.orm import Session

from panel.core.database import transaction
from panel.core.exceptions import FieldViolation, NotFoundError, ValidationError
from panel.core.security import PasswordHasher
from panel.models import Role, User
from panel.repositories import AccountStore, RoleStore
from panel.schemas.accounts import AccountDraft, AccountPatch, RoleIds, RoleNames

logger = logging.getLogger(__name__)

USERNAME_MIN_LEN = 3
USERNAME_MAX_LEN = 50
EMAIL_MAX_LEN = 255
PASSWORD_MIN_LEN = 6
PASSWORD_MAX_LEN = 128
NAME_MAX_LEN = 255

NO_ROLES_SELECTED = "no roles selected"


def _check_username(value: str, out: list[FieldViolation]) -> None:
    if not value or not value.strip():
        out.append(FieldViolation("username", "Username is required"))
    elif not (USERNAME_MIN_LEN <= len(value) <= USERNAME_MAX_LEN):
        out.append(
            FieldViolation(
                "username",
                f"Username must be between {USERNAME_MIN_LEN} and {USERNAME_MAX_LEN} characters",
            )
        )


def _check_email(value: str, out: list[FieldViolation]) -> None:
    if not value or not value.strip():
        out.append(FieldViolation("email", "Email is required"))
        return
    if len(value) > EMAIL_MAX_LEN:
        out.append(FieldViolation("email", "Email is too long"))
        return
    try:
        validate_email(value, check_deliverability=False)
    except EmailNotValidError:
        out.append(FieldViolation("email", "Invalid email format"))


def _check_password(value: str, out: list[FieldViolation]) -> None:
    if not value:
        out.append(FieldViolation("password", "Password is required"))
    elif not (PASSWORD_MIN_LEN <= len(value) <= PASSWORD_MAX_LEN):
        out.append(
            FieldViolation(
                "password",
                f"Password must be between {PASSWORD_MIN_LEN} and {PASSWORD_MAX_LEN} characters",
            )
        )


def _check_name(field: str, label: str, value: str, out: list[FieldViolation]) -> None:
    if not value or not value.strip():
        out.append(FieldViolation(field, f"{label} is required"))
    elif len(value) > NAME_MAX_LEN:
        out.append(FieldViolation(field, f"{label} is too long"))


def _check_age(value: int, out: list[FieldViolation]) -> None:
    if value < 0:
        out.append(FieldViolation("age", "Age cannot be negative"))


def validate_draft(draft: AccountDraft) -> list[FieldViolation]:
    """Return every violated constraint of a new account draft (empty list when valid)."""
    violations: list[FieldViolation] = []
    _check_username(draft.username, violations)
    _check_email(draft.email, violations)
    _check_password(draft.password, violations)
    _check_name("first_name", "First name", draft.first_name, violations)
    _check_name("last_name", "Last name", draft.last_name, violations)
    _check_age(draft.age, violations)
    return violations


def validate_patch(patch: AccountPatch) -> list[FieldViolation]:
    """Validate only the fields the patch supplies. An empty password means 'keep the current one'."""
    violations: list[FieldViolation] = []
    if patch.username is not None:
        _check_username(patch.username, violations)
    if patch.email is not None:
        _check_email(patch.email, violations)
    if patch.password:
        _check_password(patch.password, violations)
    if patch.first_name is not None:
        _check_name("first_name", "First name", patch.first_name, violations)
    if patch.last_name is not None:
        _check_name("last_name", "Last name", patch.last_name, violations)
    if patch.age is not None:
        _check_age(patch.age, violations)
    return violations


def authorities_for(user: User) -> frozenset[str]:
    """Role names are the authorities, one to one, with no hierarchy."""
    return frozenset(role.name for role in user.roles)


class AccountDirectory:
    """Owns the account lifecycle invariants on top of AccountStore, RoleStore and PasswordHasher."""

    def __init__(
        self,
        db: Session,
        hasher: PasswordHasher,
        accounts: AccountStore | None = None,
        roles: RoleStore | None = None,
    ) -> None:
        self.db = db
        self.hasher = hasher
        self.accounts = accounts if accounts is not None else AccountStore(db)
        self.roles = roles if roles is not None else RoleStore(db)

    def find_all(self) -> list[User]:
        return self.accounts.find_all()

    def find_by_id(self, user_id: int) -> User:
        user = self.accounts.find_by_id(user_id)
        if user is None:
            raise NotFoundError(f"User with id {user_id} not found")
        return user

    def find_by_email(self, email: str) -> User | None:
        return self.accounts.find_by_email(email)

    def find_by_username(self, username: str) -> User | None:
        return self.accounts.find_by_username(username)

    def find_all_by_role(self, role_name: str) -> list[User]:
        return self.accounts.find_all_by_role(role_name)

    def authorities_for(self, user: User) -> frozenset[str]:
        return authorities_for(user)

    def resolve_roles(self, selector: RoleNames | RoleIds | None) -> set[Role]:
        """Turn a selector into Role rows; raise ValidationError when nothing valid is selected."""
        if selector is None or selector.is_empty():
            raise ValidationError([FieldViolation("roles", NO_ROLES_SELECTED)])
        if isinstance(selector, RoleIds):
            roles = self.roles.find_all_by_ids(selector.ids)
        else:
            roles = self.roles.find_all_by_names(selector.names)
        if not roles:
            raise ValidationError([FieldViolation("roles", NO_ROLES_SELECTED)])
        return roles

    def create(self, draft: AccountDraft, selector: RoleNames | RoleIds | None) -> User:
        """Validate, resolve roles, check uniqueness, hash and persist a new account."""
        logger.info("Attempting to create user", extra={"username": draft.username})
        violations = validate_draft(draft)
        if selector is None or selector.is_empty():
            violations.append(FieldViolation("roles", NO_ROLES_SELECTED))
        if violations:
            logger.info("User creation rejected: %s invalid field(s)", len(violations))
            raise ValidationError(violations)

        with transaction(self.db):
            roles = self.resolve_roles(selector)
            self.accounts.ensure_unique(draft.username, draft.email)
            user = User(
                username=draft.username,
                email=draft.email,
                password_hash=self.hasher.hash(draft.password),
                first_name=draft.first_name,
                last_name=draft.last_name,
                age=draft.age,
            )
            user.roles = set(roles)
            self.accounts.save(user)
            logger.info(
                "Saving user with roles: %s",
                sorted(r.name for r in roles),
            )
        return user

    def update(
        self,
        user_id: int,
        patch: AccountPatch,
        selector: RoleNames | RoleIds | None = None,
    ) -> User:
        """
        Apply the supplied patch fields in place and persist.

        A non-empty password is re-hashed; an empty or missing one keeps the stored hash.
        selector=None keeps the current roles; a supplied selector must resolve to at least one role.
        """
        logger.debug("Starting user update for ID: %s", user_id)
        with transaction(self.db):
            user = self.find_by_id(user_id)
            violations = validate_patch(patch)
            if selector is not None and selector.is_empty():
                violations.append(FieldViolation("roles", NO_ROLES_SELECTED))
            if violations:
                logger.info("User update rejected: %s invalid field(s)", len(violations))
                raise ValidationError(violations)
            if selector is not None:
                user.roles = set(self.resolve_roles(selector))
            if patch.username is not None:
                user.username = patch.username
            if patch.email is not None:
                user.email = patch.email
            if patch.first_name is not None:
                user.first_name = patch.first_name
            if patch.last_name is not None:
                user.last_name = patch.last_name
            if patch.age is not None:
                user.age = patch.age
            if patch.password:
                user.password_hash = self.hasher.hash(patch.password)
            self.accounts.save(user)
        logger.info("User updated successfully: %s", user_id)
        return user

    def delete(self, user_id: int) -> None:
        """Remove the account and its role associations."""
        with transaction(self.db):
            self.accounts.delete_by_id(user_id)
        logger.info("User deleted: %s", user_id)
