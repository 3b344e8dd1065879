"""Domain errors raised by the stores, the account directory and authentication."""

from dataclasses import dataclass


class PanelError(Exception):
    """Base class for errors surfaced by the account panel core."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


@dataclass(frozen=True)
class FieldViolation:
    """A single failed constraint on one input field."""

    field: str
    message: str


class ValidationError(PanelError):
    """One or more field-level violations, always reported together."""

    def __init__(self, violations: list[FieldViolation]) -> None:
        self.violations = list(violations)
        summary = "; ".join(f"{v.field}: {v.message}" for v in self.violations)
        super().__init__(f"Validation failed: {summary}")

    def as_dicts(self) -> list[dict[str, str]]:
        return [{"field": v.field, "message": v.message} for v in self.violations]


class ConflictError(PanelError):
    """Uniqueness violation on username, email or role name."""

    def __init__(self, message: str, field: str | None = None) -> None:
        self.field = field
        super().__init__(message)


class NotFoundError(PanelError):
    """Lookup by id, email or username found nothing."""


class InvalidInput(PanelError):
    """Argument rejected before any work was done (e.g. hashing an empty password)."""


class PrincipalNotFound(PanelError):
    """No account for the given login email. Never shown to the user as such."""


class InvalidCredentials(PanelError):
    """Generic authentication failure; does not say which part was wrong."""

    def __init__(self) -> None:
        super().__init__("Invalid email or password.")


class StoreError(PanelError):
    """The store is unreachable or failed in a way that is not a known constraint."""
