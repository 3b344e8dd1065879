"""Authentication bridge: load a principal by email and verify its password.

The login key is the email address. Every failure (unknown email, wrong password) surfaces as
the same InvalidCredentials error so responses never reveal which emails have accounts.
"""

import logging

from panel.core.exceptions import InvalidCredentials, PrincipalNotFound
from panel.core.security import PasswordHasher
from panel.schemas.auth import Principal, PrincipalCredentials
from panel.services.directory import AccountDirectory

logger = logging.getLogger(__name__)


class AuthenticationBridge:
    """Adapts AccountDirectory lookups to what the login flow needs."""

    def __init__(self, directory: AccountDirectory, hasher: PasswordHasher) -> None:
        self.directory = directory
        self.hasher = hasher

    def load_principal(self, email: str) -> PrincipalCredentials:
        """Return the stored hash and authorities for email. Raises PrincipalNotFound on a miss."""
        user = self.directory.find_by_email(email) if email else None
        if user is None:
            raise PrincipalNotFound("User not found")
        return PrincipalCredentials(
            id=user.id,
            email=user.email,
            password_hash=user.password_hash,
            authorities=self.directory.authorities_for(user),
        )

    def authenticate(self, email: str, password: str) -> Principal:
        """Verify credentials; raise InvalidCredentials for any failure."""
        try:
            credentials = self.load_principal(email)
        except PrincipalNotFound as e:
            logger.info("Login failed: unknown principal")
            raise InvalidCredentials() from e
        if not self.hasher.verify(password, credentials.password_hash):
            logger.info("Login failed: bad password", extra={"user_id": credentials.id})
            raise InvalidCredentials()
        logger.info("Login succeeded", extra={"user_id": credentials.id})
        return Principal(
            id=credentials.id,
            email=credentials.email,
            authorities=credentials.authorities,
        )
