"""Post-login routing: pick the landing page from the principal's authorities."""

from collections.abc import Iterable

from panel.models.role import ROLE_ADMIN, ROLE_USER

ADMIN_LANDING = "/admin"
USER_LANDING = "/user"
PUBLIC_LANDING = "/"


def route(
    authorities: Iterable[str],
    admin_landing: str = ADMIN_LANDING,
    user_landing: str = USER_LANDING,
    public_landing: str = PUBLIC_LANDING,
) -> str:
    """Admin wins over user; anything else lands on the public page. Does not check credentials."""
    granted = set(authorities)
    if ROLE_ADMIN in granted:
        return admin_landing
    if ROLE_USER in granted:
        return user_landing
    return public_landing
