"""Path-based access policy evaluated before any handler runs.

Rules are checked in order and the first matching rule decides:

1. the admin area requires ROLE_ADMIN
2. the user area requires ROLE_USER or ROLE_ADMIN
3. public paths (landing, login, logout, health, docs) require nothing
4. everything else requires an authenticated principal
"""

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from panel.models.role import ROLE_ADMIN, ROLE_USER

if TYPE_CHECKING:
    from panel.core.config import Settings


class AccessDecision(str, Enum):
    ALLOW = "allow"
    UNAUTHENTICATED = "unauthenticated"
    FORBIDDEN = "forbidden"


@dataclass(frozen=True)
class AccessRule:
    """
    patterns: exact paths, or "<prefix>/**" for a prefix and everything below it.
    authorities: any one of these is enough; None means no specific authority.
    permit_all: when True the rule allows anonymous requests.
    """

    patterns: tuple[str, ...]
    authorities: frozenset[str] | None = None
    permit_all: bool = False

    def matches(self, path: str) -> bool:
        return any(_path_matches(p, path) for p in self.patterns)


def _normalize(path: str) -> str:
    if not path.startswith("/"):
        path = "/" + path
    return path.rstrip("/") or "/"


def _path_matches(pattern: str, path: str) -> bool:
    path = _normalize(path)
    if pattern.endswith("/**"):
        prefix = _normalize(pattern[:-3])
        if prefix == "/":
            return True
        return path == prefix or path.startswith(prefix + "/")
    return path == _normalize(pattern)


class AccessPolicy:
    """Ordered rule list; first match wins, unmatched paths need authentication."""

    def __init__(self, rules: Iterable[AccessRule]) -> None:
        self.rules = tuple(rules)

    @classmethod
    def default(
        cls,
        admin_area: str = "/admin",
        user_area: str = "/user",
        public_paths: Iterable[str] = ("/", "/login"),
    ) -> "AccessPolicy":
        return cls(
            [
                AccessRule((f"{admin_area}/**",), authorities=frozenset({ROLE_ADMIN})),
                AccessRule(
                    (f"{user_area}/**",),
                    authorities=frozenset({ROLE_USER, ROLE_ADMIN}),
                ),
                AccessRule(tuple(public_paths), permit_all=True),
                AccessRule(("/**",)),
            ]
        )

    @classmethod
    def from_settings(cls, settings: "Settings") -> "AccessPolicy":
        return cls.default(
            admin_area=settings.ADMIN_AREA,
            user_area=settings.USER_AREA,
            public_paths=settings.PUBLIC_PATHS,
        )

    def evaluate(self, path: str, authorities: Iterable[str] | None) -> AccessDecision:
        """
        Decide access for path. authorities=None means an anonymous request;
        an empty collection is an authenticated principal with no roles.
        """
        for rule in self.rules:
            if not rule.matches(path):
                continue
            if rule.permit_all:
                return AccessDecision.ALLOW
            if authorities is None:
                return AccessDecision.UNAUTHENTICATED
            if rule.authorities is not None and not (rule.authorities & set(authorities)):
                return AccessDecision.FORBIDDEN
            return AccessDecision.ALLOW
        # No rule matched; the default policy always ends with a catch-all.
        return AccessDecision.UNAUTHENTICATED if authorities is None else AccessDecision.ALLOW
