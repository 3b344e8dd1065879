"""Account directory, authentication bridge, post-login routing and access policy."""

from panel.services.access_policy import AccessDecision, AccessPolicy, AccessRule
from panel.services.authentication import AuthenticationBridge
from panel.services.directory import AccountDirectory, authorities_for
from panel.services.routing import route

__all__ = [
    "AccessDecision",
    "AccessPolicy",
    "AccessRule",
    "AccountDirectory",
    "AuthenticationBridge",
    "authorities_for",
    "route",
]
