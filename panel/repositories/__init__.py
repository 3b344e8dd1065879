"""Stores over the relational schema (users, roles, users_roles)."""

from panel.repositories.accounts import AccountStore
from panel.repositories.roles import RoleStore

__all__ = ["AccountStore", "RoleStore"]
