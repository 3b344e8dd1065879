"""Tests for panel.services.directory against an in-memory SQLite store."""

import unittest
from unittest.mock import MagicMock

from sqlalchemy import create_engine
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from panel.core.database import transaction
from panel.core.exceptions import ConflictError, NotFoundError, StoreError, ValidationError
from panel.core.security import PasswordHasher
from panel.models import Base, Role, User
from panel.repositories import RoleStore
from panel.schemas.accounts import AccountDraft, AccountPatch, RoleIds, RoleNames
from panel.services.directory import AccountDirectory, authorities_for


def _sqlite_session():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)()


def _draft(**kwargs: object) -> AccountDraft:
    """Build a valid AccountDraft for tests."""
    defaults = {
        "username": "alice",
        "email": "alice@x.com",
        "password": "secret1",
        "first_name": "Alice",
        "last_name": "Liddell",
        "age": 30,
    }
    defaults.update(kwargs)
    return AccountDraft(**defaults)


class DirectoryTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.db = _sqlite_session()
        with transaction(self.db):
            roles = RoleStore(self.db)
            self.admin_role_id = roles.ensure("ROLE_ADMIN").id
            self.user_role_id = roles.ensure("ROLE_USER").id
        self.hasher = PasswordHasher(rounds=4)
        self.directory = AccountDirectory(self.db, self.hasher)

    def tearDown(self) -> None:
        self.db.close()

    def _count_users(self) -> int:
        return self.db.query(User).count()


class TestCreate(DirectoryTestCase):
    """create validates everything, requires roles, enforces uniqueness and hashes the password."""

    def test_create_persists_hashed_password(self) -> None:
        user = self.directory.create(_draft(), RoleNames(names=["ROLE_USER"]))
        self.assertIsNotNone(user.id)
        stored = self.directory.find_by_id(user.id)
        self.assertNotEqual(stored.password_hash, "secret1")
        self.assertTrue(self.hasher.verify("secret1", stored.password_hash))
        self.assertEqual({r.name for r in stored.roles}, {"ROLE_USER"})

    def test_create_with_role_ids(self) -> None:
        user = self.directory.create(
            _draft(), RoleIds(ids=[self.admin_role_id, self.user_role_id])
        )
        self.assertEqual(authorities_for(user), frozenset({"ROLE_ADMIN", "ROLE_USER"}))

    def test_unknown_role_names_are_ignored_when_one_is_valid(self) -> None:
        user = self.directory.create(_draft(), RoleNames(names=["ROLE_NOPE", "ROLE_USER"]))
        self.assertEqual(authorities_for(user), frozenset({"ROLE_USER"}))

    def test_empty_selector_rejected_and_nothing_persisted(self) -> None:
        for selector in (None, RoleNames(names=[]), RoleIds(ids=[]), RoleNames(names=["  "])):
            with self.assertRaises(ValidationError) as ctx:
                self.directory.create(_draft(), selector)
            self.assertIn("roles", [v.field for v in ctx.exception.violations])
        self.assertEqual(self._count_users(), 0)

    def test_selector_resolving_to_nothing_rejected(self) -> None:
        with self.assertRaises(ValidationError) as ctx:
            self.directory.create(_draft(), RoleIds(ids=[999]))
        self.assertEqual(ctx.exception.violations[0].message, "no roles selected")
        self.assertEqual(self._count_users(), 0)

    def test_all_violations_reported_together(self) -> None:
        draft = AccountDraft(username="al", email="not-an-email", password="", age=-1)
        with self.assertRaises(ValidationError) as ctx:
            self.directory.create(draft, RoleNames(names=[]))
        fields = {v.field for v in ctx.exception.violations}
        self.assertEqual(
            fields,
            {"username", "email", "password", "first_name", "last_name", "age", "roles"},
        )

    def test_password_too_short(self) -> None:
        with self.assertRaises(ValidationError) as ctx:
            self.directory.create(_draft(password="abc"), RoleNames(names=["ROLE_USER"]))
        self.assertEqual([v.field for v in ctx.exception.violations], ["password"])

    def test_duplicate_email_conflicts(self) -> None:
        self.directory.create(_draft(), RoleNames(names=["ROLE_USER"]))
        with self.assertRaises(ConflictError) as ctx:
            self.directory.create(_draft(username="alice2"), RoleNames(names=["ROLE_USER"]))
        self.assertEqual(ctx.exception.field, "email")
        self.assertEqual(self._count_users(), 1)

    def test_duplicate_username_conflicts(self) -> None:
        self.directory.create(_draft(), RoleNames(names=["ROLE_USER"]))
        with self.assertRaises(ConflictError) as ctx:
            self.directory.create(_draft(email="other@x.com"), RoleNames(names=["ROLE_USER"]))
        self.assertEqual(ctx.exception.field, "username")
        self.assertEqual(self._count_users(), 1)


class TestUpdate(DirectoryTestCase):
    """update applies supplied fields, re-hashes only a new password and keeps roles when no selector."""

    def setUp(self) -> None:
        super().setUp()
        self.user_id = self.directory.create(_draft(), RoleNames(names=["ROLE_USER"])).id

    def test_empty_password_keeps_hash(self) -> None:
        before = self.directory.find_by_id(self.user_id).password_hash
        self.directory.update(self.user_id, AccountPatch(password=""))
        after = self.directory.find_by_id(self.user_id).password_hash
        self.assertEqual(before, after)

    def test_missing_password_keeps_hash(self) -> None:
        before = self.directory.find_by_id(self.user_id).password_hash
        self.directory.update(self.user_id, AccountPatch(first_name="Alicia"))
        user = self.directory.find_by_id(self.user_id)
        self.assertEqual(user.password_hash, before)
        self.assertEqual(user.first_name, "Alicia")
        self.assertEqual(user.last_name, "Liddell")

    def test_new_password_rehashed(self) -> None:
        before = self.directory.find_by_id(self.user_id).password_hash
        self.directory.update(self.user_id, AccountPatch(password="newpass1"))
        after = self.directory.find_by_id(self.user_id).password_hash
        self.assertNotEqual(before, after)
        self.assertTrue(self.hasher.verify("newpass1", after))
        self.assertFalse(self.hasher.verify("secret1", after))

    def test_no_selector_keeps_roles(self) -> None:
        self.directory.update(self.user_id, AccountPatch(age=31))
        user = self.directory.find_by_id(self.user_id)
        self.assertEqual(authorities_for(user), frozenset({"ROLE_USER"}))
        self.assertEqual(user.age, 31)

    def test_selector_replaces_roles(self) -> None:
        self.directory.update(self.user_id, AccountPatch(), RoleIds(ids=[self.admin_role_id]))
        user = self.directory.find_by_id(self.user_id)
        self.assertEqual(authorities_for(user), frozenset({"ROLE_ADMIN"}))
        self.assertEqual([u.id for u in self.directory.find_all_by_role("ROLE_USER")], [])
        self.assertEqual(
            [u.id for u in self.directory.find_all_by_role("ROLE_ADMIN")], [self.user_id]
        )

    def test_empty_selector_rejected_and_roles_unchanged(self) -> None:
        with self.assertRaises(ValidationError):
            self.directory.update(self.user_id, AccountPatch(), RoleNames(names=[]))
        with self.assertRaises(ValidationError):
            self.directory.update(self.user_id, AccountPatch(age=50), RoleNames(names=["ROLE_NOPE"]))
        user = self.directory.find_by_id(self.user_id)
        self.assertEqual(authorities_for(user), frozenset({"ROLE_USER"}))
        self.assertEqual(user.age, 30)

    def test_explicit_empty_username_rejected(self) -> None:
        with self.assertRaises(ValidationError) as ctx:
            self.directory.update(self.user_id, AccountPatch(username="", email="bad"))
        self.assertEqual({v.field for v in ctx.exception.violations}, {"username", "email"})

    def test_missing_account(self) -> None:
        with self.assertRaises(NotFoundError):
            self.directory.update(999, AccountPatch(age=3))

    def test_missing_account_wins_over_invalid_patch(self) -> None:
        with self.assertRaises(NotFoundError):
            self.directory.update(999, AccountPatch(username="x"))
        with self.assertRaises(NotFoundError):
            self.directory.update(999, AccountPatch(), RoleNames(names=[]))

    def test_collision_with_other_account(self) -> None:
        self.directory.create(
            _draft(username="bob", email="bob@x.com"), RoleNames(names=["ROLE_USER"])
        )
        with self.assertRaises(ConflictError):
            self.directory.update(self.user_id, AccountPatch(email="bob@x.com"))
        self.assertEqual(self.directory.find_by_id(self.user_id).email, "alice@x.com")

    def test_keeping_own_username_and_email_is_not_a_conflict(self) -> None:
        user = self.directory.update(
            self.user_id, AccountPatch(username="alice", email="alice@x.com", age=40)
        )
        self.assertEqual(user.age, 40)


class TestDelete(DirectoryTestCase):
    """delete removes the account and its role associations."""

    def test_delete_detaches_roles(self) -> None:
        user_id = self.directory.create(_draft(), RoleNames(names=["ROLE_USER", "ROLE_ADMIN"])).id
        self.directory.delete(user_id)
        with self.assertRaises(NotFoundError):
            self.directory.find_by_id(user_id)
        self.assertEqual(self.directory.find_all_by_role("ROLE_USER"), [])
        self.assertEqual(self.directory.find_all_by_role("ROLE_ADMIN"), [])
        self.assertEqual(len(RoleStore(self.db).find_all()), 2)

    def test_delete_missing(self) -> None:
        with self.assertRaises(NotFoundError):
            self.directory.delete(42)


class TestAuthoritiesFor(unittest.TestCase):
    """Role names map 1:1 to authorities; result is a duplicate-free set."""

    def test_duplicates_collapse(self) -> None:
        user = MagicMock()
        user.roles = [Role(name="ROLE_ADMIN"), Role(name="ROLE_ADMIN"), Role(name="ROLE_USER")]
        self.assertEqual(authorities_for(user), frozenset({"ROLE_ADMIN", "ROLE_USER"}))

    def test_order_independent(self) -> None:
        a, b = MagicMock(), MagicMock()
        a.roles = [Role(name="ROLE_USER"), Role(name="ROLE_ADMIN")]
        b.roles = [Role(name="ROLE_ADMIN"), Role(name="ROLE_USER")]
        self.assertEqual(authorities_for(a), authorities_for(b))


class TestTransaction(unittest.TestCase):
    """transaction() commits on success and translates store failures."""

    def test_integrity_error_becomes_conflict(self) -> None:
        db = _sqlite_session()
        try:
            with transaction(db):
                db.add(
                    User(username="u1", email="same@x.com", password_hash="h",
                         first_name="A", last_name="B", age=1)
                )
            with self.assertRaises(ConflictError):
                with transaction(db):
                    db.add(
                        User(username="u2", email="same@x.com", password_hash="h",
                             first_name="A", last_name="B", age=1)
                    )
            self.assertEqual(db.query(User).count(), 1)
        finally:
            db.close()

    def test_operational_error_becomes_store_error(self) -> None:
        session = MagicMock()
        session.commit.side_effect = OperationalError("COMMIT", {}, Exception("connection lost"))
        with self.assertRaises(StoreError):
            with transaction(session):
                pass
        session.rollback.assert_called_once()

    def test_domain_error_rolls_back_and_propagates(self) -> None:
        session = MagicMock()
        with self.assertRaises(NotFoundError):
            with transaction(session):
                raise NotFoundError("missing")
        session.rollback.assert_called_once()
        session.commit.assert_not_called()


if __name__ == "__main__":
    unittest.main()
