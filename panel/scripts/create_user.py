"""
Create an account (e.g. the first admin). Seeds ROLE_ADMIN and ROLE_USER if they are missing.
Run from project root:
  python -m panel.scripts.create_user EMAIL USERNAME PASSWORD FIRST_NAME LAST_NAME AGE [--role NAME ...]
Example:
  python -m panel.scripts.create_user admin@corp.dev admin 's3cret-pass' Ada Admin 36 --role ROLE_ADMIN
"""
import argparse
import logging
import sys

from panel.core.database import SessionLocal, transaction
from panel.core.exceptions import ConflictError, ValidationError
from panel.core.security import PasswordHasher
from panel.models import DEFAULT_ROLE_NAMES, ROLE_USER
from panel.repositories import RoleStore
from panel.schemas.accounts import AccountDraft, RoleNames
from panel.services.directory import AccountDirectory

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)
logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Create a panel account (no registration UI).")
    parser.add_argument("email", help="Login email (unique)")
    parser.add_argument("username", help="Username (3-50 chars, unique)")
    parser.add_argument("password", help="Password (6-128 chars)")
    parser.add_argument("first_name")
    parser.add_argument("last_name")
    parser.add_argument("age", type=int)
    parser.add_argument(
        "--role",
        dest="roles",
        action="append",
        default=None,
        help=f"Role name; repeat for several (default: {ROLE_USER})",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    db = SessionLocal()
    try:
        with transaction(db):
            roles = RoleStore(db)
            for name in DEFAULT_ROLE_NAMES:
                roles.ensure(name)

        directory = AccountDirectory(db, PasswordHasher())
        draft = AccountDraft(
            username=args.username.strip(),
            email=args.email.strip(),
            password=args.password,
            first_name=args.first_name,
            last_name=args.last_name,
            age=args.age,
        )
        try:
            user = directory.create(draft, RoleNames(names=args.roles or [ROLE_USER]))
        except ValidationError as e:
            for v in e.violations:
                print(f"{v.field}: {v.message}", file=sys.stderr)
            return 1
        except ConflictError as e:
            print(e.message, file=sys.stderr)
            return 1
        print(
            f"Created user '{user.username}' <{user.email}> with roles "
            f"{', '.join(sorted(r.name for r in user.roles))}."
        )
        return 0
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
