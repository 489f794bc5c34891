"""Operator commands: create tables and grant roles.

Usage:
    eventease-manage create-tables
    eventease-manage grant-role someone@example.org admin
"""
import argparse
import sys

from sqlalchemy import select

from eventease.core.logging_config import configure_logging
from eventease.database.db import Base, SessionLocal, engine
from eventease.models import registry  # noqa: F401
from eventease.models.users import Role, User
from eventease.services.accounts import grant_role


def create_tables(args) -> int:
    Base.metadata.create_all(bind=engine)
    print("Tables created.")
    return 0


def grant(args) -> int:
    db = SessionLocal()
    try:
        user = db.scalar(select(User).where(User.email == args.email.strip().lower()))
        if user is None:
            print(f"No account for {args.email}", file=sys.stderr)
            return 1
        grant_role(db, user_id=user.id, role=args.role)
        print(f"Granted {args.role} to {user.email}")
        return 0
    finally:
        db.close()


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(prog="eventease-manage")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("create-tables").set_defaults(func=create_tables)

    grant_parser = sub.add_parser("grant-role")
    grant_parser.add_argument("email")
    grant_parser.add_argument("role", choices=[r.value for r in Role])
    grant_parser.set_defaults(func=grant)

    args = parser.parse_args(argv)
    configure_logging()
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
