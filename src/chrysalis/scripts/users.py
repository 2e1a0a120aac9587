"""Operator CLI for provisioning users and minting access tokens.

Usage:
    python -m chrysalis.scripts.users create --email a@example.org --username alice
    python -m chrysalis.scripts.users token --username alice
"""
from __future__ import annotations

import argparse
import sys

from chrysalis.core.errors import ChrysalisError
from chrysalis.core.security import create_access_token
from chrysalis.db.session import SessionLocal
from chrysalis.services.users import create_user, get_user_by_username


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Manage Chrysalis users")
    subparsers = parser.add_subparsers(dest="command", required=True)

    create = subparsers.add_parser("create", help="Create a user and print an access token")
    create.add_argument("--email", required=True)
    create.add_argument("--username", required=True)
    create.add_argument("--stage", default=None, help="Default stage for the user's submissions")

    token = subparsers.add_parser("token", help="Print an access token for an existing user")
    token.add_argument("--username", required=True)

    args = parser.parse_args(argv)

    db = SessionLocal()
    try:
        if args.command == "create":
            user = create_user(db, email=args.email, username=args.username, stage=args.stage)
            print(f"[users] created user {user.id} ({user.username})")
        else:
            user = get_user_by_username(db, args.username)
            if user is None:
                print(f"[users] ERROR: no user named {args.username!r}", file=sys.stderr)
                return 1
        print(create_access_token(user.id))
    except ChrysalisError as exc:
        print(f"[users] ERROR: {exc.kind}: {exc.message}", file=sys.stderr)
        return 1
    finally:
        db.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
