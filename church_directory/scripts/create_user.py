"""Create a Church Directory user.

Usage:
    python -m church_directory.scripts.create_user --username admin --password <password> --admin
"""

from __future__ import annotations

import argparse
import sys

from church_directory.db.session import SessionLocal
from church_directory.services.auth import create_user


def main() -> None:
    parser = argparse.ArgumentParser(description="Create a Church Directory user")
    parser.add_argument("--username", required=True, help="Username for the new user")
    parser.add_argument("--password", required=True, help="Password for the new user")
    parser.add_argument(
        "--admin", action="store_true", help="Allow the user to edit settings and clear caches"
    )
    args = parser.parse_args()

    db = SessionLocal()
    try:
        try:
            user = create_user(db, args.username, args.password, is_admin=args.admin)
        except ValueError as e:
            print(f"{e}.")
            sys.exit(1)
        print(f"User '{user.username}' created successfully (id={user.id}, role={user.role}).")
    finally:
        db.close()


if __name__ == "__main__":
    main()
