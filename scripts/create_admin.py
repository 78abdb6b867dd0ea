# scripts/create_admin.py
"""Provision an admin account; self-registration never grants the admin role."""
import argparse
import getpass
import os
import sys

# make the bloodlink package importable when run from a checkout
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from bloodlink import database, models, users
from bloodlink.errors import DuplicateIdentity, ValidationFailure


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Create a BloodLink admin account")
    parser.add_argument("--email", required=True)
    parser.add_argument("--name", required=True)
    args = parser.parse_args(argv)

    # never taken from argv, where it would land in shell history and ps output
    password = os.getenv("BLOODLINK_ADMIN_PASSWORD") or getpass.getpass("Password: ")

    models.Base.metadata.create_all(bind=database.engine)
    db = database.SessionLocal()
    try:
        user = users.create_admin(db, {"name": args.name, "email": args.email, "password": password})
    except DuplicateIdentity:
        print(f"[SKIP] {args.email} is already registered")
        return 1
    except ValidationFailure as exc:
        for d in exc.details:
            print(f"[ERR] {d['field']}: {d['message']}")
        return 2
    finally:
        db.close()

    print(f"[OK] Created admin {user.id} <{user.email}>")
    return 0


if __name__ == "__main__":
    sys.exit(main())
