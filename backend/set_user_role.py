"""Assign a role to a user - run from the backend directory.

Usage: python set_user_role.py user@email.com sad
"""
import os
import sys

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from sqlmodel import Session

from auth import ROLES, set_user_role
from db import create_db_and_tables, engine

if __name__ == "__main__":
    if len(sys.argv) != 3:
        print("Usage: python set_user_role.py <email> <role>")
        print(f"Roles: {', '.join(ROLES)}")
        sys.exit(1)

    email, role = sys.argv[1], sys.argv[2]
    create_db_and_tables()

    with Session(engine) as session:
        try:
            account = set_user_role(session, email, role)
        except ValueError as e:
            print(f"ERROR: {e}")
            sys.exit(1)

    print(f"SUCCESS: role {account.role!r} set for {account.email}")
    sys.exit(0)
