#!/usr/bin/env python3
"""
Create the first admin account.
Run this once after the tables exist (the API creates them on startup).

    python scripts/create_admin.py [username] [email] [password]

Values fall back to ADMIN_USERNAME / ADMIN_EMAIL / ADMIN_PASSWORD.
"""
import os
import sys
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from pydantic import ValidationError
from sqlalchemy import select

from maladireta.core.db import session_scope
from maladireta.models.orm import User
from maladireta.models.schemas import UserCreate
from maladireta.services import accounts
from maladireta.services.bootstrap_db import create_all


def create_admin(username: str, email: str, password: str) -> None:
    # Same rules as POST /api/admin/users
    data = UserCreate(
        username=username,
        email=email,
        password=password,
        role="admin",
        can_access_direct_mail=True,
        can_access_email_config=True,
    )
    create_all()
    with session_scope() as db:
        existing = db.scalars(
            select(User).where(
                (User.username == data.username)
                | (User.email == accounts.normalize_email(data.email))
            )
        ).first()
        if existing:
            print(f"⚠️  User '{existing.username}' already exists (role={existing.role})")
            return

        accounts.create_account_as_admin(db, **data.model_dump())
        print(f"✅ Created admin user (username: {username})")
        print("\n⚠️  IMPORTANT: Change this password after the first login!")


if __name__ == "__main__":
    args = sys.argv[1:]
    username = args[0] if len(args) > 0 else os.getenv("ADMIN_USERNAME", "admin")
    email = args[1] if len(args) > 1 else os.getenv("ADMIN_EMAIL", "admin@maladireta.local")
    password = args[2] if len(args) > 2 else os.getenv("ADMIN_PASSWORD")
    if not password:
        print("❌ Error: pass a password or set ADMIN_PASSWORD")
        sys.exit(1)
    try:
        create_admin(username, email, password)
    except ValidationError as e:
        print(f"❌ Error: invalid admin account\n{e}")
        sys.exit(1)
