#!/usr/bin/env python3
"""
Admin Password Setter
Stores a bcrypt hash of a new password for the ADMIN_EMAIL account,
creating the account if it does not exist yet.
"""
import asyncio
import getpass

from gallery_cms.config import settings
from gallery_cms.database import AsyncSessionLocal, close_db, create_tables
from gallery_cms.services.auth_service import AuthService


async def store_password(password: str) -> int:
    """
    Hash and store the password for the admin account.

    Returns:
        The admin user's id
    """
    await create_tables()
    try:
        async with AsyncSessionLocal() as db:
            user = await AuthService(db).set_password(settings.ADMIN_EMAIL, password)
            return user.id
    finally:
        await close_db()


def main():
    """Prompt for the password twice and store it."""
    print("=" * 60)
    print("Gallery CMS Admin Password")
    print("=" * 60)
    print()
    print(f"Setting the password for {settings.ADMIN_EMAIL}")
    print()

    # Get password securely (won't echo to screen)
    password = getpass.getpass("Enter admin password: ")

    if len(password) < 6:
        print("\n❌ Error: Password must be at least 6 characters")
        return

    if len(password.encode("utf-8")) > 72:
        print("\n❌ Error: Password must be at most 72 bytes")
        return

    # Confirm password
    password_confirm = getpass.getpass("Confirm password: ")

    if password != password_confirm:
        print("\n❌ Error: Passwords do not match")
        return

    print("\n⏳ Hashing and saving (this may take a moment)...")

    user_id = asyncio.run(store_password(password))

    print(f"\n✅ Password updated for user {user_id} ({settings.ADMIN_EMAIL})")
    print()


if __name__ == "__main__":
    main()
