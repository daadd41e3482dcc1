"""
Database seeding script for admin accounts.

Admins are the only users allowed to list every sender's payments, and no
API endpoint grants the role. Run this once per admin after the database
is reachable:

    python -m zapshift.seed_users admin@zapshift.com
"""

import asyncio
import sys
from datetime import datetime, timezone

from zapshift.app.core.config import settings
from zapshift.app.db.mongo import USERS, DocumentStore
from zapshift.app.models.enums import UserRole


async def seed_admin(store: DocumentStore, email: str) -> str:
    """
    Make ``email`` an admin, creating the user if needed.

    Returns:
        "created", "promoted" or "unchanged"
    """
    existing = await store.find_one(USERS, {"email": email})
    if existing is None:
        await store.insert_one(USERS, {
            "email": email,
            "role": UserRole.ADMIN.value,
            "createdAt": datetime.now(timezone.utc),
        })
        return "created"
    if existing.get("role") == UserRole.ADMIN.value:
        return "unchanged"
    await store.update_one(USERS, {"email": email}, {"role": UserRole.ADMIN.value})
    return "promoted"


async def main(emails) -> None:
    store = DocumentStore.from_settings(settings)
    try:
        await store.ensure_indexes()
        print("🌱 Starting admin seeding...")
        for email in emails:
            outcome = await seed_admin(store, email)
            print(f"✅ {email}: {outcome}")
    finally:
        await store.close()


if __name__ == "__main__":
    if len(sys.argv) < 2:
        print("usage: python -m zapshift.seed_users EMAIL [EMAIL ...]")
        sys.exit(1)
    asyncio.run(main(sys.argv[1:]))
