"""Script to promote an existing account to admin.

Public registration never creates admins, so the first one is granted here.

Usage:
    python scripts/create_admin.py <email>
"""

import asyncio
import sys

from app.core.exceptions import AppException
from app.database import AsyncSessionLocal, engine
from app.services.admin_service import AdminService
from app.services.user_service import UserService


async def create_admin(email: str) -> None:
    """Promote the account registered under ``email`` with default permissions."""
    try:
        async with AsyncSessionLocal() as session:
            user = await UserService.get_user_by_email(session, email)
            if not user:
                print(f"✗ No account registered for {email}", file=sys.stderr)
                sys.exit(1)

            await AdminService.create_admin(session, user["id"])
        print(f"✓ {email} is now an admin")
    except AppException as e:
        print(f"✗ Promotion failed: {e.message}", file=sys.stderr)
        sys.exit(1)
    finally:
        await engine.dispose()


if __name__ == "__main__":
    if len(sys.argv) != 2:
        print(__doc__)
        sys.exit(2)

    asyncio.run(create_admin(sys.argv[1]))
