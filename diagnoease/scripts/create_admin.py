import argparse
import asyncio

from diagnoease.config import get_settings
from diagnoease.constants import Role
from diagnoease.database import close_db, init_db
from diagnoease.models import User


async def promote(email: str, name: str | None = None) -> User:
    """Give `email` the admin role, registering the user first if needed."""
    user = await User.find_one(User.email == email)
    if user is None:
        user = User(email=email, name=name, role=Role.ADMIN)
        await user.insert()
        print(f"[OK] Created admin user '{email}' with id={user.id}")
        return user
    if user.role == Role.ADMIN:
        print(f"[SKIP] User '{email}' is already an admin (id={user.id})")
        return user
    user.role = Role.ADMIN
    await user.save()
    print(f"[OK] Promoted '{email}' to admin (id={user.id})")
    return user


async def main() -> None:
    """
    There is no API route that grants the admin role to yourself; the first
    admin is created here:

        python -m diagnoease.scripts.create_admin admin@example.com --name "Lab Admin"
    """
    parser = argparse.ArgumentParser(description="Create or promote an admin user")
    parser.add_argument("email")
    parser.add_argument("--name", default=None)
    args = parser.parse_args()

    settings = get_settings()
    print(f"Using MongoDB URI: {settings.MONGODB_URI}")

    await init_db()
    try:
        await promote(args.email, args.name)
    finally:
        close_db()
    print("Done.")


if __name__ == "__main__":
    asyncio.run(main())
