"""Script to create an API key for a user."""

import argparse
import asyncio

from speechpro.auth.security import create_api_key
from speechpro.db.session import async_session_maker, init_db


async def main(user_id: str, name: str, scopes: list[str], expires_in_days: int | None):
    """Create an API key bound to one user."""
    print("Initializing database...")
    await init_db()

    print(f"Creating API key for {user_id}...")
    async with async_session_maker() as db:
        api_key, full_key = await create_api_key(
            db,
            name=name,
            user_id=user_id,
            scopes=scopes,
            expires_in_days=expires_in_days,
        )
        await db.commit()

        print("\n" + "=" * 60)
        print("API KEY CREATED SUCCESSFULLY")
        print("=" * 60)
        print(f"\nAPI Key: {full_key}")
        print(f"Key ID:  {api_key.id}")
        print(f"Prefix:  {api_key.key_prefix}")
        print(f"User:    {api_key.user_id}")
        print(f"Scopes:  {', '.join(api_key.scopes)}")
        print("\nSAVE THIS KEY NOW - IT WILL NOT BE SHOWN AGAIN!")
        print("=" * 60)


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("user_id", help="User the key acts for")
    parser.add_argument("--name", default="CLI Key")
    parser.add_argument(
        "--scope",
        dest="scopes",
        action="append",
        choices=["read", "write"],
        help="Repeat for several scopes (default: read and write)",
    )
    parser.add_argument("--expires-in-days", type=int, default=None)
    args = parser.parse_args()

    asyncio.run(main(args.user_id, args.name, args.scopes or ["read", "write"], args.expires_in_days))
