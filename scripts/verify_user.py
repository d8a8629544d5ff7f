"""
Verification d'un profil (action d'administration) / Profile verification (admin action).

Usage:
    python -m scripts.verify_user someone@example.com
    python -m scripts.verify_user 1078412345 --revoke
"""

import argparse
import asyncio
import sys

from garage.database import async_session, init_db
from garage.errors import NotFoundError
from garage.services.auth_gate import verify_profile


async def run(identifier: str, verified: bool) -> int:
    await init_db()
    async with async_session() as session:
        try:
            profile = await verify_profile(session, identifier, verified=verified)
        except NotFoundError as exc:
            print(f"[verify] {exc.detail}")
            return 1
        await session.commit()
    state = "verified" if profile.verified else "pending"
    print(f"[verify] {profile.email} ({profile.external_id}) -> {state}")
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Flip the verified flag of a user profile")
    parser.add_argument("identifier", help="external id or email of the profile")
    parser.add_argument("--revoke", action="store_true", help="set verified back to false")
    args = parser.parse_args(argv)
    return asyncio.run(run(args.identifier, verified=not args.revoke))


if __name__ == "__main__":
    sys.exit(main())
