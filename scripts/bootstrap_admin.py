"""Promote a registered account to league administrator.

Usage:
    python scripts/bootstrap_admin.py EMAIL

The account must already exist (sign up through /auth/signup first).
Uses DATABASE_URL, defaulting to the application database.
"""

from __future__ import annotations

import asyncio
import sys

from fableague.config import Settings
from fableague.core.errors import NotFoundError
from fableague.core.lifecycle import bootstrap_admin
from fableague.db.engine import create_engine, init_schema
from fableague.db.store import LeagueStore


async def promote(email: str) -> int:
    settings = Settings()
    engine = create_engine(settings.database_url)
    await init_schema(engine)
    try:
        account = await bootstrap_admin(LeagueStore(engine), email)
    except NotFoundError as e:
        print(e)
        return 1
    finally:
        await engine.dispose()
    print(f"{account.email} ({account.id}) is now {account.role.value}")
    return 0


def main():
    if len(sys.argv) != 2:
        print(__doc__)
        sys.exit(1)
    sys.exit(asyncio.run(promote(sys.argv[1])))


if __name__ == "__main__":
    main()
