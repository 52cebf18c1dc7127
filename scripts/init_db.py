# scripts/init_db.py
"""
Script to initialize database tables. Run from project root:
    python scripts/init_db.py
"""
import asyncio

import matchup.infrastructure.models  # noqa: F401  registers tables on Base
from matchup.infrastructure.db.session import Base, engine


async def init():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    await engine.dispose()
    print("DB initialized")

if __name__ == "__main__":
    asyncio.run(init())
